from typing import Dict, List, Optional

from pydantic import BaseModel

class PlayerSummary(BaseModel):
    id: int
    display_name: str
    skill_level: Optional[str] = None
    avatar: Optional[str] = None

class PlayerStat(BaseModel):
    player: PlayerSummary
    total_matches: int = 0
    wins: int = 0
    losses: int = 0
    win_rate: int = 0
    singles_matches: int = 0
    singles_wins: int = 0
    doubles_matches: int = 0
    doubles_wins: int = 0
    sets_won: int = 0
    sets_lost: int = 0
    points_scored: int = 0
    points_conceded: int = 0

class HeadToHeadRecord(BaseModel):
    wins: int = 0
    losses: int = 0

class MonthlyTrend(BaseModel):
    month: str
    matches: int = 0
    singles: int = 0
    doubles: int = 0

class TeamStats(BaseModel):
    player_stats: List[PlayerStat]
    h2h: Dict[int, Dict[int, HeadToHeadRecord]]
    monthly_trend: List[MonthlyTrend]
    total_matches: int
    total_singles: int
    total_doubles: int
