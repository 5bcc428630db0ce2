import calendar
import datetime
import math
from typing import Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from app.models import match as match_model
from app.models import player as player_model
from app.models.enums import MatchType, MatchStatus
from app.schemas import stats_schemas
from app.services import team_service

TREND_MONTHS = 6

def _months_before(moment: datetime.datetime, months: int) -> datetime.datetime:
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)

def _win_rate(wins: int, total: int) -> int:
    if total == 0:
        return 0
    # Half rounds up
    return int(math.floor(100 * wins / total + 0.5))

def _side_of(match, player_id) -> Optional[int]:
    for assignment in match.players:
        if assignment.player_id == player_id:
            return assignment.side
    return None

def _player_stat(player, matches: Sequence) -> stats_schemas.PlayerStat:
    stat = stats_schemas.PlayerStat(
        player=stats_schemas.PlayerSummary(
            id=player.id,
            display_name=player.display_name,
            skill_level=player.skill_level,
            avatar=player.avatar,
        )
    )

    for match in matches:
        side = _side_of(match, player.id)
        if side is None:
            continue

        stat.total_matches += 1
        won = match.winning_side == side
        if won:
            stat.wins += 1
        elif match.winning_side is not None:
            stat.losses += 1

        if match.type == MatchType.SINGLES.value:
            stat.singles_matches += 1
            stat.singles_wins += int(won)
        else:
            stat.doubles_matches += 1
            stat.doubles_wins += int(won)

        for match_set in match.sets:
            if not match_set.is_complete:
                continue
            if match_set.winning_side == side:
                stat.sets_won += 1
            else:
                stat.sets_lost += 1
            if side == 1:
                stat.points_scored += match_set.side1_score
                stat.points_conceded += match_set.side2_score
            else:
                stat.points_scored += match_set.side2_score
                stat.points_conceded += match_set.side1_score

    stat.win_rate = _win_rate(stat.wins, stat.total_matches)
    return stat

def _head_to_head(players: Sequence, matches: Sequence) -> Dict[int, Dict[int, stats_schemas.HeadToHeadRecord]]:
    h2h = {
        p.id: {q.id: stats_schemas.HeadToHeadRecord() for q in players if q.id != p.id}
        for p in players
    }

    for match in matches:
        if match.type != MatchType.SINGLES.value or not match.winning_side:
            continue
        side1 = next((a.player_id for a in match.players if a.side == 1), None)
        side2 = next((a.player_id for a in match.players if a.side == 2), None)
        if side1 is None or side2 is None:
            continue
        if side1 not in h2h or side2 not in h2h[side1]:
            continue

        winner, loser = (side1, side2) if match.winning_side == 1 else (side2, side1)
        h2h[winner][loser].wins += 1
        h2h[loser][winner].losses += 1

    return h2h

def _monthly_trend(matches: Sequence, now: datetime.datetime) -> List[stats_schemas.MonthlyTrend]:
    cutoff = _months_before(now, TREND_MONTHS)
    buckets: Dict[tuple, stats_schemas.MonthlyTrend] = {}

    for match in matches:
        if match.scheduled_at < cutoff:
            continue
        key = (match.scheduled_at.year, match.scheduled_at.month)
        if key not in buckets:
            buckets[key] = stats_schemas.MonthlyTrend(month=match.scheduled_at.strftime("%b %y"))
        bucket = buckets[key]
        bucket.matches += 1
        if match.type == MatchType.SINGLES.value:
            bucket.singles += 1
        else:
            bucket.doubles += 1

    return [buckets[key] for key in sorted(buckets)]

def compute_team_stats(players: Sequence, matches: Sequence, now: Optional[datetime.datetime] = None) -> stats_schemas.TeamStats:
    """
    Summarises a team's completed matches.

    ``players`` and ``matches`` only need the attributes of the ORM models
    (match.players with player_id/side, match.sets with scores), so this runs
    just as well on plain objects. Nothing is written.
    """
    now = now or datetime.datetime.utcnow()

    player_stats = [_player_stat(player, matches) for player in players]
    # sorted() is stable, so equal records keep the input order
    player_stats = sorted(player_stats, key=lambda s: (-s.wins, -s.win_rate))

    return stats_schemas.TeamStats(
        player_stats=player_stats,
        h2h=_head_to_head(players, matches),
        monthly_trend=_monthly_trend(matches, now),
        total_matches=len(matches),
        total_singles=sum(1 for m in matches if m.type == MatchType.SINGLES.value),
        total_doubles=sum(1 for m in matches if m.type == MatchType.DOUBLES.value),
    )

def get_team_stats(db: Session, team_id: int, current_user_id: int) -> stats_schemas.TeamStats:
    team_service.require_membership(db, current_user_id, team_id)

    matches = db.query(match_model.Match).filter(
        match_model.Match.team_id == team_id,
        match_model.Match.status == MatchStatus.COMPLETED.value,
    ).order_by(match_model.Match.scheduled_at.desc()).all()

    players = db.query(player_model.Player)\
        .filter(player_model.Player.team_id == team_id)\
        .order_by(player_model.Player.id)\
        .all()

    return compute_team_stats(players, matches)
