from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.models.enums import TeamRole
from .user_schemas import UserRead
from .player_schemas import PlayerRead

class TeamCreate(BaseModel):
    name: str = Field(min_length=2, max_length=50)
    description: Optional[str] = Field(default=None, max_length=200)

class TeamRead(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    invite_code: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class TeamSummary(TeamRead):
    role: str
    member_count: int
    match_count: int

class JoinTeamRequest(BaseModel):
    invite_code: str = ""

class MemberRead(BaseModel):
    id: int
    user_id: int
    team_id: int
    role: str
    joined_at: Optional[datetime] = None
    user: UserRead
    player: Optional[PlayerRead] = None

    class Config:
        from_attributes = True

class MemberRoleUpdate(BaseModel):
    member_id: int
    role: TeamRole
