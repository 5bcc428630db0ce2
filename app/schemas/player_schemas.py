import datetime as dt
from typing import Optional

from pydantic import BaseModel, Field

from app.models.enums import SkillLevel, AvailabilityStatus

class PlayerRead(BaseModel):
    id: int
    team_id: int
    team_member_id: int
    display_name: str
    skill_level: Optional[str] = None
    avatar: Optional[str] = None

    class Config:
        from_attributes = True

class PlayerUpdate(BaseModel):
    display_name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    skill_level: Optional[SkillLevel] = None

class AvailabilityCreate(BaseModel):
    date: dt.date
    status: AvailabilityStatus
    notes: Optional[str] = Field(default=None, max_length=300)

class AvailabilityRead(BaseModel):
    id: int
    player_id: int
    user_id: int
    date: dt.date
    status: str
    notes: Optional[str] = None

    class Config:
        from_attributes = True
