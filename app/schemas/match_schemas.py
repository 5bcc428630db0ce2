from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Any, List, Optional
from datetime import datetime

from app.models.enums import MatchType, MatchStatus
from .user_schemas import UserBrief
from .player_schemas import PlayerRead
from .venue_schemas import VenueRead

class MatchPlayerIn(BaseModel):
    player_id: int
    side: int = Field(ge=1, le=2)
    position: int = Field(ge=1, le=2)

class MatchCreate(BaseModel):
    team_id: int
    venue_id: Optional[int] = None
    type: MatchType
    scheduled_at: datetime
    notes: Optional[str] = Field(default=None, max_length=500)
    players: List[MatchPlayerIn]

class MatchUpdate(BaseModel):
    status: Optional[MatchStatus] = None
    notes: Optional[str] = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def something_to_update(self):
        if not self.model_fields_set & {"status", "notes"}:
            raise ValueError("Nothing to update")
        return self

class ScoreUpdate(BaseModel):
    # Left loose so the scoring engine can reject bad values with a reason
    set_number: Any
    side1_score: Any
    side2_score: Any

    @field_validator("set_number", "side1_score", "side2_score", mode="before")
    @classmethod
    def integral_floats_to_int(cls, value):
        # JSON has a single number type, 21.0 is 21
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return value

class SetRead(BaseModel):
    id: int
    match_id: int
    set_number: int
    side1_score: int
    side2_score: int
    is_complete: bool
    winning_side: Optional[int] = None
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class MatchPlayerRead(BaseModel):
    id: int
    player_id: int
    side: int
    position: int
    player: PlayerRead

    class Config:
        from_attributes = True

class CommentRead(BaseModel):
    id: int
    match_id: int
    content: str
    created_at: Optional[datetime] = None
    user: UserBrief

    class Config:
        from_attributes = True

class CommentCreate(BaseModel):
    content: Optional[str] = None

class MatchRead(BaseModel):
    id: int
    team_id: int
    venue_id: Optional[int] = None
    type: str
    status: str
    scheduled_at: datetime
    winning_side: Optional[int] = None
    notes: Optional[str] = None
    sets: List[SetRead] = []
    players: List[MatchPlayerRead] = []
    venue: Optional[VenueRead] = None

    class Config:
        from_attributes = True

class MatchDetail(MatchRead):
    comments: List[CommentRead] = []

class ScoreResult(BaseModel):
    match: MatchDetail
    set: SetRead
