from typing import Optional

from pydantic import BaseModel, Field

class VenueCreate(BaseModel):
    team_id: int
    name: str = Field(min_length=2, max_length=100)
    address: Optional[str] = Field(default=None, max_length=200)
    courts: int = Field(default=1, ge=1, le=20)
    notes: Optional[str] = Field(default=None, max_length=300)

class VenueUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    address: Optional[str] = Field(default=None, max_length=200)
    courts: Optional[int] = Field(default=None, ge=1, le=20)
    notes: Optional[str] = Field(default=None, max_length=300)

class VenueRead(BaseModel):
    id: int
    team_id: int
    name: str
    address: Optional[str] = None
    courts: int
    notes: Optional[str] = None

    class Config:
        from_attributes = True

class VenueWithCount(VenueRead):
    match_count: int = 0
