from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr

class UserBrief(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True

class UserRead(UserBrief):
    email: EmailStr
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
