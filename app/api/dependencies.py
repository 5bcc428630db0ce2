from typing import Iterator

from sqlalchemy.orm import Session

from app.core.database import SessionLocal

def get_db() -> Iterator[Session]:
    """One session per request, closed once the response is sent."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
