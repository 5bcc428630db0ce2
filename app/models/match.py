from sqlalchemy import Column, Integer, String, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.models.enums import MatchStatus
import datetime

class Match(Base):
    __tablename__ = "matches"

    id = Column(Integer, primary_key=True, index=True)
    team_id = Column(Integer, ForeignKey("teams.id"), nullable=False, index=True)
    venue_id = Column(Integer, ForeignKey("venues.id"), nullable=True)
    type = Column(String, nullable=False) # "SINGLES" or "DOUBLES"
    status = Column(String, default=MatchStatus.SCHEDULED.value, nullable=False)
    scheduled_at = Column(DateTime, nullable=False)
    winning_side = Column(Integer, nullable=True) # 1, 2 or None until COMPLETED
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
    # Optimistic lock counter, incremented by the ORM on every UPDATE
    version = Column(Integer, nullable=False, default=1)

    team = relationship("Team", back_populates="matches")
    venue = relationship("Venue", back_populates="matches")
    sets = relationship(
        "MatchSet", back_populates="match", cascade="all, delete-orphan",
        order_by="MatchSet.set_number",
    )
    players = relationship(
        "MatchPlayer", back_populates="match", cascade="all, delete-orphan",
        order_by="[MatchPlayer.side, MatchPlayer.position]",
    )
    comments = relationship(
        "Comment", back_populates="match", cascade="all, delete-orphan",
        order_by="Comment.created_at",
    )

    __mapper_args__ = {"version_id_col": version}
