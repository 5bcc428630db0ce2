from sqlalchemy import Column, Integer, ForeignKey, DateTime, Boolean, UniqueConstraint
from sqlalchemy.orm import relationship
from app.core.database import Base

class MatchSet(Base):
    __tablename__ = "sets"
    __table_args__ = (UniqueConstraint("match_id", "set_number", name="uq_set_match_number"),)

    id = Column(Integer, primary_key=True, index=True)
    match_id = Column(Integer, ForeignKey("matches.id"), nullable=False, index=True)
    set_number = Column(Integer, nullable=False) # 1..3
    side1_score = Column(Integer, default=0, nullable=False)
    side2_score = Column(Integer, default=0, nullable=False)
    is_complete = Column(Boolean, default=False, nullable=False)
    winning_side = Column(Integer, nullable=True)
    completed_at = Column(DateTime, nullable=True)

    match = relationship("Match", back_populates="sets")
