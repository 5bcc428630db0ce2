from sqlalchemy import Column, Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from app.core.database import Base

class MatchPlayer(Base):
    __tablename__ = "match_players"
    __table_args__ = (
        UniqueConstraint("match_id", "side", "position", name="uq_match_player_slot"),
        UniqueConstraint("match_id", "player_id", name="uq_match_player_player"),
    )

    id = Column(Integer, primary_key=True, index=True)
    match_id = Column(Integer, ForeignKey("matches.id"), nullable=False, index=True)
    player_id = Column(Integer, ForeignKey("players.id"), nullable=False)
    side = Column(Integer, nullable=False) # 1 or 2
    position = Column(Integer, nullable=False) # 1 for singles, 1-2 for doubles

    match = relationship("Match", back_populates="players")
    player = relationship("Player", back_populates="match_players")
