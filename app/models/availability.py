from sqlalchemy import Column, Integer, String, ForeignKey, Date, UniqueConstraint
from sqlalchemy.orm import relationship
from app.core.database import Base

class Availability(Base):
    __tablename__ = "availability"
    __table_args__ = (UniqueConstraint("player_id", "date", name="uq_availability_player_date"),)

    id = Column(Integer, primary_key=True, index=True)
    player_id = Column(Integer, ForeignKey("players.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    date = Column(Date, nullable=False)
    status = Column(String, nullable=False) # AVAILABLE / UNAVAILABLE / MAYBE
    notes = Column(String, nullable=True)

    player = relationship("Player", back_populates="availability")
