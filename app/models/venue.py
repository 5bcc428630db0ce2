from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship
from app.core.database import Base

class Venue(Base):
    __tablename__ = "venues"

    id = Column(Integer, primary_key=True, index=True)
    team_id = Column(Integer, ForeignKey("teams.id"), nullable=False)
    name = Column(String, nullable=False)
    address = Column(String, nullable=True)
    courts = Column(Integer, default=1)
    notes = Column(String, nullable=True)

    team = relationship("Team", back_populates="venues")
    # Deleting a venue detaches its matches rather than deleting them
    matches = relationship("Match", back_populates="venue")
