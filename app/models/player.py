from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.models.enums import SkillLevel

class Player(Base):
    __tablename__ = "players"

    id = Column(Integer, primary_key=True, index=True)
    team_id = Column(Integer, ForeignKey("teams.id"), nullable=False)
    team_member_id = Column(Integer, ForeignKey("team_members.id"), unique=True, nullable=False)
    display_name = Column(String, nullable=False)
    skill_level = Column(String, default=SkillLevel.INTERMEDIATE.value) # BEGINNER / INTERMEDIATE / ADVANCED
    avatar = Column(String, nullable=True)

    team = relationship("Team", back_populates="players")
    team_member = relationship("TeamMember", back_populates="player")
    match_players = relationship("MatchPlayer", back_populates="player", cascade="all, delete-orphan")
    availability = relationship("Availability", back_populates="player", cascade="all, delete-orphan")
