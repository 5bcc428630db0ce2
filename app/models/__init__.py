from app.core.database import Base, engine

# Import all models here to ensure they are registered with Base
from .user import User
from .team import Team
from .team_member import TeamMember
from .player import Player
from .venue import Venue
from .match import Match
from .match_set import MatchSet
from .match_player import MatchPlayer
from .comment import Comment
from .availability import Availability

# Create all tables in the database.
# Ensure this is called after all model definitions.
Base.metadata.create_all(bind=engine)
