from enum import Enum

class MatchType(str, Enum):
    SINGLES = "SINGLES"
    DOUBLES = "DOUBLES"

class MatchStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    LIVE = "LIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

class TeamRole(str, Enum):
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"

class SkillLevel(str, Enum):
    BEGINNER = "BEGINNER"
    INTERMEDIATE = "INTERMEDIATE"
    ADVANCED = "ADVANCED"

class AvailabilityStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    UNAVAILABLE = "UNAVAILABLE"
    MAYBE = "MAYBE"
