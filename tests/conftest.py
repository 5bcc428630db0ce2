import os

# Must be set before the app modules read their settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "test")

import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core import security
from app.core.database import Base
from app.api.dependencies import get_db
from app.main import app
from app.models import User, Team, TeamMember, Player, Match, MatchSet, MatchPlayer
from app.models.enums import TeamRole, MatchType, MatchStatus

TEST_PASSWORD = "correct-horse-battery"
# Hashing is slow on purpose, do it once for every test user
TEST_PASSWORD_HASH = security.get_password_hash(TEST_PASSWORD)

@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()

@pytest.fixture
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides = {}

def make_user(db, name="Alice", email=None) -> User:
    user = User(name=name, email=email or f"{name.lower()}@example.com", hashed_password=TEST_PASSWORD_HASH)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user

def add_member(db, team: Team, user: User, role: TeamRole = TeamRole.MEMBER) -> Player:
    member = TeamMember(user_id=user.id, team_id=team.id, role=role.value)
    db.add(member)
    db.flush()
    player = Player(team_id=team.id, team_member_id=member.id, display_name=user.name, skill_level="INTERMEDIATE")
    db.add(player)
    db.commit()
    db.refresh(player)
    return player

def make_team(db, admin: User, name="Shuttle Club", invite_code="ABCD1234") -> Team:
    team = Team(name=name, invite_code=invite_code)
    db.add(team)
    db.commit()
    db.refresh(team)
    add_member(db, team, admin, TeamRole.ADMIN)
    return team

def make_match(db, team: Team, side1, side2, match_type=MatchType.SINGLES, scheduled_at=None) -> Match:
    """side1/side2 are lists of Player rows."""
    match = Match(
        team_id=team.id,
        type=match_type.value,
        status=MatchStatus.SCHEDULED.value,
        scheduled_at=scheduled_at or datetime.datetime(2026, 9, 1, 18, 0),
    )
    match.players = [
        MatchPlayer(player_id=p.id, side=side, position=position)
        for side, players in ((1, side1), (2, side2))
        for position, p in enumerate(players, start=1)
    ]
    match.sets = [MatchSet(set_number=1, side1_score=0, side2_score=0, is_complete=False)]
    db.add(match)
    db.commit()
    db.refresh(match)
    return match

def auth_headers(user: User) -> dict:
    token = security.create_access_token(user.email)
    return {"Authorization": f"Bearer {token}"}

@pytest.fixture
def club(db_session):
    """A team with an admin (alice) and a member (bob), each with a player profile."""
    alice = make_user(db_session, "Alice")
    bob = make_user(db_session, "Bob")
    team = make_team(db_session, alice)
    alice_player = db_session.query(Player).filter(Player.team_id == team.id).one()
    bob_player = add_member(db_session, team, bob)
    return {
        "team": team,
        "alice": alice,
        "bob": bob,
        "alice_player": alice_player,
        "bob_player": bob_player,
    }
