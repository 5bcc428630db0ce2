import datetime
from unittest.mock import patch

import pytest
from fastapi import HTTPException
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.database import Base
from app.models import Match, MatchSet, Comment, Player
from app.models.enums import MatchType, MatchStatus
from app.schemas import match_schemas
from app.services import match_service, comment_service, scoring_engine

from conftest import make_user, make_team, make_match, add_member

def report(db, match, set_number, s1, s2, user):
    score = match_schemas.ScoreUpdate(set_number=set_number, side1_score=s1, side2_score=s2)
    return match_service.record_set_score(db, match.id, score, user.id)

def snapshot(db, match_id):
    db.expire_all()
    match = db.query(Match).filter(Match.id == match_id).one()
    return (
        match.status,
        match.winning_side,
        [(s.set_number, s.side1_score, s.side2_score, s.is_complete, s.winning_side, s.completed_at) for s in match.sets],
    )

def incomplete_sets(db, match_id):
    return db.query(MatchSet).filter(MatchSet.match_id == match_id, MatchSet.is_complete == False).count()

@pytest.fixture
def singles(db_session, club):
    return make_match(db_session, club["team"], [club["alice_player"]], [club["bob_player"]])


class TestRecordSetScoreScenarios:

    def test_three_set_match(self, db_session, club, singles):
        alice = club["alice"]

        result = report(db_session, singles, 1, 21, 15, alice)
        assert result["set"].is_complete is True
        assert result["set"].winning_side == 1
        assert result["set"].completed_at is not None
        match = result["match"]
        assert match.status == MatchStatus.LIVE.value
        assert [s.set_number for s in match.sets] == [1, 2]
        assert (match.sets[1].side1_score, match.sets[1].side2_score, match.sets[1].is_complete) == (0, 0, False)

        result = report(db_session, singles, 2, 18, 21, alice)
        assert result["set"].winning_side == 2
        assert result["match"].status == MatchStatus.LIVE.value
        assert result["match"].winning_side is None
        assert [s.set_number for s in result["match"].sets] == [1, 2, 3]

        result = report(db_session, singles, 3, 21, 19, alice)
        assert result["set"].winning_side == 1
        match = result["match"]
        assert match.status == MatchStatus.COMPLETED.value
        assert match.winning_side == 1
        assert [s.set_number for s in match.sets] == [1, 2, 3]
        assert incomplete_sets(db_session, singles.id) == 0

    def test_straight_sets_for_side_two(self, db_session, club, singles):
        report(db_session, singles, 1, 15, 21, club["bob"])
        result = report(db_session, singles, 2, 10, 21, club["bob"])

        match = result["match"]
        assert match.status == MatchStatus.COMPLETED.value
        assert match.winning_side == 2
        assert [s.set_number for s in match.sets] == [1, 2]

    def test_in_progress_score_keeps_set_open(self, db_session, club, singles):
        result = report(db_session, singles, 1, 11, 9, club["alice"])
        assert result["set"].is_complete is False
        assert result["set"].winning_side is None
        assert result["set"].completed_at is None
        assert result["match"].status == MatchStatus.LIVE.value
        assert len(result["match"].sets) == 1

        # Scores of the current set can be amended until it completes
        result = report(db_session, singles, 1, 10, 9, club["alice"])
        assert (result["set"].side1_score, result["set"].side2_score) == (10, 9)

    def test_deuce_then_cap(self, db_session, club, singles):
        report(db_session, singles, 1, 21, 20, club["alice"])
        result = report(db_session, singles, 1, 29, 29, club["alice"])
        assert result["set"].is_complete is False
        result = report(db_session, singles, 1, 29, 30, club["alice"])
        assert result["set"].winning_side == 2

    def test_at_most_one_incomplete_set_throughout(self, db_session, club, singles):
        for set_number, s1, s2 in [(1, 5, 2), (1, 21, 2), (2, 20, 20), (2, 20, 22), (3, 3, 3)]:
            report(db_session, singles, set_number, s1, s2, club["alice"])
            assert incomplete_sets(db_session, singles.id) == 1


class TestRecordSetScoreRejections:

    def test_match_not_found(self, db_session, club):
        score = match_schemas.ScoreUpdate(set_number=1, side1_score=1, side2_score=0)
        with pytest.raises(HTTPException) as exc_info:
            match_service.record_set_score(db_session, 9999, score, club["alice"].id)
        assert exc_info.value.status_code == 404
        assert exc_info.value.detail == {"error": "Match not found", "reason": "match_not_found"}

    def test_non_member_is_forbidden(self, db_session, club, singles):
        outsider = make_user(db_session, "Mallory")
        before = snapshot(db_session, singles.id)
        with pytest.raises(HTTPException) as exc_info:
            report(db_session, singles, 1, 21, 10, outsider)
        assert exc_info.value.status_code == 403
        assert exc_info.value.detail == {"error": "Forbidden", "reason": "forbidden"}
        assert snapshot(db_session, singles.id) == before

    def test_completed_match_is_unchanged(self, db_session, club, singles):
        report(db_session, singles, 1, 21, 10, club["alice"])
        report(db_session, singles, 2, 21, 10, club["alice"])
        before = snapshot(db_session, singles.id)

        for set_number in (1, 2, 3):
            with pytest.raises(HTTPException) as exc_info:
                report(db_session, singles, set_number, 5, 5, club["alice"])
            assert exc_info.value.status_code == 400
            assert exc_info.value.detail["reason"] == "match_finished"
            assert exc_info.value.detail["error"] == "Match is already finished"
        assert snapshot(db_session, singles.id) == before

    def test_resubmitting_completed_set(self, db_session, club, singles):
        report(db_session, singles, 1, 21, 10, club["alice"])
        before = snapshot(db_session, singles.id)

        for _ in range(2):
            with pytest.raises(HTTPException) as exc_info:
                report(db_session, singles, 1, 21, 10, club["alice"])
            assert exc_info.value.detail["reason"] == "set_already_complete"
        assert snapshot(db_session, singles.id) == before

    def test_skipping_a_set(self, db_session, club, singles):
        report(db_session, singles, 1, 21, 10, club["alice"])
        report(db_session, singles, 2, 4, 4, club["alice"])
        before = snapshot(db_session, singles.id)

        with pytest.raises(HTTPException) as exc_info:
            report(db_session, singles, 3, 21, 10, club["alice"])
        assert exc_info.value.detail == {
            "error": "Only set 2 can be updated right now",
            "reason": "unexpected_set_number",
            "expected_set_number": 2,
        }
        assert snapshot(db_session, singles.id) == before

    def test_out_of_range_score_does_not_start_match(self, db_session, club, singles):
        with pytest.raises(HTTPException) as exc_info:
            report(db_session, singles, 1, 31, 10, club["alice"])
        assert exc_info.value.detail["reason"] == "invalid_score"
        assert snapshot(db_session, singles.id)[0] == MatchStatus.SCHEDULED.value

    def test_cancelled_match_rejects_scores_and_keeps_sets(self, db_session, club, singles):
        report(db_session, singles, 1, 12, 10, club["alice"])
        match_service.update_match(db_session, singles.id, match_schemas.MatchUpdate(status="CANCELLED"), club["alice"].id)
        before = snapshot(db_session, singles.id)
        assert before[0] == MatchStatus.CANCELLED.value
        assert before[2][0][1:3] == (12, 10)

        with pytest.raises(HTTPException) as exc_info:
            report(db_session, singles, 1, 13, 10, club["alice"])
        assert exc_info.value.detail["reason"] == "match_finished"
        assert snapshot(db_session, singles.id) == before

    @pytest.mark.parametrize("s1", ["x", None, True, 20.5])
    def test_non_integer_scores_get_a_reason(self, db_session, club, singles, s1):
        with pytest.raises(HTTPException) as exc_info:
            report(db_session, singles, 1, s1, 10, club["alice"])
        assert exc_info.value.status_code == 400
        assert exc_info.value.detail["reason"] == "invalid_score"
        assert snapshot(db_session, singles.id)[0] == MatchStatus.SCHEDULED.value

    def test_integral_float_is_accepted(self, db_session, club, singles):
        result = report(db_session, singles, 1.0, 21.0, 15, club["alice"])
        assert (result["set"].side1_score, result["set"].winning_side) == (21, 1)

    def test_completed_set_is_never_rewritten_by_a_plan(self, db_session, club, singles):
        report(db_session, singles, 1, 21, 15, club["alice"])
        before = snapshot(db_session, singles.id)
        match = db_session.query(Match).filter(Match.id == singles.id).one()

        stale_plan = scoring_engine.ScorePlan(set_number=1, side1_score=10, side2_score=8)
        with pytest.raises(scoring_engine.ScoreRejected) as exc_info:
            match_service._apply_score_plan(match, stale_plan)
        assert exc_info.value.reason == "set_already_complete"
        db_session.rollback()
        assert snapshot(db_session, singles.id) == before


class TestConcurrentScoreReports:
    """Two sessions on one file database, so each has its own connection."""

    @pytest.fixture
    def sessions(self, tmp_path):
        engine = create_engine(f"sqlite:///{tmp_path / 'scores.db'}", connect_args={"check_same_thread": False})
        Base.metadata.create_all(bind=engine)
        Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
        first, second = Session(), Session()
        try:
            yield first, second, Session
        finally:
            first.close()
            second.close()
            engine.dispose()

    def test_stale_report_is_rejected_and_completed_set_kept(self, sessions):
        session_a, session_b, Session = sessions
        alice = make_user(session_a, "Alice")
        team = make_team(session_a, alice)
        bob_player = add_member(session_a, team, make_user(session_a, "Bob"))
        alice_player = session_a.query(Player).filter(Player.team_id == team.id, Player.id != bob_player.id).one()
        match_id = make_match(session_a, team, [alice_player], [bob_player]).id
        alice_id = alice.id

        real_plan = scoring_engine.plan_score_update
        interleaved = []

        def plan_then_let_other_report_finish(*args, **kwargs):
            plan = real_plan(*args, **kwargs)
            if not interleaved:
                interleaved.append(True)
                # Another request completes set 1 after this one has read the sets
                score = match_schemas.ScoreUpdate(set_number=1, side1_score=21, side2_score=15)
                match_service.record_set_score(session_a, match_id, score, alice_id)
            return plan

        stale = match_schemas.ScoreUpdate(set_number=1, side1_score=10, side2_score=8)
        with patch.object(scoring_engine, "plan_score_update", side_effect=plan_then_let_other_report_finish):
            with pytest.raises(HTTPException) as exc_info:
                match_service.record_set_score(session_b, match_id, stale, alice_id)
        assert exc_info.value.status_code == 409
        assert exc_info.value.detail["reason"] == "concurrent_update"

        check = Session()
        try:
            sets = check.query(MatchSet).filter(MatchSet.match_id == match_id).order_by(MatchSet.set_number).all()
            assert [(s.set_number, s.side1_score, s.side2_score, s.is_complete, s.winning_side) for s in sets] == [
                (1, 21, 15, True, 1),
                (2, 0, 0, False, None),
            ]
        finally:
            check.close()

    def test_sequential_reports_from_two_sessions(self, sessions):
        session_a, session_b, _ = sessions
        alice = make_user(session_a, "Alice")
        team = make_team(session_a, alice)
        bob_player = add_member(session_a, team, make_user(session_a, "Bob"))
        alice_player = session_a.query(Player).filter(Player.team_id == team.id, Player.id != bob_player.id).one()
        match_id = make_match(session_a, team, [alice_player], [bob_player]).id

        score = match_schemas.ScoreUpdate(set_number=1, side1_score=21, side2_score=15)
        match_service.record_set_score(session_a, match_id, score, alice.id)
        score = match_schemas.ScoreUpdate(set_number=2, side1_score=21, side2_score=17)
        result = match_service.record_set_score(session_b, match_id, score, alice.id)
        assert result["match"].status == MatchStatus.COMPLETED.value


class TestCreateMatch:

    def _payload(self, club, **overrides):
        data = dict(
            team_id=club["team"].id,
            type="SINGLES",
            scheduled_at=datetime.datetime(2026, 11, 2, 19, 30),
            players=[
                {"player_id": club["alice_player"].id, "side": 1, "position": 1},
                {"player_id": club["bob_player"].id, "side": 2, "position": 1},
            ],
        )
        data.update(overrides)
        return match_schemas.MatchCreate(**data)

    def test_creates_first_set(self, db_session, club):
        match = match_service.create_match(db_session, self._payload(club, notes="Ladder game"), club["bob"].id)
        assert match.status == MatchStatus.SCHEDULED.value
        assert match.winning_side is None
        assert match.notes == "Ladder game"
        assert [(s.set_number, s.side1_score, s.side2_score, s.is_complete) for s in match.sets] == [(1, 0, 0, False)]
        assert sorted((p.side, p.position) for p in match.players) == [(1, 1), (2, 1)]

    def test_wrong_player_count(self, db_session, club):
        with pytest.raises(HTTPException) as exc_info:
            match_service.create_match(db_session, self._payload(club, type="DOUBLES"), club["alice"].id)
        assert exc_info.value.detail == "Doubles requires 4 players"

    def test_same_player_twice(self, db_session, club):
        payload = self._payload(club, players=[
            {"player_id": club["alice_player"].id, "side": 1, "position": 1},
            {"player_id": club["alice_player"].id, "side": 2, "position": 1},
        ])
        with pytest.raises(HTTPException) as exc_info:
            match_service.create_match(db_session, payload, club["alice"].id)
        assert exc_info.value.detail == "Duplicate players are not allowed in a match"

    def test_doubles_duplicate_position(self, db_session, club):
        carol = add_member(db_session, club["team"], make_user(db_session, "Carol"))
        dave = add_member(db_session, club["team"], make_user(db_session, "Dave"))
        payload = self._payload(club, type="DOUBLES", players=[
            {"player_id": club["alice_player"].id, "side": 1, "position": 1},
            {"player_id": club["bob_player"].id, "side": 1, "position": 1},
            {"player_id": carol.id, "side": 2, "position": 1},
            {"player_id": dave.id, "side": 2, "position": 2},
        ])
        with pytest.raises(HTTPException) as exc_info:
            match_service.create_match(db_session, payload, club["alice"].id)
        assert exc_info.value.detail == "Duplicate player positions on the same side are not allowed"

    def test_player_from_another_team(self, db_session, club):
        other_admin = make_user(db_session, "Zed")
        other_team = make_team(db_session, other_admin, name="Other", invite_code="ZZZZ9999")
        stranger = other_team.players[0]
        payload = self._payload(club, players=[
            {"player_id": club["alice_player"].id, "side": 1, "position": 1},
            {"player_id": stranger.id, "side": 2, "position": 1},
        ])
        with pytest.raises(HTTPException) as exc_info:
            match_service.create_match(db_session, payload, club["alice"].id)
        assert exc_info.value.detail == "All selected players must belong to the active team"


class TestUpdateAndDeleteMatch:

    def test_member_cannot_cancel(self, db_session, club, singles):
        with pytest.raises(HTTPException) as exc_info:
            match_service.update_match(db_session, singles.id, match_schemas.MatchUpdate(status="CANCELLED"), club["bob"].id)
        assert exc_info.value.status_code == 403

    def test_member_can_edit_notes(self, db_session, club, singles):
        match = match_service.update_match(db_session, singles.id, match_schemas.MatchUpdate(notes="Bring shuttles"), club["bob"].id)
        assert match.notes == "Bring shuttles"

    @pytest.mark.parametrize("new_status", ["LIVE", "COMPLETED", "SCHEDULED"])
    def test_only_cancel_by_hand(self, db_session, club, singles, new_status):
        with pytest.raises(HTTPException) as exc_info:
            match_service.update_match(db_session, singles.id, match_schemas.MatchUpdate(status=new_status), club["alice"].id)
        assert exc_info.value.status_code == 400

    def test_completed_match_cannot_be_cancelled(self, db_session, club, singles):
        report(db_session, singles, 1, 21, 10, club["alice"])
        report(db_session, singles, 2, 21, 10, club["alice"])
        with pytest.raises(HTTPException) as exc_info:
            match_service.update_match(db_session, singles.id, match_schemas.MatchUpdate(status="CANCELLED"), club["alice"].id)
        assert exc_info.value.status_code == 400
        assert snapshot(db_session, singles.id)[0] == MatchStatus.COMPLETED.value

    def test_nothing_to_update(self):
        with pytest.raises(ValueError):
            match_schemas.MatchUpdate()

    def test_admin_delete_cascades(self, db_session, club, singles):
        report(db_session, singles, 1, 21, 10, club["alice"])
        comment_service.add_comment(db_session, singles.id, match_schemas.CommentCreate(content="gg"), club["bob"].id)

        assert match_service.delete_match(db_session, singles.id, club["alice"].id) is True
        assert db_session.query(Match).count() == 0
        assert db_session.query(MatchSet).count() == 0
        assert db_session.query(Comment).count() == 0

    def test_member_cannot_delete(self, db_session, club, singles):
        with pytest.raises(HTTPException) as exc_info:
            match_service.delete_match(db_session, singles.id, club["bob"].id)
        assert exc_info.value.status_code == 403
