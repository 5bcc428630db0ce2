"""
Badminton scoring rules.

Rally scoring to 21 with a two point margin, capped at 30, best of three sets.
Everything in this module is pure: it works on snapshots of a match and
returns a plan describing the writes a score report requires. Applying the
plan to the database is the job of ``match_service.record_set_score``.
"""
import datetime
from typing import List, Optional, Iterable

from pydantic import BaseModel, Field

from app.models.enums import MatchStatus

MAX_SETS = 3
SETS_TO_WIN = 2
POINTS_TO_WIN = 21
WIN_MARGIN = 2
MAX_POINTS = 30

class ScoreRejected(ValueError):
    """A score report that must not change any state."""

    def __init__(self, reason: str, message: str, status_code: int = 400, **extra):
        super().__init__(message)
        self.reason = reason
        self.message = message
        self.status_code = status_code
        self.extra = extra

    def to_detail(self) -> dict:
        detail = {"error": self.message, "reason": self.reason}
        detail.update(self.extra)
        return detail

class SetState(BaseModel):
    set_number: int
    side1_score: int = 0
    side2_score: int = 0
    is_complete: bool = False
    winning_side: Optional[int] = None

    class Config:
        from_attributes = True

class MatchState(BaseModel):
    id: Optional[int] = None
    status: str = MatchStatus.SCHEDULED.value
    winning_side: Optional[int] = None
    sets: List[SetState] = Field(default_factory=list)

    class Config:
        from_attributes = True

class ScorePlan(BaseModel):
    """The writes one accepted score report requires."""
    set_number: int
    create_set: bool = False        # the target set row does not exist yet
    start_match: bool = False       # SCHEDULED -> LIVE
    side1_score: int
    side2_score: int
    set_winner: Optional[int] = None
    completed_at: Optional[datetime.datetime] = None
    match_winner: Optional[int] = None
    next_set_number: Optional[int] = None

    @property
    def set_complete(self) -> bool:
        return self.set_winner is not None

def get_set_winner(side1_score: int, side2_score: int) -> Optional[int]:
    if max(side1_score, side2_score) < POINTS_TO_WIN:
        return None

    # 30 ends the set whatever the margin (30-29 is a win)
    if side1_score >= MAX_POINTS:
        return 1
    if side2_score >= MAX_POINTS:
        return 2

    if side1_score >= POINTS_TO_WIN and side1_score - side2_score >= WIN_MARGIN:
        return 1
    if side2_score >= POINTS_TO_WIN and side2_score - side1_score >= WIN_MARGIN:
        return 2

    return None

def get_match_winner(sets: Iterable[SetState]) -> Optional[int]:
    completed = [s for s in sets if s.is_complete and s.winning_side]
    side1_wins = sum(1 for s in completed if s.winning_side == 1)
    side2_wins = sum(1 for s in completed if s.winning_side == 2)

    if side1_wins >= SETS_TO_WIN:
        return 1
    if side2_wins >= SETS_TO_WIN:
        return 2
    return None

def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)

def current_set(match: MatchState) -> Optional[SetState]:
    """The lone incomplete set of a match, if any."""
    return next((s for s in sorted(match.sets, key=lambda s: s.set_number) if not s.is_complete), None)

def expected_set_number(match: MatchState) -> int:
    active = current_set(match)
    if active is not None:
        return active.set_number
    return max((s.set_number for s in match.sets), default=0) + 1

def plan_score_update(
    match: MatchState,
    set_number,
    side1_score,
    side2_score,
    now: Optional[datetime.datetime] = None,
) -> ScorePlan:
    """
    Validates a score report against the match snapshot and works out what it changes.

    Raises ScoreRejected, before anything is planned, when the match is finished,
    the input is out of range, or the report targets any set other than the
    current one.
    """
    if match.status not in (MatchStatus.SCHEDULED.value, MatchStatus.LIVE.value):
        raise ScoreRejected("match_finished", "Match is already finished")

    if not _is_int(set_number) or set_number < 1 or set_number > MAX_SETS:
        raise ScoreRejected("invalid_set_number", f"set_number must be an integer between 1 and {MAX_SETS}")

    if not _is_int(side1_score) or not _is_int(side2_score):
        raise ScoreRejected("invalid_score", "Invalid scores")
    if side1_score < 0 or side2_score < 0 or side1_score > MAX_POINTS or side2_score > MAX_POINTS:
        raise ScoreRejected("invalid_score", f"Scores must be between 0 and {MAX_POINTS}")

    # Computed once and used for both validation and the plan
    expected = expected_set_number(match)
    if expected > MAX_SETS:
        raise ScoreRejected("all_sets_complete", "All sets for this match are already complete")

    target = next((s for s in match.sets if s.set_number == set_number), None)
    # A completed set is reported as such even though it is also not the expected one
    if target is not None and target.is_complete:
        raise ScoreRejected("set_already_complete", f"Set {set_number} is already complete")
    if set_number != expected:
        raise ScoreRejected(
            "unexpected_set_number",
            f"Only set {expected} can be updated right now",
            expected_set_number=expected,
        )

    winner = get_set_winner(side1_score, side2_score)
    plan = ScorePlan(
        set_number=set_number,
        create_set=target is None,
        start_match=match.status == MatchStatus.SCHEDULED.value,
        side1_score=side1_score,
        side2_score=side2_score,
        set_winner=winner,
        completed_at=(now or datetime.datetime.utcnow()) if winner is not None else None,
    )

    if not plan.set_complete:
        return plan

    updated = SetState(
        set_number=set_number,
        side1_score=side1_score,
        side2_score=side2_score,
        is_complete=True,
        winning_side=winner,
    )
    sets_after = [s for s in match.sets if s.set_number != set_number] + [updated]
    plan.match_winner = get_match_winner(sets_after)

    if plan.match_winner is None:
        next_number = set_number + 1
        if next_number <= MAX_SETS and not any(s.set_number == next_number for s in sets_after):
            plan.next_set_number = next_number

    return plan
