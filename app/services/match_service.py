import logging
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified
from sqlalchemy.orm.exc import StaleDataError

from app.models import match as match_model
from app.models import match_set as match_set_model
from app.models import match_player as match_player_model
from app.models import player as player_model
from app.models import venue as venue_model
from app.models.enums import MatchType, MatchStatus, TeamRole
from app.schemas import match_schemas
from app.services import team_service, scoring_engine

logger = logging.getLogger(__name__)

def max_players_per_side(match_type: str) -> int:
    return 1 if match_type == MatchType.SINGLES.value else 2

def _validate_lineup(match_in: match_schemas.MatchCreate) -> None:
    match_type = MatchType(match_in.type).value
    label = "Singles" if match_type == MatchType.SINGLES.value else "Doubles"
    per_side = max_players_per_side(match_type)
    players = match_in.players

    if len(players) != per_side * 2:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{label} requires {per_side * 2} players")

    side1 = [p for p in players if p.side == 1]
    side2 = [p for p in players if p.side == 2]
    if len(side1) != per_side or len(side2) != per_side:
        plural = "s" if per_side > 1 else ""
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{label} requires {per_side} player{plural} per side")

    if any(p.position > per_side for p in players):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid player position for selected match type")

    if len({p.position for p in side1}) != per_side or len({p.position for p in side2}) != per_side:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Duplicate player positions on the same side are not allowed")

    if len({p.player_id for p in players}) != len(players):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Duplicate players are not allowed in a match")

def create_match(db: Session, match_in: match_schemas.MatchCreate, current_user_id: int) -> match_model.Match:
    team_service.require_membership(db, current_user_id, match_in.team_id)
    _validate_lineup(match_in)

    player_ids = {p.player_id for p in match_in.players}
    team_players = db.query(player_model.Player.id).filter(
        player_model.Player.team_id == match_in.team_id,
        player_model.Player.id.in_(player_ids),
    ).count()
    if team_players != len(player_ids):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="All selected players must belong to the active team")

    if match_in.venue_id is not None:
        venue = db.query(venue_model.Venue).filter(
            venue_model.Venue.id == match_in.venue_id,
            venue_model.Venue.team_id == match_in.team_id,
        ).first()
        if not venue:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Selected venue does not belong to this team")

    db_match = match_model.Match(
        team_id=match_in.team_id,
        venue_id=match_in.venue_id,
        type=MatchType(match_in.type).value,
        status=MatchStatus.SCHEDULED.value,
        scheduled_at=match_in.scheduled_at,
        notes=match_in.notes or None,
    )
    db_match.players = [
        match_player_model.MatchPlayer(player_id=p.player_id, side=p.side, position=p.position)
        for p in match_in.players
    ]
    # Every match starts with an empty first set
    db_match.sets = [match_set_model.MatchSet(set_number=1, side1_score=0, side2_score=0, is_complete=False)]

    db.add(db_match)
    db.commit()
    db.refresh(db_match)
    logger.info("Match %s scheduled for team %s", db_match.id, db_match.team_id)
    return db_match

def get_team_matches(db: Session, team_id: int, current_user_id: int, match_status: Optional[str] = None, limit: int = 50) -> List[match_model.Match]:
    team_service.require_membership(db, current_user_id, team_id)
    query = db.query(match_model.Match).filter(match_model.Match.team_id == team_id)
    if match_status:
        query = query.filter(match_model.Match.status == match_status)
    return query.order_by(match_model.Match.scheduled_at.desc()).limit(limit).all()

def get_match_or_404(db: Session, match_id: int) -> match_model.Match:
    db_match = db.query(match_model.Match).filter(match_model.Match.id == match_id).first()
    if not db_match:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Match not found")
    return db_match

def get_match_details(db: Session, match_id: int, current_user_id: int) -> match_model.Match:
    db_match = get_match_or_404(db, match_id)
    team_service.require_membership(db, current_user_id, db_match.team_id)
    return db_match

def update_match(db: Session, match_id: int, match_update: match_schemas.MatchUpdate, current_user_id: int) -> match_model.Match:
    db_match = get_match_or_404(db, match_id)
    membership = team_service.require_membership(db, current_user_id, db_match.team_id)
    update_data = match_update.model_dump(exclude_unset=True)

    new_status = update_data.get("status")
    if new_status is not None:
        if membership.role != TeamRole.ADMIN.value:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only team admins can change match status")
        new_status = MatchStatus(new_status).value
        # LIVE and COMPLETED are only ever reached through score reports
        if new_status != MatchStatus.CANCELLED.value:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only cancelling a match can be done by hand")
        if db_match.status not in (MatchStatus.SCHEDULED.value, MatchStatus.LIVE.value):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Match is already finished")
        db_match.status = new_status

    if "notes" in update_data:
        db_match.notes = update_data["notes"]

    db.commit()
    db.refresh(db_match)
    if new_status is not None:
        logger.info("Match %s cancelled by user %s", db_match.id, current_user_id)
    return db_match

def delete_match(db: Session, match_id: int, current_user_id: int) -> bool:
    db_match = get_match_or_404(db, match_id)
    team_service.require_admin(db, current_user_id, db_match.team_id)
    db.delete(db_match)
    db.commit()
    logger.info("Match %s deleted by user %s", match_id, current_user_id)
    return True

def _apply_score_plan(db_match: match_model.Match, plan: scoring_engine.ScorePlan) -> match_set_model.MatchSet:
    target = next((s for s in db_match.sets if s.set_number == plan.set_number), None)
    if target is None:
        target = match_set_model.MatchSet(set_number=plan.set_number, side1_score=0, side2_score=0, is_complete=False)
        db_match.sets.append(target)
    elif target.is_complete:
        raise scoring_engine.ScoreRejected("set_already_complete", f"Set {plan.set_number} is already complete")

    if plan.start_match:
        db_match.status = MatchStatus.LIVE.value

    target.side1_score = plan.side1_score
    target.side2_score = plan.side2_score
    target.is_complete = plan.set_complete
    target.winning_side = plan.set_winner
    target.completed_at = plan.completed_at

    if plan.match_winner is not None:
        db_match.status = MatchStatus.COMPLETED.value
        db_match.winning_side = plan.match_winner
    elif plan.next_set_number is not None:
        db_match.sets.append(match_set_model.MatchSet(
            set_number=plan.next_set_number, side1_score=0, side2_score=0, is_complete=False,
        ))

    # Every accepted report bumps the match version
    flag_modified(db_match, "status")
    return target

def _reject(db: Session, match_id: int, error: scoring_engine.ScoreRejected) -> HTTPException:
    db.rollback()
    logger.info("Score report for match %s rejected: %s", match_id, error.reason)
    return HTTPException(status_code=error.status_code, detail=error.to_detail())

def record_set_score(db: Session, match_id: int, score: match_schemas.ScoreUpdate, current_user_id: int) -> dict:
    """
    Records the score of the current set and applies everything it triggers.

    The match row is locked where the database supports it, and its version
    counter makes a report planned against stale sets fail instead of
    overwriting them. A rejected report leaves the match untouched.
    """
    db_match = db.query(match_model.Match)\
        .filter(match_model.Match.id == match_id)\
        .with_for_update()\
        .first()
    try:
        if not db_match:
            raise scoring_engine.ScoreRejected("match_not_found", "Match not found", status_code=status.HTTP_404_NOT_FOUND)
        if not team_service.get_membership(db, current_user_id, db_match.team_id):
            raise scoring_engine.ScoreRejected("forbidden", "Forbidden", status_code=status.HTTP_403_FORBIDDEN)
        state = scoring_engine.MatchState.model_validate(db_match)
        plan = scoring_engine.plan_score_update(state, score.set_number, score.side1_score, score.side2_score)
        updated_set = _apply_score_plan(db_match, plan)
        db.commit()
    except scoring_engine.ScoreRejected as e:
        raise _reject(db, match_id, e)
    except StaleDataError:
        raise _reject(db, match_id, scoring_engine.ScoreRejected(
            "concurrent_update",
            "Match was updated by another score report, reload and try again",
            status_code=status.HTTP_409_CONFLICT,
        ))
    except Exception:
        db.rollback()
        logger.exception("Failed to record score for match %s", match_id)
        raise

    db.refresh(db_match)
    db.refresh(updated_set)
    if plan.start_match:
        logger.info("Match %s is now LIVE", match_id)
    if plan.match_winner is not None:
        logger.info("Match %s COMPLETED, winning side %s", match_id, plan.match_winner)
    return {"match": db_match, "set": updated_set}
