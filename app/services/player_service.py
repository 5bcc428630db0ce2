from typing import List

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.models import player as player_model
from app.models import availability as availability_model
from app.models.enums import TeamRole
from app.schemas import player_schemas
from app.services import team_service

def get_player_or_404(db: Session, player_id: int) -> player_model.Player:
    player = db.query(player_model.Player).filter(player_model.Player.id == player_id).first()
    if not player:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Player not found")
    return player

def list_team_players(db: Session, team_id: int, current_user_id: int) -> List[player_model.Player]:
    team_service.require_membership(db, current_user_id, team_id)
    return db.query(player_model.Player)\
        .filter(player_model.Player.team_id == team_id)\
        .order_by(player_model.Player.display_name)\
        .all()

def update_player(db: Session, player_id: int, player_update: player_schemas.PlayerUpdate, current_user_id: int) -> player_model.Player:
    player = get_player_or_404(db, player_id)
    membership = team_service.require_membership(db, current_user_id, player.team_id)

    # Only the player themselves or a team admin
    is_own_profile = player.team_member.user_id == current_user_id
    if not is_own_profile and membership.role != TeamRole.ADMIN.value:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    if player_update.display_name:
        player.display_name = player_update.display_name
    if player_update.skill_level:
        player.skill_level = player_update.skill_level.value

    db.commit()
    db.refresh(player)
    return player

def get_availability(db: Session, player_id: int, current_user_id: int) -> List[availability_model.Availability]:
    player = get_player_or_404(db, player_id)
    team_service.require_membership(db, current_user_id, player.team_id)
    return db.query(availability_model.Availability)\
        .filter(availability_model.Availability.player_id == player_id)\
        .order_by(availability_model.Availability.date)\
        .all()

def set_availability(db: Session, player_id: int, availability_in: player_schemas.AvailabilityCreate, current_user_id: int) -> availability_model.Availability:
    player = get_player_or_404(db, player_id)
    if player.team_member.user_id != current_user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You can only set your own availability")

    # Upsert on (player, date)
    entry = db.query(availability_model.Availability).filter(
        availability_model.Availability.player_id == player_id,
        availability_model.Availability.date == availability_in.date,
    ).first()
    if entry:
        entry.status = availability_in.status.value
        entry.notes = availability_in.notes
    else:
        entry = availability_model.Availability(
            player_id=player_id,
            user_id=current_user_id,
            date=availability_in.date,
            status=availability_in.status.value,
            notes=availability_in.notes,
        )
        db.add(entry)

    db.commit()
    db.refresh(entry)
    return entry
