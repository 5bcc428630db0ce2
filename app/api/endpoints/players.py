from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.services import player_service, auth_service
from app.models import user as user_model
from app.schemas import player_schemas
from app.api.dependencies import get_db

router = APIRouter()

@router.get("/", response_model=List[player_schemas.PlayerRead])
async def list_players_endpoint(
    team_id: int,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return player_service.list_team_players(db=db, team_id=team_id, current_user_id=current_user.id)

@router.patch("/{player_id}", response_model=player_schemas.PlayerRead)
async def update_player_endpoint(
    player_id: int,
    player_in: player_schemas.PlayerUpdate,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return player_service.update_player(db=db, player_id=player_id, player_update=player_in, current_user_id=current_user.id)

@router.get("/{player_id}/availability", response_model=List[player_schemas.AvailabilityRead])
async def get_availability_endpoint(
    player_id: int,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return player_service.get_availability(db=db, player_id=player_id, current_user_id=current_user.id)

@router.post("/{player_id}/availability", response_model=player_schemas.AvailabilityRead)
async def set_availability_endpoint(
    player_id: int,
    availability_in: player_schemas.AvailabilityCreate,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return player_service.set_availability(db=db, player_id=player_id, availability_in=availability_in, current_user_id=current_user.id)
