from typing import List, Dict

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.services import venue_service, auth_service
from app.models import user as user_model
from app.schemas import venue_schemas
from app.api.dependencies import get_db

router = APIRouter()

@router.get("/", response_model=List[venue_schemas.VenueWithCount])
async def list_venues_endpoint(
    team_id: int,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return venue_service.list_venues(db=db, team_id=team_id, current_user_id=current_user.id)

@router.post("/", response_model=venue_schemas.VenueRead, status_code=status.HTTP_201_CREATED)
async def create_venue_endpoint(
    venue_in: venue_schemas.VenueCreate,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return venue_service.create_venue(db=db, venue_in=venue_in, current_user_id=current_user.id)

@router.patch("/{venue_id}", response_model=venue_schemas.VenueRead)
async def update_venue_endpoint(
    venue_id: int,
    venue_in: venue_schemas.VenueUpdate,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return venue_service.update_venue(db=db, venue_id=venue_id, venue_update=venue_in, current_user_id=current_user.id)

@router.delete("/{venue_id}", response_model=Dict[str, bool])
async def delete_venue_endpoint(
    venue_id: int,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    venue_service.delete_venue(db=db, venue_id=venue_id, current_user_id=current_user.id)
    return {"success": True}
