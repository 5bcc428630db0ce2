from typing import List

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.models import venue as venue_model
from app.schemas import venue_schemas
from app.services import team_service

def list_venues(db: Session, team_id: int, current_user_id: int) -> List[venue_schemas.VenueWithCount]:
    team_service.require_membership(db, current_user_id, team_id)
    venues = db.query(venue_model.Venue)\
        .filter(venue_model.Venue.team_id == team_id)\
        .order_by(venue_model.Venue.name)\
        .all()
    return [
        venue_schemas.VenueWithCount(
            **venue_schemas.VenueRead.model_validate(venue).model_dump(),
            match_count=len(venue.matches),
        )
        for venue in venues
    ]

def create_venue(db: Session, venue_in: venue_schemas.VenueCreate, current_user_id: int) -> venue_model.Venue:
    team_service.require_admin(db, current_user_id, venue_in.team_id, detail="Only team admins can add venues")
    db_venue = venue_model.Venue(**venue_in.model_dump())
    db.add(db_venue)
    db.commit()
    db.refresh(db_venue)
    return db_venue

def _get_venue_as_admin(db: Session, venue_id: int, current_user_id: int) -> venue_model.Venue:
    db_venue = db.query(venue_model.Venue).filter(venue_model.Venue.id == venue_id).first()
    if not db_venue:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Venue not found")
    team_service.require_admin(db, current_user_id, db_venue.team_id)
    return db_venue

def update_venue(db: Session, venue_id: int, venue_update: venue_schemas.VenueUpdate, current_user_id: int) -> venue_model.Venue:
    db_venue = _get_venue_as_admin(db, venue_id, current_user_id)

    update_data = venue_update.model_dump(exclude_unset=True)
    for key, value in update_data.items():
        # name and courts cannot be cleared
        if key in ("name", "courts") and value is None:
            continue
        setattr(db_venue, key, value)

    db.commit()
    db.refresh(db_venue)
    return db_venue

def delete_venue(db: Session, venue_id: int, current_user_id: int) -> bool:
    db_venue = _get_venue_as_admin(db, venue_id, current_user_id)
    # Matches played there are kept, only detached
    for match in db_venue.matches:
        match.venue_id = None
    db.delete(db_venue)
    db.commit()
    return True
