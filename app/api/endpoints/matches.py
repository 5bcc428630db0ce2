from typing import List, Dict, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.services import match_service, comment_service, auth_service
from app.models import user as user_model
from app.models.enums import MatchStatus
from app.schemas import match_schemas
from app.api.dependencies import get_db

router = APIRouter()

@router.post("/", response_model=match_schemas.MatchRead, status_code=status.HTTP_201_CREATED)
async def create_match_endpoint(
    match_in: match_schemas.MatchCreate,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return match_service.create_match(db=db, match_in=match_in, current_user_id=current_user.id)

@router.get("/", response_model=List[match_schemas.MatchRead])
async def get_team_matches_endpoint(
    team_id: int,
    match_status: Optional[MatchStatus] = Query(None, alias="status"),
    limit: int = 50,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return match_service.get_team_matches(
        db=db,
        team_id=team_id,
        current_user_id=current_user.id,
        match_status=match_status.value if match_status else None,
        limit=limit,
    )

@router.get("/{match_id}", response_model=match_schemas.MatchDetail)
async def get_match_details_endpoint(
    match_id: int,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return match_service.get_match_details(db=db, match_id=match_id, current_user_id=current_user.id)

@router.patch("/{match_id}", response_model=match_schemas.MatchRead)
async def update_match_endpoint(
    match_id: int,
    match_in: match_schemas.MatchUpdate,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return match_service.update_match(db=db, match_id=match_id, match_update=match_in, current_user_id=current_user.id)

@router.delete("/{match_id}", response_model=Dict[str, bool])
async def delete_match_endpoint(
    match_id: int,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    match_service.delete_match(db=db, match_id=match_id, current_user_id=current_user.id)
    return {"success": True}

@router.post("/{match_id}/score", response_model=match_schemas.ScoreResult)
async def record_set_score_endpoint(
    match_id: int,
    score_in: match_schemas.ScoreUpdate,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return match_service.record_set_score(db=db, match_id=match_id, score=score_in, current_user_id=current_user.id)

@router.post("/{match_id}/comments", response_model=match_schemas.CommentRead, status_code=status.HTTP_201_CREATED)
async def add_comment_endpoint(
    match_id: int,
    comment_in: match_schemas.CommentCreate,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return comment_service.add_comment(db=db, match_id=match_id, comment_in=comment_in, current_user_id=current_user.id)

@router.delete("/{match_id}/comments/{comment_id}", response_model=Dict[str, bool])
async def delete_comment_endpoint(
    match_id: int,
    comment_id: int,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    comment_service.delete_comment(db=db, match_id=match_id, comment_id=comment_id, current_user_id=current_user.id)
    return {"success": True}
