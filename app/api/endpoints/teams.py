from typing import List, Dict

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.services import team_service, auth_service
from app.models import user as user_model
from app.schemas import team_schemas
from app.api.dependencies import get_db

router = APIRouter()

@router.post("/", response_model=team_schemas.TeamRead, status_code=status.HTTP_201_CREATED)
async def create_team_endpoint(
    team_in: team_schemas.TeamCreate,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return team_service.create_team(db=db, team_in=team_in, creator=current_user)

@router.get("/", response_model=List[team_schemas.TeamSummary])
async def get_user_teams_endpoint(
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return team_service.get_user_teams(db=db, user_id=current_user.id)

@router.post("/join", response_model=team_schemas.TeamRead)
async def join_team_endpoint(
    join_in: team_schemas.JoinTeamRequest,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return team_service.join_team_with_invite(db=db, invite_code=join_in.invite_code, user=current_user)

@router.get("/{team_id}/members", response_model=List[team_schemas.MemberRead])
async def list_members_endpoint(
    team_id: int,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return team_service.list_members(db=db, team_id=team_id, current_user_id=current_user.id)

@router.patch("/{team_id}/members", response_model=team_schemas.MemberRead)
async def update_member_role_endpoint(
    team_id: int,
    role_in: team_schemas.MemberRoleUpdate,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return team_service.update_member_role(db=db, team_id=team_id, role_update=role_in, current_user_id=current_user.id)

@router.delete("/{team_id}/members/{member_id}", response_model=Dict[str, bool])
async def remove_member_endpoint(
    team_id: int,
    member_id: int,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    team_service.remove_member(db=db, team_id=team_id, member_id=member_id, current_user_id=current_user.id)
    return {"success": True}
