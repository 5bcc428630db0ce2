import logging
import secrets
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy import func

from app.core.config import settings
from app.models import team as team_model
from app.models import team_member as team_member_model
from app.models import player as player_model
from app.models import user as user_model
from app.models import match as match_model
from app.models.enums import TeamRole, SkillLevel
from app.schemas import team_schemas

logger = logging.getLogger(__name__)

INVITE_CODE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
INVITE_CODE_LENGTH = 8

def generate_invite_code() -> str:
    return "".join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(INVITE_CODE_LENGTH))

def get_membership(db: Session, user_id: int, team_id: int) -> Optional[team_member_model.TeamMember]:
    return db.query(team_member_model.TeamMember).filter(
        team_member_model.TeamMember.user_id == user_id,
        team_member_model.TeamMember.team_id == team_id,
    ).first()

def require_membership(db: Session, user_id: int, team_id: int) -> team_member_model.TeamMember:
    membership = get_membership(db, user_id, team_id)
    if not membership:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return membership

def require_admin(db: Session, user_id: int, team_id: int, detail: str = "Forbidden") -> team_member_model.TeamMember:
    membership = get_membership(db, user_id, team_id)
    if not membership or membership.role != TeamRole.ADMIN.value:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
    return membership

def _add_member(db: Session, team: team_model.Team, user: user_model.User, role: TeamRole) -> team_member_model.TeamMember:
    # Every member gets a player profile in the team
    member = team_member_model.TeamMember(user_id=user.id, team_id=team.id, role=role.value)
    db.add(member)
    db.flush()
    db.add(player_model.Player(
        team_id=team.id,
        team_member_id=member.id,
        display_name=user.name,
        skill_level=SkillLevel.INTERMEDIATE.value,
    ))
    return member

def create_team(db: Session, team_in: team_schemas.TeamCreate, creator: user_model.User) -> team_model.Team:
    invite_code = generate_invite_code()
    while db.query(team_model.Team).filter(team_model.Team.invite_code == invite_code).first():
        invite_code = generate_invite_code()

    db_team = team_model.Team(
        name=team_in.name,
        description=team_in.description,
        invite_code=invite_code,
    )
    db.add(db_team)
    db.flush()
    _add_member(db, db_team, creator, TeamRole.ADMIN)
    db.commit()
    db.refresh(db_team)
    logger.info("Team %s created by user %s", db_team.id, creator.id)
    return db_team

def get_user_teams(db: Session, user_id: int) -> List[team_schemas.TeamSummary]:
    memberships = db.query(team_member_model.TeamMember)\
        .filter(team_member_model.TeamMember.user_id == user_id)\
        .order_by(team_member_model.TeamMember.joined_at, team_member_model.TeamMember.id)\
        .all()

    summaries = []
    for membership in memberships:
        team = membership.team
        member_count = db.query(func.count(team_member_model.TeamMember.id))\
            .filter(team_member_model.TeamMember.team_id == team.id).scalar()
        match_count = db.query(func.count(match_model.Match.id))\
            .filter(match_model.Match.team_id == team.id).scalar()
        summaries.append(team_schemas.TeamSummary(
            **team_schemas.TeamRead.model_validate(team).model_dump(),
            role=membership.role,
            member_count=member_count,
            match_count=match_count,
        ))
    return summaries

def join_team_with_invite(db: Session, invite_code: str, user: user_model.User) -> team_model.Team:
    code = (invite_code or "").strip().upper()
    if not code:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invite code is required")

    team = db.query(team_model.Team).filter(team_model.Team.invite_code == code).first()
    if not team:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invalid invite code. Team not found.")

    if get_membership(db, user.id, team.id):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="You are already a member of this team.")

    member_count = db.query(team_member_model.TeamMember)\
        .filter(team_member_model.TeamMember.team_id == team.id).count()
    if member_count >= settings.MAX_TEAM_MEMBERS:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="This team has reached the maximum number of members.")

    _add_member(db, team, user, TeamRole.MEMBER)
    db.commit()
    db.refresh(team)
    logger.info("User %s joined team %s", user.id, team.id)
    return team

def list_members(db: Session, team_id: int, current_user_id: int) -> List[team_member_model.TeamMember]:
    require_membership(db, current_user_id, team_id)
    return db.query(team_member_model.TeamMember)\
        .filter(team_member_model.TeamMember.team_id == team_id)\
        .order_by(team_member_model.TeamMember.joined_at, team_member_model.TeamMember.id)\
        .all()

def _admin_count(db: Session, team_id: int) -> int:
    return db.query(team_member_model.TeamMember).filter(
        team_member_model.TeamMember.team_id == team_id,
        team_member_model.TeamMember.role == TeamRole.ADMIN.value,
    ).count()

def _get_member_in_team(db: Session, team_id: int, member_id: int) -> team_member_model.TeamMember:
    member = db.query(team_member_model.TeamMember).filter(
        team_member_model.TeamMember.id == member_id,
        team_member_model.TeamMember.team_id == team_id,
    ).first()
    if not member:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Member not found in this team")
    return member

def update_member_role(db: Session, team_id: int, role_update: team_schemas.MemberRoleUpdate, current_user_id: int) -> team_member_model.TeamMember:
    require_admin(db, current_user_id, team_id)
    member = _get_member_in_team(db, team_id, role_update.member_id)

    new_role = TeamRole(role_update.role).value
    if member.role == TeamRole.ADMIN.value and new_role == TeamRole.MEMBER.value:
        if _admin_count(db, team_id) <= 1:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot remove the last admin")

    member.role = new_role
    db.commit()
    db.refresh(member)
    return member

def remove_member(db: Session, team_id: int, member_id: int, current_user_id: int) -> bool:
    requester = require_membership(db, current_user_id, team_id)
    member = _get_member_in_team(db, team_id, member_id)

    is_self_removal = member.user_id == current_user_id
    if not is_self_removal and requester.role != TeamRole.ADMIN.value:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    if member.role == TeamRole.ADMIN.value and _admin_count(db, team_id) <= 1:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot remove the last admin")

    db.delete(member)
    db.commit()
    logger.info("Member %s removed from team %s by user %s", member_id, team_id, current_user_id)
    return True
