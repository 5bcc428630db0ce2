from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.services import stats_service, auth_service
from app.models import user as user_model
from app.schemas import stats_schemas
from app.api.dependencies import get_db

router = APIRouter()

@router.get("/", response_model=stats_schemas.TeamStats)
async def get_team_stats_endpoint(
    team_id: int,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return stats_service.get_team_stats(db=db, team_id=team_id, current_user_id=current_user.id)
