from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.models import comment as comment_model
from app.schemas import match_schemas
from app.services import team_service
from app.services.match_service import get_match_or_404

MAX_COMMENT_LENGTH = 500

def add_comment(db: Session, match_id: int, comment_in: match_schemas.CommentCreate, current_user_id: int) -> comment_model.Comment:
    db_match = get_match_or_404(db, match_id)
    team_service.require_membership(db, current_user_id, db_match.team_id)

    content = (comment_in.content or "").strip()
    if not content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Comment cannot be empty")
    if len(content) > MAX_COMMENT_LENGTH:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Comment too long")

    db_comment = comment_model.Comment(match_id=match_id, user_id=current_user_id, content=content)
    db.add(db_comment)
    db.commit()
    db.refresh(db_comment)
    return db_comment

def delete_comment(db: Session, match_id: int, comment_id: int, current_user_id: int) -> bool:
    db_comment = db.query(comment_model.Comment).filter(comment_model.Comment.id == comment_id).first()
    if not db_comment or db_comment.match_id != match_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")

    team_service.require_membership(db, current_user_id, db_comment.match.team_id)
    if db_comment.user_id != current_user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    db.delete(db_comment)
    db.commit()
    return True
