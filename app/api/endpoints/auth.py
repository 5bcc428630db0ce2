from typing import Dict

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.services import auth_service
from app.core import security
from app.schemas import auth_schemas
from app.api.dependencies import get_db

router = APIRouter()

@router.post("/register", response_model=Dict[str, bool], status_code=status.HTTP_201_CREATED)
async def register_endpoint(
    user_in: auth_schemas.RegisterRequest,
    db: Session = Depends(get_db),
):
    auth_service.register_user(db=db, user_in=user_in)
    return {"success": True}

@router.post("/login", response_model=auth_schemas.Token)
async def login_endpoint(
    credentials: auth_schemas.LoginRequest,
    db: Session = Depends(get_db),
):
    user = auth_service.authenticate_user(db=db, email=credentials.email, password=credentials.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return auth_schemas.Token(access_token=security.create_access_token(user.email), token_type="bearer")
