from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.dependencies import get_current_user
from app.core.limiter import limiter
from app.models.user import User
from app.schemas.auth import (
    AuthResponse,
    LoginRequest,
    UserRegistrationRequest,
    UserResponse,
)
from app.services.auth import auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse)
async def register_user(
    registration: UserRegistrationRequest, db: Session = Depends(get_db)
) -> AuthResponse:
    return auth_service.register_user(registration, db)


@router.post("/login", response_model=AuthResponse)
@limiter.limit(settings.login_rate_limit)
async def login(
    request: Request, credentials: LoginRequest, db: Session = Depends(get_db)
) -> AuthResponse:
    return auth_service.login(credentials, db)


@router.get("/profile", response_model=UserResponse)
async def get_profile(
    current_user: Annotated[User, Depends(get_current_user)],
) -> UserResponse:
    """Get current user information"""
    return UserResponse.model_validate(current_user)
