import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.core.decorator import db_exception
from app.core.hasher import PasswordHelper
from app.core.security import jwt_manager
from app.models.user import User
from app.schemas.auth import (
    AuthResponse,
    LoginRequest,
    UserRegistrationRequest,
    UserResponse,
)

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self):
        self.password_helper = PasswordHelper()

    @db_exception
    def register_user(self, request: UserRegistrationRequest, db: Session) -> AuthResponse:
        """Create a regular user account and log it in."""
        email = request.email.lower()
        if db.query(User).filter(User.email == email).first():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email already exists",
            )

        user = User(
            name=request.name,
            email=email,
            hashed_password=self.password_helper.hash_password(request.password),
            role="user",
        )
        db.add(user)
        db.commit()
        db.refresh(user)

        logger.info(f"User registered: {user.id}")
        return self._auth_response(user, "User registered successfully")

    def login(self, request: LoginRequest, db: Session) -> AuthResponse:
        user = db.query(User).filter(User.email == request.email.lower()).first()

        if not user or not self.password_helper.check_password(
            request.password, user.hashed_password
        ):
            logger.warning(f"Failed login attempt for: {request.email}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid credentials",
            )

        logger.info(f"User login successful: {user.id}")
        return self._auth_response(user, "Login successful")

    def _auth_response(self, user: User, message: str) -> AuthResponse:
        return AuthResponse(
            success=True,
            message=message,
            access_token=jwt_manager.create_access_token(user),
            token_type="bearer",
            expires_in=int(jwt_manager.get_expiration(user).total_seconds()),
            user=UserResponse.model_validate(user),
        )


auth_service = AuthService()
