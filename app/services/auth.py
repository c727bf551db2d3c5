# app/services/auth.py
import logging
from datetime import datetime, timezone

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.core.authorization import UserRole
from app.core.decorator import db_exception
from app.core.hasher import PasswordHelper
from app.core.security import jwt_manager
from app.models.user import User
from app.schemas.auth import AuthResponse, LoginRequest, RegisterRequest

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: Session):
        self.db = db
        self.password_helper = PasswordHelper()

    def get_user_by_email(self, email: str):
        return self.db.query(User).filter(User.email == email.lower()).first()

    @db_exception("User already exists")
    def register(self, request: RegisterRequest) -> AuthResponse:
        """Create a student account and log it in"""
        email = request.email.lower()

        if self.get_user_by_email(email):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="User already exists",
            )

        new_user = User(
            full_name=request.full_name,
            email=email,
            hashed_password=self.password_helper.hash_password(request.password),
            role=UserRole.STUDENT,
            is_active=True,
            last_login=datetime.now(timezone.utc),
        )

        self.db.add(new_user)
        self.db.commit()
        self.db.refresh(new_user)

        logger.info(f"User registered successfully: {new_user.id}")
        return self._auth_response(new_user)

    def login(self, request: LoginRequest) -> AuthResponse:
        user = self.get_user_by_email(request.email)

        if not user or not self.password_helper.check_password(
            request.password, user.hashed_password
        ):
            logger.warning(f"Failed login attempt for {request.email}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid email or password",
            )

        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Account is deactivated",
            )

        user.last_login = datetime.now(timezone.utc)
        self.db.commit()
        self.db.refresh(user)

        logger.info(f"User login successful: {user.id}")
        return self._auth_response(user)

    @staticmethod
    def _auth_response(user: User) -> AuthResponse:
        token = jwt_manager.create_access_token(user)
        return AuthResponse(
            id=user.id,
            full_name=user.full_name,
            email=user.email,
            role=user.role,
            profile_picture=user.profile_picture,
            token=token,
            expires_at=jwt_manager.get_token_expiration(token),
        )
