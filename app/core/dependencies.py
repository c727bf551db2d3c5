import logging
from typing import Optional

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.authorization import UserRole
from app.core.database import get_db
from app.core.security import jwt_manager
from app.models.user import User

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def _user_from_payload(payload: dict, db: Session) -> Optional[User]:
    if "user_id" not in payload:
        return None
    return db.query(User).filter(User.id == payload.get("user_id")).first()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Security(security),
    db: Session = Depends(get_db),
) -> User:
    """
    Dependency that requires a valid Bearer token and returns the active user.
    Raises 401 Unauthorized if the token is missing, invalid, or the user is not found.
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized, no token provided",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = jwt_manager.verify_token(credentials.credentials, "access")
    user = _user_from_payload(payload, db)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Inactive user"
        )

    return user


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """
    Dependency that returns a user if a valid token is provided, or None otherwise.
    Invalid or expired tokens are treated as anonymous access.
    """
    if not credentials:
        return None

    try:
        payload = jwt_manager.verify_token(credentials.credentials, "access")
    except HTTPException:
        return None

    user = _user_from_payload(payload, db)
    if not user or not user.is_active:
        return None

    return user


def require_roles(*roles: UserRole):
    """
    Dependency factory to require one of the given roles.
    Usage: Depends(require_roles(UserRole.INSTRUCTOR, UserRole.ADMIN))
    """
    allowed = frozenset(roles)
    names = " or ".join(role.value for role in roles)

    async def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if UserRole(current_user.role) not in allowed:
            logger.warning(
                f"User {current_user.id} ({current_user.role}) denied, requires {names}"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Not authorized as {names}",
            )
        return current_user

    return role_checker


get_current_instructor = require_roles(UserRole.INSTRUCTOR, UserRole.ADMIN)
get_current_admin = require_roles(UserRole.ADMIN)
