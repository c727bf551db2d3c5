# app/core/authorization.py
"""
Role model and capability checks.

Every "who may do what" decision of the API lives here so routers and
services never compare role strings themselves. The checks only rely on the
``id``/``role`` attributes of the acting user and the ``created_by`` attribute
of the resource, so they work with ORM instances as well as plain objects.
"""

import logging
from enum import Enum

from fastapi import HTTPException, status

logger = logging.getLogger(__name__)


class UserRole(str, Enum):
    STUDENT = "student"
    INSTRUCTOR = "instructor"
    ADMIN = "admin"


AUTHOR_ROLES = frozenset({UserRole.INSTRUCTOR, UserRole.ADMIN})


def _role(user) -> UserRole:
    return UserRole(user.role)


def is_admin(user) -> bool:
    return user is not None and _role(user) == UserRole.ADMIN


def can_author(user) -> bool:
    """Instructors and admins may create courses and quizzes."""
    return user is not None and _role(user) in AUTHOR_ROLES


def can_manage_course(user, course) -> bool:
    if is_admin(user):
        return True
    return can_author(user) and course.created_by == user.id


def can_create_quiz_for(user, course) -> bool:
    """A quiz may be attached to a course only by the course owner or an admin."""
    return can_manage_course(user, course)


def can_manage_quiz(user, quiz) -> bool:
    if is_admin(user):
        return True
    return can_author(user) and quiz.created_by == user.id


def can_view_user_data(user, owner_id: int) -> bool:
    """Results, progress and profiles are visible to their owner and admins."""
    return is_admin(user) or (user is not None and user.id == owner_id)


def can_view_course_progress(user, owner_id: int) -> bool:
    """Per-course lesson progress is also open to instructors."""
    return can_view_user_data(user, owner_id) or can_author(user)


def can_change_roles(user) -> bool:
    return is_admin(user)


def ensure_allowed(allowed: bool, detail: str, user=None) -> None:
    """Raise 403 when a capability check failed."""
    if allowed:
        return
    if user is not None:
        logger.warning(f"Authorization denied for user {user.id}: {detail}")
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
