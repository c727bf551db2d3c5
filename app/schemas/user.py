# app/schemas/user.py
from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field

from app.core.authorization import UserRole
from app.schemas.base import CamelModel


class UserResponse(CamelModel):
    id: int
    email: str
    full_name: str
    profile_picture: Optional[str] = None
    bio: Optional[str] = None
    role: UserRole
    is_active: bool
    created_at: datetime
    last_login: Optional[datetime] = None


class ProfileUpdate(CamelModel):
    full_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=8, max_length=128)
    profile_picture: Optional[str] = Field(None, max_length=500)
    bio: Optional[str] = Field(None, max_length=1000)


class UserUpdate(ProfileUpdate):
    """Profile fields plus the admin-only ones"""

    role: Optional[UserRole] = None
    is_active: Optional[bool] = None


class UserListResponse(CamelModel):
    users: List[UserResponse]
    total: int
    page: int
    size: int
    total_pages: int


# ==================== Enrollment / Completion ====================


class EnrollRequest(CamelModel):
    course_id: int


class EnrollmentResponse(CamelModel):
    message: str
    course_id: int
    enrolled_at: datetime


class CompleteLessonRequest(CamelModel):
    course_id: int
    lesson_id: int


class AchievementResponse(CamelModel):
    code: str
    title: str
    description: str
    earned_at: datetime


class LessonCompletionResponse(CamelModel):
    message: str
    course_id: int
    lesson_id: int
    completed_at: datetime
    new_achievements: List[AchievementResponse] = []


class CourseMembershipResponse(CamelModel):
    """Result of enrolling or unenrolling a given user"""

    message: str
    user_id: int
    course_id: int
    course_title: str
