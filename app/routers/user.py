# app/routers/user.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.authorization import UserRole
from app.core.config import settings
from app.core.database import get_db
from app.core.dependencies import get_current_admin, get_current_user
from app.models.user import User
from app.schemas.base import MessageResponse
from app.schemas.progress import CourseProgressDetail
from app.schemas.user import (
    AchievementResponse,
    CompleteLessonRequest,
    CourseMembershipResponse,
    EnrollmentResponse,
    EnrollRequest,
    LessonCompletionResponse,
    UserListResponse,
    UserResponse,
    UserUpdate,
)
from app.services.progress import ProgressService
from app.services.user import UserService

router = APIRouter(
    prefix="/api/users",
    tags=["Users"],
    responses={404: {"description": "Not found"}},
)


@router.get("/", response_model=UserListResponse)
def list_users(
    page: int = Query(1, ge=1),
    size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    search: Optional[str] = Query(None, description="Search by name or email"),
    role: Optional[UserRole] = Query(None),
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    """
    Get all users (admin only).
    """
    users, pagination = UserService(db).get_users(
        page=page, size=size, search=search, role=role
    )
    return {"users": users, **pagination}


@router.post("/enroll", response_model=EnrollmentResponse)
def enroll_in_course(
    enroll_in: EnrollRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    enrollment = UserService(db).enroll(enroll_in.course_id, current_user)
    return EnrollmentResponse(
        message="Successfully enrolled in course",
        course_id=enrollment.course_id,
        enrolled_at=enrollment.enrolled_at,
    )


@router.post("/complete-lesson", response_model=LessonCompletionResponse)
def complete_lesson(
    completion_in: CompleteLessonRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Mark a lesson of a course as completed by the current user."""
    completion, new_achievements = UserService(db).complete_lesson(
        completion_in.course_id, completion_in.lesson_id, current_user
    )
    return LessonCompletionResponse(
        message="Lesson marked as completed",
        course_id=completion.course_id,
        lesson_id=completion.lesson_id,
        completed_at=completion.completed_at,
        new_achievements=[
            AchievementResponse.model_validate(a) for a in new_achievements
        ],
    )


@router.get("/{user_id}", response_model=UserResponse)
def read_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Retrieve a single user by their ID (own profile or admin).
    """
    return UserService(db).get_visible_user(user_id, current_user)


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    user_in: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Update a user (own profile or admin).
    Only admins can change role and account status.
    """
    return UserService(db).update_user(user_id, user_in, current_user)


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    UserService(db).delete_user(user_id, current_user)
    return {"message": "User removed"}


@router.post("/{user_id}/enroll/{course_id}", response_model=CourseMembershipResponse)
def enroll_user(
    user_id: int,
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Enroll a user in a course (self or admin)."""
    enrollment = UserService(db).enroll_user(user_id, course_id, current_user)
    return CourseMembershipResponse(
        message="Successfully enrolled in course",
        user_id=user_id,
        course_id=course_id,
        course_title=enrollment.course.title,
    )


@router.delete(
    "/{user_id}/unenroll/{course_id}", response_model=CourseMembershipResponse
)
def unenroll_user(
    user_id: int,
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Unenroll a user from a course (self or admin).
    The user's completed lessons of that course are removed as well.
    """
    course = UserService(db).unenroll_user(user_id, course_id, current_user)
    return CourseMembershipResponse(
        message="Successfully unenrolled from course",
        user_id=user_id,
        course_id=course_id,
        course_title=course.title,
    )


@router.get("/{user_id}/progress/{course_id}", response_model=CourseProgressDetail)
def get_course_progress(
    user_id: int,
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Get a user's lesson progress in one course.
    Open to the user, admins and instructors.
    """
    return ProgressService(db).get_course_progress(user_id, course_id, current_user)
