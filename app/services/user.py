# app/services/user.py
import logging
import math
from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.authorization import (
    UserRole,
    can_change_roles,
    can_view_user_data,
    ensure_allowed,
)
from app.core.decorator import db_exception
from app.core.hasher import PasswordHelper
from app.models.achievement import Achievement
from app.models.course import Course
from app.models.enrollment import Enrollment, LessonCompletion
from app.models.lesson import Lesson
from app.models.quiz import Quiz
from app.models.user import User
from app.schemas.user import ProfileUpdate, UserUpdate
from app.services.course import CourseService

logger = logging.getLogger(__name__)

ADMIN_ONLY_FIELDS = frozenset({"role", "is_active"})
NULLABLE_FIELDS = frozenset({"profile_picture", "bio"})

ACHIEVEMENTS = {
    "first_lesson": ("First Steps", "Completed your first lesson!"),
    "ten_lessons": ("Learning Momentum", "Completed 10 lessons!"),
    "first_enrollment": ("Learning Journey Begins", "Enrolled in your first course!"),
}


class UserService:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> Optional[User]:
        """
        Retrieves a single user by their ID.
        """
        return self.db.query(User).filter(User.id == user_id).first()

    def get_user_or_404(self, user_id: int) -> User:
        user = self.get_user(user_id)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="User not found"
            )
        return user

    def get_visible_user(self, user_id: int, current_user: User) -> User:
        """Fetch a user the caller is allowed to see (self or admin)"""
        ensure_allowed(
            can_view_user_data(current_user, user_id),
            "Not authorized to access this user profile",
            current_user,
        )
        return self.get_user_or_404(user_id)

    def get_users(
        self,
        page: int = 1,
        size: int = 10,
        search: Optional[str] = None,
        role: Optional[UserRole] = None,
    ) -> Tuple[List[User], dict]:
        """Admin listing, newest accounts first"""
        query = self.db.query(User)

        if search:
            search_pattern = f"%{search}%"
            query = query.filter(
                or_(
                    User.full_name.ilike(search_pattern),
                    User.email.ilike(search_pattern),
                )
            )

        if role:
            query = query.filter(User.role == role)

        total = query.count()
        users = (
            query.order_by(User.created_at.desc(), User.id.desc())
            .offset((page - 1) * size)
            .limit(size)
            .all()
        )

        pagination = {
            "total": total,
            "page": page,
            "size": size,
            "total_pages": math.ceil(total / size) if size > 0 else 0,
        }
        return users, pagination

    def update_profile(self, profile_in: ProfileUpdate, current_user: User) -> User:
        return self.update_user(current_user.id, profile_in, current_user)

    @db_exception("Email already in use")
    def update_user(
        self, user_id: int, user_in: ProfileUpdate, current_user: User
    ) -> User:
        """Update a user (self or admin). Only admins may change role or status."""
        user = self.get_visible_user(user_id, current_user)
        data = user_in.model_dump(exclude_unset=True)

        if ADMIN_ONLY_FIELDS.intersection(data):
            ensure_allowed(
                can_change_roles(current_user),
                "Only admins can change roles or account status",
                current_user,
            )

        if data.get("email"):
            email = data["email"].lower()
            taken = (
                self.db.query(User.id)
                .filter(User.email == email, User.id != user.id)
                .first()
            )
            if taken:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Email already in use",
                )
            data["email"] = email

        demoting = data.get("role") not in (None, UserRole.ADMIN) or data.get(
            "is_active"
        ) is False
        if demoting and UserRole(user.role) == UserRole.ADMIN:
            self._ensure_not_last_admin(user)

        for field, value in data.items():
            if value is None and field not in NULLABLE_FIELDS:
                continue
            if field == "password":
                user.hashed_password = PasswordHelper.hash_password(value)
                continue
            setattr(user, field, value)

        self.db.commit()
        self.db.refresh(user)

        if "role" in data:
            logger.info(f"User {user.id} role set to {user.role} by {current_user.id}")
        return user

    @db_exception("User still owns content")
    def delete_user(self, user_id: int, current_user: User) -> None:
        """Delete a user together with their enrollments, completions and results"""
        user = self.get_visible_user(user_id, current_user)

        if UserRole(user.role) == UserRole.ADMIN:
            self._ensure_not_last_admin(user)

        owns_content = (
            self.db.query(Course.id).filter(Course.created_by == user.id).first()
            or self.db.query(Quiz.id).filter(Quiz.created_by == user.id).first()
        )
        if owns_content:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="User still owns courses or quizzes; delete or reassign them first",
            )

        self.db.delete(user)
        self.db.commit()
        logger.info(f"User {user_id} deleted by user {current_user.id}")

    def _ensure_not_last_admin(self, user: User) -> None:
        other_admins = (
            self.db.query(User)
            .filter(
                User.role == UserRole.ADMIN,
                User.is_active.is_(True),
                User.id != user.id,
            )
            .count()
        )
        if other_admins == 0:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot remove the last admin",
            )

    # ==================== Enrollment / Completion ====================

    def enroll(self, course_id: int, current_user: User) -> Enrollment:
        return self.enroll_user(current_user.id, course_id, current_user)

    @db_exception("Already enrolled in this course")
    def enroll_user(
        self, user_id: int, course_id: int, current_user: User
    ) -> Enrollment:
        """Enroll a user (self or admin) in a course"""
        ensure_allowed(
            can_view_user_data(current_user, user_id),
            "Not authorized to enroll this user",
            current_user,
        )
        self.get_user_or_404(user_id)
        course = CourseService(self.db).get_course_or_404(course_id)

        if self._get_enrollment(user_id, course_id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Already enrolled in this course",
            )

        enrollment = Enrollment(user_id=user_id, course_id=course_id)
        self.db.add(enrollment)
        course.students = Course.students + 1
        self.db.commit()
        self.db.refresh(enrollment)

        logger.info(f"User {user_id} enrolled in course {course_id}")
        return enrollment

    @db_exception("Could not unenroll from this course")
    def unenroll_user(self, user_id: int, course_id: int, current_user: User) -> Course:
        """
        Remove a user's enrollment together with their lesson completions for
        that course. Quiz results are kept.
        """
        ensure_allowed(
            can_view_user_data(current_user, user_id),
            "Not authorized to unenroll this user",
            current_user,
        )
        self.get_user_or_404(user_id)
        course = CourseService(self.db).get_course_or_404(course_id)

        enrollment = self._get_enrollment(user_id, course_id)
        if not enrollment:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="User not enrolled in this course",
            )

        removed = (
            self.db.query(LessonCompletion)
            .filter(
                LessonCompletion.user_id == user_id,
                LessonCompletion.course_id == course_id,
            )
            .delete(synchronize_session=False)
        )
        self.db.delete(enrollment)
        self.db.query(Course).filter(
            Course.id == course_id, Course.students > 0
        ).update({Course.students: Course.students - 1}, synchronize_session=False)
        self.db.commit()
        self.db.refresh(course)

        logger.info(
            f"User {user_id} unenrolled from course {course_id} "
            f"({removed} lesson completions removed)"
        )
        return course

    def _get_enrollment(self, user_id: int, course_id: int) -> Optional[Enrollment]:
        return (
            self.db.query(Enrollment)
            .filter(Enrollment.user_id == user_id, Enrollment.course_id == course_id)
            .first()
        )

    @db_exception("Lesson already marked as completed")
    def complete_lesson(
        self, course_id: int, lesson_id: int, current_user: User
    ) -> Tuple[LessonCompletion, List[Achievement]]:
        """Record a completed lesson and award any achievement it unlocks"""
        lesson = (
            self.db.query(Lesson)
            .filter(Lesson.id == lesson_id, Lesson.course_id == course_id)
            .first()
        )
        if not lesson:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Lesson not found in this course",
            )

        existing = (
            self.db.query(LessonCompletion)
            .filter(
                LessonCompletion.user_id == current_user.id,
                LessonCompletion.lesson_id == lesson_id,
            )
            .first()
        )
        if existing:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Lesson already marked as completed",
            )

        completion = LessonCompletion(
            user_id=current_user.id, course_id=course_id, lesson_id=lesson_id
        )
        self.db.add(completion)
        self.db.flush()

        awarded = self._award_achievements(current_user.id)
        self.db.commit()
        self.db.refresh(completion)
        for achievement in awarded:
            self.db.refresh(achievement)

        return completion, awarded

    def _award_achievements(self, user_id: int) -> List[Achievement]:
        completed = (
            self.db.query(LessonCompletion)
            .filter(LessonCompletion.user_id == user_id)
            .count()
        )
        enrolled = (
            self.db.query(Enrollment).filter(Enrollment.user_id == user_id).count()
        )
        held = {
            code
            for (code,) in self.db.query(Achievement.code).filter(
                Achievement.user_id == user_id
            )
        }

        earned = []
        if completed == 1:
            earned.append("first_lesson")
        if completed == 10:
            earned.append("ten_lessons")
        if enrolled == 1:
            earned.append("first_enrollment")

        awarded = []
        for code in earned:
            if code in held:
                continue
            title, description = ACHIEVEMENTS[code]
            achievement = Achievement(
                user_id=user_id, code=code, title=title, description=description
            )
            self.db.add(achievement)
            awarded.append(achievement)

        if awarded:
            logger.info(
                f"User {user_id} earned achievements: "
                f"{', '.join(a.code for a in awarded)}"
            )
        return awarded
