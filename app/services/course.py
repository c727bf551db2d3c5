# app/services/course.py
import logging
import math
from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.core.authorization import can_manage_course, ensure_allowed
from app.core.decorator import db_exception
from app.models.course import Course
from app.models.lesson import Lesson
from app.models.quiz_result import QuizResult
from app.models.user import User
from app.schemas.course import CourseCreate, CourseUpdate, LessonIn

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {
    "created_at": Course.created_at,
    "price": Course.price,
    "rating": Course.rating,
    "title": Course.title,
    "students": Course.students,
}
NULLABLE_FIELDS = frozenset(
    {"original_price", "image", "badge", "duration", "instructor_image"}
)


class CourseService:
    def __init__(self, db: Session):
        self.db = db

    @db_exception()
    def create_course(self, course_in: CourseCreate, current_user: User) -> Course:
        """Create a new course owned by the caller"""
        data = course_in.model_dump(exclude={"lessons", "level"})
        course = Course(
            **data,
            level=course_in.level.value,
            instructor_name=current_user.full_name,
            created_by=current_user.id,
        )
        course.lessons = self._build_lessons(course_in.lessons)

        self.db.add(course)
        self.db.commit()
        self.db.refresh(course)

        logger.info(f"Course {course.id} '{course.title}' created by user {current_user.id}")
        return course

    def get_course(self, course_id: int) -> Optional[Course]:
        """Get a course by ID"""
        return self.db.query(Course).filter(Course.id == course_id).first()

    def get_course_or_404(self, course_id: int) -> Course:
        course = self.get_course(course_id)
        if not course:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Course not found",
            )
        return course

    def get_courses(
        self,
        page: int = 1,
        limit: int = 10,
        category: Optional[str] = None,
        level: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        min_rating: Optional[float] = None,
        search: Optional[str] = None,
        sort_by: str = "created_at",
        order: str = "desc",
    ) -> Tuple[List[Course], dict]:
        """Get list of courses with pagination, filters and sorting"""
        query = self.db.query(Course)

        if category:
            query = query.filter(Course.category == category)

        if level:
            query = query.filter(Course.level == level)

        if min_price is not None:
            query = query.filter(Course.price >= min_price)

        if max_price is not None:
            query = query.filter(Course.price <= max_price)

        if min_rating is not None:
            query = query.filter(Course.rating >= min_rating)

        # Search by title or description
        if search:
            search_pattern = f"%{search}%"
            query = query.filter(
                (Course.title.ilike(search_pattern))
                | (Course.description.ilike(search_pattern))
            )

        total = query.count()

        sort_column = SORTABLE_FIELDS[sort_by]
        sort_clause = sort_column.asc() if order == "asc" else sort_column.desc()

        # Apply pagination
        offset = (page - 1) * limit
        courses = (
            query.order_by(sort_clause, Course.id.asc())
            .offset(offset)
            .limit(limit)
            .all()
        )

        total_pages = math.ceil(total / limit) if limit > 0 else 0
        pagination = {
            "total": total,
            "page": page,
            "limit": limit,
            "total_pages": total_pages,
        }

        return courses, pagination

    def get_categories(self) -> List[str]:
        rows = self.db.query(Course.category).distinct().order_by(Course.category).all()
        return [row[0] for row in rows]

    @db_exception()
    def update_course(
        self, course_id: int, course_in: CourseUpdate, current_user: User
    ) -> Course:
        """Update a course (owner or admin)"""
        course = self.get_course_or_404(course_id)
        ensure_allowed(
            can_manage_course(current_user, course),
            "Not authorized to update this course",
            current_user,
        )

        for field, value in course_in.model_dump(exclude_unset=True).items():
            if field == "lessons":
                if course_in.lessons is not None:
                    course.lessons = self._build_lessons(course_in.lessons)
                continue
            if value is None and field not in NULLABLE_FIELDS:
                continue
            if field == "level":
                value = course_in.level.value
            setattr(course, field, value)

        self.db.commit()
        self.db.refresh(course)

        return course

    def delete_course(self, course_id: int, current_user: User) -> None:
        """Delete a course with its lessons and quizzes (owner or admin)"""
        course = self.get_course_or_404(course_id)
        ensure_allowed(
            can_manage_course(current_user, course),
            "Not authorized to delete this course",
            current_user,
        )

        has_results = (
            self.db.query(QuizResult.id)
            .filter(QuizResult.course_id == course_id)
            .first()
            is not None
        )
        if has_results:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot delete a course whose quizzes have recorded attempts",
            )

        self.db.delete(course)
        self.db.commit()
        logger.info(f"Course {course_id} deleted by user {current_user.id}")

    @staticmethod
    def _build_lessons(lessons_in: List[LessonIn]) -> List[Lesson]:
        return [
            Lesson(**lesson_in.model_dump(), order=index + 1)
            for index, lesson_in in enumerate(lessons_in)
        ]
