# app/services/progress.py
import logging
from collections import Counter, defaultdict
from typing import List

from sqlalchemy.orm import Session, joinedload, selectinload

from app.core.authorization import (
    can_view_course_progress,
    can_view_user_data,
    ensure_allowed,
)
from app.models.course import Course
from app.models.enrollment import Enrollment, LessonCompletion
from app.models.quiz_result import QuizResult
from app.models.user import User
from app.schemas.progress import (
    CompletedLessonDetail,
    CourseProgress,
    CourseProgressDetail,
    OverallProgress,
    ProgressResponse,
    QuizResultBrief,
    RecentActivity,
    RecentLesson,
)
from app.schemas.user import AchievementResponse
from app.services.course import CourseService
from app.services.quiz_scoring import round_percentage
from app.services.user import UserService

logger = logging.getLogger(__name__)

RECENT_ACTIVITY_LIMIT = 5


class ProgressService:
    def __init__(self, db: Session):
        self.db = db

    def get_progress(self, user_id: int, current_user: User) -> ProgressResponse:
        """
        Build the learning dashboard of a user: lesson progress per enrolled
        course, quiz results grouped by course, overall statistics and the
        most recent lesson completions and quiz attempts.
        """
        ensure_allowed(
            can_view_user_data(current_user, user_id),
            "Not authorized to view this progress",
            current_user,
        )
        user = UserService(self.db).get_user_or_404(user_id)

        enrollments = (
            self.db.query(Enrollment)
            .options(joinedload(Enrollment.course).selectinload(Course.lessons))
            .filter(Enrollment.user_id == user_id)
            .order_by(Enrollment.enrolled_at.asc(), Enrollment.id.asc())
            .all()
        )
        completions = (
            self.db.query(LessonCompletion)
            .options(
                joinedload(LessonCompletion.lesson),
                joinedload(LessonCompletion.course),
            )
            .filter(LessonCompletion.user_id == user_id)
            .order_by(LessonCompletion.completed_at.desc(), LessonCompletion.id.desc())
            .all()
        )
        results = (
            self.db.query(QuizResult)
            .options(selectinload(QuizResult.quiz))
            .filter(QuizResult.user_id == user_id)
            .order_by(QuizResult.completed_at.desc(), QuizResult.id.desc())
            .all()
        )

        completed_per_course = Counter(c.course_id for c in completions)
        results_per_course = defaultdict(list)
        for result in results:
            results_per_course[result.course_id].append(self._brief(result))

        course_progress = []
        for enrollment in enrollments:
            course = enrollment.course
            total_lessons = len(course.lessons)
            completed = completed_per_course[course.id]
            course_progress.append(
                CourseProgress(
                    course_id=course.id,
                    course_title=course.title,
                    total_lessons=total_lessons,
                    completed_lessons=completed,
                    progress_percentage=round_percentage(completed, total_lessons),
                    quiz_results=results_per_course[course.id],
                )
            )

        overall = OverallProgress(
            total_enrolled_courses=len(enrollments),
            total_completed_lessons=len(completions),
            total_quizzes_taken=len(results),
            total_quizzes_passed=sum(1 for r in results if r.passed),
            average_quiz_score=self._average(r.percentage for r in results),
        )

        recent_lessons = [
            RecentLesson(
                course_id=c.course_id,
                course_title=c.course.title if c.course else None,
                lesson_id=c.lesson_id,
                lesson_title=c.lesson.title if c.lesson else None,
                completed_at=c.completed_at,
            )
            for c in completions[:RECENT_ACTIVITY_LIMIT]
        ]
        recent_quizzes = [self._brief(r) for r in results[:RECENT_ACTIVITY_LIMIT]]

        return ProgressResponse(
            user_id=user.id,
            user_name=user.full_name,
            overall_progress=overall,
            course_progress=course_progress,
            achievements=[
                AchievementResponse.model_validate(a) for a in user.achievements
            ],
            recent_activity=RecentActivity(
                recent_lessons=recent_lessons, recent_quizzes=recent_quizzes
            ),
        )

    def get_course_progress(
        self, user_id: int, course_id: int, current_user: User
    ) -> CourseProgressDetail:
        """Lesson progress of one user in one course"""
        ensure_allowed(
            can_view_course_progress(current_user, user_id),
            "Not authorized to view this progress",
            current_user,
        )
        UserService(self.db).get_user_or_404(user_id)
        course = CourseService(self.db).get_course_or_404(course_id)

        completions = (
            self.db.query(LessonCompletion)
            .options(joinedload(LessonCompletion.lesson))
            .filter(
                LessonCompletion.user_id == user_id,
                LessonCompletion.course_id == course_id,
            )
            .order_by(LessonCompletion.completed_at.asc(), LessonCompletion.id.asc())
            .all()
        )
        total_lessons = len(course.lessons)

        return CourseProgressDetail(
            user_id=user_id,
            course_id=course.id,
            course_title=course.title,
            total_lessons=total_lessons,
            completed_lessons=len(completions),
            progress_percentage=round_percentage(len(completions), total_lessons),
            completed_lesson_details=[
                CompletedLessonDetail(
                    lesson_id=c.lesson_id,
                    lesson_title=c.lesson.title if c.lesson else None,
                    duration=c.lesson.duration if c.lesson else None,
                    completed_at=c.completed_at,
                )
                for c in completions
            ],
        )

    @staticmethod
    def _average(percentages) -> int:
        values: List[int] = list(percentages)
        if not values:
            return 0
        # half-up mean of whole percentages
        return (2 * sum(values) + len(values)) // (2 * len(values))

    @staticmethod
    def _brief(result: QuizResult) -> QuizResultBrief:
        return QuizResultBrief.model_validate(result)
