# app/schemas/progress.py
from datetime import datetime
from typing import List, Optional

from app.schemas.base import CamelModel
from app.schemas.user import AchievementResponse


class QuizResultBrief(CamelModel):
    quiz_id: int
    quiz_title: Optional[str] = None
    course_id: int
    score: int
    percentage: int
    passed: bool
    attempt_number: int
    completed_at: datetime


class CourseProgress(CamelModel):
    course_id: int
    course_title: str
    total_lessons: int
    completed_lessons: int
    progress_percentage: int
    quiz_results: List[QuizResultBrief]


class OverallProgress(CamelModel):
    total_enrolled_courses: int
    total_completed_lessons: int
    total_quizzes_taken: int
    total_quizzes_passed: int
    average_quiz_score: int


class RecentLesson(CamelModel):
    course_id: int
    course_title: Optional[str] = None
    lesson_id: int
    lesson_title: Optional[str] = None
    completed_at: datetime


class RecentActivity(CamelModel):
    recent_lessons: List[RecentLesson]
    recent_quizzes: List[QuizResultBrief]


class ProgressResponse(CamelModel):
    user_id: int
    user_name: str
    overall_progress: OverallProgress
    course_progress: List[CourseProgress]
    achievements: List[AchievementResponse]
    recent_activity: RecentActivity


# ==================== Single course ====================


class CompletedLessonDetail(CamelModel):
    lesson_id: int
    lesson_title: Optional[str] = None
    duration: Optional[str] = None
    completed_at: datetime


class CourseProgressDetail(CamelModel):
    user_id: int
    course_id: int
    course_title: str
    total_lessons: int
    completed_lessons: int
    progress_percentage: int
    completed_lesson_details: List[CompletedLessonDetail]
