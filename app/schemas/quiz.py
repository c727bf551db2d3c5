# app/schemas/quiz.py
from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from app.core.config import settings
from app.schemas.base import CamelModel

# ==================== Authoring Schemas (include answer key) ====================


class QuizOptionIn(CamelModel):
    text: str = Field(..., min_length=1)
    is_correct: bool = False


class QuizQuestionIn(CamelModel):
    question: str = Field(..., min_length=1)
    options: List[QuizOptionIn] = Field(..., min_length=2)
    points: int = Field(default=1, ge=1)

    @field_validator("options")
    @classmethod
    def require_correct_option(cls, options):
        if not any(option.is_correct for option in options):
            raise ValueError("Each question must have at least one correct option")
        return options


class QuizCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    course_id: int
    questions: List[QuizQuestionIn] = Field(..., min_length=1)
    time_limit: int = Field(
        default=settings.quiz_default_time_limit, ge=1, description="Minutes"
    )
    passing_score: int = Field(
        default=settings.quiz_default_passing_score, ge=0, le=100
    )
    max_attempts: int = Field(default=settings.quiz_default_max_attempts, ge=1)
    is_active: bool = True


class QuizUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    questions: Optional[List[QuizQuestionIn]] = Field(None, min_length=1)
    time_limit: Optional[int] = Field(None, ge=1)
    passing_score: Optional[int] = Field(None, ge=0, le=100)
    max_attempts: Optional[int] = Field(None, ge=1)
    is_active: Optional[bool] = None


class QuizOptionFull(CamelModel):
    id: int
    text: str
    is_correct: bool


class QuizQuestionFull(CamelModel):
    id: int
    question: str
    points: int
    options: List[QuizOptionFull]


class QuizBaseResponse(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    course_id: int
    time_limit: int
    passing_score: int
    max_attempts: int
    total_points: int
    is_active: bool
    created_by: int
    created_at: datetime
    updated_at: datetime


class QuizFullResponse(QuizBaseResponse):
    """Quiz with answer key - quiz managers only"""

    questions: List[QuizQuestionFull]


# ==================== Student Schemas (no answer key) ====================


class QuizOptionPublic(CamelModel):
    text: str


class QuizQuestionPublic(CamelModel):
    id: int
    question: str
    points: int
    options: List[QuizOptionPublic]


class QuizPublicResponse(QuizBaseResponse):
    questions: List[QuizQuestionPublic]


# ==================== Submission Schemas ====================


class SubmittedAnswer(CamelModel):
    # Out-of-range or null selections are graded as incorrect, not rejected
    selected_option: Optional[int] = None


class QuizSubmission(CamelModel):
    quiz_id: int
    answers: List[SubmittedAnswer]
    time_spent: Optional[int] = Field(None, ge=0, description="Seconds")
    started_at: Optional[datetime] = None


class AnswerRecord(CamelModel):
    question_id: int
    selected_option: Optional[int] = None
    is_correct: bool
    points_awarded: int


class GradedAttempt(CamelModel):
    """Outcome of grading one submission against a quiz's answer key"""

    answers: List[AnswerRecord]
    score: int
    total_points: int
    percentage: int
    correct_answers: int
    total_questions: int
    passed: bool


class SubmissionSummary(CamelModel):
    score: int
    percentage: int
    correct_answers: int
    total_questions: int
    passed: bool
    attempt_number: int


class SubmissionResponse(CamelModel):
    message: str
    result: SubmissionSummary


# ==================== Result Schemas ====================


class QuizResultResponse(CamelModel):
    id: int
    user_id: int
    quiz_id: int
    quiz_title: Optional[str] = None
    course_id: int
    course_title: Optional[str] = None
    answers: List[AnswerRecord]
    score: int
    percentage: int
    total_questions: int
    correct_answers: int
    time_spent: Optional[int] = None
    passed: bool
    attempt_number: int
    started_at: datetime
    completed_at: datetime


class QuizResultListResponse(CamelModel):
    results: List[QuizResultResponse]
    total: int
    page: int
    size: int
    total_pages: int
