# app/models/quiz_result.py
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    UniqueConstraint,
)
from sqlalchemy.sql import func

from app.core.database import Base, JSONType


class QuizResult(Base):
    __tablename__ = "quiz_results"
    __table_args__ = (
        # Serializes concurrent submissions: two requests that read the same
        # attempt count cannot both store the same attempt number.
        UniqueConstraint(
            "user_id", "quiz_id", "attempt_number", name="uq_quiz_results_attempt"
        ),
        Index("ix_quiz_results_user_quiz", "user_id", "quiz_id"),
    )

    id = Column(Integer, primary_key=True, index=True)

    # Relationships
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    quiz_id = Column(Integer, ForeignKey("quizzes.id"), nullable=False, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False, index=True)

    # Attempt data
    answers = Column(
        JSONType, nullable=False
    )  # [{"question_id": 1, "selected_option": 2, "is_correct": true, "points_awarded": 1}, ...]
    score = Column(Integer, nullable=False)  # points earned
    percentage = Column(Integer, nullable=False)  # 0-100
    total_questions = Column(Integer, nullable=False)
    correct_answers = Column(Integer, nullable=False)
    passed = Column(Boolean, nullable=False)
    attempt_number = Column(Integer, nullable=False)  # 1-based per user and quiz

    # Time tracking
    time_spent = Column(Integer, nullable=True)  # seconds
    started_at = Column(DateTime(timezone=True), nullable=False)
    completed_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    @property
    def quiz_title(self):
        return self.quiz.title if self.quiz else None

    @property
    def course_title(self):
        return self.course.title if self.course else None

    def __repr__(self):
        return (
            f"<QuizResult(id={self.id}, user_id={self.user_id}, quiz_id={self.quiz_id}, "
            f"attempt={self.attempt_number}, percentage={self.percentage})>"
        )
