# app/services/quiz.py
import logging
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy import and_
from sqlalchemy.orm import Session, selectinload

from app.core.authorization import (
    can_create_quiz_for,
    can_manage_quiz,
    ensure_allowed,
)
from app.core.decorator import db_exception
from app.models.course import Course
from app.models.quiz import Quiz, QuizOption, QuizQuestion
from app.models.quiz_result import QuizResult
from app.models.user import User
from app.schemas.quiz import QuizCreate, QuizQuestionIn, QuizUpdate

logger = logging.getLogger(__name__)

# Fields that define how attempts are graded; frozen once a result exists
SCORING_FIELDS = frozenset({"questions", "passing_score"})
NULLABLE_FIELDS = frozenset({"description"})


class QuizService:
    def __init__(self, db: Session):
        self.db = db

    # ==================== Queries ====================

    def get_quiz(self, quiz_id: int) -> Optional[Quiz]:
        """Get a quiz with its questions and options loaded"""
        return (
            self.db.query(Quiz)
            .options(selectinload(Quiz.questions).selectinload(QuizQuestion.options))
            .filter(Quiz.id == quiz_id)
            .first()
        )

    def get_quiz_or_404(self, quiz_id: int) -> Quiz:
        quiz = self.get_quiz(quiz_id)
        if not quiz:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Quiz not found",
            )
        return quiz

    def get_course_quizzes(self, course_id: int) -> List[Quiz]:
        """Active quizzes of a course, oldest first"""
        return (
            self.db.query(Quiz)
            .options(selectinload(Quiz.questions).selectinload(QuizQuestion.options))
            .filter(and_(Quiz.course_id == course_id, Quiz.is_active == True))
            .order_by(Quiz.created_at.asc(), Quiz.id.asc())
            .all()
        )

    def has_results(self, quiz_id: int) -> bool:
        return (
            self.db.query(QuizResult.id).filter(QuizResult.quiz_id == quiz_id).first()
            is not None
        )

    # ==================== Mutations ====================

    @db_exception("A quiz with this title already exists for this course")
    def create_quiz(self, quiz_in: QuizCreate, current_user: User) -> Quiz:
        """Create a quiz on a course owned by the caller (or any course for admins)"""
        course = self.db.query(Course).filter(Course.id == quiz_in.course_id).first()
        if not course:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Course not found",
            )

        ensure_allowed(
            can_create_quiz_for(current_user, course),
            "Not authorized to add quizzes to this course",
            current_user,
        )
        self._ensure_unique_title(course.id, quiz_in.title)

        quiz = Quiz(
            title=quiz_in.title,
            description=quiz_in.description,
            course_id=course.id,
            created_by=current_user.id,
            time_limit=quiz_in.time_limit,
            passing_score=quiz_in.passing_score,
            max_attempts=quiz_in.max_attempts,
            is_active=quiz_in.is_active,
        )
        self._replace_questions(quiz, quiz_in.questions)

        self.db.add(quiz)
        self.db.commit()
        self.db.refresh(quiz)

        logger.info(
            f"Quiz {quiz.id} '{quiz.title}' created on course {course.id} by user {current_user.id}"
        )
        return quiz

    @db_exception("A quiz with this title already exists for this course")
    def update_quiz(self, quiz_id: int, quiz_in: QuizUpdate, current_user: User) -> Quiz:
        quiz = self.get_quiz_or_404(quiz_id)
        ensure_allowed(
            can_manage_quiz(current_user, quiz),
            "Not authorized to update this quiz",
            current_user,
        )

        data = quiz_in.model_dump(exclude_unset=True)
        changed = {field for field, value in data.items() if value is not None}
        if SCORING_FIELDS.intersection(changed) and self.has_results(quiz.id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Quiz already has attempts; its questions and passing score can no longer be changed",
            )

        if data.get("title") and data["title"] != quiz.title:
            self._ensure_unique_title(quiz.course_id, data["title"], exclude_id=quiz.id)

        for field, value in data.items():
            if field == "questions":
                if quiz_in.questions is not None:
                    self._replace_questions(quiz, quiz_in.questions)
                continue
            if value is None and field not in NULLABLE_FIELDS:
                continue
            setattr(quiz, field, value)

        self.db.commit()
        self.db.refresh(quiz)

        logger.info(f"Quiz {quiz.id} updated by user {current_user.id}: {sorted(data)}")
        return quiz

    def delete_quiz(self, quiz_id: int, current_user: User) -> None:
        quiz = self.get_quiz_or_404(quiz_id)
        ensure_allowed(
            can_manage_quiz(current_user, quiz),
            "Not authorized to delete this quiz",
            current_user,
        )

        if self.has_results(quiz.id):
            logger.info(f"Refused to delete quiz {quiz.id}: attempts exist")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot delete a quiz that students have already attempted. Deactivate it instead.",
            )

        self.db.delete(quiz)
        self.db.commit()
        logger.info(f"Quiz {quiz_id} deleted by user {current_user.id}")

    # ==================== Helpers ====================

    def _ensure_unique_title(
        self, course_id: int, title: str, exclude_id: Optional[int] = None
    ) -> None:
        query = self.db.query(Quiz.id).filter(
            and_(Quiz.course_id == course_id, Quiz.title == title)
        )
        if exclude_id is not None:
            query = query.filter(Quiz.id != exclude_id)

        if query.first() is not None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"A quiz titled '{title}' already exists for this course",
            )

    @staticmethod
    def _replace_questions(quiz: Quiz, questions_in: List[QuizQuestionIn]) -> None:
        quiz.questions = [
            QuizQuestion(
                question=question_in.question,
                points=question_in.points,
                position=position,
                options=[
                    QuizOption(
                        text=option_in.text,
                        is_correct=option_in.is_correct,
                        position=option_position,
                    )
                    for option_position, option_in in enumerate(question_in.options)
                ],
            )
            for position, question_in in enumerate(questions_in)
        ]
        quiz.total_points = sum(question_in.points for question_in in questions_in)
