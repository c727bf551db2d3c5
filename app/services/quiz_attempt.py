# app/services/quiz_attempt.py
import logging
import math
from datetime import datetime, timezone
from typing import List, Tuple

from fastapi import HTTPException, status
from sqlalchemy import and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from app.core.authorization import can_manage_quiz, can_view_user_data, ensure_allowed
from app.models.quiz import Quiz, QuizQuestion
from app.models.quiz_result import QuizResult
from app.models.user import User
from app.schemas.quiz import QuizSubmission
from app.services.quiz_scoring import grade_submission

logger = logging.getLogger(__name__)


class QuizAttemptService:
    def __init__(self, db: Session):
        self.db = db

    def count_attempts(self, user_id: int, quiz_id: int) -> int:
        """Number of stored results for a user on a quiz"""
        return (
            self.db.query(QuizResult)
            .filter(and_(QuizResult.user_id == user_id, QuizResult.quiz_id == quiz_id))
            .count()
        )

    def submit_attempt(self, submission: QuizSubmission, current_user: User) -> QuizResult:
        """Grade a submission and store it as the caller's next attempt"""
        quiz = (
            self.db.query(Quiz)
            .options(selectinload(Quiz.questions).selectinload(QuizQuestion.options))
            .filter(Quiz.id == submission.quiz_id)
            .first()
        )

        if not quiz:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Quiz not found",
            )

        if not quiz.is_active:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Quiz is not active",
            )

        total_questions = len(quiz.questions)
        if len(submission.answers) > total_questions:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Expected at most {total_questions} answers, got {len(submission.answers)}",
            )

        # Check if user has exceeded max attempts
        previous_attempts = self.count_attempts(current_user.id, quiz.id)
        if previous_attempts >= quiz.max_attempts:
            logger.info(
                f"User {current_user.id} rejected on quiz {quiz.id}: "
                f"{previous_attempts}/{quiz.max_attempts} attempts used"
            )
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Maximum attempts ({quiz.max_attempts}) exceeded for this quiz",
            )

        graded = grade_submission(
            quiz.questions,
            [answer.selected_option for answer in submission.answers],
            quiz.passing_score,
        )

        completed_at = datetime.now(timezone.utc)
        quiz_result = QuizResult(
            user_id=current_user.id,
            quiz_id=quiz.id,
            course_id=quiz.course_id,
            answers=[answer.model_dump() for answer in graded.answers],
            score=graded.score,
            percentage=graded.percentage,
            total_questions=graded.total_questions,
            correct_answers=graded.correct_answers,
            passed=graded.passed,
            attempt_number=previous_attempts + 1,
            time_spent=submission.time_spent,
            started_at=submission.started_at or completed_at,
            completed_at=completed_at,
        )
        self.db.add(quiz_result)

        try:
            self.db.commit()
        except IntegrityError:
            # A concurrent submission claimed this attempt number first
            self.db.rollback()
            logger.warning(
                f"Concurrent submission for user {current_user.id} on quiz {quiz.id} "
                f"(attempt {previous_attempts + 1})"
            )
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Another submission for this quiz was recorded at the same time. Please retry.",
            )

        self.db.refresh(quiz_result)

        logger.info(
            f"Quiz {quiz.id} attempt {quiz_result.attempt_number} by user {current_user.id}: "
            f"{graded.score}/{graded.total_points} points ({graded.percentage}%), "
            f"passed={graded.passed}"
        )
        return quiz_result

    def get_user_results(self, user_id: int, current_user: User) -> List[QuizResult]:
        """All results of a user, newest first (self or admin)"""
        ensure_allowed(
            can_view_user_data(current_user, user_id),
            "Not authorized to view these results",
            current_user,
        )
        return (
            self.db.query(QuizResult)
            .options(selectinload(QuizResult.quiz), selectinload(QuizResult.course))
            .filter(QuizResult.user_id == user_id)
            .order_by(QuizResult.completed_at.desc(), QuizResult.id.desc())
            .all()
        )

    def get_own_attempts(self, quiz_id: int, current_user: User) -> List[QuizResult]:
        """The caller's attempts on one quiz, in attempt order"""
        return (
            self.db.query(QuizResult)
            .filter(
                and_(
                    QuizResult.quiz_id == quiz_id,
                    QuizResult.user_id == current_user.id,
                )
            )
            .order_by(QuizResult.attempt_number.asc())
            .all()
        )

    def get_quiz_results(
        self,
        quiz_id: int,
        current_user: User,
        page: int = 1,
        size: int = 20,
    ) -> Tuple[List[QuizResult], dict]:
        """Every result for a quiz (quiz manager only)"""
        quiz = self.db.query(Quiz).filter(Quiz.id == quiz_id).first()
        if not quiz:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Quiz not found",
            )
        ensure_allowed(
            can_manage_quiz(current_user, quiz),
            "Not authorized to view results of this quiz",
            current_user,
        )

        query = self.db.query(QuizResult).filter(QuizResult.quiz_id == quiz_id)
        total = query.count()

        # Apply pagination
        offset = (page - 1) * size
        results = (
            query.order_by(QuizResult.user_id.asc(), QuizResult.attempt_number.asc())
            .offset(offset)
            .limit(size)
            .all()
        )

        # Pagination metadata
        total_pages = math.ceil(total / size) if size > 0 else 0
        pagination = {
            "total": total,
            "page": page,
            "size": size,
            "total_pages": total_pages,
        }

        return results, pagination
