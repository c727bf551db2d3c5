# app/routers/quiz.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.core.authorization import can_manage_quiz, ensure_allowed
from app.core.database import get_db
from app.core.dependencies import (
    get_current_instructor,
    get_current_user,
    get_optional_user,
)
from app.models.user import User
from app.schemas.base import MessageResponse
from app.schemas.quiz import (
    QuizCreate,
    QuizFullResponse,
    QuizPublicResponse,
    QuizResultListResponse,
    QuizResultResponse,
    QuizSubmission,
    QuizUpdate,
    SubmissionResponse,
    SubmissionSummary,
)
from app.services.quiz import QuizService
from app.services.quiz_attempt import QuizAttemptService

router = APIRouter(
    prefix="/api/quiz",
    tags=["Quizzes"],
    responses={404: {"description": "Not found"}},
)


# ==================== Student Endpoints ====================


@router.get("/course/{course_id}", response_model=List[QuizPublicResponse])
def list_course_quizzes(course_id: int, db: Session = Depends(get_db)):
    """
    Get all active quizzes for a course.
    Correct answers are never included.
    """
    return QuizService(db).get_course_quizzes(course_id)


@router.post("/submit", response_model=SubmissionResponse, status_code=201)
def submit_quiz(
    submission: QuizSubmission,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Submit answers for a quiz.
    Answers are matched to questions by position.
    """
    quiz_result = QuizAttemptService(db).submit_attempt(submission, current_user)
    return SubmissionResponse(
        message="Quiz submitted successfully",
        result=SubmissionSummary.model_validate(quiz_result),
    )


@router.get("/results/{user_id}", response_model=List[QuizResultResponse])
def get_user_results(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Get quiz results for a user, newest first.
    Users can only view their own results, unless they're admin.
    """
    return QuizAttemptService(db).get_user_results(user_id, current_user)


@router.get("/{quiz_id}", response_model=QuizPublicResponse)
def get_quiz(
    quiz_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    """
    Get a single quiz without correct answers.
    Inactive quizzes are only visible to the people who manage them.
    """
    quiz = QuizService(db).get_quiz_or_404(quiz_id)

    if not quiz.is_active and not can_manage_quiz(current_user, quiz):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Quiz not found",
        )

    return quiz


@router.get("/{quiz_id}/attempts/me", response_model=List[QuizResultResponse])
def get_my_attempts(
    quiz_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Get the current user's attempts at a quiz, first attempt first."""
    return QuizAttemptService(db).get_own_attempts(quiz_id, current_user)


# ==================== Instructor Endpoints ====================


@router.post("/", response_model=QuizFullResponse, status_code=201)
def create_quiz(
    quiz_in: QuizCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_instructor),
):
    """
    Create a new quiz.
    Instructors can only add quizzes to their own courses; admins to any course.
    """
    return QuizService(db).create_quiz(quiz_in, current_user)


@router.get("/{quiz_id}/manage", response_model=QuizFullResponse)
def get_quiz_for_management(
    quiz_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_instructor),
):
    """Get a quiz including its answer key (quiz owner or admin)."""
    quiz = QuizService(db).get_quiz_or_404(quiz_id)
    ensure_allowed(
        can_manage_quiz(current_user, quiz),
        "Not authorized to manage this quiz",
        current_user,
    )
    return quiz


@router.get("/{quiz_id}/results", response_model=QuizResultListResponse)
def get_quiz_results(
    quiz_id: int,
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_instructor),
):
    """Get every attempt recorded for a quiz (quiz owner or admin)."""
    results, pagination = QuizAttemptService(db).get_quiz_results(
        quiz_id, current_user, page=page, size=size
    )
    return {"results": results, **pagination}


@router.put("/{quiz_id}", response_model=QuizFullResponse)
def update_quiz(
    quiz_id: int,
    quiz_in: QuizUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_instructor),
):
    """
    Update a quiz.
    Once attempts exist, questions and passing score are frozen.
    """
    return QuizService(db).update_quiz(quiz_id, quiz_in, current_user)


@router.delete("/{quiz_id}", response_model=MessageResponse)
def delete_quiz(
    quiz_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_instructor),
):
    """
    Delete a quiz.
    Quizzes that have been attempted cannot be deleted; deactivate them instead.
    """
    QuizService(db).delete_quiz(quiz_id, current_user)
    return {"message": "Quiz removed"}
