# app/routers/progress.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import get_current_user
from app.models.user import User
from app.schemas.progress import ProgressResponse
from app.services.progress import ProgressService

router = APIRouter(
    prefix="/api/progress",
    tags=["Progress"],
    responses={404: {"description": "Not found"}},
)


@router.get("/{user_id}", response_model=ProgressResponse)
def get_progress(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Get the learning progress of a user.
    Users can only view their own progress, unless they're admin.
    """
    return ProgressService(db).get_progress(user_id, current_user)
