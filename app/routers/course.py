# app/routers/course.py
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.dependencies import get_current_instructor
from app.models.user import User
from app.schemas.base import MessageResponse
from app.schemas.course import (
    CourseCreate,
    CourseDetail,
    CourseLevel,
    CourseListResponse,
    CourseUpdate,
)
from app.services.course import CourseService

router = APIRouter(
    prefix="/api/courses",
    tags=["Courses"],
    responses={404: {"description": "Not found"}},
)


@router.get("/categories", response_model=List[str])
def list_categories(db: Session = Depends(get_db)):
    """Get all distinct course categories."""
    return CourseService(db).get_categories()


@router.get("/", response_model=CourseListResponse)
def list_courses(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    category: Optional[str] = Query(None, description="Filter by category"),
    level: Optional[CourseLevel] = Query(None, description="Filter by level"),
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    min_rating: Optional[float] = Query(None, ge=0, le=5),
    search: Optional[str] = Query(None, description="Search by title or description"),
    sort_by: Literal["created_at", "price", "rating", "title", "students"] = Query(
        "created_at"
    ),
    order: Literal["asc", "desc"] = Query("desc"),
    db: Session = Depends(get_db),
):
    """
    Get list of courses with pagination, filters and sorting.
    Lessons are not included; fetch a single course for them.
    """
    courses, pagination = CourseService(db).get_courses(
        page=page,
        limit=limit,
        category=category,
        level=level.value if level else None,
        min_price=min_price,
        max_price=max_price,
        min_rating=min_rating,
        search=search,
        sort_by=sort_by,
        order=order,
    )
    return {"courses": courses, **pagination}


@router.get("/{course_id}", response_model=CourseDetail)
def get_course(course_id: int, db: Session = Depends(get_db)):
    """Get a course by ID, including its lessons."""
    return CourseService(db).get_course_or_404(course_id)


@router.post("/", response_model=CourseDetail, status_code=201)
def create_course(
    course_in: CourseCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_instructor),
):
    """
    Create a new course.
    Only instructors and admins can create courses.
    """
    return CourseService(db).create_course(course_in, current_user)


@router.put("/{course_id}", response_model=CourseDetail)
def update_course(
    course_id: int,
    course_in: CourseUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_instructor),
):
    """
    Update a course.
    Only the course's instructor or an admin can update it.
    A submitted lessons list replaces the existing lessons.
    """
    return CourseService(db).update_course(course_id, course_in, current_user)


@router.delete("/{course_id}", response_model=MessageResponse)
def delete_course(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_instructor),
):
    """
    Delete a course.
    Only the course's instructor or an admin can delete it.
    """
    CourseService(db).delete_course(course_id, current_user)
    return {"message": "Course removed"}
