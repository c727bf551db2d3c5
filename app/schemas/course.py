# app/schemas/course.py
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field

from app.schemas.base import CamelModel


class CourseLevel(str, Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


# ==================== Lesson Schemas ====================


class LessonIn(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    duration: str = Field(..., min_length=1, max_length=50)
    video_url: Optional[str] = None
    content: Optional[str] = None
    resources_urls: List[str] = Field(default_factory=list)


class LessonResponse(LessonIn):
    id: int
    course_id: int
    order: int


# ==================== Course Schemas ====================


class CourseBase(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1, max_length=100)
    level: CourseLevel
    price: float = Field(..., ge=0)
    original_price: Optional[float] = Field(None, ge=0)
    image: Optional[str] = None
    badge: Optional[str] = Field(None, max_length=50)
    duration: Optional[str] = Field(None, max_length=50)


class CourseCreate(CourseBase):
    instructor_image: Optional[str] = None
    lessons: List[LessonIn] = Field(default_factory=list)


class CourseUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    level: Optional[CourseLevel] = None
    price: Optional[float] = Field(None, ge=0)
    original_price: Optional[float] = Field(None, ge=0)
    image: Optional[str] = None
    badge: Optional[str] = Field(None, max_length=50)
    duration: Optional[str] = Field(None, max_length=50)
    instructor_image: Optional[str] = None
    lessons: Optional[List[LessonIn]] = None


class CourseSummary(CourseBase):
    id: int
    instructor_name: str
    instructor_image: Optional[str] = None
    created_by: int
    rating: float
    reviews: int
    students: int
    created_at: datetime
    updated_at: datetime


class CourseDetail(CourseSummary):
    lessons: List[LessonResponse]


class CourseListResponse(CamelModel):
    courses: List[CourseSummary]
    total: int
    page: int
    limit: int
    total_pages: int
