"""
Models package initialization
Import all models and setup relationships
"""

from .achievement import Achievement
from .course import Course
from .enrollment import Enrollment, LessonCompletion
from .lesson import Lesson
from .quiz import Quiz, QuizOption, QuizQuestion
from .quiz_result import QuizResult

# Import and setup relationships
from .relations import setup_relationships
from .user import User

# Setup all relationships after models are imported
setup_relationships()

# Make models available at package level
__all__ = [
    "Achievement",
    "Course",
    "Enrollment",
    "Lesson",
    "LessonCompletion",
    "Quiz",
    "QuizOption",
    "QuizQuestion",
    "QuizResult",
    "User",
]
