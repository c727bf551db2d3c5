# app/models/relations.py

from sqlalchemy.orm import relationship

# Import all relevant models
from .achievement import Achievement
from .course import Course
from .enrollment import Enrollment, LessonCompletion
from .lesson import Lesson
from .quiz import Quiz, QuizOption, QuizQuestion
from .quiz_result import QuizResult
from .user import User


def setup_relationships():
    """
    Configure all SQLAlchemy relationships between models.
    """

    # --- Course Content Relationships ---

    # 1. Course to Lessons (One-to-Many, ordered)
    Course.lessons = relationship(
        "Lesson",
        back_populates="course",
        cascade="all, delete-orphan",
        order_by="Lesson.order",
    )
    Lesson.course = relationship("Course", back_populates="lessons")

    # 2. Course to Quizzes (One-to-Many)
    Course.quizzes = relationship(
        "Quiz",
        back_populates="course",
        cascade="all, delete-orphan",
    )
    Quiz.course = relationship("Course", back_populates="quizzes")

    # --- Quiz Relationships ---

    # 3. Quiz to Questions (One-to-Many, positional)
    Quiz.questions = relationship(
        "QuizQuestion",
        back_populates="quiz",
        cascade="all, delete-orphan",
        order_by="QuizQuestion.position",
    )
    QuizQuestion.quiz = relationship("Quiz", back_populates="questions")

    # 4. Question to Options (One-to-Many, positional)
    QuizQuestion.options = relationship(
        "QuizOption",
        back_populates="question",
        cascade="all, delete-orphan",
        order_by="QuizOption.position",
    )
    QuizOption.question = relationship("QuizQuestion", back_populates="options")

    # 5. Quiz to Results (One-to-Many, never cascaded: results outlive edits)
    Quiz.results = relationship(
        "QuizResult",
        back_populates="quiz",
        order_by="QuizResult.attempt_number",
    )
    QuizResult.quiz = relationship("Quiz", back_populates="results")
    QuizResult.course = relationship("Course")

    # --- User Relationships ---

    # 6. User to Quiz Results (One-to-Many)
    User.quiz_results = relationship(
        "QuizResult",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    QuizResult.user = relationship("User", back_populates="quiz_results")

    # 7. Enrollments (User <-> Course)
    User.enrollments = relationship(
        "Enrollment",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    Enrollment.user = relationship("User", back_populates="enrollments")
    Course.enrollments = relationship(
        "Enrollment",
        back_populates="course",
        cascade="all, delete-orphan",
    )
    Enrollment.course = relationship("Course", back_populates="enrollments")

    # 8. Lesson completions
    User.lesson_completions = relationship(
        "LessonCompletion",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="LessonCompletion.completed_at.desc()",
    )
    LessonCompletion.user = relationship("User", back_populates="lesson_completions")
    Lesson.completions = relationship(
        "LessonCompletion",
        back_populates="lesson",
        cascade="all, delete-orphan",
    )
    LessonCompletion.lesson = relationship("Lesson", back_populates="completions")
    LessonCompletion.course = relationship("Course")

    # 9. Achievements (One-to-Many, in award order)
    User.achievements = relationship(
        "Achievement",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="Achievement.id",
    )
    Achievement.user = relationship("User", back_populates="achievements")
