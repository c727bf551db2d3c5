"""
Pytest configuration and fixtures for testing.
Each test runs against a fresh SQLite database through FastAPI's TestClient.
"""

import os
import tempfile

# Settings are read at import time, so the environment must be ready first
_TMP_DIR = tempfile.mkdtemp(prefix="e-learning-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["RATE_LIMIT_STORAGE_URI"] = "memory://"
os.environ["LOG_FILE"] = os.path.join(_TMP_DIR, "app.log")
os.environ["DEBUG"] = "false"
os.environ["JWT_SECRET"] = "test-secret-key"
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest
from fastapi.testclient import TestClient

from app.core.authorization import UserRole
from app.core.database import Base, SessionLocal, engine
from app.core.hasher import PasswordHelper
from app.core.security import jwt_manager
from app.models import Course, Lesson, User
from main import app

DEFAULT_PASSWORD = "Password123"


@pytest.fixture(autouse=True)
def setup_database():
    """Recreate every table before each test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    """Create test client (lifespan is not run, tables come from setup_database)."""
    return TestClient(app)


@pytest.fixture
def make_user(db):
    """Factory creating users directly in the database."""
    counter = {"n": 0}

    def _make_user(role=UserRole.STUDENT, email=None, full_name=None, **kwargs):
        counter["n"] += 1
        user = User(
            email=email or f"user{counter['n']}@example.com",
            full_name=full_name or f"Test User {counter['n']}",
            hashed_password=PasswordHelper.hash_password(DEFAULT_PASSWORD),
            role=role,
            **kwargs,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def student(make_user):
    return make_user(UserRole.STUDENT, email="student@example.com", full_name="Sam Student")


@pytest.fixture
def other_student(make_user):
    return make_user(UserRole.STUDENT, email="other@example.com", full_name="Olive Other")


@pytest.fixture
def instructor(make_user):
    return make_user(
        UserRole.INSTRUCTOR, email="instructor@example.com", full_name="Ivy Instructor"
    )


@pytest.fixture
def other_instructor(make_user):
    return make_user(
        UserRole.INSTRUCTOR, email="instructor2@example.com", full_name="Ian Instructor"
    )


@pytest.fixture
def admin(make_user):
    return make_user(UserRole.ADMIN, email="admin@example.com", full_name="Ada Admin")


def auth_headers(user):
    """Bearer header for a user."""
    return {"Authorization": f"Bearer {jwt_manager.create_access_token(user)}"}


@pytest.fixture
def make_course(db):
    """Factory creating a course (with lessons) owned by the given user."""

    def _make_course(owner, title="Python Basics", lessons=2, **kwargs):
        values = {
            "description": "Learn the basics",
            "category": "Programming",
            "level": "Beginner",
            "price": 49.99,
        }
        values.update(kwargs)
        course = Course(
            title=title,
            instructor_name=owner.full_name,
            created_by=owner.id,
            **values,
        )
        course.lessons = [
            Lesson(
                title=f"Lesson {i + 1}",
                description=f"Lesson {i + 1} description",
                duration="10 min",
                order=i + 1,
            )
            for i in range(lessons)
        ]
        db.add(course)
        db.commit()
        db.refresh(course)
        return course

    return _make_course


@pytest.fixture
def course(make_course, instructor):
    return make_course(instructor)


def quiz_payload(course_id, **overrides):
    """
    Two one-point questions; the correct option of the first is index 1,
    of the second index 0.
    """
    payload = {
        "title": "Basics Check",
        "description": "Quick check",
        "courseId": course_id,
        "passingScore": 70,
        "maxAttempts": 3,
        "timeLimit": 15,
        "questions": [
            {
                "question": "What is 2 + 2?",
                "options": [
                    {"text": "3", "isCorrect": False},
                    {"text": "4", "isCorrect": True},
                ],
            },
            {
                "question": "Python is dynamically typed?",
                "options": [
                    {"text": "Yes", "isCorrect": True},
                    {"text": "No", "isCorrect": False},
                ],
            },
        ],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def quiz(client, course, instructor):
    """A quiz created through the API by the course owner."""
    response = client.post(
        "/api/quiz/", json=quiz_payload(course.id), headers=auth_headers(instructor)
    )
    assert response.status_code == 201, response.text
    return response.json()
