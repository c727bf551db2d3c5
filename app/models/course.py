# app/models/course.py
from sqlalchemy import (
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.sql import func

from app.core.database import Base


class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)

    # Basic Info
    title = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=False)
    image = Column(Text, nullable=True)
    category = Column(String(100), nullable=False, index=True)
    badge = Column(String(50), nullable=True)
    level = Column(String(20), nullable=False, index=True)  # Beginner, Intermediate, Advanced
    duration = Column(String(50), nullable=True)

    # Instructor (display name captured at creation)
    instructor_name = Column(String(100), nullable=False)
    instructor_image = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Pricing
    price = Column(Numeric(10, 2), nullable=False, default=0.00)
    original_price = Column(Numeric(10, 2), nullable=True)

    # Stats
    rating = Column(Float, nullable=False, default=0)
    reviews = Column(Integer, nullable=False, default=0)
    students = Column(Integer, nullable=False, default=0)

    # Timestamps
    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self):
        return f"<Course(id={self.id}, title='{self.title}', price={self.price})>"
