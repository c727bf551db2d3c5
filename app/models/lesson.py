# app/models/lesson.py
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func

from app.core.database import Base, JSONType


class Lesson(Base):
    __tablename__ = "lessons"

    id = Column(Integer, primary_key=True, index=True)

    course_id = Column(
        Integer,
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    duration = Column(String(50), nullable=False)
    video_url = Column(Text, nullable=True)
    content = Column(Text, nullable=True)
    resources_urls = Column(JSONType, nullable=False, default=list)  # ["https://...", ...]

    # 1-based position inside the course
    order = Column(Integer, nullable=False)

    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self):
        return f"<Lesson(id={self.id}, course_id={self.course_id}, order={self.order})>"
