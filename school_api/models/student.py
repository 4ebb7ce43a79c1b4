"""Student model definitions."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from school_api.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Student(Base):
    """Represents a student and their current placement."""
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String)
    last_name = Column(String)
    school_id = Column(Integer, ForeignKey("schools.id"), nullable=True, index=True)
    classroom_id = Column(Integer, ForeignKey("classrooms.id"), nullable=True)
    enrollment_date = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    transfer_date = Column(DateTime(timezone=True), nullable=True)
