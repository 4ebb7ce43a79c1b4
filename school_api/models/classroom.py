"""Classroom model definitions."""

from sqlalchemy import JSON, Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from school_api.database import Base
from school_api.models.school import School


class Classroom(Base):
    """Represents a classroom owned by a school."""
    __tablename__ = "classrooms"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    school_id = Column(Integer, ForeignKey("schools.id"), nullable=False, index=True)
    capacity = Column(Integer, nullable=False)
    resources = Column(JSON, nullable=False, default=list)

    school = relationship(School, lazy="selectin")
