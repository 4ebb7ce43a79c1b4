"""School model definitions."""

from sqlalchemy import Column, ForeignKey, Integer, String, Table
from sqlalchemy.orm import relationship

from school_api.database import Base
from school_api.models.user import User

school_admins = Table(
    "school_admins",
    Base.metadata,
    Column("school_id", Integer, ForeignKey("schools.id"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id"), primary_key=True),
)


class School(Base):
    """Represents a school and the users administering it."""
    __tablename__ = "schools"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    address = Column(String, nullable=False)
    contact = Column(String, nullable=False)
    description = Column(String, nullable=False)

    admins = relationship(User, secondary=school_admins, lazy="selectin", backref="schools")
