"""User model definitions."""

from sqlalchemy import Column, Integer, String

from school_api.auth import passwords
from school_api.database import Base

ADMIN_ROLE = "admin"
SUPERADMIN_ROLE = "superadmin"
USER_ROLES = (ADMIN_ROLE, SUPERADMIN_ROLE)


class User(Base):
    """Represents an administrative account."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(String, nullable=False, default=ADMIN_ROLE)  # admin/superadmin

    def set_password(self, password: str) -> None:
        self.hashed_password = passwords.hash_password(password)

    def check_password(self, password: str) -> bool:
        return passwords.verify_password(password, self.hashed_password or "")
