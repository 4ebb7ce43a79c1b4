import logging
from typing import Annotated

from fastapi import HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from school_api.database import MAX_ROW_ID, SessionLocal

logger = logging.getLogger(__name__)

DATABASE_UNAVAILABLE = 'Database unavailable. Verify DATABASE_URL and database credentials.'

RecordId = Annotated[int, Field(ge=1, le=MAX_ROW_ID)]


class MessageResponse(BaseModel):
    message: str


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def storage_failure(db: Session, exc: SQLAlchemyError, message: str) -> HTTPException:
    """Roll back ``db`` and translate a storage error into an HTTP error."""
    db.rollback()
    if isinstance(exc, OperationalError):
        logger.exception('Database unavailable')
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=DATABASE_UNAVAILABLE)

    logger.warning('%s: %s', message, exc)
    error = getattr(exc, 'orig', None) or exc
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={'message': message, 'error': str(error)},
    )


def apply_changes(instance, changes: dict) -> None:
    for field, value in changes.items():
        setattr(instance, field, value)
