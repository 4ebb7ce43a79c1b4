import logging

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from school_api.auth.dependencies import require_admin
from school_api.models.classroom import Classroom
from school_api.routes.common import MessageResponse, RecordId, apply_changes, get_db, storage_failure
from school_api.services.enrollment import get_classroom_or_404, get_school_or_404

logger = logging.getLogger(__name__)

router = APIRouter(tags=['classrooms'], dependencies=[Depends(require_admin)])


def _normalize_resources(value: list[str]) -> list[str]:
    return [resource.strip() for resource in value if resource.strip()]


class CreateClassroomRequest(BaseModel):
    name: str
    school_id: RecordId
    capacity: int
    resources: list[str] = []

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Classroom name is required.')
        return normalized

    @field_validator('capacity')
    @classmethod
    def validate_capacity(cls, value: int) -> int:
        if value < 1:
            raise ValueError('Capacity must be at least 1.')
        return value

    @field_validator('resources')
    @classmethod
    def validate_resources(cls, value: list[str]) -> list[str]:
        return _normalize_resources(value)


class UpdateClassroomRequest(BaseModel):
    name: str | None = None
    school_id: RecordId | None = None
    capacity: int | None = None
    resources: list[str] | None = None

    @field_validator('capacity')
    @classmethod
    def validate_capacity(cls, value: int | None) -> int | None:
        if value is not None and value < 1:
            raise ValueError('Capacity must be at least 1.')
        return value

    @field_validator('resources')
    @classmethod
    def validate_resources(cls, value: list[str] | None) -> list[str] | None:
        return None if value is None else _normalize_resources(value)


class SchoolSummary(BaseModel):
    id: int
    name: str
    address: str
    contact: str
    description: str

    class Config:
        from_attributes = True


class ClassroomResponse(BaseModel):
    id: int
    name: str
    school_id: int
    school: SchoolSummary | None = None
    capacity: int
    resources: list[str]

    class Config:
        from_attributes = True


@router.post('', response_model=ClassroomResponse, status_code=status.HTTP_201_CREATED)
@router.post('/', response_model=ClassroomResponse, status_code=status.HTTP_201_CREATED, include_in_schema=False)
def create_classroom(data: CreateClassroomRequest, db: Session = Depends(get_db)):
    try:
        get_school_or_404(db, data.school_id)
        classroom = Classroom(**data.model_dump())
        db.add(classroom)
        db.commit()
        db.refresh(classroom)
    except SQLAlchemyError as exc:
        raise storage_failure(db, exc, 'Error creating classroom') from exc

    logger.info('Created classroom %s in school %s', classroom.id, classroom.school_id)
    return classroom


@router.get('', response_model=list[ClassroomResponse])
@router.get('/', response_model=list[ClassroomResponse], include_in_schema=False)
def list_classrooms(db: Session = Depends(get_db)):
    try:
        return db.query(Classroom).order_by(Classroom.id.asc()).all()
    except SQLAlchemyError as exc:
        raise storage_failure(db, exc, 'Error fetching classrooms') from exc


@router.get('/{classroom_id}', response_model=ClassroomResponse)
def get_classroom(classroom_id: int, db: Session = Depends(get_db)):
    try:
        return get_classroom_or_404(db, classroom_id)
    except SQLAlchemyError as exc:
        raise storage_failure(db, exc, 'Error fetching classroom') from exc


@router.put('/{classroom_id}', response_model=ClassroomResponse)
def update_classroom(classroom_id: int, data: UpdateClassroomRequest, db: Session = Depends(get_db)):
    try:
        classroom = get_classroom_or_404(db, classroom_id)
        apply_changes(classroom, data.model_dump(exclude_unset=True, exclude_none=True))
        db.commit()
        db.refresh(classroom)
    except SQLAlchemyError as exc:
        raise storage_failure(db, exc, 'Error updating classroom') from exc

    return classroom


@router.delete('/{classroom_id}', response_model=MessageResponse)
def delete_classroom(classroom_id: int, db: Session = Depends(get_db)):
    try:
        classroom = get_classroom_or_404(db, classroom_id)
        db.delete(classroom)
        db.commit()
    except SQLAlchemyError as exc:
        raise storage_failure(db, exc, 'Error deleting classroom') from exc

    logger.info('Deleted classroom %s', classroom_id)
    return MessageResponse(message='Classroom deleted successfully')
