import logging
from datetime import datetime

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from school_api.auth.dependencies import authenticate, require_admin
from school_api.models.student import Student
from school_api.database import is_storable_id
from school_api.routes.common import MessageResponse, RecordId, apply_changes, get_db, storage_failure
from school_api.services.enrollment import (
    enroll_student,
    get_student_or_404,
    resolve_placement,
    transfer_student,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=['students'])


def _strip_name(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


class EnrollStudentRequest(BaseModel):
    school_id: RecordId
    classroom_id: RecordId
    first_name: str | None = None
    last_name: str | None = None

    @field_validator('first_name', 'last_name')
    @classmethod
    def validate_names(cls, value: str | None) -> str | None:
        return _strip_name(value)


class TransferStudentRequest(BaseModel):
    classroom_id: RecordId


class CreateStudentRequest(BaseModel):
    first_name: str
    last_name: str
    school_id: RecordId | None = None
    classroom_id: RecordId | None = None

    @field_validator('first_name', 'last_name')
    @classmethod
    def validate_names(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('First and last name are required.')
        return normalized


class UpdateStudentRequest(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    school_id: RecordId | None = None
    classroom_id: RecordId | None = None

    @field_validator('first_name', 'last_name')
    @classmethod
    def validate_names(cls, value: str | None) -> str | None:
        return _strip_name(value)


class StudentResponse(BaseModel):
    id: int
    first_name: str | None = None
    last_name: str | None = None
    school_id: int | None = None
    classroom_id: int | None = None
    enrollment_date: datetime
    transfer_date: datetime | None = None

    class Config:
        from_attributes = True


@router.post(
    '/enroll',
    response_model=StudentResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def enroll(data: EnrollStudentRequest, db: Session = Depends(get_db)):
    try:
        student = enroll_student(
            db,
            school_id=data.school_id,
            classroom_id=data.classroom_id,
            first_name=data.first_name,
            last_name=data.last_name,
        )
        db.commit()
        db.refresh(student)
    except SQLAlchemyError as exc:
        raise storage_failure(db, exc, 'Error enrolling student') from exc

    return student


@router.put('/transfer/{student_id}', response_model=StudentResponse, dependencies=[Depends(require_admin)])
def transfer(student_id: int, data: TransferStudentRequest, db: Session = Depends(get_db)):
    try:
        student = transfer_student(db, student_id, data.classroom_id)
        db.commit()
        db.refresh(student)
    except SQLAlchemyError as exc:
        raise storage_failure(db, exc, 'Error transferring student') from exc

    return student


@router.post(
    '',
    response_model=StudentResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
@router.post(
    '/',
    response_model=StudentResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
    include_in_schema=False,
)
def create_student(data: CreateStudentRequest, db: Session = Depends(get_db)):
    try:
        school, classroom = resolve_placement(db, data.school_id, data.classroom_id)
        student = Student(
            first_name=data.first_name,
            last_name=data.last_name,
            school_id=school.id if school else None,
            classroom_id=classroom.id if classroom else None,
        )
        db.add(student)
        db.commit()
        db.refresh(student)
    except SQLAlchemyError as exc:
        raise storage_failure(db, exc, 'Error creating student') from exc

    logger.info('Created student %s', student.id)
    return student


@router.get('/school/{school_id}', response_model=list[StudentResponse], dependencies=[Depends(authenticate)])
def list_students_by_school(school_id: int, db: Session = Depends(get_db)):
    if not is_storable_id(school_id):
        return []
    try:
        return db.query(Student).filter(Student.school_id == school_id).order_by(Student.id.asc()).all()
    except SQLAlchemyError as exc:
        raise storage_failure(db, exc, 'Error fetching students') from exc


@router.get('/{student_id}', response_model=StudentResponse, dependencies=[Depends(authenticate)])
def get_student(student_id: int, db: Session = Depends(get_db)):
    try:
        return get_student_or_404(db, student_id)
    except SQLAlchemyError as exc:
        raise storage_failure(db, exc, 'Error fetching student') from exc


@router.put('/{student_id}', response_model=StudentResponse, dependencies=[Depends(require_admin)])
def update_student(student_id: int, data: UpdateStudentRequest, db: Session = Depends(get_db)):
    # Plain field replacement; placement changes go through /transfer.
    try:
        student = get_student_or_404(db, student_id)
        apply_changes(student, data.model_dump(exclude_unset=True))
        db.commit()
        db.refresh(student)
    except SQLAlchemyError as exc:
        raise storage_failure(db, exc, 'Error updating student') from exc

    return student


@router.delete('/{student_id}', response_model=MessageResponse, dependencies=[Depends(require_admin)])
def delete_student(student_id: int, db: Session = Depends(get_db)):
    try:
        student = get_student_or_404(db, student_id)
        db.delete(student)
        db.commit()
    except SQLAlchemyError as exc:
        raise storage_failure(db, exc, 'Error deleting student') from exc

    logger.info('Deleted student %s', student_id)
    return MessageResponse(message='Student deleted successfully')
