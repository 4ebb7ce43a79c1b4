import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from school_api.auth.dependencies import require_admin
from school_api.models.school import School
from school_api.models.user import User
from school_api.routes.common import MessageResponse, RecordId, apply_changes, get_db, storage_failure
from school_api.services.enrollment import get_school_or_404

logger = logging.getLogger(__name__)

router = APIRouter(tags=['schools'], dependencies=[Depends(require_admin)])


def _require_text(value: str) -> str:
    normalized = value.strip()
    if not normalized:
        raise ValueError('Field cannot be blank.')
    return normalized


class CreateSchoolRequest(BaseModel):
    name: str
    address: str
    contact: str
    description: str
    admins: list[RecordId] = []

    @field_validator('name', 'address', 'contact', 'description')
    @classmethod
    def validate_text(cls, value: str) -> str:
        return _require_text(value)


class UpdateSchoolRequest(BaseModel):
    name: str | None = None
    address: str | None = None
    contact: str | None = None
    description: str | None = None
    admins: list[RecordId] | None = None

    @field_validator('name', 'address', 'contact', 'description')
    @classmethod
    def validate_text(cls, value: str | None) -> str | None:
        return None if value is None else _require_text(value)


class SchoolAdminResponse(BaseModel):
    id: int
    username: str
    email: str
    role: str

    class Config:
        from_attributes = True


class SchoolResponse(BaseModel):
    id: int
    name: str
    address: str
    contact: str
    description: str
    admins: list[SchoolAdminResponse] = []

    class Config:
        from_attributes = True


def load_admins(db: Session, admin_ids: list[int], action: str) -> list[User]:
    unique_ids = set(admin_ids)
    if not unique_ids:
        return []

    admins = db.query(User).filter(User.id.in_(unique_ids)).all()
    missing = sorted(unique_ids - {admin.id for admin in admins})
    if missing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={'message': f'Error {action} school', 'error': f'Unknown admin user ids: {missing}'},
        )
    return admins


@router.post('', response_model=SchoolResponse, status_code=status.HTTP_201_CREATED)
@router.post('/', response_model=SchoolResponse, status_code=status.HTTP_201_CREATED, include_in_schema=False)
def create_school(data: CreateSchoolRequest, db: Session = Depends(get_db)):
    try:
        school = School(**data.model_dump(exclude={'admins'}))
        school.admins = load_admins(db, data.admins, 'creating')
        db.add(school)
        db.commit()
        db.refresh(school)
    except SQLAlchemyError as exc:
        raise storage_failure(db, exc, 'Error creating school') from exc

    logger.info('Created school %s', school.id)
    return school


@router.get('', response_model=list[SchoolResponse])
@router.get('/', response_model=list[SchoolResponse], include_in_schema=False)
def list_schools(db: Session = Depends(get_db)):
    try:
        return db.query(School).order_by(School.id.asc()).all()
    except SQLAlchemyError as exc:
        raise storage_failure(db, exc, 'Error fetching schools') from exc


@router.get('/{school_id}', response_model=SchoolResponse)
def get_school(school_id: int, db: Session = Depends(get_db)):
    try:
        return get_school_or_404(db, school_id)
    except SQLAlchemyError as exc:
        raise storage_failure(db, exc, 'Error fetching school') from exc


@router.put('/{school_id}', response_model=SchoolResponse)
def update_school(school_id: int, data: UpdateSchoolRequest, db: Session = Depends(get_db)):
    try:
        school = get_school_or_404(db, school_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        admin_ids = changes.pop('admins', None)
        apply_changes(school, changes)
        if admin_ids is not None:
            school.admins = load_admins(db, admin_ids, 'updating')
        db.commit()
        db.refresh(school)
    except SQLAlchemyError as exc:
        raise storage_failure(db, exc, 'Error updating school') from exc

    return school


@router.delete('/{school_id}', response_model=MessageResponse)
def delete_school(school_id: int, db: Session = Depends(get_db)):
    try:
        school = get_school_or_404(db, school_id)
        db.delete(school)
        db.commit()
    except SQLAlchemyError as exc:
        raise storage_failure(db, exc, 'Error deleting school') from exc

    logger.info('Deleted school %s', school_id)
    return MessageResponse(message='School deleted successfully')
