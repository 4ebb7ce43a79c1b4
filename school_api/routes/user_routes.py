import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from school_api.auth.dependencies import require_admin, require_superadmin
from school_api.database import is_storable_id
from school_api.models.user import ADMIN_ROLE, USER_ROLES, User
from school_api.routes.common import MessageResponse, apply_changes, get_db, storage_failure

logger = logging.getLogger(__name__)

router = APIRouter(tags=['users'])

USER_NOT_FOUND = 'User not found'


def _normalize_email(value: str) -> str:
    normalized = value.strip().lower()
    if '@' not in normalized:
        raise ValueError('A valid email address is required.')
    return normalized


def _normalize_role(value: str) -> str:
    normalized = value.strip().lower()
    if normalized not in USER_ROLES:
        raise ValueError(f'Role must be one of: {", ".join(USER_ROLES)}.')
    return normalized


class CreateUserRequest(BaseModel):
    username: str
    email: str
    password: str
    role: str = ADMIN_ROLE

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _normalize_email(value)

    @field_validator('role')
    @classmethod
    def validate_role(cls, value: str) -> str:
        return _normalize_role(value)

    @field_validator('password')
    @classmethod
    def validate_password(cls, value: str) -> str:
        if not value:
            raise ValueError('Password is required.')
        return value


class UpdateUserRequest(BaseModel):
    username: str | None = None
    email: str | None = None
    role: str | None = None

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str | None) -> str | None:
        return None if value is None else _normalize_email(value)

    @field_validator('role')
    @classmethod
    def validate_role(cls, value: str | None) -> str | None:
        return None if value is None else _normalize_role(value)


class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    role: str

    class Config:
        from_attributes = True


def get_user_or_404(db: Session, user_id: int) -> User:
    if not is_storable_id(user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=USER_NOT_FOUND)
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=USER_NOT_FOUND)
    return user


@router.post(
    '',
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_superadmin)],
)
@router.post(
    '/',
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_superadmin)],
    include_in_schema=False,
)
def create_user(data: CreateUserRequest, db: Session = Depends(get_db)):
    try:
        user = User(username=data.username, email=data.email, role=data.role)
        user.set_password(data.password)
        db.add(user)
        db.commit()
        db.refresh(user)
    except SQLAlchemyError as exc:
        raise storage_failure(db, exc, 'Error creating user') from exc

    logger.info('Created %s user %s', user.role, user.id)
    return user


@router.get('', response_model=list[UserResponse], dependencies=[Depends(require_admin)])
@router.get('/', response_model=list[UserResponse], dependencies=[Depends(require_admin)], include_in_schema=False)
def list_users(db: Session = Depends(get_db)):
    try:
        return db.query(User).order_by(User.id.asc()).all()
    except SQLAlchemyError as exc:
        raise storage_failure(db, exc, 'Error fetching users') from exc


@router.get('/{user_id}', response_model=UserResponse, dependencies=[Depends(require_admin)])
def get_user(user_id: int, db: Session = Depends(get_db)):
    try:
        return get_user_or_404(db, user_id)
    except SQLAlchemyError as exc:
        raise storage_failure(db, exc, 'Error fetching user') from exc


@router.put('/{user_id}', response_model=UserResponse, dependencies=[Depends(require_admin)])
def update_user(user_id: int, data: UpdateUserRequest, db: Session = Depends(get_db)):
    try:
        user = get_user_or_404(db, user_id)
        apply_changes(user, data.model_dump(exclude_unset=True, exclude_none=True))
        db.commit()
        db.refresh(user)
    except SQLAlchemyError as exc:
        raise storage_failure(db, exc, 'Error updating user') from exc

    return user


@router.delete('/{user_id}', response_model=MessageResponse, dependencies=[Depends(require_superadmin)])
def delete_user(user_id: int, db: Session = Depends(get_db)):
    try:
        user = get_user_or_404(db, user_id)
        db.delete(user)
        db.commit()
    except SQLAlchemyError as exc:
        raise storage_failure(db, exc, 'Error deleting user') from exc

    logger.info('Deleted user %s', user_id)
    return MessageResponse(message='User deleted successfully')
