import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from school_api.auth.dependencies import authenticate, get_token_service
from school_api.auth.jwt_handler import Identity, TokenService
from school_api.models.user import User
from school_api.routes.common import get_db, storage_failure

logger = logging.getLogger(__name__)

router = APIRouter(tags=['auth'])


class LoginRequest(BaseModel):
    email: str = ''
    password: str = ''

    @field_validator('email')
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class TokenResponse(BaseModel):
    token: str


class IdentityResponse(BaseModel):
    user_id: int
    role: str


@router.post('', response_model=TokenResponse)
@router.post('/', response_model=TokenResponse, include_in_schema=False)
def login(
    data: LoginRequest,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    if not data.email or not data.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Email and password are required',
        )

    try:
        user = db.query(User).filter(User.email == data.email).first()
    except SQLAlchemyError as exc:
        raise storage_failure(db, exc, 'Error logging in') from exc

    if user is None or not user.check_password(data.password):
        logger.warning('Failed login for %s', data.email)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Invalid email or password',
        )

    return TokenResponse(token=tokens.issue(user))


@router.get('/me', response_model=IdentityResponse)
def me(identity: Identity = Depends(authenticate)):
    return IdentityResponse(user_id=identity.user_id, role=identity.role)
