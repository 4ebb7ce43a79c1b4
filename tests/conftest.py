import os
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite://')

from school_api.auth import passwords  # noqa: E402
from school_api.auth.dependencies import get_token_service  # noqa: E402
from school_api.auth.jwt_handler import TokenService  # noqa: E402
from school_api.core.config import AuthSettings  # noqa: E402
from school_api.database import Base  # noqa: E402
from school_api.main import app  # noqa: E402
from school_api.models.classroom import Classroom  # noqa: E402
from school_api.models.school import School  # noqa: E402
from school_api.models.student import Student  # noqa: E402
from school_api.models.user import User  # noqa: E402
from school_api.routes.common import get_db  # noqa: E402

TEST_SECRET = 'test-secret-key-for-jwt-signing-only'


@pytest.fixture(autouse=True)
def fast_password_hashing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(passwords, 'BCRYPT_ROUNDS', 4)


@pytest.fixture
def session_factory():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(AuthSettings(secret_key=TEST_SECRET, algorithm='HS256', expires_minutes=60))


@pytest.fixture
def client(session_factory, token_service):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_token_service] = lambda: token_service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(token_service):
    def build(role: str = 'admin', user_id: int = 1) -> dict:
        token = token_service.issue(SimpleNamespace(id=user_id, role=role))
        return {'Authorization': f'Bearer {token}'}

    return build


def add_user(db, email: str = 'admin@example.com', password: str = 'secret-password', role: str = 'admin') -> User:
    user = User(username=email.split('@')[0], email=email, role=role)
    user.set_password(password)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def add_school(db, name: str = 'North High') -> School:
    school = School(name=name, address='1 Main St', contact='555-0100', description='Public high school')
    db.add(school)
    db.commit()
    db.refresh(school)
    return school


def add_classroom(db, school: School, name: str = 'Room 101', capacity: int = 30) -> Classroom:
    classroom = Classroom(name=name, school_id=school.id, capacity=capacity, resources=['projector'])
    db.add(classroom)
    db.commit()
    db.refresh(classroom)
    return classroom


def add_student(db, school: School | None = None, classroom: Classroom | None = None) -> Student:
    student = Student(
        first_name='Ada',
        last_name='Lovelace',
        school_id=school.id if school else None,
        classroom_id=classroom.id if classroom else None,
    )
    db.add(student)
    db.commit()
    db.refresh(student)
    return student
