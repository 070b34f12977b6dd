"""
Shared fixtures: in-memory SQLite database, API client and auth headers.

Run with: pytest -v
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from ticketwise.core.security import hash_password, create_access_token
from ticketwise.database import get_db
from ticketwise.main import app
from ticketwise.models import Base, User, UserRole

# One connection shared by every session of a test
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PASSWORD = "Secret1234"


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def _create_user(db, email: str, role: UserRole, username: str) -> User:
    user = User(
        first_name=username.capitalize(),
        last_name="Test",
        username=username,
        email=email,
        password_hash=hash_password(PASSWORD),
        role=role,
        active=True
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def _headers(user: User) -> dict:
    token = create_access_token(user)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_user(db):
    return _create_user(db, "admin@ticketwise.ma", UserRole.ADMIN, "admin")


@pytest.fixture
def staff_user(db):
    return _create_user(db, "staff@ticketwise.ma", UserRole.USER, "staff")


@pytest.fixture
def admin_headers(admin_user):
    return _headers(admin_user)


@pytest.fixture
def staff_headers(staff_user):
    return _headers(staff_user)
