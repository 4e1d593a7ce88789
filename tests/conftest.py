"""Shared fixtures: a throwaway SQLite database and authenticated users."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

import pytest

TEST_DB_PATH = Path(tempfile.gettempdir()) / "scholarhub_notifications_test.db"
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_PATH}"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["ACCESS_TOKEN_EXPIRE_MINUTES"] = "30"
os.environ.pop("FIREBASE_CREDENTIALS", None)
os.environ.pop("NOTIFICATION_CHANNELS", None)

from scholarhub.config import get_settings  # noqa: E402

get_settings.cache_clear()

from scholarhub.application.use_cases.users import create_user  # noqa: E402
from scholarhub.domain.entities import ROLE_ADMIN, ROLE_STUDENT, User  # noqa: E402
from scholarhub.infrastructure.database import (  # noqa: E402
    Base,
    SessionLocal,
    engine,
    initialize_database,
)
from scholarhub.infrastructure.notifications import set_notification_dispatcher  # noqa: E402
from scholarhub.infrastructure.security import create_access_token  # noqa: E402


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def reset_database():
    """Ensure the test database starts from a clean state for each test."""

    Base.metadata.drop_all(bind=engine)
    initialize_database()
    set_notification_dispatcher(None)
    yield
    set_notification_dispatcher(None)
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db_session):
    """Return a factory creating users with a short password."""

    counter = {"value": 0}

    def _make_user(*, role: str = ROLE_STUDENT, name: str | None = None) -> User:
        counter["value"] += 1
        index = counter["value"]
        return create_user(
            db_session,
            name=name or f"User {index}",
            email=f"user{index}@example.com",
            password="Secret123",
            role=role,
        )

    return _make_user


@pytest.fixture
def student(make_user) -> User:
    return make_user(role=ROLE_STUDENT, name="Student")


@pytest.fixture
def admin(make_user) -> User:
    return make_user(role=ROLE_ADMIN, name="Admin")


@pytest.fixture
def auth_headers():
    """Return a helper building bearer headers for a user."""

    def _auth_headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token({'sub': user.email})}"}

    return _auth_headers


@pytest.fixture
def app():
    from main import create_app

    return create_app()


@pytest.fixture
def client(app):
    from fastapi.testclient import TestClient

    with TestClient(app) as test_client:
        yield test_client
