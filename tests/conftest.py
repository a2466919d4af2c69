"""Shared test fixtures."""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from spiritlove.config import settings
from spiritlove.database import Base, get_db
from spiritlove.main import app
from spiritlove.models.user import User
from spiritlove.rate_limiter import limiter
from spiritlove.readiness import ReadinessGate

SESSION_COOKIE = settings.session_cookie_name


@pytest.fixture(autouse=True)
def fast_hashing(monkeypatch):
    """Use the minimum bcrypt cost so the suite stays fast."""
    monkeypatch.setattr(settings, "bcrypt_rounds", 4)


@pytest.fixture
def engine():
    """In-memory SQLite engine shared across threads."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session_maker(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


@pytest.fixture
def db_session(db_session_maker):
    session = db_session_maker()
    yield session
    session.close()


@pytest.fixture
def auth_client(db_session_maker):
    """Create test client with in-memory database for auth tests.

    Yields a tuple of (TestClient, SessionMaker) for use in tests.
    """
    limiter.reset()

    def override_get_db():
        db = db_session_maker()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.state.readiness = ReadinessGate(ready=True)

    with TestClient(app) as test_client:
        yield test_client, db_session_maker

    app.dependency_overrides.clear()


def signup_user(test_client: TestClient, name: str, email: str, password: str):
    """Sign up through the API; the client keeps the session cookie."""
    return test_client.post(
        "/api/auth/signup",
        json={"name": name, "email": email, "password": password},
    )


def login(test_client: TestClient, name: str, password: str):
    return test_client.post("/api/auth/login", json={"name": name, "password": password})


def create_user(db_session_maker, name: str, email: str | None = None) -> User:
    """Insert an account that still needs password setup."""
    db = db_session_maker()
    user = User(name=name, email=email)
    db.add(user)
    db.commit()
    db.close()
    return user


def request_reset_token(test_client: TestClient, email: str) -> str | None:
    """Request a reset and return the raw token that would have been emailed."""
    with patch(
        "spiritlove.services.auth.auth_flow.EmailService.send_password_reset_email"
    ) as mock_send:
        response = test_client.post("/api/auth/password-reset/request", json={"email": email})
    assert response.status_code == 200
    if not mock_send.called:
        return None
    _, _, token = mock_send.call_args.args
    return token
