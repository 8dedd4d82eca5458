"""Pytest configuration and fixtures."""

import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from dnd_companion.config import Settings, get_settings
from dnd_companion.database import Base, get_db
from dnd_companion.main import app

DEFAULT_PASSWORD = "testpass123"


class AuthHeaders(dict):
    """Dict subclass that also stores the registered user's id, email and handle."""

    def __init__(
        self,
        *args,
        user_id: int | None = None,
        email: str | None = None,
        handle: str | None = None,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email
        self.handle = handle


# Use test database - PostgreSQL in Docker, SQLite locally
if os.getenv("DATABASE_URL"):
    # Running in Docker - use PostgreSQL test database
    SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL").replace(
        "/dnd_companion", "/dnd_companion_test"
    )
else:
    # Running locally - use SQLite
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        # For PostgreSQL, create the test database
        from sqlalchemy_utils import create_database, database_exists

        # Create test database if it doesn't exist
        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    Base.metadata.create_all(bind=engine)
    yield
    # Don't drop database - just leave it for next run (each test cleans up after itself)


@pytest.fixture(scope="session")
def test_settings(tmp_path_factory):
    """Settings with the cheapest bcrypt cost and a throwaway upload directory."""
    return Settings(
        jwt_secret="test-secret",
        bcrypt_rounds=4,
        password_reset_expiration_minutes=60,
        upload_dir=str(tmp_path_factory.mktemp("uploads")),
        public_base_url="http://testserver",
        max_upload_bytes=1024,
        environment="test",
    )


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture(scope="function")
def client(db, test_settings):
    """Create a test client with database and settings overrides."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: test_settings
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def register(client, email: str, handle: str, password: str = DEFAULT_PASSWORD) -> AuthHeaders:
    """Register a user through the API and return their auth headers."""
    response = client.post(
        "/users/register",
        json={
            "first_name": "Test",
            "last_name": "User",
            "handle": handle,
            "email": email,
            "password": password,
        },
    )
    assert response.status_code == 201, response.json()
    data = response.json()
    return AuthHeaders(
        {"Authorization": f"Bearer {data['access_token']}"},
        user_id=data["user"]["id"],
        email=email,
        handle=handle,
    )


@pytest.fixture
def auth_headers(client):
    """Create a user and return auth headers with user info."""
    return register(client, "test@example.com", "tester")


@pytest.fixture
def other_auth_headers(client):
    """A second, unrelated user."""
    return register(client, "other@example.com", "other")

