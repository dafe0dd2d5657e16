"""
Pytest configuration and fixtures.
Provides test database, client, and common test utilities.
"""

import os

# Settings are read at import time, so the environment must be ready first.
os.environ["ENVIRONMENT"] = "test"
os.environ["JWT_ACCESS_SECRET"] = "test-access-secret"
os.environ["JWT_REFRESH_SECRET"] = "test-refresh-secret"
os.environ["ADMIN_EMAIL_ALLOWLIST"] = "admin@example.com,Chief@Example.com"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["PURGE_EXPIRED_TOKENS_ON_STARTUP"] = "false"

from typing import Generator  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session, create_engine  # noqa: E402
from sqlmodel.pool import StaticPool  # noqa: E402

from blog_api.api.deps import get_token_issuer  # noqa: E402
from blog_api.core.config import settings  # noqa: E402
from blog_api.core.tokens import TokenIssuer  # noqa: E402
from blog_api.db.session import get_session, init_db  # noqa: E402
from blog_api.main import app  # noqa: E402
from blog_api.models.user import User, UserRole  # noqa: E402
from blog_api.services.auth_service import AuthService  # noqa: E402
from blog_api.services.authorization import AdminAllowlistPolicy  # noqa: E402
from blog_api.services.user_service import UserService  # noqa: E402

AUTH_PREFIX = f"{settings.API_V1_PREFIX}/auth"


@pytest.fixture(name="session")
def session_fixture() -> Generator[Session, None, None]:
    """
    Create a test database session.
    Uses an in-memory SQLite database for fast tests.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)

    with Session(engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session: Session) -> Generator[TestClient, None, None]:
    """
    Create a test client with dependency overrides.
    """

    def get_session_override() -> Generator[Session, None, None]:
        yield session

    app.dependency_overrides[get_session] = get_session_override

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture(name="token_issuer")
def token_issuer_fixture() -> TokenIssuer:
    """The issuer the application uses."""
    return get_token_issuer()


@pytest.fixture(name="auth_service")
def auth_service_fixture(session: Session, token_issuer: TokenIssuer) -> AuthService:
    """Authentication service wired to the test session."""
    return AuthService(
        session=session,
        issuer=token_issuer,
        role_policy=AdminAllowlistPolicy(settings.ADMIN_EMAIL_ALLOWLIST),
    )


@pytest.fixture(name="test_user")
def test_user_fixture(session: Session) -> User:
    """
    Create a test user.
    """
    return UserService.create(session, email="test@example.com", password="testpassword123")


@pytest.fixture(name="test_admin")
def test_admin_fixture(session: Session) -> User:
    """
    Create a test admin user.
    """
    return UserService.create(
        session,
        email="admin@example.com",
        password="adminpassword123",
        role=UserRole.ADMIN,
    )


@pytest.fixture(name="user_token")
def user_token_fixture(client: TestClient, test_user: User) -> str:
    """
    Get an access token for a regular user.
    """
    response = client.post(
        f"{AUTH_PREFIX}/login",
        json={"email": "test@example.com", "password": "testpassword123"},
    )
    assert response.status_code == 200
    return response.json()["accessToken"]


@pytest.fixture(name="admin_token")
def admin_token_fixture(client: TestClient, test_admin: User) -> str:
    """
    Get an access token for an admin user.
    """
    response = client.post(
        f"{AUTH_PREFIX}/login",
        json={"email": "admin@example.com", "password": "adminpassword123"},
    )
    assert response.status_code == 200
    return response.json()["accessToken"]
