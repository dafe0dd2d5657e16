"""
Tests for authentication endpoints.
"""

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, select

from blog_api.core.config import settings
from blog_api.core.tokens import TokenIssuer
from blog_api.models.token import RefreshToken
from blog_api.models.user import User
from blog_api.services.token_service import TokenService
from blog_api.services.user_service import UserService

AUTH_PREFIX = f"{settings.API_V1_PREFIX}/auth"


def test_register_user(client: TestClient, token_issuer: TokenIssuer) -> None:
    """Registering returns the projection, an access token and a refresh cookie."""
    response = client.post(
        f"{AUTH_PREFIX}/register",
        json={"email": "a@x.com", "password": "password1", "role": "user"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["user"]["role"] == "user"
    assert data["user"]["email"] == "a@x.com"
    assert data["user"]["username"].startswith("user-")
    assert "password" not in data["user"]
    assert "refreshToken" not in data
    assert "refreshToken" in response.cookies

    claims = token_issuer.verify_access(data["accessToken"])
    assert claims.subject == "accessApi"


def test_register_sets_strict_httponly_cookie(client: TestClient) -> None:
    """The refresh cookie is HttpOnly and SameSite=strict."""
    response = client.post(
        f"{AUTH_PREFIX}/register",
        json={"email": "cookie@example.com", "password": "password1"},
    )
    assert response.status_code == 200
    set_cookie = response.headers["set-cookie"].lower()
    assert set_cookie.startswith("refreshtoken=")
    assert "httponly" in set_cookie
    assert "samesite=strict" in set_cookie
    # Not production
    assert "secure" not in set_cookie


def test_register_lowercases_email(client: TestClient, session: Session) -> None:
    """Emails are stored lowercased."""
    response = client.post(
        f"{AUTH_PREFIX}/register",
        json={"email": "  Mixed.Case@Example.com ", "password": "password1"},
    )
    assert response.status_code == 200
    assert response.json()["user"]["email"] == "mixed.case@example.com"
    user = session.exec(select(User).where(User.email == "mixed.case@example.com")).first()
    assert user is not None


def test_register_admin_not_in_allowlist(client: TestClient, session: Session) -> None:
    """Admin registration off the allowlist is forbidden and writes nothing."""
    response = client.post(
        f"{AUTH_PREFIX}/register",
        json={"email": "intruder@example.com", "password": "password1", "role": "admin"},
    )
    assert response.status_code == 403
    data = response.json()
    assert data["status"] == "AuthorizationError"
    assert "admin" in data["message"].lower()
    assert "refreshToken" not in response.cookies
    assert session.exec(select(User)).all() == []
    assert session.exec(select(RefreshToken)).all() == []


def test_register_admin_in_allowlist(client: TestClient) -> None:
    """An allowlisted email may register as admin, case-insensitively."""
    response = client.post(
        f"{AUTH_PREFIX}/register",
        json={"email": "chief@example.com", "password": "password1", "role": "admin"},
    )
    assert response.status_code == 200
    assert response.json()["user"]["role"] == "admin"


def test_register_duplicate_email(client: TestClient, test_user: User) -> None:
    """Duplicate email registration fails validation."""
    response = client.post(
        f"{AUTH_PREFIX}/register",
        json={"email": "TEST@example.com", "password": "password123"},
    )
    assert response.status_code == 400
    data = response.json()
    assert data["code"] == "ValidationError"
    assert data["errors"]["email"] == "Email already exists"


def test_register_password_boundary(client: TestClient) -> None:
    """Eight characters pass validation, seven do not."""
    response = client.post(
        f"{AUTH_PREFIX}/register",
        json={"email": "seven@example.com", "password": "1234567"},
    )
    assert response.status_code == 400
    assert response.json()["errors"]["password"] == "Password must be at least 8 characters long"

    response = client.post(
        f"{AUTH_PREFIX}/register",
        json={"email": "eight@example.com", "password": "12345678"},
    )
    assert response.status_code == 200


def test_register_invalid_email_and_role(client: TestClient) -> None:
    """Malformed fields are reported per field."""
    response = client.post(
        f"{AUTH_PREFIX}/register",
        json={"email": "not-an-email", "password": "password1", "role": "superuser"},
    )
    assert response.status_code == 400
    errors = response.json()["errors"]
    assert "email" in errors
    assert "role" in errors


def test_register_email_too_long(client: TestClient) -> None:
    """Emails longer than 50 characters are rejected."""
    email = "a" * 45 + "@example.com"
    response = client.post(
        f"{AUTH_PREFIX}/register",
        json={"email": email, "password": "password1"},
    )
    assert response.status_code == 400
    assert "email" in response.json()["errors"]


def test_register_then_login(client: TestClient, token_issuer: TokenIssuer) -> None:
    """The same credentials log in after registering."""
    client.post(
        f"{AUTH_PREFIX}/register",
        json={"email": "roundtrip@example.com", "password": "password1"},
    )
    response = client.post(
        f"{AUTH_PREFIX}/login",
        json={"email": "roundtrip@example.com", "password": "password1"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Login successful"
    assert data["user"]["email"] == "roundtrip@example.com"
    assert "refreshToken" in response.cookies
    token_issuer.verify_access(data["accessToken"])


def test_login_records_a_session_per_login(
    client: TestClient, session: Session, test_user: User
) -> None:
    """Each login adds a ledger row; earlier sessions stay valid."""
    for _ in range(2):
        response = client.post(
            f"{AUTH_PREFIX}/login",
            json={"email": "test@example.com", "password": "testpassword123"},
        )
        assert response.status_code == 200
    assert TokenService.count_for_user(session, test_user.id) == 2  # type: ignore[arg-type]


def test_login_wrong_password(client: TestClient, test_user: User) -> None:
    """Wrong password gets the generic message."""
    response = client.post(
        f"{AUTH_PREFIX}/login",
        json={"email": "test@example.com", "password": "wrongpassword"},
    )
    assert response.status_code == 401
    assert response.json()["message"] == "Email or password is incorrect"
    assert response.json()["code"] == "AuthenticationError"


def test_login_nonexistent_user(client: TestClient) -> None:
    """Unknown email gets exactly the same response as a wrong password."""
    response = client.post(
        f"{AUTH_PREFIX}/login",
        json={"email": "nonexistent@example.com", "password": "password123"},
    )
    assert response.status_code == 401
    assert response.json()["message"] == "Email or password is incorrect"


def test_refresh_token_round_trip(client: TestClient, token_issuer: TokenIssuer) -> None:
    """A fresh refresh cookie mints an access token and keeps working."""
    client.post(
        f"{AUTH_PREFIX}/register",
        json={"email": "refresh@example.com", "password": "password1"},
    )
    refresh_cookie = client.cookies.get("refreshToken")

    response = client.post(f"{AUTH_PREFIX}/refresh-token")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "success"
    assert data["code"] == "Success"
    token_issuer.verify_access(data["data"]["token"])

    # Not rotated
    assert client.cookies.get("refreshToken") == refresh_cookie
    response = client.post(f"{AUTH_PREFIX}/refresh-token")
    assert response.status_code == 200


def test_refresh_token_missing_cookie(client: TestClient) -> None:
    """No cookie means 401 AuthenticationError."""
    client.cookies.clear()
    response = client.post(f"{AUTH_PREFIX}/refresh-token")
    assert response.status_code == 401
    assert response.json()["code"] == "AuthenticationError"


def test_refresh_token_not_in_ledger(
    client: TestClient, token_issuer: TokenIssuer, test_user: User
) -> None:
    """A correctly signed token unknown to the ledger is refused."""
    token = token_issuer.issue_refresh(test_user.id)  # type: ignore[arg-type]
    token_issuer.verify_refresh(token)

    client.cookies.clear()
    client.cookies.set("refreshToken", token)
    response = client.post(f"{AUTH_PREFIX}/refresh-token")
    assert response.status_code == 401
    assert response.json()["code"] == "AuthenticationError"
    assert response.json()["message"] == "Invalid or expired refresh token"


def test_refresh_token_malformed_cookie(client: TestClient) -> None:
    """A cookie that is not a JWT is refused as invalid."""
    client.cookies.clear()
    client.cookies.set("refreshToken", "not-a-jwt")
    response = client.post(f"{AUTH_PREFIX}/refresh-token")
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid refresh token"


def test_refresh_rejects_access_token(client: TestClient, user_token: str) -> None:
    """An access token in the refresh cookie is refused."""
    client.cookies.clear()
    client.cookies.set("refreshToken", user_token)
    response = client.post(f"{AUTH_PREFIX}/refresh-token")
    assert response.status_code == 401


def test_logout_revokes_refresh_token(client: TestClient, session: Session) -> None:
    """After logout the old refresh token no longer refreshes."""
    client.post(
        f"{AUTH_PREFIX}/register",
        json={"email": "logout@example.com", "password": "password1"},
    )
    refresh_cookie = client.cookies.get("refreshToken")
    assert refresh_cookie is not None

    response = client.post(f"{AUTH_PREFIX}/logout")
    assert response.status_code == 200
    assert response.json()["code"] == "Success"
    assert not TokenService.exists(session, refresh_cookie)

    # Replay the old token explicitly
    client.cookies.clear()
    client.cookies.set("refreshToken", refresh_cookie)
    response = client.post(f"{AUTH_PREFIX}/refresh-token")
    assert response.status_code == 401


def test_logout_without_cookie(client: TestClient) -> None:
    """Logout is always successful."""
    client.cookies.clear()
    response = client.post(f"{AUTH_PREFIX}/logout")
    assert response.status_code == 200


def test_refresh_cookie_is_secure_in_production(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    """In production the refresh cookie is Secure, and logout clears it the same way."""
    monkeypatch.setattr(settings, "ENVIRONMENT", "production")
    response = client.post(
        f"{AUTH_PREFIX}/register",
        json={"email": "prod@example.com", "password": "password1"},
    )
    assert response.status_code == 200
    set_cookie = response.headers["set-cookie"]
    refresh_cookie = set_cookie.split(";", 1)[0].split("=", 1)[1]
    attributes = {part.strip().lower() for part in set_cookie.split(";")[1:]}
    assert {"secure", "httponly", "samesite=strict", "max-age=604800"} <= attributes

    # Secure cookies are not replayed over http by the test client
    client.cookies.clear()
    client.cookies.set("refreshToken", refresh_cookie)
    response = client.post(f"{AUTH_PREFIX}/logout")
    assert response.status_code == 200
    cleared = response.headers["set-cookie"]
    assert cleared.startswith("refreshToken=")
    attributes = {part.strip().lower() for part in cleared.split(";")[1:]}
    assert {"secure", "httponly", "samesite=strict", "max-age=0"} <= attributes


def test_register_duplicate_past_precheck_is_server_error(
    client: TestClient, session: Session, test_user: User, monkeypatch: pytest.MonkeyPatch
) -> None:
    """A duplicate that reaches the unique index is rendered as a 500 envelope."""
    monkeypatch.setattr(UserService, "email_exists", staticmethod(lambda session, email: False))
    response = client.post(
        f"{AUTH_PREFIX}/register",
        json={"email": "test@example.com", "password": "password123"},
    )
    assert response.status_code == 500
    assert response.json() == {
        "status": "error",
        "code": "ServerError",
        "message": "Internal server error",
        "error": "Could not register user",
    }
    assert "refreshToken" not in response.cookies
    assert len(session.exec(select(User)).all()) == 1
    assert session.exec(select(RefreshToken)).all() == []
