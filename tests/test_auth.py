"""Authentication API tests."""

from datetime import UTC, datetime, timedelta
from unittest.mock import patch

from dnd_companion.models.user import User
from dnd_companion.services.tokens import TokenService
from dnd_companion.services.users import UserService

REGISTRATION = {
    "first_name": "Ada",
    "last_name": "Xavier",
    "handle": "ax",
    "email": "a@x.com",
    "password": "pw1",
}


def test_health_check(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_register_user(client):
    """Test user registration."""
    response = client.post("/users/register", json=REGISTRATION)
    assert response.status_code == 201
    data = response.json()
    assert "access_token" in data
    assert data["token_type"] == "bearer"
    assert data["user"]["handle"] == "ax"
    assert data["user"]["campaigns"] == []
    assert "password" not in data["user"]
    assert "password_hash" not in data["user"]


def test_register_stores_hash_not_password(client, db):
    """Test that the plaintext password is never stored."""
    client.post("/users/register", json=REGISTRATION)

    user = db.query(User).filter(User.handle == "ax").one()
    assert user.password_hash
    assert user.password_hash != "pw1"


def test_register_normalizes_email(client):
    """Test that emails are stored lower-cased."""
    response = client.post("/users/register", json={**REGISTRATION, "email": "A@X.com"})
    assert response.status_code == 201
    assert response.json()["user"]["email"] == "a@x.com"


def test_register_duplicate_email(client, auth_headers):
    """Test registration with duplicate email fails."""
    response = client.post(
        "/users/register",
        json={**REGISTRATION, "email": auth_headers.email},
    )
    assert response.status_code == 409
    assert response.json()["errors"] == {"email": "Email already in use"}


def test_register_duplicate_handle(client, auth_headers):
    """Test registration with duplicate handle fails."""
    response = client.post(
        "/users/register",
        json={**REGISTRATION, "handle": auth_headers.handle},
    )
    assert response.status_code == 409
    assert response.json()["errors"] == {"handle": "Handle already in use"}


def test_register_race_on_handle(client, db):
    """Test that the database constraint rejects a handle the pre-check missed.

    The first lookup is forced to miss, as it would when two registrations
    run their checks before either commits.
    """
    client.post("/users/register", json=REGISTRATION)

    with patch.object(UserService, "find_conflict", side_effect=[None, "handle"]):
        response = client.post(
            "/users/register",
            json={**REGISTRATION, "email": "second@x.com"},
        )

    assert response.status_code == 409
    assert "handle" in response.json()["errors"]
    assert db.query(User).filter(User.handle == "ax").count() == 1


def test_register_validation_errors(client):
    """Test that missing and blank fields are reported per field."""
    response = client.post(
        "/users/register",
        json={"first_name": "  ", "handle": "ax", "email": "not-an-email", "password": "pw"},
    )
    assert response.status_code == 400
    errors = response.json()["errors"]
    assert errors["first_name"] == "Must not be empty!"
    assert errors["last_name"] == "Must not be empty!"
    assert errors["email"] == "Must be a valid email address!"
    assert "password" not in errors


def test_register_blank_password(client):
    """Test that an all-whitespace password is rejected."""
    response = client.post("/users/register", json={**REGISTRATION, "password": "   "})
    assert response.status_code == 400
    assert response.json()["errors"]["password"] == "Must not be empty!"


def test_login_with_email(client):
    """Test login with email."""
    client.post("/users/register", json=REGISTRATION)

    response = client.post("/users/login", json={"login": "a@x.com", "password": "pw1"})
    assert response.status_code == 200
    assert "access_token" in response.json()
    assert response.json()["user"]["email"] == "a@x.com"


def test_login_with_handle(client):
    """Test login with handle."""
    client.post("/users/register", json=REGISTRATION)

    response = client.post("/users/login", json={"login": "ax", "password": "pw1"})
    assert response.status_code == 200


def test_login_wrong_password_is_generic(client):
    """Test that a wrong password and an unknown login look the same."""
    client.post("/users/register", json=REGISTRATION)

    wrong_password = client.post("/users/login", json={"login": "a@x.com", "password": "wrong"})
    unknown_login = client.post("/users/login", json={"login": "b@x.com", "password": "pw1"})

    assert wrong_password.status_code == 401
    assert unknown_login.status_code == 401
    assert wrong_password.json() == unknown_login.json()
    assert wrong_password.json()["detail"] == "Invalid login or password"
    assert wrong_password.headers["WWW-Authenticate"] == "Bearer"


def test_login_missing_fields(client):
    """Test login validation."""
    response = client.post("/users/login", json={"login": ""})
    assert response.status_code == 400
    assert response.json()["errors"] == {
        "login": "Must not be empty!",
        "password": "Must not be empty!",
    }


def test_get_current_user(client, auth_headers):
    """Test getting current user information."""
    response = client.get("/users/me", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["email"] == auth_headers.email
    assert response.json()["id"] == auth_headers.user_id


def test_missing_token(client):
    """Test that protected endpoints require a bearer token."""
    response = client.get("/users/me")
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_invalid_token(client):
    """Test that a garbage token is rejected."""
    response = client.get("/users/me", headers={"Authorization": "Bearer nonsense"})
    assert response.status_code == 401


def test_token_for_deleted_user(client, auth_headers):
    """Test that a valid token stops working once its user is gone."""
    client.delete(f"/users/{auth_headers.user_id}", headers=auth_headers)

    response = client.get("/users/me", headers=auth_headers)
    assert response.status_code == 401


def test_password_reset_flow(client, auth_headers):
    """Test requesting a reset token and using it once."""
    response = client.put(
        "/users/generate-password-token", json={"email": auth_headers.email}
    )
    assert response.status_code == 200
    token = response.json()["reset_token"]

    response = client.put(
        "/users/reset-password", json={"token": token, "password": "brand-new"}
    )
    assert response.status_code == 200
    assert response.json()["message"] == "Password updated successfully!"

    login = client.post(
        "/users/login", json={"login": auth_headers.email, "password": "brand-new"}
    )
    assert login.status_code == 200
    old_login = client.post(
        "/users/login", json={"login": auth_headers.email, "password": "testpass123"}
    )
    assert old_login.status_code == 401

    reused = client.put("/users/reset-password", json={"token": token, "password": "again"})
    assert reused.status_code == 400
    assert reused.json()["detail"] == "Token expired, try again later."


def test_generate_password_token_unknown_email(client):
    """Test reset token request for an email nobody uses."""
    response = client.put(
        "/users/generate-password-token", json={"email": "nobody@example.com"}
    )
    assert response.status_code == 404


def test_generate_password_token_invalid_email(client):
    """Test reset token request validation."""
    response = client.put("/users/generate-password-token", json={"email": "nope"})
    assert response.status_code == 400
    assert response.json()["errors"]["email"] == "Must be a valid email address!"


def test_reset_password_bad_token(client):
    """Test reset with a token that was never issued."""
    response = client.put(
        "/users/reset-password", json={"token": "made-up", "password": "brand-new"}
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Token expired, try again later."


def test_reset_password_requires_token(client):
    """Test reset validation."""
    response = client.put("/users/reset-password", json={"password": "brand-new"})
    assert response.status_code == 400
    assert response.json()["errors"] == {"token": "Must not be empty!"}


def test_expired_token(client, auth_headers, test_settings):
    """Test that an elapsed session token is rejected."""
    issued_at = datetime.now(UTC) - timedelta(days=11)
    token = TokenService(test_settings, clock=lambda: issued_at).issue(auth_headers.user_id)

    response = client.get("/users/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Authentication token has expired"


def test_login_long_password_checked_in_full(client):
    """Test that a password differing only after byte 72 does not log in."""
    shared = "x" * 72
    client.post("/users/register", json={**REGISTRATION, "password": shared + "-right"})

    wrong = client.post("/users/login", json={"login": "ax", "password": shared + "-wrong"})
    right = client.post("/users/login", json={"login": "ax", "password": shared + "-right"})

    assert wrong.status_code == 401
    assert right.status_code == 200
