"""Tests for signup, login, logout and bearer-token authentication."""

from datetime import datetime, timedelta

from farewelly.models import UserSession
from farewelly.security_utils import hash_token


def signup(client, **overrides):
    body = {
        "email": "anna@example.nl",
        "password": "geheim123",
        "name": "Anna de Vries",
        "user_type": "family",
    }
    body.update(overrides)
    return client.post("/api/auth/signup", json=body)


class TestSignup:
    def test_signup_returns_user_and_token(self, client):
        response = signup(client)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["user"]["email"] == "anna@example.nl"
        assert body["data"]["user"]["family_code"]
        assert body["data"]["token"]

    def test_duplicate_email_is_conflict(self, client):
        signup(client)
        response = signup(client, email="ANNA@example.nl")

        assert response.status_code == 409
        assert response.json() == {"success": False, "error": "User already exists"}

    def test_short_password_rejected(self, client):
        response = signup(client, password="123")

        assert response.status_code == 400
        assert response.json()["error"] == "Password must be at least 6 characters"

    def test_invalid_user_type_rejected(self, client):
        response = signup(client, user_type="admin")

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid user type"

    def test_missing_fields_listed(self, client):
        response = client.post("/api/auth/signup", json={"email": "a@b.nl"})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error.startswith("Missing required fields:")
        assert "password" in error and "name" in error

    def test_venue_signup_keeps_venue_fields(self, client):
        response = signup(
            client,
            email="aula@example.nl",
            user_type="venue",
            venue_name="Aula Zorgvlied",
            capacity=120,
            price_per_hour=150,
        )

        user = response.json()["data"]["user"]
        assert user["venue_name"] == "Aula Zorgvlied"
        assert user["price_per_hour"] == 150


class TestLogin:
    def test_login_and_me(self, client):
        signup(client)
        response = client.post("/api/auth/login", json={"email": "anna@example.nl", "password": "geheim123"})

        assert response.status_code == 200
        token = response.json()["data"]["token"]
        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["data"]["name"] == "Anna de Vries"

    def test_wrong_password(self, client):
        signup(client)
        response = client.post("/api/auth/login", json={"email": "anna@example.nl", "password": "fout-wachtwoord"})

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid email or password"

    def test_logout_revokes_token(self, client):
        token = signup(client).json()["data"]["token"]
        headers = {"Authorization": f"Bearer {token}"}

        assert client.post("/api/auth/logout", headers=headers).status_code == 200
        assert client.get("/api/auth/me", headers=headers).status_code == 401


class TestBearerAuth:
    def test_missing_token(self, client):
        response = client.get("/api/auth/me")

        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "Unauthorized"}

    def test_unknown_token(self, client):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-session"})

        assert response.status_code == 401

    def test_expired_session(self, client, db, family, auth_headers):
        headers = auth_headers(family)
        token = headers["Authorization"].split(" ", 1)[1]
        session = db.query(UserSession).filter(UserSession.token_hash == hash_token(token)).one()
        session.expires_at = datetime.utcnow() - timedelta(minutes=1)
        db.commit()

        assert client.get("/api/auth/me", headers=headers).status_code == 401

    def test_inactive_user_forbidden(self, client, make_user, auth_headers):
        user = make_user("family", status="inactive")

        response = client.get("/api/auth/me", headers=auth_headers(user))

        assert response.status_code == 403
        assert response.json()["error"] == "Account is inactive"
