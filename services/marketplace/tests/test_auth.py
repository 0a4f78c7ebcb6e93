"""Registration, login and session tests against the local auth provider"""
from fastapi import status

from upcycle_hub.auth import dependencies
from upcycle_hub.auth.rate_limit import LocalRateLimiter
from upcycle_hub.auth.security import create_access_token, decode_access_token, get_password_hash, verify_password
from upcycle_hub.models.user import User
from upcycle_hub.services.user_service import UserService


class TestRegister:
    def test_register_returns_user_and_token(self, client):
        response = client.post("/api/auth/register", json={
            "email": "Maker@Example.com",
            "password": "secret123",
            "full_name": "Mia Maker",
        })

        assert response.status_code == status.HTTP_201_CREATED
        body = response.json()
        assert body["user"]["email"] == "maker@example.com"
        assert body["user"]["username"] == "maker"
        assert body["user"]["is_seller"] is True
        assert body["user"]["is_collector"] is False
        assert body["token_type"] == "bearer"
        assert decode_access_token(body["access_token"])["sub"] == body["user"]["id"]
        assert "password_hash" not in body["user"]

    def test_password_is_hashed(self, client, db_session):
        client.post("/api/auth/register", json={"email": "maker@example.com", "password": "secret123"})

        user = db_session.query(User).filter(User.email == "maker@example.com").one()
        assert user.password_hash != "secret123"
        assert verify_password("secret123", user.password_hash)

    def test_duplicate_email_is_conflict(self, client, register_user):
        register_user("maker@example.com")

        response = client.post("/api/auth/register", json={"email": "MAKER@example.com", "password": "other-pass"})

        assert response.status_code == status.HTTP_409_CONFLICT
        assert "already exists" in response.json()["detail"]

    def test_concurrent_duplicate_is_conflict(self, client, register_user, monkeypatch):
        register_user("maker@example.com")
        # The other request committed after this one checked for the email
        monkeypatch.setattr(UserService, "get_by_email", lambda self, email: None)

        response = client.post("/api/auth/register", json={"email": "maker@example.com", "password": "secret123"})

        assert response.status_code == status.HTTP_409_CONFLICT
        assert "already exists" in response.json()["detail"]

    def test_invalid_payload_is_422(self, client):
        response = client.post("/api/auth/register", json={"email": "not-an-email", "password": "123"})

        assert response.status_code == 422
        fields = {tuple(error["loc"]) for error in response.json()["detail"]}
        assert ("body", "email") in fields
        assert ("body", "password") in fields

    def test_rate_limited_after_too_many_attempts(self, client):
        dependencies._register_limiter = LocalRateLimiter(times=2, seconds=60)

        for i in range(2):
            response = client.post("/api/auth/register", json={"email": f"user{i}@example.com", "password": "secret123"})
            assert response.status_code == status.HTTP_201_CREATED

        response = client.post("/api/auth/register", json={"email": "user3@example.com", "password": "secret123"})

        assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS
        assert int(response.headers["Retry-After"]) >= 1
        assert "rate limit" in response.json()["detail"]


class TestLogin:
    def test_login_returns_user_with_submitted_email(self, client, register_user):
        register_user("maker@example.com", password="secret123")

        response = client.post("/api/auth/login", json={"email": "maker@example.com", "password": "secret123"})

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["user"]["email"] == "maker@example.com"
        assert body["access_token"]

    def test_wrong_password_is_unauthorized(self, client, register_user):
        register_user("maker@example.com", password="secret123")

        response = client.post("/api/auth/login", json={"email": "maker@example.com", "password": "wrong-pass"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"] == "Invalid login credentials"

    def test_unknown_email_is_unauthorized(self, client):
        response = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "secret123"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestSession:
    def test_me_returns_current_user(self, client, seller):
        response = client.get("/api/auth/me", headers=seller["headers"])

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["user"]["email"] == "seller@example.com"

    def test_me_requires_token(self, client):
        response = client.get("/api/auth/me")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_me_rejects_garbage_token(self, client):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_token_for_deleted_user_is_rejected(self, client):
        token = create_access_token("missing-user", "ghost@example.com")

        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_update_profile_changes_only_given_fields(self, client, seller):
        response = client.put(
            "/api/auth/profile",
            json={"full_name": "Sam Seller", "is_collector": True},
            headers=seller["headers"],
        )

        assert response.status_code == status.HTTP_200_OK
        user = response.json()["user"]
        assert user["full_name"] == "Sam Seller"
        assert user["is_collector"] is True
        assert user["is_seller"] is True
        assert user["username"] == "seller"

    def test_logout(self, client, seller):
        response = client.post("/api/auth/logout", headers=seller["headers"])

        assert response.status_code == status.HTTP_204_NO_CONTENT


class TestPasswordHelpers:
    def test_verify_password_handles_missing_and_unknown_hashes(self):
        assert verify_password("secret", None) is False
        assert verify_password("secret", "plaintext") is False
        assert verify_password("secret", get_password_hash("secret")) is True
