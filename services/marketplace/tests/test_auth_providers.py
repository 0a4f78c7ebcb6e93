"""Supabase and Clerk auth providers with their remote services mocked"""
import time
from types import SimpleNamespace
from unittest.mock import MagicMock

import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi import status

from upcycle_hub.auth import dependencies
from upcycle_hub.auth.jwt_validator import JWTValidator
from upcycle_hub.auth.providers import ClerkAuthProvider, SupabaseAuthProvider
from upcycle_hub.auth.providers.supabase_provider import map_supabase_error
from upcycle_hub.exceptions import (
    DuplicateEmailError,
    ExternalServiceError,
    InvalidCredentialsError,
    ProviderNotSupportedError,
    RateLimitedError,
)
from upcycle_hub.schemas.user import LoginRequest, ProfileUpdate, RegisterRequest

ISSUER = "https://clerk.upcycle.test"


def supabase_user(user_id="sb-user-1", email="maker@example.com", identities=None, metadata=None):
    return SimpleNamespace(
        id=user_id,
        email=email,
        identities=[{"provider": "email"}] if identities is None else identities,
        user_metadata=metadata or {},
    )


@pytest.fixture
def supabase_client():
    return MagicMock()


@pytest.fixture
def supabase_provider(supabase_client):
    return SupabaseAuthProvider(client=supabase_client)


class TestSupabaseErrorMapping:
    @pytest.mark.parametrize("message,expected", [
        ("User already registered", DuplicateEmailError),
        ("Email rate limit exceeded", RateLimitedError),
        ("Invalid login credentials", InvalidCredentialsError),
        ("invalid JWT: token is expired", InvalidCredentialsError),
        ("Database error saving new user", ExternalServiceError),
    ])
    def test_maps_messages(self, message, expected):
        assert isinstance(map_supabase_error(Exception(message)), expected)

    def test_maps_status_429(self):
        error = Exception("slow down")
        error.status = 429

        assert isinstance(map_supabase_error(error), RateLimitedError)


class TestSupabaseAuthProvider:
    def test_register_mirrors_user_and_profile(self, db_session, supabase_provider, supabase_client):
        supabase_client.auth.sign_up.return_value = SimpleNamespace(
            user=supabase_user(), session=SimpleNamespace(access_token="sb-token")
        )

        result = supabase_provider.register(
            db_session, RegisterRequest(email="maker@example.com", password="secret123", is_collector=True)
        )

        assert result.access_token == "sb-token"
        assert result.user.id == "sb-user-1"
        assert result.user.auth_provider == "supabase"
        assert result.user.is_collector is True
        sign_up_args = supabase_client.auth.sign_up.call_args.args[0]
        assert sign_up_args["options"]["data"]["username"] == "maker"
        supabase_client.table.assert_called_with("profiles")
        profile = supabase_client.table.return_value.upsert.call_args.args[0]
        assert profile["id"] == "sb-user-1"

    def test_register_without_session_returns_no_token(self, db_session, supabase_provider, supabase_client):
        supabase_client.auth.sign_up.return_value = SimpleNamespace(user=supabase_user(), session=None)

        result = supabase_provider.register(db_session, RegisterRequest(email="maker@example.com", password="secret123"))

        assert result.access_token is None

    def test_identityless_user_is_duplicate(self, db_session, supabase_provider, supabase_client):
        supabase_client.auth.sign_up.return_value = SimpleNamespace(
            user=supabase_user(identities=[]), session=None
        )

        with pytest.raises(DuplicateEmailError):
            supabase_provider.register(db_session, RegisterRequest(email="maker@example.com", password="secret123"))

    def test_register_rate_limit(self, db_session, supabase_provider, supabase_client):
        supabase_client.auth.sign_up.side_effect = Exception("Email rate limit exceeded")

        with pytest.raises(RateLimitedError):
            supabase_provider.register(db_session, RegisterRequest(email="maker@example.com", password="secret123"))

    def test_profile_upsert_failure_does_not_fail_register(self, db_session, supabase_provider, supabase_client):
        supabase_client.auth.sign_up.return_value = SimpleNamespace(user=supabase_user(), session=None)
        supabase_client.table.return_value.upsert.return_value.execute.side_effect = Exception("relation does not exist")

        result = supabase_provider.register(db_session, RegisterRequest(email="maker@example.com", password="secret123"))

        assert result.user.email == "maker@example.com"

    def test_login_invalid_credentials(self, db_session, supabase_provider, supabase_client):
        supabase_client.auth.sign_in_with_password.side_effect = Exception("Invalid login credentials")

        with pytest.raises(InvalidCredentialsError):
            supabase_provider.login(db_session, LoginRequest(email="maker@example.com", password="wrong"))

    def test_authenticate_uses_metadata(self, db_session, supabase_provider, supabase_client):
        supabase_client.auth.get_user.return_value = SimpleNamespace(
            user=supabase_user(metadata={"username": "mia", "is_seller": False})
        )

        user = supabase_provider.authenticate(db_session, "sb-token")

        assert user.username == "mia"
        assert user.is_seller is False
        supabase_client.auth.get_user.assert_called_once_with("sb-token")

    def test_update_profile_writes_remote_profile(self, db_session, supabase_provider, supabase_client):
        supabase_client.auth.get_user.return_value = SimpleNamespace(user=supabase_user())
        user = supabase_provider.authenticate(db_session, "sb-token")

        updated = supabase_provider.update_profile(db_session, user, ProfileUpdate(full_name="Mia Maker"))

        assert updated.full_name == "Mia Maker"
        profile = supabase_client.table.return_value.upsert.call_args.args[0]
        assert profile["full_name"] == "Mia Maker"

    def test_register_endpoint_maps_duplicate(self, client, supabase_provider, supabase_client):
        supabase_client.auth.sign_up.side_effect = Exception("User already registered")
        dependencies._auth_provider = supabase_provider

        response = client.post("/api/auth/register", json={"email": "maker@example.com", "password": "secret123"})

        assert response.status_code == status.HTTP_409_CONFLICT


@pytest.fixture(scope="module")
def rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def clerk_validator(rsa_key):
    validator = JWTValidator(issuer=ISSUER)
    validator.jwks_client = MagicMock()
    validator.jwks_client.get_signing_key_from_jwt.return_value = SimpleNamespace(key=rsa_key.public_key())
    return validator


def clerk_token(rsa_key, **overrides):
    now = int(time.time())
    claims = {
        "sub": "user_2abc",
        "email": "Clerk.User@example.com",
        "iss": ISSUER,
        "iat": now,
        "exp": now + 300,
        **overrides,
    }
    return jwt.encode(claims, rsa_key, algorithm="RS256")


class TestClerkAuthProvider:
    def test_jwks_url_defaults_to_well_known(self):
        assert JWTValidator(issuer=ISSUER + "/").jwks_url == f"{ISSUER}/.well-known/jwks.json"

    def test_authenticate_mirrors_user(self, db_session, clerk_validator, rsa_key):
        provider = ClerkAuthProvider(validator=clerk_validator)

        user = provider.authenticate(db_session, clerk_token(rsa_key))

        assert user.id == "user_2abc"
        assert user.email == "clerk.user@example.com"
        assert user.auth_provider == "clerk"

    def test_expired_token_is_rejected(self, db_session, clerk_validator, rsa_key):
        provider = ClerkAuthProvider(validator=clerk_validator)
        token = clerk_token(rsa_key, exp=int(time.time()) - 60)

        with pytest.raises(InvalidCredentialsError):
            provider.authenticate(db_session, token)

    def test_wrong_issuer_is_rejected(self, db_session, clerk_validator, rsa_key):
        provider = ClerkAuthProvider(validator=clerk_validator)

        with pytest.raises(InvalidCredentialsError):
            provider.authenticate(db_session, clerk_token(rsa_key, iss="https://evil.test"))

    def test_token_without_email_is_rejected(self, db_session, clerk_validator, rsa_key):
        provider = ClerkAuthProvider(validator=clerk_validator)

        with pytest.raises(InvalidCredentialsError):
            provider.authenticate(db_session, clerk_token(rsa_key, email=None))

    def test_register_and_login_are_not_supported(self, db_session, clerk_validator):
        provider = ClerkAuthProvider(validator=clerk_validator)

        with pytest.raises(ProviderNotSupportedError):
            provider.register(db_session, RegisterRequest(email="a@example.com", password="secret123"))
        with pytest.raises(ProviderNotSupportedError):
            provider.login(db_session, LoginRequest(email="a@example.com", password="secret123"))

    def test_endpoints(self, client, clerk_validator, rsa_key):
        dependencies._auth_provider = ClerkAuthProvider(validator=clerk_validator)

        response = client.post("/api/auth/register", json={"email": "a@example.com", "password": "secret123"})
        assert response.status_code == status.HTTP_501_NOT_IMPLEMENTED

        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {clerk_token(rsa_key)}"})
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["user"]["id"] == "user_2abc"
