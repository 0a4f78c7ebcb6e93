"""
Auth provider that proxies to Supabase Auth

Accounts live in Supabase; the profile row is upserted into the Supabase
profiles table and mirrored into the local users table so listings can
reference their seller.
"""
import logging
from typing import Any, Optional
from sqlalchemy.orm import Session

from upcycle_hub.auth.providers.base import AuthProvider, AuthResult
from upcycle_hub.config import settings
from upcycle_hub.exceptions import (
    DuplicateEmailError,
    ExternalServiceError,
    InvalidCredentialsError,
    MarketplaceError,
    RateLimitedError,
)
from upcycle_hub.models.user import User
from upcycle_hub.schemas.user import RegisterRequest, LoginRequest, ProfileUpdate
from upcycle_hub.services.supabase_client import get_supabase_client
from upcycle_hub.services.user_service import UserService, default_username

logger = logging.getLogger(__name__)


def map_supabase_error(error: Exception) -> MarketplaceError:
    """Translate a Supabase auth error into the marketplace error taxonomy"""
    message = getattr(error, "message", None) or str(error)
    status = getattr(error, "status", None)
    lowered = message.lower()

    if status == 429 or "rate limit" in lowered or "too many requests" in lowered:
        return RateLimitedError(message)
    if "already registered" in lowered or "already exists" in lowered:
        return DuplicateEmailError("User with this email already exists")
    if "invalid login credentials" in lowered or "invalid credentials" in lowered:
        return InvalidCredentialsError("Invalid login credentials")
    if status in (401, 403) or "jwt" in lowered or "token" in lowered:
        return InvalidCredentialsError("Invalid authentication credentials")
    return ExternalServiceError(f"Supabase auth error: {message}")


class SupabaseAuthProvider(AuthProvider):
    name = "supabase"

    def __init__(self, client: Optional[Any] = None):
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = get_supabase_client()
        return self._client

    def _upsert_remote_profile(self, user: User) -> None:
        try:
            self.client.table(settings.supabase_profiles_table).upsert({
                "id": user.id,
                "email": user.email,
                "username": user.username,
                "full_name": user.full_name,
                "is_seller": user.is_seller,
                "is_collector": user.is_collector,
            }).execute()
        except Exception as e:
            # The auth account exists either way; the profile row is retried on the next upsert
            logger.error(f"Failed to upsert Supabase profile for {user.email}: {e}", exc_info=True)

    def register(self, db: Session, request: RegisterRequest) -> AuthResult:
        username = request.username or default_username(request.email)
        try:
            response = self.client.auth.sign_up({
                "email": request.email,
                "password": request.password,
                "options": {
                    "data": {
                        "username": username,
                        "full_name": request.full_name,
                        "is_seller": request.is_seller,
                        "is_collector": request.is_collector,
                    }
                },
            })
        except Exception as e:
            logger.warning(f"Supabase sign up failed for {request.email}: {e}")
            raise map_supabase_error(e)

        remote_user = response.user
        if remote_user is None:
            raise ExternalServiceError("Supabase did not return a user")
        # With email enumeration protection Supabase answers a duplicate sign up with an identity-less user
        if getattr(remote_user, "identities", None) == []:
            raise DuplicateEmailError("User with this email already exists")

        user = UserService(db).upsert_user(
            user_id=str(remote_user.id),
            email=remote_user.email or request.email,
            auth_provider=self.name,
            username=username,
            full_name=request.full_name,
            is_seller=request.is_seller,
            is_collector=request.is_collector,
        )
        self._upsert_remote_profile(user)

        session = response.session
        return AuthResult(user=user, access_token=session.access_token if session else None)

    def login(self, db: Session, request: LoginRequest) -> AuthResult:
        try:
            response = self.client.auth.sign_in_with_password({
                "email": request.email,
                "password": request.password,
            })
        except Exception as e:
            logger.warning(f"Supabase sign in failed for {request.email}: {e}")
            raise map_supabase_error(e)

        user = self._mirror(db, response.user)
        return AuthResult(user=user, access_token=response.session.access_token if response.session else None)

    def authenticate(self, db: Session, token: str) -> User:
        try:
            response = self.client.auth.get_user(token)
        except Exception as e:
            logger.warning(f"Supabase session lookup failed: {e}")
            raise map_supabase_error(e)

        if response is None or response.user is None:
            raise InvalidCredentialsError("Invalid authentication credentials")
        return self._mirror(db, response.user)

    def update_profile(self, db: Session, user: User, profile: ProfileUpdate) -> User:
        user = UserService(db).update_profile(user, profile)
        self._upsert_remote_profile(user)
        return user

    def logout(self, token: str) -> None:
        try:
            self.client.auth.admin.sign_out(token)
        except Exception as e:
            logger.warning(f"Supabase sign out failed: {e}")

    def _mirror(self, db: Session, remote_user) -> User:
        metadata = getattr(remote_user, "user_metadata", None) or {}
        users = UserService(db)
        existing = users.get_by_id(str(remote_user.id))
        if existing is not None and existing.email == (remote_user.email or "").lower():
            return existing
        return users.upsert_user(
            user_id=str(remote_user.id),
            email=remote_user.email,
            auth_provider=self.name,
            username=metadata.get("username"),
            full_name=metadata.get("full_name"),
            is_seller=metadata.get("is_seller"),
            is_collector=metadata.get("is_collector"),
        )
