"""
Abstract base class for auth providers
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional
from sqlalchemy.orm import Session

from upcycle_hub.models.user import User
from upcycle_hub.schemas.user import RegisterRequest, LoginRequest, ProfileUpdate
from upcycle_hub.services.user_service import UserService


@dataclass
class AuthResult:
    user: User
    access_token: Optional[str] = None


class AuthProvider(ABC):
    """Abstract interface for identity providers"""

    name = "base"

    @abstractmethod
    def register(self, db: Session, request: RegisterRequest) -> AuthResult:
        """
        Create an account.

        Raises:
            DuplicateEmailError: the email is already registered
            RateLimitedError: the provider throttled the request
        """

    @abstractmethod
    def login(self, db: Session, request: LoginRequest) -> AuthResult:
        """
        Exchange credentials for an access token.

        Raises:
            InvalidCredentialsError: unknown email or wrong password
        """

    @abstractmethod
    def authenticate(self, db: Session, token: str) -> User:
        """
        Resolve a bearer token to the local user record.

        Raises:
            InvalidCredentialsError: the token is invalid or expired
        """

    def update_profile(self, db: Session, user: User, profile: ProfileUpdate) -> User:
        """Profile upsert; providers with a remote profile store also write there"""
        return UserService(db).update_profile(user, profile)

    def logout(self, token: str) -> None:
        """Invalidate the session where the provider supports it"""
