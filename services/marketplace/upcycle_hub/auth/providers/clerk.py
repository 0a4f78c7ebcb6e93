"""
Auth provider that trusts Clerk session tokens

Sign-in and sign-up happen in Clerk's hosted widget, so only token
verification is implemented here.
"""
import logging
from typing import Optional
from sqlalchemy.orm import Session

from upcycle_hub.auth.jwt_validator import JWTValidator
from upcycle_hub.auth.providers.base import AuthProvider, AuthResult
from upcycle_hub.exceptions import InvalidCredentialsError, ProviderNotSupportedError
from upcycle_hub.models.user import User
from upcycle_hub.schemas.user import RegisterRequest, LoginRequest
from upcycle_hub.services.user_service import UserService

logger = logging.getLogger(__name__)


class ClerkAuthProvider(AuthProvider):
    name = "clerk"

    def __init__(self, validator: Optional[JWTValidator] = None):
        self._validator = validator

    @property
    def validator(self) -> JWTValidator:
        if self._validator is None:
            self._validator = JWTValidator()
        return self._validator

    def register(self, db: Session, request: RegisterRequest) -> AuthResult:
        raise ProviderNotSupportedError("Sign up is handled by the Clerk widget")

    def login(self, db: Session, request: LoginRequest) -> AuthResult:
        raise ProviderNotSupportedError("Sign in is handled by the Clerk widget")

    def authenticate(self, db: Session, token: str) -> User:
        payload = self.validator.verify_token(token)

        user_id = payload.get("sub")
        # Email is only present when the Clerk JWT template adds it
        email = payload.get("email") or payload.get("primary_email_address")
        if not user_id:
            logger.warning("Token missing sub claim")
            raise InvalidCredentialsError("Token missing sub claim")
        if not email:
            logger.warning("Token missing email claim")
            raise InvalidCredentialsError("Token missing email claim")

        users = UserService(db)
        user = users.get_by_id(user_id)
        if user is None or user.email != email.lower():
            user = users.upsert_user(
                user_id=user_id,
                email=email,
                auth_provider=self.name,
                username=payload.get("username"),
                full_name=payload.get("name"),
            )
        return user
