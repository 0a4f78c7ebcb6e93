"""
Auth provider backed by the marketplace's own users table
"""
import logging
from sqlalchemy.orm import Session

from upcycle_hub.auth.providers.base import AuthProvider, AuthResult
from upcycle_hub.auth.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)
from upcycle_hub.exceptions import DuplicateEmailError, InvalidCredentialsError
from upcycle_hub.models.user import User
from upcycle_hub.schemas.user import RegisterRequest, LoginRequest
from upcycle_hub.services.user_service import UserService

logger = logging.getLogger(__name__)


class LocalAuthProvider(AuthProvider):
    name = "local"

    def register(self, db: Session, request: RegisterRequest) -> AuthResult:
        users = UserService(db)
        if users.get_by_email(request.email):
            logger.info(f"User with email {request.email} already exists")
            raise DuplicateEmailError("User with this email already exists")

        user = users.create_user(
            email=request.email,
            username=request.username,
            full_name=request.full_name,
            is_seller=request.is_seller,
            is_collector=request.is_collector,
            password_hash=get_password_hash(request.password),
            auth_provider=self.name,
        )
        return AuthResult(user=user, access_token=create_access_token(user.id, user.email))

    def login(self, db: Session, request: LoginRequest) -> AuthResult:
        user = UserService(db).get_by_email(request.email)
        if user is None or not verify_password(request.password, user.password_hash):
            logger.warning(f"Failed login attempt for {request.email}")
            raise InvalidCredentialsError("Invalid login credentials")

        logger.info(f"User logged in: {user.email}")
        return AuthResult(user=user, access_token=create_access_token(user.id, user.email))

    def authenticate(self, db: Session, token: str) -> User:
        payload = decode_access_token(token)
        user = UserService(db).get_by_id(payload["sub"])
        if user is None:
            logger.warning(f"Token subject no longer exists: {payload['sub']}")
            raise InvalidCredentialsError("User not found")
        return user
