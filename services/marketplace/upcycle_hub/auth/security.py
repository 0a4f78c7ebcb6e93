"""
Password hashing and access tokens for the local auth provider
"""
import jwt
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional
from passlib.context import CryptContext
from upcycle_hub.config import settings
from upcycle_hub.exceptions import InvalidCredentialsError

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Unrecognized hash format
        logger.warning("Stored password hash could not be identified")
        return False


def create_access_token(user_id: str, email: str, expires_delta: Optional[timedelta] = None) -> str:
    """Issue an HS256 access token for a local user"""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    payload = {
        "sub": user_id,
        "email": email,
        "iat": now,
        "exp": expire,
        "iss": settings.app_name,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Dict:
    """Verify a locally issued access token and return its claims"""
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.app_name,
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        logger.warning("Access token has expired")
        raise InvalidCredentialsError("Token has expired")
    except jwt.InvalidTokenError as e:
        logger.warning(f"Access token verification failed: {e}")
        raise InvalidCredentialsError("Invalid authentication credentials")
