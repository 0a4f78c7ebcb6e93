from fastapi import HTTPException, status, Depends, Request, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional
import logging

from upcycle_hub.auth.providers import AuthProvider, LocalAuthProvider, SupabaseAuthProvider, ClerkAuthProvider
from upcycle_hub.auth.rate_limit import LocalRateLimiter
from upcycle_hub.config import settings
from upcycle_hub.db.database import get_db
from upcycle_hub.exceptions import MarketplaceError
from upcycle_hub.models.user import User

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

_auth_provider: Optional[AuthProvider] = None
_register_limiter: Optional[LocalRateLimiter] = None


def build_auth_provider(name: str) -> AuthProvider:
    providers = {
        "local": LocalAuthProvider,
        "supabase": SupabaseAuthProvider,
        "clerk": ClerkAuthProvider,
    }
    if name not in providers:
        raise ValueError(f"Unknown auth provider: {name}")
    return providers[name]()


def get_auth_provider() -> AuthProvider:
    """Get the configured auth provider instance"""
    global _auth_provider
    if _auth_provider is None:
        _auth_provider = build_auth_provider(settings.auth_provider)
        logger.info(f"Using {_auth_provider.name} auth provider")
    return _auth_provider


def get_register_limiter() -> LocalRateLimiter:
    global _register_limiter
    if _register_limiter is None:
        _register_limiter = LocalRateLimiter(
            settings.register_rate_limit_times,
            settings.register_rate_limit_seconds,
        )
    return _register_limiter


async def limit_registration(
    request: Request,
    provider: AuthProvider = Depends(get_auth_provider),
) -> None:
    """Throttle sign ups when the local provider has no upstream limiter"""
    if provider.name == "local":
        await get_register_limiter()(request)


def raise_http_error(error: MarketplaceError) -> None:
    """Convert a marketplace error into the matching HTTPException"""
    headers = None
    retry_after = getattr(error, "retry_after", None)
    if retry_after is not None:
        headers = {"Retry-After": str(retry_after)}
    if error.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    raise HTTPException(status_code=error.status_code, detail=error.message, headers=headers)


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
) -> str:
    if not credentials:
        logger.warning("Authentication credentials missing")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header missing",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return credentials.credentials


async def get_current_user(
    token: str = Depends(get_bearer_token),
    db: Session = Depends(get_db),
    provider: AuthProvider = Depends(get_auth_provider),
) -> User:
    """Dependency to resolve the bearer token to a user"""
    try:
        user = provider.authenticate(db, token)
    except MarketplaceError as e:
        raise_http_error(e)
    except Exception as e:
        logger.error(f"Error authenticating user: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Authentication failed"
        )

    logger.debug(f"Authenticated user: {user.email} (user_id: {user.id})")
    return user


async def require_seller(
    current_user: User = Depends(get_current_user)
) -> User:
    """Dependency to require the seller flag on the profile"""
    if not current_user.is_seller:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Requires a seller profile"
        )
    return current_user
