from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session
import logging

from upcycle_hub.auth.dependencies import (
    get_auth_provider,
    get_bearer_token,
    get_current_user,
    limit_registration,
    raise_http_error,
)
from upcycle_hub.auth.providers import AuthProvider
from upcycle_hub.db.database import get_db
from upcycle_hub.exceptions import MarketplaceError
from upcycle_hub.models.user import User
from upcycle_hub.schemas.user import RegisterRequest, LoginRequest, ProfileUpdate, AuthResponse, UserEnvelope

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["Auth"]
)


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new account",
    description="""
    Create an account with the configured auth provider.

    **Errors:**
    - 409: an account with this email already exists
    - 429: too many sign up attempts; honour the `Retry-After` header
    - 501: sign up happens in the hosted widget (Clerk)
    """,
    dependencies=[Depends(limit_registration)],
    responses={
        201: {"description": "Account created"},
        409: {"description": "User with this email already exists"},
        429: {"description": "Rate limit exceeded"},
        501: {"description": "Provider does not support server-side sign up"}
    }
)
async def register(
    request: RegisterRequest,
    db: Session = Depends(get_db),
    provider: AuthProvider = Depends(get_auth_provider)
):
    """Register a user"""
    logger.info(f"Handling registration request for {request.email}")
    try:
        result = provider.register(db, request)
    except MarketplaceError as e:
        raise_http_error(e)
    return AuthResponse(user=result.user, access_token=result.access_token)


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Log in",
    responses={
        200: {"description": "Logged in"},
        401: {"description": "Invalid login credentials"},
        429: {"description": "Rate limit exceeded"}
    }
)
async def login(
    request: LoginRequest,
    db: Session = Depends(get_db),
    provider: AuthProvider = Depends(get_auth_provider)
):
    """Exchange email and password for an access token"""
    try:
        result = provider.login(db, request)
    except MarketplaceError as e:
        raise_http_error(e)
    return AuthResponse(user=result.user, access_token=result.access_token)


@router.get(
    "/me",
    response_model=UserEnvelope,
    summary="Current user",
    responses={
        200: {"description": "The authenticated user"},
        401: {"description": "Authentication required"}
    }
)
async def me(current_user: User = Depends(get_current_user)):
    return UserEnvelope(user=current_user)


@router.put(
    "/profile",
    response_model=UserEnvelope,
    summary="Update profile",
    description="""
    Upsert the profile of the authenticated user. Only provided fields change.
    The seller and collector flags control which actions the client exposes.
    """,
    responses={
        200: {"description": "Profile updated"},
        401: {"description": "Authentication required"}
    }
)
async def update_profile(
    profile: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    provider: AuthProvider = Depends(get_auth_provider)
):
    user = provider.update_profile(db, current_user, profile)
    return UserEnvelope(user=user)


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Log out",
)
async def logout(
    token: str = Depends(get_bearer_token),
    current_user: User = Depends(get_current_user),
    provider: AuthProvider = Depends(get_auth_provider)
):
    provider.logout(token)
    logger.info(f"User logged out: {current_user.email}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
