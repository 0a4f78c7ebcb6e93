from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import Optional
import logging

from upcycle_hub.exceptions import DuplicateEmailError
from upcycle_hub.models.user import User
from upcycle_hub.schemas.user import ProfileUpdate

logger = logging.getLogger(__name__)


def default_username(email: str) -> str:
    return email.split("@")[0] or "user"


class UserService:
    """Service layer for user records mirrored from every auth provider"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email.strip().lower()).first()

    def create_user(
        self,
        email: str,
        username: Optional[str] = None,
        full_name: Optional[str] = None,
        is_seller: bool = True,
        is_collector: bool = False,
        password_hash: Optional[str] = None,
        auth_provider: str = "local",
        user_id: Optional[str] = None,
    ) -> User:
        email = email.strip().lower()
        user = User(
            email=email,
            username=username or default_username(email),
            full_name=full_name,
            is_seller=is_seller,
            is_collector=is_collector,
            password_hash=password_hash,
            auth_provider=auth_provider,
        )
        if user_id:
            user.id = user_id

        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as e:
            # A concurrent registration committed the same email first
            self.db.rollback()
            logger.warning(f"User creation failed - email already exists: {email}")
            raise DuplicateEmailError("User with this email already exists") from e
        self.db.refresh(user)
        logger.info(f"Created {auth_provider} user: {email} (user_id: {user.id})")
        return user

    def upsert_user(
        self,
        user_id: str,
        email: str,
        auth_provider: str,
        username: Optional[str] = None,
        full_name: Optional[str] = None,
        is_seller: Optional[bool] = None,
        is_collector: Optional[bool] = None,
    ) -> User:
        """Create or refresh the local mirror of an externally managed user"""
        user = self.get_by_id(user_id)
        if user is None:
            return self.create_user(
                email=email,
                username=username,
                full_name=full_name,
                is_seller=True if is_seller is None else is_seller,
                is_collector=bool(is_collector),
                auth_provider=auth_provider,
                user_id=user_id,
            )

        user.email = email.strip().lower()
        if username:
            user.username = username
        if full_name is not None:
            user.full_name = full_name
        if is_seller is not None:
            user.is_seller = is_seller
        if is_collector is not None:
            user.is_collector = is_collector

        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Email {email} of {auth_provider} user {user_id} belongs to another account")
            raise DuplicateEmailError("User with this email already exists") from e
        self.db.refresh(user)
        return user

    def update_profile(self, user: User, profile: ProfileUpdate) -> User:
        update_data = profile.model_dump(exclude_unset=True, exclude_none=True)
        for field, value in update_data.items():
            setattr(user, field, value)

        self.db.commit()
        self.db.refresh(user)
        logger.info(f"Updated profile for {user.email}: {sorted(update_data)}")
        return user
