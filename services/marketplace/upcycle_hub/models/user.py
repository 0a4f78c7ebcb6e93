from sqlalchemy import Column, String, Text, Boolean, DateTime, Index
from sqlalchemy.sql import func
import uuid
from upcycle_hub.db.database import Base


class User(Base):
    __tablename__ = "users"

    # Local users get a UUID4 string; Supabase and Clerk users keep the provider's id
    id = Column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(Text, nullable=False, unique=True)
    username = Column(Text, nullable=False)
    full_name = Column(Text)
    is_seller = Column(Boolean, nullable=False, default=True)
    is_collector = Column(Boolean, nullable=False, default=False)
    password_hash = Column(Text)
    auth_provider = Column(String(20), nullable=False, default="local")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        Index("idx_users_username", "username"),
    )
