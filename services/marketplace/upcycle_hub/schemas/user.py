from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime


class RegisterRequest(BaseModel):
    email: EmailStr = Field(..., description="Account email", examples=["maker@example.com"])
    password: str = Field(..., min_length=6, max_length=128, description="Account password")
    username: Optional[str] = Field(None, min_length=2, max_length=50, description="Display name (defaults to the email local part)")
    full_name: Optional[str] = Field(None, max_length=200, description="Full name")
    is_seller: bool = Field(default=True, description="Can list items for sale")
    is_collector: bool = Field(default=False, description="Collects upcycled items")


class LoginRequest(BaseModel):
    email: EmailStr = Field(..., description="Account email", examples=["maker@example.com"])
    password: str = Field(..., min_length=1, description="Account password")


class ProfileUpdate(BaseModel):
    username: Optional[str] = Field(None, min_length=2, max_length=50)
    full_name: Optional[str] = Field(None, max_length=200)
    is_seller: Optional[bool] = None
    is_collector: Optional[bool] = None


class UserResponse(BaseModel):
    id: str = Field(..., description="User id")
    email: str = Field(..., description="Account email", examples=["maker@example.com"])
    username: str = Field(..., description="Display name", examples=["maker"])
    full_name: Optional[str] = Field(None, description="Full name")
    is_seller: bool = Field(..., description="Seller flag")
    is_collector: bool = Field(..., description="Collector flag")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")

    class Config:
        from_attributes = True


class UserEnvelope(BaseModel):
    user: UserResponse


class AuthResponse(BaseModel):
    user: UserResponse
    # None when the provider requires email confirmation before issuing a session
    access_token: Optional[str] = None
    token_type: str = "bearer"
