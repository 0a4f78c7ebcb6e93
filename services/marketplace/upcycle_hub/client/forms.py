"""Client-side form schemas, validated before anything is sent"""
import math

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator
from typing import Optional

CONDITIONS = ("New", "Like New", "Excellent", "Good", "Fair", "Poor")
SENTINELS = ("select_category", "select_condition")


class LoginForm(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class SignupForm(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    confirm_password: Optional[str] = None
    username: Optional[str] = Field(None, min_length=2, max_length=50)
    full_name: Optional[str] = Field(None, max_length=200)
    is_seller: bool = True
    is_collector: bool = False

    @model_validator(mode="after")
    def passwords_match(self) -> "SignupForm":
        if self.confirm_password is not None and self.confirm_password != self.password:
            raise ValueError("Passwords do not match")
        return self

    def to_payload(self) -> dict:
        return self.model_dump(exclude={"confirm_password"}, exclude_none=True)


class ProductForm(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    # Entered in dollars, e.g. "12.50"
    price: str = Field(..., min_length=1)
    category: str
    condition: str
    location: Optional[str] = None
    status: str = "active"

    @field_validator("price")
    @classmethod
    def price_positive(cls, value: str) -> str:
        try:
            amount = float(value)
        except ValueError:
            raise ValueError("Price must be a positive number")
        if not math.isfinite(amount) or round(amount * 100) < 1:
            raise ValueError("Price must be a positive number")
        return value

    @field_validator("category")
    @classmethod
    def category_selected(cls, value: str) -> str:
        if value in SENTINELS or value.strip() == "":
            raise ValueError("Please select a valid category")
        return value

    @field_validator("condition")
    @classmethod
    def condition_selected(cls, value: str) -> str:
        if value in SENTINELS or value.strip() == "" or value not in CONDITIONS:
            raise ValueError("Please select a valid condition")
        return value

    @property
    def price_cents(self) -> int:
        return round(float(self.price) * 100)

    def to_payload(self) -> dict:
        payload = self.model_dump(exclude={"price"}, exclude_none=True)
        payload["price_cents"] = self.price_cents
        return payload
