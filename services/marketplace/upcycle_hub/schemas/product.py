from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from uuid import UUID
from datetime import datetime

from upcycle_hub.models.product import PRODUCT_CONDITIONS

STATUS_PATTERN = "^(active|sold|inactive)$"


class ProductCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200, description="Listing title", examples=["Upcycled Wooden Chair"])
    description: Optional[str] = Field(None, description="Listing description", examples=["Handcrafted chair made from reclaimed wood"])
    price_cents: int = Field(..., gt=0, description="Price in cents", examples=[8900])
    category: str = Field(..., min_length=1, max_length=100, description="Category name", examples=["Furniture"])
    condition: str = Field(..., description="Item condition", examples=["Like New"])
    location: Optional[str] = Field(None, max_length=200, description="Pickup location", examples=["Seattle, WA"])
    status: str = Field(default="active", pattern=STATUS_PATTERN, description="Listing status")

    @field_validator("category")
    @classmethod
    def category_selected(cls, value: str) -> str:
        if value.strip() == "" or value == "select_category":
            raise ValueError("Please select a valid category")
        return value.strip()

    @field_validator("condition")
    @classmethod
    def condition_known(cls, value: str) -> str:
        if value not in PRODUCT_CONDITIONS:
            raise ValueError("Please select a valid condition")
        return value


class ProductImageCreate(BaseModel):
    url: str = Field(..., min_length=1, description="Image URL or data: URL", examples=["https://example.com/chair.jpg"])
    is_main: bool = Field(default=False, description="Cover image flag")


class ProductImageResponse(BaseModel):
    id: UUID = Field(..., description="Image UUID")
    product_id: UUID = Field(..., description="Product UUID")
    url: str = Field(..., description="Stored image URL")
    is_main: bool = Field(..., description="Cover image flag")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")

    class Config:
        from_attributes = True


class ProductImageEnvelope(BaseModel):
    image: ProductImageResponse


class ProductResponse(BaseModel):
    id: UUID = Field(..., description="Product UUID")
    seller_id: str = Field(..., description="Seller user id")
    title: str = Field(..., description="Listing title")
    description: Optional[str] = Field(None, description="Listing description")
    price_cents: int = Field(..., description="Price in cents", examples=[12500])
    category: str = Field(..., description="Category name")
    condition: str = Field(..., description="Item condition")
    location: Optional[str] = Field(None, description="Pickup location")
    status: str = Field(..., description="Listing status", examples=["active"])
    views: int = Field(0, description="Detail page views")
    images: List[ProductImageResponse] = Field(default_factory=list, description="Attached images, cover first")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    class Config:
        from_attributes = True
        json_schema_extra = {
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "seller_id": "0b6d6c3e-7a57-4d4f-9a7d-1a8f2f0c3b11",
                "title": "Vintage Camera",
                "description": "A beautiful vintage camera in excellent condition",
                "price_cents": 12500,
                "category": "Photography",
                "condition": "Excellent",
                "location": "Portland, OR",
                "status": "active",
                "views": 14,
                "images": [],
                "created_at": "2024-01-15T10:30:00Z",
                "updated_at": "2024-01-15T10:30:00Z"
            }
        }


class ProductEnvelope(BaseModel):
    product: ProductResponse


class ProductListResponse(BaseModel):
    products: List[ProductResponse]
    total: int
    page: int
    page_size: int
    has_next: bool


class SellerProductsResponse(BaseModel):
    products: List[ProductResponse]
