"""
In-memory product store served when DATA_BACKEND=mock

Starts from two fabricated sample listings and keeps anything created until
the process restarts. Mirrors the ProductService interface.
"""
import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import UUID

from upcycle_hub.models.user import User
from upcycle_hub.schemas.product import ProductCreate, ProductImageCreate, ProductListResponse

logger = logging.getLogger(__name__)

MOCK_IMAGE_URL = "https://example.com/placeholder.jpg"


def _sample_products() -> List[dict]:
    now = datetime.now(timezone.utc)
    return [
        {
            "id": uuid.uuid4(),
            "seller_id": "1000",
            "title": "Vintage Camera",
            "description": "A beautiful vintage camera in excellent condition",
            "price_cents": 12500,
            "category": "Photography",
            "condition": "Excellent",
            "location": "Portland, OR",
            "status": "active",
            "views": 14,
            "images": [],
            "created_at": now,
            "updated_at": now,
        },
        {
            "id": uuid.uuid4(),
            "seller_id": "1001",
            "title": "Upcycled Wooden Chair",
            "description": "Handcrafted chair made from reclaimed wood",
            "price_cents": 8900,
            "category": "Furniture",
            "condition": "Like New",
            "location": "Seattle, WA",
            "status": "active",
            "views": 23,
            "images": [],
            "created_at": now,
            "updated_at": now,
        },
    ]


class MockProductStore:
    def __init__(self):
        self._lock = threading.Lock()
        self.products: Dict[UUID, dict] = {}
        self.reset()

    def reset(self) -> None:
        with self._lock:
            self.products = {product["id"]: product for product in _sample_products()}


_store: Optional[MockProductStore] = None


def get_mock_store() -> MockProductStore:
    global _store
    if _store is None:
        _store = MockProductStore()
    return _store


class MockProductService:
    """ProductService stand-in backed by the in-memory store"""

    def __init__(self, store: Optional[MockProductStore] = None):
        self.store = store or get_mock_store()

    def _live(self, product_id: UUID) -> dict:
        product = self.store.products.get(product_id)
        if product is None or product["status"] == "deleted":
            raise ValueError("Product not found")
        return product

    def create_product(self, product_data: ProductCreate, seller: User) -> dict:
        now = datetime.now(timezone.utc)
        product = {
            "id": uuid.uuid4(),
            "seller_id": seller.id,
            **product_data.model_dump(),
            "views": 0,
            "images": [],
            "created_at": now,
            "updated_at": now,
        }
        with self.store._lock:
            self.store.products[product["id"]] = product
        logger.info(f"Created mock product {product['id']} for seller {seller.email}")
        return dict(product)

    def list_products(
        self,
        category: Optional[str] = None,
        seller_id: Optional[str] = None,
        search: Optional[str] = None,
        status_filter: str = "active",
        page: int = 1,
        page_size: int = 20
    ) -> ProductListResponse:
        products = [p for p in self.store.products.values() if p["status"] == status_filter]
        if category:
            products = [p for p in products if p["category"].lower() == category.lower()]
        if seller_id:
            products = [p for p in products if p["seller_id"] == seller_id]
        if search:
            needle = search.lower()
            products = [
                p for p in products
                if needle in p["title"].lower() or needle in (p["description"] or "").lower()
            ]
        products.sort(key=lambda p: p["created_at"], reverse=True)

        total = len(products)
        start = (page - 1) * page_size
        return ProductListResponse(
            products=products[start:start + page_size],
            total=total,
            page=page,
            page_size=page_size,
            has_next=(page * page_size) < total
        )

    def list_seller_products(self, seller: User) -> List[dict]:
        return [
            p for p in self.store.products.values()
            if p["seller_id"] == seller.id and p["status"] != "deleted"
        ]

    def get_product(self, product_id: UUID, count_view: bool = True) -> dict:
        product = self._live(product_id)
        if count_view:
            product["views"] += 1
        return dict(product)

    def delete_product(self, product_id: UUID, user: User) -> None:
        product = self._live(product_id)
        if product["seller_id"] != user.id:
            raise PermissionError("You can only delete your own products")
        product["status"] = "deleted"
        product["updated_at"] = datetime.now(timezone.utc)

    def add_image(self, product_id: UUID, image_data: ProductImageCreate, user: User) -> dict:
        product = self._live(product_id)
        if product["seller_id"] != user.id:
            raise PermissionError("You can only add images to your own products")

        # Uploads are not stored; every image resolves to the placeholder
        image = {
            "id": uuid.uuid4(),
            "product_id": product_id,
            "url": MOCK_IMAGE_URL,
            "is_main": image_data.is_main,
            "created_at": datetime.now(timezone.utc),
        }
        if image_data.is_main:
            for existing in product["images"]:
                existing["is_main"] = False
        product["images"].append(image)
        return image
