from sqlalchemy.orm import Session, selectinload
from sqlalchemy import or_
from typing import List, Optional
from uuid import UUID
from datetime import datetime, timezone
import logging

from upcycle_hub.exceptions import ExternalServiceError
from upcycle_hub.models.product import Product, ProductImage
from upcycle_hub.models.user import User
from upcycle_hub.schemas.product import ProductCreate, ProductImageCreate, ProductListResponse
from upcycle_hub.services import get_image_provider
from upcycle_hub.services.image_data import is_data_url, parse_data_url

logger = logging.getLogger(__name__)


def image_to_dict(image: ProductImage) -> dict:
    return {
        "id": image.id,
        "product_id": image.product_id,
        "url": image.url,
        "is_main": image.is_main,
        "created_at": image.created_at,
    }


class ProductService:
    """Service layer for product operations"""

    def __init__(self, db: Session, image_provider=None):
        self.db = db
        self.image_provider = image_provider if image_provider is not None else get_image_provider()

    def _product_to_response_dict(self, product: Product) -> dict:
        """Convert Product model to a response dict with the cover image first"""
        images = sorted(product.images, key=lambda image: not image.is_main)
        return {
            "id": product.id,
            "seller_id": product.seller_id,
            "title": product.title,
            "description": product.description,
            "price_cents": product.price_cents,
            "category": product.category,
            "condition": product.condition,
            "location": product.location,
            "status": product.status,
            "views": product.views,
            "images": [image_to_dict(image) for image in images],
            "created_at": product.created_at,
            "updated_at": product.updated_at,
        }

    def _get_live_product(self, product_id: UUID) -> Product:
        product = self.db.query(Product).options(selectinload(Product.images)).filter(
            Product.id == product_id,
            Product.deleted_at.is_(None)
        ).first()

        if not product:
            raise ValueError("Product not found")
        return product

    def create_product(self, product_data: ProductCreate, seller: User) -> dict:
        """Create a new listing owned by the seller"""
        product = Product(
            seller_id=seller.id,
            title=product_data.title,
            description=product_data.description,
            price_cents=product_data.price_cents,
            category=product_data.category,
            condition=product_data.condition,
            location=product_data.location,
            status=product_data.status,
            views=0,
        )

        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)

        logger.info(f"Created product {product.id} '{product.title}' for seller {seller.email}")
        return self._product_to_response_dict(product)

    def list_products(
        self,
        category: Optional[str] = None,
        seller_id: Optional[str] = None,
        search: Optional[str] = None,
        status_filter: str = "active",
        page: int = 1,
        page_size: int = 20
    ) -> ProductListResponse:
        """Browse listings with pagination, newest first"""
        query = self.db.query(Product).filter(
            Product.status == status_filter,
            Product.deleted_at.is_(None)
        )

        if category:
            query = query.filter(Product.category.ilike(category))
        if seller_id:
            query = query.filter(Product.seller_id == seller_id)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(Product.title.ilike(pattern), Product.description.ilike(pattern)))

        total = query.count()

        products = query.options(selectinload(Product.images)).order_by(
            Product.created_at.desc()
        ).offset((page - 1) * page_size).limit(page_size).all()

        logger.debug(f"Found {len(products)} products (page {page}, total: {total})")

        return ProductListResponse(
            products=[self._product_to_response_dict(product) for product in products],
            total=total,
            page=page,
            page_size=page_size,
            has_next=(page * page_size) < total
        )

    def list_seller_products(self, seller: User) -> List[dict]:
        """All non-deleted listings of a seller, for the dashboard"""
        products = self.db.query(Product).options(selectinload(Product.images)).filter(
            Product.seller_id == seller.id,
            Product.deleted_at.is_(None)
        ).order_by(Product.created_at.desc()).all()

        logger.info(f"Found {len(products)} products for seller {seller.email}")
        return [self._product_to_response_dict(product) for product in products]

    def get_product(self, product_id: UUID, count_view: bool = True) -> dict:
        """Get a listing by ID, counting the view"""
        product = self._get_live_product(product_id)

        if count_view:
            product.views = (product.views or 0) + 1
            self.db.commit()
            self.db.refresh(product)

        return self._product_to_response_dict(product)

    def delete_product(self, product_id: UUID, user: User) -> None:
        """Soft delete a listing owned by the user"""
        product = self._get_live_product(product_id)

        if product.seller_id != user.id:
            raise PermissionError("You can only delete your own products")

        product.status = "deleted"
        product.deleted_at = datetime.now(timezone.utc)
        self.db.commit()

        logger.info(f"Deleted product {product_id} for seller {user.email}")

    def add_image(self, product_id: UUID, image_data: ProductImageCreate, user: User) -> dict:
        """Attach an image to a listing owned by the user

        data: URLs are uploaded to the configured image provider and replaced by
        the provider's URL. Without a provider the URL is stored as given.
        """
        product = self._get_live_product(product_id)

        if product.seller_id != user.id:
            raise PermissionError("You can only add images to your own products")

        url = image_data.url
        if is_data_url(url):
            content_type, payload = parse_data_url(url)
            if self.image_provider is not None:
                url = self._upload(product, content_type, payload)
        elif not url.startswith(("http://", "https://")):
            raise ValueError("Image URL must be an http(s) or data URL")

        if image_data.is_main:
            for image in product.images:
                image.is_main = False

        image = ProductImage(product_id=product.id, url=url, is_main=image_data.is_main)
        self.db.add(image)
        self.db.commit()
        self.db.refresh(image)

        logger.info(f"Added image {image.id} to product {product.id} (is_main={image.is_main})")
        return image_to_dict(image)

    def _upload(self, product: Product, content_type: str, payload: bytes) -> str:
        image_id = self.image_provider.upload_image(
            payload,
            metadata={
                "folder": str(product.id),
                "content_type": content_type,
                "tags": ["product", "seller-upload"],
            }
        )
        if not image_id:
            raise ExternalServiceError("Failed to upload image to storage")
        return self.image_provider.get_image_url(image_id)
