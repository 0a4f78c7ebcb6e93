from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID
import logging

from upcycle_hub.auth.dependencies import get_current_user, require_seller, raise_http_error
from upcycle_hub.config import settings
from upcycle_hub.db.database import get_db
from upcycle_hub.exceptions import MarketplaceError
from upcycle_hub.models.user import User
from upcycle_hub.schemas.product import (
    ProductCreate,
    ProductEnvelope,
    ProductListResponse,
    SellerProductsResponse,
    ProductImageCreate,
    ProductImageEnvelope,
)
from upcycle_hub.services.mock_product_service import MockProductService
from upcycle_hub.services.product_service import ProductService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/products",
    tags=["Products"]
)


def get_product_service(db: Session = Depends(get_db)):
    """Dependency to get the product service for the configured data backend"""
    if settings.data_backend == "mock":
        return MockProductService()
    return ProductService(db)


@router.get(
    "",
    response_model=ProductListResponse,
    summary="Browse products",
    description="""
    Browse listings. This is a public endpoint - no authentication required.

    **Filtering:**
    - `category`: exact category name (case-insensitive)
    - `seller_id`: listings of one seller
    - `q`: substring of title or description
    - `status`: defaults to `active`

    **Pagination:**
    - Default page size: 20, maximum: 100
    - Use `has_next` to determine if more pages exist
    """,
    responses={
        200: {"description": "List of products with pagination metadata"}
    }
)
async def list_products(
    category: Optional[str] = Query(None, description="Filter by category"),
    seller_id: Optional[str] = Query(None, description="Filter by seller"),
    q: Optional[str] = Query(None, min_length=1, max_length=100, description="Search title and description"),
    status_filter: str = Query("active", alias="status", pattern="^(active|sold|inactive)$", description="Filter by listing status"),
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(20, ge=1, le=100, description="Number of items per page"),
    product_service=Depends(get_product_service)
):
    return product_service.list_products(
        category=category,
        seller_id=seller_id,
        search=q,
        status_filter=status_filter,
        page=page,
        page_size=page_size
    )


@router.get(
    "/seller",
    response_model=SellerProductsResponse,
    summary="List my listings",
    description="All non-deleted listings of the authenticated user, for the dashboard.",
    responses={
        200: {"description": "The user's listings"},
        401: {"description": "Authentication required"}
    }
)
async def list_seller_products(
    current_user: User = Depends(get_current_user),
    product_service=Depends(get_product_service)
):
    try:
        products = product_service.list_seller_products(current_user)
    except Exception as e:
        logger.error(f"Error listing products for user {current_user.email}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to list products: {str(e)}"
        )
    return SellerProductsResponse(products=products)


@router.get(
    "/{product_id}",
    response_model=ProductEnvelope,
    summary="Get product by ID",
    description="""
    Get listing details by ID and count the view. This is a public endpoint.

    **Note:** Only non-deleted products are returned.
    """,
    responses={
        200: {"description": "Product found"},
        404: {"description": "Product not found"}
    }
)
async def get_product(
    product_id: UUID,
    product_service=Depends(get_product_service)
):
    try:
        product = product_service.get_product(product_id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    return ProductEnvelope(product=product)


@router.post(
    "",
    response_model=ProductEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new product",
    description="""
    Create a listing. Only users with the seller flag can list items.

    **Images:**
    Create the listing first, then attach images with
    `POST /api/products/{product_id}/images`.
    """,
    responses={
        201: {"description": "Product created successfully"},
        401: {"description": "Authentication required"},
        403: {"description": "Requires a seller profile"},
        422: {"description": "Invalid listing data"}
    }
)
async def create_product(
    product_data: ProductCreate,
    current_user: User = Depends(require_seller),
    product_service=Depends(get_product_service)
):
    product = product_service.create_product(product_data, current_user)
    return ProductEnvelope(product=product)


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a product",
    description="""
    Soft delete a listing. Sellers can only delete their own listings.
    The status becomes `deleted` and the listing disappears from all queries.
    """,
    responses={
        204: {"description": "Product deleted successfully"},
        401: {"description": "Authentication required"},
        403: {"description": "Not the product owner"},
        404: {"description": "Product not found"}
    }
)
async def delete_product(
    product_id: UUID,
    current_user: User = Depends(get_current_user),
    product_service=Depends(get_product_service)
):
    try:
        product_service.delete_product(product_id, current_user)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    except PermissionError as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=str(e)
        )
    return None


@router.post(
    "/{product_id}/images",
    response_model=ProductImageEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Attach an image",
    description="""
    Attach an image to a listing owned by the authenticated user.

    `url` is either an http(s) URL or a base64 `data:image/...` URL. Data URLs
    are uploaded to the configured image provider (Cloudinary or Supabase
    Storage). Setting `is_main` makes the image the cover and clears the flag
    on the others.
    """,
    responses={
        201: {"description": "Image uploaded successfully"},
        400: {"description": "Invalid image URL"},
        403: {"description": "Not the product owner"},
        404: {"description": "Product not found"},
        502: {"description": "Image storage failed"}
    }
)
async def add_product_image(
    product_id: UUID,
    image_data: ProductImageCreate,
    current_user: User = Depends(get_current_user),
    product_service=Depends(get_product_service)
):
    try:
        image = product_service.add_image(product_id, image_data, current_user)
    except PermissionError as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=str(e)
        )
    except MarketplaceError as e:
        raise_http_error(e)
    except ValueError as e:
        code = status.HTTP_404_NOT_FOUND if str(e) == "Product not found" else status.HTTP_400_BAD_REQUEST
        raise HTTPException(status_code=code, detail=str(e))
    return ProductImageEnvelope(image=image)
