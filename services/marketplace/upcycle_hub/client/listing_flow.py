"""Listing submission: create the product, then attach every image in parallel"""
import asyncio
import base64
import logging
import mimetypes
from dataclasses import dataclass, field
from typing import List, Optional

from pydantic import ValidationError

from upcycle_hub.client.api_client import ApiClient
from upcycle_hub.client.auth_flow import validation_message
from upcycle_hub.client.errors import ApiError, NetworkError, UnexpectedResponseError, field_of, friendly_message
from upcycle_hub.client.forms import ProductForm
from upcycle_hub.client.notifications import Notifier

logger = logging.getLogger(__name__)


def file_to_data_url(path: str) -> str:
    """Read an image file into a base64 data: URL"""
    content_type = mimetypes.guess_type(path)[0] or "application/octet-stream"
    with open(path, "rb") as f:
        encoded = base64.b64encode(f.read()).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


@dataclass
class PendingImage:
    url: str
    is_main: bool = False


@dataclass
class ListingResult:
    product: dict
    images: List[dict] = field(default_factory=list)
    failed_images: int = 0


class ListingFlow:
    def __init__(self, api: ApiClient, notifier: Optional[Notifier] = None, seller_id: Optional[str] = None):
        self.api = api
        self.notifier = notifier or Notifier()
        self.seller_id = seller_id
        self.images: List[PendingImage] = []

    def add_image(self, url: str, is_main: bool = False) -> None:
        # Only one cover image
        if is_main:
            for image in self.images:
                image.is_main = False
        self.images.append(PendingImage(url=url, is_main=is_main))

    def add_image_file(self, path: str, is_main: bool = False) -> None:
        self.add_image(file_to_data_url(path), is_main=is_main)

    async def _upload(self, product_id: str, index: int, image: PendingImage) -> dict:
        logger.debug(f"Uploading image {index + 1}/{len(self.images)} for product {product_id}")
        payload = await self.api.post_json(
            f"/api/products/{product_id}/images",
            {"url": image.url, "is_main": image.is_main},
        )
        return field_of(payload, "image")

    async def submit(self, **fields) -> Optional[ListingResult]:
        """Create the listing and upload its images; returns None when nothing was created"""
        try:
            form = ProductForm(**fields)
        except ValidationError as e:
            self.notifier.error("Invalid listing", validation_message(e))
            return None

        if not self.images:
            self.notifier.error("Images required", "Please add at least one image for your product.")
            return None

        data = form.to_payload()
        if self.seller_id:
            data["seller_id"] = self.seller_id

        try:
            payload = await self.api.post_json("/api/products", data)
            product = field_of(payload, "product")
            product_id = field_of(product, "id")
        except (ApiError, NetworkError, UnexpectedResponseError) as e:
            logger.error(f"Error creating product: {e}")
            self.notifier.error("Error creating listing", friendly_message(e))
            return None

        results = await asyncio.gather(
            *(self._upload(product_id, index, image) for index, image in enumerate(self.images)),
            return_exceptions=True,
        )

        result = ListingResult(product=product)
        for index, outcome in enumerate(results):
            if isinstance(outcome, BaseException):
                logger.error(f"Failed to upload image {index + 1} for product {product_id}: {outcome}")
                result.failed_images += 1
            else:
                result.images.append(outcome)
        logger.info(
            f"Product {product_id} created with {len(result.images)} image(s), "
            f"{result.failed_images} failed"
        )

        self.images = []
        self.notifier.notify("Product added", "Your item has been listed successfully.")
        return result
