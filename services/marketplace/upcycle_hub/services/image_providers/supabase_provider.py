"""
Supabase Storage image provider implementation
"""
import logging
import uuid
from typing import Any, Optional
from upcycle_hub.services.image_providers.base import ImageProvider
from upcycle_hub.services.supabase_client import get_supabase_client
from upcycle_hub.config import settings

logger = logging.getLogger(__name__)

IMAGE_FOLDER = "product-images"

EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
}


class SupabaseImageProvider(ImageProvider):
    """Stores product images in a public Supabase Storage bucket"""

    def __init__(self, client: Optional[Any] = None, bucket_name: Optional[str] = None):
        self._client = client
        self.bucket_name = bucket_name or settings.storage_bucket_name

    @property
    def bucket(self):
        if self._client is None:
            self._client = get_supabase_client()
        return self._client.storage.from_(self.bucket_name)

    def upload_image(self, image_data: bytes, metadata: Optional[dict] = None) -> Optional[str]:
        """
        Upload to product-images/{folder}/{random}.{ext}.
        Returns the object path if successful, None otherwise.
        """
        metadata = metadata or {}
        content_type = metadata.get("content_type", "image/jpeg")
        extension = EXTENSIONS.get(content_type, "jpg")
        folder = metadata.get("folder", "unassigned")
        path = f"{IMAGE_FOLDER}/{folder}/{uuid.uuid4().hex}.{extension}"

        try:
            self.bucket.upload(
                path,
                image_data,
                {"content-type": content_type, "cache-control": "3600", "upsert": "false"},
            )
        except Exception as e:
            message = str(e)
            if "not found" in message.lower():
                logger.error(f"Storage bucket {self.bucket_name} does not exist")
            elif "security policy" in message.lower():
                logger.error("Permission denied uploading image; check the bucket's row level security policies")
            else:
                logger.error(f"Failed to upload image to Supabase Storage: {e}", exc_info=True)
            return None

        logger.info(f"Successfully uploaded image to Supabase Storage: {path}")
        return path

    def delete_image(self, image_id: str) -> bool:
        try:
            self.bucket.remove([image_id])
        except Exception as e:
            logger.error(f"Failed to delete image {image_id} from Supabase Storage: {e}")
            return False
        return True

    def get_image_url(self, image_id: str, variant: Optional[str] = None) -> str:
        return self.bucket.get_public_url(image_id)
