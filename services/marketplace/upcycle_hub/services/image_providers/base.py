"""
Abstract base class for image providers
"""
from abc import ABC, abstractmethod
from typing import Optional


class ImageProvider(ABC):
    """Abstract interface for image storage providers"""

    @abstractmethod
    def upload_image(self, image_data: bytes, metadata: Optional[dict] = None) -> Optional[str]:
        """
        Upload an image to the provider.

        Args:
            image_data: Image bytes
            metadata: Optional metadata (folder, content_type, tags)

        Returns:
            Image ID if successful, None otherwise
        """

    @abstractmethod
    def delete_image(self, image_id: str) -> bool:
        """
        Delete an image from the provider.

        Returns:
            True if successful, False otherwise
        """

    @abstractmethod
    def get_image_url(self, image_id: str, variant: Optional[str] = None) -> str:
        """
        Get the public URL for an image.

        Args:
            image_id: Image ID as returned by upload_image
            variant: Optional variant/transformation name
        """
