# Initialize the configured image provider lazily
_image_provider = None


def get_image_provider():
    """Get the configured image provider instance, or None when images are stored as given"""
    global _image_provider
    if _image_provider is None:
        from upcycle_hub.config import settings
        if settings.image_provider == "cloudinary":
            from upcycle_hub.services.image_providers.cloudinary_provider import CloudinaryImageProvider
            _image_provider = CloudinaryImageProvider()
        elif settings.image_provider == "supabase":
            from upcycle_hub.services.image_providers.supabase_provider import SupabaseImageProvider
            _image_provider = SupabaseImageProvider()
    return _image_provider
