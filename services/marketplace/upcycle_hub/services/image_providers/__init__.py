# Package exports - these allow cleaner imports like:
# from upcycle_hub.services.image_providers import ImageProvider, CloudinaryImageProvider
from upcycle_hub.services.image_providers.base import ImageProvider
from upcycle_hub.services.image_providers.cloudinary_provider import CloudinaryImageProvider
from upcycle_hub.services.image_providers.supabase_provider import SupabaseImageProvider
