# Package exports - these allow cleaner imports like:
# from upcycle_hub.auth import get_current_user, require_seller
from upcycle_hub.auth.dependencies import get_current_user, require_seller, get_auth_provider
