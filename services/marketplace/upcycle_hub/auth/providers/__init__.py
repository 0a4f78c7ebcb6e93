# Package exports - these allow cleaner imports like:
# from upcycle_hub.auth.providers import AuthProvider, LocalAuthProvider
from upcycle_hub.auth.providers.base import AuthProvider, AuthResult
from upcycle_hub.auth.providers.local import LocalAuthProvider
from upcycle_hub.auth.providers.clerk import ClerkAuthProvider
from upcycle_hub.auth.providers.supabase_provider import SupabaseAuthProvider
