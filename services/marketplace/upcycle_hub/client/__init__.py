# Package exports - these allow cleaner imports like:
# from upcycle_hub.client import ApiClient, AuthFlow
from upcycle_hub.client.config import ClientSettings
from upcycle_hub.client.api_client import ApiClient
from upcycle_hub.client.errors import ApiError, RateLimitError, NetworkError, UnexpectedResponseError, friendly_message
from upcycle_hub.client.backoff import RateLimitBackoff
from upcycle_hub.client.countdown import CountdownTimer, format_wait
from upcycle_hub.client.forms import LoginForm, SignupForm, ProductForm
from upcycle_hub.client.storage import UserCache
from upcycle_hub.client.notifications import Notifier, Toast
from upcycle_hub.client.auth_flow import AuthFlow
from upcycle_hub.client.listing_flow import ListingFlow, ListingResult, file_to_data_url
