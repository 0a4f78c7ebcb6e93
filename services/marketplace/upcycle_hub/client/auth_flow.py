"""Login, sign up and session handling for the API client

Sign up throttling is surfaced as an exponential wait with a countdown; the
form stays disabled until the countdown finishes. Every failure is turned
into a toast and never propagates out of the flow.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Optional

from pydantic import ValidationError

from upcycle_hub.client.api_client import ApiClient
from upcycle_hub.client.backoff import RateLimitBackoff
from upcycle_hub.client.countdown import CountdownTimer
from upcycle_hub.client.errors import (
    ApiError,
    NetworkError,
    UnexpectedResponseError,
    field_of,
    friendly_message,
    is_rate_limit_error,
)
from upcycle_hub.client.forms import LoginForm, SignupForm
from upcycle_hub.client.notifications import Notifier
from upcycle_hub.client.storage import UserCache

logger = logging.getLogger(__name__)


def validation_message(error: ValidationError) -> str:
    first = error.errors()[0]
    return first["msg"].removeprefix("Value error, ")


class AuthFlow:
    def __init__(
        self,
        api: ApiClient,
        cache: UserCache,
        notifier: Optional[Notifier] = None,
        backoff: Optional[RateLimitBackoff] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.api = api
        self.cache = cache
        self.notifier = notifier or Notifier()
        self.backoff = backoff or RateLimitBackoff()
        self.user: Optional[dict] = None
        self.form_enabled = True
        self.countdown: Optional[CountdownTimer] = None
        self._sleep = sleep

    @property
    def countdown_text(self) -> Optional[str]:
        if self.countdown is None or self.countdown.completed:
            return None
        return self.countdown.text

    def _remember(self, payload: dict) -> dict:
        user = field_of(payload, "user")
        if payload.get("access_token"):
            self.api.set_token(payload["access_token"])
        self.user = user
        self.cache.save(user)
        return user

    async def login(self, email: str, password: str) -> Optional[dict]:
        try:
            form = LoginForm(email=email, password=password)
        except ValidationError as e:
            self.notifier.error("Login failed", validation_message(e))
            return None

        try:
            payload = await self.api.post_json("/api/auth/login", form.model_dump())
            user = self._remember(payload)
        except (ApiError, NetworkError, UnexpectedResponseError) as e:
            logger.warning(f"Login failed for {form.email}: {e}")
            self.notifier.error("Login failed", friendly_message(e))
            return None

        self.notifier.notify("Welcome back", f"Logged in as {user['email']}")
        return user

    async def signup(self, **fields) -> Optional[dict]:
        """Register an account; returns the user or None when the attempt failed"""
        if not self.form_enabled:
            logger.info("Sign up ignored while the form is disabled")
            return None

        try:
            form = SignupForm(**fields)
        except ValidationError as e:
            self.notifier.error("Registration failed", validation_message(e))
            return None

        self.form_enabled = False
        rate_limited = False
        try:
            payload = await self.api.post_json("/api/auth/register", form.to_payload())
            user = self._remember(payload)
        except (ApiError, NetworkError, UnexpectedResponseError) as e:
            if is_rate_limit_error(e):
                rate_limited = True
                self._start_backoff()
                self.notifier.error("Too many attempts", friendly_message(e))
            else:
                self.notifier.error("Registration failed", friendly_message(e))
            logger.warning(f"Sign up failed for {form.email}: {e}")
            return None
        finally:
            # A rate-limited form is re-enabled by the countdown instead
            if not rate_limited:
                self.form_enabled = True

        self.backoff.reset()
        if payload.get("access_token"):
            self.notifier.notify("Account created", "Welcome to Upcycle Hub!")
        else:
            self.notifier.notify("Account created", "Check your email to confirm your account.")
        return user

    def _start_backoff(self) -> None:
        if self.countdown is not None:
            self.countdown.cancel()
        wait = self.backoff.next_wait()
        logger.info(f"Sign up rate limited; attempt {self.backoff.attempt}, waiting {wait}s")
        self.countdown = CountdownTimer(wait, on_complete=self._enable_form, sleep=self._sleep)
        self.countdown.start()

    def _enable_form(self) -> None:
        self.form_enabled = True

    def close_form(self) -> None:
        """Tear down the sign up form: stop the countdown and forget earlier attempts"""
        if self.countdown is not None:
            self.countdown.cancel()
            self.countdown = None
        self.backoff.reset()
        self.form_enabled = True

    async def current_user(self) -> Optional[dict]:
        """Fetch the signed-in user, falling back to the cached copy when offline"""
        if not self.api.token:
            return self.cache.load()
        try:
            payload = await self.api.get_json("/api/auth/me")
            user = field_of(payload, "user")
        except NetworkError as e:
            logger.warning(f"Using cached user: {e}")
            self.user = self.cache.load()
            return self.user
        except ApiError as e:
            if e.status == 401:
                self.cache.clear()
                self.user = None
                return None
            logger.error(f"Failed to load current user: {e}")
            return None
        except UnexpectedResponseError as e:
            logger.error(f"Failed to load current user: {e}")
            return None
        self.user = user
        self.cache.save(self.user)
        return self.user

    async def logout(self) -> None:
        if self.api.token:
            try:
                await self.api.post_json("/api/auth/logout")
            except (ApiError, NetworkError, UnexpectedResponseError) as e:
                logger.warning(f"Error during logout: {e}")
        self.api.set_token(None)
        self.user = None
        self.cache.clear()
        self.notifier.notify("Logged out", "You have been logged out.")
