"""Async API client: backoff, countdown, error mapping and the form flows"""
import asyncio
import json

import httpx
import pytest

from upcycle_hub.client import (
    ApiClient,
    AuthFlow,
    ClientSettings,
    CountdownTimer,
    ListingFlow,
    Notifier,
    ProductForm,
    RateLimitBackoff,
    UserCache,
    format_wait,
    friendly_message,
)
from upcycle_hub.client.errors import (
    DUPLICATE_EMAIL_MESSAGE,
    FALLBACK_MESSAGE,
    INVALID_CREDENTIALS_MESSAGE,
    NETWORK_MESSAGE,
    RATE_LIMIT_MESSAGE,
    ApiError,
    NetworkError,
    RateLimitError,
)
from upcycle_hub.client.listing_flow import file_to_data_url

USER = {"id": "u-1", "email": "maker@example.com", "username": "maker", "is_seller": True, "is_collector": False}


class RecordingSleep:
    """Returns immediately and remembers every requested delay"""

    def __init__(self):
        self.calls = []

    async def __call__(self, seconds):
        self.calls.append(seconds)
        await asyncio.sleep(0)


async def never_sleep(_seconds):
    await asyncio.Event().wait()


def make_api(handler, **settings) -> ApiClient:
    return ApiClient(ClientSettings(api_url="http://api.test", **settings), transport=httpx.MockTransport(handler))


class TestRateLimitBackoff:
    def test_wait_doubles_up_to_cap(self):
        backoff = RateLimitBackoff()

        waits = [backoff.next_wait() for _ in range(8)]

        assert waits == [min(300, 30 * 2 ** attempt) for attempt in range(8)]
        assert waits[:6] == [30, 60, 120, 240, 300, 300]

    def test_reset(self):
        backoff = RateLimitBackoff()
        backoff.next_wait()
        backoff.next_wait()

        backoff.reset()

        assert backoff.next_wait() == 30


class TestCountdownTimer:
    async def test_ticks_down_and_completes_once(self):
        ticks, completions = [], []
        sleep = RecordingSleep()
        timer = CountdownTimer(3, on_tick=ticks.append, on_complete=lambda: completions.append(True), sleep=sleep)

        await timer.run()
        timer._complete()

        assert sleep.calls == [1, 1, 1]
        assert ticks == [2, 1, 0]
        assert all(a - b == 1 for a, b in zip(ticks, ticks[1:]))
        assert completions == [True]

    async def test_zero_completes_immediately(self):
        completions = []
        timer = CountdownTimer(0, on_complete=lambda: completions.append(True), sleep=never_sleep)

        await timer.run()

        assert completions == [True]

    async def test_cancel_does_not_complete(self):
        completions = []
        timer = CountdownTimer(30, on_complete=lambda: completions.append(True), sleep=never_sleep)

        timer.start()
        await asyncio.sleep(0)
        timer.cancel()
        await timer.wait()

        assert completions == []
        assert timer.seconds == 30
        assert not timer.running

    @pytest.mark.parametrize("seconds,text", [
        (30, "Please wait 30s before trying again"),
        (60, "Please wait 1m 0s before trying again"),
        (125, "Please wait 2m 5s before trying again"),
    ])
    def test_display_text(self, seconds, text):
        assert format_wait(seconds) == text


class TestErrorMapping:
    @pytest.mark.parametrize("error,message", [
        (RateLimitError(429, '{"detail":"Too many requests"}'), RATE_LIMIT_MESSAGE),
        (Exception("AuthApiError: Email rate limit exceeded"), RATE_LIMIT_MESSAGE),
        (ApiError(409, '{"detail":"User with this email already exists"}'), DUPLICATE_EMAIL_MESSAGE),
        (Exception("User already registered"), DUPLICATE_EMAIL_MESSAGE),
        (ApiError(401, '{"detail":"Invalid login credentials"}'), INVALID_CREDENTIALS_MESSAGE),
        (Exception("Email not confirmed"), "Please confirm your email address before logging in."),
        (NetworkError("Network error: [Errno 111]"), NETWORK_MESSAGE),
        (Exception("Request timeout"), NETWORK_MESSAGE),
        (ApiError(500, "Internal server error"), FALLBACK_MESSAGE),
    ])
    def test_friendly_message(self, error, message):
        assert friendly_message(error) == message

    def test_api_error_message_format(self):
        assert str(ApiError(404, "Product not found")) == "404: Product not found"


class TestApiClient:
    def test_functions_path_rewrite(self):
        api = ApiClient(ClientSettings(api_url="https://upcyclehub.test/", functions_path="/.netlify/functions/api-direct/"))

        assert api.url_for("/api/products") == "https://upcyclehub.test/.netlify/functions/api-direct/products"
        assert api.url_for("/health") == "https://upcyclehub.test/.netlify/functions/api-direct/health"

    def test_plain_url(self):
        api = ApiClient(ClientSettings(api_url="http://localhost:8000"))

        assert api.url_for("/api/products") == "http://localhost:8000/api/products"
        assert api.url_for("https://cdn.test/x.jpg") == "https://cdn.test/x.jpg"

    async def test_sends_bearer_token_and_raises_api_error(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["authorization"] = request.headers.get("Authorization")
            return httpx.Response(429, text="Too many requests", headers={"Retry-After": "42"})

        async with make_api(handler) as api:
            api.set_token("tok")
            with pytest.raises(RateLimitError) as exc_info:
                await api.get_json("/api/auth/me")

        assert seen["authorization"] == "Bearer tok"
        assert exc_info.value.retry_after == 42
        assert str(exc_info.value) == "429: Too many requests"

    async def test_transport_failure_is_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with make_api(handler) as api:
            with pytest.raises(NetworkError):
                await api.get_json("/api/products")


class TestAuthFlow:
    @pytest.fixture
    def cache(self, tmp_path):
        return UserCache(str(tmp_path / "cache" / "user.json"))

    async def test_login_caches_user(self, cache):
        def handler(request):
            assert json.loads(request.content) == {"email": "maker@example.com", "password": "secret123"}
            return httpx.Response(200, json={"user": USER, "access_token": "tok", "token_type": "bearer"})

        async with make_api(handler) as api:
            flow = AuthFlow(api, cache)
            user = await flow.login("maker@example.com", "secret123")

            assert user["email"] == "maker@example.com"
            assert api.token == "tok"
        assert cache.load() == USER

    async def test_login_failure_shows_toast(self, cache):
        async with make_api(lambda request: httpx.Response(401, json={"detail": "Invalid login credentials"})) as api:
            flow = AuthFlow(api, cache)
            user = await flow.login("maker@example.com", "wrong")

        assert user is None
        assert flow.notifier.last.description == INVALID_CREDENTIALS_MESSAGE
        assert flow.notifier.last.destructive

    async def test_rate_limited_signup_disables_form_until_countdown_ends(self, cache):
        def handler(request):
            return httpx.Response(429, json={"detail": "Too many requests: email rate limit exceeded"})

        sleep = RecordingSleep()
        async with make_api(handler) as api:
            flow = AuthFlow(api, cache, sleep=sleep)
            await flow.signup(email="maker@example.com", password="secret123")

            assert flow.form_enabled is False
            assert flow.countdown.seconds == 30
            assert flow.countdown_text == "Please wait 30s before trying again"
            assert flow.notifier.last.description == RATE_LIMIT_MESSAGE

            # Submitting while disabled does nothing
            assert await flow.signup(email="maker@example.com", password="secret123") is None

            await flow.countdown.wait()
            assert flow.form_enabled is True

            await flow.signup(email="maker@example.com", password="secret123")
            assert flow.countdown.seconds == 60
            await flow.countdown.wait()

        assert sleep.calls == [1] * (30 + 60)

    async def test_close_form_resets_backoff(self, cache):
        async with make_api(lambda request: httpx.Response(429, text="rate limit")) as api:
            flow = AuthFlow(api, cache, sleep=never_sleep)
            await flow.signup(email="maker@example.com", password="secret123")
            countdown = flow.countdown

            flow.close_form()
            await countdown.wait()

        assert flow.form_enabled is True
        assert flow.backoff.attempt == 0
        assert not countdown.completed

    async def test_duplicate_signup_is_distinguished(self, cache):
        async with make_api(lambda request: httpx.Response(409, json={"detail": "User with this email already exists"})) as api:
            flow = AuthFlow(api, cache)
            await flow.signup(email="maker@example.com", password="secret123")

        assert flow.notifier.last.description == DUPLICATE_EMAIL_MESSAGE
        assert flow.form_enabled is True
        assert flow.backoff.attempt == 0

    async def test_successful_signup_resets_backoff(self, cache):
        def handler(request):
            body = json.loads(request.content)
            assert "confirm_password" not in body
            return httpx.Response(201, json={"user": USER, "access_token": "tok", "token_type": "bearer"})

        async with make_api(handler) as api:
            flow = AuthFlow(api, cache)
            flow.backoff.attempt = 3
            user = await flow.signup(email="maker@example.com", password="secret123", confirm_password="secret123")

        assert user == USER
        assert flow.backoff.attempt == 0
        assert flow.notifier.last.title == "Account created"

    async def test_signup_validation_happens_before_request(self, cache):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(201, json={"user": USER})

        async with make_api(handler) as api:
            flow = AuthFlow(api, cache)
            await flow.signup(email="maker@example.com", password="secret123", confirm_password="different")

        assert calls == []
        assert flow.notifier.last.description == "Passwords do not match"

    async def test_signup_html_response_re_enables_form(self, cache):
        async with make_api(lambda request: httpx.Response(200, text="<html>ok</html>")) as api:
            flow = AuthFlow(api, cache)
            user = await flow.signup(email="maker@example.com", password="secret123")

        assert user is None
        assert flow.form_enabled is True
        assert flow.notifier.last.title == "Registration failed"
        assert flow.notifier.last.description == FALLBACK_MESSAGE
        assert cache.load() is None

    async def test_signup_response_without_user_re_enables_form(self, cache):
        async with make_api(lambda request: httpx.Response(201, json={"ok": True})) as api:
            flow = AuthFlow(api, cache)
            user = await flow.signup(email="maker@example.com", password="secret123")

        assert user is None
        assert flow.form_enabled is True
        assert flow.notifier.last.description == FALLBACK_MESSAGE

    async def test_login_html_response_shows_toast(self, cache):
        async with make_api(lambda request: httpx.Response(200, text="<html>ok</html>")) as api:
            flow = AuthFlow(api, cache)
            user = await flow.login("maker@example.com", "secret123")

            assert api.token is None
        assert user is None
        assert flow.notifier.last.title == "Login failed"
        assert flow.notifier.last.description == FALLBACK_MESSAGE

    async def test_current_user_falls_back_to_cache_offline(self, cache):
        cache.save(USER)

        def handler(request):
            raise httpx.ConnectError("offline", request=request)

        async with make_api(handler) as api:
            api.set_token("tok")
            flow = AuthFlow(api, cache)
            assert await flow.current_user() == USER

    async def test_logout_clears_cache(self, cache):
        cache.save(USER)

        async with make_api(lambda request: httpx.Response(204)) as api:
            api.set_token("tok")
            flow = AuthFlow(api, cache)
            await flow.logout()

            assert api.token is None
        assert cache.load() is None


class TestListingFlow:
    FIELDS = {
        "title": "Bottle Lamp",
        "description": "Pendant lamp from a wine bottle",
        "price": "38.50",
        "category": "Home Goods",
        "condition": "New",
        "location": "Oakland, CA",
    }

    def test_price_converted_to_cents(self):
        form = ProductForm(**{**self.FIELDS, "price": "19.99"})

        assert form.price_cents == 1999
        assert form.to_payload()["price_cents"] == 1999
        assert "price" not in form.to_payload()

    @pytest.mark.parametrize("field,value", [
        ("category", "select_category"),
        ("condition", "select_condition"),
        ("price", "0"),
        ("price", "free"),
        ("price", "inf"),
        ("price", "1e400"),
        ("price", "nan"),
        ("price", "0.001"),
    ])
    def test_form_rejects_invalid_values(self, field, value):
        with pytest.raises(ValueError):
            ProductForm(**{**self.FIELDS, field: value})

    async def test_zero_images_rejected_before_any_request(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(201, json={"product": {"id": "p-1"}})

        async with make_api(handler) as api:
            flow = ListingFlow(api)
            result = await flow.submit(**self.FIELDS)

        assert result is None
        assert calls == []
        assert flow.notifier.last.title == "Images required"

    async def test_partial_upload_failures_keep_successful_images(self):
        requests = []

        def handler(request):
            requests.append(request)
            if request.url.path == "/api/products":
                body = json.loads(request.content)
                assert body["price_cents"] == 3850
                assert body["seller_id"] == "u-1"
                return httpx.Response(201, json={"product": {"id": "p-1", **body}})
            body = json.loads(request.content)
            if body["url"].endswith("2.jpg"):
                return httpx.Response(500, text="Internal server error")
            return httpx.Response(201, json={"image": {"id": body["url"], "url": body["url"], "is_main": body["is_main"]}})

        async with make_api(handler) as api:
            flow = ListingFlow(api, seller_id="u-1")
            flow.add_image("https://example.com/1.jpg", is_main=True)
            flow.add_image("https://example.com/2.jpg")
            flow.add_image("https://example.com/3.jpg")
            result = await flow.submit(**self.FIELDS)

        assert result.product["id"] == "p-1"
        assert [image["url"] for image in result.images] == ["https://example.com/1.jpg", "https://example.com/3.jpg"]
        assert result.failed_images == 1
        assert len(requests) == 4
        assert flow.notifier.last.title == "Product added"

    async def test_create_failure_notifies(self):
        async with make_api(lambda request: httpx.Response(403, json={"detail": "Requires a seller profile"})) as api:
            flow = ListingFlow(api)
            flow.add_image("https://example.com/1.jpg")
            result = await flow.submit(**self.FIELDS)

        assert result is None
        assert flow.notifier.last.title == "Error creating listing"

    @pytest.mark.parametrize("response", [
        httpx.Response(200, text="<html>ok</html>"),
        httpx.Response(201, json={"message": "created"}),
    ])
    async def test_unexpected_create_response_notifies(self, response):
        calls = []

        def handler(request):
            calls.append(request)
            return response

        async with make_api(handler) as api:
            flow = ListingFlow(api)
            flow.add_image("https://example.com/1.jpg")
            result = await flow.submit(**self.FIELDS)

        assert result is None
        assert len(calls) == 1
        assert flow.notifier.last.title == "Error creating listing"
        assert flow.notifier.last.description == FALLBACK_MESSAGE

    async def test_infinite_price_is_rejected_before_any_request(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(201, json={"product": {"id": "p-1"}})

        async with make_api(handler) as api:
            flow = ListingFlow(api)
            flow.add_image("https://example.com/1.jpg")
            result = await flow.submit(**{**self.FIELDS, "price": "inf"})

        assert result is None
        assert calls == []
        assert flow.notifier.last.title == "Invalid listing"

    def test_single_main_image(self):
        flow = ListingFlow(ApiClient(ClientSettings(api_url="http://api.test")))
        flow.add_image("https://example.com/1.jpg", is_main=True)
        flow.add_image("https://example.com/2.jpg", is_main=True)

        assert [image.is_main for image in flow.images] == [False, True]

    def test_file_to_data_url(self, tmp_path):
        path = tmp_path / "chair.png"
        path.write_bytes(b"png-bytes")

        assert file_to_data_url(str(path)) == "data:image/png;base64,cG5nLWJ5dGVz"
