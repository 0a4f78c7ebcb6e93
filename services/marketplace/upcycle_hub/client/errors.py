"""Client error taxonomy and the user-facing messages derived from it"""
from typing import Any, Optional

import httpx


class ApiError(Exception):
    """Non-2xx response; the message mirrors the body as "{status}: {text}" """

    def __init__(self, status: int, text: str):
        self.status = status
        self.text = text
        super().__init__(f"{status}: {text}")

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ApiError":
        text = response.text or response.reason_phrase
        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            return RateLimitError(
                response.status_code,
                text,
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
            )
        return cls(response.status_code, text)


class RateLimitError(ApiError):
    def __init__(self, status: int, text: str, retry_after: Optional[int] = None):
        super().__init__(status, text)
        self.retry_after = retry_after


class NetworkError(Exception):
    """The request never produced a response"""


class UnexpectedResponseError(ValueError):
    """A 2xx response whose body is not the JSON the caller expects"""


def field_of(payload: Any, key: str) -> Any:
    """Return payload[key], raising UnexpectedResponseError when it is absent"""
    if not isinstance(payload, dict) or payload.get(key) is None:
        raise UnexpectedResponseError(f"Response is missing '{key}'")
    return payload[key]


RATE_LIMIT_MESSAGE = "Too many attempts. Please wait before trying again."
DUPLICATE_EMAIL_MESSAGE = "An account with this email already exists."
INVALID_CREDENTIALS_MESSAGE = "Invalid email or password."
EMAIL_NOT_CONFIRMED_MESSAGE = "Please confirm your email address before logging in."
NETWORK_MESSAGE = "Network error. Please check your connection and try again."
FALLBACK_MESSAGE = "Something went wrong. Please try again."

# Checked in order; the first rule with a matching substring wins
ERROR_RULES = (
    (("rate limit", "too many requests", "429"), RATE_LIMIT_MESSAGE),
    (("already registered", "already exists", "409"), DUPLICATE_EMAIL_MESSAGE),
    (("invalid login credentials", "invalid credentials", "401"), INVALID_CREDENTIALS_MESSAGE),
    (("email not confirmed",), EMAIL_NOT_CONFIRMED_MESSAGE),
    (("network", "connect", "timeout"), NETWORK_MESSAGE),
)


def is_rate_limit_error(error: BaseException) -> bool:
    if isinstance(error, RateLimitError):
        return True
    text = str(error).lower()
    return any(needle in text for needle in ERROR_RULES[0][0])


def friendly_message(error: BaseException) -> str:
    """Map any error to the sentence shown to the user"""
    if isinstance(error, NetworkError):
        return NETWORK_MESSAGE
    if isinstance(error, UnexpectedResponseError):
        return FALLBACK_MESSAGE
    text = str(error).lower()
    for needles, message in ERROR_RULES:
        if any(needle in text for needle in needles):
            return message
    return FALLBACK_MESSAGE
