"""
Error taxonomy shared by the auth backends and services.

Routers translate these into HTTP responses; each carries the status code it
maps to so the translation stays in one place.
"""
from typing import Optional


class MarketplaceError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DuplicateEmailError(MarketplaceError):
    status_code = 409


class InvalidCredentialsError(MarketplaceError):
    status_code = 401


class RateLimitedError(MarketplaceError):
    status_code = 429

    def __init__(self, message: str, retry_after: Optional[int] = None):
        super().__init__(message)
        self.retry_after = retry_after


class NotFoundError(MarketplaceError):
    status_code = 404


class PermissionDeniedError(MarketplaceError):
    status_code = 403


class ProviderNotSupportedError(MarketplaceError):
    status_code = 501


class ExternalServiceError(MarketplaceError):
    status_code = 502
