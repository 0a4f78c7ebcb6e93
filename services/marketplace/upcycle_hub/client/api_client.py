"""Async HTTP client for the Upcycle Hub API"""
import httpx
import logging
from typing import Any, Dict, Optional

from upcycle_hub.client.config import ClientSettings
from upcycle_hub.client.errors import ApiError, NetworkError, UnexpectedResponseError

logger = logging.getLogger(__name__)


class ApiClient:
    """Thin wrapper over httpx.AsyncClient that raises ApiError on non-2xx responses"""

    def __init__(
        self,
        settings: Optional[ClientSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        token: Optional[str] = None,
    ):
        self.settings = settings or ClientSettings()
        self.base_url = self.settings.api_url.rstrip("/")
        self.functions_path = (self.settings.functions_path or "").rstrip("/") or None
        self.token = token
        self._client = httpx.AsyncClient(timeout=self.settings.timeout_seconds, transport=transport)

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def set_token(self, token: Optional[str]) -> None:
        self.token = token

    def url_for(self, path: str) -> str:
        """Resolve an API path, applying the serverless functions rewrite when configured"""
        if path.startswith("http://") or path.startswith("https://"):
            return path
        if self.functions_path:
            if path == "/api" or path.startswith("/api/"):
                path = path[len("/api"):]
            return f"{self.base_url}{self.functions_path}{path}"
        return f"{self.base_url}{path}"

    def _get_headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def request(
        self,
        method: str,
        path: str,
        json: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        url = self.url_for(path)
        logger.debug(f"{method} {url}{' with data' if json is not None else ''}")
        try:
            response = await self._client.request(
                method,
                url,
                json=json,
                params=params,
                headers=self._get_headers(),
            )
        except httpx.TransportError as e:
            logger.error(f"API request failed: {method} {url}: {e}")
            raise NetworkError(f"Network error: {e}") from e

        if response.is_error:
            error = ApiError.from_response(response)
            logger.error(f"API error ({response.status_code}): {error.text}")
            raise error
        return response

    def _decode(self, response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Non-JSON response ({response.status_code}) from {response.request.url}: {e}")
            raise UnexpectedResponseError(f"Invalid JSON in {response.status_code} response") from e

    async def get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        response = await self.request("GET", path, params=params)
        return self._decode(response)

    async def post_json(self, path: str, data: Optional[Any] = None) -> Any:
        response = await self.request("POST", path, json=data)
        return self._decode(response)

    async def put_json(self, path: str, data: Any) -> Any:
        response = await self.request("PUT", path, json=data)
        return self._decode(response)

    async def delete(self, path: str) -> None:
        await self.request("DELETE", path)
