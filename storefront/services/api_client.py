"""
JSON:API Client

HTTP client for the storefront backend.
The bearer token is injected by the caller; nothing is read from ambient state.
"""

import logging
from typing import Any, Callable, Optional

import httpx
from pydantic import ValidationError

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Backend answered with an error status"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        payload: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload or {}

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


class ApiConnectionError(ApiError):
    """Request never got a response (network failure, timeout)"""
    pass


# Everything a backend call can raise: an error status, or a body that does
# not have the shape of the resource it claims to be
BACKEND_ERRORS = (ApiError, ValidationError, KeyError, TypeError)

UNEXPECTED_RESPONSE = "Unexpected response from backend"


def failure_reason(error: Exception) -> str:
    """Short reason for a failed backend call"""
    if isinstance(error, ApiError):
        return error.message
    return UNEXPECTED_RESPONSE


def error_message(payload: Any, default: str) -> str:
    """Pull a human message out of an error body"""
    if not isinstance(payload, dict):
        return default

    for key in ("error", "message"):
        value = payload.get(key)
        if isinstance(value, str) and value:
            return value

    errors = payload.get("errors")
    if isinstance(errors, list) and errors and isinstance(errors[0], dict):
        return errors[0].get("detail") or errors[0].get("title") or default

    return default


class JsonApiClient:
    """
    Client for the storefront JSON:API backend.

    Usage:
        async with JsonApiClient("https://shop.example.com", token="...") as client:
            body = await client.get("/api/v1/shopping-carts/current")
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the API client.

        Args:
            base_url: Base URL of the backend
            token: Bearer token for authenticated calls
            token_provider: Callable returning the current token, used when no
                fixed token is given
            timeout: Request timeout in seconds
            transport: Custom httpx transport
        """
        self.base_url = base_url.rstrip("/")
        self._token = token
        self._token_provider = token_provider
        self._http_client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

        if token or token_provider:
            logger.info("API client initialized with bearer authentication")
        else:
            logger.debug("API client initialized without authentication")

    async def __aenter__(self) -> "JsonApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        """Close HTTP client"""
        await self._http_client.aclose()

    def _generate_headers(self) -> dict[str, str]:
        """Generate headers including the bearer token if available"""
        headers = {
            "Content-Type": "application/vnd.api+json",
            "Accept": "application/vnd.api+json",
        }

        token = self._token or (self._token_provider() if self._token_provider else None)
        if token:
            headers["Authorization"] = f"Bearer {token}"

        return headers

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        body: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Make an HTTP request and decode the JSON body"""
        try:
            response = await self._http_client.request(
                method=method,
                url=path,
                params=params,
                json=body,
                headers=self._generate_headers(),
            )
        except httpx.RequestError as e:
            logger.error(f"Request failed: {method} {path} - {e}")
            raise ApiConnectionError(f"Could not reach backend: {e}") from e

        payload = None
        if response.content:
            try:
                payload = response.json()
            except ValueError:
                payload = None

        if response.status_code >= 400:
            message = error_message(payload, f"HTTP {response.status_code}")
            if response.status_code == 404:
                logger.debug(f"Not found: {method} {path}")
            else:
                logger.error(f"Request failed: {response.status_code} - {response.text}")
            raise ApiError(message, status_code=response.status_code, payload=payload)

        if payload is not None and not isinstance(payload, dict):
            raise TypeError(f"Expected a JSON object from {method} {path}, got {type(payload).__name__}")

        return payload

    async def get(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        return await self._request("GET", path, params=params)

    async def post(self, path: str, body: Optional[dict[str, Any]] = None) -> Any:
        return await self._request("POST", path, body=body)

    async def patch(self, path: str, body: Optional[dict[str, Any]] = None) -> Any:
        return await self._request("PATCH", path, body=body)

    async def delete(self, path: str) -> Any:
        return await self._request("DELETE", path)


def resource_document(
    resource_type: str,
    attributes: dict[str, Any],
    resource_id: Optional[str] = None,
    relationships: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """Wrap attributes in a JSON:API request document"""
    data: dict[str, Any] = {"type": resource_type}
    if resource_id is not None:
        data["id"] = str(resource_id)
    data["attributes"] = attributes
    if relationships:
        data["relationships"] = relationships
    return {"data": data}


def relationship(resource_type: str, resource_id: Any) -> dict[str, Any]:
    """Single to-one relationship linkage"""
    return {"data": {"type": resource_type, "id": str(resource_id)}}
