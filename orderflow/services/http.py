"""
Orders Service HTTP Client

Thin httpx wrapper shared by the HTTP availability index and the HTTP order
gateway. Network failures and non-2xx responses become ``OrderGatewayError``
carrying the remote's own message when the body supplied one.
"""

import logging
from typing import Any, Optional

import httpx

from orderflow.core.config import get_settings
from orderflow.core.exceptions import OrderGatewayError

logger = logging.getLogger(__name__)


def extract_remote_message(response: httpx.Response) -> Optional[str]:
    """Pull a human message out of an error body, if there is one."""
    try:
        body = response.json()
    except ValueError:
        text = response.text.strip()
        return text or None
    if isinstance(body, dict):
        for key in ("detail", "message", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return None


def extract_error_code(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return None


class OrdersApiClient:
    """
    Async client for the orders service.

    Args:
        base_url: API root, e.g. ``http://localhost:8001/api``
        timeout: Per-request timeout in seconds
        client: Pre-built ``httpx.AsyncClient`` (tests pass one wired to an
            ASGI transport)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout or settings.http_timeout_seconds,
        )

    async def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """
        Send a request and return the successful response.

        Raises:
            OrderGatewayError: On transport errors or non-2xx statuses
        """
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"HTTP {method} {path} failed: {e}")
            raise OrderGatewayError(f"Could not reach the orders service: {e}") from e

        if response.is_error:
            remote_message = extract_remote_message(response)
            logger.warning(f"HTTP {method} {path} -> {response.status_code}: {remote_message}")
            error = OrderGatewayError(
                remote_message or f"Orders service returned {response.status_code}",
                status_code=response.status_code,
                remote_message=remote_message,
            )
            error.payload = {"error": extract_error_code(response), "body": _safe_json(response)}
            raise error
        return response

    async def get_json(self, path: str, **kwargs: Any) -> Any:
        return (await self.request("GET", path, **kwargs)).json()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def _safe_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None
