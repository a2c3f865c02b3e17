"""Async HTTP client for the bug tracker API."""

import logging
import os
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:5000/api"
DEFAULT_TIMEOUT = 10.0


class BugServiceError(Exception):
    """A bug API call failed; `status_code` is None when no response arrived."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def handle_api_error(error: Exception) -> BugServiceError:
    """Convert an httpx failure into a BugServiceError with a readable message."""
    if isinstance(error, httpx.HTTPStatusError):
        response = error.response
        try:
            message = response.json().get("message") or "An error occurred"
        except ValueError:
            message = "An error occurred"
        return BugServiceError(message, status_code=response.status_code)
    if isinstance(error, httpx.RequestError):
        return BugServiceError("No response from server. Please check your connection.")
    return BugServiceError(str(error) or "An unexpected error occurred")


class BugServiceClient:
    """
    Client for the /bugs endpoints.

    Usage:
        async with BugServiceClient() as client:
            bugs = await client.get_all_bugs({"status": "open"})
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or os.getenv("BUG_API_URL", DEFAULT_API_URL)).rstrip("/")
        self._http_client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "BugServiceClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self._http_client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict:
        logger.debug(f"API Request: {method} {path}")
        try:
            response = await self._http_client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"API request {method} {path} failed: {e}")
            raise handle_api_error(e) from e
        logger.debug(f"API Response: {response.status_code} {path}")
        return response.json()

    async def get_all_bugs(self, filters: Optional[dict] = None) -> dict:
        """List bugs; only the status and priority filters are forwarded."""
        filters = filters or {}
        params = {key: filters[key] for key in ("status", "priority") if filters.get(key)}
        return await self._request("GET", "/bugs", params=params)

    async def get_bug_by_id(self, bug_id: str) -> dict:
        return await self._request("GET", f"/bugs/{bug_id}")

    async def create_bug(self, bug_data: dict) -> dict:
        return await self._request("POST", "/bugs", json=bug_data)

    async def update_bug(self, bug_id: str, updates: dict) -> dict:
        return await self._request("PUT", f"/bugs/{bug_id}", json=updates)

    async def delete_bug(self, bug_id: str) -> dict:
        return await self._request("DELETE", f"/bugs/{bug_id}")

    async def get_bug_stats(self) -> dict:
        return await self._request("GET", "/bugs/stats")
