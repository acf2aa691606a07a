from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger("gs-portfolio")

NETWORK_ERROR_MESSAGE = "A network error occurred. Please check your connection."


class ApiError(Exception):
    """Error returned by the API, or NETWORK_ERROR when the request never completed."""

    def __init__(self, code: str, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code


class ApiClient:
    """Thin wrapper around httpx that unwraps the API response envelope.

    The underlying client keeps cookies, so the admin session set by
    ``/admin/login`` is sent on every following request.
    """

    def __init__(self, base_url: str = "http://localhost:8000/api", timeout: float = 30.0, **client_kwargs):
        self.base_url = base_url.rstrip("/")
        self.client = httpx.AsyncClient(timeout=timeout, **client_kwargs)

    async def close(self):
        await self.client.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def url(self, endpoint: str) -> str:
        return f"{self.base_url}{endpoint}"

    async def request(self, method: str, endpoint: str, **kwargs) -> Any:
        try:
            response = await self.client.request(method, self.url(endpoint), **kwargs)
        except httpx.RequestError as e:
            logger.warning("API request failed: %s %s -> %s", method, endpoint, e)
            raise ApiError("NETWORK_ERROR", NETWORK_ERROR_MESSAGE)

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.is_error:
            message = None
            if isinstance(body, dict):
                message = body.get("error") or body.get("message")
            raise ApiError(f"HTTP_{response.status_code}", message or response.reason_phrase, response.status_code)

        return body.get("data") if isinstance(body, dict) else body

    async def get(self, endpoint: str, **params) -> Any:
        return await self.request("GET", endpoint, params=params or None)

    async def post(self, endpoint: str, data: Any = None) -> Any:
        return await self.request("POST", endpoint, json=data)

    async def put(self, endpoint: str, data: Any = None) -> Any:
        return await self.request("PUT", endpoint, json=data)

    async def delete(self, endpoint: str) -> Any:
        return await self.request("DELETE", endpoint)

    async def upload_file(self, endpoint: str, files: dict, data: Optional[dict] = None) -> Any:
        return await self.request("POST", endpoint, files=files, data=data)
