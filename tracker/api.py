import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Any failed request: non-2xx response, transport error or unreadable body.

    `status` is None when no response was received. `message` is the
    server-supplied message when the body carried one.
    """

    def __init__(self, message: Optional[str], status: Optional[int] = None, payload: Any = None):
        super().__init__(message or f"Request failed ({status})")
        self.message = message
        self.status = status
        self.payload = payload

    @property
    def is_unauthorized(self) -> bool:
        return self.status == 401


def _server_message(payload: Any) -> Optional[str]:
    if isinstance(payload, dict):
        for key in ("message", "error"):
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value
    return None


class ApiClient:
    """Thin async wrapper around httpx that attaches the bearer token."""

    def __init__(self, base_url: str, token_store, timeout: float = 10.0, transport: httpx.AsyncBaseTransport | None = None):
        self._tokens = token_store
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    def _headers(self) -> dict:
        headers = {"Accept": "application/json"}
        token = self._tokens.load()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def request(self, method: str, path: str, *, json: Any = None, params: dict | None = None) -> Any:
        logger.debug("%s %s params=%s", method, path, params)
        try:
            response = await self._client.request(method, path, json=json, params=params, headers=self._headers())
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise ApiError(None, payload=str(e)) from e

        payload = None
        if response.content:
            try:
                payload = response.json()
            except ValueError:
                payload = None
                if response.is_success:
                    raise ApiError("Invalid response from server", response.status_code)

        if not response.is_success:
            logger.warning("%s %s -> %s", method, path, response.status_code)
            raise ApiError(_server_message(payload), response.status_code, payload)
        return payload

    async def get(self, path: str, params: dict | None = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None) -> Any:
        return await self.request("POST", path, json=json)

    async def put(self, path: str, json: Any = None) -> Any:
        return await self.request("PUT", path, json=json)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)

    async def aclose(self) -> None:
        await self._client.aclose()
