# Overview: Async HTTP client for the storefront REST API with bearer auth and 401 handling.

"""
REST API client

Every outgoing request gets `Authorization: Bearer <token>` when a token is
present in the persistent store (admin token first, then user token). The
token is read at send time, so a login or logout elsewhere takes effect on
the next request without rebuilding the client.

Any 401 response is treated as a hard session invalidation: the session
keys are removed from the store and `on_unauthorized` is called, no matter
which component issued the request.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

import httpx

from ..errors import APIError, NetworkError, UnauthorizedError
from ..storage import ADMIN_TOKEN_KEY, SESSION_KEYS, TOKEN_KEY, KeyValueStore
from .auth import AuthAPI
from .comments import CommentsAPI
from .reports import ReportsAPI


logger = logging.getLogger(__name__)


def _clean_params(params: Optional[dict]) -> Optional[dict]:
    if params is None:
        return None
    return {key: value for key, value in params.items() if value is not None}


def _api_error(response: httpx.Response) -> APIError:
    try:
        payload = response.json()
    except ValueError:
        payload = None

    message = None
    if isinstance(payload, dict):
        message = payload.get("message") or payload.get("error")

    error_cls = UnauthorizedError if response.status_code == 401 else APIError
    return error_cls(response.status_code, message, payload)


class APIClient:
    """
    Thin wrapper over httpx.AsyncClient.

    Endpoint groups are exposed as `auth`, `comments` and `reports`.
    """

    def __init__(
        self,
        base_url: str,
        store: KeyValueStore,
        *,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        on_unauthorized: Optional[Callable[[], None]] = None,
    ):
        self.store = store
        self.on_unauthorized = on_unauthorized
        self.client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers={"Content-Type": "application/json"},
            event_hooks={
                "request": [self._attach_token],
                "response": [self._handle_unauthorized],
            },
            transport=transport,
        )

        self.auth = AuthAPI(self)
        self.comments = CommentsAPI(self)
        self.reports = ReportsAPI(self)

    async def _attach_token(self, request: httpx.Request) -> None:
        token = self.store.get(ADMIN_TOKEN_KEY) or self.store.get(TOKEN_KEY)
        if token:
            request.headers["Authorization"] = f"Bearer {token}"

    async def _handle_unauthorized(self, response: httpx.Response) -> None:
        if response.status_code != 401:
            return
        for key in SESSION_KEYS:
            self.store.remove(key)
        logger.info("Session rejected by server (%s %s); stored credentials cleared",
                    response.request.method, response.request.url.path)
        if self.on_unauthorized is not None:
            self.on_unauthorized()

    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict] = None,
        json: Any = None,
    ) -> httpx.Response:
        try:
            response = await self.client.request(method, path, params=_clean_params(params), json=json)
        except httpx.TransportError as exc:
            raise NetworkError(f"{method} {path}: {exc}") from exc

        if response.is_error:
            raise _api_error(response)
        return response

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict] = None,
        json: Any = None,
    ) -> dict:
        """Send a request and return the decoded JSON body ({} when empty)."""
        response = await self._send(method, path, params=params, json=json)
        if not response.content:
            return {}
        return response.json()

    async def get(self, path: str, params: Optional[dict] = None) -> dict:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None) -> dict:
        return await self.request("POST", path, json=json)

    async def put(self, path: str, json: Any = None) -> dict:
        return await self.request("PUT", path, json=json)

    async def patch(self, path: str, json: Any = None) -> dict:
        return await self.request("PATCH", path, json=json)

    async def delete(self, path: str, json: Any = None) -> dict:
        return await self.request("DELETE", path, json=json)

    async def download(self, path: str, params: Optional[dict] = None) -> bytes:
        """Fetch a binary payload (CSV/PDF export)."""
        response = await self._send("GET", path, params=params)
        return response.content

    async def aclose(self) -> None:
        await self.client.aclose()
