"""Async HTTP client for the ATS REST backend."""

import logging
from collections.abc import Callable
from types import TracebackType
from typing import Any

import httpx

from src.api.errors import ApiError
from src.core.config import Settings
from src.session.store import SessionContext

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], str | None]


class ApiClient:
    """Thin wrapper over ``httpx.AsyncClient`` for one auth scope.

    The bearer token is looked up on every request, so signing in or out
    takes effect without rebuilding the client. Public clients have no token
    provider and never send ``Authorization``.

    Usage::

        async with ApiClient.authenticated(settings, session) as api:
            data = await api.get("/jobs", params={"status": "open"})
    """

    def __init__(
        self,
        base_url: str,
        *,
        token_provider: TokenProvider | None = None,
        timeout_s: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._token_provider = token_provider
        self._http = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout_s,
            transport=transport,
        )

    @classmethod
    def authenticated(
        cls,
        settings: Settings,
        session: SessionContext,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "ApiClient":
        """Client for admin and super-admin endpoints."""
        return cls(
            settings.api.base_url,
            token_provider=session.bearer_token,
            timeout_s=settings.api.timeout_s,
            transport=transport,
        )

    @classmethod
    def public(
        cls,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "ApiClient":
        """Client for candidate-facing endpoints. Never authenticated."""
        return cls(
            settings.api.base_url,
            timeout_s=settings.api.timeout_s,
            transport=transport,
        )

    @property
    def is_public(self) -> bool:
        return self._token_provider is None

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        files: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Send a request and return the decoded JSON object.

        Raises:
            ApiError: on a non-2xx response or when no response arrived.
        """
        headers: dict[str, str] = {}
        if self._token_provider is not None:
            token = self._token_provider()
            if token:
                headers["Authorization"] = f"Bearer {token}"

        clean_params = (
            {k: v for k, v in params.items() if v is not None} if params else None
        )
        logger.debug("%s %s params=%s", method, path, clean_params)

        try:
            response = await self._http.request(
                method,
                path,
                params=clean_params,
                json=json,
                files=files,
                headers=headers,
            )
        except httpx.HTTPError as e:
            msg = f"{method} {path} failed: {e}"
            raise ApiError(msg) from e

        payload = _decode(response)
        if response.is_error:
            error = payload.get("error")
            msg = f"{method} {path} returned {response.status_code}"
            logger.debug("%s: %s", msg, error)
            raise ApiError(
                msg,
                status_code=response.status_code,
                server_message=error if isinstance(error, str) and error else None,
                payload=payload,
            )
        return payload

    async def get(self, path: str, *, params: dict[str, Any] | None = None) -> dict[str, Any]:
        return await self.request("GET", path, params=params)

    async def post(
        self,
        path: str,
        json: Any = None,
        *,
        files: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        return await self.request("POST", path, json=json, files=files)

    async def put(self, path: str, json: Any = None) -> dict[str, Any]:
        return await self.request("PUT", path, json=json)

    async def delete(self, path: str) -> dict[str, Any]:
        return await self.request("DELETE", path)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()


def _decode(response: httpx.Response) -> dict[str, Any]:
    """Decode a JSON object body. Empty, non-JSON or non-object bodies give {}."""
    if not response.content:
        return {}
    try:
        data = response.json()
    except ValueError:
        logger.debug("Non-JSON response body (%d bytes)", len(response.content))
        return {}
    return data if isinstance(data, dict) else {}
