"""
HTTP transport for the ReviewHub backend.

Wraps a single httpx.AsyncClient. Each call takes the bearer token as an
argument, so the authorization header is computed per request and never
stored on the shared client.
"""

from typing import Any, Optional

import httpx
from loguru import logger

from reviewhub.errors import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ServerError,
    ServerValidationError,
    TransportError,
)
from reviewhub.log import redact


class ApiClient:
    """
    Thin JSON client for the review platform API.

    Returns decoded JSON bodies and raises ReviewHubError subclasses for
    every failure, transport errors included.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize API client.

        Args:
            base_url: Backend root URL
            timeout: Per-request timeout in seconds; None disables it
            transport: Custom httpx transport (tests mount an ASGI app here)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                headers={"Accept": "application/json"},
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def request(
        self,
        method: str,
        path: str,
        json: Optional[dict] = None,
        params: Optional[dict] = None,
        token: Optional[str] = None,
    ) -> Any:
        """
        Send a request and decode the response.

        Args:
            method: HTTP method
            path: Path relative to base_url
            json: JSON body
            params: Query parameters
            token: Bearer token; no Authorization header when None

        Returns:
            Decoded JSON body, or None for empty responses

        Raises:
            ReviewHubError: On any transport or HTTP failure.
        """
        headers = {}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        logger.debug(
            f"{method} {path} params={redact(params or {})} "
            f"body={redact(json) if json else None} auth={'yes' if token else 'no'}"
        )

        try:
            response = await self._get_client().request(
                method,
                path,
                json=json,
                params=params,
                headers=headers,
            )
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {type(e).__name__}: {e}")
            raise TransportError(detail=str(e)) from e

        logger.debug(f"{method} {path} -> {response.status_code}")

        if response.status_code >= 400:
            raise self._error_for(response)

        if response.status_code == 204 or not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"{method} {path} returned a non-JSON body")
            raise ServerError("Malformed response", status_code=response.status_code) from e

    async def post(self, path: str, **kwargs) -> Any:
        return await self.request("POST", path, **kwargs)

    @staticmethod
    def _extract_detail(response: httpx.Response) -> str:
        """Pull the server's message out of an error body."""
        try:
            body = response.json()
        except ValueError:
            return ""

        if not isinstance(body, dict):
            return ""

        detail = body.get("detail") or body.get("error") or body.get("message")
        if isinstance(detail, str):
            return detail
        if isinstance(detail, list):
            # FastAPI request validation: [{"loc": [...], "msg": "..."}]
            messages = [item.get("msg", "") for item in detail if isinstance(item, dict)]
            return "; ".join(m for m in messages if m)
        return ""

    def _error_for(self, response: httpx.Response) -> Exception:
        status = response.status_code
        detail = self._extract_detail(response)

        logger.warning(f"API error {status}: {detail or '<no detail>'}")

        if status == 401:
            return AuthenticationError(detail, status_code=status)
        if status == 403:
            return AuthorizationError(detail, status_code=status)
        if status == 404:
            return NotFoundError(detail, status_code=status)
        if status in (400, 409, 422):
            return ServerValidationError(detail, status_code=status)
        return ServerError(status_code=status, detail=detail)
