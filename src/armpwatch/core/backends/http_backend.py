"""
HTTP Backend implementation using httpx.

Fetches raw page markup for the regex extraction path. A single
attempt is made per request; failures surface as FetchError.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

import httpx

from .base import (
    Backend,
    BlockedError,
    FetchError,
    FetchResult,
    RequestSpec,
)

logger = logging.getLogger(__name__)


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

# Status codes that indicate blocking
BLOCKED_STATUS_CODES = {403, 406, 418, 451}


class HttpBackend(Backend):
    """HTTP backend using a persistent httpx client."""

    def __init__(
        self,
        timeout: float = 30.0,
        user_agent: str | None = None,
        default_headers: dict[str, str] | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize HTTP backend.

        Args:
            timeout: Default request timeout in seconds
            user_agent: Custom user agent
            default_headers: Default headers for all requests
            transport: Optional httpx transport (e.g. httpx.MockTransport)
        """
        self.timeout = timeout
        self.user_agent = user_agent or DEFAULT_USER_AGENT
        self.transport = transport

        self.default_headers = {
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "fr-FR,fr;q=0.9,en;q=0.8",
            **(default_headers or {}),
        }

        self._client: httpx.Client | None = None

    @property
    def name(self) -> str:
        return "http"

    def _ensure_client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                headers=self.default_headers,
                transport=self.transport,
            )
        return self._client

    def fetch(self, request: RequestSpec) -> FetchResult:
        """Fetch a URL.

        Args:
            request: Request specification

        Returns:
            FetchResult with response data

        Raises:
            BlockedError: If the portal refuses the request
            FetchError: On transport errors or non-success status
        """
        client = self._ensure_client()
        start_time = datetime.now(timezone.utc)

        try:
            response = client.get(
                request.url,
                headers=request.headers or None,
                timeout=request.timeout,
                follow_redirects=request.follow_redirects,
            )
        except httpx.HTTPError as e:
            raise FetchError(f"Request failed: {e}", url=request.url, cause=e) from e

        elapsed_ms = (datetime.now(timezone.utc) - start_time).total_seconds() * 1000

        if response.status_code in BLOCKED_STATUS_CODES:
            raise BlockedError(
                f"Request blocked with status {response.status_code}",
                url=str(response.url),
                status_code=response.status_code,
            )
        if response.status_code >= 400:
            raise FetchError(
                f"HTTP {response.status_code} for {request.url}",
                url=request.url,
                status_code=response.status_code,
            )

        logger.debug(f"Fetched {request.url} ({len(response.content)} bytes, {elapsed_ms:.0f} ms)")
        return FetchResult(
            url=request.url,
            final_url=str(response.url),
            status_code=response.status_code,
            html=response.text,
            headers=dict(response.headers),
            elapsed_ms=elapsed_ms,
        )

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            self._client.close()
        self._client = None
