"""
Backend base classes and data structures.

Defines the interface contract for page-fetching backends.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass
class RequestSpec:
    """Specification for a page request."""

    url: str
    headers: dict[str, str] = field(default_factory=dict)
    timeout: float = 30.0
    follow_redirects: bool = True

    # Browser backends wait for this selector before reading the page
    wait_for_selector: str | None = None


@dataclass
class FetchResult:
    """Result of a fetch operation."""

    url: str
    final_url: str  # After redirects
    status_code: int
    html: str
    headers: dict[str, str] = field(default_factory=dict)

    # Timing
    elapsed_ms: float = 0.0
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def ok(self) -> bool:
        """Check if request was successful (2xx status)."""
        return 200 <= self.status_code < 300

    @property
    def content_length(self) -> int:
        """Get content length in bytes."""
        return len(self.html.encode("utf-8"))


class Backend(ABC):
    """Abstract base class for page backends.

    All backends must implement fetch. Browser backends additionally
    expose live pages for DOM extraction.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend identifier."""
        pass

    @abstractmethod
    def fetch(self, request: RequestSpec) -> FetchResult:
        """Fetch a URL and return the response.

        Args:
            request: Request specification

        Returns:
            FetchResult with response data

        Raises:
            BackendError: On unrecoverable fetch failure
        """
        pass

    def close(self) -> None:
        """Clean up backend resources."""
        pass

    def __enter__(self) -> "Backend":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()


class BackendError(Exception):
    """Base exception for backend errors."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.cause = cause


class FetchError(BackendError):
    """Error during fetch operation."""
    pass


class BlockedError(BackendError):
    """Request blocked by anti-bot measures."""
    pass
