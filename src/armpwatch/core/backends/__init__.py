"""Backend implementations for fetching and rendering pages."""

from .base import (
    Backend,
    BackendError,
    BlockedError,
    FetchError,
    FetchResult,
    RequestSpec,
)
from .http_backend import HttpBackend
from .lxml_dom import LxmlDocument, LxmlItemHandle
from .playwright_backend import (
    PlaywrightBackend,
    BrowserError,
    NavigationTimeout,
    ElementNotFound,
)

__all__ = [
    # Base classes
    "Backend",
    "RequestSpec",
    "FetchResult",
    # Base errors
    "BackendError",
    "FetchError",
    "BlockedError",
    # HTTP backend
    "HttpBackend",
    # Offline DOM
    "LxmlDocument",
    "LxmlItemHandle",
    # Playwright backend
    "PlaywrightBackend",
    "BrowserError",
    "NavigationTimeout",
    "ElementNotFound",
]
