"""
Playwright Backend implementation for browser automation.

Provides browser-based page loading with:
- JavaScript rendering
- Live element handles for DOM extraction
- Automatic browser install when the executable is missing
"""

from __future__ import annotations

import logging
import subprocess
import sys
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from .base import (
    Backend,
    BackendError,
    BlockedError,
    FetchResult,
    RequestSpec,
)

if TYPE_CHECKING:
    from playwright.sync_api import Browser, ElementHandle, Page, Playwright

logger = logging.getLogger(__name__)


# Launch errors that mean the browser or driver is not installed
MISSING_BROWSER_MARKERS = (
    "executable doesn't exist",
    "playwright install",
    "please install the driver",
)

BLOCKED_STATUS_CODES = {403, 406, 418, 451}


# =============================================================================
# Browser Error Classes
# =============================================================================


class BrowserError(BackendError):
    """Base exception for browser errors."""
    pass


class NavigationTimeout(BrowserError):
    """Page didn't load in time."""
    pass


class ElementNotFound(BrowserError):
    """Selector didn't match any element."""
    pass


def install_browser(browser_type: str) -> None:
    """Install a Playwright browser with the bundled CLI.

    Raises:
        BrowserError: If installation fails
    """
    logger.info(f"Installing Playwright {browser_type} browser...")
    try:
        subprocess.run(
            [sys.executable, "-m", "playwright", "install", browser_type],
            check=True,
        )
    except (OSError, subprocess.CalledProcessError) as e:
        raise BrowserError(f"Auto-install of {browser_type} failed: {e}", cause=e) from e


def is_missing_browser_error(error: Exception) -> bool:
    message = str(error).lower()
    return any(marker in message for marker in MISSING_BROWSER_MARKERS)


# =============================================================================
# PlaywrightBackend Implementation
# =============================================================================


class PlaywrightBackend(Backend):
    """Playwright-based browser backend.

    Uses the synchronous Playwright client: pages and element handles
    it returns can be queried directly by the extraction strategies.
    """

    def __init__(
        self,
        headless: bool = True,
        timeout: float = 30.0,
        browser_type: str = "chromium",
        user_agent: str | None = None,
        auto_install: bool = True,
    ):
        """Initialize Playwright backend.

        Args:
            headless: Run browser in headless mode
            timeout: Default timeout in seconds
            browser_type: Browser to use (chromium, firefox, webkit)
            user_agent: Custom user agent string
            auto_install: Install the browser and retry once if launch fails
        """
        self.headless = headless
        self.timeout = timeout
        self.timeout_ms = int(timeout * 1000)
        self.browser_type = browser_type
        self.user_agent = user_agent
        self.auto_install = auto_install

        # Playwright objects (initialized on first use)
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._page: Page | None = None

    @property
    def name(self) -> str:
        return "playwright"

    def _launch(self) -> Browser:
        assert self._playwright is not None
        if self.browser_type == "firefox":
            launcher = self._playwright.firefox
        elif self.browser_type == "webkit":
            launcher = self._playwright.webkit
        else:
            launcher = self._playwright.chromium
        return launcher.launch(headless=self.headless)

    def _ensure_browser(self) -> Browser:
        """Start Playwright and launch the browser if not already running."""
        if self._browser is not None and self._browser.is_connected():
            return self._browser

        try:
            from playwright.sync_api import sync_playwright
        except ImportError as e:
            raise BrowserError(
                "Playwright is not installed. Run: pip install playwright",
                cause=e,
            ) from e

        if self._playwright is None:
            self._playwright = sync_playwright().start()

        try:
            self._browser = self._launch()
        except Exception as e:
            if not (self.auto_install and is_missing_browser_error(e)):
                raise BrowserError(
                    f"Failed to launch {self.browser_type} browser. "
                    f"Run: playwright install {self.browser_type}",
                    cause=e,
                ) from e
            logger.warning(f"{self.browser_type} browser missing; attempting auto-install")
            install_browser(self.browser_type)
            try:
                self._browser = self._launch()
            except Exception as retry_error:
                raise BrowserError(
                    f"Failed to launch {self.browser_type} after install: {retry_error}",
                    cause=retry_error,
                ) from retry_error

        logger.info(f"Launched {self.browser_type} browser (headless={self.headless})")
        return self._browser

    def _get_page(self) -> Page:
        """Get or create a page."""
        browser = self._ensure_browser()
        if self._page is None or self._page.is_closed():
            context_options: dict[str, Any] = {}
            if self.user_agent:
                context_options["user_agent"] = self.user_agent
            context = browser.new_context(**context_options)
            self._page = context.new_page()
            self._page.set_default_timeout(self.timeout_ms)
        return self._page

    def open(self, request: RequestSpec) -> Page:
        """Navigate to a URL and return the live page.

        Args:
            request: Request specification

        Returns:
            Loaded page, after the wait selector appeared if one was given

        Raises:
            NavigationTimeout: If navigation or the wait times out
            BlockedError: If the portal refuses the request
            BrowserError: On other browser failures
        """
        page = self._get_page()
        try:
            response = page.goto(request.url, timeout=int(request.timeout * 1000))
            if response is not None and response.status in BLOCKED_STATUS_CODES:
                raise BlockedError(
                    f"Request blocked with status {response.status}",
                    url=request.url,
                    status_code=response.status,
                )
            if request.wait_for_selector:
                page.wait_for_selector(
                    request.wait_for_selector,
                    timeout=int(request.timeout * 1000),
                )
        except BlockedError:
            raise
        except Exception as e:
            if "timeout" in str(e).lower():
                raise NavigationTimeout(
                    f"Navigation timeout: {request.url}",
                    url=request.url,
                    cause=e,
                ) from e
            raise BrowserError(f"Browser error: {e}", url=request.url, cause=e) from e
        return page

    def fetch(self, request: RequestSpec) -> FetchResult:
        """Load a URL in the browser and return the rendered markup."""
        start_time = datetime.now(timezone.utc)
        page = self.open(request)
        elapsed_ms = (datetime.now(timezone.utc) - start_time).total_seconds() * 1000
        return FetchResult(
            url=request.url,
            final_url=page.url,
            status_code=200,
            html=page.content(),
            elapsed_ms=elapsed_ms,
        )

    def list_items(
        self,
        page: Page,
        list_selector: str,
        item_selector: str,
    ) -> list[ElementHandle]:
        """Enumerate item handles inside the list container.

        Raises:
            ElementNotFound: If the list container is missing
            BrowserError: If items cannot be queried
        """
        try:
            container = page.query_selector(list_selector)
        except Exception as e:
            raise BrowserError(f"Cannot query list container: {e}", url=page.url, cause=e) from e
        if container is None:
            raise ElementNotFound(f"List container not found: {list_selector}", url=page.url)

        try:
            items = container.query_selector_all(item_selector)
        except Exception as e:
            raise BrowserError(f"Cannot query list items: {e}", url=page.url, cause=e) from e

        logger.info(f"Items found: {len(items)}")
        return items

    def close(self) -> None:
        """Close browser and clean up resources."""
        if self._page and not self._page.is_closed():
            self._page.close()
        self._page = None

        if self._browser:
            self._browser.close()
            self._browser = None

        if self._playwright:
            self._playwright.stop()
            self._playwright = None

        logger.debug("Playwright backend closed")
