"""
Scrape runner orchestrator.

Coordinates the scraping workflow: fetch → enumerate items → extract.
Serialization is left to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from cssselect import SelectorError

from armpwatch.core.backends.base import Backend, FetchError, RequestSpec
from armpwatch.core.backends.http_backend import HttpBackend
from armpwatch.core.backends.lxml_dom import LxmlDocument
from armpwatch.core.backends.playwright_backend import PlaywrightBackend
from armpwatch.core.config.models import AppConfig, ExtractionStrategy, ScrapeConfig
from armpwatch.core.extract import (
    ExtractionError,
    FragmentSource,
    Notice,
    RegexFragmentSource,
    build_extractor,
    detect_markup_language,
    detect_page_language,
    extract_notices,
)
from armpwatch.core.logging import get_contextual_logger

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class RunStats:
    """Statistics for a scrape run."""

    strategy: str = ""
    page_lang: str = ""
    items_found: int = 0
    notices_extracted: int = 0

    started_at: datetime = field(default_factory=_utcnow)
    finished_at: datetime | None = None

    @property
    def duration_seconds(self) -> float | None:
        """Get run duration in seconds."""
        if self.finished_at:
            return (self.finished_at - self.started_at).total_seconds()
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "strategy": self.strategy,
            "page_lang": self.page_lang,
            "items_found": self.items_found,
            "notices_extracted": self.notices_extracted,
            "duration_seconds": self.duration_seconds,
        }


@dataclass
class RunResult:
    """Notices from one run plus its statistics."""

    notices: list[Notice]
    stats: RunStats


def _list_items(root: Any, scrape: ScrapeConfig) -> list[Any]:
    container = root.query_selector(scrape.list_selector)
    if container is None:
        raise ExtractionError(f"List container not found: {scrape.list_selector}")
    return container.query_selector_all(scrape.item_selector)


def parse_document(
    page_html: str,
    scrape: ScrapeConfig | None = None,
    *,
    fragment_source: FragmentSource | None = None,
) -> RunResult:
    """Extract notices from saved page markup without a browser.

    DOM strategies run over an lxml parse of the page; the markup
    strategy runs over fragments from the fragment source.

    Args:
        page_html: Full page markup
        scrape: Scrape settings (defaults if None)
        fragment_source: Splitter for the markup strategy (regex by default)

    Returns:
        RunResult with notices in document order

    Raises:
        ExtractionError: If the page cannot be parsed or has no list container
    """
    scrape = scrape or ScrapeConfig()
    stats = RunStats(strategy=scrape.strategy.value)

    if scrape.strategy.needs_dom:
        document = LxmlDocument.from_html(page_html)
        stats.page_lang = detect_page_language(document)
        try:
            items: list[Any] = _list_items(document, scrape)
        except (ValueError, SelectorError) as e:
            raise ExtractionError(f"Invalid selector: {e}", cause=e) from e
    else:
        stats.page_lang = detect_markup_language(page_html)
        items = (fragment_source or RegexFragmentSource()).fragments(page_html)

    stats.items_found = len(items)
    extractor = build_extractor(scrape.strategy, lang=stats.page_lang, scrape=scrape)
    notices = extract_notices(items, extractor, show_html=scrape.show_html)

    stats.notices_extracted = len(notices)
    stats.finished_at = _utcnow()
    logger.debug(f"Parsed saved page: {stats.to_dict()}")
    return RunResult(notices=notices, stats=stats)


class ScrapeRunner:
    """Orchestrates one scrape of the configured listing page.

    DOM strategies load the page in a browser and extract from live
    element handles; the markup strategy fetches raw HTML over HTTP.
    """

    def __init__(
        self,
        config: AppConfig,
        *,
        backend: Backend | None = None,
    ) -> None:
        """Initialize the scrape runner.

        Args:
            config: Application configuration
            backend: Backend to use (created from config if not provided)
        """
        self.config = config
        self._backend = backend
        self._owns_backend = backend is None
        self.log = get_contextual_logger(
            "runner",
            url=config.scrape.url,
            strategy=config.scrape.strategy.value,
        )

    def _create_backend(self) -> Backend:
        browser = self.config.browser
        if self.config.scrape.strategy.needs_dom:
            return PlaywrightBackend(
                headless=browser.headless,
                timeout=browser.timeout_seconds,
                browser_type=browser.browser,
                user_agent=browser.user_agent,
                auto_install=browser.auto_install,
            )
        return HttpBackend(timeout=browser.timeout_seconds, user_agent=browser.user_agent)

    def run(self) -> RunResult:
        """Execute the scrape.

        Returns:
            RunResult with notices in document order

        Raises:
            BackendError: If the page cannot be loaded or the list is missing
            ExtractionError: If items cannot be enumerated or queried
        """
        scrape = self.config.scrape
        stats = RunStats(strategy=scrape.strategy.value)
        backend = self._backend or self._create_backend()

        try:
            if scrape.strategy is ExtractionStrategy.MARKUP:
                notices = self._run_markup(backend, stats)
            else:
                notices = self._run_dom(backend, stats)
        finally:
            if self._owns_backend:
                backend.close()

        stats.notices_extracted = len(notices)
        stats.finished_at = _utcnow()
        self.log.info(f"Run finished: {stats.notices_extracted} notices")
        self.log.debug(f"Run stats: {stats.to_dict()}")
        return RunResult(notices=notices, stats=stats)

    def _request(self, wait_for: str | None = None) -> RequestSpec:
        return RequestSpec(
            url=self.config.scrape.url,
            timeout=self.config.browser.timeout_seconds,
            wait_for_selector=wait_for,
        )

    def _run_dom(self, backend: Backend, stats: RunStats) -> list[Notice]:
        if not isinstance(backend, PlaywrightBackend):
            raise TypeError(f"{self.config.scrape.strategy.value} strategy needs a browser backend")

        scrape = self.config.scrape
        page = backend.open(self._request(wait_for=scrape.list_selector))
        stats.page_lang = detect_page_language(page)
        self.log.info(f"Page lang: {stats.page_lang or '(none)'}")

        items = backend.list_items(page, scrape.list_selector, scrape.item_selector)
        stats.items_found = len(items)

        extractor = build_extractor(scrape.strategy, lang=stats.page_lang, scrape=scrape)
        # Handles are only valid while the page is open
        return extract_notices(items, extractor, show_html=scrape.show_html)

    def _run_markup(self, backend: Backend, stats: RunStats) -> list[Notice]:
        scrape = self.config.scrape
        result = backend.fetch(self._request())
        if not result.ok:
            raise FetchError(
                f"Unexpected status {result.status_code} for {result.url}",
                url=result.url,
                status_code=result.status_code,
            )
        self.log.debug(f"Fetched {result.content_length} bytes from {result.final_url}")

        stats.page_lang = detect_markup_language(result.html)
        fragments = RegexFragmentSource().fragments(result.html)
        stats.items_found = len(fragments)
        self.log.info(f"Items found: {stats.items_found}")

        extractor = build_extractor(scrape.strategy, lang=stats.page_lang, scrape=scrape)
        return extract_notices(fragments, extractor, show_html=scrape.show_html)
