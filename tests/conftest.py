"""Shared fixtures for ARMPWatch tests."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from armpwatch.core.backends.lxml_dom import LxmlDocument, LxmlItemHandle


def row(label: str, value: str, value_class: str = "d-table-cell") -> str:
    return (
        f'<div class="d-table-row"><div class="d-table-cell">{label}</div>'
        f'<div class="{value_class}">{value}</div></div>'
    )


FRENCH_ITEM = (
    '<li class="list-group-item">'
    "<strong>AON N°012/2025/MINTP Construction d'un pont</strong>"
    '<div class="d-table">'
    + row("MO/AC:", "Ministère des Travaux Publics")
    + row("PO/CA:", "Ministry of Public Works")
    + row("Type:", "Travaux")
    + row("Région :", "Centre")
    + row("Montant:", "150 000 000 FCFA", "d-table-cell text-right")
    + row("Publié le:", "01/03/2025")
    + row("Date de clôture:", "15/03/2025")
    + row("Heure de clôture:", "10:00")
    + "</div></li>"
)

ENGLISH_ITEM = (
    '<li class="list-group-item">'
    "<strong>NOI No. 45/2025 Supply of laptops</strong>"
    '<div class="d-table">'
    + row("PO/CA:", "City Council of Douala")
    + row("MO/AC:", "Communauté Urbaine de Douala")
    + row("Type:", "Supplies")
    + row("Region:", "Littoral")
    + row("Country:", "Cameroon")
    + row("Amount:", "25 000 000 FCFA", "d-table-cell text-right")
    + row("Financing Type:", "Budget")
    + row("Published on:", "02/03/2025")
    + row("Closing date:", "15/03/2025")
    + row("Closing time:", "12:00")
    + "</div></li>"
)


def page(lang: str | None, *items: str) -> str:
    lang_attr = f' lang="{lang}"' if lang is not None else ""
    return (
        f"<!DOCTYPE html><html{lang_attr}><head><meta charset=\"utf-8\">"
        "<title>Appels d'offres</title></head><body>"
        f'<ul class="list-group">{"".join(items)}</ul>'
        "</body></html>"
    )


class ExplodingHandle:
    """Item handle whose every lookup fails, like a detached element."""

    def query_selector(self, selector):
        raise RuntimeError("Target page, context or browser has been closed")

    def query_selector_all(self, selector):
        raise RuntimeError("Target page, context or browser has been closed")

    def text_content(self):
        raise RuntimeError("Target page, context or browser has been closed")

    def inner_html(self):
        raise RuntimeError("Target page, context or browser has been closed")


class FlakyHandle:
    """Wraps a real handle; lookups containing a marker fail."""

    def __init__(self, inner: LxmlItemHandle, marker: str):
        self.inner = inner
        self.marker = marker
        self.queries: list[str] = []

    def query_selector(self, selector):
        self.queries.append(selector)
        if self.marker in selector:
            raise RuntimeError(f"Lookup failed: {selector}")
        return self.inner.query_selector(selector)

    def query_selector_all(self, selector):
        return self.inner.query_selector_all(selector)

    def text_content(self):
        return self.inner.text_content()

    def inner_html(self):
        return self.inner.inner_html()


@pytest.fixture
def make_item():
    """Build an item handle from list-item markup."""
    def factory(markup: str) -> LxmlItemHandle:
        return LxmlDocument.from_fragment(markup)
    return factory


@pytest.fixture
def french_item(make_item) -> LxmlItemHandle:
    return make_item(FRENCH_ITEM)


@pytest.fixture
def english_item(make_item) -> LxmlItemHandle:
    return make_item(ENGLISH_ITEM)


@pytest.fixture
def french_page() -> str:
    return page("fr-FR", FRENCH_ITEM, ENGLISH_ITEM)


@pytest.fixture
def english_page() -> str:
    return page("en", ENGLISH_ITEM, FRENCH_ITEM)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path: Path):
    """Isolate tests from the caller's environment and config files."""
    for name in ("FORMAT", "OUTPUT_FILE", "SHOW_HTML", "PAUSE_ON_EXIT", "SCRAPE_URL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    yield
    app_logger = logging.getLogger("armpwatch")
    for handler in app_logger.handlers:
        handler.close()
    app_logger.handlers.clear()
    app_logger.setLevel(logging.NOTSET)
