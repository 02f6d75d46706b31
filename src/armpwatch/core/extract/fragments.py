"""
Fragment sources: split a page's markup into per-item fragments.

The markup extractor only sees fragments, so the splitting strategy
can be swapped without touching field extraction.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod

from lxml import etree
from lxml import html as lxml_html

from .base import ExtractionError

logger = logging.getLogger(__name__)


LIST_ITEM_PATTERN = r'<li[^>]*class="list-group-item[^"]*".*?</li>'


class FragmentSource(ABC):
    """Abstract source of item fragments from page markup."""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    def fragments(self, page_html: str) -> list[str]:
        """Split page markup into item fragments in document order.

        Raises:
            ExtractionError: If the page cannot be split at all
        """
        pass


class RegexFragmentSource(FragmentSource):
    """Split items by pattern matching on the raw page text.

    Lenient: nested list items or a stray ``</li>`` inside an item
    will mis-split. Use LxmlFragmentSource for a real parse.
    """

    def __init__(self, pattern: str = LIST_ITEM_PATTERN) -> None:
        self.pattern = re.compile(pattern, re.DOTALL)

    @property
    def name(self) -> str:
        return "regex"

    def fragments(self, page_html: str) -> list[str]:
        if not isinstance(page_html, str):
            raise ExtractionError("Page markup must be text")
        return [match.group(0) for match in self.pattern.finditer(page_html)]


class LxmlFragmentSource(FragmentSource):
    """Split items by parsing the page and selecting item elements."""

    def __init__(self, item_selector: str = "li.list-group-item") -> None:
        self.item_selector = item_selector

    @property
    def name(self) -> str:
        return "lxml"

    def fragments(self, page_html: str) -> list[str]:
        if not page_html or not page_html.strip():
            return []
        try:
            doc = lxml_html.document_fromstring(page_html)
        except (etree.ParserError, ValueError) as e:
            raise ExtractionError(f"Failed to parse HTML: {e}", cause=e) from e

        return [
            lxml_html.tostring(element, encoding="unicode", with_tail=False)
            for element in doc.cssselect(self.item_selector)
        ]
