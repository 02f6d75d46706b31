"""
Offline DOM handles over an lxml parse tree.

Implements the same query surface as Playwright element handles for a
saved page, so the DOM extraction strategies can run without a
browser. Supports plain CSS plus Playwright's ``:text-is("...")`` and
``:has-text("...")`` pseudo-classes, optionally followed by an
adjacent-sibling combinator (``div:text-is("Type:") + div``).
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass
from functools import lru_cache

from lxml import etree
from lxml import html as lxml_html
from lxml.cssselect import CSSSelector
from lxml.html import HtmlElement

from ..extract.base import ExtractionError
from ..normalize.labels import normalize_whitespace


_TEXT_PSEUDO_PATTERN = re.compile(
    r'^(?P<base>.*?):(?P<kind>text-is|has-text)\("(?P<text>(?:[^"\\]|\\.)*)"\)(?P<rest>.*)$',
    re.DOTALL,
)
_SIBLING_PATTERN = re.compile(r"^\s*\+\s*(?P<sibling>\S.*)$", re.DOTALL)
_ESCAPE_PATTERN = re.compile(r"\\(.)", re.DOTALL)


@dataclass(frozen=True)
class _TextSelector:
    """Parsed selector with a text pseudo-class."""

    base: str
    kind: str
    text: str
    sibling: str | None


@lru_cache(maxsize=256)
def _compile_css(selector: str) -> CSSSelector:
    return CSSSelector(selector)


@lru_cache(maxsize=256)
def _parse_text_selector(selector: str) -> _TextSelector | None:
    match = _TEXT_PSEUDO_PATTERN.match(selector.strip())
    if match is None:
        return None

    rest = match.group("rest").strip()
    sibling: str | None = None
    if rest:
        sibling_match = _SIBLING_PATTERN.match(rest)
        if sibling_match is None:
            raise ValueError(f"Unsupported selector after text pseudo-class: {selector!r}")
        sibling = sibling_match.group("sibling").strip()

    return _TextSelector(
        base=match.group("base").strip() or "*",
        kind=match.group("kind"),
        text=normalize_whitespace(_ESCAPE_PATTERN.sub(r"\1", match.group("text"))),
        sibling=sibling,
    )


def _element_text(element: HtmlElement) -> str:
    return normalize_whitespace(element.text_content())


def _matches_text(element: HtmlElement, text_sel: _TextSelector) -> bool:
    text = _element_text(element)
    if text_sel.kind == "has-text":
        return text_sel.text.lower() in text.lower()
    if text != text_sel.text:
        return False
    # text-is targets the smallest element carrying the text
    return not any(
        isinstance(child.tag, str) and _element_text(child) == text_sel.text
        for child in element
    )


def _next_element(element: HtmlElement) -> HtmlElement | None:
    sibling = element.getnext()
    while sibling is not None and not isinstance(sibling.tag, str):
        sibling = sibling.getnext()
    return sibling


def select(root: HtmlElement, selector: str) -> list[HtmlElement]:
    """Select elements under root (root included) in document order.

    Raises:
        ValueError: If the selector is not supported
    """
    text_sel = _parse_text_selector(selector)
    if text_sel is None:
        return list(_compile_css(selector)(root))

    candidates = [el for el in _compile_css(text_sel.base)(root) if _matches_text(el, text_sel)]
    if text_sel.sibling is None:
        return candidates

    sibling_selector = _compile_css(text_sel.sibling)
    results: list[HtmlElement] = []
    for candidate in candidates:
        following = _next_element(candidate)
        if following is None or following in results:
            continue
        if any(match is following for match in sibling_selector(following)):
            results.append(following)
    return results


class LxmlItemHandle:
    """Element handle backed by an lxml element."""

    def __init__(self, element: HtmlElement) -> None:
        self.element = element

    def query_selector(self, selector: str) -> "LxmlItemHandle | None":
        matches = select(self.element, selector)
        return LxmlItemHandle(matches[0]) if matches else None

    def query_selector_all(self, selector: str) -> list["LxmlItemHandle"]:
        return [LxmlItemHandle(el) for el in select(self.element, selector)]

    def text_content(self) -> str | None:
        return self.element.text_content()

    def inner_html(self) -> str:
        parts = [html.escape(self.element.text or "", quote=False)]
        parts.extend(
            lxml_html.tostring(child, encoding="unicode", with_tail=True)
            for child in self.element
        )
        return "".join(parts)

    def get_attribute(self, name: str) -> str | None:
        return self.element.get(name)

    def __repr__(self) -> str:
        return f"LxmlItemHandle(<{self.element.tag}>)"


class LxmlDocument(LxmlItemHandle):
    """Page-level handle for a parsed HTML document."""

    @classmethod
    def from_html(cls, page_html: str) -> "LxmlDocument":
        """Parse page markup.

        Raises:
            ExtractionError: If the markup cannot be parsed
        """
        if not page_html or not page_html.strip():
            raise ExtractionError("Empty page markup")
        try:
            root = lxml_html.document_fromstring(page_html)
        except (etree.ParserError, ValueError) as e:
            raise ExtractionError(f"Failed to parse HTML: {e}", cause=e) from e
        return cls(root)

    @classmethod
    def from_fragment(cls, fragment: str) -> "LxmlDocument":
        """Parse a single-item fragment; the fragment root becomes the handle."""
        try:
            element = lxml_html.fragment_fromstring(fragment, create_parent="div")
        except (etree.ParserError, ValueError) as e:
            raise ExtractionError(f"Failed to parse fragment: {e}", cause=e) from e
        return cls(element)
