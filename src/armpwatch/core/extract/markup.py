"""
Regex extraction over raw item markup.

Used when only the page source is available (no live DOM). Each field
is located by searching the item fragment for its label cell followed
by a value cell. Label spellings come from the shared label table, so
the markup strategy recognizes the same labels as the DOM strategies.
"""

from __future__ import annotations

import html
import logging
import re
from collections.abc import Iterable, Iterator, Mapping
from html.entities import codepoint2name
from types import MappingProxyType

from ..config.labels import DEFAULT_LABEL_TABLE, LabelTable
from ..normalize.labels import normalize_lang_tag
from .base import NOTICE_FIELDS, ExtractionError, Notice, NoticeExtractor

logger = logging.getLogger(__name__)


VALUE_CELL = r'<div class="d-table-cell[^>]*>'

# Whitespace as it appears in server-rendered markup, entities included
MARKUP_SPACE = r"(?:\s|&nbsp;|&#160;|&#[xX]0*[aA]0;)"

_TAG_PATTERN = re.compile(r"<[^>]+>")
_BREAK_PATTERN = re.compile(r"<br\s*/?>", re.IGNORECASE)
_LINE_BREAK_RUN = re.compile(r"\s*\n\s*")
_HTML_LANG_PATTERN = re.compile(
    r"<html\b[^>]*?\slang\s*=\s*[\"']?([^\"'\s>]*)", re.IGNORECASE
)


def _label_char(char: str) -> str:
    if char.isspace():
        return MARKUP_SPACE + "+"
    if char.isascii():
        return re.escape(char)
    codepoint = ord(char)
    forms = [re.escape(char), f"&#0*{codepoint};", f"&#[xX]0*(?i:{codepoint:x});"]
    name = codepoint2name.get(codepoint)
    if name:
        forms.insert(1, f"&{name};")
    return "(?:" + "|".join(forms) + ")"


def label_pattern(label: str, value_cell: str = VALUE_CELL) -> str:
    """Build a pattern capturing the value cell after a label cell.

    The label must start its cell, so ``Type`` does not match inside
    ``Financing Type``. Accented characters also match their entity
    forms (``cl&ocirc;ture``), and the colon may be preceded by
    whitespace or ``&nbsp;``.

    Args:
        label: Label text without trailing colon
        value_cell: Pattern for the opening tag of the value cell

    Returns:
        Regex source with one capture group for the value
    """
    label_source = "".join(_label_char(char) for char in label)
    return (
        rf">\s*{label_source}{MARKUP_SPACE}*:\s*</div>\s*"
        rf"{value_cell}(.*?)</div>"
    )


def base_labels(spellings: Iterable[str]) -> tuple[str, ...]:
    """Reduce label spellings to their distinct colon-less forms, in order."""
    bases: list[str] = []
    for spelling in spellings:
        base = spelling.rstrip().rstrip(":").rstrip()
        if base and base not in bases:
            bases.append(base)
    return tuple(bases)


def detect_markup_language(page_html: str) -> str:
    """Read the ``lang`` attribute of the ``<html>`` tag in raw markup."""
    match = _HTML_LANG_PATTERN.search(page_html)
    return normalize_lang_tag(match.group(1)) if match else ""


def clean_markup_text(text: str) -> str:
    """Turn captured markup into plain text.

    Line-break tags become newlines, other tags are dropped, entities
    are unescaped, and line breaks with their surrounding whitespace
    collapse to one space.
    """
    text = _BREAK_PATTERN.sub("\n", text)
    text = _TAG_PATTERN.sub("", text)
    text = html.unescape(text)
    return _LINE_BREAK_RUN.sub(" ", text).strip()


class MarkupPatternTable(Mapping[str, tuple[re.Pattern[str], ...]]):
    """Read-only mapping of field name to ordered alternative patterns."""

    def __init__(self, entries: Mapping[str, str | Iterable[str]]) -> None:
        compiled: dict[str, tuple[re.Pattern[str], ...]] = {}
        for field_name, patterns in entries.items():
            if field_name not in NOTICE_FIELDS:
                raise ValueError(f"Unknown notice field: {field_name!r}")
            sources = (patterns,) if isinstance(patterns, str) else tuple(patterns)
            if not sources:
                raise ValueError(f"No patterns for field {field_name!r}")
            compiled[field_name] = tuple(re.compile(p, re.DOTALL) for p in sources)
        self._patterns = MappingProxyType(compiled)

    @classmethod
    def from_label_table(
        cls,
        table: LabelTable = DEFAULT_LABEL_TABLE,
        lang: str | None = "",
        extra: Mapping[str, str | Iterable[str]] | None = None,
    ) -> "MarkupPatternTable":
        """Derive label patterns from a label table.

        Each field gets one pattern per distinct base spelling, ordered
        by page language like the label-probe strategy.

        Args:
            table: Label spellings per field
            lang: Page language tag deciding French or English first
            extra: Patterns for fields the label table does not cover

        Returns:
            Pattern table with the extra entries added
        """
        entries: dict[str, str | Iterable[str]] = {
            field_name: [label_pattern(base) for base in base_labels(spellings)]
            for field_name, spellings in table.variants_for(lang).items()
        }
        for field_name, patterns in (extra or {}).items():
            if field_name in entries:
                raise ValueError(f"Field {field_name!r} is already in the label table")
            entries[field_name] = patterns
        return cls(entries)

    def __getitem__(self, key: str) -> tuple[re.Pattern[str], ...]:
        return self._patterns[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._patterns)

    def __len__(self) -> int:
        return len(self._patterns)


# Fields only the markup strategy extracts
MARKUP_ONLY_PATTERNS: Mapping[str, str | tuple[str, ...]] = MappingProxyType({
    "number_title": r"<strong[^>]*>(.*?)</strong>",
    "country": (label_pattern("Pays"), label_pattern("Country")),
    "funding": (label_pattern("Type de financement"), label_pattern("Financing Type")),
})


def build_markup_patterns(
    lang: str | None = "",
    table: LabelTable = DEFAULT_LABEL_TABLE,
) -> MarkupPatternTable:
    """Get the markup pattern table for a page language."""
    return MarkupPatternTable.from_label_table(table, lang, extra=MARKUP_ONLY_PATTERNS)


DEFAULT_MARKUP_PATTERNS = build_markup_patterns()


class MarkupExtractor(NoticeExtractor[str]):
    """Extract notices from raw item markup with regex patterns."""

    def __init__(
        self,
        patterns: MarkupPatternTable = DEFAULT_MARKUP_PATTERNS,
        *,
        fall_through_empty: bool = False,
    ) -> None:
        """Initialize the markup extractor.

        Args:
            patterns: Alternative patterns per field, tried in order
            fall_through_empty: Try the next pattern when a match is empty
        """
        self.patterns = patterns
        self.fall_through_empty = fall_through_empty

    @property
    def name(self) -> str:
        return "markup"

    @property
    def needs_dom(self) -> bool:
        return False

    def extract(self, item: str) -> Notice:
        if not isinstance(item, str):
            raise ExtractionError(f"Expected markup text, got {type(item).__name__}")

        values = {
            field_name: self.search(item, patterns)
            for field_name, patterns in self.patterns.items()
        }
        return Notice(**values)

    def search(self, fragment: str, patterns: tuple[re.Pattern[str], ...]) -> str:
        """Return the cleaned capture of the first matching pattern."""
        for pattern in patterns:
            match = pattern.search(fragment)
            if match is None:
                continue
            value = clean_markup_text(match.group(1) if match.groups() else match.group(0))
            if value or not self.fall_through_empty:
                return value
        return ""
