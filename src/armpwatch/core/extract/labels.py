"""
Ordered label-probe extraction for live DOM items.

For each notice field, probes the item for a label element carrying
one of the field's spellings and reads the value element right after
it. Spellings are tried in page-language priority order.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..config.labels import DEFAULT_LABEL_TABLE, LabelTable
from ..normalize.labels import normalize_lang_tag
from .base import NOTICE_FIELDS, ExtractionError, ItemHandle, Notice, NoticeExtractor

logger = logging.getLogger(__name__)


DEFAULT_SELECTOR_TEMPLATE = 'div:text-is("{label}") + div'


def detect_page_language(page: Any) -> str:
    """Read the ``lang`` attribute of the document root.

    Args:
        page: Page or document handle supporting ``query_selector``

    Returns:
        Lower-cased, trimmed language tag; empty if absent or unreadable
    """
    try:
        root = page.query_selector("html")
        lang = root.get_attribute("lang") if root is not None else None
    except Exception as e:
        logger.debug(f"Page language lookup failed: {e}")
        return ""
    return normalize_lang_tag(lang)


def handle_text(handle: ItemHandle | None) -> str:
    """Trimmed text content of a handle, empty when missing."""
    if handle is None:
        return ""
    return (handle.text_content() or "").strip()


def quote_selector_text(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


class LabelProbeExtractor(NoticeExtractor[ItemHandle]):
    """Extract notices by probing each field's label spellings in order.

    The first spelling whose label element has a value sibling wins.
    A matched but empty value cell still ends the search for that
    field unless ``fall_through_empty`` is set.
    """

    def __init__(
        self,
        lang: str = "",
        *,
        table: LabelTable = DEFAULT_LABEL_TABLE,
        selector_template: str = DEFAULT_SELECTOR_TEMPLATE,
        title_selector: str = "strong",
        fall_through_empty: bool = False,
    ) -> None:
        """Initialize the label-probe extractor.

        Args:
            lang: Detected page language tag
            table: Label spellings per field
            selector_template: Value selector with a ``{label}`` placeholder
            title_selector: Selector for the bolded notice title
            fall_through_empty: Continue to the next spelling on an empty value
        """
        unknown = set(table.field_names) - set(NOTICE_FIELDS)
        if unknown:
            raise ValueError(f"Label table has unknown fields: {', '.join(sorted(unknown))}")
        self.lang = normalize_lang_tag(lang)
        self.table = table
        self.selector_template = selector_template
        self.title_selector = title_selector
        self.fall_through_empty = fall_through_empty
        self.variants: Mapping[str, tuple[str, ...]] = table.variants_for(self.lang)

    @property
    def name(self) -> str:
        return "labels"

    def extract(self, item: ItemHandle) -> Notice:
        try:
            title = handle_text(item.query_selector(self.title_selector))
        except Exception as e:
            raise ExtractionError(f"Cannot query item: {e}", cause=e) from e

        values = {"number_title": title}
        for field_name, labels in self.variants.items():
            values[field_name] = self.label_value(item, labels)
        return Notice(**values)

    def label_value(self, item: ItemHandle, labels: tuple[str, ...]) -> str:
        """Find the value next to the first matching label.

        Args:
            item: Item handle scoping the search
            labels: Label spellings in priority order

        Returns:
            Trimmed value text, or empty string when no spelling matches
        """
        for label in labels:
            selector = self.selector_for(label)
            try:
                value_handle = item.query_selector(selector)
                if value_handle is None:
                    continue
                value = handle_text(value_handle)
            except Exception as e:
                logger.debug(f"Lookup failed for label {label!r}: {e}")
                continue

            if value or not self.fall_through_empty:
                return value
        return ""

    def selector_for(self, label: str) -> str:
        return self.selector_template.replace("{label}", quote_selector_text(label.strip()))
