"""
Extraction run loop and strategy selection.

All three strategies share one contract, ``extract(item) -> Notice``;
the run loop applies a strategy to every item in document order.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from ..config.labels import DEFAULT_LABEL_TABLE, DEFAULT_SYNONYMS, LabelTable, SynonymTable
from ..config.models import ExtractionStrategy, ScrapeConfig
from .base import ExtractionError, Notice, NoticeExtractor
from .cells import CellWalkExtractor
from .labels import LabelProbeExtractor
from .markup import MarkupExtractor, MarkupPatternTable, build_markup_patterns

logger = logging.getLogger(__name__)


def build_extractor(
    strategy: ExtractionStrategy | str,
    *,
    lang: str = "",
    scrape: ScrapeConfig | None = None,
    label_table: LabelTable = DEFAULT_LABEL_TABLE,
    synonyms: SynonymTable = DEFAULT_SYNONYMS,
    patterns: MarkupPatternTable | None = None,
) -> NoticeExtractor[Any]:
    """Create the extractor for a strategy.

    Args:
        strategy: Strategy name or enum
        lang: Detected page language (label-probe and markup strategies)
        scrape: Scrape settings supplying selectors (defaults if None)
        label_table: Label spellings for the label-probe and markup strategies
        synonyms: Synonym table for the cell-walk strategy
        patterns: Pattern table for the markup strategy (derived from
            label_table when None)

    Returns:
        Configured extractor
    """
    strategy = ExtractionStrategy(strategy)
    scrape = scrape or ScrapeConfig()

    if strategy is ExtractionStrategy.LABELS:
        return LabelProbeExtractor(
            lang,
            table=label_table,
            selector_template=scrape.label_selector_template,
            title_selector=scrape.title_selector,
            fall_through_empty=scrape.fall_through_empty,
        )
    if strategy is ExtractionStrategy.CELLS:
        return CellWalkExtractor(
            synonyms=synonyms,
            cell_selector=scrape.cell_selector,
            title_selector=scrape.title_selector,
        )
    if patterns is None:
        patterns = build_markup_patterns(lang, label_table)
    return MarkupExtractor(patterns, fall_through_empty=scrape.fall_through_empty)


def _item_markup(item: Any) -> str:
    if isinstance(item, str):
        return item
    return item.inner_html()


def extract_notices(
    items: Iterable[Any],
    extractor: NoticeExtractor[Any],
    *,
    show_html: bool = False,
) -> list[Notice]:
    """Extract one notice per item, preserving item order.

    Args:
        items: Item handles or markup fragments
        extractor: Strategy to apply
        show_html: Log each item's markup before parsing

    Returns:
        Notices in item order

    Raises:
        ExtractionError: If items cannot be enumerated or an item
            cannot be queried; no partial results are returned
    """
    try:
        item_list = list(items)
    except ExtractionError:
        raise
    except Exception as e:
        raise ExtractionError(f"Cannot enumerate items: {e}", cause=e) from e

    notices: list[Notice] = []
    for index, item in enumerate(item_list):
        if show_html:
            try:
                logger.info(f"ITEM HTML:\n{_item_markup(item).strip()}")
            except Exception as e:
                logger.warning(f"Failed to get item HTML: {e}")

        try:
            notices.append(extractor.extract(item))
        except ExtractionError as e:
            if e.item_index is None:
                e.item_index = index
            logger.error(f"Item {index}: {e}")
            raise

    logger.info(f"Extracted {len(notices)} notices with {extractor.name} strategy")
    return notices
