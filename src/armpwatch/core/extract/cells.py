"""
Single-pass label/value cell extraction.

Walks an item's alternating label and value cells once, mapping each
normalized label through a synonym table.
"""

from __future__ import annotations

import logging

from ..config.labels import DEFAULT_SYNONYMS, SynonymTable
from .base import NOTICE_FIELDS, ExtractionError, ItemHandle, Notice, NoticeExtractor
from .labels import handle_text

logger = logging.getLogger(__name__)


class CellWalkExtractor(NoticeExtractor[ItemHandle]):
    """Extract notices from flat label/value cell sequences.

    Labels sit at even positions and values at the following odd
    position. The first occurrence of a recognized label wins; an
    unpaired trailing cell is ignored.
    """

    def __init__(
        self,
        *,
        synonyms: SynonymTable = DEFAULT_SYNONYMS,
        cell_selector: str = "div.d-table-cell",
        title_selector: str = "strong",
    ) -> None:
        unknown = synonyms.field_names - set(NOTICE_FIELDS)
        if unknown:
            raise ValueError(f"Synonyms map to unknown fields: {', '.join(sorted(unknown))}")
        self.synonyms = synonyms
        self.cell_selector = cell_selector
        self.title_selector = title_selector

    @property
    def name(self) -> str:
        return "cells"

    def extract(self, item: ItemHandle) -> Notice:
        try:
            title = handle_text(item.query_selector(self.title_selector))
            cells = item.query_selector_all(self.cell_selector)
        except Exception as e:
            raise ExtractionError(f"Cannot query item: {e}", cause=e) from e

        values = {"number_title": title}
        values.update(self.walk_cells(cells))
        return Notice(**values)

    def walk_cells(self, cells: list[ItemHandle]) -> dict[str, str]:
        """Map label/value cell pairs to fields.

        Args:
            cells: Cells in document order

        Returns:
            Field values for recognized labels
        """
        if len(cells) % 2:
            logger.warning(f"Odd number of cells ({len(cells)}); ignoring trailing cell")

        values: dict[str, str] = {}
        for index in range(0, len(cells) - 1, 2):
            try:
                raw_label = cells[index].text_content()
                raw_value = cells[index + 1].text_content()
            except Exception as e:
                logger.debug(f"Cannot read cell pair at {index}: {e}")
                continue

            field_name = self.synonyms.lookup(raw_label)
            if field_name is None:
                logger.debug(f"Unrecognized label {raw_label!r}")
                continue
            if values.get(field_name):
                continue
            values[field_name] = (raw_value or "").strip()
        return values
