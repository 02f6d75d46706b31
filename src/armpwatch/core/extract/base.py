"""
Extraction base classes and data structures.

Defines the Notice record and the interface shared by all
extraction strategies.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, fields
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable


@dataclass(frozen=True)
class Notice:
    """One public-tender announcement.

    Every field is plain text as rendered on the page. An empty string
    means the field was not found; fields are never None.
    """

    number_title: str = ""
    type: str = ""
    authority: str = ""  # "MO/AC" on French pages, "PO/CA" on English pages
    region: str = ""
    country: str = ""
    amount: str = ""
    funding: str = ""
    published_on: str = ""
    closing_date: str = ""
    closing_time: str = ""

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary in field declaration order."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Notice":
        """Build a notice from a mapping.

        Missing keys and None become empty strings; unknown keys are
        ignored.
        """
        values: dict[str, str] = {}
        for name in NOTICE_FIELDS:
            value = data.get(name)
            values[name] = "" if value is None else str(value)
        return cls(**values)

    @property
    def is_empty(self) -> bool:
        return not any(getattr(self, name) for name in NOTICE_FIELDS)


NOTICE_FIELDS: tuple[str, ...] = tuple(f.name for f in fields(Notice))


@runtime_checkable
class ItemHandle(Protocol):
    """Queryable handle on one list item in a rendered page.

    Matches the element handle API of Playwright's sync client, so
    live handles can be passed straight through.
    """

    def query_selector(self, selector: str) -> "ItemHandle | None": ...

    def query_selector_all(self, selector: str) -> list["ItemHandle"]: ...

    def text_content(self) -> str | None: ...

    def inner_html(self) -> str: ...


class ExtractionError(Exception):
    """Structural failure: items cannot be enumerated or queried.

    Aborts the whole extraction run. Missing fields never raise.
    """

    def __init__(
        self,
        message: str,
        item_index: int | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.item_index = item_index
        self.cause = cause


ItemT = TypeVar("ItemT")


class NoticeExtractor(ABC, Generic[ItemT]):
    """Abstract base class for notice extraction strategies."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Extractor identifier."""
        pass

    @property
    def needs_dom(self) -> bool:
        """Whether items must be queryable handles rather than markup."""
        return True

    @abstractmethod
    def extract(self, item: ItemT) -> Notice:
        """Extract one notice from one item.

        Args:
            item: Item handle or markup fragment

        Returns:
            Notice with empty strings for fields that were not found

        Raises:
            ExtractionError: If the item cannot be queried at all
        """
        pass
