"""
Bilingual label tables for notice extraction.

This module provides, per notice field, the label spellings rendered
by the ARMP portal in French and in English. The ordered-probe
extractor consumes them as priority lists (page language first); the
cell walker consumes the derived synonym table keyed by normalized
label text.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from collections.abc import Iterable, Iterator, Mapping

from ..normalize.labels import is_french, normalize_label


def spellings(*bases: str) -> tuple[str, ...]:
    """Expand base labels into their rendered spellings.

    Each base yields the bare form, the trailing-colon form and the
    French typographic form with a space before the colon.

    Args:
        bases: Label texts without trailing punctuation

    Returns:
        Tuple of spellings, grouped by base in the given order
    """
    variants: list[str] = []
    for base in bases:
        variants.extend((base, f"{base}:", f"{base} :"))
    return tuple(variants)


@dataclass(frozen=True)
class FieldLabels:
    """French and English label spellings for one notice field."""

    field: str
    french: tuple[str, ...]
    english: tuple[str, ...]

    def ordered(self, french_first: bool) -> tuple[str, ...]:
        """Return all spellings, native language first."""
        if french_first:
            return self.french + self.english
        return self.english + self.french

    def __iter__(self) -> Iterator[str]:
        return iter(self.french + self.english)


# =============================================================================
# Default label tables
# =============================================================================

DEFAULT_FIELD_LABELS: tuple[FieldLabels, ...] = (
    # MO/AC (maître d'ouvrage / autorité contractante) and PO/CA (project
    # owner / contracting authority) name the same field.
    FieldLabels("authority", ("MO/AC:",), ("PO/CA:",)),
    FieldLabels("type", spellings("Type"), spellings("Type")),
    FieldLabels("region", spellings("Région", "Region"), spellings("Region")),
    FieldLabels("amount", spellings("Montant"), spellings("Amount")),
    FieldLabels("published_on", spellings("Publié le", "Publie le"), spellings("Published on", "Published")),
    FieldLabels("closing_date", spellings("Date de clôture", "Date de cloture"), spellings("Closing date")),
    FieldLabels("closing_time", spellings("Heure de clôture", "Heure de cloture"), spellings("Closing time")),
)


@dataclass(frozen=True)
class LabelTable:
    """Immutable set of per-field label spellings."""

    fields: tuple[FieldLabels, ...] = DEFAULT_FIELD_LABELS

    def __post_init__(self) -> None:
        names = [entry.field for entry in self.fields]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate label table fields: {', '.join(duplicates)}")

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(entry.field for entry in self.fields)

    def get(self, field_name: str) -> FieldLabels | None:
        for entry in self.fields:
            if entry.field == field_name:
                return entry
        return None

    def variants_for(self, lang: str | None) -> Mapping[str, tuple[str, ...]]:
        """Build ordered label variants for a page language.

        French pages probe French spellings first; every other tag,
        including an empty one, probes English first. Both languages
        are always present.

        Args:
            lang: Page language tag (e.g. ``"fr"``, ``"en-US"``, ``""``)

        Returns:
            Read-only mapping of field name to ordered spellings
        """
        french_first = is_french(lang)
        return MappingProxyType(
            {entry.field: entry.ordered(french_first) for entry in self.fields}
        )


DEFAULT_LABEL_TABLE = LabelTable()


def build_label_variants(
    lang: str | None,
    table: LabelTable = DEFAULT_LABEL_TABLE,
) -> Mapping[str, tuple[str, ...]]:
    """Get ordered label variants per field for a page language."""
    return table.variants_for(lang)


# =============================================================================
# Synonym dictionary
# =============================================================================


class SynonymTable(Mapping[str, str]):
    """Read-only mapping of normalized label text to field name."""

    def __init__(self, entries: Mapping[str, str] | Iterable[tuple[str, str]]) -> None:
        items = entries.items() if isinstance(entries, Mapping) else entries
        mapping: dict[str, str] = {}
        for label, field_name in items:
            key = normalize_label(label)
            if not key:
                continue
            existing = mapping.get(key)
            if existing is not None and existing != field_name:
                raise ValueError(
                    f"Label {label!r} maps to both {existing!r} and {field_name!r}"
                )
            mapping[key] = field_name
        self._mapping = MappingProxyType(mapping)

    @classmethod
    def from_label_table(cls, table: LabelTable) -> "SynonymTable":
        """Derive synonyms from every spelling in a label table."""
        return cls((label, entry.field) for entry in table.fields for label in entry)

    def lookup(self, raw_label: str | None) -> str | None:
        """Find the field for a raw, un-normalized label."""
        return self._mapping.get(normalize_label(raw_label))

    @property
    def field_names(self) -> frozenset[str]:
        return frozenset(self._mapping.values())

    def __getitem__(self, key: str) -> str:
        return self._mapping[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._mapping)

    def __len__(self) -> int:
        return len(self._mapping)

    def __repr__(self) -> str:
        return f"SynonymTable({dict(self._mapping)!r})"


DEFAULT_SYNONYMS = SynonymTable.from_label_table(DEFAULT_LABEL_TABLE)
