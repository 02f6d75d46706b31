"""Tests for the dictionary cell walker."""

import logging

import pytest

from armpwatch.core.config.labels import SynonymTable
from armpwatch.core.extract import CellWalkExtractor, ExtractionError, Notice

from conftest import ExplodingHandle


def cells_item(*texts: str, title: str | None = None) -> str:
    cells = "".join(f'<div class="d-table-cell">{text}</div>' for text in texts)
    strong = f"<strong>{title}</strong>" if title is not None else ""
    return f'<li class="list-group-item">{strong}{cells}</li>'


class TestCellWalkExtractor:
    """Tests for CellWalkExtractor."""

    def test_cells_scenario(self, make_item):
        item = make_item(cells_item("MO/AC:", "City Council", "Type:", "Works"))
        assert CellWalkExtractor().extract(item) == Notice(authority="City Council", type="Works")

    def test_french_item(self, french_item):
        notice = CellWalkExtractor().extract(french_item)

        assert notice.number_title == "AON N°012/2025/MINTP Construction d'un pont"
        assert notice.authority == "Ministère des Travaux Publics"
        assert notice.region == "Centre"
        assert notice.amount == "150 000 000 FCFA"
        assert notice.published_on == "01/03/2025"
        assert notice.closing_date == "15/03/2025"
        assert notice.closing_time == "10:00"

    def test_first_occurrence_wins(self, english_item):
        # PO/CA precedes MO/AC in the English item
        notice = CellWalkExtractor().extract(english_item)
        assert notice.authority == "City Council of Douala"

    def test_never_overwrites(self, make_item):
        item = make_item(cells_item("Type:", "Works", "TYPE :", "Supplies", "Région:", "Centre", "Region", "Littoral"))
        notice = CellWalkExtractor().extract(item)
        assert notice.type == "Works"
        assert notice.region == "Centre"

    def test_empty_value_does_not_block_later_label(self, make_item):
        item = make_item(cells_item("Type:", "  ", "Type:", "Works"))
        assert CellWalkExtractor().extract(item).type == "Works"

    def test_unrecognized_labels_ignored(self, make_item):
        item = make_item(cells_item("Financing Type:", "Budget", "Référence:", "X-1", title="Avis"))
        assert CellWalkExtractor().extract(item) == Notice(number_title="Avis")

    def test_odd_cell_count(self, make_item, caplog):
        item = make_item(cells_item("Type:", "Works", "Amount:"))
        with caplog.at_level(logging.WARNING, logger="armpwatch"):
            notice = CellWalkExtractor().extract(item)
        assert notice.type == "Works"
        assert notice.amount == ""
        assert "Odd number of cells" in caplog.text

    def test_no_cells(self, make_item):
        item = make_item(cells_item(title="Avis général"))
        assert CellWalkExtractor().extract(item) == Notice(number_title="Avis général")

    def test_values_are_trimmed(self, make_item):
        item = make_item(cells_item(" Montant : ", "\n 1 000 FCFA \n"))
        assert CellWalkExtractor().extract(item).amount == "1 000 FCFA"

    def test_unqueryable_item_raises(self):
        with pytest.raises(ExtractionError):
            CellWalkExtractor().extract(ExplodingHandle())

    def test_custom_synonyms(self, make_item):
        synonyms = SynonymTable({"Nature": "type"})
        item = make_item(cells_item("NATURE:", "Works", "Type:", "Supplies"))
        assert CellWalkExtractor(synonyms=synonyms).extract(item).type == "Works"

    def test_rejects_unknown_fields(self):
        with pytest.raises(ValueError, match="unknown fields"):
            CellWalkExtractor(synonyms=SynonymTable({"Délai": "deadline"}))


def test_walk_cells_skips_unreadable_pair(make_item):
    good = make_item(cells_item("Type:", "Works")).query_selector_all("div.d-table-cell")
    cells = [ExplodingHandle(), ExplodingHandle(), *good]
    assert CellWalkExtractor().walk_cells(cells) == {"type": "Works"}
