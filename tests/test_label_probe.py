"""Tests for the ordered label-probe extractor."""

import pytest

from armpwatch.core.backends.lxml_dom import LxmlDocument
from armpwatch.core.config.labels import FieldLabels, LabelTable
from armpwatch.core.extract import ExtractionError, LabelProbeExtractor, Notice, detect_page_language

from conftest import ExplodingHandle, FlakyHandle, page, row


def item_markup(*rows: str, title: str = "AON 001/2025") -> str:
    return (
        f'<li class="list-group-item"><strong>{title}</strong>'
        f'<div class="d-table">{"".join(rows)}</div></li>'
    )


class TestDetectPageLanguage:
    """Tests for detect_page_language."""

    def test_reads_root_lang(self):
        document = LxmlDocument.from_html(page(" FR-cm ", ""))
        assert detect_page_language(document) == "fr-cm"

    def test_missing_attribute(self):
        document = LxmlDocument.from_html(page(None, ""))
        assert detect_page_language(document) == ""

    def test_lookup_failure_is_empty(self):
        assert detect_page_language(ExplodingHandle()) == ""


class TestLabelProbeExtractor:
    """Tests for LabelProbeExtractor."""

    def test_french_item_on_french_page(self, french_item):
        notice = LabelProbeExtractor("fr-FR").extract(french_item)

        assert notice == Notice(
            number_title="AON N°012/2025/MINTP Construction d'un pont",
            type="Travaux",
            authority="Ministère des Travaux Publics",
            region="Centre",
            amount="150 000 000 FCFA",
            published_on="01/03/2025",
            closing_date="15/03/2025",
            closing_time="10:00",
        )

    def test_english_item_on_english_page(self, english_item):
        notice = LabelProbeExtractor("en").extract(english_item)

        assert notice.number_title == "NOI No. 45/2025 Supply of laptops"
        assert notice.authority == "City Council of Douala"
        assert notice.type == "Supplies"
        assert notice.region == "Littoral"
        assert notice.amount == "25 000 000 FCFA"
        assert notice.published_on == "02/03/2025"
        assert notice.closing_date == "15/03/2025"
        assert notice.closing_time == "12:00"
        # Markup-only fields are never probed
        assert notice.country == ""
        assert notice.funding == ""

    def test_authority_follows_page_language(self, english_item):
        assert LabelProbeExtractor("fr").extract(english_item).authority == "Communauté Urbaine de Douala"
        assert LabelProbeExtractor("en").extract(english_item).authority == "City Council of Douala"
        assert LabelProbeExtractor("").extract(english_item).authority == "City Council of Douala"

    def test_other_language_labels_still_found(self, make_item):
        item = make_item(item_markup(row("PO/CA:", "Port Authority"), row("Closing date:", "01/04/2025")))
        notice = LabelProbeExtractor("fr").extract(item)
        assert notice.authority == "Port Authority"
        assert notice.closing_date == "01/04/2025"

    def test_cells_scenario(self, make_item):
        item = make_item(item_markup(row("MO/AC:", "City Council"), row("Type:", "Works"), title=""))
        notice = LabelProbeExtractor("fr").extract(item)
        assert notice == Notice(authority="City Council", type="Works")

    def test_no_recognizable_labels(self, make_item):
        item = make_item(item_markup(row("Référence:", "X-12"), title="Avis rectificatif"))
        assert LabelProbeExtractor("fr").extract(item) == Notice(number_title="Avis rectificatif")

    def test_no_bold_title(self, make_item):
        item = make_item('<li class="list-group-item">' + row("Type:", "Works") + "</li>")
        notice = LabelProbeExtractor("en").extract(item)
        assert notice.number_title == ""
        assert notice.type == "Works"

    def test_values_are_trimmed(self, make_item):
        item = make_item(item_markup(row("Type:", "\n   Works \n")))
        assert LabelProbeExtractor("en").extract(item).type == "Works"

    def test_type_label_is_exact(self, make_item):
        item = make_item(item_markup(row("Financing Type:", "Budget")))
        assert LabelProbeExtractor("en").extract(item).type == ""

    def test_empty_match_stops_search(self, make_item):
        item = make_item(item_markup(row("MO/AC:", "   "), row("PO/CA:", "Fallback Authority")))
        assert LabelProbeExtractor("fr").extract(item).authority == ""

    def test_empty_match_can_fall_through(self, make_item):
        item = make_item(item_markup(row("MO/AC:", "   "), row("PO/CA:", "Fallback Authority")))
        extractor = LabelProbeExtractor("fr", fall_through_empty=True)
        assert extractor.extract(item).authority == "Fallback Authority"

    def test_lookup_error_is_a_miss(self, english_item):
        flaky = FlakyHandle(english_item, "PO/CA")
        notice = LabelProbeExtractor("en").extract(flaky)

        assert notice.authority == "Communauté Urbaine de Douala"
        assert notice.type == "Supplies"
        assert any("PO/CA" in query for query in flaky.queries)

    def test_unqueryable_item_raises(self):
        with pytest.raises(ExtractionError):
            LabelProbeExtractor("fr").extract(ExplodingHandle())

    def test_lookup_is_scoped_to_item(self):
        document = LxmlDocument.from_html(page("fr", item_markup(row("Type:", "Works")), item_markup()))
        second = document.query_selector_all("li.list-group-item")[1]
        assert LabelProbeExtractor("fr").extract(second).type == ""

    def test_custom_table_and_template(self, make_item):
        table = LabelTable((FieldLabels("type", ("Nature:",), ("Kind:",)),))
        item = make_item(item_markup(row("Kind:", "Works")))
        extractor = LabelProbeExtractor(
            "en",
            table=table,
            selector_template='div.d-table-cell:text-is("{label}") + div.d-table-cell',
        )
        notice = extractor.extract(item)
        assert notice.type == "Works"
        assert notice.authority == ""

    def test_rejects_unknown_fields(self):
        table = LabelTable((FieldLabels("deadline", ("Délai:",), ("Deadline:",)),))
        with pytest.raises(ValueError, match="unknown fields"):
            LabelProbeExtractor("fr", table=table)

    def test_selector_quotes_label(self):
        extractor = LabelProbeExtractor("en")
        assert extractor.selector_for(' Say "hi" ') == 'div:text-is("Say \\"hi\\"") + div'
