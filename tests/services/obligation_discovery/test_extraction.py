"""
Tests for Result Extraction
===========================

Extraction is pinned to recorded ABLIS markup, never the live site.

Level inference is a keyword heuristic: the cases below document what it
does, and a misfiled title is an accepted limitation rather than a bug.

Version: 0.1.0
"""

import re

import pytest

from services.obligation_discovery.extraction import (
    ExtractionRules,
    ResultExtractor,
    clean_text,
    first_match,
    infer_level,
)


@pytest.fixture
def extractor() -> ResultExtractor:
    return ResultExtractor()


# ============================================================================
# Helpers
# ============================================================================


class TestCleanText:
    """Tests for clean_text."""

    def test_strips_tags_and_collapses_whitespace(self) -> None:
        assert clean_text("<b>Food</b>\n   <i>permit</i> ") == "Food permit"

    def test_decodes_entities(self) -> None:
        assert clean_text("Caf&eacute; &amp; Bar") == "Café & Bar"

    @pytest.mark.parametrize("value", [None, "", "   ", "<br/>"])
    def test_empty_becomes_none(self, value: str | None) -> None:
        assert clean_text(value) is None


class TestFirstMatch:
    """Tests for the first-success pattern combinator."""

    def test_earlier_pattern_wins(self) -> None:
        patterns = (re.compile(r"<h3>(.*?)</h3>"), re.compile(r"<h2>(.*?)</h2>"))
        assert first_match(patterns, "<h2>second</h2><h3>first</h3>") == "first"

    def test_falls_through_to_later_pattern(self) -> None:
        patterns = (re.compile(r"<h3>(.*?)</h3>"), re.compile(r"<h2>(.*?)</h2>"))
        assert first_match(patterns, "<h2>only</h2>") == "only"

    def test_no_match(self) -> None:
        assert first_match((re.compile(r"<h3>(.*?)</h3>"),), "<p>none</p>") is None


class TestInferLevel:
    """Tests for the level heuristic."""

    @pytest.mark.parametrize(
        "regulator",
        ["Yarra City Council", "Shire of Broome", "City of Melbourne"],
    )
    def test_council_regulator_is_local(self, regulator: str) -> None:
        assert infer_level(regulator, "Food premises registration") == "local"

    def test_state_title(self) -> None:
        assert infer_level("Some Authority", "State planning permit") == "state"

    def test_federal_title(self) -> None:
        assert infer_level(None, "Commonwealth export licence") == "federal"
        assert infer_level(None, "Federal import permit") == "federal"

    def test_regulator_takes_precedence_over_title(self) -> None:
        assert infer_level("Darebin City Council", "State road works permit") == "local"

    def test_no_keywords(self) -> None:
        assert infer_level("Acme Regulator", "Food business registration") is None

    def test_loose_use_of_state_lands_in_state(self) -> None:
        """'Statement' contains 'state'; accepted heuristic misclassification."""
        assert infer_level(None, "Environmental statement lodgement") == "state"


# ============================================================================
# Extraction
# ============================================================================


class TestResultExtractor:
    """Tests for ResultExtractor.extract."""

    def test_single_card_with_relative_link(self, extractor: ResultExtractor) -> None:
        markup = (
            "<h3>Food business registration</h3>"
            '<span class="regulator">Acme Regulator</span>'
            '<a href="/x">Details</a>'
        )

        records = extractor.extract(markup, "Café / Restaurant", "3066")

        assert len(records) == 1
        record = records[0]
        assert record.obligation == "Food business registration"
        assert record.regulator == "Acme Regulator"
        assert record.source_url == "https://ablis.business.gov.au/x"
        assert record.level is None
        assert record.activity == "Café / Restaurant"
        assert record.postcode == "3066"

    def test_recorded_results_page(self, extractor: ResultExtractor, sample_results_html: str) -> None:
        records = extractor.extract(sample_results_html, "Café / Restaurant", "3066")

        assert [r.obligation for r in records] == [
            "Food Act registration – Class 2",
            "Liquor licence",
            "Australian Business Number (ABN)",
        ]
        food, liquor, abn = records

        assert food.regulator == "City of Yarra"
        assert food.level == "local"
        assert food.source_url == (
            "https://ablis.business.gov.au/licence/food-act-registration-class-2"
        )

        assert liquor.regulator == "Liquor Control Victoria"
        assert liquor.level == "State"

        assert abn.regulator == "Australian Taxation Office"
        assert abn.level == "Commonwealth"
        assert abn.source_url == "https://www.ato.gov.au/business/registration/abn"

    def test_page_chrome_before_first_card_is_ignored(
        self, extractor: ResultExtractor, sample_results_html: str
    ) -> None:
        records = extractor.extract(sample_results_html, "Café / Restaurant", "3066")
        urls = {r.source_url for r in records}

        assert "https://ablis.business.gov.au/help" not in urls
        assert "https://ablis.business.gov.au/" not in urls

    def test_h3_preferred_over_h2(self, extractor: ResultExtractor) -> None:
        markup = "<article><h2>Section heading</h2><h3>Trade waste permit</h3></article>"
        records = extractor.extract(markup, "a", "3000")
        assert records[0].obligation == "Trade waste permit"

    def test_title_link_used_when_no_heading(self, extractor: ResultExtractor) -> None:
        markup = '<article><a class="result-title" href="/p/1">Signage permit</a></article>'
        records = extractor.extract(markup, "a", "3000")

        assert records[0].obligation == "Signage permit"
        assert records[0].source_url == "https://ablis.business.gov.au/p/1"

    def test_explicit_level_label_beats_inference(self, extractor: ResultExtractor) -> None:
        markup = (
            '<div class="result-card"><h3>Footpath trading permit</h3>'
            '<span class="agency">Yarra City Council</span>'
            '<span class="level">Local Government</span></div>'
        )
        records = extractor.extract(markup, "a", "3066")
        assert records[0].level == "Local Government"

    def test_segments_without_content_are_discarded(self, extractor: ResultExtractor) -> None:
        markup = (
            "<article><p>Sponsored</p></article>"
            "<article><h3>Business name registration</h3></article>"
        )
        records = extractor.extract(markup, "a", "3000")

        assert len(records) == 1
        assert records[0].obligation == "Business name registration"

    @pytest.mark.parametrize(
        "card",
        [
            "<article><h3> </h3></article>",
            "<article><h3><span></span></h3><span class=\"agency\">&nbsp;</span></article>",
        ],
    )
    def test_blank_captures_are_discarded(self, extractor: ResultExtractor, card: str) -> None:
        markup = card + "<article><h3>Food business registration</h3></article>"
        records = extractor.extract(markup, "a", "3000")

        assert [r.obligation for r in records] == ["Food business registration"]

    def test_card_without_link_falls_back_to_home(self, extractor: ResultExtractor) -> None:
        markup = '<article><h3>Noise permit</h3><span class="provider">EPA Victoria</span></article>'
        records = extractor.extract(markup, "a", "3000")
        assert records[0].source_url == "https://ablis.business.gov.au/"

    def test_href_entities_decoded(self, extractor: ResultExtractor) -> None:
        markup = '<article><h3>Permit</h3><a href="/search?a=1&amp;b=2">more</a></article>'
        records = extractor.extract(markup, "a", "3000")
        assert records[0].source_url == "https://ablis.business.gov.au/search?a=1&b=2"

    def test_duplicate_cards_collapse(self, extractor: ResultExtractor) -> None:
        card = '<article><h3>Permit</h3><a href="/p">x</a></article>'
        records = extractor.extract(card * 3, "a", "3000")
        assert len(records) == 1

    def test_empty_markup(self, extractor: ResultExtractor) -> None:
        assert extractor.extract("", "a", "3000") == []

    def test_custom_rules(self) -> None:
        rules = ExtractionRules(
            card_markers=('<div class="obligation"',),
            origin="https://example.gov.au",
        )
        markup = (
            "<h3>Page heading</h3>"
            '<div class="obligation"><h3>Permit A</h3><a href="/a">a</a></div>'
            '<div class="obligation"><h3>Permit B</h3><a href="/b">b</a></div>'
        )

        records = ResultExtractor(rules).extract(markup, "a", "3000")

        assert [r.obligation for r in records] == ["Permit A", "Permit B"]
        assert records[0].source_url == "https://example.gov.au/a"
