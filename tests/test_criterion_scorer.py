"""Tests for single-criterion scoring: select matching, numeric ranges, leniency."""

import pytest

from media_matrix.schemas.catalog import Criterion
from media_matrix.scorers.criterion_scorer import score_criterion

# ─── Helpers ──────────────────────────────────────────────────────────────────

MALFORMED_INPUTS = [
    None,
    "",
    "   ",
    [],
    "abc",
    "12,5,3",
    "1e400",
    "nan",
    "-5",
    "999999999999",
    ["a", "b"],
    12.5,
    0,
    -1,
    float("inf"),
    "R$ 20",
    10**400,
    [1, 2],
    {"a": 1},
]


# ─── Select criteria ──────────────────────────────────────────────────────────


class TestSelectCriteria:
    """Categorical matching on option value."""

    def test_match(self, catalog):
        entry = score_criterion(catalog.get("privileged_visibility"), "premium")
        assert entry.score == 3
        assert entry.matched_label == "Premium placement (home/top)"

    def test_no_match_is_na(self, catalog):
        entry = score_criterion(catalog.get("privileged_visibility"), "gigantic")
        assert (entry.score, entry.matched_label) == (0, "N/A")

    def test_numeric_answer_matches_text_value(self, catalog):
        """Forms may send 2 or 2.0 for the "2" option."""
        assert score_criterion(catalog.get("portal_formats"), 2).score == 2
        assert score_criterion(catalog.get("portal_formats"), 2.0).score == 2

    def test_surrounding_whitespace_ignored(self, catalog):
        assert score_criterion(catalog.get("branded_content_text"), " sim ").score == 3

    def test_crossposting_caps_at_three(self, catalog):
        assert score_criterion(catalog.get("crossposting"), "4").score == 3


# ─── Numeric criteria ─────────────────────────────────────────────────────────


class TestNumericCriteria:
    """First containing range wins; the label echoes the raw answer."""

    def test_cpm_in_lowest_bucket(self, catalog):
        entry = score_criterion(catalog.get("cpm"), "12.5")
        assert entry.score == 3
        assert entry.matched_label == "12.5"

    def test_bucket_boundaries_are_inclusive(self, catalog):
        cpm = catalog.get("cpm")
        assert score_criterion(cpm, "20").score == 3
        assert score_criterion(cpm, "20.01").score == 2
        assert score_criterion(cpm, "40").score == 2
        assert score_criterion(cpm, "60.01").score == 0

    def test_decimal_comma(self, catalog):
        assert score_criterion(catalog.get("cpm"), "18,50").score == 3

    def test_values_round_to_cents_before_matching(self, catalog):
        """20.004 sits in the authored 20 / 20.01 seam; it rounds into the first bucket."""
        assert score_criterion(catalog.get("cpm"), 20.004).score == 3
        assert score_criterion(catalog.get("cpm"), 20.006).score == 2

    def test_percentage_seam(self, catalog):
        reach = catalog.get("avg_reach")
        assert score_criterion(reach, 17.5).score == 2
        assert score_criterion(reach, 9.996).score == 2
        assert score_criterion(reach, "20%").score == 3

    def test_count_with_thousands_separator(self, catalog):
        entry = score_criterion(catalog.get("portal_audience"), "250.000")
        assert entry.score == 2
        assert entry.matched_label == "250.000"

    def test_open_ended_top_range(self, catalog):
        assert score_criterion(catalog.get("portal_audience"), "5.000.000").score == 3

    def test_float_label_is_rounded(self, catalog):
        entry = score_criterion(catalog.get("avg_reach"), 17.5046)
        assert entry.matched_label == "17.5"

    def test_integral_float_label(self, catalog):
        assert score_criterion(catalog.get("social_followers"), 4000.0).matched_label == "4000"

    def test_out_of_range_keeps_raw_label(self, catalog):
        entry = score_criterion(catalog.get("cpm"), "-3")
        assert entry.score == 0
        assert entry.matched_label == "-3"

    def test_unparseable_is_na(self, catalog):
        entry = score_criterion(catalog.get("cpm"), "cheap")
        assert (entry.score, entry.matched_label) == (0, "N/A")

    def test_list_answer_is_na(self, catalog):
        assert score_criterion(catalog.get("cpm"), ["10"]).matched_label == "N/A"


# ─── Exclusion and empties ────────────────────────────────────────────────────


class TestExclusionAndMissing:
    """Flags and blanks short-circuit matching."""

    def test_excluded_ignores_value(self, catalog):
        entry = score_criterion(catalog.get("cpm"), "12.5", excluded=True)
        assert (entry.score, entry.matched_label) == (0, "not considered")

    def test_excluded_without_value(self, catalog):
        assert score_criterion(catalog.get("cpm"), None, excluded=True).matched_label == "not considered"

    @pytest.mark.parametrize("raw", [None, "", "  ", []])
    def test_blank_is_na(self, catalog, raw):
        entry = score_criterion(catalog.get("privileged_visibility"), raw)
        assert (entry.score, entry.matched_label) == (0, "N/A")


# ─── Boundedness ──────────────────────────────────────────────────────────────


class TestBoundedness:
    """Every criterion, every input: score stays in [0, 3] and nothing raises."""

    @pytest.mark.parametrize("raw", MALFORMED_INPUTS)
    def test_all_criteria_bounded(self, catalog, raw):
        for criterion in catalog:
            entry = score_criterion(criterion, raw)
            assert 0 <= entry.score <= 3
            assert isinstance(entry.matched_label, str)

    def test_every_option_value_scores_its_option(self, catalog):
        for criterion in catalog:
            for option in criterion.options:
                if option.value is not None:
                    assert score_criterion(criterion, option.value).score == option.score

    def test_custom_criterion_without_unit(self):
        criterion = Criterion(
            id="ratio",
            label="Ratio",
            input_kind="numeric",
            options=[{"label": "low", "max": 0.5, "score": 1}, {"label": "high", "min": 0.51, "score": 3}],
        )
        assert score_criterion(criterion, "-10").score == 1
        assert score_criterion(criterion, "0.75").score == 3
