"""Tests for the weight registry: table loading and weight resolution."""

import random

import pytest

from media_matrix.errors import ConfigurationError
from media_matrix.schemas.enums import ProposalCategory
from media_matrix.scorers.criteria_catalog import get_catalog
from media_matrix.scorers.weight_registry import (
    WeightTable,
    clear_cache,
    get_weight_table,
    get_weight_tables,
    load_weight_tables,
    resolve_weights,
)

# ─── Helpers ──────────────────────────────────────────────────────────────────


def _tables(weights: dict, category=ProposalCategory.PORTAL_BLOG) -> dict:
    """Injected single-category tables."""
    return {category: WeightTable(category=category, weights=weights)}


def _applicable_ids(category) -> list[str]:
    return [c.id for c in get_catalog().applicable_criteria(category)]


def _random_subsets(ids: list[str], seed: int, count: int = 40):
    rng = random.Random(seed)
    for _ in range(count):
        size = rng.randint(1, len(ids))
        yield rng.sample(ids, size)


VALID_YAML = """
categories:
  portal_blog:
    weights: {cpm: 1.0}
  portal_social:
    weights: {avg_reach: 1.0}
  tv_bundle:
    weights: {tv_daypart: 1.0}
  youtube_bundle:
    weights: {youtube_views: 1.0}
"""


# ─── Bundled tables ───────────────────────────────────────────────────────────


class TestBundledTables:
    """Shipped weight tables."""

    def setup_method(self):
        clear_cache()

    @pytest.mark.parametrize("category", list(ProposalCategory))
    def test_every_category_has_a_table(self, category):
        table = get_weight_table(category)
        assert table.category == category
        assert table.title

    @pytest.mark.parametrize("category", list(ProposalCategory))
    def test_tables_sum_to_one(self, category):
        assert get_weight_table(category).total == pytest.approx(1.0, abs=1e-9)

    @pytest.mark.parametrize("category", list(ProposalCategory))
    def test_tables_cover_all_applicable_criteria(self, category):
        """No applicable criterion is left to share an empty remainder."""
        table = get_weight_table(category)
        assert set(_applicable_ids(category)) == set(table.weights)

    def test_tables_are_cached(self):
        assert get_weight_tables() is get_weight_tables()

    def test_clear_cache_reloads(self):
        first = get_weight_tables()
        clear_cache()
        assert get_weight_tables() is not first

    def test_tables_are_read_only(self):
        table = get_weight_table(ProposalCategory.PORTAL_BLOG)
        with pytest.raises(TypeError):
            table.weights["cpm"] = 0.5

    def test_category_accepts_display_label(self):
        table = get_weight_table("Portal/Blog")
        assert table.category == ProposalCategory.PORTAL_BLOG


# ─── Loading and validation ───────────────────────────────────────────────────


class TestLoadWeightTables:
    """YAML loading with load-time validation."""

    def test_loads_valid_file(self, tmp_path):
        path = tmp_path / "weights.yaml"
        path.write_text(VALID_YAML)
        tables = load_weight_tables(path)
        assert dict(tables[ProposalCategory.PORTAL_BLOG].weights) == {"cpm": 1.0}

    def test_env_override(self, tmp_path, monkeypatch):
        path = tmp_path / "weights.yaml"
        path.write_text(VALID_YAML)
        monkeypatch.setenv("MEDIA_MATRIX_WEIGHTS", str(path))
        clear_cache()
        weights = resolve_weights(ProposalCategory.PORTAL_BLOG, ["cpm", "cpc"])
        assert weights == {"cpm": pytest.approx(1.0), "cpc": 0.0}

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_weight_tables(tmp_path / "nope.yaml")

    def test_unknown_criterion(self, tmp_path):
        path = tmp_path / "weights.yaml"
        path.write_text("categories:\n  portal_blog:\n    weights: {not_a_criterion: 0.5}\n")
        with pytest.raises(ConfigurationError, match="unknown criteria"):
            load_weight_tables(path)

    def test_inapplicable_criterion(self, tmp_path):
        """A TV criterion cannot carry weight in the portal table."""
        path = tmp_path / "weights.yaml"
        path.write_text("categories:\n  portal_blog:\n    weights: {tv_daypart: 0.5}\n")
        with pytest.raises(ConfigurationError, match="inapplicable"):
            load_weight_tables(path)

    def test_overweight_table(self, tmp_path):
        path = tmp_path / "weights.yaml"
        path.write_text("categories:\n  portal_blog:\n    weights: {cpm: 0.6, cpc: 0.5}\n")
        with pytest.raises(ConfigurationError, match="sum to"):
            load_weight_tables(path)

    def test_weight_out_of_range(self, tmp_path):
        path = tmp_path / "weights.yaml"
        path.write_text("categories:\n  portal_blog:\n    weights: {cpm: 0}\n")
        with pytest.raises(ConfigurationError, match=r"\(0, 1\]"):
            load_weight_tables(path)

    def test_missing_category(self, tmp_path):
        path = tmp_path / "weights.yaml"
        path.write_text("categories:\n  portal_blog:\n    weights: {cpm: 1.0}\n")
        with pytest.raises(ConfigurationError, match="No weight table"):
            load_weight_tables(path)

    def test_unknown_category_key(self, tmp_path):
        path = tmp_path / "weights.yaml"
        path.write_text("categories:\n  radio:\n    weights: {cpm: 1.0}\n")
        with pytest.raises(ConfigurationError, match="Unknown proposal category"):
            load_weight_tables(path)


# ─── resolve_weights ──────────────────────────────────────────────────────────


class TestResolveWeights:
    """Normalization over the active set."""

    def test_single_active_criterion_gets_everything(self):
        assert resolve_weights(ProposalCategory.PORTAL_BLOG, ["cpm"]) == {"cpm": pytest.approx(1.0)}

    def test_preserves_authored_ratio(self):
        """cpm 0.20 and cpc 0.05 rescale to 0.8 / 0.2."""
        weights = resolve_weights(ProposalCategory.PORTAL_BLOG, ["cpm", "cpc"])
        assert weights["cpm"] == pytest.approx(0.8)
        assert weights["cpc"] == pytest.approx(0.2)

    def test_full_active_set_keeps_base_weights(self):
        ids = _applicable_ids(ProposalCategory.PORTAL_SOCIAL)
        weights = resolve_weights(ProposalCategory.PORTAL_SOCIAL, ids)
        table = get_weight_table(ProposalCategory.PORTAL_SOCIAL)
        for cid in ids:
            assert weights[cid] == pytest.approx(table.weights[cid])

    def test_empty_active_set(self):
        assert resolve_weights(ProposalCategory.TV_BUNDLE, []) == {}

    def test_duplicates_are_collapsed(self):
        assert resolve_weights(ProposalCategory.PORTAL_BLOG, ["cpm", "cpm"]) == {"cpm": pytest.approx(1.0)}

    def test_order_follows_input(self):
        weights = resolve_weights(ProposalCategory.PORTAL_BLOG, ["cpc", "cpm", "crossposting"])
        assert list(weights) == ["cpc", "cpm", "crossposting"]

    def test_unknown_category(self):
        with pytest.raises(ConfigurationError):
            resolve_weights("radio", ["cpm"])

    def test_unknown_category_fails_even_when_empty(self):
        with pytest.raises(ConfigurationError):
            resolve_weights("radio", [])

    def test_category_without_table(self):
        with pytest.raises(ConfigurationError, match="No weight table"):
            resolve_weights(ProposalCategory.TV_BUNDLE, ["cpm"], tables=_tables({"cpm": 1.0}))


class TestResolveWeightsPartialTables:
    """Injected tables that leave criteria unspecified."""

    def test_unspecified_share_remaining_budget(self):
        weights = resolve_weights(
            ProposalCategory.PORTAL_BLOG, ["cpm", "cpc", "crossposting"], tables=_tables({"cpm": 0.5})
        )
        assert weights["cpm"] == pytest.approx(0.5)
        assert weights["cpc"] == pytest.approx(0.25)
        assert weights["crossposting"] == pytest.approx(0.25)

    def test_full_budget_zeroes_unspecified(self):
        """Specified weights >= 0.99 own the whole budget; unspecified keys stay present at 0."""
        weights = resolve_weights(
            ProposalCategory.PORTAL_BLOG,
            ["cpm", "cpc", "crossposting"],
            tables=_tables({"cpm": 0.6, "cpc": 0.395}),
        )
        assert weights["crossposting"] == 0.0
        assert weights["cpm"] + weights["cpc"] == pytest.approx(1.0)
        assert weights["cpm"] / weights["cpc"] == pytest.approx(0.6 / 0.395)

    def test_only_unspecified_split_evenly(self):
        weights = resolve_weights(ProposalCategory.PORTAL_BLOG, ["cpc", "crossposting"], tables=_tables({"cpm": 0.5}))
        assert weights == {"cpc": pytest.approx(0.5), "crossposting": pytest.approx(0.5)}

    def test_leftover_budget_is_rescaled(self):
        """No unspecified criterion to absorb the remainder: specified weights rescale."""
        weights = resolve_weights(
            ProposalCategory.PORTAL_BLOG, ["cpm", "cpc"], tables=_tables({"cpm": 0.3, "cpc": 0.1, "crossposting": 0.2})
        )
        assert weights["cpm"] == pytest.approx(0.75)
        assert weights["cpc"] == pytest.approx(0.25)

    def test_invalid_injected_weight(self):
        with pytest.raises(ConfigurationError):
            WeightTable(category=ProposalCategory.PORTAL_BLOG, weights={"cpm": 1.5})


# ─── Properties ───────────────────────────────────────────────────────────────


class TestResolverProperties:
    """Normalization and monotonic redistribution over seeded random subsets."""

    @pytest.mark.parametrize("category", list(ProposalCategory))
    def test_weights_sum_to_one(self, category):
        ids = _applicable_ids(category)
        for subset in _random_subsets(ids, seed=len(category.value)):
            weights = resolve_weights(category, subset)
            assert set(weights) == set(subset)
            assert sum(weights.values()) == pytest.approx(1.0, abs=1e-9)
            assert all(w >= 0 for w in weights.values())

    @pytest.mark.parametrize("category", list(ProposalCategory))
    def test_excluding_never_lowers_remaining_weights(self, category):
        ids = _applicable_ids(category)
        for subset in _random_subsets(ids, seed=7, count=15):
            if len(subset) < 2:
                continue
            before = resolve_weights(category, subset)
            for removed in subset:
                after = resolve_weights(category, [cid for cid in subset if cid != removed])
                for cid, weight in after.items():
                    assert weight >= before[cid] - 1e-12, f"{cid} lost weight when {removed} was excluded"

    def test_monotonic_with_unspecified_criteria(self):
        tables = _tables({"cpm": 0.4, "cpc": 0.2})
        subset = ["cpm", "cpc", "crossposting", "portal_formats", "bonus_portal"]
        before = resolve_weights(ProposalCategory.PORTAL_BLOG, subset, tables=tables)
        for removed in subset:
            after = resolve_weights(ProposalCategory.PORTAL_BLOG, [c for c in subset if c != removed], tables=tables)
            for cid, weight in after.items():
                assert weight >= before[cid] - 1e-12
