"""Scoring engine: catalog, weight resolution, criterion scoring, consolidation and aggregation."""

from media_matrix.scorers.aggregator import (
    Evaluation,
    EvaluationContext,
    active_criterion_ids,
    compute_total,
    evaluate,
    is_applicable,
)
from media_matrix.scorers.criteria_catalog import (
    CriterionCatalog,
    all_criteria,
    applicable_criteria,
    catalog_issues,
    get_catalog,
    get_criterion,
    load_catalog,
)
from media_matrix.scorers.criterion_scorer import score_criterion
from media_matrix.scorers.social_consolidator import (
    SocialAggregates,
    apply_to_answers,
    consolidate,
    consolidate_channels,
)
from media_matrix.scorers.weight_registry import (
    WeightTable,
    get_weight_table,
    get_weight_tables,
    load_weight_tables,
    resolve_weights,
)


def clear_caches():
    """Drop the cached catalog and weight tables (useful for testing)."""
    from media_matrix.scorers import criteria_catalog, weight_registry

    criteria_catalog.clear_cache()
    weight_registry.clear_cache()


__all__ = [
    "CriterionCatalog",
    "Evaluation",
    "EvaluationContext",
    "SocialAggregates",
    "WeightTable",
    "active_criterion_ids",
    "all_criteria",
    "applicable_criteria",
    "apply_to_answers",
    "catalog_issues",
    "clear_caches",
    "compute_total",
    "consolidate",
    "consolidate_channels",
    "evaluate",
    "get_catalog",
    "get_criterion",
    "get_weight_table",
    "get_weight_tables",
    "is_applicable",
    "load_catalog",
    "load_weight_tables",
    "resolve_weights",
    "score_criterion",
]
