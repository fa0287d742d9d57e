"""Weight Registry: per-category base weight tables and the weight resolver.

Maps each proposal category to its authored base weights and turns a set of
active criteria into a normalized weight map. Authored tables sum to 1.0.

Usage:
    from media_matrix.scorers.weight_registry import resolve_weights

    weights = resolve_weights(ProposalCategory.PORTAL_BLOG, ["cpm", "cpc"])
    # weights == {"cpm": 0.8, "cpc": 0.2}
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Optional

import yaml

from media_matrix.config import get_weights_path
from media_matrix.constants import FULL_BUDGET_THRESHOLD, WEIGHT_SUM_TOLERANCE
from media_matrix.errors import ConfigurationError
from media_matrix.schemas.enums import ProposalCategory
from media_matrix.scorers.criteria_catalog import CriterionCatalog, get_catalog

logger = logging.getLogger(__name__)

WeightTables = Mapping[ProposalCategory, "WeightTable"]


@dataclass(frozen=True)
class WeightTable:
    """Base weight profile for a single category.

    Criteria missing from `weights` are "unspecified" and share whatever
    budget the specified criteria leave over.
    """

    category: ProposalCategory
    weights: Mapping[str, float] = field(default_factory=dict)
    title: str = ""
    description: str = ""

    def __post_init__(self):
        for criterion_id, weight in self.weights.items():
            if not 0 < weight <= 1:
                raise ConfigurationError(
                    f"{self.category.value}: weight for {criterion_id} must be in (0, 1], got {weight}"
                )
        object.__setattr__(self, "weights", MappingProxyType(dict(self.weights)))

    @property
    def total(self) -> float:
        return sum(self.weights.values())

    def base_weight(self, criterion_id: str) -> Optional[float]:
        return self.weights.get(criterion_id)


# Module-level cache
_tables_cache: Optional[WeightTables] = None


def load_weight_tables(path: Optional[Path] = None, catalog: Optional[CriterionCatalog] = None) -> WeightTables:
    """Load and validate the weight tables YAML (uncached)."""
    path = path or get_weights_path()
    if not path.exists():
        raise ConfigurationError(f"Category weight tables not found at {path}")
    catalog = catalog or get_catalog()

    with open(path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    tables: dict[ProposalCategory, WeightTable] = {}
    for name, data in (raw.get("categories") or {}).items():
        category = ProposalCategory.parse(name)
        weights = {str(k): float(v) for k, v in (data.get("weights") or {}).items()}
        _validate_weights(category, weights, catalog)
        tables[category] = WeightTable(
            category=category,
            weights=weights,
            title=data.get("title", ""),
            description=data.get("description", ""),
        )

    missing = set(ProposalCategory) - set(tables)
    if missing:
        raise ConfigurationError(f"No weight table for categories: {sorted(c.value for c in missing)}")

    logger.info(f"Loaded weight tables for {len(tables)} categories from {path.name}")
    return MappingProxyType(tables)


def _validate_weights(category: ProposalCategory, weights: dict[str, float], catalog: CriterionCatalog) -> None:
    """Validate that weights reference applicable criteria and stay within budget."""
    unknown = set(weights) - set(catalog.ids())
    if unknown:
        raise ConfigurationError(f"{category.value} weights reference unknown criteria: {sorted(unknown)}")
    inapplicable = [cid for cid in weights if not catalog.get(cid).applies_to(category)]
    if inapplicable:
        raise ConfigurationError(f"{category.value} weights reference inapplicable criteria: {sorted(inapplicable)}")
    total = sum(weights.values())
    if total > 1 + WEIGHT_SUM_TOLERANCE:
        raise ConfigurationError(f"{category.value} weights sum to {total:.4f}, expected at most 1")

    unspecified = [c.id for c in catalog.applicable_criteria(category) if c.id not in weights]
    if unspecified:
        logger.debug(f"{category.value}: {len(unspecified)} criteria share the remaining {1 - total:.2f}")


def get_weight_tables() -> WeightTables:
    """Return the process-wide weight tables, loading them on first use."""
    global _tables_cache
    if _tables_cache is None:
        _tables_cache = load_weight_tables()
    return _tables_cache


def get_weight_table(category, tables: Optional[WeightTables] = None) -> WeightTable:
    """Get the WeightTable for a category.

    Raises:
        ConfigurationError: unknown category or no table for it
    """
    category = ProposalCategory.parse(category)
    tables = tables if tables is not None else get_weight_tables()
    table = tables.get(category)
    if table is None:
        raise ConfigurationError(f"No weight table configured for category {category.value}")
    return table


def clear_cache():
    """Clear the weight table cache (useful for testing)."""
    global _tables_cache
    _tables_cache = None


# =============================================================================
# Weight resolution
# =============================================================================


def resolve_weights(
    category,
    active_criterion_ids: Iterable[str],
    tables: Optional[WeightTables] = None,
) -> dict[str, float]:
    """Normalized weight per active criterion.

    1. Specified criteria (present in the table) keep their base weight.
    2. If the specified weights reach FULL_BUDGET_THRESHOLD they are scaled to
       sum to 1 and unspecified criteria get 0.
    3. Otherwise unspecified criteria split the remaining budget equally.
    4. A final pass rescales floating-point drift back to 1, unless the sum
       is 0 (then every weight stays 0).

    Every requested id appears in the result. Empty input -> empty map.

    Raises:
        ConfigurationError: unknown category
    """
    table = get_weight_table(category, tables)
    active_ids = list(dict.fromkeys(active_criterion_ids))
    if not active_ids:
        return {}

    specified = [cid for cid in active_ids if cid in table.weights]
    unspecified = [cid for cid in active_ids if cid not in table.weights]
    specified_sum = sum(table.weights[cid] for cid in specified)

    if specified_sum >= FULL_BUDGET_THRESHOLD:
        scale = 1.0 / specified_sum
        return {cid: table.weights[cid] * scale if cid in table.weights else 0.0 for cid in active_ids}

    weights = {cid: table.weights.get(cid, 0.0) for cid in active_ids}
    if unspecified:
        share = (1.0 - specified_sum) / len(unspecified)
        for cid in unspecified:
            weights[cid] = share
    else:
        logger.debug(
            f"Unallocated weight budget {1.0 - specified_sum:.4f} for {table.category.value}; rescaling specified weights"
        )

    total = sum(weights.values())
    if total == 0:
        return {cid: 0.0 for cid in active_ids}
    if total != 1.0:
        weights = {cid: w / total for cid, w in weights.items()}
    return weights
