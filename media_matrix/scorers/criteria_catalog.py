"""Criterion Catalog - the static evaluation matrix.

Loaded once from YAML (media_matrix/data/criteria_catalog.yaml, or
MEDIA_MATRIX_CATALOG) and cached at module level. The catalog is read-only:
entries are frozen pydantic models held in tuples and MappingProxyType views.

Usage:
    from media_matrix.scorers.criteria_catalog import get_catalog

    catalog = get_catalog()
    criteria = catalog.applicable_criteria(ProposalCategory.PORTAL_BLOG)
"""

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Optional

import yaml
from pydantic import ValidationError

from media_matrix.config import get_catalog_path
from media_matrix.constants import UNIT_RESOLUTION
from media_matrix.errors import ConfigurationError
from media_matrix.schemas.catalog import Criterion
from media_matrix.schemas.enums import InputKind, ProposalCategory

logger = logging.getLogger(__name__)


class CriterionCatalog:
    """Immutable, ordered collection of criteria (declaration order is preserved)."""

    def __init__(
        self,
        criteria: Iterable[Criterion],
        blocks: Optional[Mapping[str, str]] = None,
        version: str = "",
    ):
        self._criteria = tuple(criteria)
        by_id: dict[str, Criterion] = {}
        for criterion in self._criteria:
            if criterion.id in by_id:
                raise ConfigurationError(f"Duplicate criterion id in catalog: {criterion.id}")
            by_id[criterion.id] = criterion
        self._by_id = MappingProxyType(by_id)
        self.blocks = MappingProxyType(dict(blocks or {}))
        self.version = version

    def all_criteria(self) -> tuple[Criterion, ...]:
        return self._criteria

    def applicable_criteria(self, category) -> tuple[Criterion, ...]:
        """Criteria whose applicable_categories is unset or contains the category."""
        category = ProposalCategory.parse(category)
        return tuple(c for c in self._criteria if c.applies_to(category))

    def get(self, criterion_id: str) -> Criterion:
        """Look up a criterion by id.

        Raises:
            ConfigurationError: if the id is not in the catalog
        """
        try:
            return self._by_id[criterion_id]
        except KeyError:
            raise ConfigurationError(f"Unknown criterion id: {criterion_id!r}") from None

    def ids(self) -> tuple[str, ...]:
        return tuple(self._by_id)

    def block_label(self, block: str) -> str:
        return self.blocks.get(block, block)

    def __contains__(self, criterion_id: object) -> bool:
        return criterion_id in self._by_id

    def __iter__(self):
        return iter(self._criteria)

    def __len__(self) -> int:
        return len(self._criteria)


# Module-level cache
_catalog_cache: Optional[CriterionCatalog] = None


def load_catalog(path: Optional[Path] = None) -> CriterionCatalog:
    """Load and validate a catalog YAML file (uncached)."""
    path = path or get_catalog_path()
    if not path.exists():
        raise ConfigurationError(f"Criterion catalog not found at {path}")

    with open(path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    criteria = []
    for index, data in enumerate(raw.get("criteria", [])):
        try:
            criteria.append(Criterion.model_validate(data))
        except ValidationError as e:
            ident = data.get("id", f"#{index}") if isinstance(data, dict) else f"#{index}"
            raise ConfigurationError(f"Invalid criterion {ident} in {path}: {e}") from e

    catalog = CriterionCatalog(criteria, blocks=raw.get("blocks"), version=str(raw.get("version", "")))
    logger.info(f"Loaded {len(catalog)} criteria from {path.name} (version {catalog.version or 'unversioned'})")
    return catalog


def get_catalog() -> CriterionCatalog:
    """Return the process-wide catalog, loading it on first use."""
    global _catalog_cache
    if _catalog_cache is None:
        _catalog_cache = load_catalog()
    return _catalog_cache


def all_criteria(catalog: Optional[CriterionCatalog] = None) -> tuple[Criterion, ...]:
    return (catalog or get_catalog()).all_criteria()


def applicable_criteria(category, catalog: Optional[CriterionCatalog] = None) -> tuple[Criterion, ...]:
    return (catalog or get_catalog()).applicable_criteria(category)


def get_criterion(criterion_id: str, catalog: Optional[CriterionCatalog] = None) -> Criterion:
    return (catalog or get_catalog()).get(criterion_id)


def clear_cache():
    """Clear the catalog cache (useful for testing)."""
    global _catalog_cache
    _catalog_cache = None


# =============================================================================
# Consistency check
# =============================================================================


def catalog_issues(catalog: Optional[CriterionCatalog] = None) -> list[str]:
    """Report overlapping or gapped numeric ranges.

    Ranges are sorted by lower bound; consecutive ranges must touch at the
    unit's authoring resolution (1 for counts, 0.01 otherwise). First-match
    scoring silently depends on this, so it is checked here rather than at
    scoring time.
    """
    catalog = catalog or get_catalog()
    issues = []
    for criterion in catalog:
        if criterion.input_kind != InputKind.NUMERIC:
            continue
        unit = criterion.unit.value if criterion.unit else "percentage"
        step = UNIT_RESOLUTION.get(unit, 0.01)
        ranges = sorted(
            criterion.options,
            key=lambda o: float("-inf") if o.min is None else o.min,
        )
        for prev, nxt in zip(ranges, ranges[1:]):
            prev_max = float("inf") if prev.max is None else prev.max
            nxt_min = float("-inf") if nxt.min is None else nxt.min
            if nxt_min <= prev_max:
                issues.append(f"{criterion.id}: '{prev.label}' overlaps '{nxt.label}'")
            elif nxt_min - prev_max > step + 1e-9:
                issues.append(
                    f"{criterion.id}: gap between '{prev.label}' (max {prev_max:g}) "
                    f"and '{nxt.label}' (min {nxt_min:g})"
                )
        if ranges[-1].max is not None:
            issues.append(f"{criterion.id}: highest range '{ranges[-1].label}' is not open-ended")
    return issues
