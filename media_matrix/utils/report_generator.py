"""
Proposal report data for export, comparison and narrative collaborators.

Generates:
- Per-criterion breakdown rows (raw score, matched label, weight, weighted score)
- Narrative items and a plain-text prompt section for the analysis service
- Weighted averages per criterion block for comparison views
- Score bands and strategy weight tiers

Nothing here rescores a stored version: scores come from the version, and
weights are resolved from the version's own active set.
"""

import json
from dataclasses import asdict, dataclass, field
from typing import Any, Optional

from media_matrix.constants import (
    HIGH_IMPACT_WEIGHT_PCT,
    LABEL_NOT_AVAILABLE,
    MEDIUM_IMPACT_WEIGHT_PCT,
    MODERATE_SCORE_THRESHOLD,
    STRONG_SCORE_THRESHOLD,
)
from media_matrix.schemas.proposal import Proposal
from media_matrix.schemas.results import ScoredVersion
from media_matrix.scorers.aggregator import active_criterion_ids
from media_matrix.scorers.criteria_catalog import CriterionCatalog, get_catalog
from media_matrix.scorers.weight_registry import WeightTables, resolve_weights


@dataclass(frozen=True)
class CriterionBreakdown:
    """One export row: enough to rebuild the total without the engine."""

    criterion_id: str
    label: str
    block: str
    raw_score: float
    matched_label: str
    weight: float
    weighted_score: float


@dataclass(frozen=True)
class NarrativeItem:
    label: str
    indicator: str
    score: float
    matched_label: str


@dataclass
class WeightTiers:
    """Strategy view of a category's weights (all applicable criteria active)."""

    high: list[tuple[str, float]] = field(default_factory=list)
    medium: list[tuple[str, float]] = field(default_factory=list)
    low: list[tuple[str, float]] = field(default_factory=list)


def score_band(total: float) -> str:
    """'strong' (>= 2.25), 'moderate' (>= 1.5) or 'weak'."""
    if total >= STRONG_SCORE_THRESHOLD:
        return "strong"
    if total >= MODERATE_SCORE_THRESHOLD:
        return "moderate"
    return "weak"


def version_weights(
    version: ScoredVersion,
    category,
    catalog: Optional[CriterionCatalog] = None,
    tables: Optional[WeightTables] = None,
) -> dict[str, float]:
    """Weights the version's active set would get under the given tables.

    Compare with `version.weights` (the weights it was scored with) to see how
    a configuration change would shift the breakdown.
    """
    active = active_criterion_ids(category, version.answers, catalog=catalog)
    return resolve_weights(category, active, tables)


def breakdown(
    version: ScoredVersion,
    category,
    catalog: Optional[CriterionCatalog] = None,
) -> list[CriterionBreakdown]:
    """Rows for every applicable criterion in catalog order.

    Weights are the ones stored on the version, so the weighted scores add up
    to its total whatever the current weight tables say. Criteria the version
    has no score for (catalog grew since it was scored) show as N/A with zero
    weight.
    """
    catalog = catalog or get_catalog()
    weights = version.weights
    rows = []
    for criterion in catalog.applicable_criteria(category):
        entry = version.scores.get(criterion.id)
        raw_score = entry.score if entry else 0.0
        weight = weights.get(criterion.id, 0.0) if entry else 0.0
        rows.append(
            CriterionBreakdown(
                criterion_id=criterion.id,
                label=criterion.label,
                block=criterion.block,
                raw_score=raw_score,
                matched_label=entry.matched_label if entry else LABEL_NOT_AVAILABLE,
                weight=weight,
                weighted_score=raw_score * weight,
            )
        )
    return rows


def narrative_items(
    version: ScoredVersion,
    category,
    catalog: Optional[CriterionCatalog] = None,
) -> list[NarrativeItem]:
    """(label, indicator, score, matched_label) for every scored applicable criterion."""
    catalog = catalog or get_catalog()
    items = []
    for criterion in catalog.applicable_criteria(category):
        entry = version.scores.get(criterion.id)
        if entry is None:
            continue
        items.append(NarrativeItem(criterion.label, criterion.indicator, entry.score, entry.matched_label))
    return items


def to_prompt_section(
    version: ScoredVersion,
    category,
    catalog: Optional[CriterionCatalog] = None,
) -> str:
    """Plain-text score listing handed to the narrative analysis service."""
    lines = []
    for item in narrative_items(version, category, catalog=catalog):
        lines.append(f"{item.label}:")
        lines.append(f"- {item.indicator}: score {item.score:g}/3 (value: {item.matched_label})")
    lines.append("")
    lines.append(f"Total score: {version.total_score:.2f}/3 ({score_band(version.total_score)})")
    return "\n".join(lines)


def block_scores(
    version: ScoredVersion,
    category,
    catalog: Optional[CriterionCatalog] = None,
) -> dict[str, float]:
    """Weighted average score per block label, rounded to 2 decimals.

    Only blocks with at least one applicable criterion are reported; a block
    whose criteria all carry zero weight averages to 0.
    """
    catalog = catalog or get_catalog()
    sums: dict[str, list[float]] = {}
    for row in breakdown(version, category, catalog=catalog):
        acc = sums.setdefault(catalog.block_label(row.block), [0.0, 0.0])
        acc[0] += row.weighted_score
        acc[1] += row.weight
    return {block: round(ws / w, 2) if w > 0 else 0.0 for block, (ws, w) in sums.items()}


def weight_tiers(
    category,
    catalog: Optional[CriterionCatalog] = None,
    tables: Optional[WeightTables] = None,
) -> WeightTiers:
    """Group a category's weights into high (>= 8%), medium (3-8%) and low (< 3%) impact."""
    catalog = catalog or get_catalog()
    ids = [c.id for c in catalog.applicable_criteria(category)]
    weights = resolve_weights(category, ids, tables)
    ranked = sorted(((catalog.get(cid).label, weights[cid]) for cid in ids), key=lambda item: -item[1])

    tiers = WeightTiers()
    for label, weight in ranked:
        pct = round(weight * 100, 6)
        if pct >= HIGH_IMPACT_WEIGHT_PCT:
            tiers.high.append((label, weight))
        elif pct >= MEDIUM_IMPACT_WEIGHT_PCT:
            tiers.medium.append((label, weight))
        else:
            tiers.low.append((label, weight))
    return tiers


class ProposalReport:
    """
    Export-ready report for one proposal's active version.
    """

    def __init__(self, proposal: Proposal, catalog: Optional[CriterionCatalog] = None):
        self.proposal = proposal
        self.catalog = catalog or get_catalog()

    def generate_summary(self) -> dict[str, Any]:
        """
        Generate summary dict (JSON-serializable).

        Returns an empty "rows" list when the proposal has no scored version.
        """
        proposal = self.proposal
        version = proposal.active_version()
        summary: dict[str, Any] = {
            "proposal_id": proposal.id,
            "name": proposal.name,
            "vehicle": proposal.vehicle,
            "category": proposal.category.value if proposal.category else None,
            "investment": proposal.investment,
            "version": version.version_number if version else None,
            "total_score": version.total_score if version else None,
            "band": score_band(version.total_score) if version else None,
            "cost_per_score": proposal.cost_per_score(),
            "rows": [],
            "blocks": {},
        }
        if version is None or proposal.category is None:
            return summary

        rows = breakdown(version, proposal.category, catalog=self.catalog)
        summary["rows"] = [asdict(row) for row in rows]
        summary["blocks"] = block_scores(version, proposal.category, catalog=self.catalog)
        return summary

    def generate_detailed_report(self) -> str:
        """
        Generate human-readable detailed report.

        Returns:
            Formatted report string
        """
        summary = self.generate_summary()
        report_lines = [
            "=" * 80,
            f"PROPOSAL EVALUATION - {summary['name']}",
            "=" * 80,
            "",
            f"Vehicle: {summary['vehicle'] or '-'}",
            f"Category: {summary['category'] or '-'}",
            f"Investment: R$ {summary['investment']:,.2f}",
        ]
        if summary["version"] is None:
            report_lines.extend(["", "No scored version.", ""])
            return "\n".join(report_lines)

        report_lines.extend(
            [
                f"Version: {summary['version']}",
                f"Total Score: {summary['total_score']:.2f}/3 ({summary['band']})",
            ]
        )
        if summary["cost_per_score"] is not None:
            report_lines.append(f"Cost per Score Point: R$ {summary['cost_per_score']:,.2f}")

        report_lines.extend(["", "=" * 80, "CRITERIA", "=" * 80, ""])
        for row in summary["rows"]:
            report_lines.append(
                f"  {row['label']}: {row['raw_score']:g} ({row['matched_label']}) "
                f"x {row['weight']:.4f} = {row['weighted_score']:.4f}"
            )

        report_lines.extend(["", "=" * 80, "BLOCKS", "=" * 80, ""])
        for block, score in summary["blocks"].items():
            report_lines.append(f"  {block}: {score:.2f}")
        report_lines.append("")
        return "\n".join(report_lines)

    def save_json_report(self, filepath: str):
        """
        Save the summary as a JSON file.

        Args:
            filepath: Path to save JSON report
        """
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(self.generate_summary(), f, indent=2, ensure_ascii=False)
