"""
Benchmark Service - Compute peer benchmarks across evaluated proposals.

Provides comparative context for proposal reports by:
1. Averaging score, investment, CPM, CPC and regional reach over a proposal set
2. Grouping proposals by region and by category
3. Reading each proposal's active version only

Averages skip missing or non-positive values, except average investment,
which is taken over every proposal in the set.
"""

import logging
import statistics
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Optional

from media_matrix.schemas.enums import ProposalCategory
from media_matrix.schemas.proposal import Proposal
from media_matrix.schemas.results import ScoredVersion
from media_matrix.utils.number_parsing import parse_decimal

logger = logging.getLogger(__name__)

REGIONAL_REACH_IDS = ("demographic_rs_portal", "demographic_rs_social")


@dataclass
class BenchmarkStats:
    """Averages for one proposal set."""

    avg_score: float = 0.0
    avg_investment: float = 0.0
    avg_cpm: float = 0.0
    avg_cpc: float = 0.0
    avg_rs_reach: float = 0.0
    avg_cost_per_score: float = 0.0
    proposal_count: int = 0


@dataclass
class Benchmarks:
    """Benchmarks overall and per peer group."""

    overall: BenchmarkStats
    by_region: dict[str, BenchmarkStats] = field(default_factory=dict)
    by_category: dict[ProposalCategory, BenchmarkStats] = field(default_factory=dict)


def _positive(version: ScoredVersion, criterion_id: str) -> Optional[float]:
    value = parse_decimal(version.answers.value(criterion_id))
    return value if value is not None and value > 0 else None


def _mean(values: list[float]) -> float:
    return statistics.mean(values) if values else 0.0


def _regional_reach(version: ScoredVersion) -> Optional[float]:
    """Portal regional audience when present, else the consolidated social one."""
    for criterion_id in REGIONAL_REACH_IDS:
        value = _positive(version, criterion_id)
        if value is not None:
            return value
    return None


def calculate_stats(proposals: list[Proposal]) -> BenchmarkStats:
    """
    Compute benchmark averages for a set of proposals.

    Args:
        proposals: Proposal set (proposals without versions still count toward
            average investment and proposal_count)

    Returns:
        BenchmarkStats (all zeros when no proposal has a version)
    """
    scored = [(p, p.active_version()) for p in proposals]
    scored = [(p, v) for p, v in scored if v is not None]
    if not scored:
        return BenchmarkStats()

    scores = [v.total_score for _, v in scored if v.total_score > 0]
    cpms = [x for x in (_positive(v, "cpm") for _, v in scored) if x is not None]
    cpcs = [x for x in (_positive(v, "cpc") for _, v in scored) if x is not None]
    reaches = [x for x in (_regional_reach(v) for _, v in scored) if x is not None]
    costs = [p.investment / v.total_score for p, v in scored if p.investment > 0 and v.total_score > 0]

    return BenchmarkStats(
        avg_score=_mean(scores),
        avg_investment=_mean([p.investment for p in proposals]),
        avg_cpm=_mean(cpms),
        avg_cpc=_mean(cpcs),
        avg_rs_reach=_mean(reaches),
        avg_cost_per_score=_mean(costs),
        proposal_count=len(proposals),
    )


def calculate_benchmarks(proposals: Iterable[Proposal]) -> Benchmarks:
    """Compute overall, per-region and per-category benchmarks."""
    proposals = list(proposals)
    by_region: dict[str, list[Proposal]] = {}
    by_category: dict[ProposalCategory, list[Proposal]] = {}

    for proposal in proposals:
        if proposal.region:
            by_region.setdefault(proposal.region, []).append(proposal)
        if proposal.category:
            by_category.setdefault(proposal.category, []).append(proposal)

    benchmarks = Benchmarks(
        overall=calculate_stats(proposals),
        by_region={region: calculate_stats(group) for region, group in by_region.items()},
        by_category={category: calculate_stats(group) for category, group in by_category.items()},
    )
    logger.debug(
        f"Benchmarks over {len(proposals)} proposals "
        f"[regions={len(by_region)}, categories={len(by_category)}]"
    )
    return benchmarks
