"""
Proposal Service - scores questionnaire submissions into proposal versions.

Every submission is evaluated once and frozen into a new ScoredVersion that
is appended to the proposal. Older versions are kept as they were scored;
they are never rescored when the catalog or weight tables change.

Usage:
    from media_matrix.services.proposal_service import submit

    proposal = Proposal(name="Portal X", investment=15000, category="portal_blog")
    version = submit(proposal, AnswerSet.from_form(form))
    print(version.total_score, proposal.cost_per_score())
"""

import logging
import math
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Optional, Union

from media_matrix.errors import ProposalStateError
from media_matrix.schemas.answers import AnswerSet
from media_matrix.schemas.proposal import Proposal
from media_matrix.schemas.results import ScoredVersion
from media_matrix.scorers.aggregator import Evaluation, evaluate
from media_matrix.scorers.criteria_catalog import CriterionCatalog
from media_matrix.scorers.weight_registry import WeightTables

logger = logging.getLogger(__name__)


def _as_answers(answers: Union[AnswerSet, Mapping[str, Any]]) -> AnswerSet:
    if isinstance(answers, AnswerSet):
        return answers
    return AnswerSet.from_form(answers)


def submit(
    proposal: Proposal,
    answers: Union[AnswerSet, Mapping[str, Any]],
    catalog: Optional[CriterionCatalog] = None,
    tables: Optional[WeightTables] = None,
    created_at: Optional[datetime] = None,
) -> ScoredVersion:
    """Score a completed questionnaire and append it as the proposal's new current version.

    Args:
        proposal: Proposal with an assigned category
        answers: AnswerSet or the flat questionnaire form
        catalog: Criterion catalog (defaults to the bundled one)
        tables: Weight tables (default to the bundled ones)
        created_at: Version timestamp (defaults to now, UTC)

    Raises:
        ProposalStateError: proposal has no category yet
    """
    if proposal.category is None:
        raise ProposalStateError(f"Proposal {proposal.id} must be categorized before it can be scored")

    evaluation = evaluate(proposal.category, _as_answers(answers), catalog=catalog, tables=tables)
    version = ScoredVersion(
        version_number=len(proposal.versions) + 1,
        created_at=created_at or datetime.now(timezone.utc),
        answers=evaluation.answers,
        scores=evaluation.scores,
        weights=evaluation.weights,
        total_score=evaluation.total_score,
    )
    proposal.append_version(version)
    logger.info(
        f"Scored proposal {proposal.id} v{version.version_number} "
        f"[category={proposal.category.value}, total={version.total_score:.2f}]"
    )
    return version


def attach_analysis(proposal: Proposal, version_number: int, analysis: str) -> ScoredVersion:
    """Store the narrative analysis on a version; scores and answers are untouched."""
    version = proposal.get_version(version_number).model_copy(update={"analysis": analysis})
    proposal.replace_version(version)
    return version


def draft_answers(proposal: Proposal) -> AnswerSet:
    """Starting answers for the next submission: the active version's, or empty."""
    version = proposal.active_version()
    return version.answers if version else AnswerSet()


def reevaluate(
    proposal: Proposal,
    version: ScoredVersion,
    catalog: Optional[CriterionCatalog] = None,
    tables: Optional[WeightTables] = None,
) -> Evaluation:
    """Evaluate a stored version's answers again under the given configuration."""
    if proposal.category is None:
        raise ProposalStateError(f"Proposal {proposal.id} has no category")
    return evaluate(proposal.category, version.answers, catalog=catalog, tables=tables)


def recompute_total(
    proposal: Proposal,
    version: ScoredVersion,
    catalog: Optional[CriterionCatalog] = None,
    tables: Optional[WeightTables] = None,
) -> float:
    """Recompute a version's total from its answers (the stored total is a cache)."""
    return reevaluate(proposal, version, catalog=catalog, tables=tables).total_score


def stale_versions(
    proposal: Proposal,
    catalog: Optional[CriterionCatalog] = None,
    tables: Optional[WeightTables] = None,
    tolerance: float = 1e-9,
) -> list[int]:
    """Version numbers whose stored total no longer matches the given configuration.

    Informational only: stale versions are reported, never rescored.
    """
    stale = []
    for version in proposal.versions:
        total = recompute_total(proposal, version, catalog=catalog, tables=tables)
        if not math.isclose(total, version.total_score, rel_tol=0, abs_tol=tolerance):
            stale.append(version.version_number)
    if stale:
        logger.warning(f"Proposal {proposal.id} has versions scored under older rules: {stale}")
    return stale
