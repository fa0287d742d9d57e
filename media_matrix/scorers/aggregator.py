"""
Aggregator - turns a completed answer set into one weighted total.

Pipeline for evaluate():
  1. Consolidate social channel metrics (when the category scores social criteria)
  2. Score every applicable criterion
  3. Build the active set: applicable, structurally applicable, not excluded
  4. Resolve weights over the active set
  5. Total = sum(score * weight) over the active set

The total is a convex combination of scores in [0, 3], so it stays in [0, 3].
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Optional

from media_matrix.constants import LABEL_NO_VIDEO_CHANNEL, MAX_SCORE, MIN_SCORE
from media_matrix.schemas.answers import AnswerSet
from media_matrix.schemas.catalog import Criterion
from media_matrix.schemas.enums import ProposalCategory
from media_matrix.schemas.results import ScoreEntry
from media_matrix.scorers.criteria_catalog import CriterionCatalog, get_catalog
from media_matrix.scorers.criterion_scorer import score_criterion
from media_matrix.scorers.social_consolidator import (
    CONSOLIDATED_CRITERIA,
    SocialAggregates,
    apply_to_answers,
    consolidate,
)
from media_matrix.scorers.weight_registry import WeightTables, resolve_weights

logger = logging.getLogger(__name__)

NO_VIDEO_CHANNEL = ScoreEntry(score=0.0, matched_label=LABEL_NO_VIDEO_CHANNEL)


@dataclass(frozen=True)
class EvaluationContext:
    """Facts about a submission that decide structural applicability."""

    category: ProposalCategory
    has_video_channel: bool = False

    @classmethod
    def from_answers(cls, category, answers: AnswerSet) -> "EvaluationContext":
        return cls(category=ProposalCategory.parse(category), has_video_channel=answers.has_video_channel)


def is_applicable(criterion: Criterion, context: EvaluationContext) -> bool:
    """Category applicability plus structural predicates (video-only criteria)."""
    if not criterion.applies_to(context.category):
        return False
    if criterion.requires_video_channel and not context.has_video_channel:
        return False
    return True


def active_criterion_ids(
    category,
    answers: AnswerSet,
    catalog: Optional[CriterionCatalog] = None,
) -> list[str]:
    """Applicable, structurally applicable, not-excluded criterion ids in catalog order."""
    catalog = catalog or get_catalog()
    context = EvaluationContext.from_answers(category, answers)
    return [
        c.id
        for c in catalog.applicable_criteria(context.category)
        if is_applicable(c, context) and not answers.is_excluded(c.id)
    ]


def _weighted_sum(scores: Mapping[str, ScoreEntry], weights: Mapping[str, float]) -> float:
    total = 0.0
    for criterion_id, weight in weights.items():
        entry = scores.get(criterion_id)
        if entry is None:
            logger.debug(f"No score for active criterion {criterion_id}; counting it as 0")
            continue
        total += entry.score * weight
    # float drift can push a convex combination a hair past the bounds
    return min(MAX_SCORE, max(MIN_SCORE, total))


def compute_total(
    category,
    scores: Mapping[str, ScoreEntry],
    active_criterion_ids: Iterable[str],
    tables: Optional[WeightTables] = None,
) -> float:
    """Weighted total over the active set; 0 when the active set is empty.

    Raises:
        ConfigurationError: unknown category
    """
    weights = resolve_weights(category, active_criterion_ids, tables)
    return _weighted_sum(scores, weights)


@dataclass(frozen=True)
class Evaluation:
    """Result of scoring one answer set for one category."""

    category: ProposalCategory
    answers: AnswerSet
    scores: dict[str, ScoreEntry]
    weights: dict[str, float]
    active_ids: tuple[str, ...]
    total_score: float
    social: Optional[SocialAggregates] = None
    inapplicable_ids: tuple[str, ...] = field(default_factory=tuple)

    def weight(self, criterion_id: str) -> float:
        return self.weights.get(criterion_id, 0.0)

    def weighted_score(self, criterion_id: str) -> float:
        entry = self.scores.get(criterion_id)
        return entry.score * self.weight(criterion_id) if entry else 0.0


def evaluate(
    category,
    answers: AnswerSet,
    catalog: Optional[CriterionCatalog] = None,
    tables: Optional[WeightTables] = None,
) -> Evaluation:
    """Score an answer set end to end.

    The returned Evaluation carries the consolidated answer snapshot, so
    re-evaluating `evaluation.answers` reproduces the same scores and total.

    Raises:
        ConfigurationError: unknown category or missing weight table
    """
    category = ProposalCategory.parse(category)
    catalog = catalog or get_catalog()
    applicable = catalog.applicable_criteria(category)

    social = None
    if any(c.id in CONSOLIDATED_CRITERIA for c in applicable):
        social = consolidate(answers)
        answers = apply_to_answers(answers, social)

    context = EvaluationContext.from_answers(category, answers)
    scores: dict[str, ScoreEntry] = {}
    active: list[str] = []
    inapplicable: list[str] = []
    for criterion in applicable:
        if not is_applicable(criterion, context):
            scores[criterion.id] = NO_VIDEO_CHANNEL
            inapplicable.append(criterion.id)
            continue
        excluded = answers.is_excluded(criterion.id)
        scores[criterion.id] = score_criterion(criterion, answers.value(criterion.id), excluded)
        if not excluded:
            active.append(criterion.id)

    weights = resolve_weights(category, active, tables)
    total = _weighted_sum(scores, weights)
    logger.debug(
        f"Evaluated {category.value} [active={len(active)}, excluded="
        f"{len(applicable) - len(active) - len(inapplicable)}, total={total:.3f}]"
    )
    return Evaluation(
        category=category,
        answers=answers,
        scores=scores,
        weights=weights,
        active_ids=tuple(active),
        total_score=total,
        social=social,
        inapplicable_ids=tuple(inapplicable),
    )
