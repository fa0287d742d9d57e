"""Scoring result models: per-criterion score entries and scored versions."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from media_matrix.constants import MAX_SCORE, MIN_SCORE
from media_matrix.schemas.answers import AnswerSet


class ScoreEntry(BaseModel):
    """Score for one criterion, derived from its raw answer."""

    model_config = ConfigDict(frozen=True)

    score: float = Field(..., ge=MIN_SCORE, le=MAX_SCORE)
    matched_label: str


class ScoredVersion(BaseModel):
    """
    Immutable snapshot of a submitted questionnaire.

    total_score is a cached derived value, recomputable from `answers` with
    the scorer, weight resolver and aggregator. `weights` holds the resolved
    weight of every active criterion at scoring time, so the total can be
    rebuilt from `scores` and `weights` alone. Versions are never rescored
    after the fact, even if the catalog or weight tables change.
    """

    model_config = ConfigDict(frozen=True)

    version_number: int = Field(..., ge=1)
    created_at: datetime
    answers: AnswerSet
    scores: dict[str, ScoreEntry]
    weights: dict[str, float] = Field(default_factory=dict, description="criterion id -> resolved weight")
    total_score: float = Field(..., ge=MIN_SCORE, le=MAX_SCORE)
    analysis: str = Field("", description="Narrative produced by the analysis collaborator")
