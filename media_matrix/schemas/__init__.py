"""Pydantic models and enums shared across the scoring engine."""

from media_matrix.schemas.answers import AnswerSet, AnswerValue
from media_matrix.schemas.catalog import Criterion, ScoreOption
from media_matrix.schemas.enums import InputKind, ProposalCategory, Unit
from media_matrix.schemas.proposal import Proposal
from media_matrix.schemas.results import ScoredVersion, ScoreEntry

__all__ = [
    "AnswerSet",
    "AnswerValue",
    "Criterion",
    "InputKind",
    "Proposal",
    "ProposalCategory",
    "ScoreEntry",
    "ScoreOption",
    "ScoredVersion",
    "Unit",
]
