"""
Criterion Scorer - maps one raw answer to a bounded score and a label.

Rules:
  - excluded ("not considered")        -> 0, "not considered"
  - missing / empty answer             -> 0, "N/A"
  - SELECT: option whose value equals the answer text; no match -> 0, "N/A"
  - NUMERIC: parse by unit (counts with thousands separators); unparseable
    -> 0, "N/A"; first range containing the number wins; no range matches
    -> 0 with the raw answer as label

Currency and percentage values are rounded to cents before range matching,
so averaged inputs like 29.995 land in a bucket authored at 0.01 steps.

The scorer never raises for malformed answers.
"""

import logging
from typing import Any, Optional

from media_matrix.constants import LABEL_NOT_AVAILABLE, LABEL_NOT_CONSIDERED
from media_matrix.schemas.catalog import Criterion, ScoreOption
from media_matrix.schemas.enums import InputKind, Unit
from media_matrix.schemas.results import ScoreEntry
from media_matrix.utils.number_parsing import parse_number

logger = logging.getLogger(__name__)

NOT_CONSIDERED = ScoreEntry(score=0.0, matched_label=LABEL_NOT_CONSIDERED)
NOT_AVAILABLE = ScoreEntry(score=0.0, matched_label=LABEL_NOT_AVAILABLE)


def _is_blank(raw: Any) -> bool:
    if raw is None:
        return True
    if isinstance(raw, str):
        return not raw.strip()
    if isinstance(raw, (list, tuple)):
        return len(raw) == 0
    return False


def _display(raw: Any) -> str:
    """Render a raw answer as the label shown next to a numeric score."""
    if isinstance(raw, str):
        return raw.strip()
    if isinstance(raw, float):
        rounded = round(raw, 2)
        return str(int(rounded)) if rounded.is_integer() else str(rounded)
    return str(raw)


def _select_text(raw: Any) -> str:
    if isinstance(raw, float) and raw.is_integer():
        return str(int(raw))
    if isinstance(raw, (list, tuple)):
        return ",".join(str(item) for item in raw)
    return str(raw).strip()


def _match_select(criterion: Criterion, raw: Any) -> Optional[ScoreOption]:
    text = _select_text(raw)
    return next((o for o in criterion.options if o.value == text), None)


def _match_range(criterion: Criterion, number: float) -> Optional[ScoreOption]:
    if criterion.unit != Unit.COUNT:
        number = round(number, 2)
    return next((o for o in criterion.options if o.contains(number)), None)


def score_criterion(criterion: Criterion, raw_value: Any, excluded: bool = False) -> ScoreEntry:
    """Score a single criterion answer.

    Args:
        criterion: Catalog entry
        raw_value: Answer as captured by the form (str, number, list or None)
        excluded: True when the user marked the criterion "not considered"

    Returns:
        ScoreEntry with score in [0, 3]
    """
    if excluded:
        return NOT_CONSIDERED
    if _is_blank(raw_value):
        return NOT_AVAILABLE

    if criterion.input_kind == InputKind.SELECT:
        option = _match_select(criterion, raw_value)
        if option is None:
            logger.debug(f"No option matches answer [criterion={criterion.id}, value={raw_value!r}]")
            return NOT_AVAILABLE
        return ScoreEntry(score=option.score, matched_label=option.label)

    if isinstance(raw_value, (list, tuple)):
        return NOT_AVAILABLE
    number = parse_number(raw_value, criterion.unit)
    if number is None:
        logger.debug(f"Unparseable numeric answer [criterion={criterion.id}, value={raw_value!r}]")
        return NOT_AVAILABLE

    option = _match_range(criterion, number)
    label = _display(raw_value)
    if option is None:
        logger.debug(f"Value outside every range [criterion={criterion.id}, value={number}]")
        return ScoreEntry(score=0.0, matched_label=label)
    return ScoreEntry(score=option.score, matched_label=label)
