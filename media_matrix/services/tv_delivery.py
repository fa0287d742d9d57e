"""
TV delivery metrics for TV-bundle proposals.

Derived from the TV answers (daily insertions, insertion days, spot
duration) and from the free-text campaign period captured with the proposal.
None of this feeds the score; it is shown next to it and in comparisons.
"""

import logging
import math
import re
from dataclasses import dataclass
from typing import Optional

from media_matrix.constants import DAYS_PER_MONTH, WEEK_DAYS, WEEKDAYS
from media_matrix.schemas.answers import AnswerSet
from media_matrix.schemas.enums import ProposalCategory
from media_matrix.schemas.proposal import Proposal
from media_matrix.utils.number_parsing import parse_count

logger = logging.getLogger(__name__)

DAILY_INSERTIONS_ID = "tv_daily_insertions"
INSERTION_DAYS_ID = "tv_insertion_days"
SPOT_DURATION_ID = "tv_spot_duration"

_DAYS_PATTERN = re.compile(r"\((\d+)\s+dias?\)", re.IGNORECASE)
_MONTHS_PATTERN = re.compile(r"^(\d+)\s+m[êe]s(es)?", re.IGNORECASE)


@dataclass(frozen=True)
class TvDelivery:
    """Total airtime bought by a TV schedule."""

    total_spots: int
    total_seconds: int

    @property
    def total_hours(self) -> float:
        return self.total_seconds / 3600 if self.total_seconds > 0 else 0.0


def _count(answers: AnswerSet, criterion_id: str) -> int:
    value = parse_count(answers.value(criterion_id))
    return value if value is not None and value > 0 else 0


def tv_delivery(answers: AnswerSet) -> TvDelivery:
    """Spots = daily insertions x days; seconds = spots x spot duration."""
    spots = _count(answers, DAILY_INSERTIONS_ID) * _count(answers, INSERTION_DAYS_ID)
    return TvDelivery(total_spots=spots, total_seconds=spots * _count(answers, SPOT_DURATION_ID))


def campaign_days(period: Optional[str]) -> Optional[int]:
    """
    Parse a campaign period into days.

    Examples:
        "01/03 a 30/03 (30 dias)" -> 30
        "2 meses" -> 60
        "a combinar" -> None
    """
    if not period:
        return None
    match = _DAYS_PATTERN.search(period)
    if match:
        days = int(match.group(1))
    else:
        match = _MONTHS_PATTERN.match(period.strip())
        if not match:
            return None
        days = int(match.group(1)) * DAYS_PER_MONTH
    return days if days > 0 else None


def adjust_for_weekends(days: int, exclude_weekends: bool) -> int:
    """Drop (5/7, floor) or restore (7/5, ceil) weekend days from an insertion-day count."""
    if days <= 0:
        return days
    if exclude_weekends:
        return math.floor(days * WEEKDAYS / WEEK_DAYS)
    return math.ceil(days * WEEK_DAYS / WEEKDAYS)


def prefill_insertion_days(proposal: Proposal, answers: AnswerSet) -> AnswerSet:
    """Default tv_insertion_days from the campaign period when it was left empty."""
    if proposal.category != ProposalCategory.TV_BUNDLE or answers.value(INSERTION_DAYS_ID):
        return answers
    days = campaign_days(proposal.campaign_period)
    if days is None:
        return answers
    logger.debug(f"Prefilled {INSERTION_DAYS_ID}={days} from campaign period [proposal={proposal.id}]")
    return answers.with_values(**{INSERTION_DAYS_ID: days})
