"""
Criterion catalog models.

A Criterion is one scored question of the evaluation matrix. Its options are
either categorical (SELECT: match on `value`) or numeric ranges (NUMERIC: first
option whose [min, max] contains the number wins, either bound optional).
Every option score is bounded to [0, 3] at load time, which is what keeps
scorer output bounded.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from media_matrix.constants import MAX_SCORE, MIN_SCORE
from media_matrix.schemas.enums import InputKind, ProposalCategory, Unit


class ScoreOption(BaseModel):
    """One answer option (select) or one bucket (numeric) of a criterion."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    label: str
    value: Optional[str] = Field(None, description="Match value for SELECT criteria")
    min: Optional[float] = Field(None, description="Inclusive lower bound for NUMERIC criteria")
    max: Optional[float] = Field(None, description="Inclusive upper bound for NUMERIC criteria")
    score: float = Field(..., ge=MIN_SCORE, le=MAX_SCORE)

    @field_validator("value", mode="before")
    @classmethod
    def _value_as_text(cls, value):
        # YAML reads "0".."3" option values as ints unless quoted
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    @property
    def is_range(self) -> bool:
        return self.min is not None or self.max is not None

    def contains(self, number: float) -> bool:
        """Inclusive range test; an option with no bounds never matches."""
        if not self.is_range:
            return False
        if self.min is not None and number < self.min:
            return False
        if self.max is not None and number > self.max:
            return False
        return True


class Criterion(BaseModel):
    """Immutable catalog entry."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(..., min_length=1)
    label: str
    indicator: str = ""
    input_kind: InputKind
    options: tuple[ScoreOption, ...] = Field(..., min_length=1)
    unit: Optional[Unit] = None
    block: str = "general"
    applicable_categories: Optional[frozenset[ProposalCategory]] = Field(
        None, description="Categories this criterion applies to; None means all"
    )
    requires_video_channel: bool = Field(
        False, description="Only scored when a video-capable social channel is selected"
    )

    @field_validator("applicable_categories", mode="before")
    @classmethod
    def _parse_categories(cls, value):
        if value is None:
            return None
        return frozenset(ProposalCategory.parse(item) for item in value)

    @model_validator(mode="after")
    def _check_options(self) -> "Criterion":
        for option in self.options:
            if self.input_kind == InputKind.SELECT and option.value is None:
                raise ValueError(f"{self.id}: select option '{option.label}' has no value")
            if self.input_kind == InputKind.NUMERIC and not option.is_range:
                raise ValueError(f"{self.id}: numeric option '{option.label}' has neither min nor max")
            if option.min is not None and option.max is not None and option.min > option.max:
                raise ValueError(f"{self.id}: option '{option.label}' has min > max")
        return self

    def applies_to(self, category: ProposalCategory) -> bool:
        return self.applicable_categories is None or category in self.applicable_categories

    @property
    def max_option_score(self) -> float:
        return max(option.score for option in self.options)
