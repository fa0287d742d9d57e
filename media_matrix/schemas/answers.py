"""
AnswerSet - typed view over the questionnaire's flat answer form.

The questionnaire UI produces a flat mapping with three key conventions:
  - "<criterionId>"            -> raw answer (str, number or list of str)
  - "<criterionId>_nc"         -> True when the user marked it "not considered"
                                  ("<criterionId>_notConsidered" is also accepted)
  - "<metric>_<Channel>"       -> per-channel social metric, e.g. "followers_Instagram"
plus the selected channel list under "social_followers_channels".

from_form() validates these keys once at the boundary so the scorer and the
social consolidator never do duck-typed string lookups.
"""

import logging
from collections.abc import Mapping
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from media_matrix.constants import (
    CHANNEL_LIST_KEYS,
    CHANNEL_METRICS,
    NOT_CONSIDERED_SUFFIXES,
    SOCIAL_MEDIA_CHANNELS,
    VIDEO_CHANNELS,
)

logger = logging.getLogger(__name__)

AnswerValue = Union[str, int, float, list[str]]

_TRUTHY_TEXT = {"true", "1", "yes", "on", "sim"}


def _is_truthy(flag: Any) -> bool:
    if isinstance(flag, str):
        return flag.strip().lower() in _TRUTHY_TEXT
    return bool(flag)


def _split_channel_key(key: str):
    """Return (metric, channel) for a "<metric>_<Channel>" key, else None."""
    for metric in CHANNEL_METRICS:
        prefix = f"{metric}_"
        if key.startswith(prefix):
            return metric, key[len(prefix):]
    return None


def _clean_value(key: str, raw: Any) -> Any:
    """Coerce a form value to an AnswerValue, or None when it cannot be one."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (str, int, float)):
        return raw
    if isinstance(raw, (list, tuple)):
        items = [str(item) for item in raw if isinstance(item, (str, int, float)) and not isinstance(item, bool)]
        if len(items) != len(raw):
            logger.debug(f"Dropping non-scalar list items [key={key}]")
        return items
    logger.debug(f"Dropping unsupported answer value [key={key}, type={type(raw).__name__}]")
    return None


class AnswerSet(BaseModel):
    """Immutable snapshot of one completed questionnaire."""

    model_config = ConfigDict(frozen=True)

    values: dict[str, AnswerValue] = Field(default_factory=dict)
    not_considered: frozenset[str] = Field(default_factory=frozenset)
    channels: tuple[str, ...] = ()
    channel_metrics: dict[str, dict[str, AnswerValue]] = Field(
        default_factory=dict, description="metric -> channel -> raw value"
    )

    @field_validator("channels", mode="before")
    @classmethod
    def _known_channels(cls, value):
        if value is None:
            return ()
        if isinstance(value, str):
            value = [value]
        channels = []
        for channel in value:
            if channel not in SOCIAL_MEDIA_CHANNELS:
                logger.debug(f"Ignoring unknown social channel '{channel}'")
                continue
            if channel not in channels:
                channels.append(channel)
        return tuple(channels)

    @classmethod
    def from_form(cls, form: Mapping[str, Any]) -> "AnswerSet":
        """Build an AnswerSet from the flat questionnaire form."""
        values: dict[str, Any] = {}
        not_considered = set()
        channels: list = []
        channel_metrics: dict[str, dict[str, Any]] = {}

        for key, raw in form.items():
            if not isinstance(key, str):
                logger.debug(f"Dropping non-string form key [key={key!r}]")
                continue
            if key in CHANNEL_LIST_KEYS:
                channels = raw if isinstance(raw, (list, tuple)) else [raw]
                continue

            suffix = next((s for s in NOT_CONSIDERED_SUFFIXES if key.endswith(s)), None)
            if suffix is not None:
                if _is_truthy(raw):
                    not_considered.add(key[: -len(suffix)])
                continue

            channel_key = _split_channel_key(key)
            if channel_key is not None:
                metric, channel = channel_key
                if channel not in SOCIAL_MEDIA_CHANNELS:
                    logger.debug(f"Dropping metric for unknown channel [key={key}]")
                    continue
                value = _clean_value(key, raw)
                if value is not None:
                    channel_metrics.setdefault(metric, {})[channel] = value
                continue

            value = _clean_value(key, raw)
            if value is not None:
                values[key] = value

        return cls(
            values=values,
            not_considered=frozenset(not_considered),
            channels=channels,
            channel_metrics=channel_metrics,
        )

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def value(self, criterion_id: str) -> Any:
        return self.values.get(criterion_id)

    def is_excluded(self, criterion_id: str) -> bool:
        return criterion_id in self.not_considered

    def channel_metric(self, metric: str, channel: str) -> Any:
        return self.channel_metrics.get(metric, {}).get(channel)

    @property
    def has_video_channel(self) -> bool:
        return any(channel in VIDEO_CHANNELS for channel in self.channels)

    # ------------------------------------------------------------------
    # Derived snapshots
    # ------------------------------------------------------------------

    def with_values(self, **updates: AnswerValue) -> "AnswerSet":
        """Return a new AnswerSet with the given criterion values set."""
        values = dict(self.values)
        values.update(updates)
        return self.model_copy(update={"values": values})

    def without(self, *criterion_ids: str) -> "AnswerSet":
        values = {k: v for k, v in self.values.items() if k not in criterion_ids}
        return self.model_copy(update={"values": values})

    def to_form(self) -> dict[str, Any]:
        """Flatten back to the questionnaire form convention."""
        form: dict[str, Any] = {k: (list(v) if isinstance(v, list) else v) for k, v in self.values.items()}
        for criterion_id in sorted(self.not_considered):
            form[f"{criterion_id}_nc"] = True
        for metric, per_channel in self.channel_metrics.items():
            for channel, raw in per_channel.items():
                form[f"{metric}_{channel}"] = raw
        form[CHANNEL_LIST_KEYS[0]] = list(self.channels)
        return form
