"""
Social Consolidator - collapses per-channel social metrics into the
consolidated answers scored by the social criteria.

  social_followers       sum of followers over the selected channels
  avg_reach              follower-weighted mean of reach %
  demographic_rs_social  follower-weighted mean of regional audience %
  video_views            mean views over selected video channels with views > 0

Channels with 0 followers contribute nothing to the weighted means, and an
invalid metric counts as 0. Consolidation never raises.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Optional

from media_matrix.constants import (
    AVG_REACH_ID,
    SOCIAL_FOLLOWERS_ID,
    SOCIAL_MEDIA_CHANNELS,
    SOCIAL_REGIONAL_AUDIENCE_ID,
    VIDEO_CHANNELS,
    VIDEO_VIEWS_ID,
)
from media_matrix.schemas.answers import AnswerSet
from media_matrix.utils.number_parsing import parse_count, parse_decimal

logger = logging.getLogger(__name__)

CONSOLIDATED_CRITERIA = (SOCIAL_FOLLOWERS_ID, AVG_REACH_ID, SOCIAL_REGIONAL_AUDIENCE_ID, VIDEO_VIEWS_ID)

ChannelMetrics = Mapping[str, Mapping[str, Any]]


@dataclass(frozen=True)
class SocialAggregates:
    """Consolidated social metrics across the selected channels."""

    total_followers: int = 0
    average_reach: float = 0.0
    average_regional_audience: float = 0.0
    average_video_views: float = 0.0
    total_insertions: int = 0
    has_video_channel: bool = False
    channel_count: int = 0


def _count(metrics: ChannelMetrics, metric: str, channel: str) -> int:
    value = parse_count(metrics.get(metric, {}).get(channel))
    return value if value is not None and value > 0 else 0


def _percent(metrics: ChannelMetrics, metric: str, channel: str) -> float:
    value = parse_decimal(metrics.get(metric, {}).get(channel))
    return value if value is not None else 0.0


def _weighted_mean(pairs: list[tuple[float, int]]) -> float:
    weight = sum(followers for _, followers in pairs if followers > 0)
    if weight <= 0:
        return 0.0
    return sum(value * followers for value, followers in pairs if followers > 0) / weight


def consolidate_channels(channels: Iterable[str], channel_metrics: Optional[ChannelMetrics] = None) -> SocialAggregates:
    """Aggregate raw per-channel metrics for the selected channels.

    Args:
        channels: Selected channel names; unknown names and duplicates are ignored
        channel_metrics: metric -> channel -> raw value
    """
    metrics = channel_metrics or {}
    selected = [c for c in dict.fromkeys(channels) if c in SOCIAL_MEDIA_CHANNELS]
    if not selected:
        return SocialAggregates()

    followers = {channel: _count(metrics, "followers", channel) for channel in selected}
    reach = [(_percent(metrics, "avg_reach", c), followers[c]) for c in selected]
    regional = [(_percent(metrics, "demographic_rs_social", c), followers[c]) for c in selected]

    video_channels = [c for c in selected if c in VIDEO_CHANNELS]
    views = [v for v in (_count(metrics, "video_views", c) for c in video_channels) if v > 0]

    aggregates = SocialAggregates(
        total_followers=sum(followers.values()),
        average_reach=_weighted_mean(reach),
        average_regional_audience=_weighted_mean(regional),
        average_video_views=sum(views) / len(views) if views else 0.0,
        total_insertions=sum(_count(metrics, "insertions", c) for c in selected),
        has_video_channel=bool(video_channels),
        channel_count=len(selected),
    )
    logger.debug(
        f"Consolidated {len(selected)} channels [followers={aggregates.total_followers}, "
        f"reach={aggregates.average_reach:.2f}, video={aggregates.has_video_channel}]"
    )
    return aggregates


def consolidate(answers: AnswerSet) -> SocialAggregates:
    """Aggregate the social metrics carried by an AnswerSet."""
    return consolidate_channels(answers.channels, answers.channel_metrics)


def apply_to_answers(answers: AnswerSet, aggregates: SocialAggregates) -> AnswerSet:
    """Write consolidated values into the answer set for scoring.

    video_views is only set when a video channel is selected; otherwise any
    stale value is removed so the criterion cannot be scored from it.
    """
    updated = answers.with_values(
        **{
            SOCIAL_FOLLOWERS_ID: aggregates.total_followers,
            AVG_REACH_ID: aggregates.average_reach,
            SOCIAL_REGIONAL_AUDIENCE_ID: aggregates.average_regional_audience,
        }
    )
    if aggregates.has_video_channel:
        return updated.with_values(**{VIDEO_VIEWS_ID: aggregates.average_video_views})
    return updated.without(VIDEO_VIEWS_ID)
