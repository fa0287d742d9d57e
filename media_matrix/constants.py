"""
Global constants for the scoring engine.

Centralizes score bounds, labels, tolerances and the form-key conventions used
throughout the engine for easier maintenance and tuning.
"""

# Score bounds
MIN_SCORE = 0.0
MAX_SCORE = 3.0

# Weight resolution
FULL_BUDGET_THRESHOLD = 0.99  # Specified weights at/above this sum own the whole budget
WEIGHT_SUM_TOLERANCE = 0.01  # Allowed overshoot when validating authored weight tables

# Score labels surfaced to UI/export collaborators
LABEL_NOT_CONSIDERED = "not considered"
LABEL_NOT_AVAILABLE = "N/A"
LABEL_NO_VIDEO_CHANNEL = "N/A (no video channel selected)"

# Answer form key conventions
NOT_CONSIDERED_SUFFIXES = ("_nc", "_notConsidered")  # "<criterionId>_nc" -> bool
CHANNEL_LIST_KEYS = ("social_followers_channels", "social_channels")

# Social channels
SOCIAL_MEDIA_CHANNELS = (
    "Instagram",
    "Facebook",
    "TikTok",
    "YouTube",
    "X (Twitter)",
    "LinkedIn",
    "Kwai",
)
VIDEO_CHANNELS = frozenset({"YouTube", "TikTok", "Kwai"})

# Per-channel metrics ("<metric>_<Channel>" form keys)
COUNT_CHANNEL_METRICS = ("followers", "video_views", "insertions")
PERCENT_CHANNEL_METRICS = ("avg_reach", "demographic_rs_social")
CHANNEL_METRICS = COUNT_CHANNEL_METRICS + PERCENT_CHANNEL_METRICS

# Consolidated criterion inputs written by the social consolidator
SOCIAL_FOLLOWERS_ID = "social_followers"
AVG_REACH_ID = "avg_reach"
SOCIAL_REGIONAL_AUDIENCE_ID = "demographic_rs_social"
VIDEO_VIEWS_ID = "video_views"

# Matching resolution per numeric unit (authored range bounds use this step)
UNIT_RESOLUTION = {
    "count": 1.0,
    "currency": 0.01,
    "percentage": 0.01,
}

# Total score bands
STRONG_SCORE_THRESHOLD = 2.25
MODERATE_SCORE_THRESHOLD = 1.5

# Strategy view weight tiers (percent of total budget)
HIGH_IMPACT_WEIGHT_PCT = 8.0
MEDIUM_IMPACT_WEIGHT_PCT = 3.0

# TV delivery
DAYS_PER_MONTH = 30
WEEKDAYS = 5
WEEK_DAYS = 7
