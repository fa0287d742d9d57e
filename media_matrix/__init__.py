"""Scoring and weighting engine for media-buy proposal evaluation."""

__version__ = "1.0.0"
