"""Multi-signal scoring of a candidate user against a requester."""

from .aggregate import calculate_score
from .config import DEFAULT_CONFIG, ScoringConfig
from .similarity import (
    content_similarity,
    engagement_score,
    freshness_score,
    location_score,
    resolve_now,
    skill_similarity,
)

__all__ = [
    "DEFAULT_CONFIG",
    "ScoringConfig",
    "calculate_score",
    "content_similarity",
    "engagement_score",
    "freshness_score",
    "location_score",
    "resolve_now",
    "skill_similarity",
]
