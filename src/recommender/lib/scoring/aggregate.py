"""Combine per-signal scores into a single :class:`RecommendationScore`."""

from datetime import datetime

from ...models import Reason, RecommendationScore, UserProfile
from .config import DEFAULT_CONFIG, ScoringConfig
from .similarity import (
    clamp,
    content_similarity,
    engagement_score,
    freshness_score,
    location_score,
    resolve_now,
    skill_similarity,
)


def calculate_score(
    requester: UserProfile,
    candidate: UserProfile,
    *,
    include_location: bool = True,
    boost_recent: bool = True,
    now: datetime | None = None,
    config: ScoringConfig = DEFAULT_CONFIG,
) -> RecommendationScore:
    """Score *candidate* for *requester*.

    The aggregate is a convex combination of the five signals.  A disabled
    signal (location when not requested or unknown, freshness when
    ``boost_recent`` is off) contributes 0 rather than being re-weighted.
    """
    now = resolve_now(now)
    reasons: list[Reason] = []

    content = clamp(content_similarity(requester, candidate, config))
    if content > config.content_reason_threshold:
        reasons.append(Reason.CONTENT_MATCH)

    skills = clamp(skill_similarity(requester, candidate, config))
    if skills > config.skill_reason_threshold:
        reasons.append(Reason.SKILL_MATCH)

    engagement = clamp(engagement_score(candidate, now, config))
    if engagement > config.engagement_reason_threshold:
        reasons.append(Reason.HIGH_ENGAGEMENT)

    location = 0.0
    if include_location and requester.location and candidate.location:
        location = clamp(location_score(requester.location, candidate.location))
        if location > config.location_reason_threshold:
            reasons.append(Reason.NEARBY_LOCATION)

    freshness = 0.0
    if boost_recent:
        freshness = clamp(freshness_score(candidate, now, config))
        if freshness > config.freshness_reason_threshold:
            reasons.append(Reason.RECENT_ACTIVITY)

    total = (
        content * config.content_weight
        + skills * config.skill_weight
        + engagement * config.engagement_weight
        + location * config.location_weight
        + freshness * config.freshness_weight
    )

    return RecommendationScore(
        user_id=candidate.id,
        # Weights may sum to 1.0 plus float noise.
        score=clamp(total),
        reasons=reasons,
        similarity=(content + skills) / 2,
        engagement=engagement,
        freshness=freshness,
        location=location if include_location else None,
    )
