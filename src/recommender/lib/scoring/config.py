"""Scoring tunables.

Every constant used by the scorers lives here as a module-level default and
is mirrored by a field of :class:`ScoringConfig`, so callers can override any
of them per engine instance.
"""

import math

from pydantic import BaseModel, ConfigDict, Field, model_validator

# ---------------------------------------------------------------------------
# Signal weights (must sum to 1.0)
# ---------------------------------------------------------------------------

CONTENT_WEIGHT = 0.30
SKILL_WEIGHT = 0.25
ENGAGEMENT_WEIGHT = 0.20
LOCATION_WEIGHT = 0.15
FRESHNESS_WEIGHT = 0.10

# ---------------------------------------------------------------------------
# Reason thresholds (explanation only, not used for ranking)
# ---------------------------------------------------------------------------

CONTENT_REASON_THRESHOLD = 0.3
SKILL_REASON_THRESHOLD = 0.2
ENGAGEMENT_REASON_THRESHOLD = 0.6
LOCATION_REASON_THRESHOLD = 0.5
FRESHNESS_REASON_THRESHOLD = 0.7

# ---------------------------------------------------------------------------
# Content similarity
# ---------------------------------------------------------------------------

JACCARD_SHARE = 0.6
WEIGHTED_HASHTAG_SHARE = 0.4

# ---------------------------------------------------------------------------
# Skill similarity
# ---------------------------------------------------------------------------

# CLIENT looking at a PRO offering a related service.
RELATED_PRO_SKILL_SCORE = 0.8
# Any PRO is a plausible match for a client, hence the non-zero floor.
UNRELATED_PRO_SKILL_SCORE = 0.2
COMPLEMENTARY_SKILL_SHARE = 0.7
OVERLAP_SKILL_SHARE = 0.3

# Illustrative adjacency table; lookups are symmetric.
SKILL_RELATIONS: dict[str, list[str]] = {
    "photography": ["videography", "editing", "visual design"],
    "videography": ["photography", "editing", "motion graphics"],
    "web design": ["development", "ui/ux", "frontend"],
    "marketing": ["content creation", "social media", "branding"],
    "music": ["audio production", "sound design", "mixing"],
}

# ---------------------------------------------------------------------------
# Engagement
# ---------------------------------------------------------------------------

ENGAGEMENT_WINDOW_DAYS = 30
# Score for users with no posts in the window, so they aren't fully excluded.
INACTIVE_ENGAGEMENT_SCORE = 0.1
LIKES_NORMALISER = 50
POST_FREQUENCY_MULTIPLIER = 10
SOCIAL_NORMALISER = 100
AVG_LIKES_SHARE = 0.4
POST_FREQUENCY_SHARE = 0.3
SOCIAL_SHARE = 0.3

# ---------------------------------------------------------------------------
# Freshness
# ---------------------------------------------------------------------------

FRESHNESS_WINDOW_DAYS = 7
# Number of posts in the window at which freshness saturates.
FRESHNESS_TARGET_POSTS = 5


class ScoringConfig(BaseModel):
    """Overridable scoring parameters, defaulting to the module constants.

    Unknown fields are rejected so a misspelt override fails loudly.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    content_weight: float = Field(CONTENT_WEIGHT, ge=0.0)
    skill_weight: float = Field(SKILL_WEIGHT, ge=0.0)
    engagement_weight: float = Field(ENGAGEMENT_WEIGHT, ge=0.0)
    location_weight: float = Field(LOCATION_WEIGHT, ge=0.0)
    freshness_weight: float = Field(FRESHNESS_WEIGHT, ge=0.0)

    content_reason_threshold: float = CONTENT_REASON_THRESHOLD
    skill_reason_threshold: float = SKILL_REASON_THRESHOLD
    engagement_reason_threshold: float = ENGAGEMENT_REASON_THRESHOLD
    location_reason_threshold: float = LOCATION_REASON_THRESHOLD
    freshness_reason_threshold: float = FRESHNESS_REASON_THRESHOLD

    jaccard_share: float = Field(JACCARD_SHARE, ge=0.0, le=1.0)
    weighted_hashtag_share: float = Field(WEIGHTED_HASHTAG_SHARE, ge=0.0, le=1.0)

    related_pro_skill_score: float = Field(RELATED_PRO_SKILL_SCORE, ge=0.0, le=1.0)
    unrelated_pro_skill_score: float = Field(UNRELATED_PRO_SKILL_SCORE, ge=0.0, le=1.0)
    complementary_skill_share: float = Field(COMPLEMENTARY_SKILL_SHARE, ge=0.0, le=1.0)
    overlap_skill_share: float = Field(OVERLAP_SKILL_SHARE, ge=0.0, le=1.0)
    skill_relations: dict[str, list[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in SKILL_RELATIONS.items()}
    )

    engagement_window_days: int = Field(ENGAGEMENT_WINDOW_DAYS, gt=0)
    inactive_engagement_score: float = Field(INACTIVE_ENGAGEMENT_SCORE, ge=0.0, le=1.0)
    likes_normaliser: float = Field(LIKES_NORMALISER, gt=0)
    post_frequency_multiplier: float = Field(POST_FREQUENCY_MULTIPLIER, gt=0)
    social_normaliser: float = Field(SOCIAL_NORMALISER, gt=0)
    avg_likes_share: float = Field(AVG_LIKES_SHARE, ge=0.0, le=1.0)
    post_frequency_share: float = Field(POST_FREQUENCY_SHARE, ge=0.0, le=1.0)
    social_share: float = Field(SOCIAL_SHARE, ge=0.0, le=1.0)

    freshness_window_days: int = Field(FRESHNESS_WINDOW_DAYS, gt=0)
    freshness_target_posts: int = Field(FRESHNESS_TARGET_POSTS, gt=0)

    @model_validator(mode="after")
    def _weights_sum_to_one(self) -> "ScoringConfig":
        total = (
            self.content_weight
            + self.skill_weight
            + self.engagement_weight
            + self.location_weight
            + self.freshness_weight
        )
        if not math.isclose(total, 1.0, abs_tol=1e-9):
            raise ValueError(f"signal weights must sum to 1.0, got {total}")
        return self


DEFAULT_CONFIG = ScoringConfig()
