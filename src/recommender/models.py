from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


def assume_utc(value: datetime) -> datetime:
    # Stored timestamps without an offset are UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Role(str, Enum):
    CLIENT = "CLIENT"
    PRO = "PRO"
    ADMIN = "ADMIN"


class Reason(str, Enum):
    """Why a candidate was recommended.

    Reasons are a closed set so diversification can compare them exactly.
    """

    CONTENT_MATCH = "ContentMatch"
    SKILL_MATCH = "SkillMatch"
    HIGH_ENGAGEMENT = "HighEngagement"
    NEARBY_LOCATION = "NearbyLocation"
    RECENT_ACTIVITY = "RecentActivity"

    @property
    def label(self) -> str:
        return _REASON_LABELS[self]


_REASON_LABELS = {
    Reason.CONTENT_MATCH: "Similar content interests",
    Reason.SKILL_MATCH: "Complementary skills",
    Reason.HIGH_ENGAGEMENT: "High engagement profile",
    Reason.NEARBY_LOCATION: "Nearby location",
    Reason.RECENT_ACTIVITY: "Recent activity",
}


class PostSummary(BaseModel):
    """The slice of a post the scorers look at."""

    model_config = ConfigDict(frozen=True)

    hashtags: list[str] = Field(default_factory=list)
    created_at: datetime = Field(..., description="Publication timestamp (timezone-aware)")
    likes_count: int = Field(0, ge=0)

    @field_validator("created_at")
    @classmethod
    def created_at_utc(cls, value: datetime) -> datetime:
        return assume_utc(value)


class UserProfile(BaseModel):
    """Read-only snapshot of a user, as supplied by the profile repository."""

    model_config = ConfigDict(frozen=True)

    id: str
    username: str = ""
    role: Role = Role.CLIENT
    specialties: list[str] = Field(default_factory=list)
    location: str | None = Field(
        None, description="Comma-delimited region hierarchy, e.g. 'Lyon, France'"
    )
    bio: str | None = None
    posts: list[PostSummary] = Field(
        default_factory=list, description="Recent posts, most recent first"
    )
    followers_count: int = Field(0, ge=0)
    following_count: int = Field(0, ge=0)


class Interaction(BaseModel):
    model_config = ConfigDict(frozen=True)

    target_user_id: str
    interaction_type: str = "view"


class AuthorSummary(BaseModel):
    """Author fields embedded in a feed post."""

    model_config = ConfigDict(frozen=True)

    id: str
    username: str = ""
    avatar: str | None = None
    role: Role | None = None
    verified: bool = False
    business_name: str | None = None
    specialties: list[str] = Field(default_factory=list)
    hourly_rate: float | None = None


class FeedPost(BaseModel):
    """A published post as returned to the feed, with per-requester fields."""

    model_config = ConfigDict(frozen=True)

    id: str
    author_id: str
    author: AuthorSummary | None = None
    content: str | None = None
    hashtags: list[str] = Field(default_factory=list)
    created_at: datetime
    likes_count: int = Field(0, ge=0)
    comments_count: int = Field(0, ge=0)
    liked: bool = Field(False, description="Whether the requesting user liked this post")

    @field_validator("created_at")
    @classmethod
    def created_at_utc(cls, value: datetime) -> datetime:
        return assume_utc(value)


class RecommendationScore(BaseModel):
    """Score of one candidate for one requester.

    ``score`` is the weighted aggregate used for ranking; the other numeric
    fields are sub-scores kept for introspection.
    """

    model_config = ConfigDict(frozen=True)

    user_id: str
    score: float = Field(..., ge=0.0, le=1.0)
    reasons: list[Reason] = Field(default_factory=list)
    similarity: float = Field(..., ge=0.0, le=1.0)
    engagement: float = Field(..., ge=0.0, le=1.0)
    freshness: float = Field(..., ge=0.0, le=1.0)
    location: float | None = Field(
        None, ge=0.0, le=1.0, description="Set only when location scoring was requested"
    )


class RecommendationPage(BaseModel):
    """One page of user recommendations plus summary statistics."""

    recommendations: list[RecommendationScore]
    page: int
    limit: int
    has_more: bool
    total: int
    avg_similarity: float
