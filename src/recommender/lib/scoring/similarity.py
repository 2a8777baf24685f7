"""Per-signal scorers.

Each scorer is a pure function over :class:`UserProfile` snapshots returning
a float in ``[0, 1]``.  Scorers that look at post recency take an explicit
``now`` so a whole request is scored against the same instant.
"""

from collections import Counter
from datetime import datetime, timedelta, timezone

from ...models import PostSummary, Role, UserProfile, assume_utc
from . import config as tunables
from .config import DEFAULT_CONFIG, ScoringConfig


def clamp(value: float) -> float:
    return max(0.0, min(value, 1.0))


def resolve_now(now: datetime | None = None) -> datetime:
    """Return *now* as an aware datetime, defaulting to the current UTC time.

    A naive *now* is taken to be UTC, like stored timestamps.
    """
    if now is None:
        return datetime.now(timezone.utc)
    return assume_utc(now)


def posts_within(
    posts: list[PostSummary], days: int, now: datetime | None = None
) -> list[PostSummary]:
    """Return the posts created less than *days* days before *now*."""
    now = resolve_now(now)
    window = timedelta(days=days)
    return [p for p in posts if now - p.created_at < window]


# ---------------------------------------------------------------------------
# Content similarity
# ---------------------------------------------------------------------------

def extract_hashtags(user: UserProfile) -> set[str]:
    """De-duplicated hashtags used across the user's posts."""
    return {tag for post in user.posts for tag in post.hashtags}


def hashtag_frequency(user: UserProfile) -> Counter:
    return Counter(tag for post in user.posts for tag in post.hashtags)


def jaccard_similarity(a: set[str], b: set[str]) -> float:
    union = a | b
    if not union:
        return 0.0
    return len(a & b) / len(union)


def weighted_hashtag_similarity(user1: UserProfile, user2: UserProfile) -> float:
    """Histogram overlap: sum of per-tag minimum counts over sum of maxima."""
    freq1 = hashtag_frequency(user1)
    freq2 = hashtag_frequency(user2)

    shared = 0
    possible = 0
    for tag in freq1.keys() | freq2.keys():
        shared += min(freq1[tag], freq2[tag])
        possible += max(freq1[tag], freq2[tag])

    return shared / possible if possible > 0 else 0.0


def content_similarity(
    user1: UserProfile,
    user2: UserProfile,
    config: ScoringConfig = DEFAULT_CONFIG,
) -> float:
    tags1 = extract_hashtags(user1)
    tags2 = extract_hashtags(user2)
    if not tags1 or not tags2:
        return 0.0

    jaccard = jaccard_similarity(tags1, tags2)
    weighted = weighted_hashtag_similarity(user1, user2)
    return clamp(
        jaccard * config.jaccard_share + weighted * config.weighted_hashtag_share
    )


# ---------------------------------------------------------------------------
# Skill similarity
# ---------------------------------------------------------------------------

def are_skills_related(
    skill1: str,
    skill2: str,
    relations: dict[str, list[str]] | None = None,
) -> bool:
    """Two lower-cased skills are related if one contains the other or the
    relation table links them (in either direction)."""
    if relations is None:
        relations = tunables.SKILL_RELATIONS
    return (
        skill2 in relations.get(skill1, ())
        or skill1 in relations.get(skill2, ())
        or skill2 in skill1
        or skill1 in skill2
    )


def complementary_skills(
    skills1: list[str],
    skills2: list[str],
    relations: dict[str, list[str]] | None = None,
) -> float:
    related_pairs = sum(
        1
        for s1 in skills1
        for s2 in skills2
        if are_skills_related(s1, s2, relations)
    )
    return min(related_pairs / max(len(skills1), len(skills2)), 1.0)


def skill_similarity(
    requester: UserProfile,
    candidate: UserProfile,
    config: ScoringConfig = DEFAULT_CONFIG,
) -> float:
    """Role-aware skill match.

    CLIENT→PRO looks for a service the client needs; PRO↔PRO mixes
    complementary and identical skills; every other pairing scores 0.
    """
    if not requester.specialties or not candidate.specialties:
        return 0.0

    skills1 = [s.lower() for s in requester.specialties]
    skills2 = [s.lower() for s in candidate.specialties]
    relations = config.skill_relations

    if requester.role == Role.CLIENT and candidate.role == Role.PRO:
        if any(are_skills_related(need, offer, relations) for offer in skills2 for need in skills1):
            return config.related_pro_skill_score
        return config.unrelated_pro_skill_score

    if requester.role == Role.PRO and candidate.role == Role.PRO:
        complementary = complementary_skills(skills1, skills2, relations)
        candidate_skills = set(skills2)
        overlap = sum(1 for s in skills1 if s in candidate_skills)
        overlap_score = overlap / max(len(skills1), len(skills2))
        return clamp(
            complementary * config.complementary_skill_share
            + overlap_score * config.overlap_skill_share
        )

    return 0.0


# ---------------------------------------------------------------------------
# Engagement, location, freshness
# ---------------------------------------------------------------------------

def engagement_score(
    user: UserProfile,
    now: datetime | None = None,
    config: ScoringConfig = DEFAULT_CONFIG,
) -> float:
    recent = posts_within(user.posts, config.engagement_window_days, now)
    if not recent:
        return config.inactive_engagement_score

    avg_likes = sum(p.likes_count for p in recent) / len(recent)
    post_frequency = len(recent) / config.engagement_window_days
    social = min(
        (user.followers_count + user.following_count) / config.social_normaliser, 1.0
    )

    return min(
        min(avg_likes / config.likes_normaliser, 1.0) * config.avg_likes_share
        + min(post_frequency * config.post_frequency_multiplier, 1.0)
        * config.post_frequency_share
        + social * config.social_share,
        1.0,
    )


def location_score(location1: str | None, location2: str | None) -> float:
    """Crude geographic proximity from free-text locations.

    No geocoding: parts of the comma-delimited hierarchy are compared by
    substring.
    """
    loc1 = (location1 or "").strip().lower()
    loc2 = (location2 or "").strip().lower()
    if not loc1 or not loc2:
        return 0.0
    if loc1 == loc2:
        return 1.0

    parts1 = [p.strip() for p in loc1.split(",") if p.strip()]
    parts2 = [p.strip() for p in loc2.split(",") if p.strip()]
    if not parts1 or not parts2:
        return 0.0

    common = [
        part for part in parts1
        if any(other in part or part in other for other in parts2)
    ]
    return min(len(common) / max(len(parts1), len(parts2)), 1.0)


def freshness_score(
    user: UserProfile,
    now: datetime | None = None,
    config: ScoringConfig = DEFAULT_CONFIG,
) -> float:
    recent = posts_within(user.posts, config.freshness_window_days, now)
    return min(len(recent) / config.freshness_target_posts, 1.0)
