"""Elasticsearch-backed profile repository.

Indices used (all read-only):

* ``users`` – one document per user (``id``, ``username``, ``role``,
  ``status``, ``specialties``, ``location``, ``followers_count``, ...).
* ``posts`` – one document per post (``id``, ``author_id``, ``status``,
  ``hashtags``, ``created_at``, ``likes_count``, ``comments_count``).
* ``interactions`` – ``user_id`` → ``target_user_id`` events.
* ``likes`` – ``user_id`` liked ``post_id``.

Each user's recent posts are fetched for a whole batch of users in one
request with a ``terms`` aggregation on ``author_id`` and a ``top_hits``
sub-aggregation sorted by ``created_at``.
"""

import asyncio
import logging
from datetime import datetime

from ...models import AuthorSummary, FeedPost, Interaction, PostSummary, UserProfile
from ..elasticsearch import iter_hit_sources, unwrap_es_response
from .base import (
    CANDIDATE_POOL_SIZE,
    CANDIDATE_RECENT_POSTS,
    INTERACTION_HISTORY_LIMIT,
    REQUESTER_RECENT_POSTS,
    ProfileRepository,
)

logger = logging.getLogger(__name__)

USERS_INDEX = "users"
POSTS_INDEX = "posts"
INTERACTIONS_INDEX = "interactions"
LIKES_INDEX = "likes"

ACTIVE_STATUS = "ACTIVE"
PUBLISHED_STATUS = "PUBLISHED"


# ---------------------------------------------------------------------------
# Query helpers
# ---------------------------------------------------------------------------

async def fetch_recent_posts(
    es,
    author_ids: list[str],
    per_author: int,
) -> dict[str, list[PostSummary]]:
    """Return up to *per_author* most recent posts for each author.

    Authors without posts are absent from the result.
    """
    if not author_ids:
        return {}

    query = {"bool": {"filter": [{"terms": {"author_id": author_ids}}]}}
    aggs = {
        "by_author": {
            "terms": {"field": "author_id", "size": len(author_ids)},
            "aggs": {
                "recent": {
                    "top_hits": {
                        "size": per_author,
                        "sort": [{"created_at": "desc"}],
                        "_source": ["hashtags", "created_at", "likes_count"],
                    }
                }
            },
        }
    }

    resp = await es.search(index=POSTS_INDEX, query=query, aggs=aggs, size=0)
    data = unwrap_es_response(resp)

    posts: dict[str, list[PostSummary]] = {}
    buckets = data.get("aggregations", {}).get("by_author", {}).get("buckets", [])
    for bucket in buckets:
        author_id = bucket.get("key")
        if author_id is None:
            continue
        recent = bucket.get("recent") or {}
        posts[author_id] = [
            PostSummary(
                hashtags=src.get("hashtags") or [],
                created_at=src["created_at"],
                likes_count=src.get("likes_count") or 0,
            )
            for src in iter_hit_sources(recent)
            if src.get("created_at")
        ]
    return posts


def profile_from_source(src: dict, posts: list[PostSummary]) -> UserProfile:
    return UserProfile(
        id=src["id"],
        username=src.get("username") or "",
        role=src.get("role") or "CLIENT",
        specialties=src.get("specialties") or [],
        location=src.get("location") or None,
        bio=src.get("bio") or None,
        posts=posts,
        followers_count=src.get("followers_count") or 0,
        following_count=src.get("following_count") or 0,
    )


def author_from_source(src: dict) -> AuthorSummary:
    return AuthorSummary(
        id=src["id"],
        username=src.get("username") or "",
        avatar=src.get("avatar"),
        role=src.get("role"),
        verified=bool(src.get("verified")),
        business_name=src.get("business_name"),
        specialties=src.get("specialties") or [],
        hourly_rate=src.get("hourly_rate"),
    )


def build_candidate_posts_query(
    user_id: str,
    author_ids: list[str],
    interacted_ids: list[str],
    trending_since: datetime | None,
    trending_min_likes: int,
) -> dict | None:
    """Build the feed eligibility query, or ``None`` if no clause applies."""
    should: list[dict] = []
    if author_ids:
        should.append({"terms": {"author_id": author_ids}})
    if interacted_ids:
        should.append({"terms": {"author_id": interacted_ids}})
    if trending_since is not None:
        should.append({
            "bool": {
                "filter": [
                    {"range": {"created_at": {"gte": trending_since.isoformat()}}},
                    {"range": {"likes_count": {"gte": trending_min_likes}}},
                ]
            }
        })

    if not should:
        return None

    return {
        "bool": {
            "filter": [{"term": {"status": PUBLISHED_STATUS}}],
            "must_not": [{"term": {"author_id": user_id}}],
            "should": should,
            "minimum_should_match": 1,
        }
    }


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------

class ElasticsearchProfileRepository(ProfileRepository):
    """:class:`ProfileRepository` reading from an ``AsyncElasticsearch`` client."""

    def __init__(self, es):
        self.es = es

    async def get_user_profile(self, user_id: str) -> UserProfile | None:
        resp = await self.es.search(
            index=USERS_INDEX,
            query={"term": {"id": user_id}},
            size=1,
        )
        sources = list(iter_hit_sources(unwrap_es_response(resp)))
        if not sources:
            logger.info("No profile found for user %s", user_id)
            return None
        if sources[0].get("status") != ACTIVE_STATUS:
            logger.info(
                "User %s is not active (status=%s)", user_id, sources[0].get("status")
            )
            return None

        posts = await fetch_recent_posts(self.es, [user_id], REQUESTER_RECENT_POSTS)
        return profile_from_source(sources[0], posts.get(user_id, []))

    async def get_candidate_users(self, exclude_user_id: str) -> list[UserProfile]:
        query = {
            "bool": {
                "filter": [{"term": {"status": ACTIVE_STATUS}}],
                "must_not": [{"term": {"id": exclude_user_id}}],
            }
        }
        resp = await self.es.search(index=USERS_INDEX, query=query, size=CANDIDATE_POOL_SIZE)
        sources = [src for src in iter_hit_sources(unwrap_es_response(resp)) if src.get("id")]
        if not sources:
            return []

        posts = await fetch_recent_posts(
            self.es, [src["id"] for src in sources], CANDIDATE_RECENT_POSTS
        )
        return [profile_from_source(src, posts.get(src["id"], [])) for src in sources]

    async def get_recent_interactions(
        self,
        user_id: str,
        limit: int = INTERACTION_HISTORY_LIMIT,
    ) -> list[Interaction]:
        resp = await self.es.search(
            index=INTERACTIONS_INDEX,
            query={"bool": {"filter": [{"term": {"user_id": user_id}}]}},
            size=limit,
            sort=[{"created_at": "desc"}],
            _source=["target_user_id", "interaction_type"],
        )
        interactions: list[Interaction] = []
        for src in iter_hit_sources(unwrap_es_response(resp)):
            target = src.get("target_user_id")
            if target:
                interactions.append(
                    Interaction(
                        target_user_id=target,
                        interaction_type=src.get("interaction_type") or "view",
                    )
                )
        return interactions

    async def get_candidate_posts(
        self,
        user_id: str,
        *,
        author_ids: list[str],
        interacted_ids: list[str],
        trending_since: datetime | None,
        trending_min_likes: int,
        limit: int,
    ) -> list[FeedPost]:
        query = build_candidate_posts_query(
            user_id, author_ids, interacted_ids, trending_since, trending_min_likes
        )
        if query is None or limit <= 0:
            return []

        resp = await self.es.search(
            index=POSTS_INDEX,
            query=query,
            size=limit,
            sort=[{"created_at": "desc"}, {"likes_count": "desc"}],
        )
        sources = [
            src for src in iter_hit_sources(unwrap_es_response(resp))
            if src.get("id") and src.get("author_id") and src.get("created_at")
        ]
        if not sources:
            return []

        authors, liked = await asyncio.gather(
            self._fetch_authors({src["author_id"] for src in sources}),
            self._fetch_liked_post_ids(user_id, [src["id"] for src in sources]),
        )

        return [
            FeedPost(
                id=src["id"],
                author_id=src["author_id"],
                author=authors.get(src["author_id"]),
                content=src.get("content"),
                hashtags=src.get("hashtags") or [],
                created_at=src["created_at"],
                likes_count=src.get("likes_count") or 0,
                comments_count=src.get("comments_count") or 0,
                liked=src["id"] in liked,
            )
            for src in sources
        ]

    async def _fetch_authors(self, author_ids: set[str]) -> dict[str, AuthorSummary]:
        ids = sorted(author_ids)
        resp = await self.es.search(
            index=USERS_INDEX,
            query={"terms": {"id": ids}},
            size=len(ids),
        )
        return {
            src["id"]: author_from_source(src)
            for src in iter_hit_sources(unwrap_es_response(resp))
            if src.get("id")
        }

    async def _fetch_liked_post_ids(self, user_id: str, post_ids: list[str]) -> set[str]:
        query = {
            "bool": {
                "filter": [
                    {"term": {"user_id": user_id}},
                    {"terms": {"post_id": post_ids}},
                ]
            }
        }
        resp = await self.es.search(
            index=LIKES_INDEX,
            query=query,
            size=len(post_ids),
            _source=["post_id"],
        )
        return {
            src["post_id"]
            for src in iter_hit_sources(unwrap_es_response(resp))
            if src.get("post_id")
        }
