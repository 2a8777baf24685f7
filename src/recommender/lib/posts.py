"""Feed recommendations built on top of user recommendations.

Pipeline:
    recommended authors + interacted-with authors + trending posts →
    candidate posts → author-score / novelty ranking → diversification
"""

import asyncio
import logging
from datetime import datetime, timedelta

from ..models import FeedPost
from .diversify import diversify_posts
from .engine import AIRecommendationEngine
from .profiles import INTERACTION_HISTORY_LIMIT
from .scoring import resolve_now

logger = logging.getLogger(__name__)

# Author pool requested from the engine, as a multiple of the post limit.
AUTHOR_POOL_MULTIPLIER = 2
MAX_AUTHOR_POOL = 40
# Over-fetch so diversification has something to choose from.
POST_FETCH_MULTIPLIER = 3

TRENDING_WINDOW_DAYS = 7
TRENDING_MIN_LIKES = 10


async def get_ai_recommended_posts(
    engine: AIRecommendationEngine,
    user_id: str,
    *,
    limit: int = 20,
    include_following: bool = True,
    diversify: bool = True,
    boost_trending: bool = True,
    now: datetime | None = None,
) -> list[FeedPost]:
    """Return up to *limit* feed posts for *user_id*.

    Eligible posts come from recommended authors, authors the user
    interacted with (``include_following``) and recent popular posts
    (``boost_trending``).  The user's own posts are never returned.
    """
    if limit <= 0:
        return []
    now = resolve_now(now)

    repository = engine.repository
    recommendations, interactions = await asyncio.gather(
        engine.get_ai_recommendations(
            user_id,
            limit=min(limit * AUTHOR_POOL_MULTIPLIER, MAX_AUTHOR_POOL),
            diversify=True,
            now=now,
        ),
        repository.get_recent_interactions(user_id, limit=INTERACTION_HISTORY_LIMIT),
    )
    author_scores = {rec.user_id: rec.score for rec in recommendations}
    interacted_ids = list(dict.fromkeys(i.target_user_id for i in interactions))

    posts = await repository.get_candidate_posts(
        user_id,
        author_ids=list(author_scores),
        interacted_ids=interacted_ids if include_following else [],
        trending_since=now - timedelta(days=TRENDING_WINDOW_DAYS) if boost_trending else None,
        trending_min_likes=TRENDING_MIN_LIKES,
        limit=limit * POST_FETCH_MULTIPLIER,
    )
    # Own posts are never eligible.
    posts = [p for p in posts if p.author_id != user_id]

    logger.debug(
        "Feed for user %s: %d recommended authors, %d interacted authors, %d candidate posts",
        user_id,
        len(author_scores),
        len(interacted_ids),
        len(posts),
    )

    if diversify:
        return diversify_posts(posts, author_scores, limit)
    return posts[:limit]
