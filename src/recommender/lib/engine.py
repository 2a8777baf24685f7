"""User recommendation engine.

Pipeline:
    requester profile + candidate pool → per-candidate scoring →
    similarity filter → sort by score → diversification
"""

import asyncio
import logging
from datetime import datetime

from ..models import RecommendationPage, RecommendationScore
from .diversify import diversify_recommendations
from .profiles import ProfileRepository
from .scoring import DEFAULT_CONFIG, ScoringConfig, calculate_score, resolve_now

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 20
DEFAULT_MIN_SIMILARITY = 0.1


class AIRecommendationEngine:
    """Ranks other users for a requester.

    The engine holds no per-request state; construct one per repository and
    share it freely between concurrent requests.
    """

    def __init__(self, repository: ProfileRepository, config: ScoringConfig | None = None):
        self.repository = repository
        self.config = config or DEFAULT_CONFIG

    async def get_ai_recommendations(
        self,
        user_id: str,
        *,
        limit: int = DEFAULT_LIMIT,
        include_location: bool = True,
        min_similarity: float = DEFAULT_MIN_SIMILARITY,
        boost_recent: bool = True,
        diversify: bool = True,
        now: datetime | None = None,
    ) -> list[RecommendationScore]:
        """Return up to *limit* scored recommendations for *user_id*.

        Candidates whose ``similarity`` sub-score (mean of content and skill
        similarity) is below *min_similarity* are dropped, whatever their
        aggregate score.  An unknown requester yields an empty list.
        A non-positive *limit* yields an empty list without touching the
        repository.  Repository errors propagate unchanged.
        """
        if limit <= 0:
            return []
        now = resolve_now(now)

        current_user, candidates = await asyncio.gather(
            self.repository.get_user_profile(user_id),
            self.repository.get_candidate_users(user_id),
        )
        if current_user is None:
            logger.info("No profile for user %s; returning no recommendations", user_id)
            return []

        scores: list[RecommendationScore] = []
        for candidate in candidates:
            if candidate.id == current_user.id:
                continue
            score = calculate_score(
                current_user,
                candidate,
                include_location=include_location,
                boost_recent=boost_recent,
                now=now,
                config=self.config,
            )
            if score.similarity >= min_similarity:
                scores.append(score)

        scores.sort(key=lambda s: s.score, reverse=True)
        logger.debug(
            "Scored %d candidates for user %s, %d above min similarity %.2f",
            len(candidates),
            user_id,
            len(scores),
            min_similarity,
        )

        if diversify:
            return diversify_recommendations(scores, limit)
        return scores[:limit]

    async def get_recommendation_page(
        self,
        user_id: str,
        *,
        page: int = 1,
        limit: int = DEFAULT_LIMIT,
        include_location: bool = True,
        min_similarity: float = DEFAULT_MIN_SIMILARITY,
        diversify: bool = True,
        now: datetime | None = None,
    ) -> RecommendationPage:
        """Return page *page* (1-based) of *limit* recommendations.

        Recommendations are recomputed for the first ``page * limit`` slots
        plus one, which only serves to detect a further page, and sliced.
        ``total`` and ``avg_similarity`` describe the recomputed list.
        """
        page = max(page, 1)
        if limit <= 0:
            return RecommendationPage(
                recommendations=[],
                page=page,
                limit=limit,
                has_more=False,
                total=0,
                avg_similarity=0.0,
            )

        recommendations = await self.get_ai_recommendations(
            user_id,
            limit=limit * page + 1,
            include_location=include_location,
            min_similarity=min_similarity,
            diversify=diversify,
            now=now,
        )

        start = (page - 1) * limit
        end = start + limit
        total = len(recommendations)
        avg_similarity = (
            sum(r.similarity for r in recommendations) / total if total else 0.0
        )

        return RecommendationPage(
            recommendations=recommendations[start:end],
            page=page,
            limit=limit,
            has_more=total > end,
            total=total,
            avg_similarity=avg_similarity,
        )
