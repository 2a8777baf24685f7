"""Tests for the user recommendation engine."""

from datetime import datetime, timedelta, timezone

import pytest

from ..models import PostSummary, Reason, Role, UserProfile
from .engine import AIRecommendationEngine
from .profiles import ElasticsearchProfileRepository, ProfileRepository


NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def make_post(days_ago: float = 1, hashtags=(), likes: int = 0) -> PostSummary:
    return PostSummary(
        hashtags=list(hashtags),
        created_at=NOW - timedelta(days=days_ago),
        likes_count=likes,
    )


class FakeRepository(ProfileRepository):
    """In-memory repository recording the calls it receives."""

    def __init__(self, profiles: list[UserProfile] | None = None, error: Exception | None = None):
        self.profiles = {p.id: p for p in profiles or []}
        self.error = error
        self.calls: list[tuple] = []

    async def get_user_profile(self, user_id):
        self.calls.append(("get_user_profile", user_id))
        if self.error:
            raise self.error
        return self.profiles.get(user_id)

    async def get_candidate_users(self, exclude_user_id):
        self.calls.append(("get_candidate_users", exclude_user_id))
        return [p for uid, p in self.profiles.items() if uid != exclude_user_id]

    async def get_recent_interactions(self, user_id, limit=100):
        return []

    async def get_candidate_posts(self, user_id, **kwargs):
        return []


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def requester():
    return UserProfile(
        id="me",
        username="me",
        role=Role.CLIENT,
        specialties=["photography"],
        location="Lyon, France",
    )


@pytest.fixture
def candidate_a():
    """Related PRO, same city, active this week."""
    return UserProfile(
        id="a",
        username="a",
        role=Role.PRO,
        specialties=["videography"],
        location="Lyon, France",
        posts=[make_post(days_ago=d, hashtags=["art", "lyon"], likes=20) for d in (1, 2, 3)],
        followers_count=50,
        following_count=30,
    )


@pytest.fixture
def candidate_b():
    """Unrelated PRO, elsewhere, no recent posts."""
    return UserProfile(
        id="b",
        username="b",
        role=Role.PRO,
        specialties=["plumbing"],
        location="Marseille",
    )


@pytest.fixture
def candidate_c():
    """Very engaged nearby CLIENT with nothing in common with the requester."""
    return UserProfile(
        id="c",
        username="c",
        role=Role.CLIENT,
        specialties=["cooking"],
        location="Lyon, France",
        posts=[make_post(days_ago=0.5, hashtags=["food"], likes=100) for _ in range(5)],
        followers_count=100,
    )


@pytest.fixture
def engine(requester, candidate_a, candidate_b, candidate_c):
    return AIRecommendationEngine(
        FakeRepository([requester, candidate_a, candidate_b, candidate_c])
    )


# ---------------------------------------------------------------------------
# get_ai_recommendations
# ---------------------------------------------------------------------------

class TestGetAIRecommendations:
    @pytest.mark.asyncio
    async def test_related_nearby_pro_ranks_first(self, engine):
        results = await engine.get_ai_recommendations("me", now=NOW)

        assert [r.user_id for r in results] == ["a", "b"]
        a, b = results
        assert a.location == 1.0
        assert a.freshness == pytest.approx(0.6)
        assert a.similarity == pytest.approx(0.4)
        assert a.score > b.score + 0.3
        assert Reason.SKILL_MATCH in a.reasons

    @pytest.mark.asyncio
    async def test_min_similarity_filters_on_similarity_not_score(self, engine):
        results = await engine.get_ai_recommendations("me", now=NOW, min_similarity=0.1)
        ids = [r.user_id for r in results]

        # c outscores b overall but shares neither content nor skills
        assert "c" not in ids
        assert "b" in ids

        unfiltered = await engine.get_ai_recommendations("me", now=NOW, min_similarity=0.0)
        by_id = {r.user_id: r for r in unfiltered}
        assert by_id["c"].similarity == 0.0
        assert by_id["c"].score > by_id["b"].score

    @pytest.mark.asyncio
    async def test_sorted_by_score_without_diversification(self, engine):
        results = await engine.get_ai_recommendations(
            "me", now=NOW, min_similarity=0.0, diversify=False
        )
        assert [r.user_id for r in results] == ["a", "c", "b"]
        scores = [r.score for r in results]
        assert scores == sorted(scores, reverse=True)

    @pytest.mark.asyncio
    async def test_limit(self, engine):
        results = await engine.get_ai_recommendations("me", now=NOW, min_similarity=0.0, limit=2)
        assert len(results) == 2
        results = await engine.get_ai_recommendations(
            "me", now=NOW, min_similarity=0.0, limit=2, diversify=False
        )
        assert [r.user_id for r in results] == ["a", "c"]

    @pytest.mark.asyncio
    async def test_non_positive_limit_returns_nothing(self, engine):
        assert await engine.get_ai_recommendations("me", now=NOW, limit=0) == []
        assert await engine.get_ai_recommendations("me", now=NOW, limit=-3, diversify=False) == []

    @pytest.mark.asyncio
    async def test_non_positive_limit_skips_repository(self, engine):
        assert await engine.get_ai_recommendations("me", now=NOW, limit=0) == []
        assert engine.repository.calls == []

    @pytest.mark.asyncio
    async def test_naive_now_is_treated_as_utc(self, engine):
        aware = await engine.get_ai_recommendations("me", now=NOW)
        naive = await engine.get_ai_recommendations("me", now=NOW.replace(tzinfo=None))
        assert naive == aware

    @pytest.mark.asyncio
    async def test_location_disabled(self, engine):
        results = await engine.get_ai_recommendations("me", now=NOW, include_location=False)
        assert all(r.location is None for r in results)

    @pytest.mark.asyncio
    async def test_unknown_requester_returns_empty(self, engine):
        assert await engine.get_ai_recommendations("ghost", now=NOW) == []

    @pytest.mark.asyncio
    async def test_suspended_requester_gets_nothing(self):
        class UsersOnlyEs:
            async def search(self, *, index=None, query=None, **kwargs):
                if index != "users":
                    return {"hits": {"hits": []}}
                if "bool" in query:
                    # active candidate pool
                    sources = [{"id": "p", "role": "PRO", "status": "ACTIVE",
                                "specialties": ["videography"]}]
                else:
                    sources = [{"id": "me", "role": "CLIENT", "status": "SUSPENDED",
                                "specialties": ["photography"]}]
                return {"hits": {"hits": [{"_source": s} for s in sources]}}

        engine = AIRecommendationEngine(ElasticsearchProfileRepository(UsersOnlyEs()))
        assert await engine.get_ai_recommendations("me", now=NOW, min_similarity=0.0) == []

    @pytest.mark.asyncio
    async def test_empty_candidate_pool(self, requester):
        engine = AIRecommendationEngine(FakeRepository([requester]))
        assert await engine.get_ai_recommendations("me", now=NOW) == []

    @pytest.mark.asyncio
    async def test_fetches_profile_and_candidates(self, engine):
        await engine.get_ai_recommendations("me", now=NOW)
        assert sorted(engine.repository.calls) == [
            ("get_candidate_users", "me"),
            ("get_user_profile", "me"),
        ]

    @pytest.mark.asyncio
    async def test_requester_in_pool_is_skipped(self, requester, candidate_a):
        class LeakyRepository(FakeRepository):
            async def get_candidate_users(self, exclude_user_id):
                return list(self.profiles.values())

        engine = AIRecommendationEngine(LeakyRepository([requester, candidate_a]))
        results = await engine.get_ai_recommendations("me", now=NOW, min_similarity=0.0)
        assert [r.user_id for r in results] == ["a"]

    @pytest.mark.asyncio
    async def test_repository_errors_propagate(self):
        engine = AIRecommendationEngine(FakeRepository(error=ConnectionError("es down")))
        with pytest.raises(ConnectionError, match="es down"):
            await engine.get_ai_recommendations("me", now=NOW)


# ---------------------------------------------------------------------------
# get_recommendation_page
# ---------------------------------------------------------------------------

class TestGetRecommendationPage:
    @pytest.fixture
    def paged_engine(self, requester):
        pros = [
            UserProfile(id=f"p{i}", role=Role.PRO, specialties=["videography"])
            for i in range(5)
        ]
        return AIRecommendationEngine(FakeRepository([requester, *pros]))

    @pytest.mark.asyncio
    async def test_first_page(self, paged_engine):
        page = await paged_engine.get_recommendation_page("me", page=1, limit=2, now=NOW)
        assert len(page.recommendations) == 2
        assert page.page == 1
        assert page.limit == 2
        assert page.has_more is True
        assert page.avg_similarity == pytest.approx(0.4)

    @pytest.mark.asyncio
    async def test_last_page(self, paged_engine):
        page = await paged_engine.get_recommendation_page("me", page=3, limit=2, now=NOW)
        assert len(page.recommendations) == 1
        assert page.has_more is False
        assert page.total == 5

    @pytest.mark.asyncio
    async def test_pages_do_not_overlap(self, paged_engine):
        first = await paged_engine.get_recommendation_page("me", page=1, limit=2, now=NOW)
        second = await paged_engine.get_recommendation_page("me", page=2, limit=2, now=NOW)
        first_ids = {r.user_id for r in first.recommendations}
        second_ids = {r.user_id for r in second.recommendations}
        assert not first_ids & second_ids

    @pytest.mark.asyncio
    async def test_unknown_requester(self, paged_engine):
        page = await paged_engine.get_recommendation_page("ghost", now=NOW)
        assert page.recommendations == []
        assert page.total == 0
        assert page.avg_similarity == 0.0
        assert page.has_more is False

    @pytest.mark.asyncio
    async def test_exact_fit_has_no_further_page(self, requester):
        pros = [
            UserProfile(id=f"p{i}", role=Role.PRO, specialties=["videography"])
            for i in range(4)
        ]
        engine = AIRecommendationEngine(FakeRepository([requester, *pros]))

        page = await engine.get_recommendation_page("me", page=2, limit=2, now=NOW)
        assert len(page.recommendations) == 2
        assert page.has_more is False
        assert page.total == 4

    @pytest.mark.asyncio
    async def test_non_positive_limit_is_an_empty_last_page(self, paged_engine):
        page = await paged_engine.get_recommendation_page("me", page=1, limit=0, now=NOW)
        assert page.recommendations == []
        assert page.has_more is False
        assert page.total == 0
        assert paged_engine.repository.calls == []
