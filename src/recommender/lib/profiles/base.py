"""Read-only data access used by the recommendation engine.

The engine never talks to storage directly: it consumes profile and post
snapshots through a :class:`ProfileRepository`.  Errors raised by an
implementation (network, transport, malformed responses) are propagated to
the caller untouched.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from ...models import FeedPost, Interaction, UserProfile

# ---------------------------------------------------------------------------
# Fetch caps
# ---------------------------------------------------------------------------

# Upper bound on users scored per request, for latency on large populations.
CANDIDATE_POOL_SIZE = 200
# The requester gets a wider post window than candidates. This widens
# content-similarity recall on the requester side only.
REQUESTER_RECENT_POSTS = 20
CANDIDATE_RECENT_POSTS = 10
INTERACTION_HISTORY_LIMIT = 100


class ProfileRepository(ABC):
    """Abstract source of user profiles, interactions and feed posts."""

    @abstractmethod
    async def get_user_profile(self, user_id: str) -> UserProfile | None:
        """Return the profile with its most recent posts.

        ``None`` when the user does not exist or is not active.
        """
        ...

    @abstractmethod
    async def get_candidate_users(self, exclude_user_id: str) -> list[UserProfile]:
        """Return up to ``CANDIDATE_POOL_SIZE`` active users other than
        *exclude_user_id*, in no particular order."""
        ...

    @abstractmethod
    async def get_recent_interactions(
        self,
        user_id: str,
        limit: int = INTERACTION_HISTORY_LIMIT,
    ) -> list[Interaction]:
        """Return the user's most recent interactions, newest first."""
        ...

    @abstractmethod
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
        """Return published posts eligible for *user_id*'s feed.

        A post qualifies when it is not authored by the requester and
        matches any of: author in *author_ids*; author in *interacted_ids*;
        created at or after *trending_since* with at least
        *trending_min_likes* likes.  Empty inputs disable their clause.
        Results are ordered newest first, then most liked.
        """
        ...
