"""Read-only access to user profiles, interactions and feed posts."""

from .base import (
    CANDIDATE_POOL_SIZE,
    CANDIDATE_RECENT_POSTS,
    INTERACTION_HISTORY_LIMIT,
    REQUESTER_RECENT_POSTS,
    ProfileRepository,
)
from .elasticsearch import ElasticsearchProfileRepository

__all__ = [
    "CANDIDATE_POOL_SIZE",
    "CANDIDATE_RECENT_POSTS",
    "INTERACTION_HISTORY_LIMIT",
    "REQUESTER_RECENT_POSTS",
    "ElasticsearchProfileRepository",
    "ProfileRepository",
]
