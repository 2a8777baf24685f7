"""Diversification passes run after scoring.

Both passes trade strict score order for variety: user recommendations are
diversified on their reasons, post recommendations on hashtags and authors.
"""

from ..models import FeedPost, Reason, RecommendationScore

# Share of the target size admitted regardless of novelty.
REASON_NOVELTY_FREE_SHARE = 0.7
POST_NOVELTY_FREE_SHARE = 0.8

AI_SCORE_SHARE = 0.7
DIVERSITY_SCORE_SHARE = 0.3

NEW_HASHTAG_BONUS = 0.3
NEW_AUTHOR_BONUS = 0.5
LIKES_BONUS_NORMALISER = 50
LIKES_BONUS_CAP = 0.2


def diversify_recommendations(
    scores: list[RecommendationScore],
    limit: int,
) -> list[RecommendationScore]:
    """Select up to *limit* entries from score-sorted *scores*.

    First pass admits entries that bring a reason not seen yet, or anything
    while fewer than 70% of *limit* are admitted.  Second pass fills the
    remaining slots in score order.  Output keeps admission order.
    """
    diversified: list[RecommendationScore] = []
    selected: set[str] = set()
    used_reasons: set[Reason] = set()

    for score in scores:
        if len(diversified) >= limit:
            break
        if score.user_id in selected:
            continue
        has_new_reason = any(r not in used_reasons for r in score.reasons)
        if has_new_reason or len(diversified) < limit * REASON_NOVELTY_FREE_SHARE:
            diversified.append(score)
            selected.add(score.user_id)
            used_reasons.update(score.reasons)

    for score in scores:
        if len(diversified) >= limit:
            break
        if score.user_id not in selected:
            diversified.append(score)
            selected.add(score.user_id)

    return diversified


def post_diversity_score(
    post: FeedPost,
    used_hashtags: set[str],
    used_authors: set[str],
) -> float:
    new_hashtags = [tag for tag in post.hashtags if tag not in used_hashtags]
    score = len(new_hashtags) * NEW_HASHTAG_BONUS
    if post.author_id not in used_authors:
        score += NEW_AUTHOR_BONUS
    score += min(post.likes_count / LIKES_BONUS_NORMALISER, LIKES_BONUS_CAP)
    return score


def diversify_posts(
    posts: list[FeedPost],
    author_scores: dict[str, float],
    limit: int,
) -> list[FeedPost]:
    """Rank *posts* by author score and novelty, then greedily pick up to
    *limit* posts that bring a new hashtag or a new author.

    Once 80% of *limit* is reached, posts adding neither are skipped; there
    is no fill-in pass, so the result can be shorter than *limit*.
    """
    used_hashtags: set[str] = set()
    used_authors: set[str] = set()

    # Ranked before anything is selected, so novelty is relative to an
    # empty selection.
    ranked = sorted(
        posts,
        key=lambda p: (
            author_scores.get(p.author_id, 0.0) * AI_SCORE_SHARE
            + post_diversity_score(p, used_hashtags, used_authors) * DIVERSITY_SCORE_SHARE
        ),
        reverse=True,
    )

    diversified: list[FeedPost] = []
    for post in ranked:
        if len(diversified) >= limit:
            break
        has_new_hashtags = any(tag not in used_hashtags for tag in post.hashtags)
        is_new_author = post.author_id not in used_authors
        if has_new_hashtags or is_new_author or len(diversified) < limit * POST_NOVELTY_FREE_SHARE:
            diversified.append(post)
            used_hashtags.update(post.hashtags)
            used_authors.add(post.author_id)

    return diversified
