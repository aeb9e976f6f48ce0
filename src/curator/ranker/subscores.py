"""Baseline subscores derived from item metadata.

Every function is pure: the current time is passed in, never read from
the clock. All subscores are normalized to [0, 1].
"""

import math
from datetime import datetime

from curator.config.schemas.base import SourceType
from curator.ranker.constants import (
    COMMUNITY_FULL_CONFIDENCE_VOTES,
    COMMUNITY_MAX_RATING,
    COMMUNITY_MIN_VOTES,
    COMMUNITY_NEUTRAL,
    CONTENT_QUALITY_BASELINE,
    ENGAGEMENT_SATURATION,
    HIGH_IMPACT_CREDIBILITY,
    HIGH_IMPACT_JOURNALS,
    RECENCY_HORIZON_DAYS,
    RECENCY_STEPS,
    RECENCY_TAIL_START,
    SOURCE_CREDIBILITY,
)


def recency_score(published_at: datetime, now: datetime) -> float:
    """Step-decay freshness score.

    Items from the future (clock skew) count as brand new. Past the last
    step the score falls linearly to 0 at the horizon.

    Args:
        published_at: Publication timestamp.
        now: Reference time.

    Returns:
        Score in [0, 1].
    """
    days_old = (now - published_at).total_seconds() / 86_400
    if days_old < 0:
        return 1.0
    for max_days, score in RECENCY_STEPS:
        if days_old < max_days:
            return score
    last_step_days = RECENCY_STEPS[-1][0]
    remaining = (RECENCY_HORIZON_DAYS - days_old) / (RECENCY_HORIZON_DAYS - last_step_days)
    return max(0.0, RECENCY_TAIL_START * remaining)


def community_score(rating: float, vote_count: int) -> float:
    """Mean reader rating scaled by vote confidence.

    With no votes the score is neutral. Confidence grows linearly until
    ``COMMUNITY_FULL_CONFIDENCE_VOTES``, and below ``COMMUNITY_MIN_VOTES``
    the result is also blended toward neutral.

    Args:
        rating: Mean rating on a 0 to ``COMMUNITY_MAX_RATING`` scale.
        vote_count: Number of ratings behind the mean.

    Returns:
        Score in [0, 1].
    """
    if vote_count <= 0:
        return COMMUNITY_NEUTRAL
    rating = min(max(rating, 0.0), COMMUNITY_MAX_RATING)
    confidence = min(vote_count / COMMUNITY_FULL_CONFIDENCE_VOTES, 1.0)
    score = rating / COMMUNITY_MAX_RATING * confidence
    if vote_count < COMMUNITY_MIN_VOTES:
        weight = vote_count / COMMUNITY_MIN_VOTES
        return score * weight + COMMUNITY_NEUTRAL * (1 - weight)
    return score


def engagement_score(magnitude: float) -> float:
    """Log-normalized engagement magnitude."""
    if magnitude <= 0 or not math.isfinite(magnitude):
        return 0.0
    return min(math.log1p(magnitude) / math.log1p(ENGAGEMENT_SATURATION), 1.0)


def content_quality_score(source_type: SourceType) -> float:
    """Baseline content quality for a source type."""
    return CONTENT_QUALITY_BASELINE[source_type]


def credibility_score(source_type: SourceType, journal_name: str | None = None) -> float:
    """Credibility from source type, raised for high-impact journals."""
    if source_type is SourceType.JOURNAL and journal_name:
        if journal_name.strip().lower() in HIGH_IMPACT_JOURNALS:
            return HIGH_IMPACT_CREDIBILITY
    return SOURCE_CREDIBILITY[source_type]


def baseline_subscores(
    *,
    source_type: SourceType,
    published_at: datetime,
    now: datetime,
    engagement_magnitude: float = 0.0,
    journal_name: str | None = None,
    community_rating: float = 0.0,
    community_vote_count: int = 0,
) -> dict[str, float]:
    """Assemble the default subscore set for an item.

    Args:
        source_type: Feed kind.
        published_at: Publication timestamp.
        now: Reference time.
        engagement_magnitude: Aggregated engagement.
        journal_name: Journal, for journal items.
        community_rating: Mean reader rating, 0 to 5.
        community_vote_count: Number of reader ratings.

    Returns:
        Subscores keyed by the default weight names.
    """
    return {
        "content_quality": content_quality_score(source_type),
        "engagement": engagement_score(engagement_magnitude),
        "credibility": credibility_score(source_type, journal_name),
        "recency": recency_score(published_at, now),
        "community": community_score(community_rating, community_vote_count),
    }
