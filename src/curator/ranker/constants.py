"""Constants for the ranker module."""

from curator.config.schemas.base import SourceType


# Recency steps as (max age in days, score), checked in order.
RECENCY_STEPS: tuple[tuple[float, float], ...] = (
    (7, 1.0),
    (30, 0.9),
    (90, 0.7),
    (180, 0.5),
    (365, 0.3),
)

# Past a year the score decays linearly from this value to 0 at the horizon.
RECENCY_TAIL_START: float = 0.2
RECENCY_HORIZON_DAYS: float = 5 * 365

# Community ratings are on a 0-5 scale. Fewer votes than COMMUNITY_MIN_VOTES
# are blended toward neutral; confidence is full at COMMUNITY_FULL_CONFIDENCE_VOTES.
COMMUNITY_MAX_RATING: float = 5.0
COMMUNITY_MIN_VOTES: int = 5
COMMUNITY_FULL_CONFIDENCE_VOTES: int = 10
COMMUNITY_NEUTRAL: float = 0.5

# Engagement magnitude at which the engagement subscore saturates.
ENGAGEMENT_SATURATION: float = 10_000.0

# Baseline content quality by source type.
CONTENT_QUALITY_BASELINE: dict[SourceType, float] = {
    SourceType.JOURNAL: 0.625,
    SourceType.SUBSTACK: 0.55,
    SourceType.PODCAST: 0.5,
    SourceType.YOUTUBE: 0.5,
    SourceType.REDDIT: 0.45,
}

# Credibility by source type when no journal tier applies.
SOURCE_CREDIBILITY: dict[SourceType, float] = {
    SourceType.JOURNAL: 0.7,
    SourceType.SUBSTACK: 0.5,
    SourceType.PODCAST: 0.5,
    SourceType.YOUTUBE: 0.4,
    SourceType.REDDIT: 0.3,
}

HIGH_IMPACT_JOURNALS: frozenset[str] = frozenset(
    {
        "nature",
        "science",
        "cell",
        "the lancet",
        "lancet",
        "new england journal of medicine",
        "nejm",
        "jama",
        "bmj",
    }
)
HIGH_IMPACT_CREDIBILITY: float = 1.0
