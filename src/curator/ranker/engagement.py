"""Engagement aggregation."""

from collections.abc import Mapping

from curator.config.schemas.policy import EngagementConfig
from curator.data_model.scores import Engagement


ENGAGEMENT_FIELDS: tuple[str, ...] = ("upvotes", "views", "comments")


class EngagementAggregator:
    """Folds engagement counters into one non-negative magnitude.

    With the default configuration this is the plain sum
    ``upvotes + views + comments``.
    """

    def __init__(self, config: EngagementConfig | None = None) -> None:
        config = config or EngagementConfig()
        self._weights = {
            "upvotes": config.upvotes_weight,
            "views": config.views_weight,
            "comments": config.comments_weight,
        }

    def aggregate(self, engagement: Engagement | Mapping[str, int | None]) -> float:
        """Compute the engagement magnitude.

        Absent or ``None`` counters count as 0; negative counters are
        clamped to 0, so the result is never negative.

        Args:
            engagement: Counters as a model or a partial mapping.

        Returns:
            Weighted sum of the counters.
        """
        if isinstance(engagement, Engagement):
            counts: Mapping[str, int | None] = engagement.model_dump()
        else:
            counts = engagement

        total = 0.0
        for name in ENGAGEMENT_FIELDS:
            value = counts.get(name) or 0
            total += self._weights[name] * max(value, 0)
        return total
