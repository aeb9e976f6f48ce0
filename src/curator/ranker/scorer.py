"""Composite quality score computation.

The total score is the weighted sum of named subscores. Weights come from
``ScoringConfig`` and are applied in declaration order; the same
subscores always yield the same total.
"""

from collections.abc import Mapping
from datetime import datetime

import structlog

from curator.config.schemas.policy import ScoringConfig
from curator.data_model.scores import ScoreBreakdown, finite_or_zero
from curator.ranker.engagement import EngagementAggregator
from curator.ranker.subscores import baseline_subscores
from curator.store.models import Item


logger = structlog.get_logger()


def compute_score(
    subscores: Mapping[str, float | None],
    weights: Mapping[str, float],
) -> ScoreBreakdown:
    """Pure scoring function.

    Missing subscores are filled with 0.0 and non-finite values become 0.0.
    Subscores without a weight are kept in the breakdown but do not
    contribute to the total.

    Args:
        subscores: Subscore values by name.
        weights: Weight per subscore name.

    Returns:
        Breakdown whose ``total_score`` is the weighted sum.
    """
    filled = {name: finite_or_zero(subscores.get(name)) for name in weights}
    for name, value in subscores.items():
        if name not in filled:
            filled[name] = finite_or_zero(value)
    return ScoreBreakdown(subscores=filled, weights=dict(weights))


class ScoreEngine:
    """Applies configured weights to subscores."""

    def __init__(
        self,
        config: ScoringConfig | None = None,
        aggregator: EngagementAggregator | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            config: Scoring weights; defaults to the built-in weights.
            aggregator: Engagement aggregator used when rescoring items.
        """
        self._config = config or ScoringConfig()
        self._aggregator = aggregator or EngagementAggregator()
        self._log = logger.bind(component="ranker")

    @property
    def weights(self) -> dict[str, float]:
        """Weights in application order."""
        return dict(self._config.weights)

    def compute(self, subscores: Mapping[str, float | None]) -> ScoreBreakdown:
        """Score a set of subscores."""
        breakdown = compute_score(subscores, self._config.weights)
        unweighted = sorted(set(subscores) - set(self._config.weights))
        if unweighted:
            self._log.debug("unweighted_subscores_ignored", names=unweighted)
        return breakdown

    def rescore(self, breakdown: ScoreBreakdown) -> ScoreBreakdown:
        """Recompute an existing breakdown under the current weights."""
        return self.compute(breakdown.subscores)

    def rescore_item(self, item: Item, now: datetime) -> ScoreBreakdown:
        """Recompute an item's score from its current stored inputs.

        Baseline subscores are rebuilt from the item's engagement counters,
        community rating and publication time. Other subscores already in
        the breakdown are kept.

        Args:
            item: Item as currently stored.
            now: Reference time for recency.

        Returns:
            The new breakdown.
        """
        existing = item.score_breakdown.subscores if item.score_breakdown else {}
        baseline = baseline_subscores(
            source_type=item.source_type,
            published_at=item.published_at,
            now=now,
            engagement_magnitude=self._aggregator.aggregate(item.engagement),
            journal_name=item.journal_name,
            community_rating=item.community_rating,
            community_vote_count=item.community_vote_count,
        )
        return self.compute({**existing, **baseline})
