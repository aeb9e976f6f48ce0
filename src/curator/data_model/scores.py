"""Score and engagement value objects shared by ranking and storage."""

import math
from collections.abc import Mapping
from typing import Annotated

from pydantic import Field, computed_field

from curator.data_model.base import StrictBaseModel


SCORE_PRECISION = 6


def finite_or_zero(value: float | None) -> float:
    """Coerce a subscore to a finite float, treating NaN/inf/None as 0.0."""
    if value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def weighted_total(
    subscores: Mapping[str, float],
    weights: Mapping[str, float],
) -> float:
    """Weighted sum of subscores in weight declaration order.

    Subscores without a weight contribute nothing. Weights without a
    subscore contribute 0.0. The result is rounded so that equal inputs
    always produce bit-identical totals.

    Args:
        subscores: Subscore values by name.
        weights: Weight by subscore name, iterated in insertion order.

    Returns:
        The rounded weighted total.
    """
    total = 0.0
    for name, weight in weights.items():
        total += finite_or_zero(weight) * finite_or_zero(subscores.get(name))
    return round(total, SCORE_PRECISION)


class Engagement(StrictBaseModel):
    """Engagement counters for an item.

    Attributes:
        upvotes: Upvote / like count.
        views: View count.
        comments: Comment count.
    """

    upvotes: Annotated[int, Field(ge=0)] = 0
    views: Annotated[int, Field(ge=0)] = 0
    comments: Annotated[int, Field(ge=0)] = 0

    def merged(self, delta: "Engagement") -> "Engagement":
        """Return counters increased by a delta."""
        return Engagement(
            upvotes=self.upvotes + delta.upvotes,
            views=self.views + delta.views,
            comments=self.comments + delta.comments,
        )

    @property
    def is_empty(self) -> bool:
        """True when every counter is zero."""
        return self.upvotes == 0 and self.views == 0 and self.comments == 0


class ScoreBreakdown(StrictBaseModel):
    """Named subscores together with the weights that combine them.

    ``total_score`` is derived on access and is never stored independently
    of the subscores it is computed from.

    Attributes:
        subscores: Subscore values by name.
        weights: Weights used to combine the subscores.
    """

    subscores: dict[str, float] = Field(default_factory=dict)
    weights: dict[str, float] = Field(default_factory=dict)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_score(self) -> float:
        """Weighted total of the subscores."""
        return weighted_total(self.subscores, self.weights)
