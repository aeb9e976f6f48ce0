"""Scoring, engagement aggregation and sorting."""

from curator.ranker.engagement import EngagementAggregator
from curator.ranker.errors import InvalidSortOptionError
from curator.ranker.scorer import ScoreEngine, compute_score
from curator.ranker.sorter import SortOption, parse_sort_option, sort_items


__all__ = [
    "EngagementAggregator",
    "InvalidSortOptionError",
    "ScoreEngine",
    "SortOption",
    "compute_score",
    "parse_sort_option",
    "sort_items",
]
