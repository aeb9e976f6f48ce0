"""Stable sorting of items for retrieval.

Sorting never adds hidden tie-breakers: items that compare equal on the
requested key keep their input order, in both directions.
"""

import unicodedata
from collections.abc import Callable, Iterable
from datetime import datetime
from enum import Enum

from curator.ranker.engagement import EngagementAggregator
from curator.ranker.errors import InvalidSortOptionError
from curator.store.models import Item


class SortOption(str, Enum):
    """Supported sort orders."""

    QUALITY_DESC = "quality-desc"
    QUALITY_ASC = "quality-asc"
    RECENCY_DESC = "recency-desc"
    RECENCY_ASC = "recency-asc"
    ENGAGEMENT_DESC = "engagement-desc"
    TITLE_ASC = "title-asc"
    TITLE_DESC = "title-desc"


DEFAULT_SORT = SortOption.QUALITY_DESC


def parse_sort_option(value: str | SortOption | None) -> SortOption:
    """Parse a sort option, defaulting to quality-desc when absent.

    Raises:
        InvalidSortOptionError: For unknown values.
    """
    if value is None:
        return DEFAULT_SORT
    if isinstance(value, SortOption):
        return value
    try:
        return SortOption(value.strip().lower())
    except ValueError as e:
        raise InvalidSortOptionError(value, [option.value for option in SortOption]) from e


def title_collation_key(title: str) -> tuple[str, str, str]:
    """Locale-style collation key for titles.

    Compares first ignoring case and accents, then by accents, then by
    case with lower case first.

    Args:
        title: Title text.

    Returns:
        (primary, secondary, tertiary) key.
    """
    decomposed = unicodedata.normalize("NFKD", title)
    primary = "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()
    secondary = decomposed.casefold()
    tertiary = decomposed.swapcase()
    return primary, secondary, tertiary


def _quality_key(item: Item) -> float:
    return item.total_score


def _recency_key(item: Item) -> datetime:
    return item.published_at


def _title_key(item: Item) -> tuple[str, str, str]:
    return title_collation_key(item.title)


def sort_items(
    items: Iterable[Item],
    option: SortOption | str | None = DEFAULT_SORT,
    aggregator: EngagementAggregator | None = None,
) -> list[Item]:
    """Sort items by one key.

    Args:
        items: Items to sort; not modified.
        option: Sort order, as an enum member or its string value.
        aggregator: Engagement aggregator for engagement-desc.

    Returns:
        A new list in the requested order.

    Raises:
        InvalidSortOptionError: For unknown option strings.
    """
    option = parse_sort_option(option)
    aggregator = aggregator or EngagementAggregator()

    def engagement_key(item: Item) -> float:
        return aggregator.aggregate(item.engagement)

    keys: dict[SortOption, tuple[Callable[[Item], object], bool]] = {
        SortOption.QUALITY_DESC: (_quality_key, True),
        SortOption.QUALITY_ASC: (_quality_key, False),
        SortOption.RECENCY_DESC: (_recency_key, True),
        SortOption.RECENCY_ASC: (_recency_key, False),
        SortOption.ENGAGEMENT_DESC: (engagement_key, True),
        SortOption.TITLE_ASC: (_title_key, False),
        SortOption.TITLE_DESC: (_title_key, True),
    }
    key, reverse = keys[option]
    return sorted(items, key=key, reverse=reverse)  # type: ignore[arg-type]
