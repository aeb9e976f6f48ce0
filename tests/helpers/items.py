"""Factories for corpus objects used across tests."""

from datetime import datetime, timedelta

from curator.config.schemas.base import Methodology, SourceType
from curator.data_model import Engagement, ScoreBreakdown
from curator.store.models import Digest, Item
from tests.helpers.time import FIXED_NOW


def make_item(
    item_id: str = "itm_1",
    *,
    title: str = "Test Item",
    score: float | None = 0.5,
    published_at: datetime | None = None,
    source_type: SourceType = SourceType.JOURNAL,
    topics: tuple[str, ...] = (),
    engagement: Engagement | None = None,
    archived: bool = False,
) -> Item:
    """Create a test Item with a single-subscore breakdown."""
    breakdown = (
        ScoreBreakdown(subscores={"content_quality": score}, weights={"content_quality": 1.0})
        if score is not None
        else None
    )
    return Item(
        id=item_id,
        title=title,
        url=f"https://example.com/{item_id}",
        source_type=source_type,
        published_at=published_at or FIXED_NOW,
        dedupe_hash=f"hash-{item_id}",
        topics=topics,
        methodology=Methodology.NA,
        engagement=engagement or Engagement(),
        score_breakdown=breakdown,
        archived=archived,
        ingested_at=FIXED_NOW,
    )


def make_digest(digest_id: str, item_ids: list[str], *, days_ago: int = 0) -> Digest:
    """Create a one-day digest ending ``days_ago`` days before FIXED_NOW."""
    window_end = FIXED_NOW - timedelta(days=days_ago)
    return Digest(
        id=digest_id,
        slug=f"digest-{digest_id}",
        window_start=window_end - timedelta(days=1),
        window_end=window_end,
        generated_at=window_end,
        item_ids=tuple(item_ids),
    )
