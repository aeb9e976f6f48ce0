"""Normalization of source-specific payloads into one canonical shape."""

from collections.abc import Mapping

from curator.config.schemas.base import SourceType
from curator.data_model.scores import Engagement
from curator.ingest.models import (
    RAW_ITEM_ADAPTER,
    JournalPayload,
    NormalizedItem,
    PodcastPayload,
    RawItem,
    RedditPayload,
    SubstackPayload,
    YouTubePayload,
)


def parse_raw_item(data: Mapping[str, object]) -> RawItem:
    """Validate a raw mapping into its source-specific payload.

    Raises:
        pydantic.ValidationError: If the mapping matches no payload shape.
    """
    return RAW_ITEM_ADAPTER.validate_python(data)


def normalize(raw: RawItem) -> NormalizedItem:
    """Map any payload variant to the canonical item shape.

    Likes are treated as upvotes. Sources without a counter report 0.

    Args:
        raw: Source-specific payload.

    Returns:
        The canonical item.
    """
    engagement = Engagement()
    author_or_channel = raw.author
    journal_name = None
    doi = None
    publication_types: tuple[str, ...] = ()
    is_preprint = False

    if isinstance(raw, JournalPayload):
        journal_name = raw.journal_name
        doi = raw.doi
        publication_types = tuple(raw.publication_types)
        is_preprint = raw.is_preprint
    elif isinstance(raw, RedditPayload):
        engagement = Engagement(upvotes=raw.upvotes, comments=raw.comments)
        if raw.subreddit:
            author_or_channel = f"r/{raw.subreddit.removeprefix('r/')}"
    elif isinstance(raw, SubstackPayload):
        engagement = Engagement(upvotes=raw.likes, comments=raw.comments)
        author_or_channel = raw.publication or raw.author
    elif isinstance(raw, YouTubePayload):
        engagement = Engagement(upvotes=raw.likes, views=raw.views, comments=raw.comments)
        author_or_channel = raw.channel or raw.author
    elif isinstance(raw, PodcastPayload):
        author_or_channel = raw.show or raw.author

    return NormalizedItem(
        source_type=SourceType(raw.source_type),
        source_id=raw.source_id,
        url=raw.url.strip(),
        title=" ".join(raw.title.split()),
        published_at=raw.published_at,
        excerpt=raw.excerpt.strip(),
        declared_topics=tuple(topic.strip() for topic in raw.topics if topic.strip()),
        engagement=engagement,
        community_rating=raw.community_rating,
        community_vote_count=raw.community_vote_count,
        author_or_channel=author_or_channel,
        journal_name=journal_name,
        doi=doi,
        publication_types=publication_types,
        is_preprint=is_preprint,
    )
