"""Raw item payloads and ingestion outcomes.

Each upstream source type has its own payload shape. They form a tagged
union on ``source_type`` and are normalized into one canonical shape
before any taxonomy, classification or scoring logic runs.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from curator.config.schemas.base import SourceType
from curator.data_model.scores import Engagement
from curator.store.models import Item


class _PayloadBase(BaseModel):
    """Fields every source provides."""

    model_config = ConfigDict(frozen=True, extra="ignore", str_strip_whitespace=True)

    source_id: Annotated[str, Field(min_length=1, description="Upstream identifier")]
    url: Annotated[str, Field(min_length=1)]
    title: Annotated[str, Field(min_length=1)]
    published_at: datetime
    excerpt: str = ""
    topics: list[str] = Field(default_factory=list)
    author: str | None = None
    community_rating: Annotated[float, Field(ge=0, le=5)] = 0.0
    community_vote_count: Annotated[int, Field(ge=0)] = 0

    @field_validator("published_at")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        """Treat naive timestamps as UTC and convert aware ones to UTC."""
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)


class JournalPayload(_PayloadBase):
    """Article from a journal or preprint server feed."""

    source_type: Literal["journal"] = "journal"
    journal_name: str | None = None
    doi: str | None = None
    publication_types: list[str] = Field(default_factory=list)
    is_preprint: bool = False


class RedditPayload(_PayloadBase):
    """Reddit submission."""

    source_type: Literal["reddit"] = "reddit"
    subreddit: str | None = None
    upvotes: Annotated[int, Field(ge=0)] = 0
    comments: Annotated[int, Field(ge=0)] = 0


class SubstackPayload(_PayloadBase):
    """Substack post."""

    source_type: Literal["substack"] = "substack"
    publication: str | None = None
    likes: Annotated[int, Field(ge=0)] = 0
    comments: Annotated[int, Field(ge=0)] = 0


class YouTubePayload(_PayloadBase):
    """YouTube video."""

    source_type: Literal["youtube"] = "youtube"
    channel: str | None = None
    views: Annotated[int, Field(ge=0)] = 0
    likes: Annotated[int, Field(ge=0)] = 0
    comments: Annotated[int, Field(ge=0)] = 0


class PodcastPayload(_PayloadBase):
    """Podcast episode."""

    source_type: Literal["podcast"] = "podcast"
    show: str | None = None
    episode_number: Annotated[int, Field(ge=0)] | None = None


RawItem = Annotated[
    JournalPayload | RedditPayload | SubstackPayload | YouTubePayload | PodcastPayload,
    Field(discriminator="source_type"),
]

RAW_ITEM_ADAPTER: TypeAdapter[RawItem] = TypeAdapter(RawItem)


@dataclass(frozen=True)
class NormalizedItem:
    """Canonical item shape shared by all source types."""

    source_type: SourceType
    source_id: str
    url: str
    title: str
    published_at: datetime
    excerpt: str
    declared_topics: tuple[str, ...]
    engagement: Engagement
    community_rating: float = 0.0
    community_vote_count: int = 0
    author_or_channel: str | None = None
    journal_name: str | None = None
    doi: str | None = None
    publication_types: tuple[str, ...] = ()
    is_preprint: bool = False


class RejectionReason(str, Enum):
    """Why the ingestion gate refused an item."""

    FEED_NOT_APPROVED = "feed_not_approved"
    INVALID_TOPICS = "invalid_topics"
    MALFORMED_PAYLOAD = "malformed_payload"
    DUPLICATE = "duplicate"


@dataclass(frozen=True)
class Accepted:
    """The item passed the gate.

    Attributes:
        item: The normalized, classified and scored item.
        stripped_topics: Tags dropped under the strip policy.
    """

    item: Item
    stripped_topics: dict[str, int] = field(default_factory=dict)

    @property
    def accepted(self) -> bool:
        return True


@dataclass(frozen=True)
class Rejected:
    """The item was refused.

    Attributes:
        reason: Rejection category.
        detail: Structured detail for logs and reports.
    """

    reason: RejectionReason
    detail: dict[str, object] = field(default_factory=dict)

    @property
    def accepted(self) -> bool:
        return False


IngestOutcome = Accepted | Rejected
