"""Data models for the corpus store."""

from datetime import UTC, datetime
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from curator.config.schemas.base import Methodology, SourceType, Tier
from curator.data_model.scores import Engagement, ScoreBreakdown


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Item(BaseModel):
    """A curated piece of content.

    ``id``, ``url`` and ``published_at`` never change after ingestion.
    Only engagement counters and the score breakdown are updated later,
    and archived items only take engagement updates.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: Annotated[str, Field(min_length=1, description="Opaque stable identifier")]
    title: Annotated[str, Field(min_length=1)]
    url: Annotated[str, Field(min_length=1)]
    source_type: SourceType
    published_at: datetime
    dedupe_hash: Annotated[str, Field(min_length=1, description="Cross-feed duplicate key")]
    topics: tuple[str, ...] = ()
    methodology: Methodology = Methodology.NA
    engagement: Engagement = Field(default_factory=Engagement)
    community_rating: Annotated[float, Field(ge=0, le=5)] = 0.0
    community_vote_count: Annotated[int, Field(ge=0)] = 0
    score_breakdown: ScoreBreakdown | None = None
    archived: bool = False
    excerpt: str = ""
    source_id: str | None = Field(default=None, description="Upstream identifier")
    feed_id: str | None = None
    author_or_channel: str | None = None
    journal_name: str | None = None
    doi: str | None = None
    ingested_at: datetime = Field(default_factory=_utcnow)

    @field_validator("published_at")
    @classmethod
    def published_at_utc(cls, value: datetime) -> datetime:
        """Store publication times in UTC so text ordering is chronological."""
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    @property
    def total_score(self) -> float:
        """Composite score, 0.0 when the item has not been scored."""
        if self.score_breakdown is None:
            return 0.0
        return self.score_breakdown.total_score


class Folder(BaseModel):
    """A user-owned collection of items."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: Annotated[str, Field(min_length=1)]
    user_id: Annotated[str, Field(min_length=1)]
    name: Annotated[str, Field(min_length=1, max_length=200)]
    description: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class Digest(BaseModel):
    """A published digest: an ordered selection of items for a time window."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: Annotated[str, Field(min_length=1)]
    slug: Annotated[str, Field(min_length=1)]
    window_start: datetime
    window_end: datetime
    generated_at: datetime = Field(default_factory=_utcnow)
    item_ids: tuple[str, ...] = ()

    @model_validator(mode="after")
    def validate_window(self) -> "Digest":
        """Ensure the window is not inverted."""
        if self.window_end < self.window_start:
            msg = "window_end must not precede window_start"
            raise ValueError(msg)
        return self


class UserSubscription(BaseModel):
    """Subscription record as provided by the billing collaborator."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    user_id: Annotated[str, Field(min_length=1)]
    tier: Tier = Tier.FREE
    is_test_account: bool = False


class QueryTarget(str, Enum):
    """Which set of items a storage query reads."""

    DIGEST = "digest"
    ALL_DIGESTS = "all_digests"
    SAVED = "saved"
    FOLDER = "folder"


class QuerySpec(BaseModel):
    """Authorized storage query produced by scope resolution.

    Attributes:
        target: Item set to read.
        digest_id: Digest to read, for DIGEST.
        folder_id: Folder to read, for FOLDER.
        user_id: Owner whose bookmarks or folder are read.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    target: QueryTarget
    digest_id: str | None = None
    folder_id: str | None = None
    user_id: str | None = None

    @model_validator(mode="after")
    def validate_target_fields(self) -> "QuerySpec":
        """Ensure each target carries the identifiers it needs."""
        required: dict[QueryTarget, tuple[str, ...]] = {
            QueryTarget.DIGEST: ("digest_id",),
            QueryTarget.ALL_DIGESTS: (),
            QueryTarget.SAVED: ("user_id",),
            QueryTarget.FOLDER: ("folder_id", "user_id"),
        }
        missing = [name for name in required[self.target] if not getattr(self, name)]
        if missing:
            msg = f"QuerySpec for {self.target.value} requires {missing}"
            raise ValueError(msg)
        return self
