"""Feed catalog schema.

The catalog is maintained by hand as JSON with camelCase keys, so feeds
accept both camelCase and snake_case and ignore keys the core does not use.
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from curator.config.schemas.base import SourceType


class CatalogFeed(BaseModel):
    """A catalog entry describing an approved (or pending) feed.

    Attributes:
        name: Display name, used in audit reports.
        id: Stable feed identifier.
        url: Feed URL.
        domain: Site domain.
        source_type: Kind of feed.
        category: Editorial category.
        description: Short description.
        topics: Topic tags, which must belong to the taxonomy.
        is_approved: Whether items from this feed may be ingested.
        is_active: Whether the feed is still polled.
        featured: Whether the feed is highlighted in the catalog.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    name: Annotated[str, Field(min_length=1)]
    id: str | None = None
    url: str | None = None
    domain: str | None = None
    source_type: SourceType | None = None
    category: str | None = None
    description: str | None = None
    topics: list[str] = Field(default_factory=list)
    is_approved: bool = False
    is_active: bool = True
    featured: bool = False

    @property
    def feed_id(self) -> str:
        """Identifier used to attribute ingested items."""
        return self.id or self.name


class CatalogConfig(BaseModel):
    """Root model for the feed catalog.

    Accepts either ``{"feeds": [...]}`` or a bare list of feeds.

    Attributes:
        feeds: Catalog entries in file order.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    feeds: list[CatalogFeed] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def wrap_bare_list(cls, data: object) -> object:
        """Allow a catalog file that is just a JSON array of feeds."""
        if isinstance(data, list):
            return {"feeds": data}
        return data

    def get_feed(self, feed_id: str) -> CatalogFeed | None:
        """Look up a feed by id (or name when it has no id)."""
        for feed in self.feeds:
            if feed.feed_id == feed_id:
                return feed
        return None
