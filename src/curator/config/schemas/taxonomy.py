"""Taxonomy configuration schema."""

from typing import Annotated

from pydantic import Field, field_validator, model_validator

from curator.data_model import StrictBaseModel


class TopicEntry(StrictBaseModel):
    """A single topic in the controlled vocabulary.

    Attributes:
        name: Canonical topic tag.
        keywords: Optional keywords used by the automatic tagger.
    """

    name: Annotated[str, Field(min_length=1, max_length=100, pattern=r"^[A-Za-z0-9_-]+$")]
    keywords: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_keywords_non_empty(self) -> "TopicEntry":
        """Ensure keywords list contains non-empty strings."""
        for keyword in self.keywords:
            if not keyword.strip():
                msg = "Keywords must be non-empty strings"
                raise ValueError(msg)
        return self


class TaxonomyConfig(StrictBaseModel):
    """Root configuration for the topic taxonomy file.

    Topics may be written as bare names or as ``{name, keywords}`` mappings.

    Attributes:
        version: Taxonomy version.
        topics: Ordered topic entries.
    """

    version: Annotated[str, Field(pattern=r"^\d+\.\d+$")] = "1.0"
    topics: list[TopicEntry] = Field(default_factory=list)

    @field_validator("topics", mode="before")
    @classmethod
    def expand_bare_names(cls, value: object) -> object:
        """Accept plain strings as topic entries without keywords."""
        if isinstance(value, list):
            return [{"name": item} if isinstance(item, str) else item for item in value]
        return value

    @model_validator(mode="after")
    def validate_unique_names(self) -> "TaxonomyConfig":
        """Ensure all topic names are unique."""
        names = [topic.name for topic in self.topics]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            msg = f"Duplicate topic names: {duplicates}"
            raise ValueError(msg)
        return self

    @property
    def names(self) -> tuple[str, ...]:
        """Topic names in declaration order."""
        return tuple(topic.name for topic in self.topics)
