"""Immutable topic vocabulary."""

from collections.abc import Iterable
from dataclasses import dataclass
from functools import cached_property

from curator.config.schemas.taxonomy import TaxonomyConfig


@dataclass(frozen=True)
class Taxonomy:
    """Versioned, read-only set of allowed topic tags.

    Attributes:
        version: Taxonomy version string.
        topics: Topic names in declaration order.
        keywords: Tagger keywords per topic, as ``(name, keywords)`` pairs.
    """

    version: str
    topics: tuple[str, ...]
    keywords: tuple[tuple[str, tuple[str, ...]], ...] = ()

    @classmethod
    def from_config(cls, config: TaxonomyConfig) -> "Taxonomy":
        """Build a taxonomy from its validated configuration."""
        return cls(
            version=config.version,
            topics=config.names,
            keywords=tuple(
                (topic.name, tuple(topic.keywords))
                for topic in config.topics
                if topic.keywords
            ),
        )

    @classmethod
    def from_names(cls, names: Iterable[str], version: str = "1.0") -> "Taxonomy":
        """Build a keyword-less taxonomy from bare names."""
        return cls(version=version, topics=tuple(dict.fromkeys(names)))

    @cached_property
    def names(self) -> frozenset[str]:
        """All allowed tags."""
        return frozenset(self.topics)

    def __contains__(self, tag: object) -> bool:
        return tag in self.names

    def __len__(self) -> int:
        return len(self.topics)
