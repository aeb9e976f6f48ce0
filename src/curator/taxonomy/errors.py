"""Errors raised by taxonomy validation."""

from collections.abc import Mapping

from curator.errors import CuratorError


class InvalidTopicError(CuratorError):
    """One or more topic tags are not in the taxonomy.

    Carries every offending tag with the number of times it occurred, so a
    single error reports the whole problem rather than the first hit.
    """

    kind = "invalid_topics"

    def __init__(self, invalid_topics: Mapping[str, int], taxonomy_version: str) -> None:
        """Initialize the error.

        Args:
            invalid_topics: Offending tag -> occurrence count, in first-seen order.
            taxonomy_version: Version of the vocabulary that was checked.
        """
        self.invalid_topics = dict(invalid_topics)
        self.taxonomy_version = taxonomy_version
        listing = ", ".join(f"{tag} (x{count})" for tag, count in self.invalid_topics.items())
        super().__init__(
            f"{len(self.invalid_topics)} invalid topic(s): {listing}",
            context={
                "invalid_topics": self.invalid_topics,
                "taxonomy_version": taxonomy_version,
            },
        )

    @property
    def total_occurrences(self) -> int:
        """Sum of occurrence counts over all offending tags."""
        return sum(self.invalid_topics.values())
