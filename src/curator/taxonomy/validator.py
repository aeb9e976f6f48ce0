"""Topic validation against the controlled vocabulary."""

from collections import Counter
from collections.abc import Iterable

import structlog

from curator.taxonomy.errors import InvalidTopicError
from curator.taxonomy.vocabulary import Taxonomy


logger = structlog.get_logger()


class TaxonomyValidator:
    """Checks topic tags against an injected taxonomy.

    Stateless apart from the immutable taxonomy, so one instance can be
    shared across threads.
    """

    def __init__(self, taxonomy: Taxonomy) -> None:
        """Initialize the validator.

        Args:
            taxonomy: Vocabulary to validate against.
        """
        self._taxonomy = taxonomy

    @property
    def taxonomy(self) -> Taxonomy:
        """The vocabulary in use."""
        return self._taxonomy

    def is_valid(self, topic: str) -> bool:
        """Check a single tag."""
        return topic in self._taxonomy

    def partition(self, topics: Iterable[str]) -> tuple[tuple[str, ...], dict[str, int]]:
        """Split tags into valid ones and invalid occurrence counts.

        Valid tags keep input order with repeats dropped. Invalid tags map
        to how often each occurred, in first-seen order.

        Args:
            topics: Candidate tags.

        Returns:
            Tuple of (valid tags, invalid tag -> count).
        """
        valid: dict[str, None] = {}
        invalid: Counter[str] = Counter()
        for topic in topics:
            if topic in self._taxonomy:
                valid.setdefault(topic, None)
            else:
                invalid[topic] += 1
        return tuple(valid), dict(invalid)

    def validate(self, topics: Iterable[str]) -> tuple[str, ...]:
        """Validate tags, failing on any tag outside the taxonomy.

        Args:
            topics: Candidate tags. An empty sequence is valid.

        Returns:
            The validated tags in input order, repeats dropped.

        Raises:
            InvalidTopicError: Listing every offending tag and its count.
        """
        valid, invalid = self.partition(topics)
        if invalid:
            raise InvalidTopicError(invalid, self._taxonomy.version)
        return valid

    def strip_invalid(
        self, topics: Iterable[str]
    ) -> tuple[tuple[str, ...], InvalidTopicError | None]:
        """Drop tags outside the taxonomy instead of failing.

        Returns:
            Tuple of (valid tags, error describing what was dropped or None).
        """
        valid, invalid = self.partition(topics)
        if not invalid:
            return valid, None
        error = InvalidTopicError(invalid, self._taxonomy.version)
        logger.info(
            "invalid_topics_stripped",
            component="taxonomy",
            dropped=error.invalid_topics,
            kept=list(valid),
        )
        return valid, error
