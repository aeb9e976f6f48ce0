"""Batch audit of catalog feed topics against the taxonomy."""

from dataclasses import dataclass, field

import structlog

from curator.config.schemas.catalog import CatalogConfig
from curator.taxonomy.validator import TaxonomyValidator


logger = structlog.get_logger()

DEFAULT_MAX_EXAMPLES = 3
EXIT_OK = 0
EXIT_INVALID_TOPICS = 1


@dataclass(frozen=True)
class InvalidTopicUsage:
    """One invalid topic and the feeds that carry it.

    Attributes:
        topic: The offending tag.
        count: Number of assignments of the tag across the catalog.
        feed_names: Feeds using the tag, in catalog order, without repeats.
    """

    topic: str
    count: int
    feed_names: tuple[str, ...]


@dataclass(frozen=True)
class CatalogAuditReport:
    """Outcome of auditing every feed in a catalog.

    Attributes:
        feeds_checked: Number of feeds inspected.
        vocabulary_size: Number of topics in the taxonomy.
        taxonomy_version: Taxonomy version audited against.
        invalid_topics: Offending topics, most used first.
    """

    feeds_checked: int
    vocabulary_size: int
    taxonomy_version: str
    invalid_topics: tuple[InvalidTopicUsage, ...] = field(default_factory=tuple)

    @property
    def passed(self) -> bool:
        """True when no feed carries an invalid topic."""
        return not self.invalid_topics

    @property
    def total_invalid_assignments(self) -> int:
        """Invalid topic assignments summed over all feeds."""
        return sum(usage.count for usage in self.invalid_topics)

    @property
    def exit_code(self) -> int:
        """Process exit status for this report."""
        return EXIT_OK if self.passed else EXIT_INVALID_TOPICS

    def to_dict(self) -> dict[str, object]:
        """Serialize for JSON output."""
        return {
            "passed": self.passed,
            "feeds_checked": self.feeds_checked,
            "vocabulary_size": self.vocabulary_size,
            "taxonomy_version": self.taxonomy_version,
            "total_invalid_assignments": self.total_invalid_assignments,
            "invalid_topics": [
                {
                    "topic": usage.topic,
                    "count": usage.count,
                    "feeds": list(usage.feed_names),
                }
                for usage in self.invalid_topics
            ],
        }


class CatalogAuditor:
    """Validates every feed's topics and aggregates the failures."""

    def __init__(self, validator: TaxonomyValidator) -> None:
        self._validator = validator

    def audit(self, catalog: CatalogConfig) -> CatalogAuditReport:
        """Audit all feeds in the catalog.

        Args:
            catalog: The catalog to audit.

        Returns:
            Report with per-topic usage, most used first. Ties keep the
            order in which the topics were first seen.
        """
        counts: dict[str, int] = {}
        feeds_by_topic: dict[str, dict[str, None]] = {}

        for feed in catalog.feeds:
            _, invalid = self._validator.partition(feed.topics)
            for topic, occurrences in invalid.items():
                counts[topic] = counts.get(topic, 0) + occurrences
                feeds_by_topic.setdefault(topic, {}).setdefault(feed.name, None)

        usages = sorted(
            (
                InvalidTopicUsage(
                    topic=topic,
                    count=count,
                    feed_names=tuple(feeds_by_topic[topic]),
                )
                for topic, count in counts.items()
            ),
            key=lambda usage: usage.count,
            reverse=True,
        )

        taxonomy = self._validator.taxonomy
        report = CatalogAuditReport(
            feeds_checked=len(catalog.feeds),
            vocabulary_size=len(taxonomy),
            taxonomy_version=taxonomy.version,
            invalid_topics=tuple(usages),
        )
        logger.info(
            "catalog_audit_complete",
            component="taxonomy",
            feeds_checked=report.feeds_checked,
            unique_invalid_topics=len(report.invalid_topics),
            total_invalid_assignments=report.total_invalid_assignments,
            passed=report.passed,
        )
        return report


def format_report(
    report: CatalogAuditReport,
    max_examples: int = DEFAULT_MAX_EXAMPLES,
) -> list[str]:
    """Render an audit report as human-readable lines.

    Each invalid topic lists up to ``max_examples`` feed names followed by
    "... and N more" when there are others.

    Args:
        report: The audit report.
        max_examples: Feed names shown per topic.

    Returns:
        Output lines without trailing newlines.
    """
    if report.passed:
        return [
            f"Validated {report.feeds_checked} feeds against "
            f"{report.vocabulary_size} taxonomy topics (version {report.taxonomy_version}).",
            "All feed topics are valid.",
        ]

    lines = [f"Found invalid topics in catalog (taxonomy version {report.taxonomy_version}):"]
    for usage in report.invalid_topics:
        shown = ", ".join(usage.feed_names[:max_examples])
        hidden = len(usage.feed_names) - max_examples
        suffix = f" ... and {hidden} more" if hidden > 0 else ""
        lines.append(f'  - "{usage.topic}" ({usage.count} use(s)): {shown}{suffix}')
    lines.append("")
    lines.append(f"Total invalid topic assignments: {report.total_invalid_assignments}")
    lines.append(f"Unique invalid topics: {len(report.invalid_topics)}")
    return lines
