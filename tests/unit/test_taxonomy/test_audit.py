"""Unit tests for the catalog topic audit."""

from curator.config.schemas.catalog import CatalogConfig
from curator.taxonomy import Taxonomy, TaxonomyValidator
from curator.taxonomy.audit import CatalogAuditor, format_report


def _auditor(*names: str) -> CatalogAuditor:
    return CatalogAuditor(TaxonomyValidator(Taxonomy.from_names(names)))


def _catalog(*feeds: tuple[str, list[str]]) -> CatalogConfig:
    return CatalogConfig.model_validate(
        {"feeds": [{"name": name, "topics": topics} for name, topics in feeds]}
    )


class TestCatalogAuditor:
    """Tests for CatalogAuditor."""

    def test_clean_catalog_passes(self) -> None:
        """Test a catalog whose topics are all in the vocabulary."""
        report = _auditor("genomics").audit(_catalog(("A", ["genomics"])))

        assert report.passed
        assert report.exit_code == 0
        assert report.feeds_checked == 1

    def test_invalid_topic_names_feed(self) -> None:
        """Test the single-invalid-feed case."""
        report = _auditor("genomics").audit(
            _catalog(("A", ["genomics"]), ("B", ["not-a-topic"]))
        )

        assert not report.passed
        assert report.exit_code == 1
        assert len(report.invalid_topics) == 1
        usage = report.invalid_topics[0]
        assert usage.topic == "not-a-topic"
        assert usage.count == 1
        assert usage.feed_names == ("B",)

    def test_sorted_by_usage_count(self) -> None:
        """Test that the most used invalid topics come first."""
        report = _auditor("ok").audit(
            _catalog(
                ("A", ["rare"]),
                ("B", ["common"]),
                ("C", ["common"]),
                ("D", ["common", "rare", "other"]),
            )
        )

        assert [usage.topic for usage in report.invalid_topics] == ["common", "rare", "other"]
        assert report.total_invalid_assignments == 6

    def test_feed_listed_once_per_topic(self) -> None:
        """Test that a feed repeating a tag is listed once but counted twice."""
        report = _auditor("ok").audit(_catalog(("A", ["bad", "bad"])))

        usage = report.invalid_topics[0]
        assert usage.count == 2
        assert usage.feed_names == ("A",)

    def test_to_dict(self) -> None:
        """Test the JSON form of the report."""
        report = _auditor("ok").audit(_catalog(("A", ["bad"])))

        data = report.to_dict()
        assert data["passed"] is False
        assert data["invalid_topics"] == [{"topic": "bad", "count": 1, "feeds": ["A"]}]


class TestFormatReport:
    """Tests for format_report."""

    def test_pass_message(self) -> None:
        """Test the summary printed for a clean catalog."""
        report = _auditor("genomics", "cardiology").audit(_catalog(("A", ["genomics"])))

        lines = format_report(report)
        assert lines == [
            "Validated 1 feeds against 2 taxonomy topics (version 1.0).",
            "All feed topics are valid.",
        ]

    def test_truncates_feed_examples(self) -> None:
        """Test that only three feed names are shown, then a remainder count."""
        report = _auditor("ok").audit(
            _catalog(*[(f"Feed {n}", ["bad"]) for n in range(1, 6)])
        )

        lines = format_report(report)
        assert lines[1] == '  - "bad" (5 use(s)): Feed 1, Feed 2, Feed 3 ... and 2 more'
        assert "Total invalid topic assignments: 5" in lines
        assert "Unique invalid topics: 1" in lines

    def test_no_suffix_when_all_feeds_shown(self) -> None:
        """Test that no remainder is printed for three or fewer feeds."""
        report = _auditor("ok").audit(_catalog(("A", ["bad"]), ("B", ["bad"])))

        assert format_report(report)[1] == '  - "bad" (2 use(s)): A, B'
