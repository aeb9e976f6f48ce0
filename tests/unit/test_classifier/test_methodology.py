"""Unit tests for methodology classification."""

import pytest

from curator.classifier import ClassificationSignals, MethodologyClassifier
from curator.config.schemas.base import Methodology, SourceType


@pytest.fixture
def classifier() -> MethodologyClassifier:
    """Classifier under test."""
    return MethodologyClassifier()


class TestDeclaredPublicationTypes:
    """Tests for classification from declared publication types."""

    def test_maps_declared_type(self, classifier: MethodologyClassifier) -> None:
        """Test a single declared publication type."""
        signals = ClassificationSignals(
            source_type=SourceType.JOURNAL,
            publication_types=("Randomized Controlled Trial",),
        )
        assert classifier.classify(signals) is Methodology.RCT

    def test_strongest_design_wins(self, classifier: MethodologyClassifier) -> None:
        """Test that meta-analysis outranks review when both are declared."""
        signals = ClassificationSignals(
            source_type=SourceType.JOURNAL,
            publication_types=("Review", "Meta-Analysis"),
        )
        assert classifier.classify(signals) is Methodology.META

    def test_declared_type_beats_text(self, classifier: MethodologyClassifier) -> None:
        """Test that declared types take precedence over keywords."""
        signals = ClassificationSignals(
            source_type=SourceType.JOURNAL,
            publication_types=("Case Reports",),
            text="A randomized trial",
        )
        assert classifier.classify(signals) is Methodology.CASE

    def test_unknown_declared_type_falls_through(self, classifier: MethodologyClassifier) -> None:
        """Test that unmapped publication types are ignored."""
        signals = ClassificationSignals(
            source_type=SourceType.JOURNAL,
            publication_types=("Editorial",),
            text="A prospective cohort",
        )
        assert classifier.classify(signals) is Methodology.COHORT


class TestFallbackRules:
    """Tests for preprint, social and keyword rules."""

    def test_preprint_flag(self, classifier: MethodologyClassifier) -> None:
        """Test that preprints are labelled before keyword matching."""
        signals = ClassificationSignals(
            source_type=SourceType.JOURNAL,
            is_preprint=True,
            text="randomized trial",
        )
        assert classifier.classify(signals) is Methodology.PREPRINT

    @pytest.mark.parametrize(
        "source_type",
        [SourceType.REDDIT, SourceType.YOUTUBE, SourceType.PODCAST],
    )
    def test_social_sources_are_na(
        self, classifier: MethodologyClassifier, source_type: SourceType
    ) -> None:
        """Test that community content is never labelled as a study."""
        signals = ClassificationSignals(source_type=source_type, text="new RCT results")
        assert classifier.classify(signals) is Methodology.NA

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("A randomised trial of statins", Methodology.RCT),
            ("Results from the RCT", Methodology.RCT),
            ("A 20-year cohort of nurses", Methodology.COHORT),
            ("Meta-analysis of sleep studies", Methodology.META),
            ("A meta analysis of sleep trials", Methodology.META),
            ("Two meta-analyses disagree", Methodology.META),
            ("Case report: rare presentation", Methodology.CASE),
            ("A narrative review", Methodology.REVIEW),
            ("Thoughts on funding", Methodology.NA),
        ],
    )
    def test_text_patterns(
        self, classifier: MethodologyClassifier, text: str, expected: Methodology
    ) -> None:
        """Test keyword classification over title and excerpt."""
        signals = ClassificationSignals(source_type=SourceType.SUBSTACK, text=text)
        assert classifier.classify(signals) is expected

    def test_rct_pattern_checked_before_review(self, classifier: MethodologyClassifier) -> None:
        """Test the fixed pattern order when several keywords appear."""
        signals = ClassificationSignals(
            source_type=SourceType.JOURNAL,
            text="A review of randomized evidence",
        )
        assert classifier.classify(signals) is Methodology.RCT

    def test_empty_signals(self, classifier: MethodologyClassifier) -> None:
        """Test that the classifier is total."""
        assert classifier.classify(ClassificationSignals(source_type=SourceType.JOURNAL)) is (
            Methodology.NA
        )
