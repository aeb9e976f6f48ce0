"""Unit tests for duplicate-detection keys."""

from curator.ingest.hash import (
    compute_dedupe_hash,
    extract_doi,
    item_id_from_hash,
    normalize_title,
    normalize_url,
)


class TestNormalizeUrl:
    """Tests for normalize_url."""

    def test_strips_tracking_and_scheme(self) -> None:
        """Test the canonical form."""
        assert normalize_url("https://www.Example.com/a/b/?utm_source=x#top") == "example.com/a/b"

    def test_http_and_https_match(self) -> None:
        """Test that scheme does not matter."""
        assert normalize_url("http://example.com/x") == normalize_url("https://example.com/x/")


class TestNormalizeTitle:
    """Tests for normalize_title."""

    def test_accents_case_and_punctuation(self) -> None:
        """Test that cosmetic differences vanish."""
        assert normalize_title("  Café  Society: A Review! ") == "cafe society a review"


class TestExtractDoi:
    """Tests for extract_doi."""

    def test_from_doi_url(self) -> None:
        """Test DOI extraction from a doi.org link."""
        assert extract_doi("https://doi.org/10.1038/NATURE12345") == "10.1038/nature12345"

    def test_first_candidate_wins(self) -> None:
        """Test that the declared DOI is preferred."""
        assert extract_doi("10.1000/abc", "https://doi.org/10.2000/xyz") == "10.1000/abc"

    def test_none_when_absent(self) -> None:
        """Test URLs without DOIs."""
        assert extract_doi(None, "https://example.com/post") is None


class TestComputeDedupeHash:
    """Tests for compute_dedupe_hash."""

    def test_same_paper_different_urls(self) -> None:
        """Test that the DOI unifies publisher and doi.org links."""
        publisher = compute_dedupe_hash(
            "https://publisher.example/article/1", "Sleep and Memory", doi="10.1234/sleep.1"
        )
        resolver = compute_dedupe_hash("https://doi.org/10.1234/sleep.1", "Sleep and memory")
        assert publisher == resolver

    def test_tracking_parameters_ignored(self) -> None:
        """Test that URL noise does not create duplicates."""
        a = compute_dedupe_hash("https://blog.example/post?utm_medium=rss", "Post")
        b = compute_dedupe_hash("https://blog.example/post/", "Post")
        assert a == b

    def test_different_titles_differ(self) -> None:
        """Test that the title is part of the key."""
        a = compute_dedupe_hash("https://blog.example/post", "First")
        b = compute_dedupe_hash("https://blog.example/post", "Second")
        assert a != b

    def test_item_id_is_stable(self) -> None:
        """Test the derived item id."""
        digest = compute_dedupe_hash("https://blog.example/post", "Post")
        assert item_id_from_hash(digest) == f"itm_{digest[:20]}"
