"""Unit tests for EffectiveConfig."""

import pytest

from curator.config.effective import EffectiveConfig
from curator.config.schemas import CatalogConfig, PolicyConfig, TaxonomyConfig


def _config(run_id: str = "run-1") -> EffectiveConfig:
    return EffectiveConfig(
        taxonomy=TaxonomyConfig.model_validate({"version": "1.0", "topics": ["genomics", "sleep"]}),
        catalog=CatalogConfig.model_validate(
            [{"name": "A", "isApproved": True}, {"name": "B", "isApproved": False}]
        ),
        policy=PolicyConfig(),
        run_id=run_id,
    )


class TestEffectiveConfig:
    """Tests for EffectiveConfig."""

    @pytest.mark.unit
    def test_checksum_is_stable(self) -> None:
        """Test that equal configs hash identically."""
        assert _config().compute_checksum() == _config().compute_checksum()

    @pytest.mark.unit
    def test_build_taxonomy(self) -> None:
        """Test the vocabulary built from the taxonomy file."""
        taxonomy = _config().build_taxonomy()
        assert taxonomy.topics == ("genomics", "sleep")
        assert "sleep" in taxonomy

    @pytest.mark.unit
    def test_approved_feeds(self) -> None:
        """Test the approved feed filter."""
        assert [feed.name for feed in _config().approved_feeds()] == ["A"]

    @pytest.mark.unit
    def test_summary(self) -> None:
        """Test the summary fields."""
        summary = _config().summary()
        assert summary["topic_count"] == 2
        assert summary["approved_feed_count"] == 1
        assert len(str(summary["config_checksum"])) == 64
