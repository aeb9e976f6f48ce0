"""Unit tests for payload parsing and normalization."""

from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from curator.config.schemas.base import SourceType
from curator.data_model import Engagement
from curator.ingest.models import JournalPayload, RedditPayload
from curator.ingest.normalizer import normalize, parse_raw_item


class TestParseRawItem:
    """Tests for parse_raw_item."""

    def test_dispatches_on_source_type(self) -> None:
        """Test that the discriminator picks the payload class."""
        raw = parse_raw_item(
            {
                "source_type": "reddit",
                "source_id": "t3_abc",
                "url": "https://reddit.com/r/science/abc",
                "title": "Post",
                "published_at": "2017-06-12T10:00:00Z",
                "subreddit": "science",
                "upvotes": 12,
            }
        )
        assert isinstance(raw, RedditPayload)
        assert raw.upvotes == 12

    def test_unknown_source_type(self) -> None:
        """Test that unknown sources fail validation."""
        with pytest.raises(ValidationError):
            parse_raw_item(
                {
                    "source_type": "myspace",
                    "source_id": "1",
                    "url": "https://x",
                    "title": "T",
                    "published_at": "2017-06-12T10:00:00Z",
                }
            )

    def test_negative_counter_rejected(self) -> None:
        """Test that engagement counters cannot be negative."""
        with pytest.raises(ValidationError):
            parse_raw_item(
                {
                    "source_type": "youtube",
                    "source_id": "v1",
                    "url": "https://youtube.com/watch?v=1",
                    "title": "Video",
                    "published_at": "2017-06-12T10:00:00Z",
                    "views": -1,
                }
            )

    def test_naive_timestamp_assumed_utc(self) -> None:
        """Test that timestamps without an offset are read as UTC."""
        raw = parse_raw_item(
            {
                "source_type": "podcast",
                "source_id": "ep1",
                "url": "https://pod.example/1",
                "title": "Episode 1",
                "published_at": "2017-06-12T10:00:00",
            }
        )
        assert raw.published_at == datetime(2017, 6, 12, 10, tzinfo=UTC)

    def test_offset_timestamp_converted_to_utc(self) -> None:
        """Test that timestamps with an offset are stored in UTC."""
        raw = parse_raw_item(
            {
                "source_type": "podcast",
                "source_id": "ep2",
                "url": "https://pod.example/2",
                "title": "Episode 2",
                "published_at": "2017-06-12T10:00:00+02:00",
            }
        )
        assert raw.published_at.utcoffset() == timedelta(0)
        assert raw.published_at.isoformat() == "2017-06-12T08:00:00+00:00"


class TestNormalize:
    """Tests for normalize."""

    def test_journal(self) -> None:
        """Test that journal metadata is carried over."""
        normalized = normalize(
            JournalPayload(
                source_id="pm1",
                url="https://doi.org/10.1/x",
                title="  A   trial  ",
                published_at=datetime(2017, 6, 1, tzinfo=UTC),
                journal_name="Nature",
                publication_types=["Randomized Controlled Trial"],
                topics=["genomics", " "],
            )
        )
        assert normalized.source_type is SourceType.JOURNAL
        assert normalized.title == "A trial"
        assert normalized.journal_name == "Nature"
        assert normalized.publication_types == ("Randomized Controlled Trial",)
        assert normalized.declared_topics == ("genomics",)
        assert normalized.engagement.is_empty

    def test_reddit_channel_and_engagement(self) -> None:
        """Test that subreddit becomes the channel."""
        normalized = normalize(
            parse_raw_item(
                {
                    "source_type": "reddit",
                    "source_id": "t3",
                    "url": "https://reddit.com/r/science/t3",
                    "title": "Post",
                    "published_at": "2017-06-12T10:00:00Z",
                    "subreddit": "science",
                    "upvotes": 5,
                    "comments": 2,
                }
            )
        )
        assert normalized.author_or_channel == "r/science"
        assert normalized.engagement == Engagement(upvotes=5, comments=2)

    def test_youtube_likes_are_upvotes(self) -> None:
        """Test the likes-to-upvotes mapping."""
        normalized = normalize(
            parse_raw_item(
                {
                    "source_type": "youtube",
                    "source_id": "v1",
                    "url": "https://youtube.com/watch?v=1",
                    "title": "Video",
                    "published_at": "2017-06-12T10:00:00Z",
                    "channel": "Science Channel",
                    "views": 1000,
                    "likes": 40,
                }
            )
        )
        assert normalized.author_or_channel == "Science Channel"
        assert normalized.engagement == Engagement(upvotes=40, views=1000, comments=0)
