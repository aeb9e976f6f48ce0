"""Base types and enums for configuration schemas."""

from enum import Enum


class SourceType(str, Enum):
    """Kind of upstream feed an item was harvested from."""

    JOURNAL = "journal"
    REDDIT = "reddit"
    SUBSTACK = "substack"
    YOUTUBE = "youtube"
    PODCAST = "podcast"


# Community platforms whose content is commentary, not a study.
SOCIAL_SOURCE_TYPES: frozenset[SourceType] = frozenset(
    {SourceType.REDDIT, SourceType.YOUTUBE, SourceType.PODCAST}
)


class Methodology(str, Enum):
    """Study design classification of an item."""

    RCT = "RCT"
    COHORT = "Cohort"
    CASE = "Case"
    REVIEW = "Review"
    META = "Meta"
    PREPRINT = "Preprint"
    NA = "NA"


class Tier(str, Enum):
    """Subscription tier."""

    FREE = "free"
    PREMIUM = "premium"
    PRO = "pro"


class ScopeType(str, Enum):
    """Which slice of the corpus a retrieval request targets."""

    CURRENT_DIGEST = "current_digest"
    ALL_DIGESTS = "all_digests"
    SAVED_ITEMS = "saved_items"
    FOLDER = "folder"


class TopicPolicy(str, Enum):
    """What ingestion does with tags outside the taxonomy.

    - REJECT: refuse the whole item
    - STRIP: drop the offending tags and keep the item
    """

    REJECT = "reject"
    STRIP = "strip"


class Capability(str, Enum):
    """Tier-gated features outside of retrieval scopes."""

    ANALYTICS = "analytics"
    EXPORT_MARKDOWN = "export_markdown"
    EXPORT_RSS = "export_rss"
    DIGEST_DAILY = "digest_daily"
    DIGEST_REALTIME = "digest_realtime"
