"""Metrics collection for the corpus store."""

from dataclasses import dataclass, field
from typing import ClassVar


@dataclass
class StoreMetrics:
    """Counters for store operations.

    Attributes:
        items_inserted_total: New items persisted.
        items_duplicate_total: Inserts skipped as duplicates.
        engagement_merges_total: Engagement deltas applied.
        score_writes_total: Score breakdowns written.
        memberships_added_total: Folder edges created.
        memberships_removed_total: Folder edges deleted.
        memberships_pruned_total: Orphan edges removed.
        tx_duration_ms: Cumulative transaction time.
        tx_count: Number of committed transactions.
    """

    items_inserted_total: int = 0
    items_duplicate_total: int = 0
    engagement_merges_total: int = 0
    score_writes_total: int = 0
    memberships_added_total: int = 0
    memberships_removed_total: int = 0
    memberships_pruned_total: int = 0
    tx_duration_ms: float = 0.0
    tx_count: int = 0

    _instance: ClassVar["StoreMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "StoreMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_tx_duration(self, duration_ms: float) -> None:
        """Record one committed transaction."""
        self.tx_duration_ms += duration_ms
        self.tx_count += 1

    @property
    def avg_tx_duration_ms(self) -> float:
        """Average transaction duration in milliseconds."""
        if self.tx_count == 0:
            return 0.0
        return self.tx_duration_ms / self.tx_count

    def to_dict(self) -> dict[str, float | int]:
        """Metric name to value."""
        return {
            "items_inserted_total": self.items_inserted_total,
            "items_duplicate_total": self.items_duplicate_total,
            "engagement_merges_total": self.engagement_merges_total,
            "score_writes_total": self.score_writes_total,
            "memberships_added_total": self.memberships_added_total,
            "memberships_removed_total": self.memberships_removed_total,
            "memberships_pruned_total": self.memberships_pruned_total,
            "tx_duration_ms": self.tx_duration_ms,
            "tx_count": self.tx_count,
        }


@dataclass
class TransactionContext:
    """Bookkeeping for a single transaction.

    Attributes:
        tx_id: Short transaction identifier.
        start_time_ns: Start time in nanoseconds.
        operation: The operation being performed.
        affected_rows: Rows changed, filled in by the operation.
    """

    tx_id: str
    start_time_ns: int
    operation: str
    affected_rows: int = field(default=0)
