"""SQLite corpus store."""

import json
import sqlite3
import time
import uuid
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path

import structlog

from curator.config.schemas.base import Methodology, SourceType, Tier
from curator.data_model.scores import Engagement, ScoreBreakdown
from curator.store.errors import ItemArchivedError, ItemNotFoundError, StoreConnectionError
from curator.store.metrics import StoreMetrics, TransactionContext
from curator.store.migrations import CURRENT_VERSION, MigrationManager
from curator.store.models import (
    Digest,
    Folder,
    Item,
    QuerySpec,
    QueryTarget,
    UserSubscription,
)


logger = structlog.get_logger()

_ITEM_COLUMNS = """
    i.id, i.dedupe_hash, i.source_type, i.source_id, i.feed_id, i.url, i.title,
    i.excerpt, i.author_or_channel, i.journal_name, i.doi, i.published_at,
    i.ingested_at, i.topics_json, i.methodology, i.upvotes, i.views, i.comments,
    i.community_rating, i.community_vote_count,
    i.subscores_json, i.weights_json, i.archived
"""


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class CorpusStore:
    """SQLite store for items, digests, bookmarks, folders and subscriptions.

    Every mutation is a single SQL statement inside one transaction, so
    concurrent writers never lose updates: engagement merges are
    increments, membership adds are ``INSERT OR IGNORE`` and removes are a
    single ``DELETE``. Uses WAL mode and enforces foreign keys so deleting
    a folder cascades to its memberships.
    """

    def __init__(self, db_path: Path | str, run_id: str | None = None) -> None:
        """Initialize the store.

        Args:
            db_path: Path to the SQLite database file, or ":memory:".
            run_id: Optional run ID for logging context.
        """
        self._db_path = Path(db_path) if isinstance(db_path, str) else db_path
        self._run_id = run_id or str(uuid.uuid4())
        self._conn: sqlite3.Connection | None = None
        self._metrics = StoreMetrics.get_instance()
        self._log = logger.bind(
            component="store",
            run_id=self._run_id,
            db_path=str(self._db_path),
        )

    @property
    def db_path(self) -> Path:
        """Database path."""
        return self._db_path

    @property
    def is_connected(self) -> bool:
        """Whether a connection is open."""
        return self._conn is not None

    def connect(self) -> None:
        """Open the database and apply pending migrations."""
        if self._conn is not None:
            return

        in_memory = str(self._db_path) == ":memory:"
        if not in_memory:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)

        self._log.info("connecting_to_database")
        self._conn = sqlite3.connect(str(self._db_path))
        self._conn.row_factory = sqlite3.Row
        if not in_memory:
            self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA synchronous=NORMAL")
        self._conn.execute("PRAGMA foreign_keys=ON")

        migration_mgr = MigrationManager(self._conn)
        old_version = migration_mgr.get_current_version()
        applied = migration_mgr.apply_migrations()
        self._log.info(
            "database_connected",
            old_version=old_version,
            new_version=CURRENT_VERSION,
            migrations_applied=applied,
        )

    def close(self) -> None:
        """Close the connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            self._log.info("database_closed")

    def __enter__(self) -> "CorpusStore":
        self.connect()
        return self

    def __exit__(
        self,
        exc_type: type | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.close()

    def _ensure_connected(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StoreConnectionError("Database not connected. Call connect() first.")
        return self._conn

    @contextmanager
    def _transaction(self, operation: str) -> Iterator[TransactionContext]:
        """Run a block in a transaction, timing it and rolling back on error.

        Args:
            operation: Operation name for logs.

        Yields:
            Transaction context; set ``affected_rows`` inside the block.
        """
        conn = self._ensure_connected()
        tx_id = str(uuid.uuid4())[:8]
        start_ns = time.perf_counter_ns()
        ctx = TransactionContext(tx_id=tx_id, start_time_ns=start_ns, operation=operation)

        try:
            yield ctx
            conn.commit()
        except Exception:
            conn.rollback()
            self._log.error(
                "transaction_failed",
                tx_id=tx_id,
                op=operation,
                duration_ms=round((time.perf_counter_ns() - start_ns) / 1_000_000, 2),
            )
            raise

        duration_ms = (time.perf_counter_ns() - start_ns) / 1_000_000
        self._metrics.record_tx_duration(duration_ms)
        self._log.debug(
            "transaction_complete",
            tx_id=tx_id,
            op=operation,
            affected_rows=ctx.affected_rows,
            duration_ms=round(duration_ms, 2),
        )

    def get_schema_version(self) -> int:
        """Current schema version."""
        return MigrationManager(self._ensure_connected()).get_current_version()

    # ===== Items =====

    def add_item(self, item: Item) -> bool:
        """Insert an item unless its id or dedupe hash already exists.

        Args:
            item: Item to persist.

        Returns:
            True if inserted, False if it was a duplicate.
        """
        breakdown = item.score_breakdown
        with self._transaction("add_item") as ctx:
            cursor = self._ensure_connected().execute(
                """
                INSERT OR IGNORE INTO items (
                    id, dedupe_hash, source_type, source_id, feed_id, url, title,
                    excerpt, author_or_channel, journal_name, doi, published_at,
                    ingested_at, topics_json, methodology, upvotes, views, comments,
                    community_rating, community_vote_count,
                    subscores_json, weights_json, total_score, archived
                ) VALUES (
                    ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?
                )
                """,
                (
                    item.id,
                    item.dedupe_hash,
                    item.source_type.value,
                    item.source_id,
                    item.feed_id,
                    item.url,
                    item.title,
                    item.excerpt,
                    item.author_or_channel,
                    item.journal_name,
                    item.doi,
                    item.published_at.isoformat(),
                    item.ingested_at.isoformat(),
                    json.dumps(list(item.topics)),
                    item.methodology.value,
                    item.engagement.upvotes,
                    item.engagement.views,
                    item.engagement.comments,
                    item.community_rating,
                    item.community_vote_count,
                    json.dumps(breakdown.subscores) if breakdown else None,
                    json.dumps(breakdown.weights) if breakdown else None,
                    breakdown.total_score if breakdown else 0.0,
                    int(item.archived),
                ),
            )
            ctx.affected_rows = cursor.rowcount

        inserted = ctx.affected_rows == 1
        if inserted:
            self._metrics.items_inserted_total += 1
        else:
            self._metrics.items_duplicate_total += 1
            self._log.info("duplicate_item_skipped", item_id=item.id, dedupe_hash=item.dedupe_hash)
        return inserted

    def get_item(self, item_id: str) -> Item | None:
        """Fetch an item by id."""
        row = self._ensure_connected().execute(
            f"SELECT {_ITEM_COLUMNS} FROM items i WHERE i.id = ?", (item_id,)
        ).fetchone()
        return self._row_to_item(row) if row else None

    def get_item_by_dedupe_hash(self, dedupe_hash: str) -> Item | None:
        """Fetch an item by its duplicate key."""
        row = self._ensure_connected().execute(
            f"SELECT {_ITEM_COLUMNS} FROM items i WHERE i.dedupe_hash = ?", (dedupe_hash,)
        ).fetchone()
        return self._row_to_item(row) if row else None

    def get_items(self, item_ids: Sequence[str]) -> list[Item]:
        """Fetch items by id, in the given order, skipping unknown ids."""
        if not item_ids:
            return []
        placeholders = ",".join("?" for _ in item_ids)
        rows = self._ensure_connected().execute(
            f"SELECT {_ITEM_COLUMNS} FROM items i WHERE i.id IN ({placeholders})",
            tuple(item_ids),
        ).fetchall()
        by_id = {row["id"]: self._row_to_item(row) for row in rows}
        return [by_id[item_id] for item_id in item_ids if item_id in by_id]

    def list_items(self) -> list[Item]:
        """All items, newest first."""
        rows = self._ensure_connected().execute(
            f"SELECT {_ITEM_COLUMNS} FROM items i ORDER BY i.published_at DESC, i.rowid"
        ).fetchall()
        return [self._row_to_item(row) for row in rows]

    def merge_engagement(self, item_id: str, delta: Engagement) -> Engagement:
        """Add an engagement delta to an item's counters.

        Applied as one increment statement, so concurrent merges commute.
        Archived items accept merges. The score breakdown is not touched.

        Args:
            item_id: Item to update.
            delta: Non-negative increments.

        Returns:
            The counters after the merge.

        Raises:
            ItemNotFoundError: If the item does not exist.
        """
        with self._transaction("merge_engagement") as ctx:
            conn = self._ensure_connected()
            cursor = conn.execute(
                """
                UPDATE items
                SET upvotes = upvotes + ?, views = views + ?, comments = comments + ?
                WHERE id = ?
                """,
                (delta.upvotes, delta.views, delta.comments, item_id),
            )
            ctx.affected_rows = cursor.rowcount
            if cursor.rowcount == 0:
                raise ItemNotFoundError(item_id)
            row = conn.execute(
                "SELECT upvotes, views, comments FROM items WHERE id = ?", (item_id,)
            ).fetchone()

        self._metrics.engagement_merges_total += 1
        return Engagement(upvotes=row["upvotes"], views=row["views"], comments=row["comments"])

    def set_score_breakdown(self, item_id: str, breakdown: ScoreBreakdown) -> None:
        """Replace an item's subscores and total in one statement.

        Raises:
            ItemNotFoundError: If the item does not exist.
            ItemArchivedError: If the item is archived.
        """
        with self._transaction("set_score_breakdown") as ctx:
            conn = self._ensure_connected()
            cursor = conn.execute(
                """
                UPDATE items
                SET subscores_json = ?, weights_json = ?, total_score = ?
                WHERE id = ? AND archived = 0
                """,
                (
                    json.dumps(breakdown.subscores),
                    json.dumps(breakdown.weights),
                    breakdown.total_score,
                    item_id,
                ),
            )
            ctx.affected_rows = cursor.rowcount
            if cursor.rowcount == 0:
                exists = conn.execute("SELECT 1 FROM items WHERE id = ?", (item_id,)).fetchone()
                if exists is None:
                    raise ItemNotFoundError(item_id)
                raise ItemArchivedError(item_id)

        self._metrics.score_writes_total += 1

    def archive_item(self, item_id: str) -> None:
        """Mark an item archived.

        Raises:
            ItemNotFoundError: If the item does not exist.
        """
        with self._transaction("archive_item") as ctx:
            cursor = self._ensure_connected().execute(
                "UPDATE items SET archived = 1 WHERE id = ?", (item_id,)
            )
            ctx.affected_rows = cursor.rowcount
            if cursor.rowcount == 0:
                raise ItemNotFoundError(item_id)

    def purge_item(self, item_id: str) -> bool:
        """Administratively remove an item row.

        Folder memberships pointing at it are left for
        ``prune_orphan_memberships``.

        Returns:
            True if a row was removed.
        """
        with self._transaction("purge_item") as ctx:
            cursor = self._ensure_connected().execute(
                "DELETE FROM items WHERE id = ?", (item_id,)
            )
            ctx.affected_rows = cursor.rowcount
        return ctx.affected_rows == 1

    # ===== Digests =====

    def create_digest(self, digest: Digest) -> None:
        """Persist a digest and its ordered item list."""
        with self._transaction("create_digest") as ctx:
            conn = self._ensure_connected()
            conn.execute(
                """
                INSERT INTO digests (id, slug, window_start, window_end, generated_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    digest.id,
                    digest.slug,
                    digest.window_start.isoformat(),
                    digest.window_end.isoformat(),
                    digest.generated_at.isoformat(),
                ),
            )
            conn.executemany(
                "INSERT INTO digest_items (digest_id, item_id, position) VALUES (?, ?, ?)",
                [(digest.id, item_id, pos) for pos, item_id in enumerate(digest.item_ids)],
            )
            ctx.affected_rows = 1 + len(digest.item_ids)

    def get_digest(self, digest_id: str) -> Digest | None:
        """Fetch a digest with its item ids in digest order."""
        conn = self._ensure_connected()
        row = conn.execute("SELECT * FROM digests WHERE id = ?", (digest_id,)).fetchone()
        if row is None:
            return None
        item_rows = conn.execute(
            "SELECT item_id FROM digest_items WHERE digest_id = ? ORDER BY position",
            (digest_id,),
        ).fetchall()
        return Digest(
            id=row["id"],
            slug=row["slug"],
            window_start=datetime.fromisoformat(row["window_start"]),
            window_end=datetime.fromisoformat(row["window_end"]),
            generated_at=datetime.fromisoformat(row["generated_at"]),
            item_ids=tuple(r["item_id"] for r in item_rows),
        )

    def get_latest_digest(self) -> Digest | None:
        """Most recently generated digest."""
        row = self._ensure_connected().execute(
            "SELECT id FROM digests ORDER BY generated_at DESC, rowid DESC LIMIT 1"
        ).fetchone()
        return self.get_digest(row["id"]) if row else None

    # ===== Bookmarks =====

    def save_item(self, user_id: str, item_id: str) -> bool:
        """Bookmark an item. Returns True if the bookmark is new."""
        with self._transaction("save_item") as ctx:
            cursor = self._ensure_connected().execute(
                "INSERT OR IGNORE INTO saved_items (user_id, item_id, saved_at) VALUES (?, ?, ?)",
                (user_id, item_id, _now_iso()),
            )
            ctx.affected_rows = cursor.rowcount
        return ctx.affected_rows == 1

    def unsave_item(self, user_id: str, item_id: str) -> bool:
        """Remove a bookmark. Returns True if one existed."""
        with self._transaction("unsave_item") as ctx:
            cursor = self._ensure_connected().execute(
                "DELETE FROM saved_items WHERE user_id = ? AND item_id = ?",
                (user_id, item_id),
            )
            ctx.affected_rows = cursor.rowcount
        return ctx.affected_rows == 1

    # ===== Subscriptions =====

    def upsert_subscription(self, subscription: UserSubscription) -> None:
        """Record a user's current tier."""
        with self._transaction("upsert_subscription") as ctx:
            cursor = self._ensure_connected().execute(
                """
                INSERT INTO user_subscriptions (user_id, tier, is_test_account, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(user_id) DO UPDATE SET
                    tier = excluded.tier,
                    is_test_account = excluded.is_test_account,
                    updated_at = excluded.updated_at
                """,
                (
                    subscription.user_id,
                    subscription.tier.value,
                    int(subscription.is_test_account),
                    _now_iso(),
                ),
            )
            ctx.affected_rows = cursor.rowcount

    def get_subscription(self, user_id: str) -> UserSubscription | None:
        """A user's subscription record, if any."""
        row = self._ensure_connected().execute(
            "SELECT user_id, tier, is_test_account FROM user_subscriptions WHERE user_id = ?",
            (user_id,),
        ).fetchone()
        if row is None:
            return None
        return UserSubscription(
            user_id=row["user_id"],
            tier=Tier(row["tier"]),
            is_test_account=bool(row["is_test_account"]),
        )

    # ===== Folders =====

    def create_folder(self, folder: Folder) -> None:
        """Persist a new folder."""
        with self._transaction("create_folder") as ctx:
            cursor = self._ensure_connected().execute(
                """
                INSERT INTO folders (id, user_id, name, description, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    folder.id,
                    folder.user_id,
                    folder.name,
                    folder.description,
                    folder.created_at.isoformat(),
                    folder.updated_at.isoformat(),
                ),
            )
            ctx.affected_rows = cursor.rowcount

    def get_folder(self, folder_id: str) -> Folder | None:
        """Fetch a folder by id."""
        row = self._ensure_connected().execute(
            "SELECT * FROM folders WHERE id = ?", (folder_id,)
        ).fetchone()
        return self._row_to_folder(row) if row else None

    def list_folders(self, user_id: str) -> list[Folder]:
        """A user's folders, oldest first."""
        rows = self._ensure_connected().execute(
            "SELECT * FROM folders WHERE user_id = ? ORDER BY created_at, rowid", (user_id,)
        ).fetchall()
        return [self._row_to_folder(row) for row in rows]

    def rename_folder(self, folder_id: str, name: str, description: str | None) -> Folder | None:
        """Update a folder's name and description.

        Returns:
            The updated folder, or None if it does not exist.
        """
        with self._transaction("rename_folder") as ctx:
            cursor = self._ensure_connected().execute(
                "UPDATE folders SET name = ?, description = ?, updated_at = ? WHERE id = ?",
                (name, description, _now_iso(), folder_id),
            )
            ctx.affected_rows = cursor.rowcount
        return self.get_folder(folder_id) if ctx.affected_rows else None

    def delete_folder(self, folder_id: str) -> list[str]:
        """Delete a folder; its memberships cascade.

        Returns:
            Ids of the items that were members.
        """
        with self._transaction("delete_folder") as ctx:
            conn = self._ensure_connected()
            member_rows = conn.execute(
                "SELECT item_id FROM folder_items WHERE folder_id = ?", (folder_id,)
            ).fetchall()
            cursor = conn.execute("DELETE FROM folders WHERE id = ?", (folder_id,))
            ctx.affected_rows = cursor.rowcount
        return [row["item_id"] for row in member_rows]

    def add_membership(self, folder_id: str, item_id: str) -> bool:
        """Create a folder edge. Returns True if the edge is new."""
        with self._transaction("add_membership") as ctx:
            cursor = self._ensure_connected().execute(
                "INSERT OR IGNORE INTO folder_items (folder_id, item_id, added_at) VALUES (?, ?, ?)",
                (folder_id, item_id, _now_iso()),
            )
            ctx.affected_rows = cursor.rowcount
        created = ctx.affected_rows == 1
        if created:
            self._metrics.memberships_added_total += 1
        return created

    def remove_membership(self, folder_id: str, item_id: str) -> bool:
        """Delete a folder edge. Returns True if it existed."""
        with self._transaction("remove_membership") as ctx:
            cursor = self._ensure_connected().execute(
                "DELETE FROM folder_items WHERE folder_id = ? AND item_id = ?",
                (folder_id, item_id),
            )
            ctx.affected_rows = cursor.rowcount
        removed = ctx.affected_rows == 1
        if removed:
            self._metrics.memberships_removed_total += 1
        return removed

    def get_folders_for_item(self, item_id: str) -> list[Folder]:
        """Folders containing an item."""
        rows = self._ensure_connected().execute(
            """
            SELECT f.* FROM folders f
            JOIN folder_items fi ON fi.folder_id = f.id
            WHERE fi.item_id = ?
            ORDER BY f.created_at, f.rowid
            """,
            (item_id,),
        ).fetchall()
        return [self._row_to_folder(row) for row in rows]

    def get_folder_item_ids(self, folder_id: str) -> list[str]:
        """Member item ids of a folder, in insertion order."""
        rows = self._ensure_connected().execute(
            "SELECT item_id FROM folder_items WHERE folder_id = ? ORDER BY added_at, rowid",
            (folder_id,),
        ).fetchall()
        return [row["item_id"] for row in rows]

    def prune_orphan_memberships(self) -> int:
        """Delete folder edges whose item no longer exists.

        Returns:
            Number of edges removed.
        """
        with self._transaction("prune_orphan_memberships") as ctx:
            cursor = self._ensure_connected().execute(
                "DELETE FROM folder_items WHERE item_id NOT IN (SELECT id FROM items)"
            )
            ctx.affected_rows = cursor.rowcount
        self._metrics.memberships_pruned_total += ctx.affected_rows
        if ctx.affected_rows:
            self._log.info("orphan_memberships_pruned", count=ctx.affected_rows)
        return ctx.affected_rows

    # ===== Scoped queries =====

    def query_items(self, spec: QuerySpec) -> list[Item]:
        """Read the items an authorized query spec designates.

        Folder queries join on the folder owner as well, so a spec can
        never read another user's folder.

        Args:
            spec: Spec produced by scope resolution.

        Returns:
            Items in the target's natural order.
        """
        conn = self._ensure_connected()
        if spec.target is QueryTarget.DIGEST:
            rows = conn.execute(
                f"""
                SELECT {_ITEM_COLUMNS} FROM items i
                JOIN digest_items d ON d.item_id = i.id
                WHERE d.digest_id = ?
                ORDER BY d.position
                """,
                (spec.digest_id,),
            ).fetchall()
        elif spec.target is QueryTarget.ALL_DIGESTS:
            rows = conn.execute(
                f"""
                SELECT {_ITEM_COLUMNS} FROM items i
                WHERE i.id IN (SELECT item_id FROM digest_items)
                ORDER BY i.published_at DESC, i.rowid
                """
            ).fetchall()
        elif spec.target is QueryTarget.SAVED:
            rows = conn.execute(
                f"""
                SELECT {_ITEM_COLUMNS} FROM items i
                JOIN saved_items s ON s.item_id = i.id
                WHERE s.user_id = ?
                ORDER BY s.saved_at DESC, s.rowid DESC
                """,
                (spec.user_id,),
            ).fetchall()
        else:
            rows = conn.execute(
                f"""
                SELECT {_ITEM_COLUMNS} FROM items i
                JOIN folder_items fi ON fi.item_id = i.id
                JOIN folders f ON f.id = fi.folder_id
                WHERE fi.folder_id = ? AND f.user_id = ?
                ORDER BY fi.added_at, fi.rowid
                """,
                (spec.folder_id, spec.user_id),
            ).fetchall()
        return [self._row_to_item(row) for row in rows]

    def get_stats(self) -> dict[str, int]:
        """Row counts per table."""
        conn = self._ensure_connected()
        tables = ("items", "digests", "saved_items", "folders", "folder_items")
        stats = {
            f"{table}_count": conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
            for table in tables
        }
        stats["archived_items_count"] = conn.execute(
            "SELECT COUNT(*) FROM items WHERE archived = 1"
        ).fetchone()[0]
        return stats

    # ===== Row conversion =====

    def _row_to_item(self, row: sqlite3.Row) -> Item:
        breakdown = None
        if row["subscores_json"] is not None:
            breakdown = ScoreBreakdown(
                subscores=json.loads(row["subscores_json"]),
                weights=json.loads(row["weights_json"] or "{}"),
            )
        return Item(
            id=row["id"],
            dedupe_hash=row["dedupe_hash"],
            source_type=SourceType(row["source_type"]),
            source_id=row["source_id"],
            feed_id=row["feed_id"],
            url=row["url"],
            title=row["title"],
            excerpt=row["excerpt"],
            author_or_channel=row["author_or_channel"],
            journal_name=row["journal_name"],
            doi=row["doi"],
            published_at=datetime.fromisoformat(row["published_at"]),
            ingested_at=datetime.fromisoformat(row["ingested_at"]),
            topics=tuple(json.loads(row["topics_json"])),
            methodology=Methodology(row["methodology"]),
            engagement=Engagement(
                upvotes=row["upvotes"], views=row["views"], comments=row["comments"]
            ),
            community_rating=row["community_rating"],
            community_vote_count=row["community_vote_count"],
            score_breakdown=breakdown,
            archived=bool(row["archived"]),
        )

    def _row_to_folder(self, row: sqlite3.Row) -> Folder:
        return Folder(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            description=row["description"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
