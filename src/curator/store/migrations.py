"""SQLite schema migrations for the corpus store."""

import sqlite3
from dataclasses import dataclass
from datetime import UTC, datetime

import structlog

from curator.store.errors import MigrationError


logger = structlog.get_logger()

CURRENT_VERSION = 2


@dataclass(frozen=True)
class Migration:
    """A schema migration.

    Attributes:
        version: Schema version after applying this migration.
        description: Human-readable description.
        up_sql: SQL applying the migration.
        down_sql: SQL reverting it.
    """

    version: int
    description: str
    up_sql: str
    down_sql: str


MIGRATIONS: list[Migration] = [
    Migration(
        version=1,
        description="Corpus: items, digests and digest membership",
        up_sql="""
CREATE TABLE IF NOT EXISTS items (
    id TEXT PRIMARY KEY,
    dedupe_hash TEXT NOT NULL UNIQUE,
    source_type TEXT NOT NULL,
    source_id TEXT,
    feed_id TEXT,
    url TEXT NOT NULL,
    title TEXT NOT NULL,
    excerpt TEXT NOT NULL DEFAULT '',
    author_or_channel TEXT,
    journal_name TEXT,
    doi TEXT,
    published_at TEXT NOT NULL,
    ingested_at TEXT NOT NULL,
    topics_json TEXT NOT NULL DEFAULT '[]',
    methodology TEXT NOT NULL DEFAULT 'NA',
    upvotes INTEGER NOT NULL DEFAULT 0 CHECK (upvotes >= 0),
    views INTEGER NOT NULL DEFAULT 0 CHECK (views >= 0),
    comments INTEGER NOT NULL DEFAULT 0 CHECK (comments >= 0),
    community_rating REAL NOT NULL DEFAULT 0 CHECK (community_rating BETWEEN 0 AND 5),
    community_vote_count INTEGER NOT NULL DEFAULT 0 CHECK (community_vote_count >= 0),
    subscores_json TEXT,
    weights_json TEXT,
    total_score REAL NOT NULL DEFAULT 0,
    archived INTEGER NOT NULL DEFAULT 0
);
CREATE INDEX IF NOT EXISTS idx_items_published_at ON items(published_at);
CREATE INDEX IF NOT EXISTS idx_items_total_score ON items(total_score);
CREATE INDEX IF NOT EXISTS idx_items_feed_id ON items(feed_id);

CREATE TABLE IF NOT EXISTS digests (
    id TEXT PRIMARY KEY,
    slug TEXT NOT NULL UNIQUE,
    window_start TEXT NOT NULL,
    window_end TEXT NOT NULL,
    generated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS digest_items (
    digest_id TEXT NOT NULL REFERENCES digests(id) ON DELETE CASCADE,
    item_id TEXT NOT NULL,
    position INTEGER NOT NULL,
    PRIMARY KEY (digest_id, item_id)
);
CREATE INDEX IF NOT EXISTS idx_digest_items_item_id ON digest_items(item_id);
""",
        down_sql="""
DROP INDEX IF EXISTS idx_digest_items_item_id;
DROP TABLE IF EXISTS digest_items;
DROP TABLE IF EXISTS digests;
DROP INDEX IF EXISTS idx_items_feed_id;
DROP INDEX IF EXISTS idx_items_total_score;
DROP INDEX IF EXISTS idx_items_published_at;
DROP TABLE IF EXISTS items;
""",
    ),
    Migration(
        version=2,
        description="User state: subscriptions, bookmarks, folders and folder membership",
        up_sql="""
CREATE TABLE IF NOT EXISTS user_subscriptions (
    user_id TEXT PRIMARY KEY,
    tier TEXT NOT NULL DEFAULT 'free',
    is_test_account INTEGER NOT NULL DEFAULT 0,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS saved_items (
    user_id TEXT NOT NULL,
    item_id TEXT NOT NULL,
    saved_at TEXT NOT NULL,
    PRIMARY KEY (user_id, item_id)
);

CREATE TABLE IF NOT EXISTS folders (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    name TEXT NOT NULL,
    description TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_folders_user_id ON folders(user_id);

CREATE TABLE IF NOT EXISTS folder_items (
    folder_id TEXT NOT NULL REFERENCES folders(id) ON DELETE CASCADE,
    item_id TEXT NOT NULL,
    added_at TEXT NOT NULL,
    UNIQUE (folder_id, item_id)
);
CREATE INDEX IF NOT EXISTS idx_folder_items_item_id ON folder_items(item_id);
""",
        down_sql="""
DROP INDEX IF EXISTS idx_folder_items_item_id;
DROP TABLE IF EXISTS folder_items;
DROP INDEX IF EXISTS idx_folders_user_id;
DROP TABLE IF EXISTS folders;
DROP TABLE IF EXISTS saved_items;
DROP TABLE IF EXISTS user_subscriptions;
""",
    ),
]


def get_migrations_to_apply(current_version: int) -> list[Migration]:
    """Migrations newer than ``current_version``, oldest first."""
    return [m for m in MIGRATIONS if m.version > current_version]


class MigrationManager:
    """Applies and reverts schema migrations on one connection."""

    VERSION_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY,
    applied_at TEXT NOT NULL,
    description TEXT
);
"""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._conn = connection
        self._log = logger.bind(component="store", operation="migration")

    def get_current_version(self) -> int:
        """Current schema version, 0 for an empty database."""
        self._conn.execute(self.VERSION_TABLE_SQL)
        row = self._conn.execute("SELECT MAX(version) FROM schema_version").fetchone()
        return row[0] if row[0] is not None else 0

    def apply_migrations(self) -> list[int]:
        """Apply all pending migrations.

        Returns:
            Versions applied, in order.

        Raises:
            MigrationError: If a migration fails; earlier ones stay applied.
        """
        pending = get_migrations_to_apply(self.get_current_version())
        applied: list[int] = []

        for migration in pending:
            self._log.info(
                "applying_migration",
                version=migration.version,
                description=migration.description,
            )
            try:
                self._conn.executescript(migration.up_sql)
                self._conn.execute(
                    "INSERT INTO schema_version (version, applied_at, description) "
                    "VALUES (?, ?, ?)",
                    (migration.version, datetime.now(UTC).isoformat(), migration.description),
                )
                self._conn.commit()
            except sqlite3.Error as e:
                self._conn.rollback()
                self._log.error("migration_failed", version=migration.version, error=str(e))
                raise MigrationError(migration.version, str(e)) from e
            applied.append(migration.version)

        return applied

    def rollback_to(self, target_version: int) -> list[int]:
        """Revert migrations until the schema is at ``target_version``.

        Returns:
            Versions rolled back, newest first.

        Raises:
            ValueError: If the target version is negative.
            MigrationError: If a rollback fails.
        """
        if target_version < 0:
            msg = f"Invalid target version: {target_version}"
            raise ValueError(msg)

        current = self.get_current_version()
        rolled_back: list[int] = []
        for migration in reversed(MIGRATIONS):
            if migration.version <= target_version or migration.version > current:
                continue
            self._log.info("rolling_back_migration", version=migration.version)
            try:
                self._conn.executescript(migration.down_sql)
                self._conn.execute(
                    "DELETE FROM schema_version WHERE version = ?", (migration.version,)
                )
                self._conn.commit()
            except sqlite3.Error as e:
                self._conn.rollback()
                self._log.error("rollback_failed", version=migration.version, error=str(e))
                raise MigrationError(migration.version, str(e)) from e
            rolled_back.append(migration.version)

        return rolled_back
