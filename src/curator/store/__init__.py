"""SQLite corpus store."""

from curator.store.errors import (
    ItemArchivedError,
    ItemNotFoundError,
    MigrationError,
    StoreConnectionError,
    StoreError,
)
from curator.store.models import (
    Digest,
    Folder,
    Item,
    QuerySpec,
    QueryTarget,
    UserSubscription,
)
from curator.store.store import CorpusStore


__all__ = [
    "CorpusStore",
    "Digest",
    "Folder",
    "Item",
    "ItemArchivedError",
    "ItemNotFoundError",
    "MigrationError",
    "QuerySpec",
    "QueryTarget",
    "StoreConnectionError",
    "StoreError",
    "UserSubscription",
]
