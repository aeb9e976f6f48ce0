"""Errors raised by the corpus store.

Infrastructure failures derive from ``StoreError``; item-level rule
violations the store enforces itself are domain errors.
"""

from curator.errors import CuratorError


class StoreError(Exception):
    """Base exception for corpus store infrastructure failures."""


class StoreConnectionError(StoreError):
    """Raised when the store is used without an open connection."""

    def __init__(self, message: str = "Database not connected") -> None:
        super().__init__(message)


class MigrationError(StoreError):
    """Raised when a schema migration cannot be applied or rolled back."""

    def __init__(self, version: int, message: str) -> None:
        self.version = version
        super().__init__(f"Migration {version} failed: {message}")


class ItemNotFoundError(CuratorError):
    """The referenced item does not exist."""

    kind = "item_not_found"

    def __init__(self, item_id: str) -> None:
        self.item_id = item_id
        super().__init__(f"Item not found: {item_id}", context={"item_id": item_id})


class ItemArchivedError(CuratorError):
    """The item is archived; only its engagement counters may change."""

    kind = "item_archived"

    def __init__(self, item_id: str) -> None:
        self.item_id = item_id
        super().__init__(f"Item is archived: {item_id}", context={"item_id": item_id})
