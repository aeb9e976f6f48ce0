"""Folder membership management.

Folders are a pro feature. Membership edges are created only while the
owner holds a qualifying tier; existing edges survive a downgrade and can
still be read, but not changed until the tier is restored.
"""

import uuid
from dataclasses import dataclass
from typing import Protocol

import structlog

from curator.access.errors import FolderNotFoundError, FolderNotOwnedError
from curator.access.tiers import TierGate
from curator.config.schemas.base import ScopeType, Tier
from curator.store.errors import ItemNotFoundError
from curator.store.models import Folder, Item


logger = structlog.get_logger()


class FolderStore(Protocol):
    """Storage operations the membership manager relies on."""

    def get_item(self, item_id: str) -> Item | None:
        """Fetch an item by id."""
        ...

    def get_folder(self, folder_id: str) -> Folder | None:
        """Fetch a folder by id."""
        ...

    def create_folder(self, folder: Folder) -> None:
        """Persist a new folder."""
        ...

    def rename_folder(self, folder_id: str, name: str, description: str | None) -> Folder | None:
        """Rename a folder."""
        ...

    def delete_folder(self, folder_id: str) -> list[str]:
        """Delete a folder and return its former member ids."""
        ...

    def add_membership(self, folder_id: str, item_id: str) -> bool:
        """Create an edge; True if new."""
        ...

    def remove_membership(self, folder_id: str, item_id: str) -> bool:
        """Delete an edge; True if it existed."""
        ...

    def get_folders_for_item(self, item_id: str) -> list[Folder]:
        """Folders containing an item."""
        ...


@dataclass(frozen=True)
class MembershipChange:
    """Result of an add or remove.

    Attributes:
        folder_id: Folder touched.
        item_id: Item touched.
        changed: False when the call was a no-op (edge already present on
            add, already absent on remove).
    """

    folder_id: str
    item_id: str
    changed: bool


class FolderMembershipManager:
    """Creates, removes and reads folder membership edges."""

    def __init__(self, gate: TierGate, store: FolderStore) -> None:
        """Initialize the manager.

        Args:
            gate: Tier gate; the folder scope minimum applies to changes.
            store: Folder and membership storage.
        """
        self._gate = gate
        self._store = store
        self._log = logger.bind(component="folders")

    def _require_folder_tier(self, user_tier: Tier) -> None:
        self._gate.require(
            self._gate.minimum_for_scope(ScopeType.FOLDER),
            user_tier,
            "folders",
        )

    def _owned_folder(self, folder_id: str, user_id: str) -> Folder:
        folder = self._store.get_folder(folder_id)
        if folder is None:
            raise FolderNotFoundError(folder_id)
        if folder.user_id != user_id:
            raise FolderNotOwnedError(folder_id, user_id)
        return folder

    def create_folder(
        self,
        user_id: str,
        user_tier: Tier,
        name: str,
        description: str | None = None,
    ) -> Folder:
        """Create a folder for a user.

        Raises:
            TierInsufficientError: If the tier does not include folders.
        """
        self._require_folder_tier(user_tier)
        folder = Folder(
            id=f"fld_{uuid.uuid4().hex[:16]}",
            user_id=user_id,
            name=name,
            description=description,
        )
        self._store.create_folder(folder)
        self._log.info("folder_created", folder_id=folder.id, user_id=user_id)
        return folder

    def rename_folder(
        self,
        folder_id: str,
        user_id: str,
        user_tier: Tier,
        name: str,
        description: str | None = None,
    ) -> Folder:
        """Rename one of the user's folders.

        Raises:
            TierInsufficientError: If the tier does not include folders.
            FolderNotFoundError: If the folder does not exist.
            FolderNotOwnedError: If the folder belongs to someone else.
        """
        self._require_folder_tier(user_tier)
        self._owned_folder(folder_id, user_id)
        updated = self._store.rename_folder(folder_id, name, description)
        if updated is None:
            raise FolderNotFoundError(folder_id)
        return updated

    def delete_folder(self, folder_id: str, user_id: str) -> None:
        """Delete one of the user's folders and its memberships.

        Owners may delete folders whatever their current tier.

        Raises:
            FolderNotFoundError: If the folder does not exist.
            FolderNotOwnedError: If the folder belongs to someone else.
        """
        self._owned_folder(folder_id, user_id)
        former_members = self._store.delete_folder(folder_id)
        self._log.info(
            "folder_deleted",
            folder_id=folder_id,
            user_id=user_id,
            memberships_removed=len(former_members),
        )

    def add_item(
        self,
        folder_id: str,
        item_id: str,
        user_id: str,
        user_tier: Tier,
    ) -> MembershipChange:
        """Put an item in a folder. Adding an existing member is a no-op.

        Raises:
            TierInsufficientError: If the tier does not include folders.
            FolderNotFoundError: If the folder does not exist.
            FolderNotOwnedError: If the folder belongs to someone else.
            ItemNotFoundError: If the item does not exist.
        """
        self._require_folder_tier(user_tier)
        self._owned_folder(folder_id, user_id)
        if self._store.get_item(item_id) is None:
            raise ItemNotFoundError(item_id)

        created = self._store.add_membership(folder_id, item_id)
        self._log.info(
            "membership_added",
            folder_id=folder_id,
            item_id=item_id,
            user_id=user_id,
            created=created,
        )
        return MembershipChange(folder_id=folder_id, item_id=item_id, changed=created)

    def remove_item(
        self,
        folder_id: str,
        item_id: str,
        user_id: str,
        user_tier: Tier,
    ) -> MembershipChange:
        """Take an item out of a folder. Removing a non-member is a no-op.

        Raises:
            TierInsufficientError: If the tier does not include folders.
            FolderNotFoundError: If the folder does not exist.
            FolderNotOwnedError: If the folder belongs to someone else.
        """
        self._require_folder_tier(user_tier)
        self._owned_folder(folder_id, user_id)

        removed = self._store.remove_membership(folder_id, item_id)
        self._log.info(
            "membership_removed",
            folder_id=folder_id,
            item_id=item_id,
            user_id=user_id,
            removed=removed,
        )
        return MembershipChange(folder_id=folder_id, item_id=item_id, changed=removed)

    def folders_for_item(self, item_id: str, user_id: str | None = None) -> frozenset[Folder]:
        """Folders containing an item, optionally only the user's own.

        Reads are not tier-gated, so downgraded users still see where their
        items are filed. Memberships are read from storage on every call, so
        a change made through any connection is visible to the next read.

        Args:
            item_id: Item to look up.
            user_id: Restrict to this user's folders when given.

        Returns:
            The matching folders.
        """
        folders = frozenset(self._store.get_folders_for_item(item_id))
        if user_id is None:
            return folders
        return frozenset(folder for folder in folders if folder.user_id == user_id)
