"""Framework-free retrieval API.

Every call resolves the caller's tier from their subscription, runs the
access checks and returns a response carrying an HTTP-equivalent status.
Domain errors become structured error payloads; infrastructure errors
propagate.
"""

import uuid
from collections.abc import Mapping
from http import HTTPStatus

import structlog

from curator.access.error_mapper import error_payload, map_error_to_status
from curator.access.folders import FolderMembershipManager
from curator.access.scope import Scope, ScopeResolver
from curator.access.tiers import TierGate, resolve_user_tier
from curator.config.effective import EffectiveConfig
from curator.config.schemas.base import ScopeType, Tier
from curator.errors import CuratorError
from curator.observability.logging import request_context
from curator.ranker.engagement import EngagementAggregator
from curator.ranker.sorter import SortOption, parse_sort_option, sort_items
from curator.retrieval.models import FolderResponse, ItemsResponse, MembershipResponse
from curator.store.store import CorpusStore


logger = structlog.get_logger()


class RetrievalService:
    """Tier-gated access to the corpus."""

    def __init__(
        self,
        store: CorpusStore,
        gate: TierGate | None = None,
        aggregator: EngagementAggregator | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            store: Connected corpus store.
            gate: Tier gate; defaults to the built-in tier policy.
            aggregator: Engagement aggregator for engagement sorting.
        """
        self._store = store
        self._gate = gate or TierGate()
        self._aggregator = aggregator or EngagementAggregator()
        self._resolver = ScopeResolver(self._gate, store)
        self._folders = FolderMembershipManager(self._gate, store)
        self._log = logger.bind(component="retrieval")

    @classmethod
    def from_config(cls, store: CorpusStore, config: EffectiveConfig) -> "RetrievalService":
        """Build a service wired from an effective configuration."""
        return cls(
            store,
            gate=TierGate(config.policy.tiers),
            aggregator=EngagementAggregator(config.policy.engagement),
        )

    @property
    def folders(self) -> FolderMembershipManager:
        """The folder membership manager."""
        return self._folders

    def user_tier(self, user_id: str) -> Tier:
        """Effective tier for a user."""
        return resolve_user_tier(self._store.get_subscription(user_id))

    def _error(self, error: CuratorError, operation: str) -> tuple[int, dict[str, object]]:
        status = map_error_to_status(error)
        self._log.info(
            "request_denied",
            operation=operation,
            status=int(status),
            error_kind=error.kind,
        )
        return int(status), error_payload(error)

    def get_scoped_items(
        self,
        user_id: str,
        scope: Scope | Mapping[str, object],
        sort: SortOption | str | None = None,
    ) -> ItemsResponse:
        """Items in an authorized scope, sorted.

        Returns:
            200 with items; 400 for a malformed scope or sort; 403 when the
            tier is too low or the folder is someone else's; 404 when the
            digest or folder does not exist.
        """
        with request_context(uuid.uuid4().hex[:12], user_id):
            try:
                option = parse_sort_option(sort)
                spec = self._resolver.resolve(scope, self.user_tier(user_id), user_id)
            except CuratorError as e:
                status, payload = self._error(e, "get_scoped_items")
                return ItemsResponse(status=status, error=payload)

            items = sort_items(self._store.query_items(spec), option, self._aggregator)
            self._log.info(
                "scoped_items_served",
                target=spec.target.value,
                sort=option.value,
                item_count=len(items),
            )
            return ItemsResponse(items=items)

    def get_sorted_items(
        self,
        sort: SortOption | str | None = None,
        digest_id: str | None = None,
    ) -> ItemsResponse:
        """Items of a digest, sorted. Defaults to the latest digest.

        Returns:
            200 with items (empty when no digest exists yet); 400 for an
            unknown sort; 404 when ``digest_id`` names no digest.
        """
        with request_context(uuid.uuid4().hex[:12]):
            try:
                option = parse_sort_option(sort)
                if digest_id is None:
                    latest = self._store.get_latest_digest()
                    if latest is None:
                        return ItemsResponse()
                    digest_id = latest.id
                spec = self._resolver.resolve(
                    Scope(type=ScopeType.CURRENT_DIGEST, digest_id=digest_id),
                    Tier.FREE,
                    "anonymous",
                )
            except CuratorError as e:
                status, payload = self._error(e, "get_sorted_items")
                return ItemsResponse(status=status, error=payload)

            items = sort_items(self._store.query_items(spec), option, self._aggregator)
            return ItemsResponse(items=items)

    def add_to_folder(self, user_id: str, folder_id: str, item_id: str) -> MembershipResponse:
        """Add an item to one of the user's folders (idempotent)."""
        with request_context(uuid.uuid4().hex[:12], user_id):
            try:
                change = self._folders.add_item(
                    folder_id, item_id, user_id, self.user_tier(user_id)
                )
            except CuratorError as e:
                status, payload = self._error(e, "add_to_folder")
                return MembershipResponse(status=status, error=payload)
            return MembershipResponse(change=change)

    def remove_from_folder(self, user_id: str, folder_id: str, item_id: str) -> MembershipResponse:
        """Remove an item from one of the user's folders (idempotent)."""
        with request_context(uuid.uuid4().hex[:12], user_id):
            try:
                change = self._folders.remove_item(
                    folder_id, item_id, user_id, self.user_tier(user_id)
                )
            except CuratorError as e:
                status, payload = self._error(e, "remove_from_folder")
                return MembershipResponse(status=status, error=payload)
            return MembershipResponse(change=change)

    def create_folder(
        self,
        user_id: str,
        name: str,
        description: str | None = None,
    ) -> FolderResponse:
        """Create a folder for the user."""
        with request_context(uuid.uuid4().hex[:12], user_id):
            try:
                folder = self._folders.create_folder(
                    user_id, self.user_tier(user_id), name, description
                )
            except CuratorError as e:
                status, payload = self._error(e, "create_folder")
                return FolderResponse(status=status, error=payload)
            return FolderResponse(folders=[folder])

    def delete_folder(self, user_id: str, folder_id: str) -> FolderResponse:
        """Delete one of the user's folders with its memberships."""
        with request_context(uuid.uuid4().hex[:12], user_id):
            try:
                self._folders.delete_folder(folder_id, user_id)
            except CuratorError as e:
                status, payload = self._error(e, "delete_folder")
                return FolderResponse(status=status, error=payload)
            return FolderResponse(status=HTTPStatus.NO_CONTENT)

    def folders_for_item(self, user_id: str, item_id: str) -> FolderResponse:
        """The user's folders that contain an item."""
        folders = self._folders.folders_for_item(item_id, user_id=user_id)
        return FolderResponse(
            folders=sorted(folders, key=lambda folder: (folder.created_at, folder.id)),
        )
