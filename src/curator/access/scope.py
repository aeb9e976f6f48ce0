"""Retrieval scope resolution.

Turns a (scope, tier, user) request into an authorized ``QuerySpec``.
Checks run in a fixed order: shape, then tier, then existence and
ownership. Any failure aborts the whole request; a scope is never
widened or narrowed to make it succeed.
"""

from collections.abc import Mapping
from typing import Protocol

import structlog
from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from curator.access.errors import (
    DigestNotFoundError,
    FolderNotFoundError,
    FolderNotOwnedError,
    InvalidScopeError,
    MissingScopeFieldError,
)
from curator.access.tiers import TierGate
from curator.config.schemas.base import ScopeType, Tier
from curator.store.models import Digest, Folder, QuerySpec, QueryTarget


logger = structlog.get_logger()

# Identifier each scope type must carry.
REQUIRED_SCOPE_FIELDS: dict[ScopeType, str] = {
    ScopeType.CURRENT_DIGEST: "digest_id",
    ScopeType.FOLDER: "folder_id",
}


class Scope(BaseModel):
    """A requested retrieval scope.

    Accepts camelCase keys (``digestId``, ``folderId``) from API payloads.
    Keys that do not apply to the scope type are ignored.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    type: ScopeType
    digest_id: str | None = None
    folder_id: str | None = None

    @classmethod
    def parse(cls, data: "Scope | Mapping[str, object]") -> "Scope":
        """Build a scope from a payload.

        Raises:
            InvalidScopeError: If the payload has no recognizable type.
        """
        if isinstance(data, Scope):
            return data
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            locations = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
            raise InvalidScopeError(f"Malformed scope: {', '.join(locations)}") from e


class ScopeStore(Protocol):
    """Lookups scope resolution needs from storage."""

    def get_digest(self, digest_id: str) -> Digest | None:
        """Fetch a digest by id."""
        ...

    def get_folder(self, folder_id: str) -> Folder | None:
        """Fetch a folder by id."""
        ...


class ScopeResolver:
    """Authorizes retrieval scopes and translates them to query specs."""

    def __init__(self, gate: TierGate, store: ScopeStore) -> None:
        """Initialize the resolver.

        Args:
            gate: Tier gate holding the scope minimum tiers.
            store: Digest and folder lookups.
        """
        self._gate = gate
        self._store = store
        self._log = logger.bind(component="access")

    def resolve(
        self,
        scope: Scope | Mapping[str, object],
        user_tier: Tier,
        user_id: str,
    ) -> QuerySpec:
        """Resolve a scope for a user.

        Args:
            scope: Requested scope, parsed or raw.
            user_tier: Caller's effective tier.
            user_id: Caller.

        Returns:
            The authorized query spec.

        Raises:
            InvalidScopeError: If the scope cannot be parsed.
            MissingScopeFieldError: If the scope lacks its required id.
            TierInsufficientError: If the tier is below the scope minimum.
            DigestNotFoundError: If a current_digest scope names no digest.
            FolderNotFoundError: If a folder scope names no folder.
            FolderNotOwnedError: If the folder belongs to someone else.
        """
        parsed = Scope.parse(scope)
        self._check_shape(parsed)
        self._gate.require(
            self._gate.minimum_for_scope(parsed.type),
            user_tier,
            f"scope:{parsed.type.value}",
        )
        spec = self._translate(parsed, user_id)
        self._log.info(
            "scope_resolved",
            scope_type=parsed.type.value,
            target=spec.target.value,
            user_id=user_id,
            user_tier=user_tier.value,
        )
        return spec

    def _check_shape(self, scope: Scope) -> None:
        field = REQUIRED_SCOPE_FIELDS.get(scope.type)
        if field is None:
            return
        value = getattr(scope, field)
        if value is None or not value.strip():
            raise MissingScopeFieldError(scope.type, field)

    def _translate(self, scope: Scope, user_id: str) -> QuerySpec:
        if scope.type is ScopeType.CURRENT_DIGEST:
            digest_id = scope.digest_id or ""
            if self._store.get_digest(digest_id) is None:
                raise DigestNotFoundError(digest_id)
            return QuerySpec(target=QueryTarget.DIGEST, digest_id=digest_id)

        if scope.type is ScopeType.ALL_DIGESTS:
            return QuerySpec(target=QueryTarget.ALL_DIGESTS)

        if scope.type is ScopeType.SAVED_ITEMS:
            return QuerySpec(target=QueryTarget.SAVED, user_id=user_id)

        folder_id = scope.folder_id or ""
        folder = self._store.get_folder(folder_id)
        if folder is None:
            raise FolderNotFoundError(folder_id)
        if folder.user_id != user_id:
            raise FolderNotOwnedError(folder_id, user_id)
        return QuerySpec(target=QueryTarget.FOLDER, folder_id=folder_id, user_id=user_id)
