"""Errors raised by tier gating, scope resolution and folder membership."""

from curator.config.schemas.base import ScopeType, Tier
from curator.errors import CuratorError


class ScopeError(CuratorError):
    """Base class for malformed retrieval scopes."""

    kind = "invalid_scope"


class MissingScopeFieldError(ScopeError):
    """A scope lacks the identifier its type requires."""

    kind = "missing_scope_field"

    def __init__(self, scope_type: ScopeType, field: str) -> None:
        self.scope_type = scope_type
        self.field = field
        super().__init__(
            f"Scope '{scope_type.value}' requires '{field}'",
            context={"scope_type": scope_type.value, "field": field},
        )


class InvalidScopeError(ScopeError):
    """A scope cannot be parsed at all (e.g. unknown type)."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class TierInsufficientError(CuratorError):
    """The caller's tier is below the minimum for a feature."""

    kind = "tier_insufficient"

    def __init__(self, required: Tier, actual: Tier, feature: str) -> None:
        self.required = required
        self.actual = actual
        self.feature = feature
        super().__init__(
            f"'{feature}' requires the {required.value} tier (current: {actual.value})",
            context={
                "required_tier": required.value,
                "current_tier": actual.value,
                "feature": feature,
                "upgrade_required": True,
            },
        )


class FolderNotFoundError(CuratorError):
    """The referenced folder does not exist."""

    kind = "folder_not_found"

    def __init__(self, folder_id: str) -> None:
        self.folder_id = folder_id
        super().__init__(f"Folder not found: {folder_id}", context={"folder_id": folder_id})


class FolderNotOwnedError(CuratorError):
    """The folder exists but belongs to someone else."""

    kind = "folder_not_owned"

    def __init__(self, folder_id: str, user_id: str) -> None:
        self.folder_id = folder_id
        self.user_id = user_id
        super().__init__(
            f"Folder {folder_id} does not belong to user {user_id}",
            context={"folder_id": folder_id, "user_id": user_id},
        )


class DigestNotFoundError(CuratorError):
    """The referenced digest does not exist."""

    kind = "digest_not_found"

    def __init__(self, digest_id: str) -> None:
        self.digest_id = digest_id
        super().__init__(f"Digest not found: {digest_id}", context={"digest_id": digest_id})
