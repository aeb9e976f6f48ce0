"""Unit tests for scope resolution."""

from datetime import timedelta

import pytest

from curator.access import (
    DigestNotFoundError,
    FolderNotFoundError,
    FolderNotOwnedError,
    InvalidScopeError,
    MissingScopeFieldError,
    Scope,
    ScopeResolver,
    TierGate,
    TierInsufficientError,
)
from curator.config.schemas.base import ScopeType, Tier
from curator.store.models import Digest, Folder, QueryTarget
from tests.helpers.time import FIXED_NOW


class _FakeScopeStore:
    """In-memory digest and folder lookups."""

    def __init__(self) -> None:
        self.digests = {
            "dg_1": Digest(
                id="dg_1",
                slug="2017-06-12",
                window_start=FIXED_NOW - timedelta(days=1),
                window_end=FIXED_NOW,
            )
        }
        self.folders = {
            "fld_alice": Folder(id="fld_alice", user_id="alice", name="Reading"),
            "fld_bob": Folder(id="fld_bob", user_id="bob", name="Bob's"),
        }
        self.lookups = 0

    def get_digest(self, digest_id: str) -> Digest | None:
        self.lookups += 1
        return self.digests.get(digest_id)

    def get_folder(self, folder_id: str) -> Folder | None:
        self.lookups += 1
        return self.folders.get(folder_id)


@pytest.fixture
def store() -> _FakeScopeStore:
    """Fake lookups."""
    return _FakeScopeStore()


@pytest.fixture
def resolver(store: _FakeScopeStore) -> ScopeResolver:
    """Resolver over the fake store."""
    return ScopeResolver(TierGate(), store)


class TestResolveSuccess:
    """Tests for authorized scopes."""

    def test_current_digest_for_free_user(self, resolver: ScopeResolver) -> None:
        """Test that any tier reads the current digest."""
        spec = resolver.resolve({"type": "current_digest", "digestId": "dg_1"}, Tier.FREE, "u")

        assert spec.target is QueryTarget.DIGEST
        assert spec.digest_id == "dg_1"

    def test_all_digests_for_premium(self, resolver: ScopeResolver) -> None:
        """Test the archive scope for premium users."""
        spec = resolver.resolve(Scope(type=ScopeType.ALL_DIGESTS), Tier.PREMIUM, "u")
        assert spec.target is QueryTarget.ALL_DIGESTS

    def test_saved_items_bound_to_user(self, resolver: ScopeResolver) -> None:
        """Test that saved items are always the caller's."""
        spec = resolver.resolve({"type": "saved_items"}, Tier.PREMIUM, "alice")

        assert spec.target is QueryTarget.SAVED
        assert spec.user_id == "alice"

    def test_own_folder_for_pro(self, resolver: ScopeResolver) -> None:
        """Test that pro users read their own folders."""
        spec = resolver.resolve({"type": "folder", "folder_id": "fld_alice"}, Tier.PRO, "alice")

        assert spec.target is QueryTarget.FOLDER
        assert spec.folder_id == "fld_alice"
        assert spec.user_id == "alice"

    def test_extra_fields_ignored(self, resolver: ScopeResolver) -> None:
        """Test that keys irrelevant to the scope type are ignored."""
        spec = resolver.resolve(
            {"type": "all_digests", "folderId": "fld_bob", "unknown": 1},
            Tier.PRO,
            "alice",
        )
        assert spec.target is QueryTarget.ALL_DIGESTS
        assert spec.folder_id is None


class TestResolveFailures:
    """Tests for rejected scopes."""

    def test_free_user_all_digests(self, resolver: ScopeResolver) -> None:
        """Test that free users cannot read the archive."""
        with pytest.raises(TierInsufficientError) as exc_info:
            resolver.resolve({"type": "all_digests"}, Tier.FREE, "u")

        assert exc_info.value.required is Tier.PREMIUM

    def test_premium_user_folder(self, resolver: ScopeResolver) -> None:
        """Test that premium users cannot use folder scopes."""
        with pytest.raises(TierInsufficientError) as exc_info:
            resolver.resolve({"type": "folder", "folderId": "fld_alice"}, Tier.PREMIUM, "alice")

        assert exc_info.value.required is Tier.PRO

    def test_pro_user_foreign_folder(self, resolver: ScopeResolver) -> None:
        """Test that nobody reads another user's folder."""
        with pytest.raises(FolderNotOwnedError):
            resolver.resolve({"type": "folder", "folderId": "fld_bob"}, Tier.PRO, "alice")

    def test_missing_folder(self, resolver: ScopeResolver) -> None:
        """Test an unknown folder id."""
        with pytest.raises(FolderNotFoundError):
            resolver.resolve({"type": "folder", "folderId": "fld_nope"}, Tier.PRO, "alice")

    def test_current_digest_without_id(self, resolver: ScopeResolver) -> None:
        """Test that the digest id is required."""
        with pytest.raises(MissingScopeFieldError) as exc_info:
            resolver.resolve({"type": "current_digest"}, Tier.PRO, "u")

        assert exc_info.value.field == "digest_id"

    def test_blank_folder_id(self, resolver: ScopeResolver) -> None:
        """Test that a blank id counts as missing."""
        with pytest.raises(MissingScopeFieldError):
            resolver.resolve({"type": "folder", "folderId": "  "}, Tier.PRO, "u")

    def test_unknown_digest_is_not_widened(self, resolver: ScopeResolver) -> None:
        """Test that a missing digest fails instead of falling back."""
        with pytest.raises(DigestNotFoundError):
            resolver.resolve({"type": "current_digest", "digestId": "dg_x"}, Tier.PRO, "u")

    def test_unknown_scope_type(self, resolver: ScopeResolver) -> None:
        """Test that unknown types are malformed requests."""
        with pytest.raises(InvalidScopeError):
            resolver.resolve({"type": "everything"}, Tier.PRO, "u")

    def test_shape_checked_before_tier(self, resolver: ScopeResolver) -> None:
        """Test that a malformed scope is reported even for a low tier."""
        with pytest.raises(MissingScopeFieldError):
            resolver.resolve({"type": "folder"}, Tier.FREE, "u")

    def test_tier_checked_before_lookup(
        self, resolver: ScopeResolver, store: _FakeScopeStore
    ) -> None:
        """Test that denied requests never touch storage."""
        with pytest.raises(TierInsufficientError):
            resolver.resolve({"type": "folder", "folderId": "fld_bob"}, Tier.FREE, "alice")

        assert store.lookups == 0
