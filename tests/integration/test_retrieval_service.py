"""Integration tests for tier-gated retrieval over a real store."""

from collections.abc import Generator
from datetime import timedelta
from pathlib import Path

import pytest

from curator.config.loader import ConfigLoader
from curator.config.schemas.base import ScopeType, Tier
from curator.ingest import Accepted, IngestionGate, Rejected, RejectionReason
from curator.retrieval import RetrievalService
from curator.store.metrics import StoreMetrics
from curator.store.models import Folder, UserSubscription
from curator.store.store import CorpusStore
from tests.helpers.items import make_digest, make_item
from tests.helpers.time import FIXED_NOW


FIXTURES_DIR = Path(__file__).parent.parent / "fixtures" / "config"


@pytest.fixture
def store(tmp_path: Path) -> Generator[CorpusStore]:
    """Corpus with two digests, three users and one pro folder."""
    StoreMetrics.reset()
    corpus = CorpusStore(tmp_path / "corpus.sqlite", run_id="test-run-001")
    corpus.connect()

    corpus.add_item(make_item("itm_low", title="Beta", score=0.2))
    corpus.add_item(make_item("itm_high", title="alpha", score=0.9))
    corpus.add_item(
        make_item("itm_old", title="Gamma", score=0.5, published_at=FIXED_NOW - timedelta(days=3))
    )
    corpus.create_digest(make_digest("dg_old", ["itm_old"], days_ago=3))
    corpus.create_digest(make_digest("dg_today", ["itm_low", "itm_high"]))

    corpus.upsert_subscription(UserSubscription(user_id="premium-user", tier=Tier.PREMIUM))
    corpus.upsert_subscription(UserSubscription(user_id="pro-user", tier=Tier.PRO))
    corpus.upsert_subscription(UserSubscription(user_id="other-pro", tier=Tier.PRO))
    corpus.upsert_subscription(UserSubscription(user_id="tester", is_test_account=True))

    corpus.create_folder(Folder(id="fld_pro", user_id="pro-user", name="Reading"))
    corpus.add_membership("fld_pro", "itm_old")

    yield corpus
    corpus.close()


@pytest.fixture
def service(store: CorpusStore) -> RetrievalService:
    """Service with the default tier policy."""
    return RetrievalService(store)


class TestScopedItems:
    """Tests for get_scoped_items."""

    @pytest.mark.integration
    def test_premium_user_cannot_read_folders(self, service: RetrievalService) -> None:
        """Test that a folder scope below pro is refused with an upgrade prompt."""
        response = service.get_scoped_items(
            "premium-user", {"type": "folder", "folderId": "fld_pro"}
        )

        assert response.status == 403
        assert response.items == []
        assert response.error is not None
        assert response.error["upgrade_required"] is True
        assert response.error["required_tier"] == "pro"

    @pytest.mark.integration
    def test_free_user_cannot_read_archive(self, service: RetrievalService) -> None:
        """Test that all digests requires premium."""
        response = service.get_scoped_items("free-user", {"type": "all_digests"})

        assert response.status == 403
        assert response.error is not None
        assert response.error["error"] == "tier_insufficient"

    @pytest.mark.integration
    def test_premium_user_reads_archive(self, service: RetrievalService) -> None:
        """Test the archive sorted by quality."""
        response = service.get_scoped_items("premium-user", {"type": "all_digests"})

        assert response.ok
        assert [item.id for item in response.items] == ["itm_high", "itm_old", "itm_low"]

    @pytest.mark.integration
    def test_owner_reads_folder(self, service: RetrievalService) -> None:
        """Test that a pro user reads their own folder."""
        response = service.get_scoped_items(
            "pro-user", {"type": "folder", "folder_id": "fld_pro"}
        )

        assert response.status == 200
        assert [item.id for item in response.items] == ["itm_old"]

    @pytest.mark.integration
    def test_foreign_folder_is_forbidden(self, service: RetrievalService) -> None:
        """Test that a folder cannot be read by another pro user."""
        response = service.get_scoped_items(
            "other-pro", {"type": "folder", "folder_id": "fld_pro"}
        )

        assert response.status == 403
        assert response.error is not None
        assert response.error["error"] == "folder_not_owned"

    @pytest.mark.integration
    def test_missing_folder_is_not_found(self, service: RetrievalService) -> None:
        """Test an unknown folder id."""
        response = service.get_scoped_items(
            "pro-user", {"type": "folder", "folder_id": "fld_missing"}
        )

        assert response.status == 404

    @pytest.mark.integration
    def test_digest_scope_requires_id(self, service: RetrievalService) -> None:
        """Test that a current_digest scope without an id is malformed."""
        response = service.get_scoped_items("free-user", {"type": "current_digest"})

        assert response.status == 400
        assert response.error is not None
        assert response.error["error"] == "missing_scope_field"

    @pytest.mark.integration
    def test_unknown_digest_is_not_widened(self, service: RetrievalService) -> None:
        """Test that an unknown digest id fails instead of falling back."""
        response = service.get_scoped_items(
            "premium-user", {"type": "current_digest", "digest_id": "dg_missing"}
        )

        assert response.status == 404
        assert response.items == []

    @pytest.mark.integration
    def test_unknown_scope_type(self, service: RetrievalService) -> None:
        """Test that an unrecognized scope type is a bad request."""
        response = service.get_scoped_items("free-user", {"type": "everything"})

        assert response.status == 400
        assert response.error is not None
        assert response.error["error"] == "invalid_scope"

    @pytest.mark.integration
    def test_invalid_sort(self, service: RetrievalService) -> None:
        """Test that an unknown sort option is a bad request."""
        response = service.get_scoped_items(
            "free-user", {"type": "current_digest", "digest_id": "dg_today"}, sort="random"
        )

        assert response.status == 400
        assert response.error is not None
        assert response.error["error"] == "invalid_sort_option"

    @pytest.mark.integration
    def test_title_sort(self, service: RetrievalService) -> None:
        """Test case-insensitive title ordering."""
        response = service.get_scoped_items(
            "free-user", {"type": "current_digest", "digest_id": "dg_today"}, sort="title-asc"
        )

        assert [item.title for item in response.items] == ["alpha", "Beta"]

    @pytest.mark.integration
    def test_saved_items(self, service: RetrievalService, store: CorpusStore) -> None:
        """Test that bookmarks are read for the caller only."""
        store.save_item("premium-user", "itm_low")
        store.save_item("pro-user", "itm_high")

        response = service.get_scoped_items("premium-user", {"type": ScopeType.SAVED_ITEMS})

        assert [item.id for item in response.items] == ["itm_low"]

    @pytest.mark.integration
    def test_test_account_is_pro(self, service: RetrievalService) -> None:
        """Test that test accounts get pro features."""
        assert service.user_tier("tester") is Tier.PRO
        assert service.user_tier("nobody") is Tier.FREE


class TestSortedItems:
    """Tests for get_sorted_items."""

    @pytest.mark.integration
    def test_defaults_to_latest_digest(self, service: RetrievalService) -> None:
        """Test that the newest digest is served by quality."""
        response = service.get_sorted_items()

        assert response.ok
        assert [item.id for item in response.items] == ["itm_high", "itm_low"]

    @pytest.mark.integration
    def test_named_digest(self, service: RetrievalService) -> None:
        """Test reading an older digest."""
        response = service.get_sorted_items(sort="recency-desc", digest_id="dg_old")

        assert [item.id for item in response.items] == ["itm_old"]

    @pytest.mark.integration
    def test_unknown_digest(self, service: RetrievalService) -> None:
        """Test an unknown digest id."""
        assert service.get_sorted_items(digest_id="dg_missing").status == 404

    @pytest.mark.integration
    def test_empty_corpus(self, tmp_path: Path) -> None:
        """Test that no digest yields an empty result."""
        with CorpusStore(tmp_path / "empty.sqlite") as empty:
            response = RetrievalService(empty).get_sorted_items()

        assert response.status == 200
        assert response.items == []


class TestFolders:
    """Tests for folder management through the service."""

    @pytest.mark.integration
    def test_add_and_remove_are_idempotent(self, service: RetrievalService) -> None:
        """Test repeated adds and removes."""
        first = service.add_to_folder("pro-user", "fld_pro", "itm_high")
        second = service.add_to_folder("pro-user", "fld_pro", "itm_high")

        assert first.status == second.status == 200
        assert first.change is not None and first.change.changed
        assert second.change is not None and not second.change.changed

        removed = service.remove_from_folder("pro-user", "fld_pro", "itm_high")
        again = service.remove_from_folder("pro-user", "fld_pro", "itm_high")

        assert removed.change is not None and removed.change.changed
        assert again.status == 200
        assert again.change is not None and not again.change.changed

    @pytest.mark.integration
    def test_add_requires_pro(self, service: RetrievalService) -> None:
        """Test that membership changes are tier-gated."""
        response = service.add_to_folder("premium-user", "fld_pro", "itm_high")

        assert response.status == 403
        assert response.change is None

    @pytest.mark.integration
    def test_add_unknown_item(self, service: RetrievalService) -> None:
        """Test adding an item that does not exist."""
        response = service.add_to_folder("pro-user", "fld_pro", "itm_missing")

        assert response.status == 404

    @pytest.mark.integration
    def test_test_account_creates_folder(self, service: RetrievalService) -> None:
        """Test that a test account may create folders."""
        response = service.create_folder("tester", "Experiments")

        assert response.ok
        assert response.folders[0].user_id == "tester"
        assert response.folders[0].id.startswith("fld_")

    @pytest.mark.integration
    def test_delete_folder(self, service: RetrievalService) -> None:
        """Test that deleting a folder hides it from item lookups."""
        assert [f.id for f in service.folders_for_item("pro-user", "itm_old").folders] == [
            "fld_pro"
        ]

        response = service.delete_folder("pro-user", "fld_pro")

        assert response.status == 204
        assert response.ok
        assert service.folders_for_item("pro-user", "itm_old").folders == []

    @pytest.mark.integration
    def test_delete_foreign_folder(self, service: RetrievalService) -> None:
        """Test that only the owner may delete a folder."""
        assert service.delete_folder("other-pro", "fld_pro").status == 403

    @pytest.mark.integration
    def test_folders_for_item_filters_owner(self, service: RetrievalService) -> None:
        """Test that other users' folders are not disclosed."""
        assert service.folders_for_item("other-pro", "itm_old").folders == []

    @pytest.mark.integration
    def test_services_on_one_database_share_memberships(
        self, service: RetrievalService, store: CorpusStore
    ) -> None:
        """Test that a membership added by one service is read by another."""
        with CorpusStore(store.db_path, run_id="test-run-002") as other_store:
            other = RetrievalService(other_store)

            assert service.folders_for_item("pro-user", "itm_high").folders == []

            added = other.add_to_folder("pro-user", "fld_pro", "itm_high")

            assert added.status == 200
            assert [f.id for f in service.folders_for_item("pro-user", "itm_high").folders] == [
                "fld_pro"
            ]


class TestIngestToRetrieval:
    """End-to-end: configuration, ingestion gate, store and retrieval."""

    @pytest.mark.integration
    def test_ingested_item_is_retrievable(self, tmp_path: Path) -> None:
        """Test that an accepted item can be published and read back."""
        config = ConfigLoader(run_id="test-run-001").load(
            taxonomy_path=FIXTURES_DIR / "taxonomy.yaml",
            catalog_path=FIXTURES_DIR / "catalog.json",
            policy_path=FIXTURES_DIR / "policy.yaml",
        )
        gate = IngestionGate.from_config(config, clock=lambda: FIXED_NOW)
        feed = config.catalog.get_feed("nature-genetics")
        assert feed is not None
        payload = {
            "source_type": "journal",
            "source_id": "ng-1",
            "url": "https://doi.org/10.1038/ng.1",
            "title": "Whole genome sequencing of centenarians",
            "published_at": "2017-06-12T00:00:00Z",
            "journal_name": "Nature Genetics",
            "topics": ["genomics", "astrology"],
        }

        with CorpusStore(tmp_path / "corpus.sqlite") as corpus:
            outcome = gate.ingest(feed, payload, corpus)
            assert isinstance(outcome, Accepted)
            assert outcome.stripped_topics == {"astrology": 1}

            duplicate = gate.ingest(feed, payload, corpus)
            assert isinstance(duplicate, Rejected)
            assert duplicate.reason is RejectionReason.DUPLICATE

            corpus.create_digest(make_digest("dg_1", [outcome.item.id]))
            service = RetrievalService.from_config(corpus, config)
            response = service.get_sorted_items()

        assert [item.id for item in response.items] == [outcome.item.id]
        assert response.items[0].topics == ("genomics",)
        assert response.items[0].total_score == pytest.approx(outcome.item.total_score)
