"""Effective configuration combining all validated configs."""

import hashlib
import json
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from curator.config.schemas.catalog import CatalogConfig, CatalogFeed
from curator.config.schemas.policy import PolicyConfig
from curator.config.schemas.taxonomy import TaxonomyConfig
from curator.taxonomy.vocabulary import Taxonomy


class EffectiveConfig(BaseModel):
    """Immutable, normalized configuration used for the lifetime of a process.

    Attributes:
        taxonomy: Validated topic taxonomy.
        catalog: Validated feed catalog.
        policy: Validated scoring, tier and ingestion policy.
        file_checksums: SHA-256 checksums of source files.
        run_id: Identifier of the run that loaded the config.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    taxonomy: TaxonomyConfig
    catalog: CatalogConfig
    policy: PolicyConfig
    file_checksums: Annotated[dict[str, str], Field(default_factory=dict)]
    run_id: str

    def to_normalized_json(self) -> str:
        """Serialize with sorted keys so repeated calls are byte-identical."""
        data = self.model_dump(mode="json")
        return json.dumps(data, sort_keys=True, separators=(",", ":"))

    def compute_checksum(self) -> str:
        """SHA-256 of the normalized configuration."""
        return hashlib.sha256(self.to_normalized_json().encode("utf-8")).hexdigest()

    def build_taxonomy(self) -> Taxonomy:
        """Build the immutable vocabulary object injected into validators."""
        return Taxonomy.from_config(self.taxonomy)

    def approved_feeds(self) -> list[CatalogFeed]:
        """Feeds that may be ingested."""
        return [feed for feed in self.catalog.feeds if feed.is_approved]

    def summary(self) -> dict[str, object]:
        """Short description for logs and status output."""
        return {
            "run_id": self.run_id,
            "taxonomy_version": self.taxonomy.version,
            "topic_count": len(self.taxonomy.topics),
            "feed_count": len(self.catalog.feeds),
            "approved_feed_count": len(self.approved_feeds()),
            "policy_version": self.policy.version,
            "config_checksum": self.compute_checksum(),
        }
