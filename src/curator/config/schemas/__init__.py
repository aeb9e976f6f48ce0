"""Configuration schemas."""

from curator.config.schemas.base import (
    SOCIAL_SOURCE_TYPES,
    Capability,
    Methodology,
    ScopeType,
    SourceType,
    Tier,
    TopicPolicy,
)
from curator.config.schemas.catalog import CatalogConfig, CatalogFeed
from curator.config.schemas.policy import (
    EngagementConfig,
    IngestionConfig,
    PolicyConfig,
    ScoringConfig,
    TierLimits,
    TierLimitsConfig,
    TierPolicyConfig,
)
from curator.config.schemas.taxonomy import TaxonomyConfig, TopicEntry


__all__ = [
    "SOCIAL_SOURCE_TYPES",
    "Capability",
    "CatalogConfig",
    "CatalogFeed",
    "EngagementConfig",
    "IngestionConfig",
    "Methodology",
    "PolicyConfig",
    "ScopeType",
    "ScoringConfig",
    "SourceType",
    "TaxonomyConfig",
    "Tier",
    "TierLimits",
    "TierLimitsConfig",
    "TierPolicyConfig",
    "TopicEntry",
    "TopicPolicy",
]
