"""Policy configuration schema: scoring weights, tiers, limits and ingestion."""

import math
from typing import Annotated

from pydantic import Field, field_validator, model_validator

from curator.config.schemas.base import Capability, ScopeType, Tier, TopicPolicy
from curator.data_model import StrictBaseModel


WEIGHT_SUM_TOLERANCE = 1e-6


def _default_weights() -> dict[str, float]:
    return {
        "content_quality": 0.4,
        "engagement": 0.2,
        "credibility": 0.2,
        "recency": 0.1,
        "community": 0.1,
    }


class ScoringConfig(StrictBaseModel):
    """Subscore weights for the composite quality score.

    Weights are applied in declaration order and must sum to 1.0.

    Attributes:
        weights: Weight by subscore name.
    """

    weights: dict[str, float] = Field(default_factory=_default_weights)

    @field_validator("weights")
    @classmethod
    def validate_weights(cls, value: dict[str, float]) -> dict[str, float]:
        """Ensure weights are finite, non-negative and sum to 1.0."""
        if not value:
            msg = "At least one subscore weight is required"
            raise ValueError(msg)
        for name, weight in value.items():
            if not name.strip():
                msg = "Subscore names must be non-empty"
                raise ValueError(msg)
            if not math.isfinite(weight) or weight < 0:
                msg = f"Weight for '{name}' must be a finite non-negative number"
                raise ValueError(msg)
        total = math.fsum(value.values())
        if not math.isclose(total, 1.0, abs_tol=WEIGHT_SUM_TOLERANCE):
            msg = f"Subscore weights must sum to 1.0, got {total}"
            raise ValueError(msg)
        return value


class EngagementConfig(StrictBaseModel):
    """Weights for folding engagement counters into one magnitude.

    The default is an unweighted sum.
    """

    upvotes_weight: Annotated[float, Field(ge=0.0)] = 1.0
    views_weight: Annotated[float, Field(ge=0.0)] = 1.0
    comments_weight: Annotated[float, Field(ge=0.0)] = 1.0


def _default_order() -> dict[Tier, int]:
    return {Tier.FREE: 1, Tier.PREMIUM: 2, Tier.PRO: 3}


def _default_scope_minimum() -> dict[ScopeType, Tier]:
    return {
        ScopeType.CURRENT_DIGEST: Tier.FREE,
        ScopeType.ALL_DIGESTS: Tier.PREMIUM,
        ScopeType.SAVED_ITEMS: Tier.PREMIUM,
        ScopeType.FOLDER: Tier.PRO,
    }


def _default_capability_minimum() -> dict[Capability, Tier]:
    return {
        Capability.ANALYTICS: Tier.PRO,
        Capability.EXPORT_MARKDOWN: Tier.PREMIUM,
        Capability.EXPORT_RSS: Tier.PRO,
        Capability.DIGEST_DAILY: Tier.PREMIUM,
        Capability.DIGEST_REALTIME: Tier.PRO,
    }


class TierPolicyConfig(StrictBaseModel):
    """Tier ordering and the minimum tier for each gated feature.

    Attributes:
        order: Rank of each tier; higher ranks include lower ones.
        scope_minimum: Minimum tier per retrieval scope.
        capability_minimum: Minimum tier per gated capability.
    """

    order: dict[Tier, int] = Field(default_factory=_default_order)
    scope_minimum: dict[ScopeType, Tier] = Field(default_factory=_default_scope_minimum)
    capability_minimum: dict[Capability, Tier] = Field(
        default_factory=_default_capability_minimum
    )

    @model_validator(mode="after")
    def validate_complete(self) -> "TierPolicyConfig":
        """Ensure every tier is ranked uniquely and every gate is defined."""
        missing_tiers = [tier.value for tier in Tier if tier not in self.order]
        if missing_tiers:
            msg = f"Tier order is missing: {missing_tiers}"
            raise ValueError(msg)
        ranks = list(self.order.values())
        if len(set(ranks)) != len(ranks):
            msg = "Tier ranks must be distinct"
            raise ValueError(msg)
        missing_scopes = [s.value for s in ScopeType if s not in self.scope_minimum]
        if missing_scopes:
            msg = f"Scope minimum tiers are missing: {missing_scopes}"
            raise ValueError(msg)
        missing_caps = [c.value for c in Capability if c not in self.capability_minimum]
        if missing_caps:
            msg = f"Capability minimum tiers are missing: {missing_caps}"
            raise ValueError(msg)
        return self


class TierLimits(StrictBaseModel):
    """Usage limits for one tier. ``None`` means unlimited.

    Attributes:
        max_feeds: Maximum feed subscriptions.
        daily_chat_messages: Maximum chat messages per day.
    """

    max_feeds: Annotated[int, Field(ge=0)] | None = None
    daily_chat_messages: Annotated[int, Field(ge=0)] | None = None


class TierLimitsConfig(StrictBaseModel):
    """Usage limits per tier."""

    free: TierLimits = Field(
        default_factory=lambda: TierLimits(max_feeds=10, daily_chat_messages=10)
    )
    premium: TierLimits = Field(
        default_factory=lambda: TierLimits(max_feeds=50, daily_chat_messages=100)
    )
    pro: TierLimits = Field(default_factory=TierLimits)

    def for_tier(self, tier: Tier) -> TierLimits:
        """Limits for a tier."""
        limits: TierLimits = getattr(self, tier.value)
        return limits


class IngestionConfig(StrictBaseModel):
    """Ingestion gate behavior.

    Attributes:
        topic_policy: What to do with tags outside the taxonomy.
        max_auto_topics: Cap on topics added by the keyword tagger.
    """

    topic_policy: TopicPolicy = TopicPolicy.REJECT
    max_auto_topics: Annotated[int, Field(ge=0, le=20)] = 5


class PolicyConfig(StrictBaseModel):
    """Root configuration for the policy file.

    Attributes:
        version: Schema version.
        scoring: Composite score weights.
        engagement: Engagement aggregation weights.
        tiers: Tier ordering and gates.
        limits: Per-tier usage limits.
        ingestion: Ingestion gate behavior.
    """

    version: Annotated[str, Field(pattern=r"^\d+\.\d+$")] = "1.0"
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    engagement: EngagementConfig = Field(default_factory=EngagementConfig)
    tiers: TierPolicyConfig = Field(default_factory=TierPolicyConfig)
    limits: TierLimitsConfig = Field(default_factory=TierLimitsConfig)
    ingestion: IngestionConfig = Field(default_factory=IngestionConfig)
