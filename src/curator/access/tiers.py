"""Tier ordering and feature gates.

Every tier comparison in the system goes through ``TierGate``; nothing
else compares tier names or ranks directly.
"""

from types import MappingProxyType

import structlog

from curator.access.errors import TierInsufficientError
from curator.config.schemas.base import Capability, ScopeType, Tier
from curator.config.schemas.policy import TierPolicyConfig
from curator.store.models import UserSubscription


logger = structlog.get_logger()


class TierGate:
    """Immutable tier table with availability checks.

    ``is_available(required, user)`` holds exactly when the user's tier
    ranks at or above the required tier, so availability is monotonic:
    anything open to a tier is open to every higher tier.
    """

    def __init__(self, policy: TierPolicyConfig | None = None) -> None:
        """Initialize the gate.

        Args:
            policy: Tier order and minimum tiers; defaults to the built-in
                free < premium < pro table.
        """
        policy = policy or TierPolicyConfig()
        self._order = MappingProxyType(dict(policy.order))
        self._scope_minimum = MappingProxyType(dict(policy.scope_minimum))
        self._capability_minimum = MappingProxyType(dict(policy.capability_minimum))

    def rank(self, tier: Tier) -> int:
        """Numeric rank of a tier."""
        return self._order[tier]

    def is_available(self, required: Tier, user: Tier) -> bool:
        """Whether a feature requiring ``required`` is open to ``user``."""
        return self._order[required] <= self._order[user]

    def minimum_for_scope(self, scope_type: ScopeType) -> Tier:
        """Minimum tier for a retrieval scope."""
        return self._scope_minimum[scope_type]

    def minimum_for(self, capability: Capability) -> Tier:
        """Minimum tier for a capability."""
        return self._capability_minimum[capability]

    def require(self, required: Tier, user: Tier, feature: str) -> None:
        """Fail unless ``user`` satisfies ``required``.

        Args:
            required: Minimum tier.
            user: Caller's tier.
            feature: Name of the gated feature, for the error.

        Raises:
            TierInsufficientError: If the caller's tier is too low.
        """
        if not self.is_available(required, user):
            logger.info(
                "tier_gate_denied",
                component="access",
                feature=feature,
                required_tier=required.value,
                user_tier=user.value,
            )
            raise TierInsufficientError(required, user, feature)

    def require_capability(self, capability: Capability, user: Tier) -> None:
        """Fail unless ``user`` may use ``capability``.

        Raises:
            TierInsufficientError: If the caller's tier is too low.
        """
        self.require(self.minimum_for(capability), user, capability.value)

    def available_capabilities(self, user: Tier) -> list[Capability]:
        """Capabilities open to a tier, in declaration order."""
        return [
            capability
            for capability, required in self._capability_minimum.items()
            if self.is_available(required, user)
        ]


def resolve_user_tier(subscription: UserSubscription | None) -> Tier:
    """Effective tier for a subscription record.

    No record means free; test accounts get pro.
    """
    if subscription is None:
        return Tier.FREE
    if subscription.is_test_account:
        return Tier.PRO
    return subscription.tier
