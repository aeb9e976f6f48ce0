"""Per-tier usage limits."""

from dataclasses import dataclass

from curator.config.schemas.base import Tier
from curator.config.schemas.policy import TierLimitsConfig


@dataclass(frozen=True)
class LimitCheck:
    """Outcome of a usage limit check.

    Attributes:
        allowed: Whether one more unit may be used.
        current_usage: Units used so far.
        limit: Limit for the tier, None when unlimited.
        tier: Tier the check ran against.
        reason: Why the check failed, when it did.
    """

    allowed: bool
    current_usage: int
    limit: int | None
    tier: Tier
    reason: str | None = None

    @property
    def remaining(self) -> int | None:
        """Units left, None when unlimited."""
        if self.limit is None:
            return None
        return max(self.limit - self.current_usage, 0)


def has_headroom(limit: int | None, current: int) -> bool:
    """Whether one more unit fits under ``limit`` (None is unlimited)."""
    return limit is None or current < limit


class UsageLimiter:
    """Checks usage counters against the configured per-tier limits."""

    def __init__(self, config: TierLimitsConfig | None = None) -> None:
        self._config = config or TierLimitsConfig()

    def check_feed_subscription(self, tier: Tier, current_feeds: int) -> LimitCheck:
        """Check whether another feed subscription is allowed."""
        limit = self._config.for_tier(tier).max_feeds
        return self._check(limit, current_feeds, tier, "feed subscription limit reached")

    def check_chat_message(self, tier: Tier, messages_today: int) -> LimitCheck:
        """Check whether another chat message is allowed today."""
        limit = self._config.for_tier(tier).daily_chat_messages
        return self._check(limit, messages_today, tier, "daily chat message limit reached")

    @staticmethod
    def _check(limit: int | None, current: int, tier: Tier, reason: str) -> LimitCheck:
        allowed = has_headroom(limit, current)
        return LimitCheck(
            allowed=allowed,
            current_usage=current,
            limit=limit,
            tier=tier,
            reason=None if allowed else reason,
        )
