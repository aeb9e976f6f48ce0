"""Tier gating, scope resolution and folder membership."""

from curator.access.errors import (
    DigestNotFoundError,
    FolderNotFoundError,
    FolderNotOwnedError,
    InvalidScopeError,
    MissingScopeFieldError,
    TierInsufficientError,
)
from curator.access.folders import FolderMembershipManager, MembershipChange
from curator.access.limits import LimitCheck, UsageLimiter
from curator.access.scope import Scope, ScopeResolver
from curator.access.tiers import TierGate, resolve_user_tier


__all__ = [
    "DigestNotFoundError",
    "FolderMembershipManager",
    "FolderNotFoundError",
    "FolderNotOwnedError",
    "InvalidScopeError",
    "LimitCheck",
    "MembershipChange",
    "MissingScopeFieldError",
    "Scope",
    "ScopeResolver",
    "TierGate",
    "TierInsufficientError",
    "UsageLimiter",
    "resolve_user_tier",
]
