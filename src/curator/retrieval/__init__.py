"""Tier-gated retrieval over the curated corpus."""

from curator.retrieval.models import FolderResponse, ItemsResponse, MembershipResponse
from curator.retrieval.service import RetrievalService


__all__ = [
    "FolderResponse",
    "ItemsResponse",
    "MembershipResponse",
    "RetrievalService",
]
