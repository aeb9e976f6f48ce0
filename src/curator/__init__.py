"""Curation core: topic taxonomy, quality scoring and tier-gated retrieval."""

__version__ = "0.1.0"
