"""Ingestion boundary: payload normalization and the ingestion gate."""

from curator.ingest.gate import IngestionGate
from curator.ingest.models import (
    Accepted,
    IngestOutcome,
    NormalizedItem,
    RawItem,
    Rejected,
    RejectionReason,
)
from curator.ingest.normalizer import normalize, parse_raw_item


__all__ = [
    "Accepted",
    "IngestOutcome",
    "IngestionGate",
    "NormalizedItem",
    "RawItem",
    "Rejected",
    "RejectionReason",
    "normalize",
    "parse_raw_item",
]
