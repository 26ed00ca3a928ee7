"""Domain port definitions for adapters."""

from __future__ import annotations

from .enrichment import EnrichmentLookupError, EnrichmentSource
from .records import CommitSink, CommitSinkError, RecordSource, SinkOperation, VersionConflict

__all__ = [
    "CommitSink",
    "CommitSinkError",
    "EnrichmentLookupError",
    "EnrichmentSource",
    "RecordSource",
    "SinkOperation",
    "VersionConflict",
]
