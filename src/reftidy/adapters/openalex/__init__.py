"""OpenAlex enrichment adapter."""

from __future__ import annotations

from .client import OpenAlexAPIError, OpenAlexEnrichmentSource
from .schema import OpenAlexWork
from .translator import reconstruct_abstract, work_to_candidate

__all__ = [
    "OpenAlexAPIError",
    "OpenAlexEnrichmentSource",
    "OpenAlexWork",
    "reconstruct_abstract",
    "work_to_candidate",
]
