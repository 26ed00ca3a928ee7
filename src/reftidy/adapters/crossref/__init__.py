"""Crossref enrichment adapter."""

from __future__ import annotations

from .client import CrossrefAPIError, CrossrefEnrichmentSource, best_title_match
from .schema import CrossrefAuthor, CrossrefWork
from .translator import strip_markup, work_to_candidate

__all__ = [
    "CrossrefAPIError",
    "CrossrefAuthor",
    "CrossrefEnrichmentSource",
    "CrossrefWork",
    "best_title_match",
    "strip_markup",
    "work_to_candidate",
]
