"""Title-search helpers shared by the enrichment adapters, and source chaining."""

from __future__ import annotations

import re
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Final, TypeVar

from reftidy.domain.duplicates import normalize_title
from reftidy.domain.ports import EnrichmentLookupError, EnrichmentSource
from reftidy.domain.similarity import TITLE_MATCH_THRESHOLD, similarity

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    from reftidy.domain.model import BibliographicRecord

log = getLogger(__name__)

MIN_SEARCH_TITLE_LENGTH: Final[int] = 10
_YEAR = re.compile(r"\d{4}")

W = TypeVar("W")


def title_search_queries(record: BibliographicRecord, *, with_year: bool = True) -> list[str]:
    """Search strings from most to least specific.

    Titles shorter than ``MIN_SEARCH_TITLE_LENGTH`` match too loosely to search on,
    so they yield no queries.
    """

    title = record.title
    if len(title) < MIN_SEARCH_TITLE_LENGTH:
        return []
    surname = next((creator.surname for creator in record.valid_creators if creator.surname), "")
    year = ""
    if with_year:
        match = _YEAR.search(record.text("date"))
        year = match.group(0) if match else ""
    queries = (
        " ".join(part for part in (title, surname, year) if part),
        " ".join(part for part in (title, year) if part),
        title,
    )
    return list(dict.fromkeys(queries))


def best_title_match(
    title: str,
    works: Iterable[W],
    title_of: Callable[[W], str],
) -> W | None:
    """Highest-scoring work at or above the title threshold; first wins ties."""

    wanted = normalize_title(title)
    best: W | None = None
    best_score = TITLE_MATCH_THRESHOLD
    for work in works:
        work_title = title_of(work)
        if not work_title:
            continue
        score = similarity(wanted, normalize_title(work_title))
        if score > best_score or (best is None and score >= best_score):
            best, best_score = work, score
    return best


@dataclass(frozen=True, slots=True)
class FallbackEnrichmentSource:
    """Asks each source in turn and returns the first non-empty proposal.

    A source failing with ``EnrichmentLookupError`` is logged and skipped.
    """

    sources: tuple[EnrichmentSource, ...]

    def __call__(self, record: BibliographicRecord) -> Mapping[str, object]:
        for source in self.sources:
            try:
                proposal = source(record)
            except EnrichmentLookupError as exc:
                log.warning(
                    "%s failed for record %s: %s", type(source).__name__, record.key, exc
                )
                continue
            if proposal:
                log.debug("Record %s enriched from %s", record.key, type(source).__name__)
                return proposal
        return {}


if TYPE_CHECKING:
    _source_check: EnrichmentSource = FallbackEnrichmentSource(())
