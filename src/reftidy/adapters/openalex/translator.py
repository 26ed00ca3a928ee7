"""Translate OpenAlex works into untrusted enrichment candidates."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from .schema import OpenAlexAuthorship, OpenAlexWork

DOI_RESOLVER: Final[str] = "https://doi.org/"
MIN_ABSTRACT_LENGTH: Final[int] = 20
_DOI_URL = re.compile(r"^https?://(?:dx\.)?doi\.org/", re.IGNORECASE)
_LEADING_YEAR = re.compile(r"^(\d{4})")


def reconstruct_abstract(inverted_index: Mapping[str, Sequence[int]]) -> str:
    """Rebuild abstract text from OpenAlex's word -> positions index."""

    placed = sorted(
        (position, word) for word, positions in inverted_index.items() for position in positions
    )
    return " ".join(word for _position, word in placed).strip()


def work_to_candidate(work: OpenAlexWork) -> dict[str, object]:
    """Field map in the record vocabulary; blank values are left out."""

    candidate: dict[str, object] = {}

    def put(name: str, value: str | None) -> None:
        if value and value.strip():
            candidate[name] = value.strip()

    put("title", work.title)

    doi = work.doi or (work.ids.doi if work.ids else None)
    if doi:
        put("DOI", _DOI_URL.sub("", doi.strip()))
    if "DOI" in candidate:
        candidate["url"] = f"{DOI_RESOLVER}{candidate['DOI']}"

    location = work.primary_location
    if location is not None:
        if location.source is not None:
            put("publicationTitle", location.source.display_name)
        if "url" not in candidate:
            put("url", location.landing_page_url)

    biblio = work.biblio
    if biblio is not None:
        put("volume", biblio.volume)
        put("issue", biblio.issue)
        if biblio.first_page and biblio.last_page:
            put("pages", f"{biblio.first_page}-{biblio.last_page}")
        else:
            put("pages", biblio.first_page)

    year = _year(work)
    if year:
        candidate["date"] = year

    if work.abstract_inverted_index:
        abstract = reconstruct_abstract(work.abstract_inverted_index)
        if len(abstract) > MIN_ABSTRACT_LENGTH:
            candidate["abstractNote"] = abstract

    creators = [
        creator
        for creator in (_authorship_to_creator(authorship) for authorship in work.authorships)
        if creator is not None
    ]
    if creators:
        candidate["creators"] = creators
    return candidate


def _year(work: OpenAlexWork) -> str:
    if work.publication_date:
        match = _LEADING_YEAR.match(work.publication_date)
        if match:
            return match.group(1)
    return str(work.publication_year) if work.publication_year else ""


def _authorship_to_creator(authorship: OpenAlexAuthorship) -> dict[str, str] | None:
    if authorship.author is None or not authorship.author.display_name:
        return None
    parts = authorship.author.display_name.split()
    if not parts:
        return None
    if len(parts) == 1:
        return {"creatorType": "author", "name": parts[0]}
    # OpenAlex gives display names only; the last token is taken as the family name
    return {"creatorType": "author", "firstName": " ".join(parts[:-1]), "lastName": parts[-1]}
