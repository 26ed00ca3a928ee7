"""Translate Crossref works into untrusted enrichment candidates."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .schema import CrossrefAuthor, CrossrefWork

_MARKUP = re.compile(r"<[^>]+>")
_WHITESPACE = re.compile(r"\s+")
DOI_RESOLVER = "https://doi.org/"


def strip_markup(value: str) -> str:
    """Drop JATS/HTML tags from an abstract and collapse whitespace."""

    return _WHITESPACE.sub(" ", _MARKUP.sub(" ", value)).strip()


def work_to_candidate(work: CrossrefWork) -> dict[str, object]:
    """Field map in the record vocabulary; blank values are left out."""

    candidate: dict[str, object] = {}

    def put(name: str, value: str | None) -> None:
        if value and value.strip():
            candidate[name] = value.strip()

    put("title", work.title[0] if work.title else None)
    put("DOI", work.doi)
    put("publicationTitle", work.container_title[0] if work.container_title else None)
    put("volume", work.volume)
    put("issue", work.issue)
    put("pages", work.page)
    put("ISBN", work.isbn[0] if work.isbn else None)
    put("publisher", work.publisher)
    put("abstractNote", strip_markup(work.abstract) if work.abstract else None)
    put("url", work.url or (f"{DOI_RESOLVER}{work.doi}" if work.doi else None))
    if work.year is not None:
        candidate["date"] = str(work.year)

    creators = [_author_to_creator(author) for author in work.author]
    creators = [creator for creator in creators if len(creator) > 1]
    if creators:
        candidate["creators"] = creators
    return candidate


def _author_to_creator(author: CrossrefAuthor) -> dict[str, str]:
    creator = {"creatorType": "author"}
    if author.family:
        creator["lastName"] = author.family.strip()
        if author.given:
            creator["firstName"] = author.given.strip()
    elif author.name:
        creator["name"] = author.name.strip()
    return creator
