"""Field vocabulary and per-type field schemas.

The vocabulary is the set of fields the reconciliation core understands; the
schemas drive completeness checks and the valid-field filter applied before a
record update is sent upstream.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from .enums import RecordType

if TYPE_CHECKING:
    from collections.abc import Mapping

CREATORS: Final[str] = "creators"

SCALAR_FIELDS: Final[tuple[str, ...]] = (
    "title",
    "date",
    "DOI",
    "ISBN",
    "publisher",
    "publicationTitle",
    "bookTitle",
    "volume",
    "issue",
    "pages",
    "abstractNote",
    "url",
    "conferenceName",
    "university",
    "institution",
)

KNOWN_FIELDS: Final[tuple[str, ...]] = (*SCALAR_FIELDS, CREATORS)


@dataclass(frozen=True, slots=True)
class FieldSchema:
    """Required and recommended fields for one record type."""

    required: tuple[str, ...]
    recommended: tuple[str, ...] = ()


DEFAULT_SCHEMA: Final[FieldSchema] = FieldSchema(
    required=("title", CREATORS),
    recommended=("date",),
)

FIELD_SCHEMAS: Final[Mapping[str, FieldSchema]] = {
    RecordType.JOURNAL_ARTICLE: FieldSchema(
        required=("title", CREATORS, "date", "publicationTitle", "volume", "issue", "pages"),
        recommended=("DOI", "url", "abstractNote"),
    ),
    RecordType.BOOK: FieldSchema(
        required=("title", CREATORS, "date", "publisher"),
        recommended=("ISBN", "abstractNote"),
    ),
    RecordType.BOOK_SECTION: FieldSchema(
        required=("title", CREATORS, "date", "bookTitle", "pages"),
        recommended=("ISBN", "publisher"),
    ),
    RecordType.CONFERENCE_PAPER: FieldSchema(
        required=("title", CREATORS, "date", "conferenceName"),
        recommended=("DOI", "pages", "abstractNote"),
    ),
    RecordType.THESIS: FieldSchema(
        required=("title", CREATORS, "date", "university"),
        recommended=("url", "abstractNote"),
    ),
    RecordType.REPORT: FieldSchema(
        required=("title", CREATORS, "date", "institution"),
        recommended=("url", "abstractNote"),
    ),
    RecordType.WEBPAGE: FieldSchema(
        required=("title", "url"),
        recommended=(CREATORS, "date"),
    ),
}


def schema_for(record_type: str) -> FieldSchema | None:
    """Return the schema registered for ``record_type`` or ``None``."""

    return FIELD_SCHEMAS.get(record_type)


_COMMON_ZOTERO_FIELDS: Final[tuple[str, ...]] = (
    "title",
    "creators",
    "abstractNote",
    "date",
    "language",
    "shortTitle",
    "url",
    "accessDate",
    "archive",
    "archiveLocation",
    "libraryCatalog",
    "callNumber",
    "rights",
    "extra",
    "tags",
    "collections",
    "relations",
)

# Fields the Zotero API accepts per item type, beyond the common ones.
_TYPE_ZOTERO_FIELDS: Final[Mapping[str, frozenset[str]]] = {
    RecordType.BOOK: frozenset(
        {
            "series",
            "seriesNumber",
            "volume",
            "numberOfVolumes",
            "edition",
            "place",
            "publisher",
            "numPages",
            "ISBN",
        }
    ),
    RecordType.JOURNAL_ARTICLE: frozenset(
        {
            "publicationTitle",
            "volume",
            "issue",
            "pages",
            "series",
            "seriesTitle",
            "seriesText",
            "journalAbbreviation",
            "DOI",
            "ISSN",
        }
    ),
    RecordType.BOOK_SECTION: frozenset(
        {
            "bookTitle",
            "series",
            "seriesNumber",
            "volume",
            "numberOfVolumes",
            "edition",
            "place",
            "publisher",
            "pages",
            "ISBN",
        }
    ),
    RecordType.CONFERENCE_PAPER: frozenset(
        {
            "conferenceName",
            "proceedingsTitle",
            "volume",
            "pages",
            "place",
            "publisher",
            "DOI",
            "ISBN",
        }
    ),
    RecordType.THESIS: frozenset({"thesisType", "university", "place", "numPages"}),
    RecordType.WEBPAGE: frozenset({"websiteTitle", "websiteType"}),
    RecordType.REPORT: frozenset(
        {"reportNumber", "reportType", "institution", "place", "pages"}
    ),
}


def filter_valid_fields(record_type: str, fields: Mapping[str, object]) -> dict[str, object]:
    """Keep only the fields the record service accepts for ``record_type``.

    Unknown record types fall back to the default schema's fields plus the
    common metadata fields.
    """

    specific = _TYPE_ZOTERO_FIELDS.get(record_type)
    if specific is None:
        allowed = frozenset(_COMMON_ZOTERO_FIELDS) | frozenset(DEFAULT_SCHEMA.required)
    else:
        allowed = frozenset(_COMMON_ZOTERO_FIELDS) | specific
    return {name: value for name, value in fields.items() if name in allowed}
