"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class CreatorType(StrEnum):
    AUTHOR = "author"
    EDITOR = "editor"
    TRANSLATOR = "translator"
    CONTRIBUTOR = "contributor"


class RecordType(StrEnum):
    """Zotero item types with a dedicated completeness schema."""

    JOURNAL_ARTICLE = "journalArticle"
    BOOK = "book"
    BOOK_SECTION = "bookSection"
    CONFERENCE_PAPER = "conferencePaper"
    THESIS = "thesis"
    REPORT = "report"
    WEBPAGE = "webpage"

    # Never reconciled:
    ATTACHMENT = "attachment"
    NOTE = "note"


class MatchReason(StrEnum):
    """Rule that linked two records into a duplicate group."""

    DOI = "doi"
    ISBN = "isbn"
    TITLE = "title"


class Severity(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
