"""Per-record data quality issues for review listings."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from reftidy.domain.completeness import is_missing, resolve_schema
from reftidy.domain.model import CREATORS, CreatorType, RecordType, Severity

if TYPE_CHECKING:
    from collections.abc import Iterable

    from reftidy.domain.model import BibliographicRecord, Creator

_SKIPPED_TYPES: Final[frozenset[str]] = frozenset({RecordType.ATTACHMENT, RecordType.NOTE})
_HIGH_FIELDS: Final[frozenset[str]] = frozenset({"title", "date"})
_MEDIUM_FIELDS: Final[frozenset[str]] = frozenset({"DOI", "ISBN", "abstractNote"})

_INNER_SEPARATOR = re.compile(r"[;:]")
_TRAILING_SEPARATOR = re.compile(r"[;:]\s*$")
_MOSTLY_DIGITS = re.compile(r"^[\d\s,;:]+$")
_LEADING_COLON = re.compile(r"^\s*:")
_YEAR = re.compile(r"\d{4}")


@dataclass(frozen=True, slots=True)
class Issue:
    field: str
    severity: Severity
    message: str


@dataclass(frozen=True, slots=True)
class RecordIssues:
    record: BibliographicRecord
    issues: tuple[Issue, ...]

    @property
    def high_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity is Severity.HIGH)


def find_issues(records: Iterable[BibliographicRecord]) -> list[RecordIssues]:
    """List records with quality issues, most high-severity issues first."""

    found: list[RecordIssues] = []
    for record in records:
        if record.record_type in _SKIPPED_TYPES:
            continue
        issues = record_issues(record)
        if issues:
            found.append(RecordIssues(record=record, issues=issues))
    found.sort(key=lambda entry: entry.high_count, reverse=True)
    return found


def record_issues(record: BibliographicRecord) -> tuple[Issue, ...]:
    schema = resolve_schema(record.record_type)
    issues: list[Issue] = []
    for name in (*schema.required, *schema.recommended):
        if name == CREATORS:
            issues.extend(_creator_issues(record))
        elif is_missing(record, name):
            issues.append(Issue(name, _severity_for(name), f"Missing {name}"))

    if CREATORS not in schema.required and CREATORS not in schema.recommended:
        issues.extend(_creator_issues(record, report_missing=False))

    date = record.text("date")
    if date and not _YEAR.search(date):
        issues.append(Issue("date", Severity.MEDIUM, "Invalid year format"))
    return tuple(issues)


def is_malformed_creator(creator: Creator) -> bool:
    parts = [part.strip() for part in (creator.last_name, creator.first_name, creator.name)]
    parts = [part for part in parts if part]
    combined = " ".join(parts)
    for value in (*parts, combined):
        if not value:
            continue
        if _INNER_SEPARATOR.search(_TRAILING_SEPARATOR.sub("", value)):
            return True
        if len(value) > 2 and _MOSTLY_DIGITS.match(value):
            return True
        if _LEADING_COLON.match(value):
            return True
    return False


def _creator_issues(record: BibliographicRecord, *, report_missing: bool = True) -> list[Issue]:
    if not record.creators:
        if report_missing:
            return [Issue("creators", Severity.HIGH, "Missing authors")]
        return []

    issues: list[Issue] = []
    malformed = sum(1 for creator in record.creators if is_malformed_creator(creator))
    if malformed:
        issues.append(
            Issue(
                "creators",
                Severity.HIGH,
                f"Malformed author names detected ({malformed} creator(s) need fixing)",
            )
        )
    if record.record_type == RecordType.BOOK_SECTION and not any(
        creator.creator_type == CreatorType.EDITOR for creator in record.creators
    ):
        issues.append(Issue("editors", Severity.HIGH, "Missing editors (book editors)"))
    return issues


def _severity_for(name: str) -> Severity:
    if name in _HIGH_FIELDS:
        return Severity.HIGH
    if name in _MEDIUM_FIELDS:
        return Severity.MEDIUM
    return Severity.LOW
