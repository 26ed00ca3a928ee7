"""Library-wide summary counters."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from reftidy.domain.duplicates import compute_duplicate_groups
from reftidy.domain.model import RecordType

if TYPE_CHECKING:
    from collections.abc import Iterable

    from reftidy.domain.model import BibliographicRecord


@dataclass(frozen=True, slots=True)
class LibraryStats:
    total_items: int
    untagged_items: int
    missing_abstracts: int
    duplicate_groups: int


def compute_library_stats(records: Iterable[BibliographicRecord]) -> LibraryStats:
    items = [
        record
        for record in records
        if record.record_type not in (RecordType.ATTACHMENT, RecordType.NOTE)
    ]
    return LibraryStats(
        total_items=len(items),
        untagged_items=sum(1 for record in items if not record.tags),
        missing_abstracts=sum(1 for record in items if not record.text("abstractNote")),
        duplicate_groups=len(compute_duplicate_groups(items)),
    )
