"""Execution of a merge draft against a commit sink.

Order matters: the master is updated first and duplicates are deleted only
after that succeeded. A failed delete leaves the duplicate in place, where the
next scan detects it again as a duplicate of the merged master.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from reftidy.domain.model import filter_valid_fields
from reftidy.domain.ports import CommitSinkError, VersionConflict

if TYPE_CHECKING:
    from reftidy.domain.merge import MergeDraft
    from reftidy.domain.model import BibliographicRecord
    from reftidy.domain.ports import CommitSink

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class CommitResult:
    master_key: str
    updated: BibliographicRecord | None = None
    deleted: tuple[str, ...] = ()
    conflicts: tuple[VersionConflict, ...] = ()
    failed: tuple[str, ...] = ()

    @property
    def master_updated(self) -> bool:
        return self.updated is not None

    @property
    def complete(self) -> bool:
        return self.master_updated and not self.conflicts and not self.failed


def commit_merge(draft: MergeDraft, sink: CommitSink) -> CommitResult:
    """Update the master with the draft, then delete every other member."""

    payload = filter_valid_fields(draft.record_type, draft.update_payload())
    try:
        outcome = sink.update_record(draft.master.key, draft.master.version, payload)
    except CommitSinkError:
        log.exception("Updating master %s failed; duplicates left untouched", draft.master.key)
        return CommitResult(master_key=draft.master.key, failed=(draft.master.key,))

    if isinstance(outcome, VersionConflict):
        log.warning(
            "Master %s changed upstream (expected version %s); merge not applied",
            draft.master.key,
            draft.master.version,
        )
        return CommitResult(master_key=draft.master.key, conflicts=(outcome,))

    deleted: list[str] = []
    conflicts: list[VersionConflict] = []
    failed: list[str] = []
    for duplicate in draft.duplicates:
        try:
            delete_outcome = sink.delete_record(duplicate.key, duplicate.version)
        except CommitSinkError:
            log.exception("Deleting duplicate %s failed", duplicate.key)
            failed.append(duplicate.key)
            continue
        if isinstance(delete_outcome, VersionConflict):
            log.warning("Duplicate %s changed upstream; left in place", duplicate.key)
            conflicts.append(delete_outcome)
            continue
        deleted.append(duplicate.key)

    log.info(
        "Merged into %s: deleted=%d conflicts=%d failed=%d",
        draft.master.key,
        len(deleted),
        len(conflicts),
        len(failed),
    )
    return CommitResult(
        master_key=draft.master.key,
        updated=outcome,
        deleted=tuple(deleted),
        conflicts=tuple(conflicts),
        failed=tuple(failed),
    )
