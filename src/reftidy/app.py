"""Application orchestration entry points."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from reftidy.adapters.crossref import CrossrefEnrichmentSource
from reftidy.adapters.lookup import FallbackEnrichmentSource
from reftidy.adapters.openalex import OpenAlexEnrichmentSource
from reftidy.adapters.zotero import ZoteroClient
from reftidy.domain import (
    MergeSession,
    check_completeness,
    commit_merge,
    compute_duplicate_groups,
    compute_library_stats,
    fetch_candidate,
    find_author_variants,
    find_issues,
    find_tag_variants,
    reconcile_enrichment_report,
)
from reftidy.domain.model import filter_valid_fields
from reftidy.domain.ports import CommitSinkError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from reftidy.domain import (
        CommitResult,
        CompletenessReport,
        DuplicateGroup,
        LibraryStats,
        MatchPolicy,
        MergeDraft,
        MergeState,
        RecordIssues,
        VariantGroup,
    )
    from reftidy.domain.enrichment import ReconciliationReport
    from reftidy.domain.model import BibliographicRecord
    from reftidy.domain.ports import CommitSink, EnrichmentSource, RecordSource, VersionConflict

log = getLogger(__name__)


class UnknownGroupError(ValueError):
    """Raised when a requested duplicate group is not in the current scan."""


@dataclass(frozen=True, slots=True)
class IncompleteRecord:
    record: BibliographicRecord
    report: CompletenessReport


@dataclass(frozen=True, slots=True)
class VariantReport:
    authors: list[VariantGroup]
    tags: list[VariantGroup]


@dataclass(frozen=True, slots=True, kw_only=True)
class EnrichmentOutcome:
    record: BibliographicRecord
    report: ReconciliationReport
    applied: BibliographicRecord | VersionConflict | None = None
    failed: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class MergeOutcome:
    group: DuplicateGroup
    draft: MergeDraft
    state: MergeState
    result: CommitResult | None = None


def scan_duplicates(
    *,
    source: RecordSource | None = None,
    policy: MatchPolicy | None = None,
) -> list[DuplicateGroup]:
    records = _load(source)
    groups = compute_duplicate_groups(records, policy=policy)
    log.info("Scanned %d records: %d duplicate groups", len(records), len(groups))
    return groups


def review_completeness(*, source: RecordSource | None = None) -> list[IncompleteRecord]:
    """Records missing at least one required field for their type."""

    incomplete: list[IncompleteRecord] = []
    for record in _load(source):
        report = check_completeness(record)
        if not report.is_complete:
            incomplete.append(IncompleteRecord(record=record, report=report))
    log.info("%d incomplete records", len(incomplete))
    return incomplete


def list_issues(*, source: RecordSource | None = None) -> list[RecordIssues]:
    return find_issues(_load(source))


def find_variants(*, source: RecordSource | None = None) -> VariantReport:
    records = _load(source)
    return VariantReport(authors=find_author_variants(records), tags=find_tag_variants(records))


def library_stats(*, source: RecordSource | None = None) -> LibraryStats:
    return compute_library_stats(_load(source))


def default_enrichment_source() -> EnrichmentSource:
    """Crossref first, OpenAlex when Crossref has nothing or fails."""

    return FallbackEnrichmentSource((CrossrefEnrichmentSource(), OpenAlexEnrichmentSource()))


def enrich_records(
    *,
    keys: Iterable[str] | None = None,
    source: RecordSource | None = None,
    enrichment: EnrichmentSource | None = None,
    sink: CommitSink | None = None,
    apply: bool = False,
) -> list[EnrichmentOutcome]:
    """Look up each record once and reconcile the proposal against it.

    With ``apply`` the accepted fields are written through ``sink``; otherwise
    the run only reports what would change.
    """

    records = _load(source)
    if keys is not None:
        wanted = set(keys)
        records = [record for record in records if record.key in wanted]
    lookup = enrichment or default_enrichment_source()
    effective_sink = sink or (ZoteroClient() if apply else None)

    outcomes: list[EnrichmentOutcome] = []
    for record in records:
        candidate = fetch_candidate(lookup, record)
        report = reconcile_enrichment_report(record, candidate)
        applied: BibliographicRecord | VersionConflict | None = None
        failed = False
        if apply and report.accepted and effective_sink is not None:
            fields = filter_valid_fields(record.record_type, report.accepted)
            try:
                applied = effective_sink.update_record(record.key, record.version, fields)
            except CommitSinkError:
                log.exception("Applying enrichment to %s failed", record.key)
                failed = True
        outcomes.append(
            EnrichmentOutcome(record=record, report=report, applied=applied, failed=failed)
        )

    log.info(
        "Enrichment finished: records=%d, with_changes=%d, failed=%d, applied=%s",
        len(outcomes),
        sum(1 for outcome in outcomes if outcome.report.accepted),
        sum(1 for outcome in outcomes if outcome.failed),
        apply,
    )
    return outcomes


def merge_group(
    group_id: str,
    *,
    master_index: int,
    overrides: Mapping[str, object] | None = None,
    source: RecordSource | None = None,
    sink: CommitSink | None = None,
    policy: MatchPolicy | None = None,
    dry_run: bool = False,
) -> MergeOutcome:
    """Merge the group identified by ``group_id`` (or by any member key) into one master."""

    group = _find_group(scan_duplicates(source=source, policy=policy), group_id)
    session = MergeSession(group).compare().select_master(master_index)
    for name, value in (overrides or {}).items():
        session = session.override(name, value)
    draft = session.draft()

    if draft.conflicts:
        log.info("Unresolved conflicts kept master values: %s", ", ".join(draft.conflicted_fields))
    if dry_run:
        return MergeOutcome(group=group, draft=draft, state=session.cancel().state)

    result = commit_merge(draft, sink or ZoteroClient())
    final = session.commit() if result.master_updated else session.cancel()
    return MergeOutcome(group=group, draft=draft, state=final.state, result=result)


def _find_group(groups: list[DuplicateGroup], group_id: str) -> DuplicateGroup:
    for group in groups:
        if group.group_id == group_id:
            return group
    for group in groups:
        if group_id in group.keys:
            return group
    raise UnknownGroupError(f"No duplicate group matches {group_id!r}")


def _load(source: RecordSource | None) -> list[BibliographicRecord]:
    return (source or ZoteroClient())()
