from __future__ import annotations

import pytest

from reftidy import app
from reftidy.adapters.crossref import CrossrefEnrichmentSource
from reftidy.adapters.lookup import FallbackEnrichmentSource
from reftidy.adapters.openalex import OpenAlexEnrichmentSource
from reftidy.domain.merge import MergeState
from reftidy.domain.model import BibliographicRecord
from tests.helpers.records import (
    FakeCommitSink,
    FakeRecordSource,
    author,
    complete_article,
    make_record,
)


def _library() -> list[BibliographicRecord]:
    return [
        make_record(
            "A", version=2, title="Deep Learning", DOI="10.1/x", creators=(author("LeCun"),)
        ),
        make_record(
            "B", version=5, title="Deep learning", pages="436-444", creators=(author("LeCun"),)
        ),
        complete_article("C"),
    ]


def test_scan_duplicates_reads_source_once() -> None:
    source = FakeRecordSource(_library())

    groups = app.scan_duplicates(source=source)

    assert [group.group_id for group in groups] == ["A,B"]
    assert source.calls == 1


def test_review_completeness_lists_only_incomplete_records() -> None:
    incomplete = app.review_completeness(source=FakeRecordSource(_library()))

    assert [entry.record.key for entry in incomplete] == ["A", "B"]
    assert "date" in incomplete[0].report.required


def test_library_stats_and_variants() -> None:
    source = FakeRecordSource(_library())

    stats = app.library_stats(source=source)
    variants = app.find_variants(source=source)

    assert stats.total_items == 3
    assert stats.duplicate_groups == 1
    assert variants.authors == []


def test_enrich_records_reports_without_applying() -> None:
    sink = FakeCommitSink.holding(_library())

    def lookup(record: BibliographicRecord) -> dict[str, object]:
        return {"date": "2015", "bogus": "x"} if record.key == "A" else {}

    outcomes = app.enrich_records(
        keys=["A", "B"],
        source=FakeRecordSource(_library()),
        enrichment=lookup,
        sink=sink,
    )

    assert [outcome.record.key for outcome in outcomes] == ["A", "B"]
    assert outcomes[0].report.accepted == {"date": "2015"}
    assert outcomes[0].applied is None
    assert sink.updates == []


def test_enrich_records_applies_accepted_fields() -> None:
    sink = FakeCommitSink.holding(_library())

    outcomes = app.enrich_records(
        keys=["A"],
        source=FakeRecordSource(_library()),
        enrichment=lambda _record: {"date": "2015"},
        sink=sink,
        apply=True,
    )

    applied = outcomes[0].applied
    assert isinstance(applied, BibliographicRecord)
    assert applied.get("date") == "2015"
    assert sink.updates == [("A", 2, {"date": "2015"})]


def test_enrich_records_continues_after_failed_update() -> None:
    sink = FakeCommitSink.holding(_library())
    sink.fail_keys = {"A"}

    outcomes = app.enrich_records(
        keys=["A", "B"],
        source=FakeRecordSource(_library()),
        enrichment=lambda _record: {"date": "2015"},
        sink=sink,
        apply=True,
    )

    assert [outcome.record.key for outcome in outcomes] == ["A", "B"]
    assert outcomes[0].failed
    assert outcomes[0].applied is None
    assert not outcomes[1].failed
    assert isinstance(outcomes[1].applied, BibliographicRecord)
    assert sink.updates == [("B", 5, {"date": "2015"})]


def test_merge_group_dry_run_commits_nothing() -> None:
    sink = FakeCommitSink.holding(_library())

    outcome = app.merge_group(
        "A,B",
        master_index=0,
        source=FakeRecordSource(_library()),
        sink=sink,
        dry_run=True,
    )

    assert outcome.result is None
    assert outcome.state is MergeState.CANCELLED
    assert outcome.draft.fields["pages"] == "436-444"
    assert sink.updates == []


def test_merge_group_commits_by_member_key() -> None:
    sink = FakeCommitSink.holding(_library())

    outcome = app.merge_group(
        "B",
        master_index=1,
        overrides={"title": "Deep Learning"},
        source=FakeRecordSource(_library()),
        sink=sink,
    )

    assert outcome.state is MergeState.COMMITTED
    assert outcome.result is not None
    assert outcome.result.complete
    assert set(sink.records) == {"B", "C"}
    assert sink.records["B"].title == "Deep Learning"
    assert sink.records["B"].get("DOI") == "10.1/x"


def test_merge_group_rejects_unknown_group() -> None:
    with pytest.raises(app.UnknownGroupError):
        app.merge_group("Z", master_index=0, source=FakeRecordSource(_library()))


def test_default_enrichment_tries_crossref_then_openalex() -> None:
    source = app.default_enrichment_source()

    assert isinstance(source, FallbackEnrichmentSource)
    assert [type(entry) for entry in source.sources] == [
        CrossrefEnrichmentSource,
        OpenAlexEnrichmentSource,
    ]
