from __future__ import annotations

from reftidy.domain.commit import commit_merge
from reftidy.domain.duplicates import DuplicateGroup, compute_duplicate_groups
from reftidy.domain.merge import build_merge_draft
from reftidy.domain.model import BibliographicRecord, RecordType
from reftidy.domain.ports import SinkOperation
from tests.helpers.records import FakeCommitSink, author, make_record


def _records() -> list[BibliographicRecord]:
    return [
        make_record("A", version=4, title="Deep Learning", DOI="10.1/x", tags=("ml",)),
        make_record("B", version=9, title="Deep learning", pages="1-10", creators=(author("Doe"),)),
        make_record("C", version=2, title="Deep Learning"),
    ]


def test_commit_updates_master_then_deletes_duplicates() -> None:
    records = _records()
    sink = FakeCommitSink.holding(records)
    draft = build_merge_draft(DuplicateGroup(members=tuple(records)), 0)

    result = commit_merge(draft, sink)

    assert result.complete
    assert result.deleted == ("B", "C")
    assert [key for key, _version, _fields in sink.updates] == ["A"]
    assert sink.deletes == [("B", 9), ("C", 2)]
    merged = sink.records["A"]
    assert merged.version == 5
    assert merged.text("pages") == "1-10"
    assert merged.tags == frozenset({"ml"})
    assert [creator.last_name for creator in merged.creators] == ["Doe"]
    assert set(sink.records) == {"A"}


def test_commit_drops_fields_the_type_does_not_accept() -> None:
    records = [
        make_record("A", record_type=RecordType.WEBPAGE, title="Home", url="https://x.org"),
        make_record("B", record_type=RecordType.WEBPAGE, title="Home", ISBN="123"),
    ]
    sink = FakeCommitSink.holding(records)

    commit_merge(build_merge_draft(DuplicateGroup(members=tuple(records)), 0), sink)

    _key, _version, fields = sink.updates[0]
    assert "ISBN" not in fields
    assert fields["url"] == "https://x.org"


def test_master_version_conflict_stops_before_deletes() -> None:
    records = _records()
    sink = FakeCommitSink.holding(records)
    draft = build_merge_draft(DuplicateGroup(members=tuple(records)), 0)
    sink.records["A"] = make_record("A", version=5, title="Edited elsewhere")

    result = commit_merge(draft, sink)

    assert not result.master_updated
    assert result.conflicts[0].key == "A"
    assert result.conflicts[0].expected_version == 4
    assert result.conflicts[0].operation is SinkOperation.UPDATE
    assert sink.deletes == []
    assert set(sink.records) == {"A", "B", "C"}


def test_master_failure_leaves_everything_in_place() -> None:
    records = _records()
    sink = FakeCommitSink.holding(records)
    sink.fail_keys.add("A")

    result = commit_merge(build_merge_draft(DuplicateGroup(members=tuple(records)), 0), sink)

    assert result.failed == ("A",)
    assert not result.master_updated
    assert sink.deletes == []


def test_partial_delete_failure_is_reported() -> None:
    records = _records()
    sink = FakeCommitSink.holding(records)
    sink.fail_keys.add("B")
    sink.records["C"] = make_record("C", version=3, title="Deep Learning")
    draft = build_merge_draft(DuplicateGroup(members=tuple(records)), 0)

    result = commit_merge(draft, sink)

    assert result.master_updated
    assert result.failed == ("B",)
    assert [conflict.key for conflict in result.conflicts] == ["C"]
    assert result.conflicts[0].operation is SinkOperation.DELETE
    assert result.deleted == ()
    assert not result.complete


def test_undeleted_duplicate_is_detected_again_against_merged_master() -> None:
    records = _records()
    sink = FakeCommitSink.holding(records)
    sink.fail_keys.add("B")

    result = commit_merge(build_merge_draft(DuplicateGroup(members=tuple(records)), 0), sink)

    assert result.failed == ("B",)
    assert set(sink.records) == {"A", "B"}
    groups = compute_duplicate_groups(sink.records.values())
    assert [group.group_id for group in groups] == ["A,B"]
    members = {member.key: member for member in groups[0].members}
    assert members["A"].version == 5
    assert members["A"].text("pages") == "1-10"
    assert members["B"].version == 9
