"""Duplicate detection over a record snapshot.

Responsibilities:
- match record pairs on exact identifiers (DOI, ISBN) or on fuzzy title plus
  shared creator surname
- combine matches transitively into duplicate groups
- never choose a merge master; the representative is for display only

Candidate pairs come from inverted indexes on DOI, ISBN and creator surname.
A fuzzy title match requires a shared surname, so the surname index yields
every pair the full comparator could accept.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from collections import defaultdict
from dataclasses import dataclass, field
from itertools import combinations
from typing import TYPE_CHECKING, Final

from reftidy.domain.model import MatchReason, RecordType
from reftidy.domain.similarity import TITLE_MATCH_THRESHOLD, similarity

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from reftidy.domain.model import BibliographicRecord

log = logging.getLogger(__name__)

_SKIPPED_TYPES: Final[frozenset[str]] = frozenset({RecordType.ATTACHMENT, RecordType.NOTE})
_DOI_PREFIX = re.compile(r"^(?:https?://(?:dx\.)?doi\.org/|doi:\s*)", re.IGNORECASE)
_NON_WORD = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


class DuplicateRecordKeyError(ValueError):
    """Raised when a snapshot contains the same record key twice."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Record key appears more than once in snapshot: {key}")


@dataclass(frozen=True, slots=True, kw_only=True)
class MatchPolicy:
    """Acceptance rules for the fuzzy title comparator."""

    title_threshold: float = TITLE_MATCH_THRESHOLD
    require_author_overlap: bool = True


@dataclass(frozen=True, slots=True)
class DuplicateGroup:
    """Records believed to describe the same work, in snapshot order."""

    members: tuple[BibliographicRecord, ...]
    reasons: frozenset[MatchReason] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if len(self.members) < 2:
            raise ValueError("Duplicate group must contain at least two records")

    @property
    def group_id(self) -> str:
        return ",".join(sorted(member.key for member in self.members))

    @property
    def keys(self) -> tuple[str, ...]:
        return tuple(member.key for member in self.members)

    @property
    def representative(self) -> BibliographicRecord:
        """Earliest-added member, for display only."""

        representative = self.members[0]
        for member in self.members[1:]:
            if member.date_added is None:
                continue
            if representative.date_added is None or member.date_added < representative.date_added:
                representative = member
        return representative

    def __len__(self) -> int:
        return len(self.members)


@dataclass(frozen=True, slots=True)
class _MatchKeys:
    doi: str
    isbn: str
    title: str
    surnames: frozenset[str]


def normalize_doi(value: object) -> str:
    if value is None:
        return ""
    return _DOI_PREFIX.sub("", str(value).strip()).strip().lower()


def normalize_isbn(value: object) -> str:
    if value is None:
        return ""
    return re.sub(r"[-\s]", "", str(value)).upper()


def normalize_title(value: str) -> str:
    folded = unicodedata.normalize("NFKC", value).casefold()
    return _WHITESPACE.sub(" ", _NON_WORD.sub("", folded)).strip()


def _match_keys(record: BibliographicRecord) -> _MatchKeys:
    surnames = frozenset(
        normalize_title(creator.surname)
        for creator in record.valid_creators
        if creator.surname
    )
    return _MatchKeys(
        doi=normalize_doi(record.get("DOI")),
        isbn=normalize_isbn(record.get("ISBN")),
        title=normalize_title(record.title),
        surnames=surnames - {""},
    )


def compute_duplicate_groups(
    records: Iterable[BibliographicRecord],
    *,
    policy: MatchPolicy | None = None,
) -> list[DuplicateGroup]:
    """Cluster ``records`` into duplicate groups of two or more members."""

    active_policy = policy or MatchPolicy()
    snapshot = _eligible_records(records)
    keys = [_match_keys(record) for record in snapshot]

    forest = _DisjointSet(len(snapshot))
    reasons_by_pair: dict[tuple[int, int], MatchReason] = {}
    if active_policy.require_author_overlap:
        pairs = _candidate_pairs(keys)
    else:
        pairs = set(combinations(range(len(keys)), 2))
    for left, right in sorted(pairs):
        reason = _match_reason(keys[left], keys[right], active_policy)
        if reason is None:
            continue
        forest.union(left, right)
        reasons_by_pair[(left, right)] = reason

    members_by_root: dict[int, list[int]] = defaultdict(list)
    for index in range(len(snapshot)):
        members_by_root[forest.find(index)].append(index)

    reasons_by_root: dict[int, set[MatchReason]] = defaultdict(set)
    for (left, _right), reason in reasons_by_pair.items():
        reasons_by_root[forest.find(left)].add(reason)

    # roots are the smallest member index, so insertion order is snapshot order
    groups = [
        DuplicateGroup(
            members=tuple(snapshot[index] for index in indexes),
            reasons=frozenset(reasons_by_root[root]),
        )
        for root, indexes in members_by_root.items()
        if len(indexes) > 1
    ]
    log.debug("Found %d duplicate groups in %d records", len(groups), len(snapshot))
    return groups


def _eligible_records(records: Iterable[BibliographicRecord]) -> list[BibliographicRecord]:
    seen: set[str] = set()
    eligible: list[BibliographicRecord] = []
    for record in records:
        if record.key in seen:
            raise DuplicateRecordKeyError(record.key)
        seen.add(record.key)
        if record.record_type in _SKIPPED_TYPES:
            continue
        eligible.append(record)
    return eligible


def _candidate_pairs(keys: Sequence[_MatchKeys]) -> set[tuple[int, int]]:
    blocks: dict[tuple[str, str], list[int]] = defaultdict(list)
    for index, match_keys in enumerate(keys):
        if match_keys.doi:
            blocks[("doi", match_keys.doi)].append(index)
        if match_keys.isbn:
            blocks[("isbn", match_keys.isbn)].append(index)
        for surname in match_keys.surnames:
            blocks[("surname", surname)].append(index)

    pairs: set[tuple[int, int]] = set()
    for indexes in blocks.values():
        pairs.update(combinations(indexes, 2))
    return pairs


def _match_reason(left: _MatchKeys, right: _MatchKeys, policy: MatchPolicy) -> MatchReason | None:
    if left.doi and left.doi == right.doi:
        return MatchReason.DOI
    if left.isbn and left.isbn == right.isbn:
        return MatchReason.ISBN
    if _identifiers_conflict(left, right):
        return None
    if not left.title or not right.title:
        return None
    if policy.require_author_overlap and not (left.surnames & right.surnames):
        return None
    if similarity(left.title, right.title) >= policy.title_threshold:
        return MatchReason.TITLE
    return None


def _identifiers_conflict(left: _MatchKeys, right: _MatchKeys) -> bool:
    if left.doi and right.doi and left.doi != right.doi:
        return True
    return bool(left.isbn and right.isbn and left.isbn != right.isbn)


class _DisjointSet:
    def __init__(self, size: int) -> None:
        self._parent = list(range(size))

    def find(self, index: int) -> int:
        root = index
        while self._parent[root] != root:
            root = self._parent[root]
        while self._parent[index] != root:
            self._parent[index], index = root, self._parent[index]
        return root

    def union(self, left: int, right: int) -> None:
        left_root = self.find(left)
        right_root = self.find(right)
        if left_root == right_root:
            return
        # smaller index stays root so roots follow snapshot order
        if right_root < left_root:
            left_root, right_root = right_root, left_root
        self._parent[right_root] = left_root
