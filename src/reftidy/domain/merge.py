"""Conflict-aware merge of a duplicate group into its chosen master.

The resolver is pure: the same group, master index and overrides always
produce an identical draft. Committing a draft is a separate step, see
:mod:`reftidy.domain.commit`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import StrEnum
from types import MappingProxyType
from typing import TYPE_CHECKING

from reftidy.domain.enrichment import validate_creators
from reftidy.domain.model import CREATORS, SCALAR_FIELDS, Creator

if TYPE_CHECKING:
    from collections.abc import Mapping

    from reftidy.domain.duplicates import DuplicateGroup
    from reftidy.domain.model import BibliographicRecord

log = logging.getLogger(__name__)


class InvalidOverrideError(ValueError):
    """Raised when an override value cannot be stored in its field."""

    def __init__(self, field_name: str, value: object) -> None:
        self.field = field_name
        self.value = value
        super().__init__(f"Invalid override for {field_name}: {value!r}")


@dataclass(frozen=True, slots=True)
class ConflictCandidate:
    """One distinct value and the records holding it."""

    value: object
    record_keys: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class FieldConflict:
    """A field on which group members disagree and no override was given."""

    field: str
    candidates: tuple[ConflictCandidate, ...]
    chosen: object


@dataclass(frozen=True, slots=True, kw_only=True)
class MemberRef:
    key: str
    version: int


@dataclass(frozen=True, slots=True, kw_only=True)
class MergeDraft:
    """Proposed field map for the master plus the disagreements behind it."""

    master: MemberRef
    record_type: str
    fields: dict[str, object]
    conflicts: tuple[FieldConflict, ...] = ()
    overrides: dict[str, object] = field(default_factory=dict["str", "object"])
    duplicates: tuple[MemberRef, ...] = ()
    tags: tuple[str, ...] = ()

    def __hash__(self) -> int:
        return hash((self.master, self.record_type, self.duplicates, self.tags))

    @property
    def conflicted_fields(self) -> tuple[str, ...]:
        return tuple(conflict.field for conflict in self.conflicts)

    def update_payload(self) -> dict[str, object]:
        """Field map sent to the commit sink for the master record."""

        payload = dict(self.fields)
        payload["tags"] = [{"tag": tag} for tag in self.tags]
        return payload


def build_merge_draft(
    group: DuplicateGroup,
    master_index: int,
    overrides: Mapping[str, object] | None = None,
) -> MergeDraft:
    """Resolve every known field across the group, keeping the master's values first."""

    members = group.members
    if not 0 <= master_index < len(members):
        raise ValueError(f"Master index {master_index} out of range for {len(members)} records")

    master = members[master_index]
    applied_overrides = _known_overrides(overrides or {})
    fields: dict[str, object] = {}
    conflicts: list[FieldConflict] = []

    for name in SCALAR_FIELDS:
        if name in applied_overrides:
            _apply_override(fields, name, applied_overrides[name])
            continue
        winner, conflict = _resolve_scalar(name, members, master)
        if winner is not None:
            fields[name] = winner
        if conflict is not None:
            conflicts.append(conflict)

    if CREATORS in applied_overrides:
        _apply_override(fields, CREATORS, applied_overrides[CREATORS])
    else:
        creators, conflict = _resolve_creators(members)
        if creators is not None:
            fields[CREATORS] = creators
        if conflict is not None:
            conflicts.append(conflict)

    draft = MergeDraft(
        master=MemberRef(key=master.key, version=master.version),
        record_type=master.record_type,
        fields=fields,
        conflicts=tuple(conflicts),
        overrides=applied_overrides,
        duplicates=tuple(
            MemberRef(key=member.key, version=member.version)
            for index, member in enumerate(members)
            if index != master_index
        ),
        tags=tuple(sorted(set().union(*(member.tags for member in members)))),
    )
    log.debug(
        "Built merge draft for master %s: %d fields, conflicts=%s",
        master.key,
        len(fields),
        draft.conflicted_fields,
    )
    return draft


def _known_overrides(overrides: Mapping[str, object]) -> dict[str, object]:
    known: dict[str, object] = {}
    for name, value in overrides.items():
        if name == CREATORS:
            known[name] = _creators_override(value)
        elif name in SCALAR_FIELDS:
            if value is not None and (
                isinstance(value, bool) or not isinstance(value, (str, int, float))
            ):
                raise InvalidOverrideError(name, value)
            known[name] = value
        else:
            log.debug("Ignoring override for unknown field %r", name)
    return known


def _creators_override(value: object) -> list[dict[str, str]]:
    """Creators given as ``Creator`` objects, wire mappings, or ``"Last, First; Name"`` text."""

    if value is None:
        return []
    if isinstance(value, str):
        if not value.strip():
            return []
        entries: list[object] = [_parse_creator_text(part) for part in value.split(";")]
    elif isinstance(value, (list, tuple)):
        if not value:
            return []
        entries = [entry.as_mapping() if isinstance(entry, Creator) else entry for entry in value]
    else:
        raise InvalidOverrideError(CREATORS, value)
    creators = validate_creators(entries)
    if creators is None:
        raise InvalidOverrideError(CREATORS, value)
    return [creator.as_mapping() for creator in creators]


def _parse_creator_text(text: str) -> dict[str, str]:
    last, separator, first = text.partition(",")
    if separator:
        return {"creatorType": "author", "lastName": last.strip(), "firstName": first.strip()}
    return {"creatorType": "author", "name": text.strip()}


def _apply_override(fields: dict[str, object], name: str, value: object) -> None:
    if value is None or (isinstance(value, str) and not value.strip()):
        fields[name] = [] if name == CREATORS else ""
        return
    fields[name] = value.strip() if isinstance(value, str) else value


def _comparable(value: object) -> str:
    return " ".join(str(value).split()).casefold()


def _non_empty(value: object) -> bool:
    return value is not None and bool(str(value).strip())


def _resolve_scalar(
    name: str,
    members: tuple[BibliographicRecord, ...],
    master: BibliographicRecord,
) -> tuple[object | None, FieldConflict | None]:
    spelling: dict[str, object] = {}
    holders: dict[str, list[str]] = {}
    for member in members:
        value = member.get(name)
        if not _non_empty(value):
            continue
        comparable = _comparable(value)
        if comparable not in spelling:
            spelling[comparable] = value.strip() if isinstance(value, str) else value
            holders[comparable] = []
        holders[comparable].append(member.key)

    if not spelling:
        return None, None

    master_value = master.get(name)
    master_comparable = _comparable(master_value) if _non_empty(master_value) else None
    if len(spelling) == 1:
        if master_comparable is not None:
            return _stripped(master_value), None
        return next(iter(spelling.values())), None

    if master_comparable is not None:
        winner = _stripped(master_value)
    else:
        # max() keeps the first of equally long values, i.e. group order
        winner = max(spelling.values(), key=lambda value: len(str(value)))

    conflict = FieldConflict(
        field=name,
        candidates=tuple(
            ConflictCandidate(value=spelling[comparable], record_keys=tuple(holders[comparable]))
            for comparable in spelling
        ),
        chosen=winner,
    )
    return winner, conflict


def _stripped(value: object) -> object:
    return value.strip() if isinstance(value, str) else value


def _resolve_creators(
    members: tuple[BibliographicRecord, ...],
) -> tuple[list[dict[str, str]] | None, FieldConflict | None]:
    best: BibliographicRecord | None = None
    best_count = 0
    for member in members:
        count = len(member.valid_creators)
        if count > best_count:
            best, best_count = member, count
    if best is None:
        return None, None

    winner = [creator.as_mapping() for creator in best.creators]

    variants: dict[tuple[tuple[str, ...], ...], list[str]] = {}
    first_seen: dict[tuple[tuple[str, ...], ...], BibliographicRecord] = {}
    for member in members:
        if not member.creators:
            continue
        signature = _creators_signature(member.creators)
        variants.setdefault(signature, []).append(member.key)
        first_seen.setdefault(signature, member)

    if len(variants) < 2:
        return winner, None

    conflict = FieldConflict(
        field=CREATORS,
        candidates=tuple(
            ConflictCandidate(
                value=[creator.as_mapping() for creator in first_seen[signature].creators],
                record_keys=tuple(keys),
            )
            for signature, keys in variants.items()
        ),
        chosen=winner,
    )
    return winner, conflict


def _creators_signature(creators: tuple[Creator, ...]) -> tuple[tuple[str, ...], ...]:
    return tuple(
        (
            creator.creator_type.casefold(),
            _comparable(creator.first_name),
            _comparable(creator.last_name),
            _comparable(creator.name),
        )
        for creator in creators
    )


class MergeState(StrEnum):
    DETECTED = "detected"
    COMPARED = "compared"
    MASTER_SELECTED = "master_selected"
    DRAFT_EDITED = "draft_edited"
    COMMITTED = "committed"
    CANCELLED = "cancelled"


_TRANSITIONS: dict[MergeState, frozenset[MergeState]] = {
    MergeState.DETECTED: frozenset({MergeState.COMPARED, MergeState.CANCELLED}),
    MergeState.COMPARED: frozenset({MergeState.MASTER_SELECTED, MergeState.CANCELLED}),
    MergeState.MASTER_SELECTED: frozenset(
        {
            MergeState.MASTER_SELECTED,
            MergeState.DRAFT_EDITED,
            MergeState.COMMITTED,
            MergeState.CANCELLED,
        }
    ),
    MergeState.DRAFT_EDITED: frozenset(
        {
            MergeState.MASTER_SELECTED,
            MergeState.DRAFT_EDITED,
            MergeState.COMMITTED,
            MergeState.CANCELLED,
        }
    ),
    MergeState.COMMITTED: frozenset(),
    MergeState.CANCELLED: frozenset(),
}


class InvalidMergeTransitionError(RuntimeError):
    """Raised when a merge session is driven out of order."""

    def __init__(self, current: MergeState, requested: MergeState) -> None:
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move merge session from {current} to {requested}")


@dataclass(frozen=True, slots=True)
class MergeSession:
    """Explicit, immutable lifecycle of one duplicate group's merge.

    Every transition returns a new session; nothing is kept between scans.
    """

    group: DuplicateGroup
    state: MergeState = MergeState.DETECTED
    master_index: int | None = None
    overrides: Mapping[str, object] = field(default_factory=lambda: MappingProxyType({}))

    def __hash__(self) -> int:
        return hash((self.group, self.state, self.master_index))

    def compare(self) -> MergeSession:
        return self._move(MergeState.COMPARED)

    def select_master(self, master_index: int) -> MergeSession:
        if not 0 <= master_index < len(self.group.members):
            raise ValueError(f"Master index {master_index} out of range")
        return replace(
            self._move(MergeState.MASTER_SELECTED),
            master_index=master_index,
            overrides=MappingProxyType({}),
        )

    def override(self, name: str, value: object) -> MergeSession:
        moved = self._move(MergeState.DRAFT_EDITED)
        _known_overrides({name: value})
        return replace(moved, overrides=MappingProxyType({**self.overrides, name: value}))

    def draft(self) -> MergeDraft:
        if self.master_index is None:
            raise InvalidMergeTransitionError(self.state, MergeState.MASTER_SELECTED)
        return build_merge_draft(self.group, self.master_index, self.overrides)

    def commit(self) -> MergeSession:
        return self._move(MergeState.COMMITTED)

    def cancel(self) -> MergeSession:
        return self._move(MergeState.CANCELLED)

    def _move(self, target: MergeState) -> MergeSession:
        if target not in _TRANSITIONS[self.state]:
            raise InvalidMergeTransitionError(self.state, target)
        return replace(self, state=target)
