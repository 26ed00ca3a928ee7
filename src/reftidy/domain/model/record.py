"""Bibliographic records as fetched from the record source."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime


def _clean(value: object) -> str:
    return value.strip() if isinstance(value, str) else ""


@dataclass(frozen=True, slots=True)
class Creator:
    """One creator entry: either a split (first, last) name or a single name."""

    creator_type: str
    first_name: str = ""
    last_name: str = ""
    name: str = ""

    @property
    def is_valid(self) -> bool:
        if not self.creator_type.strip():
            return False
        return any(part.strip() for part in (self.first_name, self.last_name, self.name))

    @property
    def surname(self) -> str:
        """Family name, or the single name when the creator is not split."""

        return self.last_name.strip() or self.name.strip()

    @property
    def display_name(self) -> str:
        parts = (self.last_name.strip(), self.first_name.strip(), self.name.strip())
        return " ".join(part for part in parts if part)

    @classmethod
    def from_mapping(cls, payload: Mapping[str, object]) -> Creator:
        return cls(
            creator_type=_clean(payload.get("creatorType")),
            first_name=_clean(payload.get("firstName")),
            last_name=_clean(payload.get("lastName")),
            name=_clean(payload.get("name")),
        )

    def as_mapping(self) -> dict[str, str]:
        """Wire shape used by the record service; blank name parts are omitted."""

        payload = {"creatorType": self.creator_type}
        if self.name and not (self.first_name or self.last_name):
            payload["name"] = self.name
            return payload
        if self.first_name:
            payload["firstName"] = self.first_name
        if self.last_name:
            payload["lastName"] = self.last_name
        if self.name:
            payload["name"] = self.name
        return payload


@dataclass(frozen=True, slots=True, kw_only=True)
class BibliographicRecord:
    """Read-only snapshot of one record.

    The core never mutates a record; it only proposes new field maps.
    ``with_fields`` models the record after such a proposal has been applied.
    """

    key: str
    version: int
    record_type: str
    fields: Mapping[str, object] = field(default_factory=dict)
    creators: tuple[Creator, ...] = ()
    tags: frozenset[str] = frozenset()
    date_added: datetime | None = None

    def __post_init__(self) -> None:
        if not self.key:
            raise ValueError("Record key must not be empty")
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))
        object.__setattr__(self, "creators", tuple(self.creators))
        object.__setattr__(self, "tags", frozenset(self.tags))

    def __hash__(self) -> int:
        return hash((self.key, self.version))

    def get(self, name: str) -> object:
        return self.fields.get(name)

    def text(self, name: str) -> str:
        """Trimmed string value of a scalar field, ``""`` when absent."""

        value = self.fields.get(name)
        if value is None:
            return ""
        return str(value).strip()

    @property
    def title(self) -> str:
        return self.text("title")

    @property
    def valid_creators(self) -> tuple[Creator, ...]:
        return tuple(creator for creator in self.creators if creator.is_valid)

    def with_fields(self, changes: Mapping[str, object]) -> BibliographicRecord:
        """Return a copy with ``changes`` applied; ``creators`` and ``tags`` are understood."""

        fields = dict(self.fields)
        creators: Iterable[Creator] = self.creators
        tags = self.tags
        for name, value in changes.items():
            if name == "creators":
                creators = tuple(_coerce_creator(entry) for entry in _as_list(value))
            elif name == "tags":
                tags = frozenset(_coerce_tag(tag) for tag in _as_list(value))
            else:
                fields[name] = value
        return replace(self, fields=fields, creators=tuple(creators), tags=tags)


def _as_list(value: object) -> list[object]:
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    return []


def _coerce_creator(entry: object) -> Creator:
    if isinstance(entry, Creator):
        return entry
    if isinstance(entry, Mapping):
        return Creator.from_mapping(entry)
    return Creator(creator_type="")


def _coerce_tag(entry: object) -> str:
    if isinstance(entry, Mapping):
        return str(entry.get("tag", ""))
    return str(entry)
