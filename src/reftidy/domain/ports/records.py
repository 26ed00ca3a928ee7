"""Ports for reading record snapshots and committing merges."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping

    from reftidy.domain.model import BibliographicRecord


class SinkOperation(StrEnum):
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True, slots=True)
class VersionConflict:
    """The target record changed upstream since it was read.

    Returned as a value so the caller can decide between refetch-and-retry
    and abandoning the merge.
    """

    key: str
    expected_version: int
    operation: SinkOperation


class CommitSinkError(RuntimeError):
    """Raised when the sink fails for a reason other than a version conflict."""


@runtime_checkable
class RecordSource(Protocol):
    """Callable port returning a read-only snapshot of records."""

    def __call__(self) -> list[BibliographicRecord]: ...


@runtime_checkable
class CommitSink(Protocol):
    """Write port used to commit a merge draft."""

    def update_record(
        self,
        key: str,
        version: int,
        fields: Mapping[str, object],
    ) -> BibliographicRecord | VersionConflict: ...

    def delete_record(self, key: str, version: int) -> VersionConflict | None: ...
