"""Schema-driven completeness checks for bibliographic records."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from reftidy.domain.model import CREATORS, DEFAULT_SCHEMA, schema_for

if TYPE_CHECKING:
    from reftidy.domain.model import BibliographicRecord, FieldSchema

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CompletenessReport:
    """Missing fields in schema declaration order."""

    required: tuple[str, ...] = ()
    recommended: tuple[str, ...] = ()

    @property
    def is_complete(self) -> bool:
        return not self.required


def check_completeness(record: BibliographicRecord) -> CompletenessReport:
    """Report which required and recommended fields ``record`` is missing.

    Unrecognized record types are checked against the default minimal schema.
    The result is recomputed on every call.
    """

    schema = resolve_schema(record.record_type)
    return CompletenessReport(
        required=tuple(name for name in schema.required if is_missing(record, name)),
        recommended=tuple(name for name in schema.recommended if is_missing(record, name)),
    )


def resolve_schema(record_type: str) -> FieldSchema:
    schema = schema_for(record_type)
    if schema is None:
        log.debug("No field schema for record type %r; using default", record_type)
        return DEFAULT_SCHEMA
    return schema


def is_missing(record: BibliographicRecord, name: str) -> bool:
    if name == CREATORS:
        return not record.valid_creators
    value = record.get(name)
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False
