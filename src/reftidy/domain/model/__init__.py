"""Public domain model surface."""

from __future__ import annotations

from reftidy.domain.model.enums import CreatorType, MatchReason, RecordType, Severity
from reftidy.domain.model.fields import (
    CREATORS,
    DEFAULT_SCHEMA,
    FIELD_SCHEMAS,
    KNOWN_FIELDS,
    SCALAR_FIELDS,
    FieldSchema,
    filter_valid_fields,
    schema_for,
)
from reftidy.domain.model.record import BibliographicRecord, Creator

__all__ = [
    "CREATORS",
    "DEFAULT_SCHEMA",
    "FIELD_SCHEMAS",
    "KNOWN_FIELDS",
    "SCALAR_FIELDS",
    "BibliographicRecord",
    "Creator",
    "CreatorType",
    "FieldSchema",
    "MatchReason",
    "RecordType",
    "Severity",
    "filter_valid_fields",
    "schema_for",
]
