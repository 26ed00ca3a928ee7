"""Reconciliation of untrusted enrichment candidates against a record.

Candidates arrive from an external lookup and are validated once, at the
boundary, into an :class:`EnrichmentCandidate` that carries every rejection
with its reason. Nothing in this module raises on malformed input.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Final, TypeAlias

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from reftidy.domain.model import CREATORS, KNOWN_FIELDS, Creator

if TYPE_CHECKING:
    from reftidy.domain.model import BibliographicRecord
    from reftidy.domain.ports.enrichment import EnrichmentSource

log = logging.getLogger(__name__)

PLACEHOLDER_VALUES: Final[frozenset[str]] = frozenset({"", "unknown", "null", "n/a", "none"})

# Synthetic creator data such as "Last1, F.; Last2" from a generated record.
PLACEHOLDER_CREATOR_PATTERN: Final[re.Pattern[str]] = re.compile(r"last\d", re.IGNORECASE)

FieldMap: TypeAlias = dict[str, object]


class RejectionReason(StrEnum):
    UNKNOWN_FIELD = "unknown_field"
    EMPTY_VALUE = "empty_value"
    PLACEHOLDER_VALUE = "placeholder_value"
    INVALID_TYPE = "invalid_type"
    INVALID_CREATORS = "invalid_creators"
    UNCHANGED = "unchanged"


@dataclass(frozen=True, slots=True)
class Rejection:
    field: str
    reason: RejectionReason


@dataclass(frozen=True, slots=True)
class EnrichmentCandidate:
    """Candidate values that survived shape validation."""

    values: Mapping[str, str] = field(default_factory=dict["str", "str"])
    creators: tuple[Creator, ...] | None = None
    rejections: tuple[Rejection, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.values and self.creators is None


@dataclass(frozen=True, slots=True)
class ReconciliationReport:
    accepted: FieldMap
    rejections: tuple[Rejection, ...]


class _CreatorPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    creatorType: str  # noqa: N815
    firstName: str = ""  # noqa: N815
    lastName: str = ""  # noqa: N815
    name: str = ""

    @field_validator("creatorType", "firstName", "lastName", "name", mode="before")
    @classmethod
    def _none_to_blank(cls, value: object) -> object:
        return "" if value is None else value

    def to_creator(self) -> Creator | None:
        creator = Creator(
            creator_type=self.creatorType.strip(),
            first_name=self.firstName.strip(),
            last_name=self.lastName.strip(),
            name=self.name.strip(),
        )
        return creator if creator.is_valid else None


def validate_candidate(payload: object) -> EnrichmentCandidate:
    """Validate an untrusted payload; invalid fields are dropped with a reason."""

    if isinstance(payload, EnrichmentCandidate):
        return payload
    if not isinstance(payload, Mapping):
        if payload is not None:
            log.debug("Discarding non-mapping enrichment payload of type %s", type(payload))
        return EnrichmentCandidate()

    values: dict[str, str] = {}
    creators: tuple[Creator, ...] | None = None
    rejections: list[Rejection] = []
    for raw_key, raw_value in payload.items():
        key = str(raw_key)
        if key not in KNOWN_FIELDS:
            rejections.append(Rejection(key, RejectionReason.UNKNOWN_FIELD))
            continue
        if key == CREATORS:
            creators = validate_creators(raw_value)
            if creators is None:
                rejections.append(Rejection(key, RejectionReason.INVALID_CREATORS))
            continue
        value, reason = _validate_scalar(raw_value)
        if reason is not None:
            rejections.append(Rejection(key, reason))
            continue
        values[key] = value

    return EnrichmentCandidate(values=values, creators=creators, rejections=tuple(rejections))


def reconcile_enrichment(record: BibliographicRecord, candidate: object) -> FieldMap:
    """Return only the candidate changes worth applying to ``record``.

    An empty map means there is nothing to apply.
    """

    return reconcile_enrichment_report(record, candidate).accepted


def reconcile_enrichment_report(
    record: BibliographicRecord,
    candidate: object,
) -> ReconciliationReport:
    validated = validate_candidate(candidate)
    accepted: FieldMap = {}
    rejections = list(validated.rejections)

    for key, value in validated.values.items():
        if value == _coerce_current(record.get(key)):
            rejections.append(Rejection(key, RejectionReason.UNCHANGED))
            continue
        accepted[key] = value

    if validated.creators is not None:
        if _should_replace_creators(record.creators, validated.creators):
            accepted[CREATORS] = [creator.as_mapping() for creator in validated.creators]
        else:
            rejections.append(Rejection(CREATORS, RejectionReason.UNCHANGED))

    if rejections:
        log.debug(
            "Enrichment for record %s: accepted=%s rejected=%s",
            record.key,
            sorted(accepted),
            [(rejection.field, rejection.reason.value) for rejection in rejections],
        )
    return ReconciliationReport(accepted=accepted, rejections=tuple(rejections))


def fetch_candidate(source: EnrichmentSource, record: BibliographicRecord) -> EnrichmentCandidate:
    """Invoke ``source`` once and normalize any failure to an empty candidate."""

    try:
        payload = source(record)
    except Exception as exc:  # noqa: BLE001
        log.warning("Enrichment lookup failed for record %s: %s", record.key, exc)
        return EnrichmentCandidate()
    if not isinstance(payload, Mapping):
        log.warning("Enrichment lookup for record %s returned a non-mapping payload", record.key)
        return EnrichmentCandidate()
    return validate_candidate(payload)


def looks_like_placeholder_creators(creators: tuple[Creator, ...]) -> bool:
    serialized = " ".join(creator.display_name for creator in creators)
    return PLACEHOLDER_CREATOR_PATTERN.search(serialized) is not None


def _validate_scalar(raw_value: object) -> tuple[str, RejectionReason | None]:
    if raw_value is None:
        return "", RejectionReason.EMPTY_VALUE
    if isinstance(raw_value, bool) or not isinstance(raw_value, (str, int, float)):
        return "", RejectionReason.INVALID_TYPE
    value = str(raw_value).strip()
    if not value:
        return "", RejectionReason.EMPTY_VALUE
    if value.casefold() in PLACEHOLDER_VALUES:
        return "", RejectionReason.PLACEHOLDER_VALUE
    return value, None


def validate_creators(raw_value: object) -> tuple[Creator, ...] | None:
    """Creators from a list of wire-shaped mappings, or ``None`` if any entry is invalid."""

    if not isinstance(raw_value, (list, tuple)) or not raw_value:
        return None
    creators: list[Creator] = []
    for entry in raw_value:
        if not isinstance(entry, Mapping):
            return None
        try:
            creator = _CreatorPayload.model_validate(entry).to_creator()
        except ValidationError:
            return None
        if creator is None:
            return None
        creators.append(creator)
    return tuple(creators)


def _coerce_current(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _should_replace_creators(
    current: tuple[Creator, ...],
    candidate: tuple[Creator, ...],
) -> bool:
    if looks_like_placeholder_creators(current):
        return _exact_creators(current) != _exact_creators(candidate)
    return _structural_creators(current) != _structural_creators(candidate)


def _exact_creators(creators: tuple[Creator, ...]) -> list[dict[str, str]]:
    return [creator.as_mapping() for creator in creators]


def _structural_creators(creators: tuple[Creator, ...]) -> list[tuple[str, ...]]:
    return [
        (
            creator.creator_type.casefold(),
            " ".join(creator.first_name.split()).casefold(),
            " ".join(creator.last_name.split()).casefold(),
            " ".join(creator.name.split()).casefold(),
        )
        for creator in creators
    ]
