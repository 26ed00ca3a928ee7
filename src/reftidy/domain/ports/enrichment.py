"""Port definition for external enrichment lookups."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping

    from reftidy.domain.model import BibliographicRecord


@runtime_checkable
class EnrichmentSource(Protocol):
    """Propose field values for a record.

    The returned mapping is untrusted. Implementations may raise; callers
    normalize failures to an empty candidate.
    """

    def __call__(self, record: BibliographicRecord) -> Mapping[str, object]: ...


class EnrichmentLookupError(RuntimeError):
    """Raised by an enrichment source when its upstream service fails."""
