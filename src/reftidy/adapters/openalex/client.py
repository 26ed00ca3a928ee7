"""OpenAlex title search as an enrichment source."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from reftidy.adapters.http_resilience import ResilientClient
from reftidy.adapters.lookup import best_title_match, title_search_queries
from reftidy.config.openalex import OpenAlexConfig, get_openalex_config
from reftidy.domain.ports import EnrichmentLookupError, EnrichmentSource

from .schema import OpenAlexSearchResponse, OpenAlexWork
from .translator import work_to_candidate

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from reftidy.config.http_resilience import ResilienceConfig
    from reftidy.domain.model import BibliographicRecord

log = getLogger(__name__)


class OpenAlexAPIError(EnrichmentLookupError):
    """Raised when the OpenAlex API returns an unexpected response."""


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class OpenAlexEnrichmentSource:
    """Searches OpenAlex by title and first author, then by title alone."""

    config: OpenAlexConfig = field(default_factory=get_openalex_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    def __call__(self, record: BibliographicRecord) -> Mapping[str, object]:
        return asyncio.run(self._lookup_async(record))

    async def _lookup_async(self, record: BibliographicRecord) -> Mapping[str, object]:
        queries = title_search_queries(record, with_year=False)
        if not queries:
            log.debug("Record %s has no searchable title; skipping OpenAlex", record.key)
            return {}
        async with self.client_factory(self.config.resilience) as client:
            for query in queries:
                works = await self._search(client, query)
                match = best_title_match(record.title, works, lambda work: work.title or "")
                if match is not None:
                    return work_to_candidate(match)
        log.debug("No OpenAlex match for record %s", record.key)
        return {}

    async def _search(self, client: ResilientClient, query: str) -> list[OpenAlexWork]:
        params = {"search": query, "per_page": str(self.config.per_page)}
        if self.config.mailto:
            params["mailto"] = self.config.mailto
        try:
            response = await client.get("/works", params=params)
        except httpx.HTTPError as exc:
            raise OpenAlexAPIError(f"OpenAlex request failed: {exc}") from exc
        if not response.is_success:
            log.error("OpenAlex API error %d for %s", response.status_code, response.request.url)
            raise OpenAlexAPIError(f"OpenAlex API returned {response.status_code}")
        try:
            return OpenAlexSearchResponse.model_validate(response.json()).results
        except (ValidationError, ValueError) as exc:
            raise OpenAlexAPIError("Unexpected OpenAlex search payload") from exc


if TYPE_CHECKING:
    _source_check: EnrichmentSource = OpenAlexEnrichmentSource()
