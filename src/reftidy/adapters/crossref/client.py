"""Crossref lookup as an enrichment source."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from reftidy.adapters.http_resilience import ResilientClient
from reftidy.adapters.lookup import best_title_match as _best_title_match
from reftidy.adapters.lookup import title_search_queries
from reftidy.config.crossref import CrossrefConfig, get_crossref_config
from reftidy.domain.duplicates import normalize_doi
from reftidy.domain.ports import EnrichmentLookupError, EnrichmentSource

from .schema import CrossrefSearchResponse, CrossrefWork, CrossrefWorkResponse
from .translator import work_to_candidate

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from reftidy.config.http_resilience import ResilienceConfig
    from reftidy.domain.model import BibliographicRecord

log = getLogger(__name__)


class CrossrefAPIError(EnrichmentLookupError):
    """Raised when the Crossref API returns an unexpected response."""


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class CrossrefEnrichmentSource:
    """Looks a record up by DOI, then by bibliographic title search.

    A DOI unknown to Crossref falls through to the title search. Searches go
    from title, first author and year down to the title alone and stop at the
    first close title match.
    """

    config: CrossrefConfig = field(default_factory=get_crossref_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    def __call__(self, record: BibliographicRecord) -> Mapping[str, object]:
        return asyncio.run(self._lookup_async(record))

    async def _lookup_async(self, record: BibliographicRecord) -> Mapping[str, object]:
        doi = normalize_doi(record.get("DOI"))
        queries = title_search_queries(record)
        if not doi and not queries:
            log.debug("Record %s has no DOI and no searchable title; skipping Crossref", record.key)
            return {}
        async with self.client_factory(self.config.resilience) as client:
            work = await self._fetch_work(client, doi) if doi else None
            if work is None and queries:
                if doi:
                    log.debug("DOI %s not found on Crossref; searching by title", doi)
                work = await self._search_titles(client, record.title, queries)
        if work is None:
            log.debug("No Crossref match for record %s", record.key)
            return {}
        return work_to_candidate(work)

    async def _fetch_work(self, client: ResilientClient, doi: str) -> CrossrefWork | None:
        response = await self._get(client, f"/works/{quote(doi, safe='/')}")
        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        _raise_for_status(response)
        try:
            return CrossrefWorkResponse.model_validate(response.json()).message
        except (ValidationError, ValueError) as exc:
            raise CrossrefAPIError("Unexpected Crossref work payload") from exc

    async def _search_titles(
        self,
        client: ResilientClient,
        title: str,
        queries: list[str],
    ) -> CrossrefWork | None:
        for query in queries:
            work = await self._search_work(client, title, query)
            if work is not None:
                return work
        return None

    async def _search_work(
        self,
        client: ResilientClient,
        title: str,
        query: str,
    ) -> CrossrefWork | None:
        response = await self._get(
            client,
            "/works",
            params={"query.bibliographic": query, "rows": str(self.config.search_rows)},
        )
        _raise_for_status(response)
        try:
            items = CrossrefSearchResponse.model_validate(response.json()).message.items
        except (ValidationError, ValueError) as exc:
            raise CrossrefAPIError("Unexpected Crossref search payload") from exc
        return best_title_match(title, items)

    @staticmethod
    async def _get(
        client: ResilientClient,
        path: str,
        *,
        params: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        try:
            return await client.get(path, params=params)
        except httpx.HTTPError as exc:
            raise CrossrefAPIError(f"Crossref request failed: {exc}") from exc


def best_title_match(title: str, works: list[CrossrefWork]) -> CrossrefWork | None:
    return _best_title_match(title, works, lambda work: work.title[0] if work.title else "")


def _raise_for_status(response: httpx.Response) -> None:
    if response.is_success:
        return
    log.error("Crossref API error %d for %s", response.status_code, response.request.url)
    raise CrossrefAPIError(f"Crossref API returned {response.status_code}")


if TYPE_CHECKING:
    _source_check: EnrichmentSource = CrossrefEnrichmentSource()
