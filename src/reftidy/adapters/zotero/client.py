"""HTTP client for the Zotero Web API v3."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from reftidy.adapters.http_resilience import ResilientClient
from reftidy.config.zotero import ZoteroConfig, get_zotero_config
from reftidy.domain.model import BibliographicRecord
from reftidy.domain.ports.records import (
    CommitSink,
    CommitSinkError,
    RecordSource,
    SinkOperation,
    VersionConflict,
)

from .translator import parse_item

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping

    from reftidy.config.http_resilience import ResilienceConfig

log = getLogger(__name__)

_VERSION_HEADER = "If-Unmodified-Since-Version"
_TOTAL_RESULTS_HEADER = "Total-Results"
_LAST_MODIFIED_HEADER = "Last-Modified-Version"


class ZoteroAPIError(CommitSinkError):
    """Raised when the Zotero API fails for a reason other than a version conflict."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class ZoteroClient:
    """Record source and commit sink over one Zotero library.

    Each public call runs its own event loop; the client is synchronous to
    its callers.
    """

    config: ZoteroConfig = field(default_factory=get_zotero_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    def __call__(self) -> list[BibliographicRecord]:
        return self.fetch_all_records()

    def fetch_all_records(self) -> list[BibliographicRecord]:
        return asyncio.run(self._fetch_all_records_async())

    def fetch_record(self, key: str) -> BibliographicRecord:
        return asyncio.run(self._fetch_record_async(key))

    def update_record(
        self,
        key: str,
        version: int,
        fields: Mapping[str, object],
    ) -> BibliographicRecord | VersionConflict:
        return asyncio.run(self._update_record_async(key, version, fields))

    def delete_record(self, key: str, version: int) -> VersionConflict | None:
        return asyncio.run(self._delete_record_async(key, version))

    def _item_path(self, key: str | None = None) -> str:
        base = f"{self.config.library_path}/items"
        return base if key is None else f"{base}/{key}"

    async def _fetch_all_records_async(self) -> list[BibliographicRecord]:
        records: list[BibliographicRecord] = []
        start = 0
        async with self.client_factory(self.config.resilience) as client:
            while True:
                response = await self._perform_request(
                    client,
                    "GET",
                    self._item_path(),
                    params={
                        "format": "json",
                        "limit": str(self.config.page_size),
                        "start": str(start),
                    },
                )
                payload = response.json()
                if not isinstance(payload, list):
                    raise ZoteroAPIError("Unexpected Zotero items payload")
                records.extend(self._parse(item) for item in payload)

                total = _int_header(response, _TOTAL_RESULTS_HEADER, fallback=len(records))
                start += len(payload)
                if not payload or start >= total:
                    break

        log.info("Fetched %d Zotero items", len(records))
        return records

    async def _fetch_record_async(self, key: str) -> BibliographicRecord:
        async with self.client_factory(self.config.resilience) as client:
            return await self._fetch_with(client, key)

    async def _fetch_with(self, client: ResilientClient, key: str) -> BibliographicRecord:
        response = await self._perform_request(
            client, "GET", self._item_path(key), params={"format": "json"}
        )
        return self._parse(response.json())

    async def _update_record_async(
        self,
        key: str,
        version: int,
        fields: Mapping[str, object],
    ) -> BibliographicRecord | VersionConflict:
        async with self.client_factory(self.config.resilience) as client:
            response = await _send(
                client.patch(
                    self._item_path(key),
                    json=dict(fields),
                    headers={_VERSION_HEADER: str(version)},
                )
            )
            if response.status_code == httpx.codes.PRECONDITION_FAILED:
                log.warning("Zotero item %s changed since version %d", key, version)
                return VersionConflict(
                    key=key, expected_version=version, operation=SinkOperation.UPDATE
                )
            _raise_for_status(response)
            new_version = _int_header(response, _LAST_MODIFIED_HEADER, fallback=version)
            try:
                return await self._fetch_with(client, key)
            except ZoteroAPIError as exc:
                # The write went through; only the re-read is missing.
                log.warning("Zotero item %s updated but could not be re-read: %s", key, exc)
                return BibliographicRecord(
                    key=key,
                    version=new_version,
                    record_type=str(fields.get("itemType", "")),
                ).with_fields(fields)

    async def _delete_record_async(self, key: str, version: int) -> VersionConflict | None:
        async with self.client_factory(self.config.resilience) as client:
            response = await _send(
                client.delete(self._item_path(key), headers={_VERSION_HEADER: str(version)})
            )
        if response.status_code == httpx.codes.PRECONDITION_FAILED:
            log.warning("Zotero item %s changed since version %d", key, version)
            return VersionConflict(
                key=key, expected_version=version, operation=SinkOperation.DELETE
            )
        _raise_for_status(response)
        return None

    async def _perform_request(
        self,
        client: ResilientClient,
        method: str,
        path: str,
        *,
        params: Mapping[str, str],
    ) -> httpx.Response:
        response = await _send(client.request(method, path, params=dict(params)))
        _raise_for_status(response)
        return response

    @staticmethod
    def _parse(payload: object) -> BibliographicRecord:
        try:
            return parse_item(payload)
        except ValidationError as exc:
            raise ZoteroAPIError(f"Unexpected Zotero item payload: {exc}") from exc


async def _send(request: Awaitable[httpx.Response]) -> httpx.Response:
    try:
        return await request
    except httpx.HTTPError as exc:
        raise ZoteroAPIError(f"Zotero request failed: {exc}") from exc


def _raise_for_status(response: httpx.Response) -> None:
    if response.is_success:
        return
    message = response.text.strip() or response.reason_phrase
    log.error("Zotero API error %d: %s", response.status_code, message)
    raise ZoteroAPIError(
        f"Zotero API returned {response.status_code}: {message}",
        status_code=response.status_code,
    )


def _int_header(response: httpx.Response, name: str, *, fallback: int) -> int:
    raw = response.headers.get(name)
    if raw is None:
        return fallback
    try:
        return int(raw)
    except ValueError:
        return fallback


if TYPE_CHECKING:
    _source_check: RecordSource = ZoteroClient()
    _sink_check: CommitSink = ZoteroClient()
