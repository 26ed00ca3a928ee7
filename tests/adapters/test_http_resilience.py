from __future__ import annotations

import asyncio

import httpx
import pytest

from reftidy.adapters.http_resilience import (
    CacheConfig,
    RateLimit,
    ResilienceConfig,
    ResilientClient,
    _build_cache_components,  # pyright: ignore[reportPrivateUsage]
    _PayloadFilter,  # pyright: ignore[reportPrivateUsage]
)


def _config(**overrides: object) -> ResilienceConfig:
    values: dict[str, object] = {
        "name": "test",
        "base_url": "https://api.example.test",
        "cache": None,
        "default_headers": {"X-Client": "reftidy"},
    }
    values.update(overrides)
    return ResilienceConfig(**values)  # type: ignore[arg-type]


def test_client_applies_base_url_and_headers() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    async def run() -> httpx.Response:
        async with ResilientClient(_config(), transport=httpx.MockTransport(handler)) as client:
            return await client.get("/things", params={"q": "x"})

    response = asyncio.run(run())

    assert response.json() == {"ok": True}
    assert str(seen[0].url) == "https://api.example.test/things?q=x"
    assert seen[0].headers["X-Client"] == "reftidy"


def test_client_sends_patch_and_delete() -> None:
    methods: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        methods.append(request.method)
        return httpx.Response(204)

    async def run() -> None:
        config = _config(ratelimit=RateLimit(max_calls=10, per_seconds=1.0))
        async with ResilientClient(config, transport=httpx.MockTransport(handler)) as client:
            await client.patch("/a", json={"x": 1})
            await client.delete("/a")

    asyncio.run(run())

    assert methods == ["PATCH", "DELETE"]


def test_rate_limited_client_sends_every_request() -> None:
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        return httpx.Response(200)

    async def run() -> None:
        config = _config(ratelimit=RateLimit(max_calls=2, per_seconds=0.01))
        async with ResilientClient(config, transport=httpx.MockTransport(handler)) as client:
            for index in range(3):
                await client.get(f"/{index}")

    asyncio.run(run())

    assert calls == ["/0", "/1", "/2"]


def test_payload_filter_uses_predicate() -> None:
    payload_filter = _PayloadFilter(lambda payload: payload == {"status": "ok"})

    assert payload_filter.needs_body()
    assert payload_filter.apply(None, b'{"status": "ok"}')  # type: ignore[arg-type]
    assert not payload_filter.apply(None, b'{"status": "failed"}')  # type: ignore[arg-type]
    assert not payload_filter.apply(None, b"not json")  # type: ignore[arg-type]


def test_disabled_cache_builds_nothing() -> None:
    assert _build_cache_components(None) == (None, None)
    assert _build_cache_components(CacheConfig(enabled=False)) == (None, None)


def test_unknown_cache_backend_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unsupported cache backend"):
        _build_cache_components(CacheConfig(backend="redis"))  # type: ignore[arg-type]
