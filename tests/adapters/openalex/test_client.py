from __future__ import annotations

import httpx
import pytest

from reftidy.adapters.openalex import OpenAlexEnrichmentSource
from reftidy.adapters.openalex.client import OpenAlexAPIError
from reftidy.config.http_resilience import ResilienceConfig, RetryPolicy
from reftidy.config.openalex import OpenAlexConfig
from reftidy.domain.ports import EnrichmentLookupError, EnrichmentSource
from tests.helpers.http import mock_client_factory
from tests.helpers.records import author, make_record


@pytest.fixture
def openalex_config() -> OpenAlexConfig:
    resilience = ResilienceConfig(
        name="openalex-test",
        base_url="https://api.openalex.test",
        retry=RetryPolicy(total=0),
        cache=None,
    )
    return OpenAlexConfig(resilience=resilience, per_page=3, mailto="me@example.org")


def _results(*titles: str) -> dict[str, object]:
    works = [
        {"title": title, "doi": f"https://doi.org/10.1/{index}"}
        for index, title in enumerate(titles)
    ]
    return {"results": works}


def test_source_satisfies_port(openalex_config: OpenAlexConfig) -> None:
    source = OpenAlexEnrichmentSource(
        config=openalex_config,
        client_factory=mock_client_factory(lambda _request: httpx.Response(200, json={})),
    )

    assert isinstance(source, EnrichmentSource)


def test_search_tries_author_then_title_only(openalex_config: OpenAlexConfig) -> None:
    params: list[httpx.QueryParams] = []

    def handler(request: httpx.Request) -> httpx.Response:
        params.append(request.url.params)
        if request.url.params["search"] == "Deep learning LeCun":
            return httpx.Response(200, json=_results("Shallow learning"))
        return httpx.Response(200, json=_results("Something else", "Deep Learning"))

    source = OpenAlexEnrichmentSource(
        config=openalex_config, client_factory=mock_client_factory(handler)
    )
    record = make_record("A", title="Deep learning", date="2015", creators=(author("LeCun"),))

    candidate = source(record)

    assert [entry["search"] for entry in params] == ["Deep learning LeCun", "Deep learning"]
    assert params[0]["per_page"] == "3"
    assert params[0]["mailto"] == "me@example.org"
    assert candidate["DOI"] == "10.1/1"


def test_no_close_title_yields_nothing(openalex_config: OpenAlexConfig) -> None:
    source = OpenAlexEnrichmentSource(
        config=openalex_config,
        client_factory=mock_client_factory(
            lambda _request: httpx.Response(200, json=_results("Unrelated work"))
        ),
    )

    assert source(make_record("A", title="Deep learning")) == {}


def test_short_title_is_not_searched(openalex_config: OpenAlexConfig) -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    source = OpenAlexEnrichmentSource(
        config=openalex_config, client_factory=mock_client_factory(handler)
    )

    assert source(make_record("A", title="Notes")) == {}


def test_server_error_raises_lookup_error(openalex_config: OpenAlexConfig) -> None:
    source = OpenAlexEnrichmentSource(
        config=openalex_config,
        client_factory=mock_client_factory(lambda _request: httpx.Response(503)),
    )

    with pytest.raises(OpenAlexAPIError) as excinfo:
        source(make_record("A", title="Deep learning"))
    assert isinstance(excinfo.value, EnrichmentLookupError)
