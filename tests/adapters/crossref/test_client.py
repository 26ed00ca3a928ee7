from __future__ import annotations

import httpx
import pytest

from reftidy.adapters.crossref import CrossrefAPIError, CrossrefEnrichmentSource, CrossrefWork
from reftidy.adapters.crossref.client import best_title_match
from reftidy.config.crossref import CrossrefConfig
from reftidy.config.http_resilience import ResilienceConfig, RetryPolicy
from reftidy.domain.enrichment import fetch_candidate, reconcile_enrichment
from reftidy.domain.ports import EnrichmentSource
from tests.helpers.http import mock_client_factory
from tests.helpers.records import author, make_record


@pytest.fixture
def crossref_config() -> CrossrefConfig:
    resilience = ResilienceConfig(
        name="crossref-test",
        base_url="https://api.crossref.test",
        retry=RetryPolicy(total=0),
        cache=None,
    )
    return CrossrefConfig(resilience=resilience, search_rows=3)


def _work(doi: str, title: str) -> dict[str, object]:
    return {"DOI": doi, "title": [title], "author": [{"given": "Y.", "family": "LeCun"}]}


def test_source_satisfies_port(crossref_config: CrossrefConfig) -> None:
    source = CrossrefEnrichmentSource(
        config=crossref_config,
        client_factory=mock_client_factory(lambda _request: httpx.Response(404)),
    )

    assert isinstance(source, EnrichmentSource)


def test_lookup_by_doi(crossref_config: CrossrefConfig) -> None:
    paths: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        return httpx.Response(
            200,
            json={"status": "ok", "message": _work("10.1038/nature14539", "Deep learning")},
        )

    source = CrossrefEnrichmentSource(
        config=crossref_config, client_factory=mock_client_factory(handler)
    )
    record = make_record("A", title="Deep Learning", DOI="https://doi.org/10.1038/NATURE14539")

    candidate = source(record)

    assert paths == ["/works/10.1038/nature14539"]
    assert candidate["title"] == "Deep learning"
    assert candidate["url"] == "https://doi.org/10.1038/nature14539"


def test_unknown_doi_yields_empty_candidate(crossref_config: CrossrefConfig) -> None:
    source = CrossrefEnrichmentSource(
        config=crossref_config,
        client_factory=mock_client_factory(lambda _request: httpx.Response(404)),
    )

    assert source(make_record("A", DOI="10.1/missing")) == {}


def test_search_by_title_picks_best_match(crossref_config: CrossrefConfig) -> None:
    queries: list[httpx.QueryParams] = []

    def handler(request: httpx.Request) -> httpx.Response:
        queries.append(request.url.params)
        items = [
            _work("10.1/a", "Shallow networks"),
            _work("10.1/b", "Deep Learning."),
            _work("10.1/c", "Deep learning in practice"),
        ]
        return httpx.Response(200, json={"status": "ok", "message": {"items": items}})

    source = CrossrefEnrichmentSource(
        config=crossref_config, client_factory=mock_client_factory(handler)
    )

    candidate = source(make_record("A", title="Deep learning", creators=(author("LeCun"),)))

    assert queries[0]["query.bibliographic"] == "Deep learning LeCun"
    assert queries[0]["rows"] == "3"
    assert candidate["DOI"] == "10.1/b"


def test_search_without_close_title_yields_nothing(crossref_config: CrossrefConfig) -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        items = [_work("10.1/a", "Something else entirely")]
        return httpx.Response(200, json={"status": "ok", "message": {"items": items}})

    source = CrossrefEnrichmentSource(
        config=crossref_config, client_factory=mock_client_factory(handler)
    )

    assert source(make_record("A", title="Deep learning")) == {}


def test_record_without_doi_or_title_is_skipped(crossref_config: CrossrefConfig) -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    source = CrossrefEnrichmentSource(
        config=crossref_config, client_factory=mock_client_factory(handler)
    )

    assert source(make_record("A")) == {}


def test_server_error_raises_and_is_normalized_by_fetch_candidate(
    crossref_config: CrossrefConfig,
) -> None:
    source = CrossrefEnrichmentSource(
        config=crossref_config,
        client_factory=mock_client_factory(lambda _request: httpx.Response(500)),
    )
    record = make_record("A", DOI="10.1/x")

    with pytest.raises(CrossrefAPIError):
        source(record)
    assert fetch_candidate(source, record).is_empty


def test_candidate_flows_through_reconciliation(crossref_config: CrossrefConfig) -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        work = _work("10.1/x", "Deep learning") | {"volume": "521", "container-title": []}
        return httpx.Response(200, json={"status": "ok", "message": work})

    source = CrossrefEnrichmentSource(
        config=crossref_config, client_factory=mock_client_factory(handler)
    )
    record = make_record(
        "A", title="Deep learning", DOI="10.1/x", creators=(author("LeCun", "Y."),)
    )

    accepted = reconcile_enrichment(record, fetch_candidate(source, record))

    assert accepted == {"volume": "521", "url": "https://doi.org/10.1/x"}


def test_best_title_match_prefers_first_of_equal_scores() -> None:
    works = [
        CrossrefWork.model_validate(_work("10.1/a", "Deep learning")),
        CrossrefWork.model_validate(_work("10.1/b", "Deep Learning")),
    ]

    assert best_title_match("deep learning", works) is works[0]
    assert best_title_match("deep learning", []) is None


def test_unknown_doi_falls_back_to_title_search(crossref_config: CrossrefConfig) -> None:
    paths: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        if request.url.path != "/works":
            return httpx.Response(404)
        items = [_work("10.1038/nature14539", "Deep learning")]
        return httpx.Response(200, json={"status": "ok", "message": {"items": items}})

    source = CrossrefEnrichmentSource(
        config=crossref_config, client_factory=mock_client_factory(handler)
    )

    candidate = source(make_record("A", title="Deep Learning", DOI="10.1/typo"))

    assert paths == ["/works/10.1/typo", "/works"]
    assert candidate["DOI"] == "10.1038/nature14539"


def test_title_search_widens_until_a_match(crossref_config: CrossrefConfig) -> None:
    queries: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        query = request.url.params["query.bibliographic"]
        queries.append(query)
        items = [_work("10.1/b", "Deep learning")] if query == "Deep learning" else []
        return httpx.Response(200, json={"status": "ok", "message": {"items": items}})

    source = CrossrefEnrichmentSource(
        config=crossref_config, client_factory=mock_client_factory(handler)
    )
    record = make_record(
        "A", title="Deep learning", date="May 2015", creators=(author("LeCun", "Yann"),)
    )

    candidate = source(record)

    assert queries == ["Deep learning LeCun 2015", "Deep learning 2015", "Deep learning"]
    assert candidate["DOI"] == "10.1/b"


def test_short_title_is_not_searched(crossref_config: CrossrefConfig) -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    source = CrossrefEnrichmentSource(
        config=crossref_config, client_factory=mock_client_factory(handler)
    )

    assert source(make_record("A", title="Notes")) == {}
