"""Unit tests for CloudSearchSearcher."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest
import requests

from edge_search.config import Config
from edge_search.exceptions import (
    InvalidSortFieldError,
    SearchBackendError,
    SearcherConfigError,
    UnmappedFieldError,
)
from edge_search.search.fields import FieldRegistry
from edge_search.search.filter import Filter
from edge_search.search.searcher import (
    CloudSearchSearcher,
    HitsConverter,
    SearcherOptions,
    extract_ids,
    problem_details,
)

ENDPOINT = "https://search.example.com/2011-02-01/search"

RESPONSE: dict[str, Any] = {
    "rank": "-text_relevance",
    "match-expr": "(label 'x')",
    "hits": {
        "found": 12,
        "start": 0,
        "hit": [
            {"id": "doc-1", "data": {"name": ["Jane"], "tags": ["a", "b"]}},
            {"id": "doc-2", "data": {"name": ["John"]}},
        ],
    },
}


def _response(status: int = 200, payload: Any = RESPONSE, text: str = "") -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.ok = 200 <= status < 300
    resp.text = text
    resp.json.return_value = payload
    return resp


def _searcher(
    registry: FieldRegistry,
    query: str = "status:active",
    session: MagicMock | None = None,
    **options: Any,
) -> CloudSearchSearcher:
    if session is None:
        session = MagicMock()
        session.get.return_value = _response()
    return CloudSearchSearcher(
        Filter(registry, query),
        SearcherOptions(search_endpoint=ENDPOINT, **options),
        session=session,
    )


class TestCreateSearchQuery:
    def test_query_string(self, registry: FieldRegistry) -> None:
        searcher = _searcher(registry, "age>=18 sort:age hello")
        assert searcher.create_search_query(10, 5) == (
            "bq=(and age:18..)&q=hello&rank=-age&size=5&start=10"
        )

    def test_defaults(self, registry: FieldRegistry) -> None:
        searcher = _searcher(registry, "")
        assert searcher.create_search_query() == "size=10&start=0"


class TestGetResults:
    def test_sends_request(self, registry: FieldRegistry) -> None:
        session = MagicMock()
        session.get.return_value = _response()
        searcher = _searcher(registry, "status:active sort:name", session, timeout=5.0)

        list(searcher.get_results(20, 10))

        session.get.assert_called_once_with(
            ENDPOINT,
            params={
                "bq": "(and (field status 'active'))",
                "rank": "-name",
                "size": "10",
                "start": "20",
            },
            timeout=5.0,
            verify=True,
        )

    def test_returns_hits_and_count(self, registry: FieldRegistry) -> None:
        searcher = _searcher(registry)
        assert searcher.count is None

        results = searcher.get_results()

        assert searcher.count == 12
        assert [hit["id"] for hit in results] == ["doc-1", "doc-2"]
        # a consumed result iterator is not restarted
        assert list(results) == []

    def test_each_call_repeats_request(self, registry: FieldRegistry) -> None:
        session = MagicMock()
        session.get.return_value = _response()
        searcher = _searcher(registry, session=session)

        list(searcher.get_results())
        list(searcher.get_results())

        assert session.get.call_count == 2

    def test_id_results(self, registry: FieldRegistry) -> None:
        searcher = _searcher(registry, return_id_results=True)
        assert list(searcher.get_results()) == ["doc-1", "doc-2"]

    def test_converters_run_in_order(self, registry: FieldRegistry) -> None:
        first = MagicMock()
        first.convert.side_effect = lambda records: [r["id"] for r in records]
        second = MagicMock()
        second.convert.side_effect = lambda ids: [i.upper() for i in ids]
        searcher = _searcher(registry)
        searcher.add_converter(first).add_converter(second)

        assert list(searcher.get_results()) == ["DOC-1", "DOC-2"]

    def test_hits_converter(self, registry: FieldRegistry) -> None:
        searcher = _searcher(registry)
        searcher.add_converter(HitsConverter())
        assert list(searcher.get_results()) == [
            {"id": "doc-1", "name": "Jane", "tags": ["a", "b"]},
            {"id": "doc-2", "name": "John"},
        ]

    def test_no_matches_skip_converters(self, registry: FieldRegistry) -> None:
        session = MagicMock()
        session.get.return_value = _response(payload={"hits": {"found": 0, "hit": []}})
        converter = MagicMock()
        searcher = _searcher(registry, session=session)
        searcher.add_converter(converter)

        assert list(searcher.get_results()) == []
        assert searcher.count == 0
        converter.convert.assert_not_called()

    def test_http_error(self, registry: FieldRegistry) -> None:
        session = MagicMock()
        session.get.return_value = _response(status=400, text='{"error": "bad bq"}')
        searcher = _searcher(registry, session=session)

        with pytest.raises(SearchBackendError) as exc_info:
            searcher.get_results()

        assert exc_info.value.status == 400
        assert exc_info.value.body == '{"error": "bad bq"}'
        assert "bad bq" in str(exc_info.value)

    def test_network_error(self, registry: FieldRegistry) -> None:
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError("refused")
        searcher = _searcher(registry, session=session)

        with pytest.raises(SearchBackendError):
            searcher.get_results()

    def test_invalid_json(self, registry: FieldRegistry) -> None:
        session = MagicMock()
        resp = _response(text="<html>")
        resp.json.side_effect = ValueError("no json")
        session.get.return_value = resp

        with pytest.raises(SearchBackendError):
            _searcher(registry, session=session).get_results()

    def test_unexpected_payload(self, registry: FieldRegistry) -> None:
        session = MagicMock()
        session.get.return_value = _response(payload={"error": "x"})

        with pytest.raises(SearchBackendError):
            _searcher(registry, session=session).get_results()

    def test_translation_errors_propagate(self, registry: FieldRegistry) -> None:
        session = MagicMock()
        searcher = _searcher(registry, "created:yesterday", session=session)
        searcher.translator.registry = FieldRegistry()

        with pytest.raises(UnmappedFieldError):
            searcher.get_results()
        session.get.assert_not_called()


class TestOptions:
    def test_missing_options(self, registry: FieldRegistry) -> None:
        searcher = CloudSearchSearcher(Filter(registry))
        with pytest.raises(SearcherConfigError):
            searcher.get_results()

    def test_missing_endpoint(self, registry: FieldRegistry) -> None:
        searcher = CloudSearchSearcher(Filter(registry), SearcherOptions())
        with pytest.raises(SearcherConfigError):
            searcher.get_results()

    def test_from_config(self) -> None:
        config = Config(search_endpoint=ENDPOINT, return_id_results=True, timeout=3.0)
        options = SearcherOptions.from_config(config)
        assert options == SearcherOptions(ENDPOINT, True, 3.0, True)

    def test_set_options(self, registry: FieldRegistry) -> None:
        searcher = CloudSearchSearcher(Filter(registry))
        searcher.options = SearcherOptions(search_endpoint=ENDPOINT)
        assert searcher.options.search_endpoint == ENDPOINT


def test_extract_ids() -> None:
    assert extract_ids(RESPONSE["hits"]["hit"]) == ["doc-1", "doc-2"]


class TestProblemDetails:
    def test_backend_error(self) -> None:
        problem = problem_details(SearchBackendError("failed", status=503, body="down"))
        assert problem["status"] == 502
        assert problem["backend_status"] == 503
        assert "down" in problem["detail"]

    def test_invalid_search(self) -> None:
        problem = problem_details(InvalidSortFieldError("bogus"))
        assert problem == {
            "type": "about:blank",
            "title": "Invalid search",
            "status": 400,
            "detail": "Invalid sort field [bogus] specified",
        }

    def test_unexpected_error(self) -> None:
        assert problem_details(RuntimeError("boom"))["status"] == 500
