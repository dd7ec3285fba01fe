"""Run filters against a CloudSearch search endpoint.

Builds the request with ``ComparisonTranslator``, sends it with requests
and passes the decoded response through a chain of result converters.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

import requests

from edge_search.exceptions import (
    EdgeSearchError,
    FieldRegistryError,
    FilterError,
    SearchBackendError,
    SearcherConfigError,
    TranslationError,
)
from edge_search.search.translator import DEFAULT_PAGE_SIZE, ComparisonTranslator

if TYPE_CHECKING:
    from edge_search.config import Config
    from edge_search.search.filter import Filter

logger = logging.getLogger(__name__)

_USER_AGENT = "edge-search/0.3"


class ResultConverter(Protocol):
    """Post-processes decoded search results."""

    def convert(self, results: Any) -> Any: ...


class HitsConverter:
    """Flatten CloudSearch hits into one dict per result.

    CloudSearch returns every requested field as a list of values; single
    values are unwrapped.
    """

    def convert(self, results: Any) -> list[dict[str, Any]]:
        records = []
        for hit in results:
            record: dict[str, Any] = {"id": hit.get("id")}
            for name, values in hit.get("data", {}).items():
                if isinstance(values, list) and len(values) == 1:
                    values = values[0]
                record[name] = values
            records.append(record)
        return records


@dataclass
class SearcherOptions:
    """Connection options for a CloudSearch domain.

    Attributes:
        search_endpoint: Search URL, e.g.
            ``https://search-domain.us-east-1.cloudsearch.amazonaws.com/2011-02-01/search``.
        return_id_results: Reduce results to a list of document ids.
        timeout: Request timeout in seconds.
        verify_ssl: Verify the endpoint's TLS certificate.
    """

    search_endpoint: str | None = None
    return_id_results: bool = False
    timeout: float = 30.0
    verify_ssl: bool = True

    @classmethod
    def from_config(cls, config: Config) -> SearcherOptions:
        return cls(
            search_endpoint=config.search_endpoint,
            return_id_results=config.return_id_results,
            timeout=config.timeout,
            verify_ssl=config.verify_ssl,
        )


class CloudSearchSearcher:
    """Search a CloudSearch domain with a filter.

    Args:
        search_filter: The filter to search with.
        options: Endpoint options.
        converters: Result converters, applied in order.
        translator: Query builder, defaults to one over the filter's registry.
        session: HTTP session to send requests with.
    """

    def __init__(
        self,
        search_filter: Filter,
        options: SearcherOptions | None = None,
        converters: Iterable[ResultConverter] = (),
        translator: ComparisonTranslator | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.filter = search_filter
        self._options = options
        self.converters: list[ResultConverter] = list(converters)
        self.translator = translator or ComparisonTranslator(search_filter.registry)
        self._session = session
        self.count: int | None = None

    @property
    def options(self) -> SearcherOptions:
        if self._options is None:
            raise SearcherConfigError("No options were specified")
        return self._options

    @options.setter
    def options(self, options: SearcherOptions) -> None:
        self._options = options

    def add_converter(self, converter: ResultConverter) -> CloudSearchSearcher:
        self.converters.append(converter)
        return self

    def create_search_query(self, offset: int = 0, page_size: int = DEFAULT_PAGE_SIZE) -> str:
        """The request's query string, unencoded."""
        return self.translator.translate(self.filter, offset, page_size).to_query_string()

    def get_results(self, offset: int = 0, page_size: int = DEFAULT_PAGE_SIZE) -> Iterator[Any]:
        """Run the search and return an iterator over the results.

        Every call sends a new request and updates ``count``.

        Raises:
            SearcherConfigError: If no search endpoint is configured.
            SearchBackendError: If the request fails or the response is invalid.
        """
        endpoint = self.options.search_endpoint
        if not endpoint:
            raise SearcherConfigError("No search endpoint configured")

        query = self.translator.translate(self.filter, offset, page_size)
        logger.debug("GET %s ? %s", endpoint, query)

        results = self._fetch(endpoint, query.params())

        try:
            self.count = int(results["hits"]["found"])
        except (KeyError, TypeError, ValueError) as e:
            raise SearchBackendError(f"Unexpected response from CloudSearch: missing {e}") from e

        if self.count == 0:
            return iter(())

        records: Any = results["hits"].get("hit", [])
        if self.options.return_id_results:
            records = extract_ids(records)

        for converter in self.converters:
            records = converter.convert(records)

        return iter(records)

    def _fetch(self, endpoint: str, params: dict[str, str]) -> dict[str, Any]:
        session = self._session
        if session is None:
            session = self._session = requests.Session()
            session.headers.update({"User-Agent": _USER_AGENT})

        try:
            resp = session.get(
                endpoint,
                params=params,
                timeout=self.options.timeout,
                verify=self.options.verify_ssl,
            )
        except requests.RequestException as e:
            raise SearchBackendError(f"Request to CloudSearch failed: {e}") from e

        if not resp.ok:
            logger.warning("CloudSearch returned HTTP %d", resp.status_code)
            raise SearchBackendError(
                "Invalid response received from CloudSearch.",
                status=resp.status_code,
                body=resp.text,
            )

        try:
            return resp.json()
        except ValueError as e:
            raise SearchBackendError(
                "CloudSearch returned invalid JSON.", status=resp.status_code, body=resp.text
            ) from e


def extract_ids(hits: list[dict[str, Any]]) -> list[Any]:
    """Reduce CloudSearch hits to their document ids."""
    return [hit["id"] for hit in hits]


def problem_details(exc: Exception) -> dict[str, Any]:
    """Describe an error as an RFC 7807 style problem payload."""
    if isinstance(exc, SearchBackendError):
        status, title = 502, "Search backend error"
    elif isinstance(exc, SearcherConfigError):
        status, title = 500, "Search not configured"
    elif isinstance(exc, (TranslationError, FilterError, FieldRegistryError)):
        status, title = 400, "Invalid search"
    elif isinstance(exc, EdgeSearchError):
        status, title = 500, "Search error"
    else:
        status, title = 500, "Internal error"

    problem: dict[str, Any] = {
        "type": "about:blank",
        "title": title,
        "status": status,
        "detail": str(exc),
    }
    if isinstance(exc, SearchBackendError) and exc.status is not None:
        problem["backend_status"] = exc.status
    return problem
