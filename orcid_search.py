"""
ORCID search: query building and result pagination.

Key Classes:
    SearchParams: query string plus start offset and page size
    SearchQuery: fluent builder for Solr-style ORCID queries
    SearchIterator: lazy cursor over every result of a search

Usage:
    from orcid_search import SearchQuery
    query = SearchQuery().family_name("Carberry").and_().given_names("Josiah")
    iterator = client.search_iter_with_query(query)
    for record in iterator:
        print(record.orcid_identifier.path)
    if iterator.error:
        raise iterator.error
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional

from orcid_cancel import CancelToken
from orcid_config import APIConfig
from orcid_exceptions import CancelledError, ORCIDAPIError
from orcid_models import SearchRecord, SearchResult

logger = logging.getLogger(__name__)


@dataclass
class SearchParams:
    """Parameters of one search request (q, start, rows)."""

    query: str = ""
    start: int = 0
    rows: int = APIConfig.DEFAULT_SEARCH_ROWS


def _quote(value: str) -> str:
    if " " in value:
        return f'"{value}"'
    return value


class SearchQuery:
    """Accumulates query fragments; every method returns the builder."""

    def __init__(self):
        self.params = SearchParams()
        self.query_parts: List[str] = []

    def _add(self, fragment: str) -> "SearchQuery":
        self.query_parts.append(fragment)
        return self

    def orcid(self, orcid_id: str) -> "SearchQuery":
        return self._add(f"orcid:{orcid_id}")

    def email(self, email: str) -> "SearchQuery":
        return self._add(f"email:{email}")

    def family_name(self, name: str) -> "SearchQuery":
        return self._add(f"family-name:{_quote(name)}")

    def given_names(self, names: str) -> "SearchQuery":
        return self._add(f"given-names:{_quote(names)}")

    def credit_name(self, name: str) -> "SearchQuery":
        return self._add(f"credit-name:{_quote(name)}")

    def other_names(self, names: str) -> "SearchQuery":
        return self._add(f"other-names:{_quote(names)}")

    def keyword(self, keyword: str) -> "SearchQuery":
        return self._add(f"keyword:{_quote(keyword)}")

    def external_identifier(self, identifier: str) -> "SearchQuery":
        return self._add(f"external-identifier-type-and-value:{identifier}")

    def doi(self, doi: str) -> "SearchQuery":
        return self._add(f"doi-self:{doi}")

    def personal_details(self, details: str) -> "SearchQuery":
        return self._add(f"personal-details:{_quote(details)}")

    def biography(self, bio: str) -> "SearchQuery":
        return self._add(f"biography:{_quote(bio)}")

    def work_title(self, title: str) -> "SearchQuery":
        return self._add(f"work-titles:{_quote(title)}")

    def funding_title(self, title: str) -> "SearchQuery":
        return self._add(f"funding-titles:{_quote(title)}")

    def affiliation_organization(self, org: str) -> "SearchQuery":
        return self._add(f"affiliation-org-name:{_quote(org)}")

    def ringgold(self, org_id: str) -> "SearchQuery":
        return self._add(f"ringgold-org-id:{org_id}")

    def grid(self, org_id: str) -> "SearchQuery":
        return self._add(f"grid-org-id:{org_id}")

    def ror(self, org_id: str) -> "SearchQuery":
        return self._add(f"ror-org-id:{org_id}")

    def fundref(self, org_id: str) -> "SearchQuery":
        return self._add(f"fundref-org-id:{org_id}")

    def raw_query(self, query: str) -> "SearchQuery":
        return self._add(query)

    def and_(self) -> "SearchQuery":
        return self._add("AND")

    def or_(self) -> "SearchQuery":
        return self._add("OR")

    def not_(self) -> "SearchQuery":
        return self._add("NOT")

    def with_start(self, start: int) -> "SearchQuery":
        self.params.start = start
        return self

    def with_rows(self, rows: int) -> "SearchQuery":
        self.params.rows = rows
        return self

    def build(self) -> SearchParams:
        """Return a fresh SearchParams; the builder stays reusable."""
        return SearchParams(
            query=" ".join(self.query_parts),
            start=self.params.start,
            rows=self.params.rows,
        )


class IteratorState(Enum):
    FRESH = "fresh"
    PAGING = "paging"
    EXHAUSTED = "exhausted"
    FAILED = "failed"


class SearchIterator:
    """
    Lazy cursor over a search that may span many result pages.

    Pages are fetched on demand through the client's search call. Only the
    current page is kept. Failures are sticky: once a fetch fails (or the
    cancel token fires), advance() keeps returning False without further
    requests and ``error`` holds the cause.

    Not safe for concurrent use; one caller owns an iterator.
    """

    def __init__(self, client, params: SearchParams, cancel: Optional[CancelToken] = None):
        """
        Initialize the iterator.

        Args:
            client: Object exposing search(params, cancel=...) -> SearchResult
            params: Initial query, start offset and page size
            cancel: Token checked before every advance and passed to fetches
        """
        self.client = client
        self.params = SearchParams(params.query, max(0, params.start), params.rows)
        if self.params.rows <= 0:
            # the request falls back to the service default as well
            self.params.rows = APIConfig.DEFAULT_SEARCH_ROWS
        self.cancel = cancel
        self.state = IteratorState.FRESH
        self.page: Optional[SearchResult] = None
        self.index = -1
        self.pages_fetched = 0
        self._total_results = 0
        self._error: Optional[ORCIDAPIError] = None

    @property
    def error(self) -> Optional[ORCIDAPIError]:
        return self._error

    @property
    def total_results(self) -> int:
        """Total reported by the service on the last successful fetch (0 before)."""
        return self._total_results

    @property
    def value(self) -> Optional[SearchRecord]:
        """Record at the cursor, or None when the cursor is out of bounds."""
        if self.page is None or not 0 <= self.index < len(self.page.result):
            return None
        return self.page.result[self.index]

    def _fail(self, error: ORCIDAPIError) -> bool:
        self._error = error
        self.state = IteratorState.FAILED
        return False

    def _page_consumed(self) -> bool:
        return self.page is None or self.index >= len(self.page.result) - 1

    def advance(self) -> bool:
        """
        Move to the next record, fetching a page if needed.

        Returns:
            True if ``value`` now holds a record, False when iteration is
            over (check ``error`` to tell failure from exhaustion)
        """
        if self.state in (IteratorState.FAILED, IteratorState.EXHAUSTED):
            return False

        if self.cancel is not None and self.cancel.cancelled:
            return self._fail(CancelledError("search iteration aborted: cancelled"))

        if self._page_consumed():
            if self.page is not None:
                if self.params.start + self.params.rows >= self._total_results:
                    self.state = IteratorState.EXHAUSTED
                    return False
                # step by the requested page size, not by what came back
                self.params.start += self.params.rows

            try:
                page = self.client.search(self.params, cancel=self.cancel)
            except ORCIDAPIError as e:
                logger.error(f"Search page at offset {self.params.start} failed: {e}")
                return self._fail(e)

            self.pages_fetched += 1
            self.page = page
            self.index = -1
            self._total_results = page.num_found
            self.state = IteratorState.PAGING

            if not page.result:
                self.state = IteratorState.EXHAUSTED
                return False

        self.index += 1
        return self.index < len(self.page.result)

    def __iter__(self) -> Iterator[SearchRecord]:
        while self.advance():
            yield self.value
