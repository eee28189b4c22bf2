#!/usr/bin/env python3
"""
ORCID API Client

This module provides authenticated, rate-limited and retried access to the
ORCID v3.0 REST API.

Key Classes:
    ORCIDClient: request executor plus one fetcher per record section
    ORCIDResponse: status, headers and raw body of a successful call
    PathResource: result of get_by_path(), tagged with its ResourceKind

Usage:
    from orcid_client import ORCIDClient
    client = ORCIDClient(bearer_token="...")
    record = client.get_record("0000-0002-1825-0097")
    for hit in client.search_iter(SearchParams("family-name:Carberry")):
        print(hit.orcid_identifier.path)
"""

import logging
import sys
from enum import Enum
from typing import Any, Dict, NamedTuple, Optional
from urllib.parse import quote, urlencode

import requests

from orcid_cancel import CancelToken
from orcid_config import APIConfig, ClientConfig, is_retryable_status
from orcid_exceptions import (
    CancelledError,
    MissingCredentialError,
    ORCIDNetworkError,
    RemoteRejectedError,
    RetriesExhaustedError,
    TransientError,
    UnsupportedPathError,
)
from orcid_models import (
    ActivitiesSummary,
    Distinctions,
    Educations,
    Employments,
    ExpandedSearchResult,
    Fundings,
    InvitedPositions,
    Memberships,
    PeerReviews,
    Person,
    Qualifications,
    Record,
    ResearchResources,
    SearchResult,
    Services,
    Work,
    Works,
    decode,
)
from orcid_rate_limiter import RateLimiter
from orcid_search import SearchIterator, SearchParams, SearchQuery

# Configure logging
logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

# Add stderr handler if not already present
if not logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    formatter = logging.Formatter(
        "%(levelname)s: %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


class ORCIDResponse(NamedTuple):
    status_code: int
    headers: Dict[str, str]
    body: bytes


class ResourceKind(Enum):
    RECORD = "record"
    PERSON = "person"
    WORKS = "works"
    WORK = "work"
    EDUCATIONS = "educations"
    EMPLOYMENTS = "employments"
    FUNDINGS = "fundings"
    PEER_REVIEWS = "peer-reviews"
    DISTINCTIONS = "distinctions"
    INVITED_POSITIONS = "invited-positions"
    MEMBERSHIPS = "memberships"
    QUALIFICATIONS = "qualifications"
    SERVICES = "services"
    RESEARCH_RESOURCES = "research-resources"
    ACTIVITIES = "activities"
    BIOGRAPHY = "biography"
    OTHER_NAMES = "other-names"
    RESEARCHER_URLS = "researcher-urls"
    EMAIL = "email"
    ADDRESS = "address"
    KEYWORDS = "keywords"
    EXTERNAL_IDENTIFIERS = "external-identifiers"


class PathResource(NamedTuple):
    """Tagged result of get_by_path(); ``kind`` tells the type of ``value``."""

    kind: ResourceKind
    value: Any


# Resource type -> (URL section, record type)
SECTION_FETCHERS = {
    ResourceKind.PERSON: ("person", Person),
    ResourceKind.WORKS: ("works", Works),
    ResourceKind.EDUCATIONS: ("educations", Educations),
    ResourceKind.EMPLOYMENTS: ("employments", Employments),
    ResourceKind.FUNDINGS: ("fundings", Fundings),
    ResourceKind.PEER_REVIEWS: ("peer-reviews", PeerReviews),
    ResourceKind.DISTINCTIONS: ("distinctions", Distinctions),
    ResourceKind.INVITED_POSITIONS: ("invited-positions", InvitedPositions),
    ResourceKind.MEMBERSHIPS: ("memberships", Memberships),
    ResourceKind.QUALIFICATIONS: ("qualifications", Qualifications),
    ResourceKind.SERVICES: ("services", Services),
    ResourceKind.RESEARCH_RESOURCES: ("research-resources", ResearchResources),
}

# Person sub-sections served from the /person endpoint -> Person attribute
PERSON_SECTIONS = {
    ResourceKind.BIOGRAPHY: "biography",
    ResourceKind.OTHER_NAMES: "other_names",
    ResourceKind.RESEARCHER_URLS: "researcher_urls",
    ResourceKind.EMAIL: "emails",
    ResourceKind.ADDRESS: "addresses",
    ResourceKind.KEYWORDS: "keywords",
    ResourceKind.EXTERNAL_IDENTIFIERS: "external_identifiers",
}


class ORCIDClient:
    """Client for the ORCID API."""

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        session: Optional[requests.Session] = None,
        rate_limiter: Optional[RateLimiter] = None,
        **overrides,
    ):
        """
        Initialize the ORCID client.

        Args:
            config: Base configuration (defaults to ClientConfig())
            session: requests session to send requests with
            rate_limiter: Limiter to share with other clients; by default
                each client builds its own from ``config.rate_limit``
            **overrides: ClientConfig fields to change, e.g. bearer_token="..."
        """
        config = config or ClientConfig()
        if overrides:
            config = config.replace(**overrides)
        self.config = config

        # Dependent state is derived once, after every option is applied
        self.session = session or requests.Session()
        self.rate_limiter = rate_limiter or RateLimiter(self.config.rate_limit)

    # ------------------------------------------------------------------
    # Request executor
    # ------------------------------------------------------------------

    def _headers(self) -> Dict[str, str]:
        return {
            "User-Agent": self.config.user_agent,
            "Accept": self.config.content_type.value,
            "Authorization": f"Bearer {self.config.bearer_token}",
        }

    def _send(self, method: str, url: str, body: Optional[bytes], cancel: CancelToken) -> requests.Response:
        timeout = self.config.timeout
        remaining = cancel.remaining()
        if remaining is not None:
            remaining = max(remaining, 0.001)
            timeout = min(timeout, remaining) if timeout else remaining

        logger.debug(f"{method} {url}")
        try:
            response = self.session.request(
                method, url, data=body, headers=self._headers(), timeout=timeout
            )
        except (
            requests.exceptions.ConnectionError,
            requests.exceptions.Timeout,
            requests.exceptions.ChunkedEncodingError,
            requests.exceptions.ContentDecodingError,
        ) as e:
            cancel.raise_if_cancelled("request")
            raise TransientError(f"transport error: {e}") from e
        except requests.exceptions.RequestException as e:
            raise ORCIDNetworkError(f"request failed: {e}") from e

        # response arriving after cancellation is discarded
        cancel.raise_if_cancelled("request")
        return response

    def execute(
        self,
        method: str,
        url: str,
        body: Optional[bytes] = None,
        cancel: Optional[CancelToken] = None,
    ) -> ORCIDResponse:
        """
        Perform one logical API call with pacing and retries.

        Every physical attempt waits for a rate limit permit. Connection
        errors, timeouts, 408, 429 and 5xx are retried up to
        ``config.max_retries`` times, waiting n**2 seconds before the
        n-th retry.

        Args:
            method: HTTP method
            url: Fully formed URL
            body: Optional request body
            cancel: Token polled at every wait and around the transport call

        Returns:
            ORCIDResponse for an HTTP 200 answer

        Raises:
            MissingCredentialError: If no bearer token is configured
            CancelledError: If ``cancel`` fires while the call is suspended
            RemoteRejectedError: For any other non-retryable status
            RetriesExhaustedError: If every attempt failed transiently
            ORCIDNetworkError: If the request cannot be sent at all
        """
        if not self.config.bearer_token:
            raise MissingCredentialError(
                "bearer token is required for ORCID API requests; "
                "pass bearer_token= when creating the client"
            )
        cancel = cancel or CancelToken()

        last_error: Optional[TransientError] = None
        attempts = self.config.max_retries + 1
        for attempt in range(1, attempts + 1):
            if attempt > 1:
                delay = (attempt - 1) ** 2
                logger.warning(
                    f"{last_error}. Retrying in {delay}s "
                    f"(attempt {attempt}/{attempts})"
                )
                if cancel.wait(delay):
                    raise CancelledError("retry backoff aborted: cancelled")

            self.rate_limiter.acquire(cancel)

            try:
                response = self._send(method, url, body, cancel)
            except TransientError as e:
                last_error = e
                continue

            if response.status_code == 200:
                return ORCIDResponse(response.status_code, dict(response.headers), response.content)

            if is_retryable_status(response.status_code):
                last_error = TransientError(
                    f"HTTP {response.status_code}: {response.reason}", response.status_code
                )
                response.close()
                continue

            raise RemoteRejectedError(response.status_code, response.content, response.reason or "")

        raise RetriesExhaustedError(last_error, attempts) from last_error

    def call(
        self,
        method: str,
        url: str,
        target,
        body: Optional[bytes] = None,
        cancel: Optional[CancelToken] = None,
    ):
        """Execute a request and decode the body into ``target``."""
        response = self.execute(method, url, body=body, cancel=cancel)
        return decode(response.body, target, self.config.content_type)

    # ------------------------------------------------------------------
    # Resource fetchers
    # ------------------------------------------------------------------

    def _url(self, orcid_id: str, section: str) -> str:
        return f"{self.config.base_url}/{orcid_id}/{section}"

    def _get(self, orcid_id: str, section: str, target, cancel: Optional[CancelToken]):
        return self.call("GET", self._url(orcid_id, section), target, cancel=cancel)

    def get_record(self, orcid_id: str, cancel: Optional[CancelToken] = None) -> Record:
        return self._get(orcid_id, "record", Record, cancel)

    def get_record_raw(self, orcid_id: str, cancel: Optional[CancelToken] = None) -> bytes:
        """Fetch the full record without decoding it."""
        return self.execute("GET", self._url(orcid_id, "record"), cancel=cancel).body

    def get_person(self, orcid_id: str, cancel: Optional[CancelToken] = None) -> Person:
        return self._get(orcid_id, "person", Person, cancel)

    def get_works(self, orcid_id: str, cancel: Optional[CancelToken] = None) -> Works:
        return self._get(orcid_id, "works", Works, cancel)

    def get_work(self, orcid_id: str, put_code: str, cancel: Optional[CancelToken] = None) -> Work:
        return self._get(orcid_id, f"work/{put_code}", Work, cancel)

    def get_educations(self, orcid_id: str, cancel: Optional[CancelToken] = None) -> Educations:
        return self._get(orcid_id, "educations", Educations, cancel)

    def get_employments(self, orcid_id: str, cancel: Optional[CancelToken] = None) -> Employments:
        return self._get(orcid_id, "employments", Employments, cancel)

    def get_fundings(self, orcid_id: str, cancel: Optional[CancelToken] = None) -> Fundings:
        return self._get(orcid_id, "fundings", Fundings, cancel)

    def get_peer_reviews(self, orcid_id: str, cancel: Optional[CancelToken] = None) -> PeerReviews:
        return self._get(orcid_id, "peer-reviews", PeerReviews, cancel)

    def get_distinctions(self, orcid_id: str, cancel: Optional[CancelToken] = None) -> Distinctions:
        return self._get(orcid_id, "distinctions", Distinctions, cancel)

    def get_invited_positions(self, orcid_id: str, cancel: Optional[CancelToken] = None) -> InvitedPositions:
        return self._get(orcid_id, "invited-positions", InvitedPositions, cancel)

    def get_memberships(self, orcid_id: str, cancel: Optional[CancelToken] = None) -> Memberships:
        return self._get(orcid_id, "memberships", Memberships, cancel)

    def get_qualifications(self, orcid_id: str, cancel: Optional[CancelToken] = None) -> Qualifications:
        return self._get(orcid_id, "qualifications", Qualifications, cancel)

    def get_services(self, orcid_id: str, cancel: Optional[CancelToken] = None) -> Services:
        return self._get(orcid_id, "services", Services, cancel)

    def get_research_resources(self, orcid_id: str, cancel: Optional[CancelToken] = None) -> ResearchResources:
        return self._get(orcid_id, "research-resources", ResearchResources, cancel)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def build_search_url(self, params: SearchParams) -> str:
        query = {"q": params.query}
        if params.start > 0:
            query["start"] = params.start
        query["rows"] = params.rows if params.rows > 0 else APIConfig.DEFAULT_SEARCH_ROWS
        return f"{self.config.base_url}/search?{urlencode(query)}"

    def search(self, params: SearchParams, cancel: Optional[CancelToken] = None) -> SearchResult:
        """
        Fetch one page of search results.

        Args:
            params: Query string, start offset and page size
            cancel: Optional cancel token

        Returns:
            SearchResult with the page and the total hit count
        """
        logger.debug(f"Searching '{params.query}' (start={params.start}, rows={params.rows})")
        return self.call("GET", self.build_search_url(params), SearchResult, cancel=cancel)

    def search_with_query(self, query: SearchQuery, cancel: Optional[CancelToken] = None) -> SearchResult:
        return self.search(query.build(), cancel=cancel)

    def search_iter(self, params: SearchParams, cancel: Optional[CancelToken] = None) -> SearchIterator:
        """Return a lazy iterator over every result of the search."""
        return SearchIterator(self, params, cancel=cancel)

    def search_iter_with_query(self, query: SearchQuery, cancel: Optional[CancelToken] = None) -> SearchIterator:
        return self.search_iter(query.build(), cancel=cancel)

    def expanded_search(self, query: str, cancel: Optional[CancelToken] = None) -> ExpandedSearchResult:
        """Search returning names, emails and institutions alongside each iD."""
        url = f"{self.config.base_url}/expanded-search/?q={quote(query, safe='')}"
        return self.call("GET", url, ExpandedSearchResult, cancel=cancel)

    # ------------------------------------------------------------------
    # Dynamic path router
    # ------------------------------------------------------------------

    def get_by_path(self, path: str, cancel: Optional[CancelToken] = None) -> PathResource:
        """
        Fetch the resource a path value points to.

        Path values appear throughout API responses, e.g.
        "/0000-0003-1401-2056/works" or "/0000-0003-1401-2056/work/92636200".
        A bare iD or ".../record" fetches the full record.

        Args:
            path: Resource path, leading "/" optional
            cancel: Optional cancel token

        Returns:
            PathResource tagged with the kind of record it holds

        Raises:
            UnsupportedPathError: If the path is empty or names an unknown
                resource type; no request is sent in that case
        """
        parts = path.lstrip("/").split("/", 1)
        orcid_id = parts[0]
        if not orcid_id:
            raise UnsupportedPathError(f"invalid path: {path}")

        if len(parts) == 1 or parts[1] in ("", "record"):
            return PathResource(ResourceKind.RECORD, self.get_record(orcid_id, cancel))

        resource_parts = parts[1].split("/", 1)
        try:
            kind = ResourceKind(resource_parts[0])
        except ValueError:
            raise UnsupportedPathError(f"unsupported resource type in path: {path}") from None

        if kind == ResourceKind.WORK:
            if len(resource_parts) < 2 or not resource_parts[1]:
                raise UnsupportedPathError(f"work path requires put-code: {path}")
            return PathResource(kind, self.get_work(orcid_id, resource_parts[1], cancel))

        if kind == ResourceKind.ACTIVITIES:
            record = self.get_record(orcid_id, cancel)
            return PathResource(kind, record.activities_summary or ActivitiesSummary())

        if kind in PERSON_SECTIONS:
            # trailing put-codes are ignored; the whole section is returned
            person = self.get_person(orcid_id, cancel)
            return PathResource(kind, getattr(person, PERSON_SECTIONS[kind]))

        if kind in SECTION_FETCHERS:
            section, target = SECTION_FETCHERS[kind]
            return PathResource(kind, self._get(orcid_id, section, target, cancel))

        raise UnsupportedPathError(f"unsupported path: {path}")
