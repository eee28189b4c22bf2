"""
Typed records for ORCID API responses and the structured decoder.

Each dataclass field carries the schema key it is read from. The decoder
turns a JSON or XML body into the same nested key tree and then builds
the requested record type from it, so both encodings share one mapping.

Key Functions:
    decode: parse a response body into a record type
    decode_json / decode_xml: format-specific entry points

Usage:
    from orcid_models import Record, decode
    record = decode(body, Record, ContentType.JSON)
"""

import json
import re
from dataclasses import dataclass, field, fields, is_dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from xml.etree import ElementTree as ET

from orcid_config import ContentType
from orcid_exceptions import DecodeError

# Field kind for {"value": "..."} wrappers (plain text nodes in XML)
VALUE = "value"
# Field kind for timestamps
DATE = "date"

# Fractional seconds of an ISO-8601 time, any number of digits
_FRACTION = re.compile(r"(T\d{2}:\d{2}:\d{2})\.(\d+)")


def _field(key: str, kind: Any = str, many: bool = False):
    meta = {"key": key, "kind": kind, "many": many}
    if many:
        return field(default_factory=list, metadata=meta)
    return field(default=None, metadata=meta)


@dataclass
class OrcidIdentifier:
    uri: Optional[str] = _field("uri")
    path: Optional[str] = _field("path")
    host: Optional[str] = _field("host")


@dataclass
class Source:
    source_orcid: Optional[OrcidIdentifier] = _field("source-orcid", OrcidIdentifier)
    source_client_id: Optional[OrcidIdentifier] = _field("source-client-id", OrcidIdentifier)
    source_name: Optional[str] = _field("source-name", VALUE)
    assertion_origin_orcid: Optional[OrcidIdentifier] = _field("assertion-origin-orcid", OrcidIdentifier)
    assertion_origin_client_id: Optional[OrcidIdentifier] = _field("assertion-origin-client-id", OrcidIdentifier)
    assertion_origin_name: Optional[str] = _field("assertion-origin-name", VALUE)


@dataclass
class Preferences:
    locale: Optional[str] = _field("locale")


@dataclass
class History:
    creation_method: Optional[str] = _field("creation-method")
    completion_date: Optional[datetime] = _field("completion-date", DATE)
    submission_date: Optional[datetime] = _field("submission-date", DATE)
    last_modified_date: Optional[datetime] = _field("last-modified-date", DATE)
    claimed: Optional[bool] = _field("claimed", bool)
    source: Optional[Source] = _field("source", Source)
    deactivation_date: Optional[datetime] = _field("deactivation-date", DATE)
    verified_email: Optional[bool] = _field("verified-email", bool)
    verified_primary_email: Optional[bool] = _field("verified-primary-email", bool)


# --- person ---------------------------------------------------------------


@dataclass
class Name:
    created_date: Optional[datetime] = _field("created-date", DATE)
    last_modified_date: Optional[datetime] = _field("last-modified-date", DATE)
    given_names: Optional[str] = _field("given-names", VALUE)
    family_name: Optional[str] = _field("family-name", VALUE)
    credit_name: Optional[str] = _field("credit-name", VALUE)
    source: Optional[Source] = _field("source", Source)
    visibility: Optional[str] = _field("visibility")
    path: Optional[str] = _field("path")


@dataclass
class PersonItem:
    """One entry of a person section: other name, keyword, email, URL, address..."""

    created_date: Optional[datetime] = _field("created-date", DATE)
    last_modified_date: Optional[datetime] = _field("last-modified-date", DATE)
    source: Optional[Source] = _field("source", Source)
    content: Optional[str] = _field("content")
    email: Optional[str] = _field("email")
    primary: Optional[bool] = _field("primary", bool)
    verified: Optional[bool] = _field("verified", bool)
    url_name: Optional[str] = _field("url-name")
    url: Optional[str] = _field("url", VALUE)
    country: Optional[str] = _field("country", VALUE)
    external_id_type: Optional[str] = _field("external-id-type")
    external_id_value: Optional[str] = _field("external-id-value")
    external_id_url: Optional[str] = _field("external-id-url", VALUE)
    external_id_relationship: Optional[str] = _field("external-id-relationship")
    visibility: Optional[str] = _field("visibility")
    path: Optional[str] = _field("path")
    put_code: Optional[int] = _field("put-code", int)
    display_index: Optional[str] = _field("display-index")


@dataclass
class Biography:
    created_date: Optional[datetime] = _field("created-date", DATE)
    last_modified_date: Optional[datetime] = _field("last-modified-date", DATE)
    content: Optional[str] = _field("content")
    visibility: Optional[str] = _field("visibility")
    path: Optional[str] = _field("path")


@dataclass
class OtherNames:
    last_modified_date: Optional[datetime] = _field("last-modified-date", DATE)
    other_name: List[PersonItem] = _field("other-name", PersonItem, many=True)
    path: Optional[str] = _field("path")


@dataclass
class ResearcherURLs:
    last_modified_date: Optional[datetime] = _field("last-modified-date", DATE)
    researcher_url: List[PersonItem] = _field("researcher-url", PersonItem, many=True)
    path: Optional[str] = _field("path")


@dataclass
class Emails:
    last_modified_date: Optional[datetime] = _field("last-modified-date", DATE)
    email: List[PersonItem] = _field("email", PersonItem, many=True)
    path: Optional[str] = _field("path")


@dataclass
class Addresses:
    last_modified_date: Optional[datetime] = _field("last-modified-date", DATE)
    address: List[PersonItem] = _field("address", PersonItem, many=True)
    path: Optional[str] = _field("path")


@dataclass
class Keywords:
    last_modified_date: Optional[datetime] = _field("last-modified-date", DATE)
    keyword: List[PersonItem] = _field("keyword", PersonItem, many=True)
    path: Optional[str] = _field("path")


@dataclass
class ExternalIdentifiers:
    last_modified_date: Optional[datetime] = _field("last-modified-date", DATE)
    external_identifier: List[PersonItem] = _field("external-identifier", PersonItem, many=True)
    path: Optional[str] = _field("path")


@dataclass
class Person:
    last_modified_date: Optional[datetime] = _field("last-modified-date", DATE)
    name: Optional[Name] = _field("name", Name)
    other_names: Optional[OtherNames] = _field("other-names", OtherNames)
    biography: Optional[Biography] = _field("biography", Biography)
    researcher_urls: Optional[ResearcherURLs] = _field("researcher-urls", ResearcherURLs)
    emails: Optional[Emails] = _field("emails", Emails)
    addresses: Optional[Addresses] = _field("addresses", Addresses)
    keywords: Optional[Keywords] = _field("keywords", Keywords)
    external_identifiers: Optional[ExternalIdentifiers] = _field("external-identifiers", ExternalIdentifiers)
    path: Optional[str] = _field("path")


# --- shared activity parts ---------------------------------------------------


@dataclass
class ExternalID:
    external_id_type: Optional[str] = _field("external-id-type")
    external_id_value: Optional[str] = _field("external-id-value")
    external_id_normalized: Optional[str] = _field("external-id-normalized", VALUE)
    external_id_url: Optional[str] = _field("external-id-url", VALUE)
    external_id_relationship: Optional[str] = _field("external-id-relationship")


@dataclass
class ExternalIDs:
    external_id: List[ExternalID] = _field("external-id", ExternalID, many=True)


@dataclass
class FuzzyDate:
    year: Optional[str] = _field("year", VALUE)
    month: Optional[str] = _field("month", VALUE)
    day: Optional[str] = _field("day", VALUE)


@dataclass
class Title:
    title: Optional[str] = _field("title", VALUE)
    subtitle: Optional[str] = _field("subtitle", VALUE)
    translated_title: Optional[str] = _field("translated-title", VALUE)


@dataclass
class OrganizationAddress:
    city: Optional[str] = _field("city")
    region: Optional[str] = _field("region")
    country: Optional[str] = _field("country")


@dataclass
class DisambiguatedOrganization:
    identifier: Optional[str] = _field("disambiguated-organization-identifier")
    source: Optional[str] = _field("disambiguation-source")


@dataclass
class Organization:
    name: Optional[str] = _field("name")
    address: Optional[OrganizationAddress] = _field("address", OrganizationAddress)
    disambiguated_organization: Optional[DisambiguatedOrganization] = _field(
        "disambiguated-organization", DisambiguatedOrganization
    )


# --- works ---------------------------------------------------------------------


@dataclass
class WorkSummary:
    put_code: Optional[int] = _field("put-code", int)
    created_date: Optional[datetime] = _field("created-date", DATE)
    last_modified_date: Optional[datetime] = _field("last-modified-date", DATE)
    source: Optional[Source] = _field("source", Source)
    title: Optional[Title] = _field("title", Title)
    external_ids: Optional[ExternalIDs] = _field("external-ids", ExternalIDs)
    type: Optional[str] = _field("type")
    publication_date: Optional[FuzzyDate] = _field("publication-date", FuzzyDate)
    journal_title: Optional[str] = _field("journal-title", VALUE)
    visibility: Optional[str] = _field("visibility")
    path: Optional[str] = _field("path")
    display_index: Optional[str] = _field("display-index")


@dataclass
class WorkGroup:
    last_modified_date: Optional[datetime] = _field("last-modified-date", DATE)
    external_ids: Optional[ExternalIDs] = _field("external-ids", ExternalIDs)
    work_summary: List[WorkSummary] = _field("work-summary", WorkSummary, many=True)


@dataclass
class Works:
    last_modified_date: Optional[datetime] = _field("last-modified-date", DATE)
    group: List[WorkGroup] = _field("group", WorkGroup, many=True)
    path: Optional[str] = _field("path")


@dataclass
class Citation:
    citation_type: Optional[str] = _field("citation-type")
    citation_value: Optional[str] = _field("citation-value")


@dataclass
class ContributorAttributes:
    contributor_sequence: Optional[str] = _field("contributor-sequence")
    contributor_role: Optional[str] = _field("contributor-role")


@dataclass
class Contributor:
    contributor_orcid: Optional[OrcidIdentifier] = _field("contributor-orcid", OrcidIdentifier)
    credit_name: Optional[str] = _field("credit-name", VALUE)
    contributor_email: Optional[str] = _field("contributor-email", VALUE)
    contributor_attributes: Optional[ContributorAttributes] = _field(
        "contributor-attributes", ContributorAttributes
    )


@dataclass
class Contributors:
    contributor: List[Contributor] = _field("contributor", Contributor, many=True)


@dataclass
class Work:
    put_code: Optional[int] = _field("put-code", int)
    created_date: Optional[datetime] = _field("created-date", DATE)
    last_modified_date: Optional[datetime] = _field("last-modified-date", DATE)
    source: Optional[Source] = _field("source", Source)
    title: Optional[Title] = _field("title", Title)
    journal_title: Optional[str] = _field("journal-title", VALUE)
    short_description: Optional[str] = _field("short-description")
    citation: Optional[Citation] = _field("citation", Citation)
    type: Optional[str] = _field("type")
    publication_date: Optional[FuzzyDate] = _field("publication-date", FuzzyDate)
    external_ids: Optional[ExternalIDs] = _field("external-ids", ExternalIDs)
    url: Optional[str] = _field("url", VALUE)
    contributors: Optional[Contributors] = _field("contributors", Contributors)
    language_code: Optional[str] = _field("language-code")
    country: Optional[str] = _field("country", VALUE)
    visibility: Optional[str] = _field("visibility")
    path: Optional[str] = _field("path")


# --- affiliations --------------------------------------------------------------


@dataclass
class AffiliationSummary:
    """Summary of an education, employment, distinction, membership..."""

    put_code: Optional[int] = _field("put-code", int)
    created_date: Optional[datetime] = _field("created-date", DATE)
    last_modified_date: Optional[datetime] = _field("last-modified-date", DATE)
    source: Optional[Source] = _field("source", Source)
    department_name: Optional[str] = _field("department-name")
    role_title: Optional[str] = _field("role-title")
    start_date: Optional[FuzzyDate] = _field("start-date", FuzzyDate)
    end_date: Optional[FuzzyDate] = _field("end-date", FuzzyDate)
    organization: Optional[Organization] = _field("organization", Organization)
    url: Optional[str] = _field("url", VALUE)
    external_ids: Optional[ExternalIDs] = _field("external-ids", ExternalIDs)
    display_index: Optional[str] = _field("display-index")
    visibility: Optional[str] = _field("visibility")
    path: Optional[str] = _field("path")


@dataclass
class AffiliationGroup:
    last_modified_date: Optional[datetime] = _field("last-modified-date", DATE)
    external_ids: Optional[ExternalIDs] = _field("external-ids", ExternalIDs)
    summaries: List[AffiliationSummary] = _field("summaries", AffiliationSummary, many=True)

    @staticmethod
    def _normalize(data: Dict[str, Any]) -> Dict[str, Any]:
        # JSON: "summaries": [{"education-summary": {...}}, ...]
        # XML:  <education:education-summary> children of the group
        if "summaries" in data:
            raw = data["summaries"]
            items = raw if isinstance(raw, list) else [raw]
            unwrapped = []
            for item in items:
                if isinstance(item, dict) and len(item) == 1:
                    unwrapped.append(next(iter(item.values())))
                else:
                    unwrapped.append(item)
            return {**data, "summaries": unwrapped}

        collected = []
        for key, value in data.items():
            if key.endswith("-summary"):
                collected.extend(value if isinstance(value, list) else [value])
        return {**data, "summaries": collected}


@dataclass
class Affiliations:
    """Collection returned by /educations, /employments, /services..."""

    last_modified_date: Optional[datetime] = _field("last-modified-date", DATE)
    affiliation_group: List[AffiliationGroup] = _field("affiliation-group", AffiliationGroup, many=True)
    path: Optional[str] = _field("path")

    @property
    def summaries(self) -> List[AffiliationSummary]:
        return [summary for group in self.affiliation_group for summary in group.summaries]


class Educations(Affiliations):
    pass


class Employments(Affiliations):
    pass


class Distinctions(Affiliations):
    pass


class InvitedPositions(Affiliations):
    pass


class Memberships(Affiliations):
    pass


class Qualifications(Affiliations):
    pass


class Services(Affiliations):
    pass


# --- fundings, peer reviews, research resources ---------------------------------


@dataclass
class FundingSummary:
    put_code: Optional[int] = _field("put-code", int)
    created_date: Optional[datetime] = _field("created-date", DATE)
    last_modified_date: Optional[datetime] = _field("last-modified-date", DATE)
    source: Optional[Source] = _field("source", Source)
    title: Optional[Title] = _field("title", Title)
    type: Optional[str] = _field("type")
    start_date: Optional[FuzzyDate] = _field("start-date", FuzzyDate)
    end_date: Optional[FuzzyDate] = _field("end-date", FuzzyDate)
    organization: Optional[Organization] = _field("organization", Organization)
    url: Optional[str] = _field("url", VALUE)
    external_ids: Optional[ExternalIDs] = _field("external-ids", ExternalIDs)
    display_index: Optional[str] = _field("display-index")
    visibility: Optional[str] = _field("visibility")
    path: Optional[str] = _field("path")


@dataclass
class FundingGroup:
    last_modified_date: Optional[datetime] = _field("last-modified-date", DATE)
    external_ids: Optional[ExternalIDs] = _field("external-ids", ExternalIDs)
    funding_summary: List[FundingSummary] = _field("funding-summary", FundingSummary, many=True)


@dataclass
class Fundings:
    last_modified_date: Optional[datetime] = _field("last-modified-date", DATE)
    group: List[FundingGroup] = _field("group", FundingGroup, many=True)
    path: Optional[str] = _field("path")


@dataclass
class PeerReviewSummary:
    put_code: Optional[int] = _field("put-code", int)
    created_date: Optional[datetime] = _field("created-date", DATE)
    last_modified_date: Optional[datetime] = _field("last-modified-date", DATE)
    source: Optional[Source] = _field("source", Source)
    review_group_id: Optional[str] = _field("review-group-id")
    reviewer_role: Optional[str] = _field("reviewer-role")
    review_type: Optional[str] = _field("review-type")
    completion_date: Optional[FuzzyDate] = _field("completion-date", FuzzyDate)
    review_url: Optional[str] = _field("review-url", VALUE)
    convening_organization: Optional[Organization] = _field("convening-organization", Organization)
    external_ids: Optional[ExternalIDs] = _field("external-ids", ExternalIDs)
    display_index: Optional[str] = _field("display-index")
    visibility: Optional[str] = _field("visibility")
    path: Optional[str] = _field("path")


@dataclass
class PeerReviewGroup:
    last_modified_date: Optional[datetime] = _field("last-modified-date", DATE)
    external_ids: Optional[ExternalIDs] = _field("external-ids", ExternalIDs)
    peer_review_summary: List[PeerReviewSummary] = _field("peer-review-summary", PeerReviewSummary, many=True)


@dataclass
class PeerReviews:
    last_modified_date: Optional[datetime] = _field("last-modified-date", DATE)
    group: List[PeerReviewGroup] = _field("group", PeerReviewGroup, many=True)
    path: Optional[str] = _field("path")


@dataclass
class ResearchResourceSummary:
    put_code: Optional[int] = _field("put-code", int)
    created_date: Optional[datetime] = _field("created-date", DATE)
    last_modified_date: Optional[datetime] = _field("last-modified-date", DATE)
    source: Optional[Source] = _field("source", Source)
    title: Optional[str] = _field("title", VALUE)
    external_ids: Optional[ExternalIDs] = _field("external-ids", ExternalIDs)
    display_index: Optional[str] = _field("display-index")
    visibility: Optional[str] = _field("visibility")
    path: Optional[str] = _field("path")


@dataclass
class ResearchResourceGroup:
    last_modified_date: Optional[datetime] = _field("last-modified-date", DATE)
    external_ids: Optional[ExternalIDs] = _field("external-ids", ExternalIDs)
    research_resource_summary: List[ResearchResourceSummary] = _field(
        "research-resource-summary", ResearchResourceSummary, many=True
    )


@dataclass
class ResearchResources:
    last_modified_date: Optional[datetime] = _field("last-modified-date", DATE)
    group: List[ResearchResourceGroup] = _field("group", ResearchResourceGroup, many=True)
    path: Optional[str] = _field("path")


# --- record ----------------------------------------------------------------------


@dataclass
class ActivitiesSummary:
    last_modified_date: Optional[datetime] = _field("last-modified-date", DATE)
    distinctions: Optional[Distinctions] = _field("distinctions", Distinctions)
    educations: Optional[Educations] = _field("educations", Educations)
    employments: Optional[Employments] = _field("employments", Employments)
    fundings: Optional[Fundings] = _field("fundings", Fundings)
    invited_positions: Optional[InvitedPositions] = _field("invited-positions", InvitedPositions)
    memberships: Optional[Memberships] = _field("memberships", Memberships)
    peer_reviews: Optional[PeerReviews] = _field("peer-reviews", PeerReviews)
    qualifications: Optional[Qualifications] = _field("qualifications", Qualifications)
    research_resources: Optional[ResearchResources] = _field("research-resources", ResearchResources)
    services: Optional[Services] = _field("services", Services)
    works: Optional[Works] = _field("works", Works)
    path: Optional[str] = _field("path")


@dataclass
class Record:
    orcid_identifier: Optional[OrcidIdentifier] = _field("orcid-identifier", OrcidIdentifier)
    preferences: Optional[Preferences] = _field("preferences", Preferences)
    history: Optional[History] = _field("history", History)
    person: Optional[Person] = _field("person", Person)
    activities_summary: Optional[ActivitiesSummary] = _field("activities-summary", ActivitiesSummary)
    path: Optional[str] = _field("path")


# --- search ------------------------------------------------------------------------


@dataclass
class SearchRecord:
    orcid_identifier: Optional[OrcidIdentifier] = _field("orcid-identifier", OrcidIdentifier)


@dataclass
class SearchResult:
    num_found: int = _field("num-found", int)
    start: Optional[int] = _field("start", int)
    num_rows: Optional[int] = _field("num-rows", int)
    result: List[SearchRecord] = _field("result", SearchRecord, many=True)

    def __post_init__(self):
        if self.num_found is None:
            self.num_found = 0


@dataclass
class ExpandedSearchRecord:
    orcid_id: Optional[str] = _field("orcid-id")
    given_names: Optional[str] = _field("given-names")
    family_names: Optional[str] = _field("family-names")
    credit_name: Optional[str] = _field("credit-name")
    other_name: List[str] = _field("other-name", str, many=True)
    email: List[str] = _field("email", str, many=True)
    institution_name: List[str] = _field("institution-name", str, many=True)


@dataclass
class ExpandedSearchResult:
    num_found: int = _field("num-found", int)
    expanded_result: List[ExpandedSearchRecord] = _field("expanded-result", ExpandedSearchRecord, many=True)

    def __post_init__(self):
        if self.num_found is None:
            self.num_found = 0


# --- decoder ----------------------------------------------------------------------------


def _parse_date(raw: Any, where: str) -> datetime:
    if isinstance(raw, dict):
        raw = raw.get("value")
    if isinstance(raw, bool):
        raise DecodeError(f"{where}: expected timestamp, got bool")
    if isinstance(raw, str) and raw.strip().isdigit():
        raw = int(raw.strip())
    if isinstance(raw, (int, float)):
        # epoch milliseconds
        try:
            return datetime.fromtimestamp(raw / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise DecodeError(f"{where}: timestamp out of range {raw!r}") from e
    if isinstance(raw, str):
        # fromisoformat only takes 3 or 6 fraction digits before Python 3.11
        text = _FRACTION.sub(
            lambda m: f"{m.group(1)}.{(m.group(2) + '000000')[:6]}",
            raw.strip().replace("Z", "+00:00"),
        )
        try:
            return datetime.fromisoformat(text)
        except ValueError as e:
            raise DecodeError(f"{where}: invalid timestamp {raw!r}") from e
    raise DecodeError(f"{where}: expected timestamp, got {type(raw).__name__}")


def _scalar(raw: Any, where: str) -> Any:
    if isinstance(raw, dict):
        if "value" not in raw:
            raise DecodeError(f"{where}: expected a value, got object")
        raw = raw["value"]
    if isinstance(raw, (dict, list)):
        raise DecodeError(f"{where}: expected a value, got {type(raw).__name__}")
    return raw


def _convert(kind: Any, raw: Any, where: str) -> Any:
    if is_dataclass(kind):
        return _build(kind, raw, where)
    if kind == DATE:
        return _parse_date(raw, where)
    if kind == VALUE and isinstance(raw, dict) and "value" not in raw:
        # XML element carrying only attributes
        return None

    value = _scalar(raw, where)
    if value is None:
        return None
    if kind in (str, VALUE):
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)
    if kind is int:
        if isinstance(value, bool):
            raise DecodeError(f"{where}: expected integer, got bool")
        try:
            return int(value)
        except (TypeError, ValueError, OverflowError) as e:
            raise DecodeError(f"{where}: expected integer, got {value!r}") from e
    if kind is bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.lower() in ("true", "false"):
            return value.lower() == "true"
        raise DecodeError(f"{where}: expected boolean, got {value!r}")
    raise DecodeError(f"{where}: unsupported field kind {kind!r}")


def _build(cls, data: Any, where: str):
    if not isinstance(data, dict):
        raise DecodeError(
            f"{where}: expected object for {cls.__name__}, got {type(data).__name__}"
        )
    normalize = getattr(cls, "_normalize", None)
    if normalize is not None:
        data = normalize(data)

    kwargs = {}
    for f in fields(cls):
        key = f.metadata["key"]
        raw = data.get(key)
        if raw is None or raw == "":
            continue
        path = f"{where}.{key}"
        if f.metadata["many"]:
            items = raw if isinstance(raw, list) else [raw]
            kwargs[f.name] = [_convert(f.metadata["kind"], item, path) for item in items]
        elif isinstance(raw, list):
            raise DecodeError(f"{path}: expected a single item, got a list")
        else:
            kwargs[f.name] = _convert(f.metadata["kind"], raw, path)
    return cls(**kwargs)


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _element_to_data(element: ET.Element) -> Any:
    """Convert an XML element into the key tree the JSON encoding uses."""
    attributes = {_local_name(k): v for k, v in element.attrib.items()}
    children = list(element)
    text = (element.text or "").strip()

    if not children and not attributes:
        return text

    data: Dict[str, Any] = dict(attributes)
    repeated = set()
    for child in children:
        key = _local_name(child.tag)
        value = _element_to_data(child)
        if key not in data:
            data[key] = value
        elif key in repeated:
            data[key].append(value)
        else:
            data[key] = [data[key], value]
            repeated.add(key)
    if text:
        data["value"] = text
    return data


def decode_json(body: bytes, target):
    try:
        data = json.loads(body)
    except (ValueError, UnicodeDecodeError) as e:
        raise DecodeError(f"invalid JSON for {target.__name__}: {e}") from e
    return _build(target, data, target.__name__)


def decode_xml(body: bytes, target):
    try:
        root = ET.fromstring(body)
    except ET.ParseError as e:
        raise DecodeError(f"invalid XML for {target.__name__}: {e}") from e
    return _build(target, _element_to_data(root), target.__name__)


def decode(body: bytes, target, content_type: ContentType = ContentType.JSON):
    """
    Decode a response body into a record type.

    Args:
        body: Raw response body
        target: Dataclass to build, e.g. Record or SearchResult
        content_type: Encoding of the body

    Returns:
        An instance of ``target``

    Raises:
        DecodeError: If the body is not well-formed or does not fit ``target``
    """
    if content_type == ContentType.XML:
        return decode_xml(body, target)
    if content_type == ContentType.JSON:
        return decode_json(body, target)
    raise DecodeError(f"unsupported content type: {content_type}")
