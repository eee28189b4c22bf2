#!/usr/bin/env python3
"""
Unit tests for orcid_models.py

Tests cover:
- Record decoding from JSON and XML
- Timestamp forms
- Affiliation, search and expanded-search payloads
- Malformed and mistyped bodies
"""

import json
import unittest
from datetime import datetime, timezone

from orcid_config import ContentType
from orcid_exceptions import DecodeError
from orcid_models import (
    Educations,
    Employments,
    ExpandedSearchResult,
    Person,
    Record,
    SearchResult,
    Work,
    Works,
    decode,
    decode_json,
    decode_xml,
)

RECORD_JSON = {
    "orcid-identifier": {
        "uri": "https://orcid.org/0000-0002-1825-0097",
        "path": "0000-0002-1825-0097",
        "host": "orcid.org",
    },
    "preferences": {"locale": "en"},
    "history": {
        "creation-method": "Member-referred",
        "submission-date": {"value": 1481036707171},
        "claimed": True,
        "verified-email": "true",
    },
    "person": {
        "name": {
            "given-names": {"value": "Josiah"},
            "family-name": {"value": "Carberry"},
            "credit-name": None,
            "visibility": "public",
        },
        "biography": {"content": "Psychoceramicist", "visibility": "public"},
        "keywords": {
            "keyword": [
                {"content": "cracked pots", "put-code": 1925453},
                {"content": "ceramics", "put-code": "1925454"},
            ]
        },
        "emails": {"email": []},
    },
    "activities-summary": {
        "works": {
            "group": [
                {
                    "work-summary": [
                        {
                            "put-code": 733535,
                            "title": {"title": {"value": "Developing Thin Clients"}},
                            "type": "journal-article",
                            "publication-date": {"year": {"value": "2012"}},
                        }
                    ]
                }
            ]
        }
    },
    "path": "/0000-0002-1825-0097",
}

RECORD_XML = b"""<?xml version="1.0" encoding="UTF-8"?>
<record:record path="/0000-0002-1825-0097"
    xmlns:common="http://www.orcid.org/ns/common"
    xmlns:person="http://www.orcid.org/ns/person"
    xmlns:personal-details="http://www.orcid.org/ns/personal-details"
    xmlns:keyword="http://www.orcid.org/ns/keyword"
    xmlns:history="http://www.orcid.org/ns/history"
    xmlns:record="http://www.orcid.org/ns/record">
    <common:orcid-identifier>
        <common:uri>https://orcid.org/0000-0002-1825-0097</common:uri>
        <common:path>0000-0002-1825-0097</common:path>
        <common:host>orcid.org</common:host>
    </common:orcid-identifier>
    <history:history visibility="private">
        <history:claimed>true</history:claimed>
        <common:last-modified-date>2016-12-06T15:05:07.171Z</common:last-modified-date>
    </history:history>
    <person:person path="/0000-0002-1825-0097/person">
        <person:name visibility="public" path="0000-0002-1825-0097">
            <personal-details:given-names>Josiah</personal-details:given-names>
            <personal-details:family-name>Carberry</personal-details:family-name>
        </person:name>
        <keyword:keywords path="/0000-0002-1825-0097/keywords">
            <keyword:keyword put-code="1925453" visibility="public">
                <keyword:content>cracked pots</keyword:content>
            </keyword:keyword>
        </keyword:keywords>
    </person:person>
</record:record>
"""


class TestRecordDecoding(unittest.TestCase):
    """Test decoding full records."""

    def test_json_record(self):
        """Test fields of a JSON record."""
        record = decode(json.dumps(RECORD_JSON).encode(), Record, ContentType.JSON)

        self.assertIsInstance(record, Record)
        self.assertEqual(record.orcid_identifier.path, "0000-0002-1825-0097")
        self.assertEqual(record.preferences.locale, "en")
        self.assertEqual(record.history.creation_method, "Member-referred")
        self.assertTrue(record.history.claimed)
        self.assertTrue(record.history.verified_email)
        self.assertEqual(record.person.name.given_names, "Josiah")
        self.assertEqual(record.person.name.family_name, "Carberry")
        self.assertIsNone(record.person.name.credit_name)
        self.assertEqual(record.person.biography.content, "Psychoceramicist")
        self.assertEqual([k.put_code for k in record.person.keywords.keyword], [1925453, 1925454])
        self.assertEqual(record.person.emails.email, [])
        self.assertEqual(record.path, "/0000-0002-1825-0097")

        summary = record.activities_summary.works.group[0].work_summary[0]
        self.assertEqual(summary.put_code, 733535)
        self.assertEqual(summary.title.title, "Developing Thin Clients")
        self.assertEqual(summary.publication_date.year, "2012")

    def test_xml_record(self):
        """Test namespaced XML maps onto the same fields."""
        record = decode(RECORD_XML, Record, ContentType.XML)

        self.assertEqual(record.path, "/0000-0002-1825-0097")
        self.assertEqual(record.orcid_identifier.uri, "https://orcid.org/0000-0002-1825-0097")
        self.assertEqual(record.orcid_identifier.host, "orcid.org")
        self.assertTrue(record.history.claimed)
        self.assertEqual(record.person.path, "/0000-0002-1825-0097/person")
        self.assertEqual(record.person.name.visibility, "public")
        self.assertEqual(record.person.name.given_names, "Josiah")
        self.assertEqual(record.person.name.family_name, "Carberry")

        keywords = record.person.keywords.keyword
        self.assertEqual(len(keywords), 1)
        self.assertEqual(keywords[0].put_code, 1925453)
        self.assertEqual(keywords[0].content, "cracked pots")

    def test_missing_sections_are_none(self):
        """Test absent keys decode to defaults."""
        record = decode_json(b"{}", Record)
        self.assertIsNone(record.person)
        self.assertIsNone(record.activities_summary)

    def test_single_work(self):
        """Test a work with contributors and external ids."""
        body = json.dumps({
            "put-code": 733535,
            "title": {"title": {"value": "Thin Clients"}, "subtitle": None},
            "external-ids": {
                "external-id": [{
                    "external-id-type": "doi",
                    "external-id-value": "10.1087/20120404",
                    "external-id-url": {"value": "https://doi.org/10.1087/20120404"},
                    "external-id-relationship": "self",
                }]
            },
            "contributors": {
                "contributor": [{
                    "credit-name": {"value": "Josiah Carberry"},
                    "contributor-attributes": {"contributor-sequence": "first"},
                }]
            },
        }).encode()
        work = decode_json(body, Work)

        self.assertEqual(work.put_code, 733535)
        self.assertEqual(work.title.title, "Thin Clients")
        self.assertIsNone(work.title.subtitle)
        external_id = work.external_ids.external_id[0]
        self.assertEqual(external_id.external_id_value, "10.1087/20120404")
        self.assertEqual(external_id.external_id_url, "https://doi.org/10.1087/20120404")
        contributor = work.contributors.contributor[0]
        self.assertEqual(contributor.credit_name, "Josiah Carberry")
        self.assertEqual(contributor.contributor_attributes.contributor_sequence, "first")

    def test_xml_repeated_elements_become_lists(self):
        """Test repeated XML children decode into a list field."""
        body = b"""<activities:works xmlns:activities="http://www.orcid.org/ns/activities"
                xmlns:work="http://www.orcid.org/ns/work">
            <activities:group>
                <work:work-summary put-code="1"><work:type>book</work:type></work:work-summary>
            </activities:group>
            <activities:group>
                <work:work-summary put-code="2"><work:type>other</work:type></work:work-summary>
                <work:work-summary put-code="3"><work:type>other</work:type></work:work-summary>
            </activities:group>
        </activities:works>"""
        works = decode_xml(body, Works)

        self.assertEqual(len(works.group), 2)
        self.assertEqual([s.put_code for s in works.group[0].work_summary], [1])
        self.assertEqual([s.put_code for s in works.group[1].work_summary], [2, 3])


class TestTimestamps(unittest.TestCase):
    """Test the accepted timestamp forms."""

    EXPECTED = datetime(2016, 12, 6, 15, 5, 7, 171000, tzinfo=timezone.utc)

    def _history(self, value):
        body = json.dumps({"history": {"last-modified-date": value}}).encode()
        return decode_json(body, Record).history.last_modified_date

    def test_epoch_millis_wrapped(self):
        self.assertEqual(self._history({"value": 1481036707171}), self.EXPECTED)

    def test_epoch_millis_bare(self):
        self.assertEqual(self._history(1481036707171), self.EXPECTED)

    def test_epoch_millis_string(self):
        self.assertEqual(self._history("1481036707171"), self.EXPECTED)

    def test_iso_string(self):
        self.assertEqual(self._history("2016-12-06T15:05:07.171Z"), self.EXPECTED)

    def test_iso_string_short_fraction(self):
        self.assertEqual(
            self._history("2016-12-06T15:05:07.1Z"),
            self.EXPECTED.replace(microsecond=100000),
        )

    def test_iso_string_long_fraction(self):
        self.assertEqual(
            self._history("2016-12-06T15:05:07.171234567+00:00"),
            self.EXPECTED.replace(microsecond=171234),
        )

    def test_invalid_timestamp(self):
        with self.assertRaises(DecodeError):
            self._history("yesterday")
        with self.assertRaises(DecodeError):
            self._history(True)


class TestAffiliations(unittest.TestCase):
    """Test affiliation collections in both encodings."""

    def test_json_summaries_unwrapped(self):
        """Test JSON summary wrappers are removed."""
        body = json.dumps({
            "affiliation-group": [{
                "summaries": [{
                    "education-summary": {
                        "put-code": 22423,
                        "department-name": "Psychoceramics",
                        "role-title": "BA",
                        "start-date": {"year": {"value": "1989"}},
                        "organization": {
                            "name": "Brown University",
                            "address": {"city": "Providence", "region": "RI", "country": "US"},
                            "disambiguated-organization": {
                                "disambiguated-organization-identifier": "6752",
                                "disambiguation-source": "RINGGOLD",
                            },
                        },
                    }
                }]
            }],
            "path": "/0000-0002-1825-0097/educations",
        }).encode()
        educations = decode_json(body, Educations)

        self.assertIsInstance(educations, Educations)
        self.assertEqual(len(educations.summaries), 1)
        summary = educations.summaries[0]
        self.assertEqual(summary.put_code, 22423)
        self.assertEqual(summary.start_date.year, "1989")
        self.assertEqual(summary.organization.name, "Brown University")
        self.assertEqual(summary.organization.address.city, "Providence")
        self.assertEqual(summary.organization.disambiguated_organization.source, "RINGGOLD")

    def test_xml_summaries_collected(self):
        """Test XML summary elements of a group are collected."""
        body = b"""<activities:employments path="/0000-0002-1825-0097/employments"
                xmlns:activities="http://www.orcid.org/ns/activities"
                xmlns:employment="http://www.orcid.org/ns/employment"
                xmlns:common="http://www.orcid.org/ns/common">
            <activities:affiliation-group>
                <employment:employment-summary put-code="1" visibility="public">
                    <common:role-title>Professor</common:role-title>
                    <common:organization><common:name>Brown University</common:name></common:organization>
                </employment:employment-summary>
                <employment:employment-summary put-code="2" visibility="public">
                    <common:role-title>Lecturer</common:role-title>
                </employment:employment-summary>
            </activities:affiliation-group>
        </activities:employments>"""
        employments = decode_xml(body, Employments)

        self.assertEqual(employments.path, "/0000-0002-1825-0097/employments")
        self.assertEqual([s.put_code for s in employments.summaries], [1, 2])
        self.assertEqual(employments.summaries[0].role_title, "Professor")
        self.assertEqual(employments.summaries[0].organization.name, "Brown University")


class TestSearchPayloads(unittest.TestCase):
    """Test search and expanded-search results."""

    def test_search_json(self):
        body = json.dumps({
            "result": [
                {"orcid-identifier": {"path": "0000-0002-1825-0097"}},
                {"orcid-identifier": {"path": "0000-0001-5109-3700"}},
            ],
            "num-found": 2,
        }).encode()
        result = decode_json(body, SearchResult)
        self.assertEqual(result.num_found, 2)
        self.assertEqual(
            [r.orcid_identifier.path for r in result.result],
            ["0000-0002-1825-0097", "0000-0001-5109-3700"],
        )

    def test_search_xml(self):
        """Test the num-found attribute of the XML search root."""
        body = b"""<search:search num-found="1"
                xmlns:search="http://www.orcid.org/ns/search"
                xmlns:common="http://www.orcid.org/ns/common">
            <search:result>
                <common:orcid-identifier>
                    <common:path>0000-0002-1825-0097</common:path>
                </common:orcid-identifier>
            </search:result>
        </search:search>"""
        result = decode_xml(body, SearchResult)
        self.assertEqual(result.num_found, 1)
        self.assertEqual(result.result[0].orcid_identifier.path, "0000-0002-1825-0097")

    def test_empty_search(self):
        """Test a body without results or a count."""
        result = decode_json(b"{}", SearchResult)
        self.assertEqual(result.num_found, 0)
        self.assertEqual(result.result, [])

    def test_expanded_search(self):
        body = json.dumps({
            "expanded-result": [{
                "orcid-id": "0000-0002-1825-0097",
                "given-names": "Josiah",
                "family-names": "Carberry",
                "other-name": ["J. Carberry", "Josiah S. Carberry"],
                "institution-name": ["Brown University"],
                "email": [],
            }],
            "num-found": 1,
        }).encode()
        result = decode_json(body, ExpandedSearchResult)
        self.assertEqual(result.num_found, 1)
        record = result.expanded_result[0]
        self.assertEqual(record.orcid_id, "0000-0002-1825-0097")
        self.assertEqual(record.family_names, "Carberry")
        self.assertEqual(record.other_name, ["J. Carberry", "Josiah S. Carberry"])
        self.assertEqual(record.institution_name, ["Brown University"])
        self.assertEqual(record.email, [])


class TestDecodeErrors(unittest.TestCase):
    """Test malformed or mistyped bodies raise DecodeError."""

    def test_invalid_json(self):
        with self.assertRaises(DecodeError):
            decode(b"{not json", Record, ContentType.JSON)

    def test_invalid_xml(self):
        with self.assertRaises(DecodeError):
            decode(b"<record><unclosed></record>", Record, ContentType.XML)

    def test_top_level_list(self):
        with self.assertRaises(DecodeError):
            decode_json(b"[]", Record)

    def test_object_where_text_expected(self):
        with self.assertRaises(DecodeError):
            decode_json(b'{"path": {"nested": 1}}', Record)

    def test_list_for_single_field(self):
        with self.assertRaises(DecodeError):
            decode_json(b'{"person": [{}, {}]}', Record)

    def test_non_integer_put_code(self):
        body = b'{"keywords": {"keyword": [{"put-code": "abc"}]}}'
        with self.assertRaises(DecodeError) as context:
            decode_json(body, Person)
        self.assertIn("put-code", str(context.exception))

    def test_bool_put_code(self):
        with self.assertRaises(DecodeError):
            decode_json(b'{"put-code": true}', Work)

    def test_scalar_for_section(self):
        with self.assertRaises(DecodeError):
            decode_json(b'{"person": "nobody"}', Record)

    def test_timestamp_out_of_range(self):
        body = b'{"created-date": {"value": 99999999999999999999}, "put-code": 1}'
        with self.assertRaises(DecodeError) as context:
            decode_json(body, Work)
        self.assertIn("created-date", str(context.exception))

    def test_infinite_timestamp(self):
        with self.assertRaises(DecodeError):
            decode_json(b'{"created-date": Infinity}', Work)

    def test_infinite_count(self):
        with self.assertRaises(DecodeError) as context:
            decode_json(b'{"num-found": Infinity, "result": []}', SearchResult)
        self.assertIn("num-found", str(context.exception))


if __name__ == "__main__":
    unittest.main()
