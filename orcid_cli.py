#!/usr/bin/env python3
"""
ORCID Search Tool

Command-line front end for ORCIDClient: search the registry or fetch one
ORCID record, printing JSON to stdout.

Command-line usage:
    orcid-search -t TOKEN -q "family-name:Carberry"
    orcid-search -t TOKEN -q "family-name:Carberry" --all
    orcid-search -t TOKEN -o 0000-0002-1825-0097 --raw --xml
"""

import argparse
import dataclasses
import json
import logging
import os
import sys
from datetime import datetime

from orcid_client import ORCIDClient, logger
from orcid_config import APIConfig, ContentType
from orcid_exceptions import ORCIDAPIError, ORCIDValidationError
from orcid_identifiers import format_orcid_id, validate_orcid_id
from orcid_search import SearchParams

TOKEN_ENV_VAR = "ORCID_BEARER_TOKEN"


def _json_default(value):
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def to_json(record) -> str:
    """Serialize a record dataclass (or a dict of them) as indented JSON."""
    if dataclasses.is_dataclass(record):
        record = dataclasses.asdict(record)
    return json.dumps(record, indent=2, default=_json_default)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="orcid-search",
        description="Search the ORCID registry or retrieve an ORCID record.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Search by family name (first page of 10):
    orcid-search -t TOKEN -q "family-name:Carberry"

  Walk every page of a search:
    orcid-search -t TOKEN -q "affiliation-org-name:\\"Brown University\\"" --all

  Retrieve a record from the sandbox as raw XML:
    orcid-search -t TOKEN -o 0000-0002-1825-0097 --sandbox --xml --raw
        """
    )

    parser.add_argument(
        "--token",
        "-t",
        default=os.environ.get(TOKEN_ENV_VAR),
        help=f"Bearer token for ORCID API authentication (default: ${TOKEN_ENV_VAR})"
    )
    parser.add_argument(
        "--query",
        "-q",
        help="Search query string"
    )
    parser.add_argument(
        "--orcid",
        "-o",
        help="ORCID iD to retrieve"
    )
    parser.add_argument(
        "--sandbox",
        action="store_true",
        help="Use the ORCID sandbox instead of production"
    )
    parser.add_argument(
        "--xml",
        action="store_true",
        help="Request XML from the API instead of JSON"
    )
    parser.add_argument(
        "--raw",
        action="store_true",
        help="Print the raw response body (only with --orcid)"
    )
    parser.add_argument(
        "--rows",
        type=int,
        default=APIConfig.DEFAULT_SEARCH_ROWS,
        help=f"Number of results per page (default: {APIConfig.DEFAULT_SEARCH_ROWS})"
    )
    parser.add_argument(
        "--start",
        type=int,
        default=0,
        help="Starting offset for pagination (default: 0)"
    )
    parser.add_argument(
        "--all",
        action="store_true",
        help="Follow pagination and return every search result"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)"
    )
    return parser


def run_search(client: ORCIDClient, args) -> str:
    params = SearchParams(query=args.query, start=args.start, rows=args.rows)
    logger.info(f"Searching for: {args.query}")

    if not args.all:
        return to_json(client.search(params))

    iterator = client.search_iter(params)
    results = [dataclasses.asdict(record) for record in iterator]
    if iterator.error is not None:
        raise iterator.error
    logger.info(f"Search complete: {len(results)} of {iterator.total_results} results retrieved")
    return to_json({
        "query": args.query,
        "num-found": iterator.total_results,
        "results_count": len(results),
        "results": results,
    })


def run_record(client: ORCIDClient, args) -> str:
    orcid_id = format_orcid_id(args.orcid)
    validate_orcid_id(orcid_id)
    logger.info(f"Retrieving record: {orcid_id}")

    if args.raw:
        return client.get_record_raw(orcid_id).decode("utf-8", errors="replace")
    return to_json(client.get_record(orcid_id))


def main(argv=None) -> int:
    """Main function to handle command-line execution."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Configure logging level
    logger.setLevel(getattr(logging, args.log_level))

    if not args.token:
        parser.print_usage(sys.stderr)
        logger.error(f"Bearer token is required. Use --token/-t or set {TOKEN_ENV_VAR}")
        return 1
    if not args.query and not args.orcid:
        parser.print_usage(sys.stderr)
        logger.error("Either a search query (-q) or an ORCID iD (-o) is required")
        return 1
    if args.query and args.orcid:
        parser.print_usage(sys.stderr)
        logger.error("Cannot use both a search query (-q) and an ORCID iD (-o)")
        return 1

    client = ORCIDClient(
        base_url=APIConfig.PUBLIC_SANDBOX_HOST if args.sandbox else APIConfig.PUBLIC_HOST,
        content_type=ContentType.XML if args.xml else ContentType.JSON,
        bearer_token=args.token,
    )

    try:
        if args.query:
            output = run_search(client, args)
        else:
            output = run_record(client, args)
    except ORCIDValidationError as e:
        logger.error(f"Validation error: {e}")
        return 1
    except ORCIDAPIError as e:
        logger.error(f"Request failed: {e}")
        return 1

    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
