"""
ORCID iD helpers: parse, format and validate identifiers.

An ORCID iD is 16 characters, shown as four hyphen-separated groups
(0000-0002-1825-0097). The last character is an ISO 7064 mod 11-2 check
digit and may be 'X'.
"""

from orcid_config import SearchConfig
from orcid_exceptions import ORCIDValidationError


def parse_orcid_id(value: str) -> str:
    """
    Extract the bare iD from an ORCID URL, a path or a plain iD.

    Args:
        value: e.g. "https://orcid.org/0000-0002-1825-0097" or "/0000-0002-1825-0097"

    Returns:
        The last path segment, whitespace trimmed
    """
    return value.strip().split("/")[-1]


def format_orcid_id(value: str) -> str:
    """Return the canonical hyphenated, upper-case form of an iD."""
    compact = parse_orcid_id(value).replace("-", "").upper()
    if len(compact) != SearchConfig.ORCID_ID_LENGTH:
        return compact
    size = SearchConfig.ORCID_GROUP_SIZE
    return "-".join(compact[i:i + size] for i in range(0, len(compact), size))


def compute_check_digit(base_digits: str) -> str:
    """Compute the mod 11-2 check character for the first 15 digits."""
    total = 0
    for char in base_digits:
        total = (total + int(char)) * 2
    result = (12 - total % 11) % 11
    return "X" if result == 10 else str(result)


def validate_orcid_id(value: str) -> None:
    """
    Validate an ORCID iD, including its checksum.

    Args:
        value: iD in any form accepted by parse_orcid_id()

    Raises:
        ORCIDValidationError: If the length, characters or checksum are wrong
    """
    compact = parse_orcid_id(value).replace("-", "")

    if len(compact) != SearchConfig.ORCID_ID_LENGTH:
        raise ORCIDValidationError(f"invalid ORCID iD length: {len(compact)}")

    for position, char in enumerate(compact[:-1]):
        if char not in "0123456789":
            raise ORCIDValidationError(f"invalid character in ORCID iD at position {position}")

    check = compact[-1]
    if check not in "0123456789X":
        raise ORCIDValidationError("invalid check digit in ORCID iD")

    if compute_check_digit(compact[:-1]) != check:
        raise ORCIDValidationError("invalid ORCID iD checksum")


def is_valid_orcid_id(value: str) -> bool:
    try:
        validate_orcid_id(value)
    except ORCIDValidationError:
        return False
    return True
