"""
Configuration for the ORCID API client.

Centralizes hosts, defaults and magic numbers for easier maintenance,
and defines the immutable per-client configuration value.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional


class APIConfig:
    """API configuration constants."""

    MEMBER_HOST = "https://api.orcid.org/v3.0"
    PUBLIC_HOST = "https://pub.orcid.org/v3.0"
    MEMBER_SANDBOX_HOST = "https://api.sandbox.orcid.org/v3.0"
    PUBLIC_SANDBOX_HOST = "https://pub.sandbox.orcid.org/v3.0"

    BASE_URL = PUBLIC_HOST
    TIMEOUT_SECONDS = 30

    # Rate Limiting (requests per second, 0 disables pacing)
    DEFAULT_RATE_LIMIT = 10

    # Retry configuration
    # 5xx responses are retried as well, see is_retryable_status()
    RETRYABLE_STATUS_CODES = {408, 429}
    DEFAULT_MAX_RETRIES = 3

    # Pagination
    DEFAULT_SEARCH_ROWS = 10

    DEFAULT_USER_AGENT = "ORCID-Python-Client/0.1"


class SearchConfig:
    """Search-specific configuration."""

    ORCID_ID_LENGTH = 16
    ORCID_GROUP_SIZE = 4


class ContentType(str, Enum):
    """Structured response formats understood by the API."""

    JSON = "application/json"
    XML = "application/vnd.orcid+xml"


def is_retryable_status(status_code: int) -> bool:
    """Return True for statuses that should be retried (408, 429, 5xx)."""
    return status_code in APIConfig.RETRYABLE_STATUS_CODES or 500 <= status_code < 600


@dataclass(frozen=True)
class ClientConfig:
    """
    Immutable configuration shared by every request of one client.

    Construction never fails. A missing bearer token is reported when a
    request is attempted, not here.

    Attributes:
        base_url: API root, without trailing slash
        timeout: Per-request transport timeout in seconds
        max_retries: Additional attempts after the first one
        rate_limit: Requests per second; 0 or negative disables pacing
        content_type: Preferred response encoding
        user_agent: Value of the User-Agent header
        bearer_token: Token sent in the Authorization header
    """

    base_url: str = APIConfig.BASE_URL
    timeout: float = APIConfig.TIMEOUT_SECONDS
    max_retries: int = APIConfig.DEFAULT_MAX_RETRIES
    rate_limit: int = APIConfig.DEFAULT_RATE_LIMIT
    content_type: ContentType = ContentType.JSON
    user_agent: str = APIConfig.DEFAULT_USER_AGENT
    bearer_token: Optional[str] = None

    def __post_init__(self):
        # frozen dataclass: normalize through object.__setattr__
        object.__setattr__(self, "base_url", (self.base_url or "").rstrip("/"))
        object.__setattr__(self, "max_retries", max(0, self.max_retries))
        object.__setattr__(self, "content_type", ContentType(self.content_type))

    def replace(self, **changes) -> "ClientConfig":
        """Return a copy of this configuration with the given fields changed."""
        return replace(self, **changes)
