"""
Enumeration types for the dashboard pipeline.

These enums provide type-safe constants for stages, series names,
error codes, and configuration options throughout the system.
"""

from enum import Enum


class FetchStage(Enum):
    """Pipeline stage that performs a retrieval."""

    COUNTRIES = "countries"
    HISTORICAL = "historical"


class SeriesName(Enum):
    """The three aligned epidemiological series."""

    CASES = "cases"
    DEATHS = "deaths"
    RECOVERED = "recovered"


class LogLevel(Enum):
    """Logging severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class ApiErrorCode(Enum):
    """Error codes for HTTP API operations."""

    NETWORK_ERROR = "network_error"
    TLS_ERROR = "tls_error"
    TIMEOUT = "timeout"
    PARSE_ERROR = "parse_error"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    CLIENT_ERROR = "client_error"
    MALFORMED_PAYLOAD = "malformed_payload"
    INVALID_URL = "invalid_url"
