"""
COVID-19 Dashboard - country statistics and historical trends.

This package fetches a country catalog and per-country COVID-19 statistics
from public REST APIs, normalizes them, and projects the historical timeline
onto a date window as chart-ready series.
"""

__version__ = "0.1.0"

from covid_dashboard.exceptions import (
    DashboardError,
    ValidationError,
    NetworkError,
    RateLimitError,
    ProtocolError,
    MalformedPayloadError,
    FetchError,
)
from covid_dashboard.enums import (
    FetchStage,
    SeriesName,
    LogLevel,
    ApiErrorCode,
)
from covid_dashboard.config import (
    EndpointConfig,
    LoggingConfig,
    DashboardConfig,
    create_default_config,
    load_config_from_env,
    load_config_from_file,
    save_config_to_file,
    validate_config,
)
from covid_dashboard.models import (
    Country,
    AggregateStats,
    Timeline,
    DateWindow,
    ChartSeries,
    CountryData,
    parse_date,
)
from covid_dashboard.event_logger import (
    EventLogger,
    LogEntry,
)
from covid_dashboard.api_client import (
    ApiClient,
    ApiResponse,
)
from covid_dashboard.catalog import (
    CountryCatalogLoader,
    normalize_catalog,
)
from covid_dashboard.timeline import (
    TimelineFetcher,
    normalize_timeline,
)
from covid_dashboard.projector import (
    SeriesProjector,
    project,
)
from covid_dashboard.chart import (
    LineDataset,
    LineChartData,
    PieChartData,
    build_line_chart,
    build_pie_chart,
)
from covid_dashboard.controller import (
    DashboardController,
    DashboardState,
)
from covid_dashboard.i18n import (
    get_message,
    SUPPORTED_LANGUAGES,
    DEFAULT_LANGUAGE,
)

__all__ = [
    # Exceptions
    "DashboardError",
    "ValidationError",
    "NetworkError",
    "RateLimitError",
    "ProtocolError",
    "MalformedPayloadError",
    "FetchError",
    # Enums
    "FetchStage",
    "SeriesName",
    "LogLevel",
    "ApiErrorCode",
    # Configuration
    "EndpointConfig",
    "LoggingConfig",
    "DashboardConfig",
    "create_default_config",
    "load_config_from_env",
    "load_config_from_file",
    "save_config_to_file",
    "validate_config",
    # Models
    "Country",
    "AggregateStats",
    "Timeline",
    "DateWindow",
    "ChartSeries",
    "CountryData",
    "parse_date",
    # Logging
    "EventLogger",
    "LogEntry",
    # Pipeline
    "ApiClient",
    "ApiResponse",
    "CountryCatalogLoader",
    "normalize_catalog",
    "TimelineFetcher",
    "normalize_timeline",
    "SeriesProjector",
    "project",
    # Charts
    "LineDataset",
    "LineChartData",
    "PieChartData",
    "build_line_chart",
    "build_pie_chart",
    # Controller
    "DashboardController",
    "DashboardState",
    # I18n
    "get_message",
    "SUPPORTED_LANGUAGES",
    "DEFAULT_LANGUAGE",
]
