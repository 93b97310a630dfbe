"""
Configuration dataclasses for the dashboard pipeline.

This module defines the configuration structures used throughout the system
(API endpoints, logging, session defaults) together with helpers that build
a configuration from defaults, environment variables (.env) or a JSON file.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from dotenv import load_dotenv

from .i18n import SUPPORTED_LANGUAGES


DEFAULT_COUNTRIES_URL = "https://restcountries.com/v3.1/all"
DEFAULT_COUNTRY_STATS_URL = "https://disease.sh/v3/covid-19/countries/{code}"
DEFAULT_HISTORICAL_URL = "https://disease.sh/v3/covid-19/historical/{code}"
DEFAULT_LASTDAYS = 1500
DEFAULT_COUNTRY = "usa"

DEFAULT_CONFIG_PATH = Path.home() / ".covid_dashboard" / "config.json"

ENV_PREFIX = "COVID_DASHBOARD_"

LOG_LEVELS = ("debug", "info", "warn", "error")
LOG_FORMATS = ("json", "text", "both")


@dataclass
class EndpointConfig:
    """Upstream REST endpoints. ``{code}`` is replaced by the country code."""

    countries_url: str = DEFAULT_COUNTRIES_URL
    country_stats_url: str = DEFAULT_COUNTRY_STATS_URL
    historical_url: str = DEFAULT_HISTORICAL_URL
    lastdays: int = DEFAULT_LASTDAYS


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "warn"
    output_format: str = "text"  # 'json', 'text', 'both'


@dataclass
class DashboardConfig:
    """Main configuration combining all sub-configurations."""

    endpoints: EndpointConfig = field(default_factory=EndpointConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    default_country: str = DEFAULT_COUNTRY
    http_timeout: float = 10.0
    language: str = "en"  # 'de' or 'en'


def create_default_config(language: str = "en") -> DashboardConfig:
    """
    Create a default configuration pointing at the public APIs.

    Args:
        language: Output language ('de' or 'en')

    Returns:
        DashboardConfig with default settings
    """
    return DashboardConfig(language=language)


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def load_config_from_env(
    base: Optional[DashboardConfig] = None,
    dotenv_path: Optional[Path] = None,
) -> DashboardConfig:
    """
    Overlay environment variables (and a .env file, if present) on a config.

    Recognized variables, all prefixed with ``COVID_DASHBOARD_``:
    LANGUAGE, DEFAULT_COUNTRY, HTTP_TIMEOUT, LASTDAYS, LOG_LEVEL, LOG_FORMAT,
    COUNTRIES_URL, COUNTRY_STATS_URL, HISTORICAL_URL.

    Args:
        base: Configuration to start from (defaults to create_default_config())
        dotenv_path: Optional explicit .env path

    Returns:
        A new DashboardConfig; ``base`` is not modified
    """
    load_dotenv(dotenv_path=dotenv_path)
    base = base or create_default_config()

    def env(name: str, default: str) -> str:
        value = os.getenv(ENV_PREFIX + name, "").strip()
        return value or default

    endpoints = EndpointConfig(
        countries_url=env("COUNTRIES_URL", base.endpoints.countries_url),
        country_stats_url=env("COUNTRY_STATS_URL", base.endpoints.country_stats_url),
        historical_url=env("HISTORICAL_URL", base.endpoints.historical_url),
        lastdays=_int_env(ENV_PREFIX + "LASTDAYS", base.endpoints.lastdays),
    )
    logging_config = LoggingConfig(
        level=env("LOG_LEVEL", base.logging.level).lower(),
        output_format=env("LOG_FORMAT", base.logging.output_format).lower(),
    )
    return DashboardConfig(
        endpoints=endpoints,
        logging=logging_config,
        default_country=env("DEFAULT_COUNTRY", base.default_country).lower(),
        http_timeout=_float_env(ENV_PREFIX + "HTTP_TIMEOUT", base.http_timeout),
        language=env("LANGUAGE", base.language).lower(),
    )


def config_to_dict(config: DashboardConfig) -> dict:
    """Serialize a configuration to a JSON-compatible dictionary."""
    return {
        "endpoints": {
            "countries_url": config.endpoints.countries_url,
            "country_stats_url": config.endpoints.country_stats_url,
            "historical_url": config.endpoints.historical_url,
            "lastdays": config.endpoints.lastdays,
        },
        "logging": {
            "level": config.logging.level,
            "output_format": config.logging.output_format,
        },
        "default_country": config.default_country,
        "http_timeout": config.http_timeout,
        "language": config.language,
    }


def config_from_dict(data: dict) -> DashboardConfig:
    """
    Build a configuration from a dictionary, filling gaps with defaults.

    Raises:
        TypeError: If a section is not a mapping
    """
    defaults = create_default_config()

    endpoints_data = data.get("endpoints", {})
    logging_data = data.get("logging", {})
    if not isinstance(endpoints_data, dict) or not isinstance(logging_data, dict):
        raise TypeError("'endpoints' and 'logging' must be objects")

    endpoints = EndpointConfig(
        countries_url=endpoints_data.get("countries_url", defaults.endpoints.countries_url),
        country_stats_url=endpoints_data.get(
            "country_stats_url", defaults.endpoints.country_stats_url
        ),
        historical_url=endpoints_data.get("historical_url", defaults.endpoints.historical_url),
        lastdays=int(endpoints_data.get("lastdays", defaults.endpoints.lastdays)),
    )
    logging_config = LoggingConfig(
        level=logging_data.get("level", defaults.logging.level),
        output_format=logging_data.get("output_format", defaults.logging.output_format),
    )
    return DashboardConfig(
        endpoints=endpoints,
        logging=logging_config,
        default_country=str(data.get("default_country", defaults.default_country)).lower(),
        http_timeout=float(data.get("http_timeout", defaults.http_timeout)),
        language=data.get("language", defaults.language),
    )


def load_config_from_file(config_path: Path) -> Optional[DashboardConfig]:
    """
    Load configuration from a JSON file.

    Args:
        config_path: Path to the configuration file

    Returns:
        DashboardConfig if successful, None if the file is missing or invalid
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            return None
        return config_from_dict(data)
    except (json.JSONDecodeError, KeyError, TypeError, ValueError, OSError):
        return None


def save_config_to_file(config: DashboardConfig, config_path: Path) -> bool:
    """
    Save configuration to a JSON file, creating parent directories.

    Returns:
        True if the file was written
    """
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(config_to_dict(config), f, indent=2, ensure_ascii=False)
        return True
    except OSError:
        return False


def validate_config(config: DashboardConfig) -> list[str]:
    """
    Validate a configuration.

    Returns:
        List of human-readable problems; empty when the config is usable
    """
    errors: list[str] = []

    urls = {
        "countries_url": config.endpoints.countries_url,
        "country_stats_url": config.endpoints.country_stats_url,
        "historical_url": config.endpoints.historical_url,
    }
    for name, url in urls.items():
        parsed = urlparse(url)
        if parsed.scheme.lower() != "https" or not parsed.netloc:
            errors.append(f"{name} must be an absolute https URL: {url!r}")

    for name in ("country_stats_url", "historical_url"):
        if "{code}" not in urls[name]:
            errors.append(f"{name} must contain a '{{code}}' placeholder")

    if config.endpoints.lastdays <= 0:
        errors.append("lastdays must be positive")
    if config.http_timeout <= 0:
        errors.append("http_timeout must be positive")
    if not config.default_country:
        errors.append("default_country must not be empty")
    if config.language not in SUPPORTED_LANGUAGES:
        errors.append(f"Unsupported language: {config.language!r}")
    if config.logging.level not in LOG_LEVELS:
        errors.append(f"Unsupported log level: {config.logging.level!r}")
    if config.logging.output_format not in LOG_FORMATS:
        errors.append(f"Unsupported log format: {config.logging.output_format!r}")

    return errors
