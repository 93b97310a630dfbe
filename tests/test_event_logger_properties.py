"""
Property-based tests for the event logger.

Uses Hypothesis for property-based testing of output formats, severity
filtering and sensitive data masking.
"""

import io
import json

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from covid_dashboard.config import LoggingConfig
from covid_dashboard.enums import LogLevel
from covid_dashboard.event_logger import EventLogger
from covid_dashboard.exceptions import FetchError, NetworkError


# Strategies for generating test data

component_strategy = st.sampled_from(
    ["ApiClient", "CountryCatalogLoader", "TimelineFetcher", "DashboardController"]
)
message_strategy = st.text(
    alphabet=st.characters(blacklist_categories=("Cs", "Cc", "Zl", "Zp")),
    min_size=1,
    max_size=100,
)
plain_key = st.sampled_from(["country_code", "url", "status_code", "generation", "count"])
sensitive_key = st.sampled_from(
    ["token", "api_key", "Authorization", "password", "session_token", "cookie"]
)
plain_value = st.one_of(st.integers(), st.text(max_size=20), st.booleans())


class TestDualFormatProperty:
    """
    **Property: every entry is written in each configured format**
    """

    @given(component=component_strategy, message=message_strategy)
    @settings(max_examples=100)
    def test_dual_format_produces_both_outputs(self, component: str, message: str) -> None:
        stream = io.StringIO()
        logger = EventLogger(output_format="both", output_stream=stream)

        logger.info(component, message, {"count": 1})

        lines = stream.getvalue().splitlines()
        json_lines = [line for line in lines if line.startswith("{")]
        text_lines = [line for line in lines if line.startswith("[")]
        assert len(json_lines) == 1
        assert len(text_lines) == 1
        parsed = json.loads(json_lines[0])
        assert parsed["component"] == component
        assert parsed["message"] == message
        assert parsed["level"] == "info"

    def test_json_only_format(self) -> None:
        stream = io.StringIO()
        logger = EventLogger(output_format="json", output_stream=stream)

        logger.warn("TimelineFetcher", "slow upstream", {"response_time_ms": 950.0})

        parsed = json.loads(stream.getvalue())
        assert parsed["data"] == {"response_time_ms": 950.0}

    def test_text_only_format(self) -> None:
        stream = io.StringIO()
        logger = EventLogger(output_format="text", output_stream=stream)

        logger.info("CountryCatalogLoader", "Loaded 250 countries")

        output = stream.getvalue()
        assert "INFO [CountryCatalogLoader] Loaded 250 countries" in output

    def test_invalid_format_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            EventLogger(output_format="xml")


class TestLevelFilteringProperty:
    """
    **Property: entries below the minimum severity are dropped**
    """

    @given(
        minimum=st.sampled_from(list(LogLevel)),
        level=st.sampled_from(list(LogLevel)),
    )
    @settings(max_examples=100)
    def test_filtering_follows_severity_order(self, minimum: LogLevel, level: LogLevel) -> None:
        order = [LogLevel.DEBUG, LogLevel.INFO, LogLevel.WARN, LogLevel.ERROR]
        stream = io.StringIO()
        logger = EventLogger(output_stream=stream, level=minimum)

        entry = logger.log(level, "DashboardController", "event")

        if order.index(level) >= order.index(minimum):
            assert entry is not None
            assert logger.entries == [entry]
        else:
            assert entry is None
            assert logger.entries == []
            assert stream.getvalue() == ""

    def test_from_config_uses_level_and_format(self) -> None:
        logger = EventLogger.from_config(LoggingConfig(level="debug", output_format="json"))

        assert logger.level == LogLevel.DEBUG
        assert logger.output_format == "json"

    def test_from_config_with_unknown_level_falls_back_to_warn(self) -> None:
        logger = EventLogger.from_config(LoggingConfig(level="verbose"))

        assert logger.level == LogLevel.WARN


class TestSensitiveDataMaskingProperty:
    """
    **Property: sensitive values never reach the output stream**
    """

    @given(key=sensitive_key, secret=st.text(min_size=8, max_size=40, alphabet="abcdef0123456789"))
    @settings(max_examples=100)
    def test_sensitive_data_masked(self, key: str, secret: str) -> None:
        stream = io.StringIO()
        logger = EventLogger(output_format="both", output_stream=stream)

        entry = logger.info("ApiClient", "request", {key: secret})

        assert entry.data[key] == EventLogger.MASK_VALUE
        assert secret not in stream.getvalue()

    @given(data=st.dictionaries(plain_key, plain_value, max_size=5))
    @settings(max_examples=100, deadline=None)
    def test_non_sensitive_data_not_masked(self, data: dict) -> None:
        logger = EventLogger(output_stream=io.StringIO())

        entry = logger.info("ApiClient", "request", data)

        assert entry.data == data

    def test_nested_sensitive_data_masked(self) -> None:
        logger = EventLogger(output_stream=io.StringIO())

        entry = logger.info("ApiClient", "request", {
            "headers": {"Authorization": "Bearer abc", "Accept": "application/json"},
            "attempts": [{"access_token": "xyz", "status": 200}],
        })

        assert entry.data["headers"]["Authorization"] == EventLogger.MASK_VALUE
        assert entry.data["headers"]["Accept"] == "application/json"
        assert entry.data["attempts"][0] == {"access_token": EventLogger.MASK_VALUE, "status": 200}


class TestErrorLoggingProperty:
    """
    **Property: error entries carry the exception and request context**
    """

    def test_error_logs_include_cause(self) -> None:
        logger = EventLogger(output_stream=io.StringIO())
        cause = NetworkError(code="timeout", message="Request timed out after 10.0s")
        error = FetchError("historical")
        error.__cause__ = cause

        entry = logger.log_error(
            "TimelineFetcher",
            "Historical fetch failed",
            error=error,
            request_url="https://disease.sh/v3/covid-19/historical/usa",
            response_status_code=504,
            additional_data={"country_code": "usa"},
        )

        assert entry.level == LogLevel.ERROR
        assert entry.data["error_type"] == "FetchError"
        assert entry.data["cause_type"] == "NetworkError"
        assert entry.data["cause_message"] == "Request timed out after 10.0s"
        assert entry.data["request_url"].endswith("/historical/usa")
        assert entry.data["response_status_code"] == 504
        assert entry.data["country_code"] == "usa"

    def test_error_logs_with_minimal_context(self) -> None:
        logger = EventLogger(output_stream=io.StringIO())

        entry = logger.log_error("DashboardController", "Something failed")

        assert entry.data == {}

    def test_additional_data_is_not_mutated(self) -> None:
        logger = EventLogger(output_stream=io.StringIO())
        extra = {"country_code": "de"}

        logger.log_error("TimelineFetcher", "failed", error=ValueError("x"), additional_data=extra)

        assert extra == {"country_code": "de"}

    def test_clear_entries(self) -> None:
        logger = EventLogger(output_stream=io.StringIO())
        logger.info("ApiClient", "one")

        logger.clear_entries()

        assert logger.entries == []
