"""
Timeline fetcher.

Retrieves the current aggregate totals and the long-range daily history
for one country, concurrently, and normalizes both payloads.
"""

import asyncio
from typing import Any, Optional

from .api_client import ApiClient
from .config import EndpointConfig
from .enums import ApiErrorCode, FetchStage, LogLevel, SeriesName
from .event_logger import EventLogger
from .exceptions import DashboardError, FetchError, MalformedPayloadError, ValidationError
from .models import AggregateStats, CountryData, Timeline


def _series_mapping(container: dict, name: str, required: bool) -> Optional[dict]:
    value = container.get(name)
    if value is None and not required:
        return None
    if not isinstance(value, dict):
        raise MalformedPayloadError(
            code=ApiErrorCode.MALFORMED_PAYLOAD.value,
            message=f"Historical series '{name}' is not a date mapping",
        )
    return value


def normalize_timeline(payload: Any) -> Timeline:
    """
    Normalize a historical payload to a Timeline.

    Accepted shapes are ``{"timeline": {"cases": ..., "deaths": ...,
    "recovered": ...}}`` and the inner object on its own. ``cases`` is
    required; a missing ``deaths`` or ``recovered`` series is read as empty.

    Raises:
        MalformedPayloadError: If the payload matches neither shape
    """
    if not isinstance(payload, dict):
        raise MalformedPayloadError(
            code=ApiErrorCode.MALFORMED_PAYLOAD.value,
            message="Historical payload is not an object",
        )

    wrapped = payload.get("timeline")
    if isinstance(wrapped, dict) and SeriesName.CASES.value in wrapped:
        container = wrapped
    elif SeriesName.CASES.value in payload:
        container = payload
    else:
        raise MalformedPayloadError(
            code=ApiErrorCode.MALFORMED_PAYLOAD.value,
            message="Historical payload has no cases series",
            details={"keys": sorted(str(key) for key in payload.keys())},
        )

    return Timeline.from_mappings(
        cases=_series_mapping(container, SeriesName.CASES.value, required=True),
        deaths=_series_mapping(container, SeriesName.DEATHS.value, required=False),
        recovered=_series_mapping(container, SeriesName.RECOVERED.value, required=False),
    )


def normalize_stats(payload: Any) -> AggregateStats:
    """
    Normalize the aggregate-totals payload.

    Raises:
        MalformedPayloadError: If the payload is not an object
    """
    if not isinstance(payload, dict):
        raise MalformedPayloadError(
            code=ApiErrorCode.MALFORMED_PAYLOAD.value,
            message="Country stats payload is not an object",
        )
    return AggregateStats.from_payload(payload)


class TimelineFetcher:
    """Fetches aggregate totals and the historical timeline for a country."""

    def __init__(
        self,
        client: ApiClient,
        endpoints: EndpointConfig,
        logger: Optional[EventLogger] = None,
    ) -> None:
        self._client = client
        self._endpoints = endpoints
        self._logger = logger

    def stats_url(self, country_code: str) -> str:
        return self._endpoints.country_stats_url.format(code=country_code)

    def historical_url(self, country_code: str) -> str:
        return self._endpoints.historical_url.format(code=country_code)

    async def _fetch_stats(self, country_code: str) -> AggregateStats:
        response = await self._client.get_json(self.stats_url(country_code))
        return normalize_stats(response.payload)

    async def _fetch_timeline(self, country_code: str) -> Timeline:
        response = await self._client.get_json(
            self.historical_url(country_code),
            params={"lastdays": self._endpoints.lastdays},
        )
        return normalize_timeline(response.payload)

    async def fetch(self, country_code: str) -> CountryData:
        """
        Retrieve totals and history for one country.

        Both retrievals run concurrently; if either fails the whole fetch
        fails and nothing is returned.

        Args:
            country_code: Lowercase country identifier from the catalog

        Returns:
            CountryData with stats and timeline

        Raises:
            ValidationError: If the country code is empty
            FetchError: stage "historical", chaining the first failure
        """
        code = (country_code or "").strip().lower()
        if not code:
            raise ValidationError(
                code="empty_country_code",
                message="Country code must not be empty",
            )

        if self._logger:
            self._logger.debug("TimelineFetcher", f"Fetching data for {code}")

        results = await asyncio.gather(
            self._fetch_stats(code),
            self._fetch_timeline(code),
            return_exceptions=True,
        )
        try:
            for result in results:
                if isinstance(result, BaseException):
                    raise result
        except DashboardError as e:
            if self._logger:
                self._logger.log_error(
                    "TimelineFetcher",
                    f"Failed to fetch data for {code}",
                    error=e,
                    request_url=e.details.get("url"),
                    response_status_code=e.details.get("status_code"),
                )
            raise FetchError(
                FetchStage.HISTORICAL.value,
                details={"country_code": code, **e.to_dict()},
            ) from e

        stats, timeline = results
        if self._logger:
            self._logger.log(
                LogLevel.INFO,
                "TimelineFetcher",
                f"Fetched {len(timeline)} days for {code}",
                {"cases": stats.cases, "deaths": stats.deaths, "recovered": stats.recovered},
            )
        return CountryData(stats=stats, timeline=timeline)
