"""
Country catalog loader.

Fetches the list of selectable countries, normalizes each record to
``Country(name, code)`` and sorts it for display.
"""

import unicodedata
from typing import Any, Optional

from .api_client import ApiClient
from .enums import ApiErrorCode, FetchStage, LogLevel
from .event_logger import EventLogger
from .exceptions import DashboardError, FetchError, MalformedPayloadError
from .models import Country


def collation_key(name: str) -> tuple[str, str]:
    """
    Locale-aware sort key for display names.

    Accents and case are ignored at the primary level ("Åland Islands" sorts
    with "A"), the raw name breaks ties so the order stays total.
    """
    decomposed = unicodedata.normalize("NFKD", name)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold(), name


def normalize_country(record: Any) -> Country:
    """
    Map one raw catalog record to a Country.

    Raises:
        MalformedPayloadError: If ``name.common`` or ``cca2`` is missing
    """
    if not isinstance(record, dict):
        raise MalformedPayloadError(
            code=ApiErrorCode.MALFORMED_PAYLOAD.value,
            message="Country record is not an object",
        )
    name = record.get("name")
    common = name.get("common") if isinstance(name, dict) else None
    cca2 = record.get("cca2")
    if not isinstance(common, str) or not common or not isinstance(cca2, str) or not cca2:
        raise MalformedPayloadError(
            code=ApiErrorCode.MALFORMED_PAYLOAD.value,
            message="Country record lacks name.common or cca2",
            details={"record_keys": sorted(record.keys())},
        )
    return Country(name=common, code=cca2.lower())


def normalize_catalog(payload: Any) -> list[Country]:
    """Normalize and sort a full catalog payload."""
    if not isinstance(payload, list):
        raise MalformedPayloadError(
            code=ApiErrorCode.MALFORMED_PAYLOAD.value,
            message="Country catalog is not a list",
        )
    countries = [normalize_country(record) for record in payload]
    countries.sort(key=lambda country: collation_key(country.name))
    return countries


class CountryCatalogLoader:
    """Loads the sorted country catalog from the countries endpoint."""

    def __init__(
        self,
        client: ApiClient,
        countries_url: str,
        logger: Optional[EventLogger] = None,
    ) -> None:
        self._client = client
        self._countries_url = countries_url
        self._logger = logger

    async def load(self) -> list[Country]:
        """
        Fetch and normalize the catalog.

        Returns:
            Countries sorted by display name

        Raises:
            FetchError: stage "countries", chaining the underlying failure
        """
        try:
            response = await self._client.get_json(self._countries_url)
            countries = normalize_catalog(response.payload)
        except DashboardError as e:
            if self._logger:
                self._logger.log_error(
                    "CountryCatalogLoader",
                    "Failed to load country catalog",
                    error=e,
                    request_url=self._countries_url,
                )
            raise FetchError(FetchStage.COUNTRIES.value, details=e.to_dict()) from e

        if self._logger:
            self._logger.log(
                LogLevel.INFO,
                "CountryCatalogLoader",
                f"Loaded {len(countries)} countries",
            )
        return countries
