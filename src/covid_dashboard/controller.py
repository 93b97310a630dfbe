"""
Dashboard controller.

Owns the immutable DashboardState and coordinates the pipeline stages:
- CountryCatalogLoader, once per session
- TimelineFetcher, on every country or date-window change
- SeriesProjector, whenever a new timeline arrives

Stage results are applied through pure update functions. Every input change
bumps a generation counter and cancels the fetch still in flight; a fetch
result is applied only if no newer input change happened meanwhile (last
selection wins).
"""

import asyncio
from dataclasses import dataclass, replace
from datetime import date
from typing import Callable, Optional, Union

from .api_client import ApiClient
from .catalog import CountryCatalogLoader
from .config import DashboardConfig, create_default_config
from .enums import FetchStage, LogLevel
from .event_logger import EventLogger
from .exceptions import FetchError, ValidationError
from .i18n import get_message
from .models import (
    AggregateStats,
    ChartSeries,
    Country,
    CountryData,
    DateWindow,
    Timeline,
)
from .projector import SeriesProjector
from .timeline import TimelineFetcher


@dataclass(frozen=True)
class DashboardState:
    """Snapshot of everything the presentation layer reads."""

    countries: tuple[Country, ...] = ()
    selected_country: str = ""
    window: DateWindow = DateWindow()
    stats: AggregateStats = AggregateStats()
    timeline: Optional[Timeline] = None
    chart_series: ChartSeries = ChartSeries()
    error: Optional[str] = None


def apply_catalog(state: DashboardState, countries: list[Country]) -> DashboardState:
    return replace(state, countries=tuple(countries))


def apply_country_data(
    state: DashboardState,
    data: CountryData,
    projector: Optional[SeriesProjector] = None,
) -> DashboardState:
    """Replace stats and timeline wholesale and re-project the chart series."""
    projector = projector or SeriesProjector()
    return replace(
        state,
        stats=data.stats,
        timeline=data.timeline,
        chart_series=projector.project(data.timeline, state.window),
    )


def apply_selection(state: DashboardState, country_code: str) -> DashboardState:
    return replace(state, selected_country=country_code, error=None)


def apply_window(state: DashboardState, window: DateWindow) -> DashboardState:
    return replace(state, window=window, error=None)


def apply_error(state: DashboardState, message: str) -> DashboardState:
    """Record an error; previously fetched data stays in place."""
    return replace(state, error=message)


def clear_error(state: DashboardState) -> DashboardState:
    return replace(state, error=None)


StateListener = Callable[[DashboardState], None]


class DashboardController:
    """
    Top-level state owner for one dashboard session.

    Usable as an async context manager, which closes the HTTP client on exit.
    """

    def __init__(
        self,
        config: Optional[DashboardConfig] = None,
        client: Optional[ApiClient] = None,
        logger: Optional[EventLogger] = None,
        catalog_loader: Optional[CountryCatalogLoader] = None,
        fetcher: Optional[TimelineFetcher] = None,
        projector: Optional[SeriesProjector] = None,
        window: Optional[DateWindow] = None,
    ) -> None:
        """
        Initialize the controller.

        Args:
            config: Dashboard configuration (defaults to create_default_config())
            client: Optional shared API client
            logger: Optional event logger
            catalog_loader: Optional catalog stage override
            fetcher: Optional timeline stage override
            projector: Optional projection stage override
            window: Initial date window (unbounded by default)
        """
        self._config = config or create_default_config()
        self._logger = logger
        self._client = client or ApiClient(timeout=self._config.http_timeout, logger=logger)
        self._catalog_loader = catalog_loader or CountryCatalogLoader(
            self._client, self._config.endpoints.countries_url, logger=logger
        )
        self._fetcher = fetcher or TimelineFetcher(
            self._client, self._config.endpoints, logger=logger
        )
        self._projector = projector or SeriesProjector()

        self._state = DashboardState(
            selected_country=self._config.default_country,
            window=window or DateWindow(),
        )
        self._listeners: list[StateListener] = []
        self._generation = 0
        self._in_flight: Optional[asyncio.Future] = None
        self._started = False

    async def __aenter__(self) -> "DashboardController":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self._cancel_in_flight()
        await self._client.close()

    # Reactive values

    @property
    def state(self) -> DashboardState:
        return self._state

    @property
    def countries(self) -> tuple[Country, ...]:
        return self._state.countries

    @property
    def stats(self) -> AggregateStats:
        return self._state.stats

    @property
    def chart_series(self) -> ChartSeries:
        return self._state.chart_series

    @property
    def error(self) -> Optional[str]:
        return self._state.error

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Register a callback invoked with every new state.

        Returns:
            A function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, state: DashboardState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    # Input setters

    async def start(self) -> None:
        """
        Load the catalog and the default country's data.

        Only the first call does anything; the catalog is never reloaded.
        """
        if self._started:
            return
        self._started = True
        self._log_info(
            f"Starting session with country {self._state.selected_country!r}",
        )
        await asyncio.gather(self._load_catalog(), self._refresh())

    async def select_country(self, country_code: str) -> None:
        """Select a country, clear any error and fetch its data."""
        code = (country_code or "").strip().lower()
        self._set_state(apply_selection(self._state, code))
        await self._refresh()

    async def set_date_window(
        self,
        start: Union[str, date, None] = None,
        end: Union[str, date, None] = None,
    ) -> None:
        """
        Change the date window and re-run fetch and projection.

        An unparsable bound leaves the current window in place and sets the
        error message instead.
        """
        try:
            window = DateWindow.parse(start, end)
        except ValidationError as e:
            self._set_state(apply_error(
                self._state,
                get_message("error.invalid_date", self._config.language, value=e.details["value"]),
            ))
            return
        self._set_state(apply_window(self._state, window))
        await self._refresh()

    async def refresh(self) -> None:
        """Re-fetch the currently selected country."""
        self._set_state(clear_error(self._state))
        await self._refresh()

    # Stage runners

    async def _load_catalog(self) -> None:
        try:
            countries = await self._catalog_loader.load()
        except FetchError as e:
            self._set_state(apply_error(self._state, self._message_for(e)))
            return
        self._set_state(apply_catalog(self._state, countries))

    async def _refresh(self) -> None:
        self._generation += 1
        generation = self._generation
        code = self._state.selected_country
        self._cancel_in_flight()

        if not code:
            return

        task = asyncio.ensure_future(self._fetcher.fetch(code))
        self._in_flight = task
        try:
            data = await task
        except asyncio.CancelledError:
            # Superseded by a newer input change
            if self._is_stale(generation, code):
                return
            raise
        except FetchError as e:
            if self._is_stale(generation, code):
                return
            self._set_state(apply_error(self._state, self._message_for(e)))
            return
        finally:
            if self._in_flight is task:
                self._in_flight = None

        if self._is_stale(generation, code):
            return
        self._set_state(apply_country_data(self._state, data, self._projector))

    def _cancel_in_flight(self) -> None:
        if self._in_flight is not None and not self._in_flight.done():
            self._in_flight.cancel()
        self._in_flight = None

    def _is_stale(self, generation: int, code: str) -> bool:
        if generation == self._generation:
            return False
        if self._logger:
            self._logger.debug(
                "DashboardController",
                f"Discarding stale result for {code}",
                {"generation": generation, "current_generation": self._generation},
            )
        return True

    def _message_for(self, error: FetchError) -> str:
        if error.stage == FetchStage.COUNTRIES.value:
            return get_message("error.fetch_countries", self._config.language)
        return get_message("error.fetch_historical", self._config.language)

    def _log_info(self, message: str, data: Optional[dict] = None) -> None:
        if self._logger:
            self._logger.log(LogLevel.INFO, "DashboardController", message, data)
