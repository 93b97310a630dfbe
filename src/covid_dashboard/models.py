"""
Data models for the dashboard pipeline.

This module defines the immutable data structures that flow between the
pipeline stages: countries, aggregate totals, timelines, date windows and
the chart-ready series derived from them.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping, Optional, Union

from .enums import SeriesName
from .exceptions import ValidationError


# Upstream dates are ISO (2021-01-05, also unpadded 2021-1-5) or M/D/YY (1/5/21)
DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%y", "%m/%d/%Y")


def parse_date(value: Any) -> Optional[date]:
    """
    Parse a calendar date from a timeline key or user input.

    Args:
        value: A date, datetime, or string in one of DATE_FORMATS

    Returns:
        The parsed date, or None if the value is empty or unparsable
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def to_count(value: Any) -> int:
    """Coerce an upstream count to a non-negative int (invalid -> 0)."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(value, 0)
    if isinstance(value, float) and math.isfinite(value):
        return max(int(value), 0)
    return 0


@dataclass(frozen=True)
class Country:
    """A selectable country. ``code`` is the lowercase lookup key."""

    name: str
    code: str


@dataclass(frozen=True)
class AggregateStats:
    """Latest known cumulative totals for one country."""

    cases: int = 0
    deaths: int = 0
    recovered: int = 0

    @classmethod
    def empty(cls) -> "AggregateStats":
        return cls()

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "AggregateStats":
        """Extract the three totals from the upstream superset payload."""
        return cls(
            cases=to_count(payload.get("cases")),
            deaths=to_count(payload.get("deaths")),
            recovered=to_count(payload.get("recovered")),
        )


CountSeries = tuple[tuple[str, int], ...]


@dataclass(frozen=True)
class Timeline:
    """
    Day-by-day cumulative counts for cases, deaths and recovered.

    Each series is an ordered tuple of ``(date_key, count)`` pairs in the
    upstream order. The three key sets are normally identical; a date absent
    from one series reads as 0 when projected.
    """

    cases: CountSeries = ()
    deaths: CountSeries = ()
    recovered: CountSeries = ()

    @classmethod
    def from_mappings(
        cls,
        cases: Mapping[str, Any],
        deaths: Optional[Mapping[str, Any]] = None,
        recovered: Optional[Mapping[str, Any]] = None,
    ) -> "Timeline":
        def freeze(series: Optional[Mapping[str, Any]]) -> CountSeries:
            if not series:
                return ()
            return tuple((str(key), to_count(count)) for key, count in series.items())

        return cls(
            cases=freeze(cases),
            deaths=freeze(deaths),
            recovered=freeze(recovered),
        )

    def dates(self) -> list[str]:
        """Candidate dates: the keys of the cases series, in order."""
        return [key for key, _ in self.cases]

    def as_mapping(self, series: SeriesName) -> dict[str, int]:
        return dict(getattr(self, series.value))

    def __len__(self) -> int:
        return len(self.cases)


@dataclass(frozen=True)
class DateWindow:
    """Inclusive [start, end] filter; an unset bound is unbounded."""

    start: Optional[date] = None
    end: Optional[date] = None

    @classmethod
    def parse(
        cls,
        start: Union[str, date, None] = None,
        end: Union[str, date, None] = None,
    ) -> "DateWindow":
        """
        Build a window from user input.

        Empty strings and None mean "unset".

        Raises:
            ValidationError: If a non-empty bound cannot be parsed as a date
        """
        bounds = []
        for raw in (start, end):
            if raw is None or (isinstance(raw, str) and not raw.strip()):
                bounds.append(None)
                continue
            parsed = parse_date(raw)
            if parsed is None:
                raise ValidationError(
                    code="invalid_date",
                    message=f"Invalid date: {raw!r}",
                    details={"value": str(raw)},
                )
            bounds.append(parsed)
        return cls(start=bounds[0], end=bounds[1])

    @property
    def is_unbounded(self) -> bool:
        return self.start is None and self.end is None

    def contains(self, day: date) -> bool:
        if self.start is not None and day < self.start:
            return False
        if self.end is not None and day > self.end:
            return False
        return True


@dataclass(frozen=True)
class ChartSeries:
    """Ordered labels with three aligned numeric series."""

    labels: tuple[str, ...] = ()
    cases: tuple[int, ...] = ()
    deaths: tuple[int, ...] = ()
    recovered: tuple[int, ...] = ()

    @classmethod
    def empty(cls) -> "ChartSeries":
        return cls()

    @property
    def series(self) -> dict[str, tuple[int, ...]]:
        return {
            SeriesName.CASES.value: self.cases,
            SeriesName.DEATHS.value: self.deaths,
            SeriesName.RECOVERED.value: self.recovered,
        }

    def __len__(self) -> int:
        return len(self.labels)

    def to_dict(self) -> dict:
        return {
            "labels": list(self.labels),
            "series": {name: list(values) for name, values in self.series.items()},
        }


@dataclass(frozen=True)
class CountryData:
    """Result of one TimelineFetcher invocation."""

    stats: AggregateStats
    timeline: Timeline
