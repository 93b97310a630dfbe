"""
Series projector.

Pure projection of a Timeline onto a DateWindow, producing the aligned
label/value arrays a chart renderer consumes.
"""

from functools import lru_cache

from .enums import SeriesName
from .models import ChartSeries, DateWindow, Timeline, parse_date


def _retained_dates(timeline: Timeline, window: DateWindow) -> list[str]:
    if window.is_unbounded:
        return timeline.dates()

    retained = []
    for key in timeline.dates():
        day = parse_date(key)
        # Unparsable keys cannot be placed inside a bounded window
        if day is not None and window.contains(day):
            retained.append(key)
    return retained


@lru_cache(maxsize=64)
def project(timeline: Timeline, window: DateWindow = DateWindow()) -> ChartSeries:
    """
    Restrict a timeline to a date window.

    Dates come from the cases series in their original order; a date is kept
    when it falls inside the inclusive window (compared as calendar dates).
    Deaths and recovered values missing for a kept date become 0. The result
    is cached per ``(timeline, window)``; both are immutable.

    Args:
        timeline: Normalized historical timeline
        window: Inclusive date filter; unset bounds are unbounded

    Returns:
        ChartSeries whose four sequences have identical length
    """
    labels = _retained_dates(timeline, window)
    cases = timeline.as_mapping(SeriesName.CASES)
    deaths = timeline.as_mapping(SeriesName.DEATHS)
    recovered = timeline.as_mapping(SeriesName.RECOVERED)

    return ChartSeries(
        labels=tuple(labels),
        cases=tuple(cases.get(key, 0) for key in labels),
        deaths=tuple(deaths.get(key, 0) for key in labels),
        recovered=tuple(recovered.get(key, 0) for key in labels),
    )


class SeriesProjector:
    """Object facade over ``project`` for callers that inject stages."""

    def project(self, timeline: Timeline, window: DateWindow = DateWindow()) -> ChartSeries:
        return project(timeline, window)

    @staticmethod
    def cache_info():
        return project.cache_info()

    @staticmethod
    def cache_clear() -> None:
        project.cache_clear()
