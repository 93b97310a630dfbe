"""
Chart payload builders.

Turns ChartSeries and AggregateStats into the JSON structures a Chart.js
style renderer expects: a three-dataset line chart for the trend and a
pie chart for the distribution of current totals.
"""

from dataclasses import dataclass, field
from typing import Optional

from .i18n import get_message
from .models import AggregateStats, ChartSeries


CASES_COLOR = "#4CAF50"  # green
DEATHS_COLOR = "#F44336"  # red
RECOVERED_COLOR = "#2196F3"  # blue


def _title_options(title: str) -> dict:
    return {"plugins": {"title": {"display": bool(title), "text": title}}}


@dataclass(frozen=True)
class LineDataset:
    """One line of the trend chart."""

    label: str
    data: tuple[int, ...]
    border_color: str
    fill: bool = False
    tension: float = 0.1

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "data": list(self.data),
            "fill": self.fill,
            "borderColor": self.border_color,
            "tension": self.tension,
        }


@dataclass(frozen=True)
class LineChartData:
    labels: tuple[str, ...]
    datasets: tuple[LineDataset, ...]
    title: str = ""

    def to_dict(self) -> dict:
        return {
            "labels": list(self.labels),
            "datasets": [dataset.to_dict() for dataset in self.datasets],
            "options": _title_options(self.title),
        }


@dataclass(frozen=True)
class PieChartData:
    labels: tuple[str, ...]
    data: tuple[int, ...]
    background_colors: tuple[str, ...] = field(
        default=(CASES_COLOR, DEATHS_COLOR, RECOVERED_COLOR)
    )
    title: str = ""

    def to_dict(self) -> dict:
        return {
            "labels": list(self.labels),
            "datasets": [
                {
                    "data": list(self.data),
                    "backgroundColor": list(self.background_colors),
                }
            ],
            "options": _title_options(self.title),
        }


def build_line_chart(series: ChartSeries, language: Optional[str] = None) -> LineChartData:
    """Build the historical trend chart from a projected series."""
    return LineChartData(
        labels=series.labels,
        datasets=(
            LineDataset(get_message("chart.total_cases", language), series.cases, CASES_COLOR),
            LineDataset(get_message("chart.deaths", language), series.deaths, DEATHS_COLOR),
            LineDataset(get_message("chart.recovered", language), series.recovered, RECOVERED_COLOR),
        ),
        title=get_message("chart.trend_title", language),
    )


def build_pie_chart(stats: AggregateStats, language: Optional[str] = None) -> PieChartData:
    """Build the distribution chart from the current totals."""
    return PieChartData(
        labels=(
            get_message("chart.cases", language),
            get_message("chart.deaths", language),
            get_message("chart.recovered", language),
        ),
        data=(stats.cases, stats.deaths, stats.recovered),
        title=get_message("chart.distribution_title", language),
    )
