"""
Command-line interface for the COVID-19 dashboard.

This module provides a terminal front end over the dashboard controller:
- countries: List the selectable countries
- show: Totals, distribution and historical series for one country
- config: Configuration management
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .api_client import ApiClient
from .catalog import CountryCatalogLoader
from .chart import build_line_chart, build_pie_chart
from .config import (
    DEFAULT_CONFIG_PATH,
    DashboardConfig,
    config_to_dict,
    create_default_config,
    load_config_from_env,
    load_config_from_file,
    save_config_to_file,
    validate_config,
)
from .controller import DashboardController, DashboardState
from .enums import LogLevel
from .event_logger import EventLogger
from .exceptions import FetchError, ValidationError
from .i18n import SUPPORTED_LANGUAGES, get_message
from .models import DateWindow


def resolve_config(args: argparse.Namespace) -> Optional[DashboardConfig]:
    """
    Build the effective configuration: file (or defaults), then environment,
    then command-line overrides.

    Returns:
        The validated config, or None after printing why it is unusable
    """
    config = None
    if getattr(args, "config", None):
        config = load_config_from_file(Path(args.config))
        if config is None:
            print(f"Error: Could not load config from {args.config}", file=sys.stderr)
            return None

    config = load_config_from_env(base=config or create_default_config())
    if getattr(args, "language", None):
        config.language = args.language

    errors = validate_config(config)
    if errors:
        print("Configuration errors:", file=sys.stderr)
        for error in errors:
            print(f"  - {error}", file=sys.stderr)
        return None
    return config


def create_logger(config: DashboardConfig, verbose: bool = False) -> EventLogger:
    if verbose:
        return EventLogger(output_format=config.logging.output_format, level=LogLevel.DEBUG)
    return EventLogger.from_config(config.logging)


def format_count(value: int) -> str:
    return f"{value:,}"


def render_state_text(
    state: DashboardState,
    language: str,
    limit: Optional[int] = None,
) -> str:
    """Render the dashboard state as a plain-text report."""
    lines = [get_message("cli.title", language), ""]

    names = {country.code: country.name for country in state.countries}
    country_name = names.get(state.selected_country, state.selected_country.upper())
    lines.append(get_message("cli.country", language, country=country_name))

    unbounded = get_message("cli.unbounded", language)
    lines.append(get_message(
        "cli.window",
        language,
        start=state.window.start.isoformat() if state.window.start else unbounded,
        end=state.window.end.isoformat() if state.window.end else unbounded,
    ))

    if state.error:
        lines.append("")
        lines.append(f"! {state.error}")

    lines.append("")
    pie = build_pie_chart(state.stats, language)
    total = sum(pie.data)
    for label, value in zip(pie.labels, pie.data):
        share = f"{value / total * 100:5.1f}%" if total else "  0.0%"
        lines.append(f"  {label:<12} {format_count(value):>16}  {share}")

    series = state.chart_series
    lines.append("")
    if not series.labels:
        lines.append(get_message("cli.no_data", language))
        return "\n".join(lines)

    lines.append(get_message("cli.days", language, count=len(series)))
    chart = build_line_chart(series, language)
    header = f"  {'':<12}" + "".join(f" {dataset.label:>16}" for dataset in chart.datasets)
    lines.append(header)

    rows = list(zip(series.labels, series.cases, series.deaths, series.recovered))
    if limit is not None and limit > 0:
        rows = rows[-limit:]
    for label, cases, deaths, recovered in rows:
        lines.append(
            f"  {label:<12} {format_count(cases):>16} {format_count(deaths):>16} "
            f"{format_count(recovered):>16}"
        )
    return "\n".join(lines)


def render_state_json(state: DashboardState, language: str) -> dict:
    """Render the dashboard state as chart-ready JSON."""
    return {
        "country": state.selected_country,
        "window": {
            "start": state.window.start.isoformat() if state.window.start else None,
            "end": state.window.end.isoformat() if state.window.end else None,
        },
        "stats": {
            "cases": state.stats.cases,
            "deaths": state.stats.deaths,
            "recovered": state.stats.recovered,
        },
        "line_chart": build_line_chart(state.chart_series, language).to_dict(),
        "pie_chart": build_pie_chart(state.stats, language).to_dict(),
        "error": state.error,
    }


async def run_show(
    config: DashboardConfig,
    window: DateWindow,
    as_json: bool = False,
    limit: Optional[int] = None,
    logger: Optional[EventLogger] = None,
) -> int:
    """
    Load the catalog and one country's data, then print the dashboard.

    Returns:
        Exit code (0 on success, 1 if any stage reported an error)
    """
    async with DashboardController(config=config, logger=logger, window=window) as controller:
        await controller.start()
        state = controller.state

    if as_json:
        print(json.dumps(render_state_json(state, config.language), indent=2, ensure_ascii=False))
    else:
        if state.countries and state.selected_country not in {c.code for c in state.countries}:
            print(
                get_message("cli.unknown_country", config.language, code=state.selected_country),
                file=sys.stderr,
            )
        print(render_state_text(state, config.language, limit=limit))

    return 1 if state.error else 0


async def run_countries(
    config: DashboardConfig,
    as_json: bool = False,
    logger: Optional[EventLogger] = None,
) -> int:
    """Print the sorted country catalog."""
    async with ApiClient(timeout=config.http_timeout, logger=logger) as client:
        loader = CountryCatalogLoader(client, config.endpoints.countries_url, logger=logger)
        try:
            countries = await loader.load()
        except FetchError:
            print(get_message("error.fetch_countries", config.language), file=sys.stderr)
            return 1

    if as_json:
        print(json.dumps(
            [{"name": country.name, "code": country.code} for country in countries],
            indent=2,
            ensure_ascii=False,
        ))
    else:
        for country in countries:
            print(f"{country.code}  {country.name}")
        print(get_message("cli.countries_loaded", config.language, count=len(countries)))
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    """Handle the 'show' command."""
    config = resolve_config(args)
    if config is None:
        return 1
    if args.country:
        config.default_country = args.country.strip().lower()

    try:
        window = DateWindow.parse(args.start, args.end)
    except ValidationError as e:
        print(
            get_message("error.invalid_date", config.language, value=e.details["value"]),
            file=sys.stderr,
        )
        return 2

    return asyncio.run(run_show(
        config=config,
        window=window,
        as_json=args.json,
        limit=args.limit,
        logger=create_logger(config, args.verbose),
    ))


def cmd_countries(args: argparse.Namespace) -> int:
    """Handle the 'countries' command."""
    config = resolve_config(args)
    if config is None:
        return 1
    return asyncio.run(run_countries(
        config=config,
        as_json=args.json,
        logger=create_logger(config, args.verbose),
    ))


def cmd_config(args: argparse.Namespace) -> int:
    """Handle the 'config' command."""
    config_path = Path(args.path) if args.path else DEFAULT_CONFIG_PATH

    if args.action == "show":
        config = load_config_from_file(config_path)
        if config is None:
            print(f"No configuration found at: {config_path}")
            print("Use 'config init' to create a default configuration.")
            return 1

        print(f"Configuration from: {config_path}")
        print(json.dumps(config_to_dict(config), indent=2, ensure_ascii=False))
        return 0

    elif args.action == "init":
        if config_path.exists() and not args.force:
            print(f"Configuration already exists at: {config_path}")
            print("Use --force to overwrite.")
            return 1

        config = create_default_config(language=args.language or "en")
        if save_config_to_file(config, config_path):
            print(f"Configuration created at: {config_path}")
            return 0
        print(f"Error: Could not write {config_path}", file=sys.stderr)
        return 1

    elif args.action == "validate":
        config = load_config_from_file(config_path)
        if config is None:
            print(f"Error: Could not load config from {config_path}", file=sys.stderr)
            return 1

        errors = validate_config(config)
        if errors:
            print("Configuration errors:")
            for error in errors:
                print(f"  - {error}")
            return 1

        print(f"Configuration at {config_path} is valid.")
        return 0

    return 1


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config", "-c",
        help="Path to configuration file",
    )
    parser.add_argument(
        "--language", "-l",
        choices=sorted(SUPPORTED_LANGUAGES),
        help="Output language (default: from config, 'en')",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print machine-readable JSON",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging on stderr",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="covid-dashboard",
        description="COVID-19 country statistics and historical trends",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # 'show' command
    show_parser = subparsers.add_parser(
        "show",
        help="Show totals and historical series for a country",
    )
    show_parser.add_argument(
        "country",
        nargs="?",
        help="Country code (default: from config, 'usa')",
    )
    show_parser.add_argument(
        "--start", "-s",
        help="First date to include (YYYY-MM-DD)",
    )
    show_parser.add_argument(
        "--end", "-e",
        help="Last date to include (YYYY-MM-DD)",
    )
    show_parser.add_argument(
        "--limit", "-n",
        type=int,
        help="Only print the last N days of the series",
    )
    _add_common_arguments(show_parser)
    show_parser.set_defaults(func=cmd_show)

    # 'countries' command
    countries_parser = subparsers.add_parser(
        "countries",
        help="List selectable countries",
    )
    _add_common_arguments(countries_parser)
    countries_parser.set_defaults(func=cmd_countries)

    # 'config' command
    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
    )
    config_parser.add_argument(
        "action",
        choices=["show", "init", "validate"],
        help="Configuration action",
    )
    config_parser.add_argument(
        "--path", "-p",
        help="Path to configuration file",
    )
    config_parser.add_argument(
        "--force", "-f",
        action="store_true",
        help="Force overwrite existing configuration",
    )
    config_parser.add_argument(
        "--language", "-l",
        choices=sorted(SUPPORTED_LANGUAGES),
        help="Default language for new configuration",
    )
    config_parser.set_defaults(func=cmd_config)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
