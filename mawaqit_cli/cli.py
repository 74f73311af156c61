from __future__ import annotations

import asyncio
import json
import logging
import time
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.live import Live
from rich.logging import RichHandler
from rich.table import Table

from . import __version__
from .cache import JsonFileStore, PrayerTimesCache
from .cities import find_city, get_cities
from .config import CACHE_PATH, CONFIG_PATH, Config, load_config, save_config
from .models import City, Language, TimeFormat
from .output import build_monthly_table, build_next_panel, build_today_panel, export_monthly_csv, source_label
from .prayer_logic import get_next_prayer, get_time_zone_now
from .providers import AlAdhanProvider, LocalCalculationProvider
from .service import AllProvidersFailed, SmartPrayerTimes

CACHE_MAX_ENTRIES = 200
REFRESH_INTERVAL_SEC = 60 * 60

app = typer.Typer(
    help="Daily and monthly prayer times for Egyptian cities.",
    no_args_is_help=False,
    invoke_without_command=True,
    add_completion=True,
)
console = Console()
err_console = Console(stderr=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def build_service(config: Config) -> SmartPrayerTimes:
    # "Today" and cache keys follow the configured zone, not the host's.
    def _now() -> datetime:
        return get_time_zone_now(config.time_zone)

    cache = PrayerTimesCache(
        store=JsonFileStore(CACHE_PATH),
        ttl=timedelta(minutes=config.cache_ttl_minutes),
        max_entries=CACHE_MAX_ENTRIES,
        clock=_now,
    )
    providers = [
        AlAdhanProvider(base_url=config.aladhan_base_url),
        LocalCalculationProvider(time_zone=config.time_zone),
    ]
    return SmartPrayerTimes(
        providers,
        cache=cache,
        timeout=config.provider_timeout,
        today=lambda: _now().date(),
    )


def _validate_language(value: str) -> Language:
    if value not in ("ar", "en"):
        raise typer.BadParameter("language must be either 'ar' or 'en'")
    return value  # type: ignore[return-value]


def _validate_time_format(value: str) -> TimeFormat:
    if value not in ("12h", "24h"):
        raise typer.BadParameter("time format must be either '12h' or '24h'")
    return value  # type: ignore[return-value]


def _validate_city(value: str) -> City:
    city = find_city(value)
    if city is None:
        raise typer.BadParameter(f"unknown city '{value}', see 'mawaqit cities'")
    return city


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"mawaqit-cli {__version__}")
        raise typer.Exit()


def _selected_city(ctx: typer.Context, config: Config) -> City:
    override = (ctx.obj or {}).get("city")
    return _validate_city(override) if override else config.resolve_city()


def _print_config(config: Config) -> None:
    console.print_json(json.dumps(config.to_dict(), ensure_ascii=False, indent=2))
    console.print(f"[dim]Config path:[/dim] {CONFIG_PATH}")


def _show_today(city: City, config: Config) -> None:
    service = build_service(config)

    assert service.cache is not None
    result = service.cache.get(city.lat, city.lon)
    cached = result is not None
    if result is None:
        result = asyncio.run(service.get_cached_prayer_times(city.lat, city.lon))

    next_prayer = get_next_prayer(
        result.times,
        get_time_zone_now(config.time_zone),
        include_sunrise=config.include_sunrise,
    )
    console.print(
        build_today_panel(
            city=city,
            result=result,
            next_prayer=next_prayer,
            language=config.language,
            time_format=config.time_format,
            cached=cached,
        )
    )


@app.callback(invoke_without_command=True)
def root(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    city: Optional[str] = typer.Option(
        None,
        "--city",
        help="City name (Arabic or English), overrides the configured city.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Show today's prayer times."""
    _configure_logging(verbose)
    ctx.obj = {"city": city}

    if ctx.invoked_subcommand is None:
        config = load_config()
        _show_today(_selected_city(ctx, config), config)


@app.command("next")
def next_command(
    ctx: typer.Context,
    once: bool = typer.Option(False, "--once", help="Show next prayer once and exit."),
) -> None:
    """Show next prayer and a live countdown."""
    config = load_config()
    city = _selected_city(ctx, config)
    service = build_service(config)

    result = asyncio.run(service.get_cached_prayer_times(city.lat, city.lon))
    fetched_at = time.monotonic()

    def _current_panel() -> Any:
        next_prayer = get_next_prayer(
            result.times,
            get_time_zone_now(config.time_zone),
            include_sunrise=config.include_sunrise,
        )
        return build_next_panel(
            city=city,
            next_prayer=next_prayer,
            language=config.language,
            time_format=config.time_format,
            source=source_label(result, config.language),
        )

    if once:
        console.print(_current_panel())
        return

    try:
        with Live(_current_panel(), console=console, refresh_per_second=4) as live:
            while True:
                next_prayer = get_next_prayer(
                    result.times,
                    get_time_zone_now(config.time_zone),
                    include_sunrise=config.include_sunrise,
                )
                stale = time.monotonic() - fetched_at >= REFRESH_INTERVAL_SEC
                if stale or next_prayer.remaining_seconds <= 1:
                    result = asyncio.run(service.get_cached_prayer_times(city.lat, city.lon))
                    fetched_at = time.monotonic()

                live.update(_current_panel())
                time.sleep(1)
    except KeyboardInterrupt:
        console.print("\n[dim]Stopped.[/dim]")


@app.command("month")
def month_command(
    ctx: typer.Context,
    month: Optional[int] = typer.Option(None, "--month", min=1, max=12),
    year: Optional[int] = typer.Option(None, "--year", min=1900, max=2100),
    csv_path: Optional[Path] = typer.Option(
        None,
        "--csv",
        help="Also export the table to a CSV file.",
    ),
) -> None:
    """Show the monthly prayer times table."""
    config = load_config()
    city = _selected_city(ctx, config)
    service = build_service(config)

    today = get_time_zone_now(config.time_zone).date()
    month = month or today.month
    year = year or today.year

    try:
        days = asyncio.run(service.get_monthly_times(city.lat, city.lon, month, year))
    except AllProvidersFailed as exc:
        console.print(f"[red]{exc}[/red]")
        console.print("[dim]Run the command again to retry.[/dim]")
        raise typer.Exit(code=1)

    console.print(
        build_monthly_table(
            days,
            city=city,
            month=month,
            year=year,
            language=config.language,
            time_format=config.time_format,
            today=today,
        )
    )

    if csv_path is not None:
        export_monthly_csv(days, csv_path, month, config.language, config.time_format)
        console.print(f"[green]Exported to[/green] {csv_path}")


@app.command("cities")
def cities_command() -> None:
    """List the built-in city directory."""
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("City")
    table.add_column("المدينة")
    table.add_column("Lat", justify="right")
    table.add_column("Lon", justify="right")

    for city in get_cities():
        table.add_row(city.name_en, city.name_ar, f"{city.lat:.4f}", f"{city.lon:.4f}")
    console.print(table)


@app.command("config")
def config_command(
    show: bool = typer.Option(
        False, "--show", help="Print current configuration and ignore other flags."
    ),
    city: Optional[str] = typer.Option(None, "--city"),
    language: Optional[str] = typer.Option(None, "--language", help="ar or en."),
    time_format: Optional[str] = typer.Option(
        None,
        "--time-format",
        help="Display format: 12h or 24h.",
    ),
    include_sunrise: Optional[bool] = typer.Option(
        None,
        "--include-sunrise/--exclude-sunrise",
        help="Whether Sunrise counts as the next prayer.",
    ),
) -> None:
    """Set city, language, time format and next-prayer behaviour."""
    config = load_config()

    has_update_flags = any(
        value is not None for value in (city, language, time_format, include_sunrise)
    )
    if show or not has_update_flags:
        _print_config(config)
        return

    if city is not None:
        config.city = _validate_city(city).name_en

    if language is not None:
        config.language = _validate_language(language)

    if time_format is not None:
        config.time_format = _validate_time_format(time_format)

    if include_sunrise is not None:
        config.include_sunrise = include_sunrise

    save_config(config)
    console.print("[green]Configuration saved.[/green]")
    _print_config(config)


if __name__ == "__main__":
    app()
