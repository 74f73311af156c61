from __future__ import annotations

import csv
from datetime import date
from pathlib import Path

from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import PRAYER_NAMES, City, Language, MonthlyDay, ResolvedResult, TimeFormat
from .names import arabic_month, month_label, prayer_label
from .prayer_logic import NextPrayer, convert_to_12_hour, format_countdown

LABELS: dict[Language, dict[str, str]] = {
    "en": {
        "title": "Prayer Times",
        "monthly": "Monthly Prayer Times",
        "prayer": "Prayer",
        "time": "Time",
        "day": "Day",
        "hijri": "Hijri Date",
        "source": "Source",
        "cached": "(cached)",
        "fallback": "(fallback)",
        "next": "Next Prayer",
        "at": "At",
        "remaining": "Remaining",
        "tomorrow": "tomorrow",
    },
    "ar": {
        "title": "مواقيت الصلاة",
        "monthly": "جدول مواقيت الصلاة الشهري",
        "prayer": "الصلاة",
        "time": "الوقت",
        "day": "اليوم",
        "hijri": "التاريخ الهجري",
        "source": "المصدر",
        "cached": "(مخزن)",
        "fallback": "(افتراضي)",
        "next": "الصلاة القادمة",
        "at": "الموعد",
        "remaining": "الوقت المتبقي",
        "tomorrow": "غداً",
    },
}


def format_time_for_display(value: str, time_format: TimeFormat, language: Language) -> str:
    if time_format == "24h":
        return value
    return convert_to_12_hour(value, language)


def source_label(result: ResolvedResult, language: Language, cached: bool = False) -> str:
    labels = LABELS[language]
    label = result.source
    if result.is_default:
        label += f" {labels['fallback']}"
    elif cached:
        label += f" {labels['cached']}"
    return label


def date_line(result: ResolvedResult, language: Language) -> str:
    gregorian = result.date.gregorian
    month = arabic_month(gregorian.month_en) if language == "ar" else gregorian.month_en
    line = f"{gregorian.day} {month} {gregorian.year}"
    hijri = result.date.hijri
    if not hijri.day:
        return line
    hijri_month = hijri.month_ar if language == "ar" else hijri.month_en
    return f"{line} | {hijri.day} {hijri_month} {hijri.year}"


def build_today_panel(
    city: City,
    result: ResolvedResult,
    next_prayer: NextPrayer,
    language: Language,
    time_format: TimeFormat,
    cached: bool = False,
) -> Panel:
    labels = LABELS[language]

    table = Table(show_header=True, header_style="bold cyan", expand=False)
    table.add_column(labels["prayer"], style="bold")
    table.add_column(labels["time"], justify="right")

    for name in PRAYER_NAMES:
        style = "bold green" if name == next_prayer.name else None
        table.add_row(
            prayer_label(name, language),
            format_time_for_display(result.times.get(name), time_format, language),
            style=style,
        )

    body = Group(
        Text(city.display_name(language), style="bold"),
        Text(date_line(result, language), style="cyan"),
        Text(f"{labels['source']}: {source_label(result, language, cached)}", style="dim"),
        table,
        _next_line(next_prayer, language, time_format),
    )
    return Panel(body, title=labels["title"], border_style="green")


def _next_line(next_prayer: NextPrayer, language: Language, time_format: TimeFormat) -> Text:
    labels = LABELS[language]
    name = prayer_label(next_prayer.name, language)
    if next_prayer.is_tomorrow:
        name += f" ({labels['tomorrow']})"
    at = format_time_for_display(next_prayer.time, time_format, language)
    return Text(
        f"{labels['next']}: {name} | {at} | {labels['remaining']}: "
        f"{format_countdown(next_prayer.remaining_seconds)}",
        style="bold yellow",
    )


def build_next_panel(
    city: City,
    next_prayer: NextPrayer,
    language: Language,
    time_format: TimeFormat,
    source: str,
) -> Panel:
    labels = LABELS[language]
    name = prayer_label(next_prayer.name, language)
    if next_prayer.is_tomorrow:
        name += f" ({labels['tomorrow']})"

    body = Group(
        Text(city.display_name(language), style="cyan"),
        Text(f"{labels['source']}: {source}", style="white"),
        Text(f"{labels['next']}: {name}", style="bold green"),
        Text(
            f"{labels['at']}: {format_time_for_display(next_prayer.time, time_format, language)}",
            style="bold",
        ),
        Text(f"{labels['remaining']}: {next_prayer.countdown}", style="bold yellow"),
    )
    return Panel(body, title=labels["next"], border_style="green")


def build_monthly_table(
    days: list[MonthlyDay],
    city: City,
    month: int,
    year: int,
    language: Language,
    time_format: TimeFormat,
    today: date | None = None,
) -> Table:
    labels = LABELS[language]
    table = Table(
        title=f"{labels['monthly']} | {month_label(month, language)} {year} | "
        f"{city.display_name(language)}",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column(labels["day"], style="bold")
    table.add_column(labels["hijri"])
    for name in PRAYER_NAMES:
        table.add_column(prayer_label(name, language), justify="right")

    for day in days:
        is_today = (
            today is not None
            and (today.year, today.month, today.day) == (year, month, int(day.day))
        )
        table.add_row(
            _day_label(day, language),
            day.hijri_date,
            *(
                format_time_for_display(day.timings.get(name), time_format, language)
                for name in PRAYER_NAMES
            ),
            style="bold green" if is_today else None,
        )
    return table


def _day_label(day: MonthlyDay, language: Language) -> str:
    name = day.day_name_ar if language == "ar" else day.day_name_en
    return f"{name} {day.day}"


def export_monthly_csv(
    days: list[MonthlyDay],
    path: Path,
    month: int,
    language: Language,
    time_format: TimeFormat,
) -> None:
    labels = LABELS[language]
    month_name = month_label(month, language)

    path.parent.mkdir(parents=True, exist_ok=True)
    # BOM so spreadsheet tools pick up the Arabic text.
    with path.open("w", encoding="utf-8-sig", newline="") as handle:
        writer = csv.writer(handle)
        writer.writerow(
            [labels["day"], labels["hijri"]]
            + [prayer_label(name, language) for name in PRAYER_NAMES]
        )
        for day in days:
            writer.writerow(
                [f"{_day_label(day, language)} {month_name}", day.hijri_date]
                + [
                    format_time_for_display(day.timings.get(name), time_format, language)
                    for name in PRAYER_NAMES
                ]
            )
