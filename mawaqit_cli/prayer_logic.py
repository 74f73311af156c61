from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from zoneinfo import ZoneInfo

from .models import PRAYER_NAMES, Language, PrayerName, PrayerTimes
from .names import AM_PM

SECONDS_PER_DAY = 24 * 60 * 60


@dataclass
class NextPrayer:
    name: PrayerName
    time: str
    remaining_seconds: int
    is_tomorrow: bool

    @property
    def countdown(self) -> str:
        return format_countdown(self.remaining_seconds)


def get_time_zone_now(time_zone: str | None) -> datetime:
    if time_zone:
        return datetime.now(ZoneInfo(time_zone))
    return datetime.now().astimezone()


def to_minutes(value: str) -> int:
    hours, minutes = [int(part) for part in value.split(":")[:2]]
    return hours * 60 + minutes


def candidate_prayers(include_sunrise: bool = False) -> tuple[PrayerName, ...]:
    if include_sunrise:
        return PRAYER_NAMES
    return tuple(name for name in PRAYER_NAMES if name != "Sunrise")


def get_next_prayer(
    prayer_times: PrayerTimes,
    now: datetime,
    include_sunrise: bool = False,
) -> NextPrayer:
    now_seconds = now.hour * 3600 + now.minute * 60 + now.second

    for name in candidate_prayers(include_sunrise):
        prayer_seconds = to_minutes(prayer_times.get(name)) * 60
        if prayer_seconds > now_seconds:
            return NextPrayer(
                name=name,
                time=prayer_times.get(name),
                remaining_seconds=prayer_seconds - now_seconds,
                is_tomorrow=False,
            )

    fajr_seconds = to_minutes(prayer_times.Fajr) * 60
    return NextPrayer(
        name="Fajr",
        time=prayer_times.Fajr,
        remaining_seconds=(SECONDS_PER_DAY - now_seconds) + fajr_seconds,
        is_tomorrow=True,
    )


def format_countdown(seconds: int) -> str:
    if seconds <= 0:
        return "00:00:00"

    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60
    return f"{hours:02}:{minutes:02}:{secs:02}"


def format_short(seconds: int) -> str:
    """Low-frequency badge variant, e.g. ``2:45``."""
    total_minutes = max(0, seconds) // 60
    return f"{total_minutes // 60}:{total_minutes % 60:02}"


def convert_to_12_hour(value: str, language: Language = "en") -> str:
    hours, minutes = value.split(":")[:2]
    hour = int(hours)
    am, pm = AM_PM[language]
    period = pm if hour >= 12 else am
    hour12 = hour % 12 or 12
    return f"{hour12:02}:{minutes} {period}"
