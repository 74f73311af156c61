from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Any, Callable, Sequence

from .cache import PrayerTimesCache, cache_key
from .models import (
    DEFAULT_SOURCE,
    Coordinate,
    DateInfo,
    HijriDate,
    MonthlyDay,
    PrayerTimes,
    ResolvedResult,
)
from .names import DAY_NAMES_AR, DAY_NAMES_EN, weekday_index
from .providers import (
    MalformedPayload,
    PrayerTimesProvider,
    ProviderUnavailable,
    gregorian_date,
    local_date_info,
    parse_date_info,
    parse_timings,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 6.0

DEFAULT_TIMES = PrayerTimes(
    Fajr="05:15",
    Sunrise="06:45",
    Dhuhr="12:30",
    Asr="15:45",
    Maghrib="18:15",
    Isha="19:45",
)


class AllProvidersFailed(RuntimeError):
    pass


class SmartPrayerTimes:
    """Resolves prayer times through an ordered chain of providers.

    The single-day path always returns something usable: when every provider
    fails it answers with ``DEFAULT_TIMES`` and ``source == "default"``. The
    monthly path raises ``AllProvidersFailed`` instead of inventing a table.
    """

    def __init__(
        self,
        providers: Sequence[PrayerTimesProvider],
        cache: PrayerTimesCache | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.providers = list(providers)
        self.cache = cache
        self.timeout = timeout
        self._today = today
        self._in_flight: dict[str, asyncio.Task[ResolvedResult]] = {}

    async def get_prayer_times(self, lat: float, lon: float) -> ResolvedResult:
        coordinate = Coordinate(lat, lon)
        day = self._today()

        for provider in self.providers:
            try:
                result = await asyncio.wait_for(
                    provider.resolve_day(coordinate, day), self.timeout
                )
            except asyncio.TimeoutError:
                logger.warning("%s timed out after %.1fs", provider.name, self.timeout)
                continue
            except ProviderUnavailable as exc:
                logger.warning("%s failed: %s", provider.name, exc)
                continue

            logger.debug("Resolved prayer times for %s,%s from %s", lat, lon, provider.name)
            return result

        logger.warning("All prayer time providers failed, using default times")
        return ResolvedResult(
            times=PrayerTimes.from_dict(DEFAULT_TIMES.to_dict()),
            date=_default_date_info(day),
            source=DEFAULT_SOURCE,
        )

    async def get_cached_prayer_times(self, lat: float, lon: float) -> ResolvedResult:
        if self.cache is not None:
            cached = self.cache.get(lat, lon)
            if cached is not None:
                return cached
            key = self.cache.key_for(lat, lon)
        else:
            key = cache_key(lat, lon, self._today())

        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._resolve_and_store(lat, lon))
            self._in_flight[key] = task
            task.add_done_callback(lambda _: self._in_flight.pop(key, None))
        return await asyncio.shield(task)

    async def _resolve_and_store(self, lat: float, lon: float) -> ResolvedResult:
        result = await self.get_prayer_times(lat, lon)
        # Default times are not cached so the next poll retries the providers.
        if self.cache is not None and not result.is_default:
            self.cache.set(lat, lon, result)
        return result

    async def get_monthly_times(
        self, lat: float, lon: float, month: int, year: int
    ) -> list[MonthlyDay]:
        if not 1 <= month <= 12:
            raise ValueError(f"month must be between 1 and 12, got {month}")

        coordinate = Coordinate(lat, lon)
        last_error: Exception | None = None

        for provider in self.providers:
            try:
                payloads = await asyncio.wait_for(
                    provider.resolve_month(coordinate, month, year), self.timeout
                )
                days = build_monthly_days(payloads, month, year)
            except asyncio.TimeoutError as exc:
                logger.warning("%s timed out on the monthly calendar", provider.name)
                last_error = exc
                continue
            except ProviderUnavailable as exc:
                logger.warning("%s failed on the monthly calendar: %s", provider.name, exc)
                last_error = exc
                continue

            logger.debug("Resolved %d days for %02d/%d from %s", len(days), month, year, provider.name)
            return days

        raise AllProvidersFailed(
            f"Could not load prayer times for {month:02d}/{year}"
        ) from last_error


def _default_date_info(day: date) -> DateInfo:
    try:
        return local_date_info(day)
    except ProviderUnavailable:
        # Outside the Hijri converter's range only the Gregorian date is known.
        return DateInfo(hijri=HijriDate("", "", "", ""), gregorian=gregorian_date(day))


def build_monthly_days(payloads: Any, month: int, year: int) -> list[MonthlyDay]:
    if not isinstance(payloads, list) or not payloads:
        raise MalformedPayload("Empty monthly calendar")

    days: list[MonthlyDay] = []
    for entry in payloads:
        if not isinstance(entry, dict):
            raise MalformedPayload("Calendar entry must be an object")

        date_info = parse_date_info(entry.get("date"))
        gregorian = date_info.gregorian
        try:
            # Weekday is recomputed here rather than read from the payload.
            day = date(
                int(gregorian.year or year),
                gregorian.month_number or month,
                int(gregorian.day),
            )
        except ValueError as exc:
            raise MalformedPayload("Invalid Gregorian date in calendar") from exc

        index = weekday_index(day.weekday())
        days.append(
            MonthlyDay(
                day=str(day.day),
                hijri_date=f"{date_info.hijri.day} {date_info.hijri.month_ar}",
                day_name_en=DAY_NAMES_EN[index],
                day_name_ar=DAY_NAMES_AR[index],
                timings=parse_timings(entry.get("timings")),
            )
        )
    return days
