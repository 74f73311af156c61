from __future__ import annotations

import asyncio
import calendar
import logging
import re
from abc import ABC, abstractmethod
from datetime import date, datetime, time
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import httpx
from hijridate import Gregorian
from pyIslam.praytimes import Prayer, PrayerConf

from .models import (
    PRAYER_NAMES,
    Coordinate,
    DateInfo,
    GregorianDate,
    HijriDate,
    PrayerTimes,
    ResolvedResult,
)
from .names import GREGORIAN_MONTHS_EN, HIJRI_MONTHS

logger = logging.getLogger(__name__)

ALADHAN_BASE_URL = "https://api.aladhan.com/v1"
# Egyptian General Authority of Survey.
ALADHAN_METHOD = 5
DEFAULT_TIME_ZONE = "Africa/Cairo"
USER_AGENT = "Mawaqit CLI"


class ProviderUnavailable(RuntimeError):
    pass


class MalformedPayload(ProviderUnavailable):
    pass


def format_time_to_hhmm(value: str) -> str:
    match = re.search(r"(\d{1,2}):(\d{2})", value)
    if not match:
        return value
    hours = int(match.group(1))
    minutes = int(match.group(2))
    return f"{hours:02}:{minutes:02}"


def _require_time_field(payload: dict[str, Any], key: str) -> str:
    raw = payload.get(key)
    if not isinstance(raw, str):
        raise MalformedPayload(f"Missing time field: {key}")

    hhmm = format_time_to_hhmm(raw)
    if not re.fullmatch(r"\d{2}:\d{2}", hhmm):
        raise MalformedPayload(f"Invalid time format for {key}")
    return hhmm


def parse_timings(payload: Any) -> PrayerTimes:
    if not isinstance(payload, dict):
        raise MalformedPayload("Timings must be an object")
    return PrayerTimes(**{name: _require_time_field(payload, name) for name in PRAYER_NAMES})


def parse_date_info(payload: Any) -> DateInfo:
    try:
        hijri = payload["hijri"]
        gregorian = payload["gregorian"]
        month_number = gregorian["month"].get("number")
        return DateInfo(
            hijri=HijriDate(
                day=str(int(hijri["day"])),
                month_ar=str(hijri["month"]["ar"]),
                month_en=str(hijri["month"]["en"]),
                year=str(hijri["year"]),
            ),
            gregorian=GregorianDate(
                day=str(int(gregorian["day"])),
                month_en=str(gregorian["month"]["en"]),
                year=str(gregorian["year"]),
                month_number=int(month_number) if month_number is not None else None,
            ),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise MalformedPayload("Unexpected date format") from exc


def gregorian_date(day: date) -> GregorianDate:
    return GregorianDate(
        day=str(day.day),
        month_en=GREGORIAN_MONTHS_EN[day.month - 1],
        year=str(day.year),
        month_number=day.month,
    )


def local_date_info(day: date) -> DateInfo:
    try:
        hijri = Gregorian(day.year, day.month, day.day).to_hijri()
    except OverflowError as exc:
        raise ProviderUnavailable(f"No Hijri conversion for {day.isoformat()}") from exc
    month_ar, month_en = HIJRI_MONTHS[hijri.month - 1]
    return DateInfo(
        hijri=HijriDate(
            day=str(hijri.day),
            month_ar=month_ar,
            month_en=month_en,
            year=str(hijri.year),
        ),
        gregorian=gregorian_date(day),
    )


class PrayerTimesProvider(ABC):
    """One source of prayer times in the fallback chain."""

    name: str

    @abstractmethod
    async def resolve_day(self, coordinate: Coordinate, day: date) -> ResolvedResult:
        """Resolve times and dates for a single calendar day."""

    @abstractmethod
    async def resolve_month(
        self, coordinate: Coordinate, month: int, year: int
    ) -> list[dict[str, Any]]:
        """Return one raw ``{"timings": ..., "date": ...}`` payload per day."""


class AlAdhanProvider(PrayerTimesProvider):
    name = "AlAdhan API"

    def __init__(
        self,
        base_url: str = ALADHAN_BASE_URL,
        method: int = ALADHAN_METHOD,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.method = method
        self._transport = transport
        self._timeout = timeout

    def _params(self, coordinate: Coordinate) -> dict[str, str]:
        return {
            "latitude": str(coordinate.latitude),
            "longitude": str(coordinate.longitude),
            "method": str(self.method),
        }

    async def _get_data(self, path: str, coordinate: Coordinate) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug("GET %s", url)
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                headers={"User-Agent": USER_AGENT},
                transport=self._transport,
            ) as client:
                response = await client.get(url, params=self._params(coordinate))
        except httpx.HTTPError as exc:
            raise ProviderUnavailable(f"Request to {url} failed") from exc

        if not response.is_success:
            raise ProviderUnavailable(f"AlAdhan returned HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise MalformedPayload("Invalid response from AlAdhan") from exc

        if not isinstance(payload, dict) or payload.get("code") != 200:
            raise MalformedPayload("Unexpected response envelope from AlAdhan")
        return payload.get("data")

    async def resolve_day(self, coordinate: Coordinate, day: date) -> ResolvedResult:
        data = await self._get_data(f"/timings/{day.strftime('%d-%m-%Y')}", coordinate)
        if not isinstance(data, dict):
            raise MalformedPayload("Unexpected response format from AlAdhan")

        return ResolvedResult(
            times=parse_timings(data.get("timings")),
            date=parse_date_info(data.get("date")),
            source=self.name,
        )

    async def resolve_month(
        self, coordinate: Coordinate, month: int, year: int
    ) -> list[dict[str, Any]]:
        data = await self._get_data(f"/calendar/{year}/{month}", coordinate)
        if not isinstance(data, list):
            raise MalformedPayload("Unexpected calendar format from AlAdhan")
        return data


def _format_calculated_time(value: time | datetime | str) -> str:
    if isinstance(value, datetime):
        value = value.time()
    if isinstance(value, time):
        return value.strftime("%H:%M")
    return format_time_to_hhmm(str(value))


class LocalCalculationProvider(PrayerTimesProvider):
    """Offline astronomical calculation (Egyptian angles, Shafi Asr)."""

    name = "Local calculation (Egyptian method)"

    # pyIslam method and madhab identifiers.
    ANGLE_REF = 3
    ASR_MADHAB = 1

    def __init__(self, time_zone: str = DEFAULT_TIME_ZONE) -> None:
        self.time_zone = time_zone

    def _utc_offset_hours(self, day: date) -> float:
        try:
            zone = ZoneInfo(self.time_zone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ProviderUnavailable(f"Unknown time zone: {self.time_zone}") from exc
        noon = datetime.combine(day, time(12), tzinfo=zone)
        offset = noon.utcoffset()
        return offset.total_seconds() / 3600 if offset else 0.0

    def _timings(self, coordinate: Coordinate, day: date) -> dict[str, str]:
        try:
            conf = PrayerConf(
                longitude=coordinate.longitude,
                latitude=coordinate.latitude,
                timezone=self._utc_offset_hours(day),
                angle_ref=self.ANGLE_REF,
                asr_madhab=self.ASR_MADHAB,
            )
            prayer = Prayer(conf, datetime(day.year, day.month, day.day))
            return {
                "Fajr": _format_calculated_time(prayer.fajr_time()),
                "Sunrise": _format_calculated_time(prayer.sherook_time()),
                "Dhuhr": _format_calculated_time(prayer.dohr_time()),
                "Asr": _format_calculated_time(prayer.asr_time()),
                "Maghrib": _format_calculated_time(prayer.maghreb_time()),
                "Isha": _format_calculated_time(prayer.ishaa_time()),
            }
        except (ArithmeticError, ValueError) as exc:
            raise ProviderUnavailable("Local calculation failed") from exc

    def _day_result(self, coordinate: Coordinate, day: date) -> ResolvedResult:
        return ResolvedResult(
            times=parse_timings(self._timings(coordinate, day)),
            date=local_date_info(day),
            source=self.name,
        )

    def _month_payloads(
        self, coordinate: Coordinate, month: int, year: int
    ) -> list[dict[str, Any]]:
        _, days_in_month = calendar.monthrange(year, month)
        payloads: list[dict[str, Any]] = []
        for day_number in range(1, days_in_month + 1):
            day = date(year, month, day_number)
            payloads.append(
                {
                    "timings": self._timings(coordinate, day),
                    "date": local_date_info(day).to_dict(),
                }
            )
        return payloads

    # Calculation runs in a worker thread, off the event loop.
    async def resolve_day(self, coordinate: Coordinate, day: date) -> ResolvedResult:
        return await asyncio.to_thread(self._day_result, coordinate, day)

    async def resolve_month(
        self, coordinate: Coordinate, month: int, year: int
    ) -> list[dict[str, Any]]:
        return await asyncio.to_thread(self._month_payloads, coordinate, month, year)
