from __future__ import annotations

import asyncio
from datetime import date

import httpx
import pytest

from mawaqit_cli.models import Coordinate
from mawaqit_cli.providers import (
    AlAdhanProvider,
    LocalCalculationProvider,
    MalformedPayload,
    ProviderUnavailable,
    local_date_info,
)
from mawaqit_cli.service import AllProvidersFailed, SmartPrayerTimes, build_monthly_days

from payloads import aladhan_day

CAIRO = (30.0444, 31.2357)


def _february_2024(request: httpx.Request) -> httpx.Response:
    # Every weekday field is wrong on purpose.
    days = [aladhan_day(day, 2, 2024, weekday="Monday") for day in range(1, 30)]
    return httpx.Response(200, json={"code": 200, "status": "OK", "data": days})


def test_leap_february_has_29_days_with_recomputed_names() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return _february_2024(request)

    provider = AlAdhanProvider(transport=httpx.MockTransport(handler))
    service = SmartPrayerTimes([provider])

    days = asyncio.run(service.get_monthly_times(*CAIRO, 2, 2024))

    assert len(days) == 29
    assert len(seen) == 1
    assert seen[0].url.path.endswith("/calendar/2024/2")

    first = days[0]
    assert first.day == "1"
    assert first.day_name_en == "Thursday"
    assert first.day_name_ar == "الخميس"
    assert first.hijri_date == "21 رَجَب"
    assert days[1].day_name_en == "Friday"
    assert days[3].day_name_en == "Sunday"
    assert days[-1].day == "29"
    assert days[-1].day_name_en == "Thursday"

    for day in days:
        assert day.timings.Fajr == "05:15"
        assert all(day.timings.to_dict().values())


def test_monthly_failure_is_raised() -> None:
    provider = AlAdhanProvider(transport=httpx.MockTransport(lambda request: httpx.Response(500)))
    service = SmartPrayerTimes([provider])

    with pytest.raises(AllProvidersFailed):
        asyncio.run(service.get_monthly_times(*CAIRO, 2, 2024))


def test_monthly_uses_next_provider_before_failing() -> None:
    broken = AlAdhanProvider(transport=httpx.MockTransport(lambda request: httpx.Response(502)))
    working = AlAdhanProvider(transport=httpx.MockTransport(_february_2024))
    service = SmartPrayerTimes([broken, working])

    days = asyncio.run(service.get_monthly_times(*CAIRO, 2, 2024))

    assert len(days) == 29


def test_empty_calendar_is_a_failure() -> None:
    provider = AlAdhanProvider(
        transport=httpx.MockTransport(
            lambda request: httpx.Response(200, json={"code": 200, "data": []})
        )
    )
    service = SmartPrayerTimes([provider])

    with pytest.raises(AllProvidersFailed):
        asyncio.run(service.get_monthly_times(*CAIRO, 2, 2024))


def test_invalid_month_is_rejected() -> None:
    with pytest.raises(ValueError):
        asyncio.run(SmartPrayerTimes([]).get_monthly_times(*CAIRO, 13, 2024))


def test_calendar_entry_without_timings_is_malformed() -> None:
    entry = aladhan_day(1, 2, 2024)
    del entry["timings"]

    with pytest.raises(MalformedPayload):
        build_monthly_days([entry], 2, 2024)


def test_local_calculation_covers_the_whole_month() -> None:
    provider = LocalCalculationProvider()

    payloads = asyncio.run(provider.resolve_month(Coordinate(*CAIRO), 2, 2024))
    days = build_monthly_days(payloads, 2, 2024)

    assert len(days) == 29
    assert days[0].day_name_en == "Thursday"
    for day in days:
        times = day.timings
        assert times.Fajr < times.Sunrise < times.Dhuhr < times.Asr < times.Maghrib < times.Isha


def test_hijri_conversion_out_of_range_is_provider_failure() -> None:
    with pytest.raises(ProviderUnavailable):
        local_date_info(date(2090, 1, 1))


def test_month_beyond_hijri_range_raises_all_providers_failed() -> None:
    aladhan = AlAdhanProvider(transport=httpx.MockTransport(lambda request: httpx.Response(503)))
    service = SmartPrayerTimes([aladhan, LocalCalculationProvider()])

    with pytest.raises(AllProvidersFailed):
        asyncio.run(service.get_monthly_times(*CAIRO, 1, 2090))
