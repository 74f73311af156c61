from __future__ import annotations

from typing import Any


def aladhan_day(
    day: int,
    month: int,
    year: int,
    *,
    fajr: str = "05:15 (EET)",
    weekday: str = "Monday",
) -> dict[str, Any]:
    return {
        "timings": {
            "Fajr": fajr,
            "Sunrise": "06:45 (EET)",
            "Dhuhr": "12:30 (EET)",
            "Asr": "15:45 (EET)",
            "Maghrib": "18:15 (EET)",
            "Isha": "19:45 (EET)",
            "Imsak": "05:05 (EET)",
        },
        "date": {
            "readable": f"{day:02d} Feb {year}",
            "gregorian": {
                "date": f"{day:02d}-{month:02d}-{year}",
                "day": f"{day:02d}",
                "weekday": {"en": weekday},
                "month": {"number": month, "en": "February"},
                "year": str(year),
            },
            "hijri": {
                "date": "21-07-1445",
                "day": "21",
                "weekday": {"en": "Al Khamees", "ar": "الخميس"},
                "month": {"number": 7, "en": "Rajab", "ar": "رَجَب"},
                "year": "1445",
            },
        },
    }
