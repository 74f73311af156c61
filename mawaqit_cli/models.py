from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

Language = Literal["ar", "en"]
TimeFormat = Literal["12h", "24h"]
PrayerName = Literal["Fajr", "Sunrise", "Dhuhr", "Asr", "Maghrib", "Isha"]

PRAYER_NAMES: tuple[PrayerName, ...] = (
    "Fajr",
    "Sunrise",
    "Dhuhr",
    "Asr",
    "Maghrib",
    "Isha",
)

DEFAULT_SOURCE = "default"


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float


@dataclass
class City:
    name_ar: str
    name_en: str
    lat: float
    lon: float

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "City":
        return cls(
            name_ar=str(data["name"]),
            name_en=str(data["nameEn"]),
            lat=float(data["lat"]),
            lon=float(data["lon"]),
        )

    def display_name(self, language: Language) -> str:
        return self.name_ar if language == "ar" else self.name_en


@dataclass
class PrayerTimes:
    Fajr: str
    Sunrise: str
    Dhuhr: str
    Asr: str
    Maghrib: str
    Isha: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PrayerTimes":
        return cls(
            Fajr=str(data["Fajr"]),
            Sunrise=str(data["Sunrise"]),
            Dhuhr=str(data["Dhuhr"]),
            Asr=str(data["Asr"]),
            Maghrib=str(data["Maghrib"]),
            Isha=str(data["Isha"]),
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "Fajr": self.Fajr,
            "Sunrise": self.Sunrise,
            "Dhuhr": self.Dhuhr,
            "Asr": self.Asr,
            "Maghrib": self.Maghrib,
            "Isha": self.Isha,
        }

    def get(self, prayer: PrayerName) -> str:
        return getattr(self, prayer)


@dataclass
class HijriDate:
    day: str
    month_ar: str
    month_en: str
    year: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "day": self.day,
            "month": {"ar": self.month_ar, "en": self.month_en},
            "year": self.year,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HijriDate":
        return cls(
            day=str(data["day"]),
            month_ar=str(data["month"]["ar"]),
            month_en=str(data["month"]["en"]),
            year=str(data["year"]),
        )


@dataclass
class GregorianDate:
    day: str
    month_en: str
    year: str
    month_number: int | None = None

    def to_dict(self) -> dict[str, Any]:
        month: dict[str, Any] = {"en": self.month_en}
        if self.month_number is not None:
            month["number"] = self.month_number
        return {"day": self.day, "month": month, "year": self.year}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GregorianDate":
        number = data["month"].get("number")
        return cls(
            day=str(data["day"]),
            month_en=str(data["month"]["en"]),
            year=str(data["year"]),
            month_number=int(number) if number is not None else None,
        )


@dataclass
class DateInfo:
    hijri: HijriDate
    gregorian: GregorianDate

    def to_dict(self) -> dict[str, Any]:
        return {"hijri": self.hijri.to_dict(), "gregorian": self.gregorian.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DateInfo":
        return cls(
            hijri=HijriDate.from_dict(data["hijri"]),
            gregorian=GregorianDate.from_dict(data["gregorian"]),
        )


@dataclass
class ResolvedResult:
    times: PrayerTimes
    date: DateInfo
    source: str

    @property
    def is_default(self) -> bool:
        return self.source == DEFAULT_SOURCE

    def to_dict(self) -> dict[str, Any]:
        return {
            "times": self.times.to_dict(),
            "date": self.date.to_dict(),
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ResolvedResult":
        return cls(
            times=PrayerTimes.from_dict(data["times"]),
            date=DateInfo.from_dict(data["date"]),
            source=str(data["source"]),
        )


@dataclass
class MonthlyDay:
    day: str
    hijri_date: str
    day_name_en: str
    day_name_ar: str
    timings: PrayerTimes
