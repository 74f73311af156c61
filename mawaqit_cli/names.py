"""Arabic and English name tables shared by the resolver and the renderers."""

from __future__ import annotations

from .models import Language, PrayerName

PRAYER_NAMES_AR: dict[PrayerName, str] = {
    "Fajr": "الفجر",
    "Sunrise": "الشروق",
    "Dhuhr": "الظهر",
    "Asr": "العصر",
    "Maghrib": "المغرب",
    "Isha": "العشاء",
}

# Indexed 0=Sunday..6=Saturday.
DAY_NAMES_EN: tuple[str, ...] = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)
DAY_NAMES_AR: tuple[str, ...] = (
    "الأحد",
    "الإثنين",
    "الثلاثاء",
    "الأربعاء",
    "الخميس",
    "الجمعة",
    "السبت",
)

GREGORIAN_MONTHS_EN: tuple[str, ...] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)
GREGORIAN_MONTHS_AR: tuple[str, ...] = (
    "يناير",
    "فبراير",
    "مارس",
    "أبريل",
    "مايو",
    "يونيو",
    "يوليو",
    "أغسطس",
    "سبتمبر",
    "أكتوبر",
    "نوفمبر",
    "ديسمبر",
)

HIJRI_MONTHS: tuple[tuple[str, str], ...] = (
    ("محرم", "Muharram"),
    ("صفر", "Safar"),
    ("ربيع الأول", "Rabi al-Awwal"),
    ("ربيع الآخر", "Rabi al-Thani"),
    ("جمادى الأولى", "Jumada al-Ula"),
    ("جمادى الآخرة", "Jumada al-Akhirah"),
    ("رجب", "Rajab"),
    ("شعبان", "Shaban"),
    ("رمضان", "Ramadan"),
    ("شوال", "Shawwal"),
    ("ذو القعدة", "Dhul-Qadah"),
    ("ذو الحجة", "Dhul-Hijjah"),
)

AM_PM: dict[Language, tuple[str, str]] = {
    "en": ("AM", "PM"),
    "ar": ("ص", "م"),
}

_ARABIC_BY_ENGLISH_MONTH = dict(zip(GREGORIAN_MONTHS_EN, GREGORIAN_MONTHS_AR))


def arabic_month(month_en: str) -> str:
    return _ARABIC_BY_ENGLISH_MONTH.get(month_en, month_en)


def weekday_index(python_weekday: int) -> int:
    """Map ``date.weekday()`` (0=Monday) onto the Sunday-first tables."""
    return (python_weekday + 1) % 7


def prayer_label(name: PrayerName, language: Language) -> str:
    return PRAYER_NAMES_AR[name] if language == "ar" else name


def month_label(month: int, language: Language) -> str:
    table = GREGORIAN_MONTHS_AR if language == "ar" else GREGORIAN_MONTHS_EN
    return table[month - 1]
