from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .cities import find_city, get_default_city
from .models import City, Language, TimeFormat
from .providers import ALADHAN_BASE_URL, DEFAULT_TIME_ZONE

CONFIG_DIR = Path(os.environ.get("MAWAQIT_CONFIG_DIR", Path.home() / ".config" / "mawaqit"))
CONFIG_PATH = CONFIG_DIR / "config.json"
CACHE_PATH = Path.home() / ".cache" / "mawaqit" / "prayer_cache.json"

DEFAULT_TTL_MINUTES = 30
DEFAULT_PROVIDER_TIMEOUT = 6.0


@dataclass
class Config:
    city: str = "Cairo"
    language: Language = "ar"
    time_format: TimeFormat = "12h"
    include_sunrise: bool = False
    cache_ttl_minutes: int = DEFAULT_TTL_MINUTES
    provider_timeout: float = DEFAULT_PROVIDER_TIMEOUT
    aladhan_base_url: str = ALADHAN_BASE_URL
    time_zone: str = DEFAULT_TIME_ZONE

    def to_dict(self) -> dict[str, Any]:
        return {
            "city": self.city,
            "language": self.language,
            "time_format": self.time_format,
            "include_sunrise": self.include_sunrise,
            "cache_ttl_minutes": self.cache_ttl_minutes,
            "provider_timeout": self.provider_timeout,
            "aladhan_base_url": self.aladhan_base_url,
            "time_zone": self.time_zone,
        }

    def resolve_city(self) -> City:
        return find_city(self.city) or get_default_city()


def _sanitize_city(value: Any) -> str:
    if isinstance(value, str) and find_city(value):
        return value
    return get_default_city().name_en


def _sanitize_language(value: Any) -> Language:
    if value in ("ar", "en"):
        return cast(Language, value)
    return "ar"


def _sanitize_time_format(value: Any) -> TimeFormat:
    if value in ("12h", "24h"):
        return cast(TimeFormat, value)
    return "12h"


def _sanitize_positive_int(value: Any, default: int) -> int:
    if isinstance(value, int) and not isinstance(value, bool) and value > 0:
        return value
    return default


def _sanitize_positive_float(value: Any, default: float) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0:
        return float(value)
    return default


def _sanitize_str(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def _sanitize_time_zone(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        return DEFAULT_TIME_ZONE
    try:
        ZoneInfo(value.strip())
    except (ZoneInfoNotFoundError, ValueError):
        return DEFAULT_TIME_ZONE
    return value.strip()


def default_config() -> Config:
    return Config()


def load_config() -> Config:
    if not CONFIG_PATH.exists():
        config = default_config()
        save_config(config)
        return config

    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        config = default_config()
        save_config(config)
        return config

    if not isinstance(data, dict):
        return default_config()

    return Config(
        city=_sanitize_city(data.get("city")),
        language=_sanitize_language(data.get("language")),
        time_format=_sanitize_time_format(data.get("time_format")),
        include_sunrise=bool(data.get("include_sunrise", False)),
        cache_ttl_minutes=_sanitize_positive_int(
            data.get("cache_ttl_minutes"), DEFAULT_TTL_MINUTES
        ),
        provider_timeout=_sanitize_positive_float(
            data.get("provider_timeout"), DEFAULT_PROVIDER_TIMEOUT
        ),
        aladhan_base_url=_sanitize_str(data.get("aladhan_base_url"), ALADHAN_BASE_URL),
        time_zone=_sanitize_time_zone(data.get("time_zone")),
    )


def save_config(config: Config) -> None:
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    CONFIG_PATH.write_text(
        json.dumps(config.to_dict(), ensure_ascii=False, indent=2) + "\n",
        encoding="utf-8",
    )
