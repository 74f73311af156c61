from __future__ import annotations

import json
import logging
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any, Callable, Protocol

from .models import ResolvedResult

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(minutes=30)
DEFAULT_PRECISION = 4


class CacheStore(Protocol):
    def load(self) -> dict[str, Any]: ...

    def save(self, payload: dict[str, Any]) -> None: ...


class MemoryStore:
    def __init__(self) -> None:
        self._data: dict[str, Any] = {}

    def load(self) -> dict[str, Any]:
        return dict(self._data)

    def save(self, payload: dict[str, Any]) -> None:
        self._data = dict(payload)


class JsonFileStore:
    """Keeps every entry in a single JSON document on disk."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            logger.debug("Ignoring unreadable cache file %s", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def save(self, payload: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2) + "\n",
            encoding="utf-8",
        )


def cache_key(lat: float, lon: float, day: date, precision: int = DEFAULT_PRECISION) -> str:
    # Coordinates equal after rounding share an entry.
    return f"{lat:.{precision}f},{lon:.{precision}f}@{day.isoformat()}"


class PrayerTimesCache:
    def __init__(
        self,
        store: CacheStore | None = None,
        ttl: timedelta = DEFAULT_TTL,
        precision: int = DEFAULT_PRECISION,
        max_entries: int | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.store: CacheStore = store if store is not None else MemoryStore()
        self.ttl = ttl
        self.precision = precision
        self.max_entries = max_entries
        self._clock = clock

    def key_for(self, lat: float, lon: float) -> str:
        return cache_key(lat, lon, self._clock().date(), self.precision)

    def _read(self) -> dict[str, Any]:
        try:
            return self.store.load()
        except Exception:  # noqa: BLE001
            logger.warning("Prayer times cache could not be read", exc_info=True)
            return {}

    def get(self, lat: float, lon: float) -> ResolvedResult | None:
        entry = self._read().get(self.key_for(lat, lon))
        if not isinstance(entry, dict):
            return None

        try:
            fetched_at = datetime.fromisoformat(str(entry["fetched_at"]))
            result = ResolvedResult.from_dict(entry["result"])
            age = self._clock() - fetched_at
        except (AttributeError, KeyError, TypeError, ValueError):
            return None

        if age >= self.ttl:
            return None

        logger.debug("Cache hit for %s,%s", lat, lon)
        return result

    def set(self, lat: float, lon: float, result: ResolvedResult) -> None:
        data = self._read()
        data[self.key_for(lat, lon)] = {
            "result": result.to_dict(),
            "fetched_at": self._clock().isoformat(),
        }

        if self.max_entries is not None and len(data) > self.max_entries:
            data = self._evict_oldest(data)

        self.store.save(data)

    def clear(self) -> None:
        self.store.save({})

    def _evict_oldest(self, data: dict[str, Any]) -> dict[str, Any]:
        assert self.max_entries is not None

        def _fetched_at(item: tuple[str, Any]) -> str:
            value = item[1]
            return str(value.get("fetched_at", "")) if isinstance(value, dict) else ""

        newest = sorted(data.items(), key=_fetched_at, reverse=True)[: self.max_entries]
        return dict(newest)
