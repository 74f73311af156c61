from __future__ import annotations

import json
import math
from functools import lru_cache
from importlib import resources

from .models import City

DEFAULT_CITY = "Cairo"


@lru_cache(maxsize=1)
def get_cities() -> tuple[City, ...]:
    path = resources.files("mawaqit_cli.data").joinpath("cities.json")
    data = json.loads(path.read_text(encoding="utf-8"))
    return tuple(City.from_dict(item) for item in data)


@lru_cache(maxsize=1)
def get_default_city() -> City:
    for city in get_cities():
        if city.name_en == DEFAULT_CITY:
            return city
    return get_cities()[0]


def find_city(name: str) -> City | None:
    needle = name.strip().casefold()
    if not needle:
        return None

    for city in get_cities():
        if needle in (city.name_en.casefold(), city.name_ar):
            return city
    return None


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    radius_km = 6371
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return radius_km * c


def find_nearest_city(lat: float, lon: float) -> City:
    nearest = get_default_city()
    min_distance = float("inf")

    for city in get_cities():
        distance = haversine_distance(lat, lon, city.lat, city.lon)
        if distance < min_distance:
            min_distance = distance
            nearest = city

    return nearest
