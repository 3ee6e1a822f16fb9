"""Well-known city center coordinates used by the first geocoding tier."""

import re

from backend.mapsync.models.common import Geo

KNOWN_CITY_CENTERS: dict[str, Geo] = {
    "tokyo": Geo(lat=35.6762, lng=139.6503),
    "new york": Geo(lat=40.7128, lng=-74.0060),
    "paris": Geo(lat=48.8566, lng=2.3522),
    "london": Geo(lat=51.5074, lng=-0.1278),
    "barcelona": Geo(lat=41.3851, lng=2.1734),
    "rome": Geo(lat=41.9028, lng=12.4964),
    "tel aviv": Geo(lat=32.0853, lng=34.7818),
}

# Longest names first so "new york" wins over any shorter contained name
_CITY_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    (name, re.compile(rf"(?<!\w){re.escape(name)}(?!\w)", re.IGNORECASE))
    for name in sorted(KNOWN_CITY_CENTERS, key=len, reverse=True)
]


def lookup_city_center(text: str | None) -> tuple[str, Geo] | None:
    """Find a known city named anywhere in the text (case-insensitive)."""
    if not text:
        return None
    for name, pattern in _CITY_PATTERNS:
        if pattern.search(text):
            return name, KNOWN_CITY_CENTERS[name]
    return None
