"""Place/country disambiguation against curated tables.

Resolves a free-text place plus optional country into a standardized
(place, country, country code) tuple. Place names known to exist in several
countries are checked against their primary and alternative countries; an
unexpected pairing is reported as a conflict rather than corrected.
"""

import logging
from dataclasses import dataclass, field

from backend.mapsync.models.common import Confidence
from backend.mapsync.models.location import LocationConflict, LocationQuery, ResolvedLocation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AmbiguousPlace:
    """Place name that exists in more than one country."""

    primary_country: str
    other_countries: tuple[str, ...] = field(default_factory=tuple)


AMBIGUOUS_PLACES: dict[str, AmbiguousPlace] = {
    # Europe
    "rome": AmbiguousPlace("Italy"),
    "paris": AmbiguousPlace("France", ("United States",)),
    "london": AmbiguousPlace("United Kingdom", ("Canada", "United States")),
    "athens": AmbiguousPlace("Greece", ("United States",)),
    "dublin": AmbiguousPlace("Ireland", ("United States",)),
    "vienna": AmbiguousPlace("Austria", ("United States",)),
    "moscow": AmbiguousPlace("Russia", ("United States",)),
    "cambridge": AmbiguousPlace("United Kingdom", ("United States",)),
    "oxford": AmbiguousPlace("United Kingdom", ("United States",)),
    "manchester": AmbiguousPlace("United Kingdom", ("United States",)),
    "florence": AmbiguousPlace("Italy", ("United States",)),
    "granada": AmbiguousPlace("Spain", ("Nicaragua",)),
    "cordoba": AmbiguousPlace("Spain", ("Argentina", "Mexico")),
    "leon": AmbiguousPlace("Spain", ("Mexico", "Nicaragua")),
    "valencia": AmbiguousPlace("Spain", ("Venezuela",)),
    "toledo": AmbiguousPlace("Spain", ("United States",)),
    "leipzig": AmbiguousPlace("Germany", ("United States",)),
    "hamburg": AmbiguousPlace("Germany", ("United States",)),
    "frankfurt": AmbiguousPlace("Germany", ("United States",)),
    "bergen": AmbiguousPlace("Norway", ("Netherlands",)),
    "bristol": AmbiguousPlace("United Kingdom", ("United States",)),
    # Americas
    "portland": AmbiguousPlace("United States", ("Australia",)),
    "san jose": AmbiguousPlace("United States", ("Costa Rica",)),
    "richmond": AmbiguousPlace("United States", ("Canada", "Australia")),
    "springfield": AmbiguousPlace("United States"),
    "toronto": AmbiguousPlace("Canada", ("United States",)),
    "vancouver": AmbiguousPlace("Canada", ("United States",)),
    # Asia / Oceania
    "melbourne": AmbiguousPlace("Australia", ("United States",)),
    "perth": AmbiguousPlace("Australia", ("United Kingdom",)),
    "sydney": AmbiguousPlace("Australia", ("Canada", "United States")),
    "wellington": AmbiguousPlace("New Zealand", ("United States",)),
    "hong kong": AmbiguousPlace("China"),
    "shanghai": AmbiguousPlace("China"),
    "mumbai": AmbiguousPlace("India"),
    "tokyo": AmbiguousPlace("Japan"),
    "kyoto": AmbiguousPlace("Japan"),
}

COUNTRY_VARIATIONS: dict[str, str] = {
    "usa": "United States",
    "us": "United States",
    "u.s.": "United States",
    "u.s.a.": "United States",
    "america": "United States",
    "united states of america": "United States",
    "uk": "United Kingdom",
    "u.k.": "United Kingdom",
    "great britain": "United Kingdom",
    "britain": "United Kingdom",
    "england": "United Kingdom",
    "deutschland": "Germany",
    "italia": "Italy",
    "espana": "Spain",
    "españa": "Spain",
    "nippon": "Japan",
    "nihon": "Japan",
    "nederland": "Netherlands",
    "holland": "Netherlands",
    "hellas": "Greece",
    "schweiz": "Switzerland",
    "suisse": "Switzerland",
    "svizzera": "Switzerland",
    "österreich": "Austria",
    "osterreich": "Austria",
    "danmark": "Denmark",
    "norge": "Norway",
    "sverige": "Sweden",
    "suomi": "Finland",
    "polska": "Poland",
    "cesko": "Czech Republic",
    "česko": "Czech Republic",
    "czechia": "Czech Republic",
    "ceská republika": "Czech Republic",
    "magyar": "Hungary",
    "magyarország": "Hungary",
    "türkiye": "Turkey",
    "turkiye": "Turkey",
}

COUNTRY_CODES: dict[str, str] = {
    "United States": "US",
    "United Kingdom": "GB",
    "Italy": "IT",
    "France": "FR",
    "Germany": "DE",
    "Spain": "ES",
    "Japan": "JP",
    "China": "CN",
    "India": "IN",
    "Brazil": "BR",
    "Canada": "CA",
    "Australia": "AU",
    "Russia": "RU",
    "Mexico": "MX",
    "South Korea": "KR",
    "Greece": "GR",
    "Switzerland": "CH",
    "Sweden": "SE",
    "Norway": "NO",
    "Denmark": "DK",
    "Finland": "FI",
    "Netherlands": "NL",
    "Belgium": "BE",
    "Austria": "AT",
    "Portugal": "PT",
    "Ireland": "IE",
    "New Zealand": "NZ",
    "Turkey": "TR",
    "Poland": "PL",
    "Czech Republic": "CZ",
    "Hungary": "HU",
    "Israel": "IL",
    "Argentina": "AR",
    "Nicaragua": "NI",
    "Venezuela": "VE",
    "Costa Rica": "CR",
}

_CANONICAL_COUNTRIES: dict[str, str] = {name.lower(): name for name in COUNTRY_CODES}
_COUNTRIES_BY_CODE: dict[str, str] = {code.lower(): name for name, code in COUNTRY_CODES.items()}


def standardize_country(country: str | None) -> str | None:
    """Map a country variant ("USA", "Nippon", "IL") to its standard name.

    Unknown names are returned trimmed but otherwise untouched.
    """
    if country is None:
        return None
    cleaned = country.strip()
    if not cleaned:
        return None
    lowered = cleaned.lower()
    if lowered in COUNTRY_VARIATIONS:
        return COUNTRY_VARIATIONS[lowered]
    if lowered in _CANONICAL_COUNTRIES:
        return _CANONICAL_COUNTRIES[lowered]
    return _COUNTRIES_BY_CODE.get(lowered, cleaned)


def is_known_country(value: str) -> bool:
    """True if value is a country name or variant we can standardize.

    Bare ISO codes are not accepted here ("New York NY", "Los Angeles CA");
    they only count after a comma, see parse_location_string.
    """
    lowered = value.strip().lower()
    return lowered in COUNTRY_VARIATIONS or lowered in _CANONICAL_COUNTRIES


def is_country_code(value: str) -> bool:
    """True for a known ISO alpha-2 code or a short variant like "UK"."""
    lowered = value.strip().lower()
    return lowered in _COUNTRIES_BY_CODE or lowered in COUNTRY_VARIATIONS


def country_code_for(country: str | None) -> str | None:
    if not country:
        return None
    return COUNTRY_CODES.get(country)


def _display_place(place: str) -> str:
    return place[:1].upper() + place[1:]


def _conflict_message(place: str, entry: AmbiguousPlace) -> str:
    shown = _display_place(place)
    message = f"Did you mean {shown}, {entry.primary_country}?"
    if entry.other_countries:
        message += f" There's also {shown} in {', '.join(entry.other_countries)}."
    return message


def resolve_location(query: LocationQuery) -> ResolvedLocation:
    """Resolve a place/country pair into a standardized location.

    - Country variants are standardized before any comparison.
    - A known ambiguous place with no country gets its primary country.
    - A known ambiguous place with an unlisted country yields a conflict.
    - Unknown places keep the supplied country (or none) at low confidence.
    """
    place = query.place.strip()
    key = place.lower()
    country = standardize_country(query.country)

    entry = AMBIGUOUS_PLACES.get(key)
    if entry is None:
        return ResolvedLocation(
            place=place,
            country=country,
            country_code=country_code_for(country),
            confidence=Confidence.low,
        )

    if country is None:
        logger.info(f"Filled primary country {entry.primary_country!r} for {place!r}")
        return ResolvedLocation(
            place=place,
            country=entry.primary_country,
            country_code=country_code_for(entry.primary_country),
            confidence=Confidence.medium,
        )

    if country == entry.primary_country:
        return ResolvedLocation(
            place=place,
            country=country,
            country_code=country_code_for(country),
            confidence=Confidence.high,
        )

    if country in entry.other_countries:
        return ResolvedLocation(
            place=place,
            country=country,
            country_code=country_code_for(country),
            confidence=Confidence.medium,
        )

    conflict = LocationConflict(
        suggested_country=entry.primary_country,
        alternative_countries=list(entry.other_countries),
        message=_conflict_message(place, entry),
    )
    logger.warning(
        f"Possible location conflict: {place}, {country} - "
        f"did you mean {place}, {entry.primary_country}?"
    )
    return ResolvedLocation(
        place=place,
        country=country,
        country_code=country_code_for(country),
        confidence=Confidence.low,
        conflict=conflict,
    )


def parse_location_string(value: str | None) -> LocationQuery | None:
    """Split "Paris, France" into place and country.

    Only the first comma separates; a string without a comma is just a place.
    """
    if not value or not value.strip():
        return None
    if "," in value:
        place, country = (part.strip() for part in value.split(",", 1))
        return LocationQuery(place=place, country=country or None)
    return LocationQuery(place=value.strip())


def format_location(resolved: ResolvedLocation) -> str:
    """Render a resolved location as "Place, Country"."""
    if not resolved.place:
        return ""
    shown = _display_place(resolved.place)
    if resolved.country:
        return f"{shown}, {resolved.country}"
    return shown
