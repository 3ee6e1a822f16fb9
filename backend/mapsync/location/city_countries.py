"""Country inference for well-known, unambiguous cities."""

KNOWN_CITY_COUNTRIES: dict[str, str] = {
    # Europe
    "rome": "Italy",
    "milan": "Italy",
    "florence": "Italy",
    "venice": "Italy",
    "naples": "Italy",
    "paris": "France",
    "nice": "France",
    "lyon": "France",
    "marseille": "France",
    "london": "United Kingdom",
    "manchester": "United Kingdom",
    "liverpool": "United Kingdom",
    "edinburgh": "United Kingdom",
    "glasgow": "United Kingdom",
    "madrid": "Spain",
    "barcelona": "Spain",
    "seville": "Spain",
    "valencia": "Spain",
    "berlin": "Germany",
    "munich": "Germany",
    "hamburg": "Germany",
    "frankfurt": "Germany",
    "cologne": "Germany",
    "athens": "Greece",
    "thessaloniki": "Greece",
    "amsterdam": "Netherlands",
    "rotterdam": "Netherlands",
    "brussels": "Belgium",
    "antwerp": "Belgium",
    "vienna": "Austria",
    "salzburg": "Austria",
    "zurich": "Switzerland",
    "geneva": "Switzerland",
    "bern": "Switzerland",
    "copenhagen": "Denmark",
    "stockholm": "Sweden",
    "oslo": "Norway",
    "helsinki": "Finland",
    "lisbon": "Portugal",
    "porto": "Portugal",
    "dublin": "Ireland",
    "prague": "Czech Republic",
    "budapest": "Hungary",
    "warsaw": "Poland",
    "krakow": "Poland",
    # North America
    "new york": "United States",
    "los angeles": "United States",
    "chicago": "United States",
    "houston": "United States",
    "phoenix": "United States",
    "philadelphia": "United States",
    "san antonio": "United States",
    "san diego": "United States",
    "dallas": "United States",
    "san jose": "United States",
    "austin": "United States",
    "miami": "United States",
    "atlanta": "United States",
    "toronto": "Canada",
    "montreal": "Canada",
    "vancouver": "Canada",
    "mexico city": "Mexico",
    # Asia
    "tokyo": "Japan",
    "osaka": "Japan",
    "kyoto": "Japan",
    "seoul": "South Korea",
    "beijing": "China",
    "shanghai": "China",
    "hong kong": "Hong Kong",
    "singapore": "Singapore",
    "bangkok": "Thailand",
    "mumbai": "India",
    "delhi": "India",
    # Middle East
    "dubai": "United Arab Emirates",
    "abu dhabi": "United Arab Emirates",
    "doha": "Qatar",
    "istanbul": "Turkey",
    "jerusalem": "Israel",
    "tel aviv": "Israel",
    # Oceania
    "sydney": "Australia",
    "melbourne": "Australia",
    "brisbane": "Australia",
    "perth": "Australia",
}


def infer_country_for_city(city: str | None) -> str | None:
    """Return the country of a well-known city, or None when unknown."""
    if not city:
        return None
    return KNOWN_CITY_COUNTRIES.get(city.strip().lower())
