"""Forward geocoding adapter for a Mapbox-style places API."""

from urllib.parse import quote

import httpx

from backend.mapsync.models.common import Geo

DEFAULT_RESULT_LIMIT = 5


async def fetch_geocode(
    query: str,
    *,
    base_url: str = "https://api.mapbox.com/geocoding/v5/mapbox.places",
    access_token: str = "",
    country_code: str | None = None,
    client: httpx.AsyncClient | None = None,
) -> list[Geo]:
    """Fetch candidate coordinates for a free-text address.

    Args:
        query: Address or place name
        base_url: Geocoding API base URL
        access_token: API access token
        country_code: Optional ISO alpha-2 code to restrict results
        client: Optional httpx client (for testing with mocks)

    Returns:
        Candidate coordinates, best first; empty when nothing matched

    Raises:
        httpx.HTTPError: On network or HTTP errors
        KeyError, TypeError, ValueError: On an unreadable response body
    """
    params: dict[str, str | int] = {
        "access_token": access_token,
        "limit": DEFAULT_RESULT_LIMIT,
    }
    if country_code:
        params["country"] = country_code.lower()

    url = f"{base_url.rstrip('/')}/{quote(query, safe='')}.json"

    close_client = False
    if client is None:
        client = httpx.AsyncClient(timeout=4.0)
        close_client = True

    try:
        response = await client.get(url, params=params)
        response.raise_for_status()
        data = response.json()

        # Response structure: {features: [{center: [lng, lat], ...}, ...]}
        results = []
        for feature in data["features"]:
            lng, lat = feature["center"][:2]
            results.append(Geo(lat=float(lat), lng=float(lng)))
        return results
    finally:
        if close_client:
            await client.aclose()
