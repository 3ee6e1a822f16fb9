"""Tests for the tiered geocoder."""

import math
import random
from urllib.parse import unquote

import httpx
import pytest

from backend.mapsync.config import Settings
from backend.mapsync.geocoding.city_centers import KNOWN_CITY_CENTERS, lookup_city_center
from backend.mapsync.geocoding.geocoder import (
    Geocoder,
    clean_address,
    generate_points_around_city,
)
from backend.mapsync.models.common import EntityType, Geo
from backend.mapsync.models.entities import CanonicalEntity

LA = (-118.2437, 34.0522)


def make_entity(name: str, address: str | None = None, **kwargs) -> CanonicalEntity:
    return CanonicalEntity(
        id=name.lower().replace(" ", "-"),
        name=name,
        normalized_name=name.lower(),
        type=kwargs.pop("type", EntityType.attraction),
        address=address,
        **kwargs,
    )


def query_of(request: httpx.Request) -> str:
    return unquote(request.url.path.rsplit("/", 1)[-1]).removesuffix(".json")


def empty(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"features": []})


def make_geocoder(settings: Settings, handler, rng: random.Random) -> Geocoder:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return Geocoder.from_settings(settings, client=client, rng=rng)


def near(geo: Geo, center: Geo, tolerance: float) -> bool:
    return abs(geo.lat - center.lat) <= tolerance and abs(geo.lng - center.lng) <= tolerance


@pytest.mark.asyncio
async def test_tier1_known_city_with_jitter(settings: Settings, rng: random.Random) -> None:
    """Test that a known city name resolves from the table with small jitter."""
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(query_of(request))
        return empty(request)

    geocoder = make_geocoder(settings, handler, rng)

    result = await geocoder.geocode("Old town, Barcelona")

    assert result.tier == 1
    assert result.is_approximate_location is True
    assert near(result.geo, KNOWN_CITY_CENTERS["barcelona"], settings.city_jitter_deg / 2)
    assert calls == []


@pytest.mark.asyncio
async def test_tier2_cleaned_address_with_context(
    settings: Settings, rng: random.Random, feature_response
) -> None:
    """Test that the cleaned address plus context goes to the service."""
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(query_of(request))
        return httpx.Response(200, json=feature_response(LA))

    geocoder = make_geocoder(settings, handler, rng)

    result = await geocoder.geocode("Sunset Inn (near beach) #2", "Los Angeles")

    assert result.tier == 2
    assert result.is_approximate_location is False
    assert (result.geo.lat, result.geo.lng) == (LA[1], LA[0])
    assert calls == ["Sunset Inn 2, Los Angeles"]


@pytest.mark.asyncio
async def test_tier3_text_before_first_comma(
    settings: Settings, rng: random.Random, feature_response
) -> None:
    """Test the retry with only the part before the first comma."""
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        query = query_of(request)
        calls.append(query)
        if "Main" in query:
            return empty(request)
        return httpx.Response(200, json=feature_response(LA))

    geocoder = make_geocoder(settings, handler, rng)

    result = await geocoder.geocode("Sunset Inn, 123 Main St", "Los Angeles")

    assert result.tier == 3
    assert calls == ["Sunset Inn, 123 Main St, Los Angeles", "Sunset Inn, Los Angeles"]


@pytest.mark.asyncio
async def test_tier4_ring_around_destination(settings: Settings, rng: random.Random) -> None:
    """Test that lookup failure falls back to a ring point around the destination."""
    geocoder = make_geocoder(settings, empty, rng)

    result = await geocoder.geocode("Sushi Dai", "Tokyo")

    assert result.tier == 4
    assert result.is_approximate_location is True
    assert near(result.geo, KNOWN_CITY_CENTERS["tokyo"], 0.03)


@pytest.mark.asyncio
async def test_service_error_is_a_tier_failure(settings: Settings, rng: random.Random) -> None:
    """Test that HTTP errors fall through exactly like zero results."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={"message": "unavailable"})

    geocoder = make_geocoder(settings, handler, rng)

    result = await geocoder.geocode("Sushi Dai", "Tokyo")

    assert result.tier == 4


@pytest.mark.asyncio
async def test_global_fallback_when_destination_unknown(
    settings: Settings, rng: random.Random
) -> None:
    """Test that an unresolvable destination uses the global fallback city."""
    geocoder = make_geocoder(settings, empty, rng)

    result = await geocoder.geocode("Nameless Bar", "Atlantis")

    assert result.tier == 5
    assert result.is_approximate_location is True
    fallback = Geo(lat=settings.fallback_city_lat, lng=settings.fallback_city_lng)
    assert near(result.geo, fallback, 0.03)


@pytest.mark.asyncio
async def test_destination_center_from_service(
    settings: Settings, rng: random.Random, feature_response
) -> None:
    """Test that an unknown destination's center is looked up externally."""

    def handler(request: httpx.Request) -> httpx.Response:
        if query_of(request) == "Los Angeles":
            return httpx.Response(200, json=feature_response(LA))
        return empty(request)

    geocoder = make_geocoder(settings, handler, rng)

    result = await geocoder.geocode("Tiny Taco Stand", "Los Angeles")

    assert result.tier == 4
    assert near(result.geo, Geo(lat=LA[1], lng=LA[0]), 0.03)


@pytest.mark.asyncio
async def test_empty_query_still_gets_coordinates(settings: Settings, rng: random.Random) -> None:
    """Test that even an empty query never returns without coordinates."""
    geocoder = make_geocoder(settings, empty, rng)

    result = await geocoder.geocode("")

    assert result.tier == 5
    assert result.geo is not None


@pytest.mark.asyncio
async def test_batch_gives_distinct_points_and_taints_all(
    settings: Settings, rng: random.Random, feature_response
) -> None:
    """Test that batch fallbacks are distinct and mark the whole batch approximate."""

    def handler(request: httpx.Request) -> httpx.Response:
        if query_of(request).startswith("Known Museum"):
            return httpx.Response(200, json=feature_response((139.70, 35.66)))
        return empty(request)

    geocoder = make_geocoder(settings, handler, rng)
    entities = [
        make_entity("Known Museum"),
        make_entity("Lost Cafe", type=EntityType.restaurant),
        make_entity("Lost Bar", type=EntityType.evening_venue),
        make_entity("Hidden Shrine"),
    ]

    results = await geocoder.geocode_batch(entities, "Tokyo")

    assert [r.tier for r in results] == [2, 4, 4, 4]
    assert all(r.is_approximate_location for r in results)
    assert all(e.is_approximate_location for e in entities)
    assert (entities[0].lat, entities[0].lng) == (35.66, 139.70)

    fallback_points = {(e.lat, e.lng) for e in entities[1:]}
    assert len(fallback_points) == 3


@pytest.mark.asyncio
async def test_batch_without_fallback_stays_exact(
    settings: Settings, rng: random.Random, feature_response
) -> None:
    """Test that a clean batch is not flagged approximate."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=feature_response(LA))

    geocoder = make_geocoder(settings, handler, rng)
    entities = [make_entity("Sunset Inn"), make_entity("Cafe Luna")]

    await geocoder.geocode_batch(entities, "Los Angeles")

    assert not any(e.is_approximate_location for e in entities)


@pytest.mark.asyncio
async def test_batch_skips_entities_with_coordinates(
    settings: Settings, rng: random.Random
) -> None:
    """Test that inline coordinates are neither geocoded nor tainted."""
    geocoder = make_geocoder(settings, empty, rng)
    inline = make_entity("Cafe Luna")
    inline.set_exact_coordinates(Geo(lat=34.05, lng=-118.24))
    pending = make_entity("Sunset Inn")

    results = await geocoder.geocode_batch([inline, pending], "Tokyo")

    assert len(results) == 1
    assert (inline.lat, inline.lng) == (34.05, -118.24)
    assert inline.is_approximate_location is False
    assert pending.has_coordinates is True
    assert pending.is_approximate_location is True


def test_generate_points_around_city_is_deterministic() -> None:
    """Test ring spacing and radius bands."""
    center = Geo(lat=0.0, lng=0.0)
    points = generate_points_around_city(center, 20, 3.0)

    assert points == generate_points_around_city(center, 20, 3.0)
    assert len(points) == 20

    distances = [round(math.hypot(p.lat, p.lng) * 111 / 3.0, 6) for p in points[:3]]
    assert distances == [0.3, 0.6, 0.9]
    # first point sits due north at the inner band
    assert points[0].lng == pytest.approx(0.0)
    assert points[0].lat == pytest.approx(0.3 * 3.0 / 111)


def test_clean_address() -> None:
    """Test address cleaning."""
    assert clean_address("Sunset Inn (Downtown) #5, Los Angeles!") == "Sunset Inn 5, Los Angeles"
    assert clean_address("  ***  ") == ""


def test_lookup_city_center_word_boundaries() -> None:
    """Test that city names only match as whole words."""
    assert lookup_city_center("hotel in NEW YORK") is not None
    assert lookup_city_center("Romeo's Pizza") is None
    assert lookup_city_center(None) is None
