"""Tiered geocoder.

Tiers, in order:
1. Known city center table (jittered, approximate)
2. Cleaned address plus destination context via the external service
3. Text before the first comma of the cleaned address, plus context
4. Deterministic ring of points around the destination's city center
5. Ring around the global fallback city when the destination center itself
   cannot be resolved

A displayable entity always ends up with coordinates. Any tier 4/5 result in
a batch marks every entity of that batch as approximate.
"""

import asyncio
import functools
import logging
import math
import random
import re
import uuid

import httpx

from backend.mapsync.config import Settings, get_settings
from backend.mapsync.errors import GeocodeCallError, GeocodeExhaustedError
from backend.mapsync.geocoding.city_centers import lookup_city_center
from backend.mapsync.geocoding.client import fetch_geocode
from backend.mapsync.geocoding.guard import (
    GeocodeCallGuard,
    GeocodeContext,
    GeocodeLogger,
    GeocodeMetrics,
)
from backend.mapsync.models.common import Geo
from backend.mapsync.models.entities import CanonicalEntity, GeocodeResult

logger = logging.getLogger(__name__)

TIER_CITY_TABLE = 1
TIER_FULL_ADDRESS = 2
TIER_ADDRESS_HEAD = 3
TIER_CITY_RING = 4
TIER_GLOBAL_FALLBACK = 5
FALLBACK_TIERS = frozenset({TIER_CITY_RING, TIER_GLOBAL_FALLBACK})

KM_PER_DEGREE = 111.0
RING_BAND_START = 0.3
RING_BAND_STEP = 0.3
RING_BANDS = 3

_PARENTHETICAL = re.compile(r"\([^)]*\)")
_SPECIAL_CHARS = re.compile(r"[^\w\s,.'-]")
_WHITESPACE = re.compile(r"\s+")


def clean_address(address: str) -> str:
    """Strip parenthetical content and special characters, collapse whitespace."""
    text = _PARENTHETICAL.sub(" ", address)
    text = _SPECIAL_CHARS.sub(" ", text)
    text = _WHITESPACE.sub(" ", text).strip()
    return text.strip(" ,")


def generate_points_around_city(center: Geo, count: int, radius_km: float) -> list[Geo]:
    """Evenly spaced points in three radius bands around a center.

    Deterministic: the same center and count always give the same ring.
    """
    points = []
    for i in range(count):
        angle = (i / count) * 2 * math.pi
        distance = (RING_BAND_START + (i % RING_BANDS) * RING_BAND_STEP) * radius_km / KM_PER_DEGREE
        points.append(
            Geo(
                lat=_clamp(center.lat + distance * math.cos(angle), 90),
                lng=_clamp(center.lng + distance * math.sin(angle), 180),
            )
        )
    return points


def _clamp(value: float, bound: float) -> float:
    return max(-bound, min(bound, value))


class Geocoder:
    """Resolves canonical entities to coordinates, never leaving one without."""

    def __init__(
        self,
        guard: GeocodeCallGuard,
        *,
        settings: Settings | None = None,
        rng: random.Random | None = None,
        metrics: GeocodeMetrics | None = None,
    ) -> None:
        """Initialize geocoder.

        Args:
            guard: Guarded external geocoding call
            settings: Pipeline settings (optional, defaults to get_settings())
            rng: Random source for jitter (optional, seed it for tests)
            metrics: Metrics recorder (optional, defaults to no-op)
        """
        self.guard = guard
        self.settings = settings or get_settings()
        self._rng = rng or random.Random()
        self._metrics = metrics or GeocodeMetrics()

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        rng: random.Random | None = None,
        metrics: GeocodeMetrics | None = None,
        logger: GeocodeLogger | None = None,
    ) -> "Geocoder":
        """Build a geocoder backed by the configured external service."""
        settings = settings or get_settings()
        fetch_fn = functools.partial(
            fetch_geocode,
            base_url=settings.geocoding_base_url,
            access_token=settings.geocoding_access_token,
            client=client,
        )
        guard = GeocodeCallGuard.from_settings(fetch_fn, settings, metrics=metrics, logger=logger)
        return cls(guard, settings=settings, rng=rng, metrics=metrics)

    @property
    def global_fallback(self) -> Geo:
        return Geo(lat=self.settings.fallback_city_lat, lng=self.settings.fallback_city_lng)

    def _jitter(self, geo: Geo, span_deg: float) -> Geo:
        return Geo(
            lat=_clamp(geo.lat + (self._rng.random() - 0.5) * span_deg, 90),
            lng=_clamp(geo.lng + (self._rng.random() - 0.5) * span_deg, 180),
        )

    async def _external(self, query: str, tier: int, trace_id: str) -> Geo | None:
        """One guarded external call; zero results and errors both yield None."""
        try:
            results = await self.guard.call(GeocodeContext(trace_id=trace_id, query=query, tier=tier))
        except GeocodeCallError as e:
            logger.warning(f"[geocoder] Tier {tier} failed for {query!r}: {e}")
            return None
        if not results:
            logger.info(f"[geocoder] Tier {tier} returned no results for {query!r}")
            return None
        return results[0]

    async def resolve_tiers(
        self, query: str, context: str | None = None, *, trace_id: str | None = None
    ) -> GeocodeResult:
        """Try tiers 1-3 for a single query.

        Raises:
            GeocodeExhaustedError: None of the lookup tiers produced coordinates
        """
        trace_id = trace_id or str(uuid.uuid4())

        city = lookup_city_center(query)
        if city is not None:
            name, center = city
            logger.debug(f"[geocoder] Tier 1 hit for {query!r}: {name}")
            return GeocodeResult(
                geo=self._jitter(center, self.settings.city_jitter_deg),
                tier=TIER_CITY_TABLE,
                is_approximate_location=True,
            )

        cleaned = clean_address(query)
        if not cleaned:
            raise GeocodeExhaustedError(query)

        full_query = cleaned
        if context and context.lower() not in cleaned.lower():
            full_query = f"{cleaned}, {context}"

        geo = await self._external(full_query, TIER_FULL_ADDRESS, trace_id)
        if geo is not None:
            return GeocodeResult(geo=geo, tier=TIER_FULL_ADDRESS, is_approximate_location=False)

        head = cleaned.split(",")[0].strip()
        head_query = f"{head}, {context}" if context and context.lower() not in head.lower() else head
        if head and head_query != full_query:
            geo = await self._external(head_query, TIER_ADDRESS_HEAD, trace_id)
            if geo is not None:
                return GeocodeResult(geo=geo, tier=TIER_ADDRESS_HEAD, is_approximate_location=False)

        raise GeocodeExhaustedError(query)

    async def resolve_city_center(
        self, destination: str | None, *, trace_id: str | None = None
    ) -> tuple[Geo, bool]:
        """Resolve the destination's center.

        Returns:
            (center, is_global_fallback)
        """
        city = lookup_city_center(destination)
        if city is not None:
            return city[1], False

        if destination and destination.strip():
            geo = await self._external(
                clean_address(destination), TIER_CITY_RING, trace_id or str(uuid.uuid4())
            )
            if geo is not None:
                return geo, False

        logger.warning(
            f"[geocoder] Could not resolve center for {destination!r}, "
            f"using {self.settings.fallback_city_name}"
        )
        return self.global_fallback, True

    def _ring_point(self, center: Geo, index: int, batch_size: int) -> Geo:
        count = max(self.settings.fallback_ring_min_points, batch_size * 3)
        ring = generate_points_around_city(center, count, self.settings.fallback_ring_radius_km)
        return self._jitter(ring[index % count], self.settings.ring_jitter_deg)

    async def geocode(self, query: str, context: str | None = None) -> GeocodeResult:
        """Geocode a single address or name. Always returns coordinates."""
        results = await self._geocode_queries([query], context)
        return results[0]

    async def _geocode_queries(self, queries: list[str], context: str | None) -> list[GeocodeResult]:
        trace_id = str(uuid.uuid4())

        # Lookups for the whole batch run concurrently; gather keeps input order
        attempts = await asyncio.gather(
            *(self._attempt(query, context, trace_id) for query in queries)
        )

        results: list[GeocodeResult] = []
        center: tuple[Geo, bool] | None = None
        for index, (query, attempt) in enumerate(zip(queries, attempts)):
            if attempt is not None:
                results.append(attempt)
                continue

            if center is None:
                center = await self.resolve_city_center(context, trace_id=trace_id)
            geo_center, is_global = center
            tier = TIER_GLOBAL_FALLBACK if is_global else TIER_CITY_RING
            logger.warning(f"[geocoder] All lookups failed for {query!r}, using tier {tier} ring point")
            results.append(
                GeocodeResult(
                    geo=self._ring_point(geo_center, index, len(queries)),
                    tier=tier,
                    is_approximate_location=True,
                )
            )

        for result in results:
            self._metrics.inc_tier(result.tier)
        return results

    async def _attempt(self, query: str, context: str | None, trace_id: str) -> GeocodeResult | None:
        try:
            return await self.resolve_tiers(query, context, trace_id=trace_id)
        except GeocodeExhaustedError as e:
            logger.info(f"[geocoder] {e}")
            return None

    async def geocode_batch(
        self, entities: list[CanonicalEntity], destination: str | None = None
    ) -> list[GeocodeResult]:
        """Geocode every entity lacking coordinates and apply the results.

        Entities that already have coordinates (inline or from an earlier
        batch) are left alone. If any entity needed a ring fallback, every
        entity geocoded in this batch is flagged approximate.

        Args:
            entities: Canonical entities, in batch order
            destination: City/region context, also used for the ring center

        Returns:
            Results for the entities that were geocoded, in order
        """
        targets = [entity for entity in entities if not entity.has_coordinates]
        if not targets:
            return []

        queries = [entity.address or entity.name for entity in targets]
        results = await self._geocode_queries(queries, destination)

        batch_degraded = any(result.tier in FALLBACK_TIERS for result in results)
        if batch_degraded:
            logger.warning(
                f"[geocoder] Batch of {len(targets)} used fallback coordinates, "
                "marking all as approximate"
            )
            results = [
                result.model_copy(update={"is_approximate_location": True}) for result in results
            ]

        for entity, result in zip(targets, results):
            entity.apply_geocode(result.geo, approximate=result.is_approximate_location)

        return results
