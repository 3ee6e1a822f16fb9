"""Map sync pipeline - from itinerary text to map events.

extract -> deduplicate against the session -> geocode new entities ->
merge into the session -> emit one entity-set event.
"""

import logging
import random
from typing import Any, Literal

import httpx

from backend.mapsync.config import Settings, get_settings
from backend.mapsync.dedup.deduplicator import Deduplicator
from backend.mapsync.dedup.normalizer import normalize_name
from backend.mapsync.errors import ExtractionEmptyResult
from backend.mapsync.events.emitter import MapSyncEmitter
from backend.mapsync.extraction.extractor import EntityExtractor
from backend.mapsync.geocoding.geocoder import Geocoder
from backend.mapsync.models.common import EntityCategory, EntityType
from backend.mapsync.models.entities import CanonicalEntity
from backend.mapsync.models.events import EntitySet, FlyTo, HighlightMarker, RouteDisplay
from backend.mapsync.session.tracker import MapSession
from backend.mapsync.utils.logging import StructuredGeocodeLogger
from backend.mapsync.utils.metrics import PrometheusGeocodeMetrics

logger = logging.getLogger(__name__)

PlaceKind = Literal["hotels", "restaurants", "attractions"]

TYPE_FOR_PLACE_KIND: dict[str, EntityType] = {
    EntityCategory.hotels.value: EntityType.hotel,
    EntityCategory.restaurants.value: EntityType.restaurant,
    EntityCategory.attractions.value: EntityType.attraction,
}


class MapSyncPipeline:
    """Keeps an explicitly owned MapSession and the map in step with itinerary text."""

    def __init__(
        self,
        geocoder: Geocoder,
        emitter: MapSyncEmitter,
        *,
        extractor: EntityExtractor | None = None,
        deduplicator: Deduplicator | None = None,
    ) -> None:
        self.geocoder = geocoder
        self.emitter = emitter
        self.extractor = extractor or EntityExtractor()
        self.deduplicator = deduplicator or Deduplicator()

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        rng: random.Random | None = None,
    ) -> "MapSyncPipeline":
        """Build a pipeline with Prometheus metrics and structured call logging."""
        settings = settings or get_settings()
        geocoder = Geocoder.from_settings(
            settings,
            client=client,
            rng=rng,
            metrics=PrometheusGeocodeMetrics(),
            logger=StructuredGeocodeLogger(),
        )
        return cls(geocoder, MapSyncEmitter(settings))

    async def _geocode_and_publish(
        self,
        fresh: list[CanonicalEntity],
        session: MapSession,
        *,
        destination: str | None,
        incremental: bool,
    ) -> list[CanonicalEntity]:
        await self.geocoder.geocode_batch(fresh, destination)
        added = session.merge(fresh)

        if not incremental:
            self.emitter.emit_entities(session.entity_set(), incremental=False)
        elif added:
            self.emitter.emit_entities(EntitySet.from_entities(added), incremental=True)
        else:
            logger.debug("[pipeline] Nothing new for incremental update")
        return added

    async def process_itinerary(
        self,
        text: str,
        session: MapSession,
        *,
        destination: str | None = None,
        incremental: bool = False,
    ) -> list[CanonicalEntity]:
        """Resolve the places in itinerary text and sync them to the map.

        In full mode the session is reset and the map cleared before the new
        entity set replaces it. In incremental mode only entities not yet in
        the session are added and emitted.

        Args:
            text: Itinerary text with inline markers
            session: Caller-owned session, mutated in place
            destination: City/region context for geocoding
            incremental: Merge into the current map instead of replacing it

        Returns:
            Entities added to the session by this call
        """
        mentions = self.extractor.extract(text)
        if not mentions:
            logger.info(f"[pipeline] {ExtractionEmptyResult.__name__}: no markers in itinerary text")
            return []

        if not incremental:
            session.reset()
            self.emitter.clear_map()

        canonical = self.deduplicator.deduplicate(mentions, existing=session.entities())
        fresh = [entity for entity in canonical if not session.has_seen(entity)]
        logger.info(
            f"[pipeline] {len(mentions)} mentions, {len(canonical)} canonical, {len(fresh)} new"
        )

        return await self._geocode_and_publish(
            fresh, session, destination=destination, incremental=incremental
        )

    async def process_place_results(
        self,
        kind: PlaceKind,
        items: list[dict[str, Any]],
        session: MapSession,
        *,
        destination: str | None = None,
    ) -> list[CanonicalEntity]:
        """Add place-search results (name + address) to the map incrementally."""
        entity_type = TYPE_FOR_PLACE_KIND[kind]
        fresh: dict[str, CanonicalEntity] = {}

        for item in items:
            name = str(item.get("name") or "").strip()
            normalized = normalize_name(name) if name else ""
            if not normalized:
                continue
            entity = CanonicalEntity(
                id=str(item.get("id") or f"{kind}:{normalized}"),
                name=name,
                normalized_name=normalized,
                type=entity_type,
                address=item.get("address") or item.get("formatted_address"),
            )
            if session.has_seen(entity) or entity.key in fresh:
                continue
            fresh[entity.key] = entity

        logger.info(f"[pipeline] {len(items)} {kind} results, {len(fresh)} new")
        return await self._geocode_and_publish(
            list(fresh.values()), session, destination=destination, incremental=True
        )

    def show_day_route(self, session: MapSession, day_index: int) -> RouteDisplay | None:
        """Emit a route through the session's entities for one day."""
        return self.emitter.emit_route(session.entities_for_day(day_index), day_index=day_index)

    def fly_to(
        self, place: str | None = None, *, lat: float | None = None, lng: float | None = None
    ) -> FlyTo:
        return self.emitter.fly_to(place, lat=lat, lng=lng)

    def highlight(self, session: MapSession, name: str) -> HighlightMarker | None:
        entity = session.find(name)
        if entity is None:
            logger.info(f"[pipeline] No entity named {name!r} to highlight")
            return None
        return self.emitter.highlight(entity)

    def reset(self, session: MapSession) -> None:
        """Tear down the map between unrelated itineraries."""
        session.reset()
        self.emitter.reset_map()
