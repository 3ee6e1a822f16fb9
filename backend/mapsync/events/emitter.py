"""Map sync emitter - typed events delivered to subscribed listeners.

Listeners are plain callables taking a MapEvent. Delivery is synchronous and
fire-and-forget: the pipeline never waits on or reacts to consumption, and a
failing listener does not stop delivery to the others.
"""

import logging
from typing import Protocol, TypeVar

from pydantic import BaseModel

from backend.mapsync.config import Settings, get_settings
from backend.mapsync.models.common import TIME_SLOT_ORDER
from backend.mapsync.models.entities import CanonicalEntity
from backend.mapsync.models.events import (
    ClearMap,
    ClearRoutes,
    EntitySet,
    EntitySetUpdate,
    FitBounds,
    FlyTo,
    HighlightMarker,
    MapEvent,
    ResetMap,
    RouteDisplay,
    RoutePoint,
    RouteStyle,
)

logger = logging.getLogger(__name__)

MIN_ROUTE_POINTS = 2
# Entities without a time slot sort after evening
UNSLOTTED_ORDER = len(TIME_SLOT_ORDER)

E = TypeVar("E", bound=BaseModel)


class MapEventListener(Protocol):
    """Protocol for consumers of map events (e.g. a rendering surface)."""

    def __call__(self, event: MapEvent) -> None: ...


def order_for_route(entities: list[CanonicalEntity]) -> list[CanonicalEntity]:
    """Sort by time slot (morning < afternoon < evening < unlabeled), stable."""
    return sorted(
        entities,
        key=lambda e: TIME_SLOT_ORDER[e.time_slot] if e.time_slot is not None else UNSLOTTED_ORDER,
    )


class MapSyncEmitter:
    """Publishes map events to subscribed listeners."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self._listeners: list[MapEventListener] = []

    def subscribe(self, listener: MapEventListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: MapEventListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def publish(self, event: E) -> E:
        """Deliver an event to every listener and return it."""
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(f"[emitter] Listener failed on {event.kind} event")
        return event

    def emit_entities(self, entities: EntitySet, *, incremental: bool) -> EntitySetUpdate:
        """Publish a full replace or an incremental merge of markers.

        Incremental updates carry only the newly added entities and ask the
        renderer to animate them.
        """
        event = EntitySetUpdate(entities=entities, incremental=incremental, animate_new=incremental)
        logger.info(
            f"[emitter] Entity update: {len(entities)} entities, incremental={incremental}"
        )
        self.publish(event)
        return event

    def route_style(self) -> RouteStyle:
        return RouteStyle(
            line_color=self.settings.route_line_color,
            line_width=self.settings.route_line_width,
            line_opacity=self.settings.route_line_opacity,
        )

    def build_route(
        self, entities: list[CanonicalEntity], day_index: int | None = None
    ) -> RouteDisplay | None:
        """Build a route over entities with coordinates, or None if too few."""
        points = [
            RoutePoint(lat=e.lat, lng=e.lng, name=e.name)
            for e in order_for_route(entities)
            if e.lat is not None and e.lng is not None
        ]
        if len(points) < MIN_ROUTE_POINTS:
            logger.warning(
                f"[emitter] Not enough points for route (day {day_index}): "
                f"{len(points)} of {len(entities)} entities have coordinates"
            )
            return None
        return RouteDisplay(points=points, style=self.route_style(), day_index=day_index)

    def emit_route(
        self, entities: list[CanonicalEntity], day_index: int | None = None
    ) -> RouteDisplay | None:
        route = self.build_route(entities, day_index)
        if route is not None:
            self.publish(route)
        return route

    def fly_to(
        self, place: str | None = None, *, lat: float | None = None, lng: float | None = None
    ) -> FlyTo:
        return self.publish(FlyTo(place=place, lat=lat, lng=lng))

    def highlight(self, entity: CanonicalEntity) -> HighlightMarker:
        return self.publish(
            HighlightMarker(name=entity.name, type=entity.type, lat=entity.lat, lng=entity.lng)
        )

    def clear_map(self) -> ClearMap:
        return self.publish(ClearMap())

    def clear_routes(self) -> ClearRoutes:
        return self.publish(ClearRoutes())

    def reset_map(self) -> ResetMap:
        return self.publish(ResetMap())

    def fit_bounds(self, padding: int = 50, max_zoom: int = 15) -> FitBounds:
        return self.publish(FitBounds(padding=padding, max_zoom=max_zoom))
