"""Tests for the map sync emitter."""

import pytest
from pydantic import TypeAdapter, ValidationError

from backend.mapsync.events.emitter import MapSyncEmitter, order_for_route
from backend.mapsync.models.common import EntityType, Geo, TimeSlot
from backend.mapsync.models.entities import CanonicalEntity
from backend.mapsync.models.events import EntitySet, FlyTo, MapEvent


def make_entity(
    name: str,
    slot: TimeSlot | None = None,
    coords: tuple[float, float] | None = (1.0, 1.0),
) -> CanonicalEntity:
    entity = CanonicalEntity(
        id=name,
        name=name,
        normalized_name=name.lower(),
        type=EntityType.attraction,
        time_slot=slot,
        day_index=1,
    )
    if coords is not None:
        entity.set_exact_coordinates(Geo(lat=coords[0], lng=coords[1]))
    return entity


def test_route_sorted_by_time_slot(emitter: MapSyncEmitter, listener) -> None:
    """Test morning < afternoon < evening < unlabeled, stable within a slot."""
    entities = [
        make_entity("Dinner", TimeSlot.evening),
        make_entity("Stroll"),
        make_entity("Museum", TimeSlot.morning),
        make_entity("Lunch", TimeSlot.afternoon),
        make_entity("Bakery", TimeSlot.morning),
    ]

    route = emitter.emit_route(entities, day_index=1)

    assert route is not None
    assert [p.name for p in route.points] == ["Museum", "Bakery", "Lunch", "Dinner", "Stroll"]
    assert listener.kinds == ["route_display"]


def test_route_style_from_settings(emitter: MapSyncEmitter) -> None:
    """Test that the route carries styling intent only."""
    route = emitter.build_route([make_entity("A"), make_entity("B")])

    assert route is not None
    assert route.style.line_color == "#4f46e5"
    assert route.style.line_width == 4
    assert route.style.line_opacity == 0.7
    assert route.style.animate is True
    assert route.style.show_direction_arrows is True
    assert route.style.profile == "walking"


def test_route_needs_two_points_with_coordinates(
    emitter: MapSyncEmitter, listener, caplog: pytest.LogCaptureFixture
) -> None:
    """Test that fewer than two valid points emits nothing and logs the shortfall."""
    entities = [make_entity("A"), make_entity("B", coords=None)]

    route = emitter.emit_route(entities, day_index=3)

    assert route is None
    assert listener.events == []
    assert "Not enough points for route (day 3)" in caplog.text


def test_order_for_route_keeps_unlabeled_order() -> None:
    """Test that unlabeled entities keep their relative order at the end."""
    ordered = order_for_route([make_entity("X"), make_entity("Y"), make_entity("Z", TimeSlot.evening)])

    assert [e.name for e in ordered] == ["Z", "X", "Y"]


def test_entity_update_animate_hint(emitter: MapSyncEmitter, listener) -> None:
    """Test that incremental updates ask for animation and full replaces do not."""
    entity_set = EntitySet(attractions=[make_entity("A")])

    emitter.emit_entities(entity_set, incremental=True)
    emitter.emit_entities(entity_set, incremental=False)

    incremental, full = listener.of_kind("entities_updated")
    assert incremental.animate_new is True
    assert full.incremental is False
    assert full.animate_new is False


def test_fly_to_and_viewport_events(emitter: MapSyncEmitter, listener) -> None:
    """Test fly-to defaults and the teardown events."""
    event = emitter.fly_to("Eiffel Tower")
    emitter.fly_to(lat=48.85, lng=2.29)
    emitter.highlight(make_entity("Louvre"))
    emitter.fit_bounds()
    emitter.clear_routes()
    emitter.clear_map()
    emitter.reset_map()

    assert event.zoom == 15
    assert event.duration_ms == 2000
    assert listener.kinds == [
        "fly_to",
        "fly_to",
        "highlight_marker",
        "fit_bounds",
        "clear_routes",
        "clear_map",
        "reset_map",
    ]
    assert listener.events[3].padding == 50


def test_fly_to_requires_target() -> None:
    """Test that fly-to needs a place or both coordinates."""
    with pytest.raises(ValidationError):
        FlyTo(lat=1.0)


def test_unsubscribe_and_failing_listener(emitter: MapSyncEmitter, listener) -> None:
    """Test that a failing listener does not block the others."""
    received: list[str] = []

    def broken(event) -> None:
        raise RuntimeError("renderer crashed")

    emitter.subscribe(broken)
    emitter.subscribe(lambda event: received.append(event.kind))
    emitter.clear_map()

    emitter.unsubscribe(listener)
    emitter.clear_routes()

    assert listener.kinds == ["clear_map"]
    assert received == ["clear_map", "clear_routes"]


def test_events_round_trip_through_discriminated_union() -> None:
    """Test that serialized events parse back into the right type."""
    adapter = TypeAdapter(MapEvent)

    parsed = adapter.validate_python({"kind": "fit_bounds", "padding": 20})

    assert parsed.kind == "fit_bounds"
    assert parsed.max_zoom == 15
