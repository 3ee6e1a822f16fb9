"""Models package - re-exports for convenience."""

from backend.mapsync.models.common import (
    CATEGORY_FOR_TYPE,
    TIME_SLOT_ORDER,
    Confidence,
    EntityCategory,
    EntityType,
    Geo,
    Language,
    TimeSlot,
)
from backend.mapsync.models.entities import CanonicalEntity, GeocodeResult, RawEntityMention
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
from backend.mapsync.models.location import LocationConflict, LocationQuery, ResolvedLocation
from backend.mapsync.models.time_reference import TimeReference
from backend.mapsync.models.validation import TripContext, TripDates, ValidationResult

__all__ = [
    # Common
    "Geo",
    "EntityType",
    "EntityCategory",
    "CATEGORY_FOR_TYPE",
    "TimeSlot",
    "TIME_SLOT_ORDER",
    "Confidence",
    "Language",
    # Location
    "LocationQuery",
    "LocationConflict",
    "ResolvedLocation",
    # Time
    "TimeReference",
    # Validation
    "TripContext",
    "TripDates",
    "ValidationResult",
    # Entities
    "RawEntityMention",
    "CanonicalEntity",
    "GeocodeResult",
    # Events
    "EntitySet",
    "EntitySetUpdate",
    "RoutePoint",
    "RouteStyle",
    "RouteDisplay",
    "FlyTo",
    "HighlightMarker",
    "ClearMap",
    "ClearRoutes",
    "ResetMap",
    "FitBounds",
    "MapEvent",
]
