"""Entity models - raw itinerary mentions and their canonical form."""

from pydantic import BaseModel, Field

from backend.mapsync.models.common import (
    CATEGORY_FOR_TYPE,
    EntityCategory,
    EntityType,
    Geo,
    TimeSlot,
)


class RawEntityMention(BaseModel):
    """Place mention as found in itinerary text, not yet resolved."""

    marker: str
    name: str
    type: EntityType
    inline_coordinates: Geo | None = None
    day_index: int | None = Field(default=None, ge=1)
    time_slot: TimeSlot | None = None


class CanonicalEntity(BaseModel):
    """Single deduplicated representation of a real-world place.

    Identity is (type, normalized_name). Entities are only ever updated
    in place within a session, never removed.
    """

    id: str
    name: str
    normalized_name: str
    type: EntityType
    address: str | None = None
    lat: float | None = None
    lng: float | None = None
    is_approximate_location: bool = False
    has_exact_coordinates: bool = False
    day_index: int | None = None
    time_slot: TimeSlot | None = None

    @property
    def category(self) -> EntityCategory:
        return CATEGORY_FOR_TYPE[self.type]

    @property
    def key(self) -> str:
        return f"{self.type.value}:{self.normalized_name}"

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lng is not None

    def set_exact_coordinates(self, geo: Geo) -> None:
        """Apply coordinates known precisely (inline in the text)."""
        if self.has_exact_coordinates:
            return
        self.lat = geo.lat
        self.lng = geo.lng
        self.has_exact_coordinates = True

    def apply_geocode(self, geo: Geo, approximate: bool) -> None:
        """Apply a geocoder result.

        Fallback coordinates taint the entity permanently; only a later exact
        geocode clears the flag. Inline coordinates are never overwritten.
        """
        if self.has_exact_coordinates:
            return
        self.lat = geo.lat
        self.lng = geo.lng
        self.is_approximate_location = approximate


class GeocodeResult(BaseModel):
    """Coordinates produced by the tiered geocoder."""

    geo: Geo
    tier: int = Field(..., ge=1, le=5, description="5 = global fallback")
    is_approximate_location: bool
