"""Map events - notifications consumed by the rendering surface."""

from typing import Annotated, Literal, Self

from pydantic import BaseModel, Field, model_validator

from backend.mapsync.models.common import EntityType
from backend.mapsync.models.entities import CanonicalEntity


class EntitySet(BaseModel):
    """Entities grouped by map container."""

    hotels: list[CanonicalEntity] = Field(default_factory=list)
    restaurants: list[CanonicalEntity] = Field(default_factory=list)
    attractions: list[CanonicalEntity] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.hotels) + len(self.restaurants) + len(self.attractions)

    def all(self) -> list[CanonicalEntity]:
        return [*self.hotels, *self.restaurants, *self.attractions]

    @classmethod
    def from_entities(cls, entities: list[CanonicalEntity]) -> Self:
        grouped: dict[str, list[CanonicalEntity]] = {"hotels": [], "restaurants": [], "attractions": []}
        for entity in entities:
            grouped[entity.category.value].append(entity)
        return cls(**grouped)


class EntitySetUpdate(BaseModel):
    """Full replace or incremental merge of map markers."""

    kind: Literal["entities_updated"] = "entities_updated"
    entities: EntitySet
    incremental: bool
    animate_new: bool


class RoutePoint(BaseModel):
    lat: float
    lng: float
    name: str


class RouteStyle(BaseModel):
    """Styling intent for a route line; drawing is up to the renderer."""

    line_color: str = "#4f46e5"
    line_width: int = 4
    line_opacity: float = Field(default=0.7, ge=0, le=1)
    animate: bool = True
    show_direction_arrows: bool = True
    add_waypoints: bool = True
    profile: Literal["walking", "driving", "cycling"] = "walking"


class RouteDisplay(BaseModel):
    kind: Literal["route_display"] = "route_display"
    points: list[RoutePoint] = Field(..., min_length=2)
    style: RouteStyle
    day_index: int | None = None


class FlyTo(BaseModel):
    """Move the viewport to a named place or to explicit coordinates."""

    kind: Literal["fly_to"] = "fly_to"
    place: str | None = None
    lat: float | None = None
    lng: float | None = None
    zoom: int = 15
    duration_ms: int = 2000

    @model_validator(mode="after")
    def validate_target(self) -> Self:
        """Require either a place or a full coordinate pair."""
        has_coords = self.lat is not None and self.lng is not None
        if not self.place and not has_coords:
            raise ValueError("fly_to needs a place or both lat and lng")
        return self


class HighlightMarker(BaseModel):
    kind: Literal["highlight_marker"] = "highlight_marker"
    name: str
    type: EntityType
    lat: float | None = None
    lng: float | None = None


class ClearMap(BaseModel):
    kind: Literal["clear_map"] = "clear_map"


class ClearRoutes(BaseModel):
    kind: Literal["clear_routes"] = "clear_routes"


class ResetMap(BaseModel):
    kind: Literal["reset_map"] = "reset_map"


class FitBounds(BaseModel):
    kind: Literal["fit_bounds"] = "fit_bounds"
    padding: int = 50
    max_zoom: int = 15


MapEvent = Annotated[
    EntitySetUpdate
    | RouteDisplay
    | FlyTo
    | HighlightMarker
    | ClearMap
    | ClearRoutes
    | ResetMap
    | FitBounds,
    Field(discriminator="kind"),
]
