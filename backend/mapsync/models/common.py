"""Common types and enums shared across all models."""

from enum import Enum

from pydantic import BaseModel, Field


class Geo(BaseModel):
    """Geographic coordinates (WGS84)."""

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class EntityType(str, Enum):
    """Kind of place mentioned in an itinerary."""

    hotel = "hotel"
    restaurant = "restaurant"
    attraction = "attraction"
    evening_venue = "evening_venue"


class EntityCategory(str, Enum):
    """Map container an entity is rendered in."""

    hotels = "hotels"
    restaurants = "restaurants"
    attractions = "attractions"


# Evening venues share the attractions container
CATEGORY_FOR_TYPE: dict[EntityType, EntityCategory] = {
    EntityType.hotel: EntityCategory.hotels,
    EntityType.restaurant: EntityCategory.restaurants,
    EntityType.attraction: EntityCategory.attractions,
    EntityType.evening_venue: EntityCategory.attractions,
}


class TimeSlot(str, Enum):
    """Part of the day an itinerary item is scheduled in."""

    morning = "morning"
    afternoon = "afternoon"
    evening = "evening"


TIME_SLOT_ORDER: dict[TimeSlot, int] = {
    TimeSlot.morning: 0,
    TimeSlot.afternoon: 1,
    TimeSlot.evening: 2,
}


class Confidence(str, Enum):
    """How trustworthy a resolved location is."""

    high = "high"
    medium = "medium"
    low = "low"


class Language(str, Enum):
    """Supported input languages."""

    en = "en"
    he = "he"
