"""Required and optional fields per advice intent."""

INTENT_FIELD_SCHEMAS: dict[str, list[str]] = {
    "Weather-Request": ["place", "country", "date"],
    "Travel-Restrictions": ["country"],
    "Safety-Information": ["place"],
    "Budget-Advice": ["place"],
    "Travel-Tips": ["place"],
    "Culture-Tips": ["place"],
    "Packing-List": ["place"],
    "Find-Hotel": ["place", "country", "budget_level"],
    "Find-Attractions": ["place"],
    "Find-Restaurants": ["place"],
    "Flight-Information": ["origin", "destination", "date"],
    "Local-Events": ["place"],
    "Currency-Conversion": ["from", "to", "amount"],
    "Cost-Estimate": ["place"],
    "Public-Transport-Info": ["place"],
    "Itinerary-Question": ["day_number", "question_type"],
    "Day-Specific-Advice": ["day_number", "advice_type"],
}

OPTIONAL_FIELD_SCHEMAS: dict[str, list[str]] = {
    "Weather-Request": ["is_current", "is_today", "is_tomorrow", "is_weekend", "time_context"],
    "Travel-Restrictions": ["citizenship"],
    "Safety-Information": ["activity_type"],
    "Find-Hotel": ["price_range", "rating", "amenities", "budget", "date", "check_in"],
    "Find-Attractions": ["category", "radius"],
    "Find-Restaurants": ["cuisine", "price", "rating"],
    "Flight-Information": ["return_time", "passengers", "class"],
    "Local-Events": ["category", "start_time", "end_time", "date"],
    "Currency-Conversion": ["time"],
    "Cost-Estimate": ["category", "currency"],
    "Itinerary-Question": ["itinerary_id", "activity_type"],
    "Day-Specific-Advice": ["itinerary_id", "activity_type", "time_context"],
}

# Aliases folded into "place" for intents whose schema has a place
PLACE_ALIASES: tuple[str, ...] = ("city", "location", "destination", "vacation_location")

# Wrappers whose content is lifted to the top level before validation
NESTED_WRAPPERS: tuple[str, ...] = ("collected", "collected_data", "data")

# Intents whose date requirement can be satisfied by a relative time expression
TIME_SENSITIVE_INTENTS: frozenset[str] = frozenset(
    {"Weather-Request", "Flight-Information", "Local-Events"}
)

# Intents that never require date-like fields; country stays mandatory
DATE_OPTIONAL_INTENTS: frozenset[str] = frozenset({"Find-Hotel"})

DATE_LIKE_FIELDS: frozenset[str] = frozenset(
    {"date", "dates", "time", "check_in", "check_out", "checkin", "checkout"}
)

TRIP_REQUIRED_FIELDS: dict[str, list[str]] = {
    "BASIC": ["vacation_location", "duration", "dates"],
    "FULL": ["vacation_location", "duration", "dates", "budget"],
}

BUDGET_KEYWORDS: dict[str, tuple[str, ...]] = {
    "luxury": ("luxury", "expensive", "high-end", "high end", "upscale"),
    "moderate": ("moderate", "mid-range", "mid range", "average"),
    "cheap": ("low cost", "low-cost", "cheap", "inexpensive"),
}


def required_fields_for(intent: str) -> list[str]:
    return INTENT_FIELD_SCHEMAS.get(intent, [])


def requires_location_resolution(intent: str) -> bool:
    """Intents with a place in their schema go through disambiguation."""
    return "place" in required_fields_for(intent)


def is_advice_intent(intent: str | None) -> bool:
    return bool(intent) and intent in INTENT_FIELD_SCHEMAS


def detect_budget_level(text: str | None) -> str | None:
    """Map budget wording in user text to luxury / moderate / cheap."""
    if not text:
        return None
    lowered = text.lower()
    for level, keywords in BUDGET_KEYWORDS.items():
        if any(keyword in lowered for keyword in keywords):
            return level
    return None
