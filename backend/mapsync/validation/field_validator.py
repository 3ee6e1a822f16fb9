"""Required-field validation for advice intents and trips."""

import logging
from datetime import date
from typing import Any

from backend.mapsync.errors import ConflictError, MissingFieldError
from backend.mapsync.location.city_countries import infer_country_for_city
from backend.mapsync.location.disambiguator import (
    is_country_code,
    is_known_country,
    parse_location_string,
    resolve_location,
)
from backend.mapsync.location.time_reference import enhance_with_time_reference
from backend.mapsync.models.location import LocationQuery, ResolvedLocation
from backend.mapsync.models.validation import TripContext, ValidationResult
from backend.mapsync.validation.schemas import (
    DATE_LIKE_FIELDS,
    DATE_OPTIONAL_INTENTS,
    NESTED_WRAPPERS,
    PLACE_ALIASES,
    TIME_SENSITIVE_INTENTS,
    TRIP_REQUIRED_FIELDS,
    detect_budget_level,
    required_fields_for,
    requires_location_resolution,
)

logger = logging.getLogger(__name__)

LOCATION_CONFIRMATION = "location_confirmation"
RELATIVE_TIME_FLAGS: tuple[str, ...] = ("is_current", "is_today", "is_tomorrow", "is_weekend")


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}


def flatten_intent_data(data: dict[str, Any]) -> dict[str, Any]:
    """Lift fields out of nested wrappers ("collected", "data") to the top level."""
    flat = dict(data)
    for wrapper in NESTED_WRAPPERS:
        nested = flat.pop(wrapper, None)
        if isinstance(nested, dict):
            flat.update(nested)
    return flat


def _fold_place_aliases(data: dict[str, Any]) -> None:
    if not _is_empty(data.get("place")):
        return
    for alias in PLACE_ALIASES:
        if not _is_empty(data.get(alias)):
            data["place"] = data[alias]
            logger.debug(f"[field_validator] Mapped {alias} to place: {data['place']!r}")
            return


def _backfill_from_trip(data: dict[str, Any], trip: TripContext) -> None:
    if _is_empty(data.get("place")) and trip.vacation_location:
        data["place"] = trip.vacation_location
    if _is_empty(data.get("country")) and trip.country:
        data["country"] = trip.country
    if _is_empty(data.get("date")) and trip.dates and trip.dates.start:
        data["date"] = trip.dates.start.isoformat()


def split_place_and_country(place: str) -> LocationQuery:
    """Split "Tel Aviv Israel" or "Paris, France" into place and country.

    The trailing one or two words are taken as the country only when they name
    a known country. Two-letter codes only count after a comma and only when
    they are known ISO codes, so "New York, NY" keeps no country.
    """
    if "," in place:
        parsed = parse_location_string(place)
        if parsed is not None:
            if parsed.country and len(parsed.country) == 2 and not is_country_code(parsed.country):
                return LocationQuery(place=parsed.place)
            return parsed

    words = place.split()
    for width in (2, 1):
        if len(words) <= width:
            continue
        candidate = " ".join(words[-width:])
        if is_known_country(candidate):
            return LocationQuery(place=" ".join(words[:-width]), country=candidate)
    return LocationQuery(place=place.strip())


def _apply_resolution(data: dict[str, Any], resolved: ResolvedLocation) -> None:
    data["place"] = resolved.place
    if resolved.country:
        data["country"] = resolved.country
    if resolved.country_code:
        data["country_code"] = resolved.country_code
    data["location_confidence"] = resolved.confidence.value


def validate_fields(
    intent: str,
    data: dict[str, Any],
    trip_context: TripContext | None = None,
    *,
    user_text: str | None = None,
    today: date | None = None,
) -> ValidationResult:
    """Validate that an intent's required fields are present.

    Fields are derived wherever possible before anything is reported missing:
    aliases and nested wrappers are flattened, trip context back-fills place,
    country and date, the place is disambiguated, and relative time wording
    stands in for an explicit date. A location conflict short-circuits with a
    single "location_confirmation" missing field.

    Args:
        intent: Advice intent name (e.g. "Find-Hotel")
        data: Partially-filled intent data
        trip_context: Optional trip details used to back-fill fields
        user_text: Original user message, scanned for time and budget wording
        today: Reference date for relative time expressions

    Returns:
        ValidationResult with missing fields and the enhanced data
    """
    required = required_fields_for(intent)
    enhanced = flatten_intent_data(data)

    if not required:
        return ValidationResult(is_complete=True, missing_fields=[], enhanced_data=enhanced)

    if "place" in required:
        _fold_place_aliases(enhanced)

    if intent == "Find-Hotel":
        if _is_empty(enhanced.get("budget_level")) and not _is_empty(enhanced.get("budget")):
            enhanced["budget_level"] = enhanced["budget"]
        detected = detect_budget_level(user_text)
        if detected and _is_empty(enhanced.get("budget_level")):
            enhanced["budget_level"] = detected
            logger.debug(f"[field_validator] Detected {detected} budget level from message")

    if trip_context is not None:
        _backfill_from_trip(enhanced, trip_context)

    if requires_location_resolution(intent) and isinstance(enhanced.get("place"), str):
        place = enhanced["place"]
        if _is_empty(enhanced.get("country")):
            query = split_place_and_country(place)
        else:
            query = LocationQuery(place=place, country=enhanced["country"])

        resolved = resolve_location(query)
        _apply_resolution(enhanced, resolved)

        if resolved.conflict is not None:
            logger.warning(f"[field_validator] Location conflict for {intent}: {resolved.conflict.message}")
            return ValidationResult(
                is_complete=False,
                missing_fields=[LOCATION_CONFIRMATION],
                enhanced_data=enhanced,
                conflict_message=resolved.conflict.message,
            )

        if _is_empty(enhanced.get("country")):
            inferred = infer_country_for_city(resolved.place)
            if inferred:
                enhanced["country"] = inferred

    fields_to_check = list(required)

    if intent in TIME_SENSITIVE_INTENTS and user_text:
        enhanced = enhance_with_time_reference(enhanced, user_text, today=today)
        if any(enhanced.get(flag) for flag in RELATIVE_TIME_FLAGS):
            fields_to_check = [f for f in fields_to_check if f != "date"]
            if _is_empty(enhanced.get("date")):
                enhanced["date"] = (today or date.today()).isoformat()

    if intent in DATE_OPTIONAL_INTENTS:
        fields_to_check = [f for f in fields_to_check if f not in DATE_LIKE_FIELDS]

    missing_fields = [f for f in fields_to_check if _is_empty(enhanced.get(f))]

    logger.info(
        f"[field_validator] {intent}: complete={not missing_fields} missing={missing_fields}"
    )
    return ValidationResult(
        is_complete=not missing_fields,
        missing_fields=missing_fields,
        enhanced_data=enhanced,
    )


def validate_trip_fields(trip: dict[str, Any], level: str = "BASIC") -> ValidationResult:
    """Validate trip-planning data at BASIC or FULL level.

    The trip's location is disambiguated; a resolved country is filled in and
    a conflict replaces the location in the missing list.
    """
    required = TRIP_REQUIRED_FIELDS.get(level, TRIP_REQUIRED_FIELDS["BASIC"])
    enhanced = dict(trip)
    missing_fields = [f for f in required if _is_empty(enhanced.get(f))]

    location = enhanced.get("vacation_location")
    if isinstance(location, str) and location.strip():
        resolved = resolve_location(
            LocationQuery(place=location, country=enhanced.get("country"))
        )
        if resolved.country and _is_empty(enhanced.get("country")):
            enhanced["country"] = resolved.country

        if resolved.conflict is not None:
            return ValidationResult(
                is_complete=False,
                missing_fields=[
                    LOCATION_CONFIRMATION,
                    *[f for f in missing_fields if f != "vacation_location"],
                ],
                enhanced_data=enhanced,
                conflict_message=resolved.conflict.message,
            )

    return ValidationResult(
        is_complete=not missing_fields,
        missing_fields=missing_fields,
        enhanced_data=enhanced,
    )


def require_complete(intent: str, result: ValidationResult) -> dict[str, Any]:
    """Return the enhanced data or raise for an incomplete result.

    Raises:
        ConflictError: The place/country pairing needs confirmation
        MissingFieldError: Required fields are still missing
    """
    if result.is_complete:
        return result.enhanced_data

    if LOCATION_CONFIRMATION in result.missing_fields:
        resolved = resolve_location(
            LocationQuery(
                place=str(result.enhanced_data.get("place") or result.enhanced_data.get("vacation_location") or ""),
                country=result.enhanced_data.get("country"),
            )
        )
        raise ConflictError(resolved)

    raise MissingFieldError(intent, result.missing_fields)
