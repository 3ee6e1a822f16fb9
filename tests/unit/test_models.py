"""Tests for the shared models."""

from datetime import date

import pytest
from pydantic import ValidationError

from backend.mapsync import models
from backend.mapsync.models import (
    CanonicalEntity,
    Confidence,
    EntityType,
    Geo,
    LocationConflict,
    ResolvedLocation,
    TimeReference,
)


def test_models_package_imports() -> None:
    """Test that the package re-exports load on every supported Python."""
    assert models.TimeReference is TimeReference
    assert "date" in TimeReference.model_fields


def test_time_reference_date_field() -> None:
    """Test that the date field accepts ISO strings and requires a flag's date."""
    ref = TimeReference(has_reference=True, date="2025-06-12", is_tomorrow=True)

    assert ref.date == date(2025, 6, 12)
    assert ref.has_relative_flag is True

    with pytest.raises(ValidationError):
        TimeReference(has_reference=True, is_today=True)
    with pytest.raises(ValidationError):
        TimeReference(has_reference=True, date=date(2025, 6, 12), is_today=True, is_tomorrow=True)


def test_conflict_requires_low_confidence() -> None:
    """Test that a conflict can only be reported at low confidence."""
    conflict = LocationConflict(suggested_country="Italy", message="Did you mean Rome, Italy?")

    with pytest.raises(ValidationError):
        ResolvedLocation(place="Rome", confidence=Confidence.high, conflict=conflict)


def test_entity_key_uses_type() -> None:
    """Test the identity key and exact coordinates that later geocodes cannot replace."""
    entity = CanonicalEntity(
        id="x", name="Blue Note", normalized_name="blue note", type=EntityType.evening_venue
    )
    entity.set_exact_coordinates(Geo(lat=1.0, lng=2.0))
    entity.apply_geocode(Geo(lat=5.0, lng=6.0), approximate=True)

    assert entity.key == "evening_venue:blue note"
    assert entity.category.value == "attractions"
    assert (entity.lat, entity.lng) == (1.0, 2.0)
    assert entity.is_approximate_location is False
