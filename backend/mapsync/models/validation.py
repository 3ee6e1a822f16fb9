"""Validation models - intent field completeness."""

from datetime import date
from typing import Any

from pydantic import BaseModel, Field


class TripDates(BaseModel):
    """Trip date range as stored by the trip layer."""

    start: date | None = None
    end: date | None = None


class TripContext(BaseModel):
    """Trip details used to back-fill missing intent fields."""

    vacation_location: str | None = None
    country: str | None = None
    dates: TripDates | None = None


class ValidationResult(BaseModel):
    """Outcome of validating an intent's data."""

    is_complete: bool
    missing_fields: list[str] = Field(default_factory=list)
    enhanced_data: dict[str, Any] = Field(default_factory=dict)
    conflict_message: str | None = None
