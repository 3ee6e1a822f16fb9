"""Location models - disambiguation input and output."""

from typing import Self

from pydantic import BaseModel, Field, model_validator

from backend.mapsync.models.common import Confidence


class LocationQuery(BaseModel):
    """Free-text place with an optional country."""

    place: str
    country: str | None = None


class LocationConflict(BaseModel):
    """Place/country pairing that needs user confirmation."""

    suggested_country: str
    alternative_countries: list[str] = Field(default_factory=list)
    message: str


class ResolvedLocation(BaseModel):
    """Standardized (place, country, country code) tuple."""

    place: str
    country: str | None = None
    country_code: str | None = None
    confidence: Confidence
    conflict: LocationConflict | None = None

    @model_validator(mode="after")
    def validate_conflict_is_low_confidence(self) -> Self:
        """A conflicting pairing can never carry more than low confidence."""
        if self.conflict is not None and self.confidence != Confidence.low:
            raise ValueError("confidence must be 'low' when a conflict is present")
        return self

    @property
    def needs_confirmation(self) -> bool:
        return self.conflict is not None
