"""Time reference models - relative time expressions resolved to dates."""

import datetime as dt
from typing import Self

from pydantic import BaseModel, model_validator

from backend.mapsync.models.common import Language


class TimeReference(BaseModel):
    """Relative time expression found in user text."""

    has_reference: bool
    date: dt.date | None = None
    is_current: bool = False
    is_today: bool = False
    is_tomorrow: bool = False
    is_weekend: bool = False
    original_reference: str | None = None
    language: Language = Language.en

    @model_validator(mode="after")
    def validate_single_flag(self) -> Self:
        """At most one relative-time flag may be set."""
        flags = [self.is_current, self.is_today, self.is_tomorrow, self.is_weekend]
        if sum(flags) > 1:
            raise ValueError("at most one of is_current/is_today/is_tomorrow/is_weekend may be set")
        if any(flags) and self.date is None:
            raise ValueError("date is required when a relative-time flag is set")
        return self

    @property
    def has_relative_flag(self) -> bool:
        return self.is_current or self.is_today or self.is_tomorrow or self.is_weekend
