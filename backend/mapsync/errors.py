"""Error taxonomy for the location resolution pipeline.

Only ConflictError blocks forward progress. Every other failure has a
degraded output and is normally handled inside the pipeline.
"""

from backend.mapsync.models.location import ResolvedLocation


class MapSyncError(Exception):
    """Base class for pipeline errors."""

    pass


class ConflictError(MapSyncError):
    """Place/country pairing is ambiguous and needs user confirmation."""

    def __init__(self, resolved: ResolvedLocation) -> None:
        self.resolved = resolved
        message = resolved.conflict.message if resolved.conflict else "location conflict"
        super().__init__(message)


class MissingFieldError(MapSyncError):
    """Required intent fields are still missing."""

    def __init__(self, intent: str, missing_fields: list[str]) -> None:
        self.intent = intent
        self.missing_fields = missing_fields
        super().__init__(f"{intent}: missing {', '.join(missing_fields)}")


class GeocodeExhaustedError(MapSyncError):
    """Every geocoding tier failed for a query."""

    def __init__(self, query: str) -> None:
        self.query = query
        super().__init__(f"all geocoding tiers failed for {query!r}")


class ExtractionEmptyResult(MapSyncError):
    """No markers found in itinerary text. Logged, never raised to callers."""

    pass


class GeocodeCallError(MapSyncError):
    """External geocoding call failed."""

    pass


class GeocodeTimeoutError(GeocodeCallError):
    """Geocoding call exceeded its hard timeout."""

    pass


class GeocodeCircuitOpenError(GeocodeCallError):
    """Circuit breaker is open for the geocoding service."""

    pass


class GeocodeServiceError(GeocodeCallError):
    """Geocoding service returned an error or an unreadable response."""

    pass
