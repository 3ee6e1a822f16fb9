"""Structured logging for geocoding calls."""

import logging
from typing import Any

from backend.mapsync.geocoding.guard import GeocodeContext, GeocodeLogger

logger = logging.getLogger(__name__)


class StructuredGeocodeLogger(GeocodeLogger):
    """Structured logger for external geocoding calls."""

    def log_attempt(
        self,
        ctx: GeocodeContext,
        outcome: str,
        latency_ms: float,
        cache_hit: bool = False,
        error_reason: str | None = None,
    ) -> None:
        """Log geocoding call with structured data."""
        log_data: dict[str, Any] = {
            "trace_id": ctx.trace_id,
            "query": ctx.query,
            "tier": ctx.tier,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
            "cache_hit": cache_hit,
        }

        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"Geocoding call: tier {ctx.tier} - {outcome}"

        if outcome in ("success", "cache_hit", "no_results"):
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})
