"""Call guard for the external geocoding service.

Wraps each geocoding call with:
- Hard timeout (4s per call)
- Circuit breaker (5 failures/60s, half-open after 30s)
- In-memory TTL cache keyed by the normalized query
- Metrics and structured logging

There are no retries. A failed call raises a GeocodeCallError and the
geocoder moves on to its next tier.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum

from backend.mapsync.config import Settings
from backend.mapsync.errors import (
    GeocodeCircuitOpenError,
    GeocodeServiceError,
    GeocodeTimeoutError,
)
from backend.mapsync.models.common import Geo

GeocodeFn = Callable[[str], Awaitable[list[Geo]]]


@dataclass(frozen=True)
class GeocodeContext:
    """Context for a geocoding call with tracing."""

    trace_id: str
    query: str
    tier: int


class BreakerState(str, Enum):
    """Circuit breaker state."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass
class CircuitBreaker:
    """Circuit breaker for the geocoding service.

    Tracks failures within a time window and opens after threshold.
    """

    failure_threshold: int = 5
    window_seconds: int = 60
    half_open_seconds: int = 30
    state: BreakerState = BreakerState.CLOSED
    failure_times: list[datetime] = field(default_factory=list)
    opened_at: datetime | None = None

    def record_success(self) -> None:
        if self.state == BreakerState.HALF_OPEN:
            # Success in half-open -> reset to closed
            self.state = BreakerState.CLOSED
            self.failure_times.clear()
            self.opened_at = None

    def record_failure(self, now: datetime) -> None:
        if self.state == BreakerState.HALF_OPEN:
            # Probe failed -> straight back to open
            self.state = BreakerState.OPEN
            self.opened_at = now
            return

        cutoff = now - timedelta(seconds=self.window_seconds)
        self.failure_times = [t for t in self.failure_times if t > cutoff]
        self.failure_times.append(now)

        if len(self.failure_times) >= self.failure_threshold:
            self.state = BreakerState.OPEN
            self.opened_at = now

    def check_and_update_state(self, now: datetime) -> BreakerState:
        """Check if breaker should transition states."""
        if self.state == BreakerState.OPEN:
            if self.opened_at and (now - self.opened_at).total_seconds() >= self.half_open_seconds:
                self.state = BreakerState.HALF_OPEN

        return self.state

    def is_open(self, now: datetime) -> bool:
        """Check if breaker is currently open (rejecting calls)."""
        return self.check_and_update_state(now) == BreakerState.OPEN


@dataclass
class CacheEntry:
    value: list[Geo]
    cached_at: datetime
    ttl_seconds: int

    def is_fresh(self, now: datetime) -> bool:
        return (now - self.cached_at).total_seconds() < self.ttl_seconds


class GeocodeCache:
    """In-memory cache for geocoding responses."""

    def __init__(self) -> None:
        self._cache: dict[str, CacheEntry] = {}

    @staticmethod
    def make_key(query: str) -> str:
        return " ".join(query.lower().split())

    def get(self, key: str, now: datetime) -> list[Geo] | None:
        """Get cached value if fresh, None otherwise."""
        entry = self._cache.get(key)
        if entry and entry.is_fresh(now):
            return entry.value
        elif entry:
            del self._cache[key]
        return None

    def set(self, key: str, value: list[Geo], ttl_seconds: int, now: datetime) -> None:
        self._cache[key] = CacheEntry(value=value, cached_at=now, ttl_seconds=ttl_seconds)

    def __len__(self) -> int:
        return len(self._cache)


# Metrics interface (to be implemented by actual metrics system)
class GeocodeMetrics:
    """Interface for geocoding metrics."""

    def record_latency(self, outcome: str, latency_ms: float) -> None:
        pass

    def inc_error(self, reason: str) -> None:
        pass

    def inc_cache_hit(self) -> None:
        pass

    def inc_tier(self, tier: int) -> None:
        pass


# Logging interface
class GeocodeLogger:
    """Interface for structured logging."""

    def log_attempt(
        self,
        ctx: GeocodeContext,
        outcome: str,
        latency_ms: float,
        cache_hit: bool = False,
        error_reason: str | None = None,
    ) -> None:
        pass


class GeocodeCallGuard:
    """Guards calls to the external geocoding service."""

    def __init__(
        self,
        fetch_fn: GeocodeFn,
        *,
        timeout_ms: int = 4000,
        breaker: CircuitBreaker | None = None,
        cache: GeocodeCache | None = None,
        cache_ttl_seconds: int = 3600,
        metrics: GeocodeMetrics | None = None,
        logger: GeocodeLogger | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize guard.

        Args:
            fetch_fn: Async function returning candidates for a query
            timeout_ms: Hard timeout per call
            breaker: Circuit breaker (optional, creates a fresh one by default)
            cache: Response cache (optional, creates a fresh one by default)
            cache_ttl_seconds: Cache TTL (0 = no caching)
            metrics: Metrics recorder (optional, defaults to no-op)
            logger: Structured logger (optional, defaults to no-op)
            clock: Injectable "now" (default: datetime.now)
        """
        self._fetch = fetch_fn
        self._timeout_ms = timeout_ms
        self.breaker = breaker or CircuitBreaker()
        self.cache = cache or GeocodeCache()
        self._cache_ttl_seconds = cache_ttl_seconds
        self._metrics = metrics or GeocodeMetrics()
        self._logger = logger or GeocodeLogger()
        self._now = clock or datetime.now

    @classmethod
    def from_settings(
        cls,
        fetch_fn: GeocodeFn,
        settings: Settings,
        *,
        metrics: GeocodeMetrics | None = None,
        logger: GeocodeLogger | None = None,
    ) -> "GeocodeCallGuard":
        return cls(
            fetch_fn,
            timeout_ms=settings.geocode_timeout_ms,
            breaker=CircuitBreaker(
                failure_threshold=settings.geocode_breaker_failures,
                window_seconds=settings.geocode_breaker_window_sec,
                half_open_seconds=settings.geocode_breaker_half_open_sec,
            ),
            cache_ttl_seconds=settings.geocode_cache_ttl_seconds,
            metrics=metrics,
            logger=logger,
        )

    async def call(self, ctx: GeocodeContext) -> list[Geo]:
        """Run one guarded geocoding call.

        Returns:
            Candidate coordinates (possibly empty)

        Raises:
            GeocodeCircuitOpenError: Circuit breaker is open
            GeocodeTimeoutError: Call exceeded the hard timeout
            GeocodeServiceError: Any other call failure
        """
        start_time = time.monotonic()
        now = self._now()

        # Cached results bypass the breaker
        cache_key = GeocodeCache.make_key(ctx.query)
        if self._cache_ttl_seconds > 0:
            cached = self.cache.get(cache_key, now)
            if cached is not None:
                elapsed_ms = (time.monotonic() - start_time) * 1000
                self._metrics.record_latency("cache_hit", elapsed_ms)
                self._metrics.inc_cache_hit()
                self._logger.log_attempt(ctx, "cache_hit", elapsed_ms, cache_hit=True)
                return cached

        if self.breaker.is_open(now):
            elapsed_ms = (time.monotonic() - start_time) * 1000
            self._metrics.record_latency("breaker_open", elapsed_ms)
            self._metrics.inc_error("breaker_open")
            self._logger.log_attempt(ctx, "breaker_open", elapsed_ms, error_reason="breaker_open")
            raise GeocodeCircuitOpenError("Circuit breaker open for geocoding service")

        try:
            result = await asyncio.wait_for(self._fetch(ctx.query), timeout=self._timeout_ms / 1000)
        except TimeoutError as e:
            elapsed_ms = (time.monotonic() - start_time) * 1000
            self._metrics.record_latency("timeout", elapsed_ms)
            self._metrics.inc_error("timeout")
            self._logger.log_attempt(ctx, "timeout", elapsed_ms, error_reason="timeout")
            self.breaker.record_failure(self._now())
            raise GeocodeTimeoutError(f"Geocoding timed out for {ctx.query!r}") from e
        except Exception as e:
            elapsed_ms = (time.monotonic() - start_time) * 1000
            self._metrics.record_latency("error", elapsed_ms)
            self._metrics.inc_error("execution_error")
            self._logger.log_attempt(ctx, "error", elapsed_ms, error_reason=type(e).__name__)
            self.breaker.record_failure(self._now())
            raise GeocodeServiceError(f"Geocoding failed for {ctx.query!r}") from e

        elapsed_ms = (time.monotonic() - start_time) * 1000
        self.breaker.record_success()
        outcome = "success" if result else "no_results"
        self._metrics.record_latency(outcome, elapsed_ms)
        self._logger.log_attempt(ctx, outcome, elapsed_ms)

        if self._cache_ttl_seconds > 0:
            self.cache.set(cache_key, result, self._cache_ttl_seconds, now)

        return result
