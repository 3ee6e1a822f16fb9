"""Shared pytest fixtures for all test suites."""

import random
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from backend.mapsync.config import Settings
from backend.mapsync.events.emitter import MapSyncEmitter
from backend.mapsync.models.events import MapEvent

GeocodeHandler = Callable[[httpx.Request], httpx.Response]


class RecordingListener:
    """Map event listener that keeps everything it receives."""

    def __init__(self) -> None:
        self.events: list[MapEvent] = []

    def __call__(self, event: MapEvent) -> None:
        self.events.append(event)

    def of_kind(self, kind: str) -> list[Any]:
        return [event for event in self.events if event.kind == kind]

    @property
    def kinds(self) -> list[str]:
        return [event.kind for event in self.events]


@pytest.fixture
def settings() -> Settings:
    """Settings with test defaults, independent of any .env file."""
    return Settings(
        _env_file=None,
        geocoding_base_url="https://geocode.test/places",
        geocoding_access_token="test-token",
        geocode_timeout_ms=500,
    )


@pytest.fixture
def rng() -> random.Random:
    return random.Random(42)


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def emitter(settings: Settings, listener: RecordingListener) -> MapSyncEmitter:
    emitter = MapSyncEmitter(settings)
    emitter.subscribe(listener)
    return emitter


@pytest.fixture
def make_client() -> Callable[[GeocodeHandler], httpx.AsyncClient]:
    """Factory for httpx clients backed by a MockTransport handler."""

    def _make(handler: GeocodeHandler) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _make


@pytest.fixture
def feature_response() -> Callable[..., dict[str, Any]]:
    """Factory for geocoding response bodies, one feature per (lng, lat) center."""

    def _make(*centers: tuple[float, float]) -> dict[str, Any]:
        return {"features": [{"center": [lng, lat], "place_name": "test"} for lng, lat in centers]}

    return _make
