"""Marker tokenizer for itinerary text.

Recognizes ``<symbol> [Name] (lat, lng)`` where the coordinate suffix is
optional and emphasis markup (``**``/``__`` or inline ``<span>`` tags) may
wrap any part of it. Implemented as a small state machine so each transition
can be tested on its own:

    SCAN --symbol--> EXPECT_NAME --[--> IN_NAME --]--> AFTER_NAME --(--> COORDS
"""

import re
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

from backend.mapsync.models.common import EntityType, Geo

VARIATION_SELECTORS = ("\ufe0f", "\ufe0e")

MARKER_SYMBOLS: dict[str, EntityType] = {
    "🏨": EntityType.hotel,
    "🍽": EntityType.restaurant,
    "🎯": EntityType.attraction,
    "📍": EntityType.attraction,
    "🌙": EntityType.evening_venue,
    "🎭": EntityType.evening_venue,
}

_EMPHASIS = re.compile(r"\*\*|__|</?(?:span|b|strong|em)\b[^>]*>", re.IGNORECASE)
_COORDINATES = re.compile(r"\(\s*(-?\d{1,3}(?:\.\d+)?)\s*,\s*(-?\d{1,3}(?:\.\d+)?)\s*\)")
_INLINE_SPACE = (" ", "\t")


class TokenizerState(str, Enum):
    SCAN = "scan"
    EXPECT_NAME = "expect_name"
    IN_NAME = "in_name"
    AFTER_NAME = "after_name"


@dataclass(frozen=True)
class MarkerToken:
    """One recognized marker with its raw (uncleaned) name."""

    marker: str
    entity_type: EntityType
    raw_name: str
    coordinates: Geo | None
    start: int
    end: int


def _match_marker(text: str, pos: int) -> tuple[str, EntityType, int] | None:
    for symbol, entity_type in MARKER_SYMBOLS.items():
        if text.startswith(symbol, pos):
            end = pos + len(symbol)
            while end < len(text) and text[end] in VARIATION_SELECTORS:
                end += 1
            return symbol, entity_type, end
    return None


def _skip_filler(text: str, pos: int) -> int:
    """Skip inline whitespace and emphasis markup."""
    while pos < len(text):
        if text[pos] in _INLINE_SPACE:
            pos += 1
            continue
        emphasis = _EMPHASIS.match(text, pos)
        if emphasis:
            pos = emphasis.end()
            continue
        break
    return pos


def _parse_coordinates(text: str, pos: int) -> tuple[Geo, int] | None:
    match = _COORDINATES.match(text, pos)
    if not match:
        return None
    lat, lng = float(match.group(1)), float(match.group(2))
    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        return None
    return Geo(lat=lat, lng=lng), match.end()


class MarkerTokenizer:
    """Yields MarkerToken objects from itinerary text in document order."""

    def tokens(self, text: str) -> Iterator[MarkerToken]:
        state = TokenizerState.SCAN
        pos = 0
        start = 0
        marker = ""
        entity_type = EntityType.attraction
        name_start = 0
        depth = 0
        raw_name = ""

        while pos <= len(text):
            if state == TokenizerState.SCAN:
                if pos == len(text):
                    break
                hit = _match_marker(text, pos)
                if hit is None:
                    pos += 1
                    continue
                start = pos
                marker, entity_type, pos = hit
                state = TokenizerState.EXPECT_NAME

            elif state == TokenizerState.EXPECT_NAME:
                pos = _skip_filler(text, pos)
                if pos < len(text) and text[pos] == "[":
                    pos += 1
                    name_start = pos
                    depth = 1
                    state = TokenizerState.IN_NAME
                else:
                    # Bare symbol without a bracketed name
                    state = TokenizerState.SCAN

            elif state == TokenizerState.IN_NAME:
                if pos == len(text) or text[pos] == "\n":
                    # Unterminated name: resume scanning just after it opened
                    pos = name_start
                    state = TokenizerState.SCAN
                    continue
                char = text[pos]
                if char == "[":
                    depth += 1
                elif char == "]":
                    depth -= 1
                    if depth == 0:
                        raw_name = text[name_start:pos]
                        pos += 1
                        state = TokenizerState.AFTER_NAME
                        continue
                pos += 1

            elif state == TokenizerState.AFTER_NAME:
                end = pos
                coordinates = None
                probe = _skip_filler(text, pos)
                parsed = _parse_coordinates(text, probe)
                if parsed is not None:
                    coordinates, end = parsed
                yield MarkerToken(
                    marker=marker,
                    entity_type=entity_type,
                    raw_name=raw_name,
                    coordinates=coordinates,
                    start=start,
                    end=end,
                )
                pos = end
                state = TokenizerState.SCAN
