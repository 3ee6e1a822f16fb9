"""Entity extraction from itinerary text.

Walks the text line by line so "Day N" and time-of-day headers can tag the
mentions that follow them, then hands each line to the marker tokenizer.
Plain check-in/check-out phrases are picked up as hotel mentions as well.
"""

import logging
import re
import unicodedata

from backend.mapsync.extraction.tokenizer import VARIATION_SELECTORS, MarkerTokenizer
from backend.mapsync.models.common import EntityType, TimeSlot
from backend.mapsync.models.entities import RawEntityMention

logger = logging.getLogger(__name__)

_DAY_HEADER = re.compile(r"^[\s#*_>:\-.]*(?:day|יום)\s*(\d{1,3})\b", re.IGNORECASE)
_SLOT_HEADER = re.compile(r"^[\s#*_>:\-.]*(morning|afternoon|evening|בוקר|צהריים|ערב)\b", re.IGNORECASE)

SLOT_WORDS: dict[str, TimeSlot] = {
    "morning": TimeSlot.morning,
    "afternoon": TimeSlot.afternoon,
    "evening": TimeSlot.evening,
    "בוקר": TimeSlot.morning,
    "צהריים": TimeSlot.afternoon,
    "ערב": TimeSlot.evening,
}

_CHECK_PHRASE_EN = re.compile(
    r"(?i:\bcheck[\s-]?(?:in|out)\b)(?:\s+(?i:at|from|to|of|in))?\s+"
    r"(?P<name>(?:(?i:the)\s+)?[A-Z][\w'&.-]*(?:\s+[A-Z][\w'&.-]*)*)"
)
_CHECK_PHRASE_HE = re.compile(
    r"צ['׳]ק[\s-]?(?:אין|אאוט)\s+(?P<name>[^\s,.;:!?()\[\]]+(?:\s+[^\s,.;:!?()\[\]]+){0,2})"
)
CHECK_PHRASE_PATTERNS = (_CHECK_PHRASE_EN, _CHECK_PHRASE_HE)

_TAGS = re.compile(r"<[^>]*>")
_EMPHASIS_MARKS = re.compile(r"\*+|_{2,}")
_WHITESPACE = re.compile(r"\s+")
_SYMBOL_CATEGORIES = frozenset({"So", "Sk", "Cf", "Co", "Cs"})
_STRAY_BRACKETS = str.maketrans("", "", "[]{}")
_EDGE_PUNCTUATION = " ,;:-.|"


def clean_name(raw: str) -> str:
    """Strip emphasis markup, symbols and stray brackets from a mention name."""
    name = _TAGS.sub("", raw)
    name = _EMPHASIS_MARKS.sub("", name)
    name = "".join(
        ch
        for ch in name
        if ch not in VARIATION_SELECTORS and unicodedata.category(ch) not in _SYMBOL_CATEGORIES
    )
    name = name.translate(_STRAY_BRACKETS)
    return _WHITESPACE.sub(" ", name).strip(_EDGE_PUNCTUATION)


class EntityExtractor:
    """Turns itinerary text into an ordered list of raw mentions."""

    def __init__(self, tokenizer: MarkerTokenizer | None = None):
        self.tokenizer = tokenizer or MarkerTokenizer()

    def extract(self, text: str) -> list[RawEntityMention]:
        mentions: list[RawEntityMention] = []
        day_index: int | None = None
        time_slot: TimeSlot | None = None

        for line in text.splitlines():
            day_match = _DAY_HEADER.match(line)
            rest = line
            if day_match:
                day_index = int(day_match.group(1)) or None
                time_slot = None
                rest = line[day_match.end() :]

            slot_match = _SLOT_HEADER.match(rest)
            if slot_match:
                time_slot = SLOT_WORDS[slot_match.group(1).lower()]

            mentions.extend(self._extract_line(line, day_index, time_slot))

        logger.debug(f"[extractor] Found {len(mentions)} mentions")
        return mentions

    def _extract_line(
        self, line: str, day_index: int | None, time_slot: TimeSlot | None
    ) -> list[RawEntityMention]:
        found: list[tuple[int, RawEntityMention]] = []
        masked = list(line)

        for token in self.tokenizer.tokens(line):
            masked[token.start : token.end] = " " * (token.end - token.start)
            name = clean_name(token.raw_name)
            if not name:
                continue
            found.append(
                (
                    token.start,
                    RawEntityMention(
                        marker=token.marker,
                        name=name,
                        type=token.entity_type,
                        inline_coordinates=token.coordinates,
                        day_index=day_index,
                        time_slot=time_slot,
                    ),
                )
            )

        # Check-in/out phrases outside marker spans are hotel mentions
        remainder = "".join(masked)
        for pattern in CHECK_PHRASE_PATTERNS:
            for match in pattern.finditer(remainder):
                phrase = clean_name(match.group(0))
                if not clean_name(match.group("name")):
                    continue
                found.append(
                    (
                        match.start(),
                        RawEntityMention(
                            marker="",
                            name=phrase,
                            type=EntityType.hotel,
                            day_index=day_index,
                            time_slot=time_slot,
                        ),
                    )
                )

        found.sort(key=lambda item: item[0])
        return [mention for _, mention in found]


def extract_entities(text: str) -> list[RawEntityMention]:
    """Extract raw mentions with the default tokenizer."""
    return EntityExtractor().extract(text)
