"""Deduplicate raw mentions into canonical entities.

The same hotel is typically mentioned several times in an itinerary: once
with a marker, again in a "check-in at ..." sentence, again on departure.
Ordinary mentions are grouped by exact normalized name first; check-in/out
mentions then try to attach to one of those before creating anything new.
"""

import logging
import uuid
from collections.abc import Iterable

from backend.mapsync.dedup.normalizer import (
    FUNCTION_WORDS,
    TRAILING_GENERIC_WORDS,
    has_hotel_keyword,
    is_check_phrase,
    is_generic_hotel_reference,
    normalize_name,
    strip_check_phrase,
)
from backend.mapsync.models.common import EntityType
from backend.mapsync.models.entities import CanonicalEntity, RawEntityMention

logger = logging.getLogger(__name__)

OVERLAP_MIN_SHARED_WORDS = 2
OVERLAP_LONG_WORD_LENGTH = 5
OVERLAP_SHORTER_RATIO = 0.7


def _richness_score(mention: RawEntityMention) -> int:
    """Count useful fields - higher = more complete mention."""
    score = 0
    if mention.inline_coordinates is not None:
        score += 2
    if mention.day_index is not None:
        score += 1
    if mention.time_slot is not None:
        score += 1
    return score


def _merge_mention(entity: CanonicalEntity, mention: RawEntityMention) -> CanonicalEntity:
    """Merge a mention's non-null fields into the entity without overwriting."""
    if mention.inline_coordinates is not None:
        entity.set_exact_coordinates(mention.inline_coordinates)
    if entity.day_index is None and mention.day_index is not None:
        entity.day_index = mention.day_index
    if entity.time_slot is None and mention.time_slot is not None:
        entity.time_slot = mention.time_slot
    return entity


def _new_entity(name: str, normalized: str, entity_type: EntityType) -> CanonicalEntity:
    return CanonicalEntity(
        id=str(uuid.uuid4()),
        name=name,
        normalized_name=normalized,
        type=entity_type,
    )


def _significant_words(normalized: str) -> set[str]:
    return {
        w
        for w in normalized.split()
        if len(w) > 2 and w not in FUNCTION_WORDS and w not in TRAILING_GENERIC_WORDS
    }


def names_overlap(a: str, b: str) -> bool:
    """Word-overlap heuristic between two normalized names.

    Matches on two shared significant words, one shared word longer than five
    characters, or more than 70% of the shorter name's words found in the other.
    """
    shared = _significant_words(a) & _significant_words(b)
    if len(shared) >= OVERLAP_MIN_SHARED_WORDS:
        return True
    if any(len(w) > OVERLAP_LONG_WORD_LENGTH for w in shared):
        return True

    words_a, words_b = a.split(), b.split()
    if not words_a or not words_b:
        return False
    shorter, longer = (words_a, words_b) if len(words_a) <= len(words_b) else (words_b, words_a)
    present = sum(1 for w in shorter if w in longer)
    return present / len(shorter) > OVERLAP_SHORTER_RATIO


def is_hotel_like(entity: CanonicalEntity) -> bool:
    return entity.type == EntityType.hotel or has_hotel_keyword(entity.name)


def _is_hotel_check_phrase(mention: RawEntityMention) -> bool:
    """Check-in/out wording only counts on hotel mentions and unmarked phrases."""
    if mention.type != EntityType.hotel and mention.marker:
        return False
    return is_check_phrase(mention.name)


class Deduplicator:
    """Collapses raw mentions into one canonical entity per distinct place."""

    def deduplicate(
        self,
        mentions: list[RawEntityMention],
        existing: Iterable[CanonicalEntity] = (),
    ) -> list[CanonicalEntity]:
        """Deduplicate mentions, attaching to existing entities where possible.

        Existing entities (e.g. the current session's) that match a mention
        are updated in place and included in the result.

        Args:
            mentions: Raw mentions in document order
            existing: Canonical entities already known to the caller

        Returns:
            One canonical entity per distinct place touched by the mentions,
            in first-mention order
        """
        pool: list[CanonicalEntity] = list(existing)
        by_key: dict[str, CanonicalEntity] = {entity.key: entity for entity in pool}
        result: dict[str, CanonicalEntity] = {}

        ordinary: list[RawEntityMention] = []
        check_phrases: list[RawEntityMention] = []
        for mention in mentions:
            if _is_hotel_check_phrase(mention):
                check_phrases.append(mention)
            else:
                ordinary.append(mention)

        # Phase 1: exact normalized-name groups among ordinary mentions
        groups: dict[str, list[RawEntityMention]] = {}
        for mention in ordinary:
            normalized = normalize_name(mention.name)
            if not normalized:
                continue
            key = f"{mention.type.value}:{normalized}"
            groups.setdefault(key, []).append(mention)

        for key, group in groups.items():
            # max() keeps the earliest mention on ties
            primary = max(group, key=_richness_score)
            entity = by_key.get(key)
            if entity is None:
                entity = _new_entity(primary.name, normalize_name(primary.name), primary.type)
                by_key[key] = entity
                pool.append(entity)
            _merge_mention(entity, primary)
            for secondary in group:
                if secondary is not primary:
                    _merge_mention(entity, secondary)
            result.setdefault(entity.id, entity)

        # Phase 2: attach check-in/out phrases
        for mention in check_phrases:
            stripped = strip_check_phrase(mention.name)
            normalized = normalize_name(stripped) if stripped else ""
            target = self._attach_target(stripped, normalized, pool)

            if target is None:
                if is_generic_hotel_reference(normalized):
                    logger.debug(f"[dedup] No hotel to attach {mention.name!r} to, skipping")
                    continue
                target = _new_entity(stripped, normalized, mention.type)
                by_key[target.key] = target
                pool.append(target)
                logger.debug(f"[dedup] Created {mention.type.value} {stripped!r} from check-in/out phrase")

            _merge_mention(target, mention)
            result.setdefault(target.id, target)

        logger.info(f"[dedup] {len(mentions)} mentions -> {len(result)} canonical entities")
        return list(result.values())

    def _attach_target(
        self, stripped: str, normalized: str, pool: list[CanonicalEntity]
    ) -> CanonicalEntity | None:
        hotels = [entity for entity in pool if is_hotel_like(entity)]
        # Hotel-like entities are tried first in (a) and (b)
        candidates = hotels + [entity for entity in pool if not is_hotel_like(entity)]

        # (a) exact normalized name
        if normalized:
            for entity in candidates:
                if entity.normalized_name == normalized:
                    return entity

        # (b) word overlap
        if normalized and not is_generic_hotel_reference(normalized):
            for entity in candidates:
                if names_overlap(entity.normalized_name, normalized):
                    logger.debug(f"[dedup] {stripped!r} attached to {entity.name!r} by word overlap")
                    return entity

        # (c) hotel-keyword substring, most recent hotel first
        if hotels and (has_hotel_keyword(stripped) or is_generic_hotel_reference(normalized)):
            lowered = stripped.lower()
            for entity in reversed(hotels):
                if entity.normalized_name in lowered or (normalized and normalized in entity.normalized_name):
                    return entity
            if is_generic_hotel_reference(normalized):
                return hotels[-1]

        return None


def deduplicate(
    mentions: list[RawEntityMention],
    existing: Iterable[CanonicalEntity] = (),
) -> list[CanonicalEntity]:
    """Deduplicate with the default heuristics."""
    return Deduplicator().deduplicate(mentions, existing)
