"""Session state for one itinerary-viewing context.

The caller owns the session and threads it through every pipeline call.
Within a session entities are only ever added, never removed; a full
(non-incremental) run resets it.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime

from backend.mapsync.models.common import EntityCategory
from backend.mapsync.models.entities import CanonicalEntity
from backend.mapsync.models.events import EntitySet

logger = logging.getLogger(__name__)


@dataclass
class MapSession:
    """Single source of truth for what is currently on the map."""

    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    hotels: list[CanonicalEntity] = field(default_factory=list)
    restaurants: list[CanonicalEntity] = field(default_factory=list)
    attractions: list[CanonicalEntity] = field(default_factory=list)
    # Identity keys "<type>:<normalized name>" of everything in the session
    seen_keys: set[str] = field(default_factory=set)

    def __len__(self) -> int:
        return len(self.hotels) + len(self.restaurants) + len(self.attractions)

    def _container(self, category: EntityCategory) -> list[CanonicalEntity]:
        return getattr(self, category.value)

    def entities(self) -> list[CanonicalEntity]:
        return [*self.hotels, *self.restaurants, *self.attractions]

    def entity_set(self) -> EntitySet:
        return EntitySet(
            hotels=list(self.hotels),
            restaurants=list(self.restaurants),
            attractions=list(self.attractions),
        )

    def has_seen(self, entity: CanonicalEntity) -> bool:
        return entity.key in self.seen_keys

    def merge(self, entities: list[CanonicalEntity]) -> list[CanonicalEntity]:
        """Append unseen entities and return only those.

        Entities whose key is already in the session are ignored; the session
        copy stays the one on the map.
        """
        added: list[CanonicalEntity] = []
        for entity in entities:
            if entity.key in self.seen_keys:
                continue
            self.seen_keys.add(entity.key)
            self._container(entity.category).append(entity)
            added.append(entity)

        logger.debug(
            f"[session] {self.session_id}: merged {len(added)} new of {len(entities)}, "
            f"total {len(self)}"
        )
        return added

    def entities_for_day(self, day_index: int) -> list[CanonicalEntity]:
        return [entity for entity in self.entities() if entity.day_index == day_index]

    def find(self, name: str) -> CanonicalEntity | None:
        """Look up an entity by display name (case-insensitive)."""
        lowered = name.strip().lower()
        for entity in self.entities():
            if entity.name.lower() == lowered:
                return entity
        return None

    def reset(self) -> None:
        """Discard all entities and start a fresh session."""
        self.session_id = str(uuid.uuid4())
        self.started_at = datetime.now(UTC)
        self.hotels.clear()
        self.restaurants.clear()
        self.attractions.clear()
        self.seen_keys.clear()
        logger.info(f"[session] Reset, new session {self.session_id}")
