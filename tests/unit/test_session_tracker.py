"""Tests for map session state."""

from backend.mapsync.models.common import EntityType
from backend.mapsync.models.entities import CanonicalEntity
from backend.mapsync.session.tracker import MapSession


def make_entity(name: str, entity_type: EntityType, day_index: int | None = None) -> CanonicalEntity:
    return CanonicalEntity(
        id=f"{entity_type.value}-{name}",
        name=name,
        normalized_name=name.lower(),
        type=entity_type,
        day_index=day_index,
    )


def test_merge_returns_only_unseen() -> None:
    """Test that merging twice never adds the same key again."""
    session = MapSession()
    inn = make_entity("Sunset", EntityType.hotel)
    cafe = make_entity("Luna", EntityType.restaurant)

    first = session.merge([inn, cafe])
    second = session.merge([make_entity("Sunset", EntityType.hotel), cafe])

    assert first == [inn, cafe]
    assert second == []
    assert len(session) == 2
    assert session.seen_keys == {"hotel:sunset", "restaurant:luna"}


def test_entities_grouped_by_container() -> None:
    """Test that evening venues land in the attractions container."""
    session = MapSession()
    session.merge(
        [
            make_entity("Louvre", EntityType.attraction),
            make_entity("Blue Note", EntityType.evening_venue),
            make_entity("Luna", EntityType.restaurant),
        ]
    )

    entity_set = session.entity_set()

    assert [e.name for e in entity_set.attractions] == ["Louvre", "Blue Note"]
    assert entity_set.attractions[1].type == EntityType.evening_venue
    assert len(entity_set) == 3


def test_entities_for_day_and_find() -> None:
    """Test day filtering and lookup by name."""
    session = MapSession()
    session.merge(
        [
            make_entity("Louvre", EntityType.attraction, day_index=1),
            make_entity("Orsay", EntityType.attraction, day_index=2),
        ]
    )

    assert [e.name for e in session.entities_for_day(2)] == ["Orsay"]
    found = session.find("  louvre ")
    assert found is not None and found.day_index == 1
    assert session.find("Pantheon") is None


def test_reset_discards_everything() -> None:
    """Test that reset starts a new, empty session."""
    session = MapSession()
    old_id = session.session_id
    session.merge([make_entity("Louvre", EntityType.attraction)])

    session.reset()

    assert len(session) == 0
    assert session.seen_keys == set()
    assert session.session_id != old_id
