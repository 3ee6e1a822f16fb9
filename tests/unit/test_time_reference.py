"""Tests for relative time expression resolution."""

from datetime import date

import pytest

from backend.mapsync.location.time_reference import (
    enhance_with_time_reference,
    extract_time_reference,
    next_weekend_start,
)
from backend.mapsync.models.common import Language

# Wednesday
TODAY = date(2025, 6, 11)


@pytest.mark.parametrize(
    ("text", "language"),
    [
        ("What's the weather tomorrow in Paris?", Language.en),
        ("מה מזג האוויר מחר בפריז?", Language.he),
    ],
)
def test_tomorrow_resolves_to_next_day(text: str, language: Language) -> None:
    """Test that a tomorrow phrase resolves to today + 1 in both languages."""
    reference = extract_time_reference(text, today=TODAY)

    assert reference is not None
    assert reference.is_tomorrow is True
    assert reference.date == date(2025, 6, 12)
    assert reference.language == language


def test_current_family_takes_priority() -> None:
    """Test that "now" wins over a later "today" in the same text."""
    reference = extract_time_reference("right now, or today at the latest", today=TODAY)

    assert reference is not None
    assert reference.is_current is True
    assert reference.is_today is False
    assert reference.date == TODAY
    assert reference.original_reference == "right now"


def test_today_in_hebrew() -> None:
    """Test Hebrew "today"."""
    reference = extract_time_reference("איך מזג האוויר היום", today=TODAY)

    assert reference is not None
    assert reference.is_today is True
    assert reference.language == Language.he


def test_weekend_uses_locale_start_day() -> None:
    """Test that the weekend starts Friday in Hebrew and Saturday in English."""
    english = extract_time_reference("any events this weekend?", today=TODAY)
    hebrew = extract_time_reference("מה יש בסוף השבוע", today=TODAY)

    assert english is not None and english.date == date(2025, 6, 14)
    assert hebrew is not None and hebrew.date == date(2025, 6, 13)


def test_next_weekend_start_on_start_day_is_today() -> None:
    """Test that the start day itself counts as this weekend."""
    saturday = date(2025, 6, 14)
    assert next_weekend_start(saturday, Language.en) == saturday
    # Sunday is past the start, so next Saturday
    assert next_weekend_start(date(2025, 6, 15), Language.en) == date(2025, 6, 21)


def test_no_reference_returns_none() -> None:
    """Test that text without relative time yields None."""
    assert extract_time_reference("Weather in Rome on June 20", today=TODAY) is None
    assert extract_time_reference("", today=TODAY) is None
    assert extract_time_reference("I know a place", today=TODAY) is None


def test_enhance_fills_date_and_flag() -> None:
    """Test that enhancement adds date, flag and language to a copy."""
    data = {"place": "Paris"}
    enhanced = enhance_with_time_reference(data, "weather tomorrow", today=TODAY)

    assert enhanced == {
        "place": "Paris",
        "date": "2025-06-12",
        "is_tomorrow": True,
        "language": "en",
    }
    assert "date" not in data


def test_enhance_keeps_existing_date() -> None:
    """Test that an explicit date is never replaced."""
    enhanced = enhance_with_time_reference(
        {"date": "2025-07-01"}, "weather today", today=TODAY
    )

    assert enhanced["date"] == "2025-07-01"
    assert enhanced["is_today"] is True
