"""Relative time expressions (now/today/tomorrow/weekend) in English and Hebrew."""

import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Literal

from backend.mapsync.models.common import Language
from backend.mapsync.models.time_reference import TimeReference

Family = Literal["current", "today", "tomorrow", "weekend"]


@dataclass(frozen=True)
class _PatternFamily:
    family: Family
    patterns: dict[Language, tuple[re.Pattern[str], ...]]


def _compile(*patterns: str) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(p) for p in patterns)


# Checked in this order; the first family with any match wins.
PATTERN_FAMILIES: tuple[_PatternFamily, ...] = (
    _PatternFamily(
        "current",
        {
            Language.he: _compile(
                r"\bעכשיו\b", r"\bכרגע\b", r"\bברגע זה\b", r"\bבזמן הנוכחי\b", r"\bבזמן הזה\b"
            ),
            Language.en: _compile(
                r"\bright now\b",
                r"\bright this minute\b",
                r"\bat the moment\b",
                r"\bat this moment\b",
                r"\bcurrently\b",
                r"\bpresently\b",
                r"\bcurrent\b",
                r"\bnow\b",
            ),
        },
    ),
    _PatternFamily(
        "today",
        {
            Language.he: _compile(r"\bהיום\b", r"\bביום הזה\b"),
            Language.en: _compile(r"\btoday\b", r"\bthis day\b"),
        },
    ),
    _PatternFamily(
        "tomorrow",
        {
            Language.he: _compile(r"\bמחר\b", r"\bביום הבא\b"),
            Language.en: _compile(r"\btomorrow\b", r"\bnext day\b"),
        },
    ),
    _PatternFamily(
        "weekend",
        {
            Language.he: _compile(r"\bבסוף השבוע\b", r"\bסוף השבוע\b", r"\bסוף שבוע\b"),
            Language.en: _compile(
                r"\bthis weekend\b", r"\bcoming weekend\b", r"\bupcoming weekend\b"
            ),
        },
    ),
)

# Locale weekend start: Friday in Israel, Saturday elsewhere (date.weekday numbering)
WEEKEND_START: dict[Language, int] = {
    Language.he: 4,
    Language.en: 5,
}


def next_weekend_start(today: date, language: Language) -> date:
    """Next occurrence of the locale's weekend start day.

    Today counts when it is the start day itself; once past it, the following
    week's start is returned.
    """
    days_ahead = (WEEKEND_START[language] - today.weekday()) % 7
    return today + timedelta(days=days_ahead)


def _resolve_date(family: Family, language: Language, today: date) -> date:
    if family == "tomorrow":
        return today + timedelta(days=1)
    if family == "weekend":
        return next_weekend_start(today, language)
    return today


def extract_time_reference(text: str | None, today: date | None = None) -> TimeReference | None:
    """Find the first relative time expression in text.

    Args:
        text: Free text in English or Hebrew
        today: Reference date (defaults to the current date)

    Returns:
        TimeReference for the highest-priority matching family, or None
    """
    if not text:
        return None

    today = today or date.today()
    lowered = text.lower()

    for family in PATTERN_FAMILIES:
        for language, patterns in family.patterns.items():
            for pattern in patterns:
                match = pattern.search(lowered)
                if not match:
                    continue
                return TimeReference(
                    has_reference=True,
                    date=_resolve_date(family.family, language, today),
                    is_current=family.family == "current",
                    is_today=family.family == "today",
                    is_tomorrow=family.family == "tomorrow",
                    is_weekend=family.family == "weekend",
                    original_reference=match.group(0),
                    language=language,
                )

    return None


def enhance_with_time_reference(
    data: dict[str, Any], text: str | None, today: date | None = None
) -> dict[str, Any]:
    """Copy a detected time reference into a data mapping.

    The date is only filled when absent; the matching flag and language are
    always set. Returns a new dict; the input is not modified.
    """
    reference = extract_time_reference(text, today=today)
    if reference is None:
        return data

    enhanced = dict(data)
    if reference.date and not enhanced.get("date"):
        enhanced["date"] = reference.date.isoformat()
    for flag in ("is_current", "is_today", "is_tomorrow", "is_weekend"):
        if getattr(reference, flag):
            enhanced[flag] = True
    enhanced["language"] = reference.language.value
    return enhanced
