"""Name normalization and check-in/out phrase handling."""

import re

LEADING_GENERIC_WORDS: frozenset[str] = frozenset({"the", "hotel", "resort", "grand", "royal"})

TRAILING_GENERIC_WORDS: frozenset[str] = frozenset(
    {"hotel", "resort", "inn", "suites", "suite", "lodge", "hostel", "motel", "apartments"}
)

FUNCTION_WORDS: frozenset[str] = frozenset(
    {"and", "of", "at", "the", "in", "on", "by", "to", "a", "an", "de", "la", "le", "del", "&"}
)

HOTEL_KEYWORDS: tuple[str, ...] = (
    "hotel",
    "hostel",
    "motel",
    "inn",
    "resort",
    "suites",
    "lodge",
    "guesthouse",
    "b&b",
    "מלון",
    "אכסניה",
)

_PUNCTUATION = re.compile(r"[^\w\s&]|_")
_WHITESPACE = re.compile(r"\s+")

_CHECK_VOCABULARY = re.compile(
    r"\bcheck[\s-]?(?:in|out)\b|\barriv(?:al|e|ing)\b|\bdepart(?:ure|ing)?\b"
    r"|צ['׳]ק[\s-]?(?:אין|אאוט)|הגעה|עזיבה",
    re.IGNORECASE,
)
_LEADING_CONNECTOR = re.compile(r"^\s*(?:[-:,]\s*)?(?:(?:at|from|to|in|of)\b\s*)?", re.IGNORECASE)


def normalize_name(name: str) -> str:
    """Reduce a place name to its comparison form.

    "The Grand Plaza Hotel" and "Grand Plaza" both become "plaza". Generic
    words are only stripped while at least one word remains.
    """
    text = _PUNCTUATION.sub(" ", name.lower())
    words = _WHITESPACE.sub(" ", text).strip().split()

    while len(words) > 1 and words[0] in LEADING_GENERIC_WORDS:
        words.pop(0)
    while len(words) > 1 and words[-1] in TRAILING_GENERIC_WORDS:
        words.pop()

    significant = [w for w in words if w not in FUNCTION_WORDS and len(w) > 1]
    return " ".join(significant or words)


def is_check_phrase(text: str) -> bool:
    """True when the text carries arrival/departure or check-in/out wording."""
    return bool(_CHECK_VOCABULARY.search(text))


def strip_check_phrase(text: str) -> str:
    """Return the place name that follows the check-in/out wording.

    "check-out from Sunset Inn" -> "Sunset Inn". Empty when nothing follows.
    """
    match = _CHECK_VOCABULARY.search(text)
    if not match:
        return text.strip()
    rest = text[match.end() :]
    rest = _LEADING_CONNECTOR.sub("", rest, count=1)
    return _WHITESPACE.sub(" ", rest).strip(" ,;:.-")


def has_hotel_keyword(text: str) -> bool:
    lowered = text.lower()
    return any(re.search(rf"(?<!\w){re.escape(k)}(?!\w)", lowered) for k in HOTEL_KEYWORDS)


def is_generic_hotel_reference(normalized: str) -> bool:
    """"hotel", "the hotel" and similar phrases that name no specific place."""
    words = normalized.split()
    generic = LEADING_GENERIC_WORDS | TRAILING_GENERIC_WORDS | set(HOTEL_KEYWORDS)
    return all(w in generic for w in words)
