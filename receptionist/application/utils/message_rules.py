from __future__ import annotations

import re
from typing import Callable

from receptionist.application.utils.date_parser import DAY_NAMES, MONTH_NAMES

CANCEL_PATTERNS = (
    r"\bcancel",
    r"\bcall off\b",
    r"\bcan'?t make it\b",
    r"\bcannot make it\b",
    r"\bwon'?t make it\b",
    r"\bwon'?t be able to make\b",
)

CONFIRM_PATTERNS = (
    r"\bconfirm",
    r"\bi'?ll be there\b",
    r"\bi will be there\b",
)

SCHEDULE_PATTERNS = (
    r"\bbook\b",
    r"\bschedule\b",
    r"\breserve\b",
    r"\b(?:make|set up|get) an appointment\b",
    r"\bappointment for\b",
    r"\b(?:i'?d|i would) like (?:a|an|to get|to have|to come in)\b",
    r"\b(?:i want|i need|can i get|could i get|can i have|could i have) (?:a|an|to get|to come in)\b",
    r"\bcome in for\b",
)

NAME_STOPWORDS = frozenset(
    {
        *DAY_NAMES,
        *MONTH_NAMES,
        "today", "tomorrow", "tonight", "morning", "afternoon", "evening", "noon",
        "the", "a", "an", "my", "me", "you", "i", "it", "this", "that", "next",
        "please", "thanks", "thank", "hi", "hello", "hey", "yes", "yeah", "no",
        "ok", "okay", "sure", "just", "looking", "calling", "here", "good", "great",
        "fine", "interested", "trying", "going", "booking", "appointment", "cancel",
        "confirm", "book", "schedule", "at", "for", "on", "and", "or", "with", "am", "pm",
        "phone", "number", "email", "name", "is", "not", "sorry", "also", "still",
    }
)

SERVICE_STOPWORDS = frozenset(
    {
        "appointment", "appointments", "booking", "reservation", "slot", "time", "session",
        "visit", "spot", "for", "at", "on", "with", "tomorrow", "today", "tonight", "next",
        "this", "please", "and", "in", "to", "me", "it",
    }
)

NAME_WORD = r"[A-Za-z][a-zA-Z'\-]+"
CAPITALIZED_WORD = r"[A-Z][a-zA-Z'\-]+"

STRONG_NAME_INTRO = re.compile(
    rf"\b(?i:my name is|my name's|name is|name's|under the name(?: of)?)\s+({NAME_WORD}(?:\s+{NAME_WORD}){{0,2}})"
)
WEAK_NAME_INTRO = re.compile(
    rf"\b(?i:this is|i am|i'm|it's|it is|under|for)\s+({CAPITALIZED_WORD}(?:\s+{CAPITALIZED_WORD}){{0,2}})"
)
LEADING_INTRO = re.compile(r"^(?:my name is|my name's|name's|name is|it's|its|it is|i'm|im|i am|this is)\s+", re.IGNORECASE)

EMAIL_RE = re.compile(r"[\w.+-]+@[\w-]+(?:\.[\w-]+)+")
PHONE_RE = re.compile(r"(?<![\w@/])\+?\(?\d[\d\s().\-]{4,}\d(?![\w/])")
BOOKING_REF_RE = re.compile(
    r"\b(?:booking|appointment|reservation|confirmation|ref(?:erence)?|id)\b\s*(?:id|number|no\.?|#)?\s*[:#]?\s*([0-9a-f]{6,32})\b"
)
NOTES_RE = re.compile(r"\b(?:notes?\s*[:\-]|please note(?: that)?)\s*(.+)$", re.IGNORECASE | re.DOTALL)
SERVICE_AFTER_VERB_RE = re.compile(
    r"\b(?:book|schedule|reserve)\s+(?:me\s+)?(?:in\s+)?(?:for\s+)?(?:a|an|some)\s+([a-z]+(?:[\s\-][a-z]+){0,3})"
)

_TIME_NOISE = (
    re.compile(r"\b\d{4}-\d{2}-\d{2}\b"),
    re.compile(r"\b\d{1,2}(?::\d{2})?\s*(?:am|pm|a\.m\.|p\.m\.)(?![a-z])", re.IGNORECASE),
    re.compile(r"\bat\s+\d{1,2}(?::\d{2})?\b(?![-.\d])", re.IGNORECASE),
    re.compile(r"\b\d{1,2}:\d{2}\b"),
)


def normalize_text(text: str) -> str:
    normalized = text.lower().replace("’", "'")
    normalized = re.sub(r"\s+", " ", normalized).strip()
    return normalized


def _matches_any(text: str, patterns: tuple[str, ...]) -> bool:
    return any(re.search(pattern, text) for pattern in patterns)


def detect_intent(text: str) -> str | None:
    """Explicit intent keyword in a single user message. Cancel beats confirm beats schedule."""
    normalized = normalize_text(text)
    if _matches_any(normalized, CANCEL_PATTERNS):
        return "cancel"
    if _matches_any(normalized, CONFIRM_PATTERNS):
        return "confirm"
    if _matches_any(normalized, SCHEDULE_PATTERNS):
        return "schedule"
    return None


def phone_digits(value: str) -> str:
    return re.sub(r"\D", "", value)


def strip_time_noise(text: str) -> str:
    """Remove dates and clock times so their digits are not read as phone numbers."""
    for pattern in _TIME_NOISE:
        text = pattern.sub(" ", text)
    return text


def extract_email(text: str) -> str | None:
    match = EMAIL_RE.search(text)
    return match.group(0) if match else None


def extract_phone(text: str) -> str | None:
    cleaned = strip_time_noise(EMAIL_RE.sub(" ", text))
    for match in PHONE_RE.finditer(cleaned):
        candidate = match.group(0).strip()
        if 7 <= len(phone_digits(candidate)) <= 15:
            return candidate
    return None


def extract_booking_ref(text: str) -> str | None:
    normalized = normalize_text(text)
    for match in BOOKING_REF_RE.finditer(normalized):
        ref = match.group(1)
        if re.search(r"[a-f]", ref) and re.search(r"\d", ref):
            return ref
    return None


def extract_notes(text: str) -> str | None:
    match = NOTES_RE.search(text)
    if not match:
        return None
    notes = match.group(1).strip()
    return notes or None


def _clean_name(raw: str) -> str | None:
    words: list[str] = []
    for word in raw.split():
        if word.lower() in NAME_STOPWORDS:
            break
        words.append(word)
    if not words:
        return None
    return " ".join(w if not w.islower() else w.capitalize() for w in words)


def extract_name(text: str) -> str | None:
    """Name introduced explicitly ("my name is", "this is Jane", "for Jane")."""
    for pattern in (STRONG_NAME_INTRO, WEAK_NAME_INTRO):
        for match in pattern.finditer(text):
            name = _clean_name(match.group(1))
            if name:
                return name
    return None


def extract_bare_name(text: str, is_service: Callable[[str], bool] | None = None) -> str | None:
    """Name given on its own, as an answer to "what's your name?"."""
    cleaned = strip_time_noise(EMAIL_RE.sub(" ", text))
    for segment in re.split(r"[,.;!?\n]|\d", cleaned):
        segment = LEADING_INTRO.sub("", re.sub(r"\s+", " ", segment).strip())
        words = re.findall(NAME_WORD, segment)
        if not words or len(words) > 3 or " ".join(words) != segment:
            continue
        if any(word.lower() in NAME_STOPWORDS for word in words):
            continue
        if is_service and is_service(segment):
            continue
        return " ".join(word.capitalize() if word.islower() else word for word in words)
    return None


def asks_for_name(assistant_text: str) -> bool:
    return bool(re.search(r"\bname\b", assistant_text.lower()))


def extract_service_phrase(text: str) -> str | None:
    """Free-text service after a booking verb ("book a root canal"), for services outside the catalog."""
    normalized = normalize_text(text)
    match = SERVICE_AFTER_VERB_RE.search(normalized)
    if not match:
        return None
    words: list[str] = []
    for word in re.split(r"[\s\-]", match.group(1)):
        if word in SERVICE_STOPWORDS:
            break
        words.append(word)
    return " ".join(words) or None
