from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

VAGUE_TIME_RANGES = {
    "morning": (9, 12),
    "afternoon": (12, 17),
    "evening": (17, 20),
    "night": (18, 21),
}

DAY_NAMES = {
    "monday": 0,
    "tuesday": 1,
    "wednesday": 2,
    "thursday": 3,
    "friday": 4,
    "saturday": 5,
    "sunday": 6,
}

MONTH_NAMES = {
    "january": 1,
    "february": 2,
    "march": 3,
    "april": 4,
    "may": 5,
    "june": 6,
    "july": 7,
    "august": 8,
    "september": 9,
    "october": 10,
    "november": 11,
    "december": 12,
}

_MONTHS = "|".join(MONTH_NAMES)
_ORDINAL = r"(?:st|nd|rd|th)?"


def parse_date_preference(text: str, timezone: ZoneInfo, reference_date: date | None = None) -> date | None:
    """Parse date preference from text. Returns date or None if not found."""
    if reference_date is None:
        reference_date = datetime.now(timezone).date()

    normalized = text.lower().strip()

    iso_match = re.search(r"\b(\d{4})-(\d{2})-(\d{2})\b", normalized)
    if iso_match:
        try:
            return date(int(iso_match.group(1)), int(iso_match.group(2)), int(iso_match.group(3)))
        except ValueError:
            pass

    if re.search(r"\bday after tomorrow\b", normalized):
        return reference_date + timedelta(days=2)

    if re.search(r"\b(?:today|tonight)\b", normalized):
        return reference_date

    if re.search(r"\btomorrow\b", normalized):
        return reference_date + timedelta(days=1)

    for day_name, day_num in DAY_NAMES.items():
        if re.search(rf"\b{day_name}s?\b", normalized):
            days_ahead = (day_num - reference_date.weekday()) % 7
            if days_ahead == 0:
                days_ahead = 7
            return reference_date + timedelta(days=days_ahead)

    month_day = re.search(rf"\b({_MONTHS})\s+(\d{{1,2}}){_ORDINAL}\b", normalized)
    day_month = re.search(rf"\b(\d{{1,2}}){_ORDINAL}\s+(?:of\s+)?({_MONTHS})\b", normalized)
    if month_day or day_month:
        if month_day:
            month_num, day = MONTH_NAMES[month_day.group(1)], int(month_day.group(2))
        else:
            month_num, day = MONTH_NAMES[day_month.group(2)], int(day_month.group(1))
        resolved = _roll_forward(month_num, day, None, reference_date)
        if resolved:
            return resolved

    numeric = re.search(r"\b(\d{1,2})/(\d{1,2})(?:/(\d{2,4}))?\b", normalized)
    if numeric:
        month = int(numeric.group(1))
        day = int(numeric.group(2))
        year = int(numeric.group(3)) if numeric.group(3) else None
        if year is not None and year < 100:
            year += 2000
        resolved = _roll_forward(month, day, year, reference_date)
        if resolved:
            return resolved

    return None


def _roll_forward(month: int, day: int, year: int | None, reference_date: date) -> date | None:
    if year is None:
        year = reference_date.year
        if month < reference_date.month or (month == reference_date.month and day < reference_date.day):
            year += 1
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_time_preference(text: str) -> tuple[int, int] | None:
    """
    Parse time preference from text. Returns (hour, minute) or None.

    Times without am/pm between 1 and 7 are read as afternoon/evening hours.
    """
    normalized = text.lower().strip()

    if re.search(r"\b(?:noon|midday)\b", normalized):
        return (12, 0)
    if re.search(r"\bmidnight\b", normalized):
        return (0, 0)

    time_patterns = [
        r"\b(\d{1,2}):(\d{2})\s*(am|pm|a\.m\.|p\.m\.)?(?![a-z])",
        r"\b(\d{1,2})()\s*(am|pm|a\.m\.|p\.m\.)(?![a-z])",
        r"\bat\s+(\d{1,2})()()(?:\s*o'?clock)?\b(?![:/\d])",
    ]

    for pattern in time_patterns:
        match = re.search(pattern, normalized)
        if not match:
            continue
        hour = int(match.group(1))
        minute = int(match.group(2)) if match.group(2) else 0
        am_pm = (match.group(3) or "").replace(".", "") or None

        if am_pm == "pm" and hour != 12:
            hour += 12
        elif am_pm == "am" and hour == 12:
            hour = 0
        elif am_pm is None and 1 <= hour <= 7:
            hour += 12

        if 0 <= hour <= 23 and 0 <= minute <= 59:
            return (hour, minute)

    return None


def detect_part_of_day(text: str) -> str | None:
    normalized = text.lower()
    for part in VAGUE_TIME_RANGES:
        if re.search(rf"\b{part}\b", normalized):
            return part
    if re.search(r"\btonight\b", normalized):
        return "evening"
    return None


def map_vague_time_to_range(vague_time: str) -> tuple[int, int] | None:
    """Map vague time description to hour range. Returns (start_hour, end_hour) or None."""
    normalized = vague_time.lower().strip()
    return VAGUE_TIME_RANGES.get(normalized)


def parse_duration_minutes(text: str) -> int | None:
    """Parse a stated appointment length. Returns minutes or None."""
    normalized = text.lower()

    if re.search(r"\b(?:an?|one)\s+hour\s+and\s+a\s+half\b", normalized):
        return 90
    if re.search(r"\bhalf\s+an?\s+hour\b", normalized):
        return 30

    combined = re.search(r"\b(\d+)\s*(?:hours?|hrs?)\s*(?:and\s+)?(\d+)\s*(?:minutes?|mins?)\b", normalized)
    if combined:
        return int(combined.group(1)) * 60 + int(combined.group(2))

    hours = re.search(r"\b(\d+(?:\.\d+)?)[\s-]*(?:hours?|hrs?)\b", normalized)
    if hours:
        return round(float(hours.group(1)) * 60)

    minutes = re.search(r"\b(\d{1,4})[\s-]*(?:minutes?|mins?)\b", normalized)
    if minutes:
        return int(minutes.group(1))

    if re.search(r"\b(?:an?|one)\s+hour\b", normalized):
        return 60

    return None


def combine_date_time(day: date, hour_minute: tuple[int, int], timezone: ZoneInfo) -> datetime:
    hour, minute = hour_minute
    return datetime.combine(day, time(hour=hour, minute=minute), tzinfo=timezone)
