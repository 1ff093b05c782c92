from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable
from zoneinfo import ZoneInfo

from receptionist.application.utils.message_rules import phone_digits
from receptionist.domain.entities.booking import Booking


def upcoming_bookings(bookings: Iterable[Booking], now: datetime, grace_hours: int = 3) -> list[Booking]:
    """Bookings starting no earlier than `grace_hours` before now, in their original order."""
    cutoff = now - timedelta(hours=grace_hours)
    return [booking for booking in bookings if booking.start_time >= cutoff]


def same_phone(left: str | None, right: str | None) -> bool:
    if not left or not right:
        return False
    left_digits, right_digits = phone_digits(left), phone_digits(right)
    return bool(left_digits) and left_digits == right_digits


def same_name(left: str | None, right: str | None) -> bool:
    if not left or not right:
        return False
    return " ".join(left.lower().split()) == " ".join(right.lower().split())


def bookings_for_identity(bookings: Iterable[Booking], phone_number: str | None, guest_name: str | None) -> list[Booking]:
    """Match the caller by phone first; fall back to the name when the phone matches nothing."""
    bookings = list(bookings)
    if phone_number:
        by_phone = [b for b in bookings if same_phone(b.phone_number, phone_number)]
        if by_phone or not guest_name:
            return by_phone
    if guest_name:
        return [b for b in bookings if same_name(b.guest_name, guest_name)]
    return []


def on_local_date(booking: Booking, day: date, timezone: ZoneInfo) -> bool:
    return booking.start_time.astimezone(timezone).date() == day


def at_local_time(booking: Booking, hour_minute: tuple[int, int], timezone: ZoneInfo) -> bool:
    local = booking.start_time.astimezone(timezone)
    return (local.hour, local.minute) == hour_minute
