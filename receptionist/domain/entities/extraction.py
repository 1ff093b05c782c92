from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

INTENTS = ("schedule", "confirm", "cancel", "unclear")


@dataclass(frozen=True)
class Extraction:
    """Accumulated slots and the intent signal for the latest user turn."""

    intent: str = "unclear"  # "schedule" | "confirm" | "cancel" | "unclear"
    guest_name: str | None = None
    phone_number: str | None = None
    email: str | None = None
    service: str | None = None
    notes: str | None = None
    start_time: datetime | None = None  # set only when date and time are both resolved
    duration_minutes: int | None = None  # as stated by the caller, never defaulted here
    booking_ref: str | None = None
    # Partial temporal information kept for clarification and target matching
    requested_date: date | None = None
    requested_time: tuple[int, int] | None = None  # (hour, minute)
    part_of_day: str | None = None  # "morning", "afternoon", "evening", "night"
    # Set when the latest turn tries to change a request that is already booked
    amends_booking_id: str | None = None

    @property
    def has_identity(self) -> bool:
        return bool(self.guest_name or self.phone_number)
