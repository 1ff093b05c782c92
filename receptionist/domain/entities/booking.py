from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

MIN_DURATION_MINUTES = 1
MAX_DURATION_MINUTES = 8 * 60


class BookingStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    cancelled = "cancelled"


@dataclass(frozen=True)
class Booking:
    id: str
    guest_name: str
    phone_number: str
    service: str
    start_time: datetime  # timezone-aware
    duration_minutes: int
    status: BookingStatus = BookingStatus.pending
    email: str | None = None
    notes: str | None = None

    @property
    def end_time(self) -> datetime:
        return self.start_time + timedelta(minutes=self.duration_minutes)

    @property
    def is_active(self) -> bool:
        return self.status != BookingStatus.cancelled
