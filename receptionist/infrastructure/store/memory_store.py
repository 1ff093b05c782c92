from __future__ import annotations

import logging
import threading
from dataclasses import replace
from typing import Any, Callable, Mapping

from receptionist.application.dto.booking_draft import BookingDraft
from receptionist.application.ports.booking_store import BookingStorePort
from receptionist.domain.entities.booking import Booking, BookingStatus
from receptionist.infrastructure.store.booking_records import (
    booking_from_draft,
    coerce_draft,
    coerce_status,
    new_booking_id,
)


class MemoryBookingStore(BookingStorePort):
    def __init__(self, id_factory: Callable[[], str] | None = None) -> None:
        self._bookings: dict[str, Booking] = {}  # insertion ordered
        self._issued_ids: set[str] = set()
        self._lock = threading.Lock()
        self._id_factory = id_factory or new_booking_id
        self._logger = logging.getLogger(__name__)

    def create(self, draft: BookingDraft | Mapping[str, Any]) -> Booking:
        validated = coerce_draft(draft)
        with self._lock:
            booking_id = self._id_factory()
            while booking_id in self._issued_ids:
                booking_id = self._id_factory()
            self._issued_ids.add(booking_id)
            booking = booking_from_draft(booking_id, validated)
            self._bookings[booking_id] = booking
        self._logger.info("Booking created", extra={"booking_id": booking.id, "status": booking.status.value})
        return booking

    def list(self) -> list[Booking]:
        with self._lock:
            return list(self._bookings.values())

    def get(self, booking_id: str) -> Booking | None:
        with self._lock:
            return self._bookings.get(booking_id)

    def update_status(self, booking_id: str, status: BookingStatus | str) -> Booking | None:
        target = coerce_status(status)
        with self._lock:
            current = self._bookings.get(booking_id)
            if current is None:
                updated = None
            else:
                updated = replace(current, status=target)
                self._bookings[booking_id] = updated
        if updated is None:
            self._logger.info("Booking not found", extra={"booking_id": booking_id, "status": target.value})
        else:
            self._logger.info("Booking status updated", extra={"booking_id": booking_id, "status": target.value})
        return updated
