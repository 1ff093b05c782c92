from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping

from receptionist.application.dto.booking_draft import BookingDraft
from receptionist.domain.entities.booking import Booking, BookingStatus


class BookingStorePort(ABC):
    @abstractmethod
    def create(self, draft: BookingDraft | Mapping[str, Any]) -> Booking:
        """
        Persist a new booking.

        Assigns a fresh id that is never reused and the `pending` status.
        Raises BookingValidationError naming the violated fields.
        """
        raise NotImplementedError

    @abstractmethod
    def list(self) -> list[Booking]:
        """Return every booking in insertion order. No filtering, no side effects."""
        raise NotImplementedError

    @abstractmethod
    def get(self, booking_id: str) -> Booking | None:
        raise NotImplementedError

    @abstractmethod
    def update_status(self, booking_id: str, status: BookingStatus | str) -> Booking | None:
        """
        Atomically set the status of one booking.

        Any status may follow any other. Returns None when no booking has
        this id; unknown ids never create records.
        """
        raise NotImplementedError
