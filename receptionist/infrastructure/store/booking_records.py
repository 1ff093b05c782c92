from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Mapping

from receptionist.application.dto.booking_draft import BookingDraft
from receptionist.application.exceptions import BookingStoreError, BookingValidationError
from receptionist.domain.entities.booking import Booking, BookingStatus


def new_booking_id() -> str:
    return uuid.uuid4().hex


def coerce_draft(draft: BookingDraft | Mapping[str, Any]) -> BookingDraft:
    if isinstance(draft, BookingDraft):
        return draft
    return BookingDraft.from_payload(draft)


def coerce_status(status: BookingStatus | str) -> BookingStatus:
    try:
        return BookingStatus(status)
    except ValueError:
        allowed = ", ".join(s.value for s in BookingStatus)
        raise BookingValidationError({"status": f"must be one of: {allowed}"}) from None


def booking_from_draft(booking_id: str, draft: BookingDraft) -> Booking:
    return Booking(
        id=booking_id,
        guest_name=draft.guest_name,
        phone_number=draft.phone_number,
        service=draft.service,
        start_time=draft.start_time,
        duration_minutes=draft.duration_minutes,
        status=BookingStatus.pending,
        email=draft.email,
        notes=draft.notes,
    )


def booking_to_record(booking: Booking) -> dict[str, Any]:
    """Serialize a Booking to the persisted camelCase shape."""
    return {
        "id": booking.id,
        "guestName": booking.guest_name,
        "phoneNumber": booking.phone_number,
        "email": booking.email,
        "service": booking.service,
        "notes": booking.notes,
        "startTime": booking.start_time.isoformat(),
        "durationMinutes": booking.duration_minutes,
        "status": booking.status.value,
    }


def booking_from_record(data: Mapping[str, Any]) -> Booking:
    """Deserialize a persisted record, keeping the stored offset and status."""
    try:
        start_time = datetime.fromisoformat(data["startTime"])
        if start_time.tzinfo is None:
            raise ValueError("startTime has no timezone")
        return Booking(
            id=str(data["id"]),
            guest_name=data["guestName"],
            phone_number=data["phoneNumber"],
            service=data["service"],
            start_time=start_time,
            duration_minutes=int(data["durationMinutes"]),
            status=BookingStatus(data["status"]),
            email=data.get("email"),
            notes=data.get("notes"),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise BookingStoreError(f"Malformed booking record {data.get('id')!r}: {e}") from e
