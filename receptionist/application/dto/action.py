from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from receptionist.application.dto.booking_draft import BookingDraft
from receptionist.domain.entities.booking import BookingStatus


@dataclass(frozen=True)
class NoAction:
    type: str = "none"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type}


@dataclass(frozen=True)
class CreateAction:
    draft: BookingDraft
    type: str = "create"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "booking": self.draft.to_dict()}


@dataclass(frozen=True)
class UpdateAction:
    booking_id: str
    status: BookingStatus
    type: str = "update"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "bookingId": self.booking_id, "status": self.status.value}


Action = Union[NoAction, CreateAction, UpdateAction]
