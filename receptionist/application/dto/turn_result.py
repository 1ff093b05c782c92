from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from receptionist.application.dto.action import Action
from receptionist.application.dto.resolution import Resolution
from receptionist.domain.entities.booking import Booking


@dataclass(frozen=True)
class TurnResult:
    reply: str
    action: Action
    outcome: str
    resolution: Resolution | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"reply": self.reply, "action": self.action.to_dict()}


@dataclass(frozen=True)
class AssistantTurnOutcome:
    reply: str
    action: Action
    created_booking: Booking | None = None
    updated_booking: Booking | None = None
