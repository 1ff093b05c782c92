from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping

from receptionist.application.dto.action import CreateAction, UpdateAction
from receptionist.application.dto.resolution import Resolution
from receptionist.application.dto.turn_result import AssistantTurnOutcome
from receptionist.application.exceptions import BookingValidationError
from receptionist.application.ports.booking_store import BookingStorePort
from receptionist.application.use_cases.reply_composer import ReplyComposer
from receptionist.application.use_cases.run_turn import RunTurnUseCase
from receptionist.domain.entities.message import ConversationTurn


class HandleAssistantTurnUseCase:
    """Runs one assistant turn against the store and applies the chosen action."""

    def __init__(self, store: BookingStorePort, run_turn: RunTurnUseCase, composer: ReplyComposer) -> None:
        self._store = store
        self._run_turn = run_turn
        self._composer = composer
        self._logger = logging.getLogger(__name__)

    def execute(
        self,
        history: Iterable[ConversationTurn | Mapping[str, Any]],
        now: datetime | None = None,
    ) -> AssistantTurnOutcome:
        now = now or datetime.now(timezone.utc)
        bookings = self._store.list()
        result = self._run_turn.execute(history, bookings, now)
        resolution = result.resolution or Resolution(outcome=result.outcome, action=result.action)
        action = result.action

        if isinstance(action, CreateAction):
            try:
                created = self._store.create(action.draft)
            except BookingValidationError as e:
                self._logger.warning(
                    "Booking rejected by store",
                    extra={"action": action.type, "fields": ",".join(e.fields)},
                )
                return AssistantTurnOutcome(reply=self._composer.compose_create_failure(resolution, e), action=action)
            return AssistantTurnOutcome(reply=result.reply, action=action, created_booking=created)

        if isinstance(action, UpdateAction):
            updated = self._store.update_status(action.booking_id, action.status)
            return AssistantTurnOutcome(
                reply=self._composer.compose_update_result(resolution, updated),
                action=action,
                updated_booking=updated,
            )

        return AssistantTurnOutcome(reply=result.reply, action=action)
