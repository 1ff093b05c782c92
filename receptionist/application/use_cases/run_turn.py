from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Sequence

from receptionist.application.dto.action import NoAction
from receptionist.application.dto.resolution import Resolution
from receptionist.application.dto.turn_result import TurnResult
from receptionist.application.exceptions import ExtractionFailure
from receptionist.application.ports.slot_extractor import SlotExtractorPort
from receptionist.application.use_cases.reply_composer import ReplyComposer
from receptionist.application.use_cases.resolve_action import ActionResolver
from receptionist.domain.entities.booking import Booking
from receptionist.domain.entities.extraction import Extraction
from receptionist.domain.entities.message import ConversationTurn


class RunTurnUseCase:
    """
    Turns a transcript and a booking snapshot into a reply and at most one action.

    Stateless: everything is re-derived from the inputs on each call, and neither the
    transcript nor the snapshot is modified. Applying the action is the caller's job.
    """

    def __init__(self, extractor: SlotExtractorPort, resolver: ActionResolver, composer: ReplyComposer) -> None:
        self._extractor = extractor
        self._resolver = resolver
        self._composer = composer
        self._logger = logging.getLogger(__name__)

    def execute(
        self,
        history: Iterable[ConversationTurn | Mapping[str, Any]],
        bookings: Sequence[Booking],
        now: datetime | None = None,
    ) -> TurnResult:
        now = now or datetime.now(timezone.utc)
        turns = normalize_history(history)
        snapshot = tuple(bookings)

        if any(turn.role == "user" for turn in turns):
            resolution = self._resolve(turns, snapshot, now)
        else:
            resolution = Resolution(outcome="unclear")

        return TurnResult(
            reply=self._composer.compose(resolution),
            action=resolution.action,
            outcome=resolution.outcome,
            resolution=resolution,
        )

    def _resolve(self, turns: Sequence[ConversationTurn], bookings: Sequence[Booking], now: datetime) -> Resolution:
        try:
            extraction = self._extractor.extract(turns, bookings, now)
        except ExtractionFailure as e:
            self._logger.warning(
                "Slot extraction failed",
                extra={"outcome": "extraction_failed", "error": str(e)},
            )
            return Resolution(outcome="extraction_failed", action=NoAction(), extraction=Extraction())
        return self._resolver.resolve(extraction, bookings, now)


def normalize_history(history: Iterable[ConversationTurn | Mapping[str, Any]]) -> list[ConversationTurn]:
    return [turn if isinstance(turn, ConversationTurn) else ConversationTurn.from_dict(turn) for turn in history]
