from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Sequence

from receptionist.domain.entities.booking import Booking
from receptionist.domain.entities.extraction import Extraction
from receptionist.domain.entities.message import ConversationTurn


class SlotExtractorPort(ABC):
    @abstractmethod
    def extract(
        self,
        history: Sequence[ConversationTurn],
        bookings: Sequence[Booking],
        now: datetime,
    ) -> Extraction:
        """
        Derive the accumulated scheduling fields and the intent of the latest user turn.

        Requirements:
        - Re-derive everything from `history` on every call; keep no state between calls
        - Fields stated in earlier turns stay available to later turns
        - Leave `start_time` unset unless both a day and a clock time are known
        - Never mutate `bookings`

        Raises:
            ExtractionFailure: the interpretation step is unavailable or returned malformed output
        """
        raise NotImplementedError
