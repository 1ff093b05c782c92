from __future__ import annotations

import logging
import re
from dataclasses import dataclass, fields
from datetime import date, datetime
from typing import Any, Sequence
from zoneinfo import ZoneInfo

from receptionist.application.ports.service_catalog import ServiceCatalogPort
from receptionist.application.ports.slot_extractor import SlotExtractorPort
from receptionist.application.utils.booking_filters import same_phone
from receptionist.application.utils.date_parser import (
    combine_date_time,
    detect_part_of_day,
    parse_date_preference,
    parse_duration_minutes,
    parse_time_preference,
)
from receptionist.application.utils.message_rules import (
    EMAIL_RE,
    asks_for_name,
    detect_intent,
    extract_bare_name,
    extract_booking_ref,
    extract_email,
    extract_name,
    extract_notes,
    extract_phone,
    extract_service_phrase,
)
from receptionist.domain.entities.booking import Booking
from receptionist.domain.entities.extraction import Extraction
from receptionist.domain.entities.message import ConversationTurn

IDENTITY_FIELDS = ("guest_name", "phone_number", "email")
REQUEST_FIELDS = (
    "service",
    "notes",
    "booking_ref",
    "requested_date",
    "requested_time",
    "part_of_day",
    "duration_minutes",
)


@dataclass(frozen=True)
class TurnSlots:
    """What a single user message says, before accumulation."""

    intent: str | None = None
    guest_name: str | None = None
    phone_number: str | None = None
    email: str | None = None
    service: str | None = None
    notes: str | None = None
    booking_ref: str | None = None
    requested_date: date | None = None
    requested_time: tuple[int, int] | None = None
    part_of_day: str | None = None
    duration_minutes: int | None = None

    def contributes(self, names: tuple[str, ...] | None = None) -> bool:
        names = names or tuple(f.name for f in fields(self) if f.name != "intent")
        return any(getattr(self, name) is not None for name in names)


class RuleBasedSlotExtractor(SlotExtractorPort):
    def __init__(self, catalog: ServiceCatalogPort, timezone: ZoneInfo) -> None:
        self._catalog = catalog
        self._timezone = timezone
        self._logger = logging.getLogger(__name__)

    def extract(
        self,
        history: Sequence[ConversationTurn],
        bookings: Sequence[Booking],
        now: datetime,
    ) -> Extraction:
        today = now.astimezone(self._timezone).date()
        booking_ids = [booking.id for booking in bookings]

        parsed: list[TurnSlots] = []
        previous_assistant: str | None = None
        for turn in history:
            if turn.role == "assistant":
                previous_assistant = turn.content
                continue
            parsed.append(self._parse_turn(turn.content, previous_assistant, today, booking_ids))
            previous_assistant = None

        if not parsed:
            return Extraction()

        # A request window closes once its draft is in the snapshot; a booking
        # request naming another service only replaces the service while open.
        window_start = 0
        window_intent: str | None = None
        for index, slots in enumerate(parsed):
            if slots.intent is None:
                continue
            if window_intent is not None and (
                slots.intent != window_intent
                or (slots.service and slots.intent != "schedule")
                or self._booked_request(parsed[:index], parsed[window_start:index], bookings) is not None
            ):
                window_start = index
            window_intent = slots.intent

        identity = _fold(parsed, IDENTITY_FIELDS)
        request = _fold(parsed[window_start:], REQUEST_FIELDS)

        latest = parsed[-1]
        booked = None
        if latest.intent is None:
            booked = self._booked_request(parsed[:-1], parsed[window_start:-1], bookings)

        amends_booking_id = None
        if latest.intent:
            intent = latest.intent
        elif booked is not None:
            intent = "unclear"
            if latest.contributes(REQUEST_FIELDS):
                amends_booking_id = booked.id
        elif latest.contributes() and window_intent:
            intent = window_intent
        elif latest.contributes() and request.get("service") and (
            request.get("requested_date") or request.get("requested_time")
        ):
            intent = "schedule"
        else:
            intent = "unclear"

        extraction = Extraction(
            intent=intent,
            start_time=self._start_time(request),
            amends_booking_id=amends_booking_id,
            **identity,
            **request,
        )
        self._logger.debug(
            "Slots extracted",
            extra={"intent": intent, "fields": ",".join(sorted({**identity, **request}))},
        )
        return extraction

    def _start_time(self, request: dict[str, Any]) -> datetime | None:
        if request.get("requested_date") and request.get("requested_time"):
            return combine_date_time(request["requested_date"], request["requested_time"], self._timezone)
        return None

    def _booked_request(
        self,
        identity_turns: Sequence[TurnSlots],
        window_turns: Sequence[TurnSlots],
        bookings: Sequence[Booking],
    ) -> Booking | None:
        """The active booking the window's request already produced, matched by phone, service and time."""
        if not window_turns:
            return None
        identity = _fold(identity_turns, IDENTITY_FIELDS)
        request = _fold(window_turns, REQUEST_FIELDS)
        start_time = self._start_time(request)
        service = request.get("service")
        if start_time is None or not service or not identity.get("phone_number"):
            return None
        for booking in bookings:
            if (
                booking.is_active
                and booking.start_time == start_time
                and booking.service.lower() == service.lower()
                and same_phone(booking.phone_number, identity["phone_number"])
            ):
                return booking
        return None

    def _parse_turn(
        self,
        text: str,
        previous_assistant: str | None,
        today: date,
        booking_ids: list[str],
    ) -> TurnSlots:
        phone = extract_phone(text)
        temporal_text = EMAIL_RE.sub(" ", text)
        if phone:
            temporal_text = temporal_text.replace(phone, " ")

        name = extract_name(text)
        if not name and previous_assistant and asks_for_name(previous_assistant):
            name = extract_bare_name(text, is_service=lambda value: self._catalog.match_service(value) is not None)

        entry = self._catalog.match_service(text)
        service = entry.display_name if entry else extract_service_phrase(text)

        return TurnSlots(
            intent=detect_intent(text),
            guest_name=name,
            phone_number=phone,
            email=extract_email(text),
            service=service,
            notes=extract_notes(text),
            booking_ref=extract_booking_ref(text) or _mentioned_booking_id(text, booking_ids),
            requested_date=parse_date_preference(temporal_text, self._timezone, today),
            requested_time=parse_time_preference(temporal_text),
            part_of_day=detect_part_of_day(temporal_text),
            duration_minutes=parse_duration_minutes(temporal_text),
        )


def _fold(parsed: Sequence[TurnSlots], names: tuple[str, ...]) -> dict[str, Any]:
    """Later turns override earlier ones, field by field."""
    folded: dict[str, Any] = {}
    for slots in parsed:
        for name in names:
            value = getattr(slots, name)
            if value is not None:
                folded[name] = value
    return folded


def _mentioned_booking_id(text: str, booking_ids: list[str]) -> str | None:
    for token in re.findall(r"\b[0-9a-f]{6,32}\b", text.lower()):
        if any(booking_id.lower().startswith(token) for booking_id in booking_ids):
            return token
    return None
