from __future__ import annotations

import logging
from datetime import datetime
from typing import Sequence
from zoneinfo import ZoneInfo

from pydantic import ValidationError

from receptionist.application.dto.action import CreateAction, UpdateAction
from receptionist.application.dto.booking_draft import BookingDraft
from receptionist.application.dto.resolution import (
    AmbiguousTarget,
    NoMatch,
    Resolution,
    TargetMatch,
    UniqueTarget,
)
from receptionist.application.exceptions import BookingValidationError
from receptionist.application.ports.service_catalog import ServiceCatalogPort
from receptionist.application.utils.booking_filters import (
    at_local_time,
    bookings_for_identity,
    on_local_date,
    same_phone,
    upcoming_bookings,
)
from receptionist.domain.entities.booking import Booking, BookingStatus
from receptionist.domain.entities.extraction import Extraction

MIN_REF_PREFIX = 6
REQUIRED_FIELDS = ("guest_name", "phone_number", "service", "start_time")

TARGET_STATUS = {
    "cancel": BookingStatus.cancelled,
    "confirm": BookingStatus.confirmed,
}

# Which existing statuses a caller may sensibly move from, per intent
TRANSITION_SOURCES = {
    "cancel": (BookingStatus.pending, BookingStatus.confirmed),
    "confirm": (BookingStatus.pending, BookingStatus.confirmed),
}


class ActionResolver:
    def __init__(
        self,
        timezone: ZoneInfo,
        catalog: ServiceCatalogPort,
        default_duration_minutes: int = 45,
        upcoming_grace_hours: int = 3,
    ) -> None:
        self._timezone = timezone
        self._catalog = catalog
        self._default_duration_minutes = default_duration_minutes
        self._upcoming_grace_hours = upcoming_grace_hours
        self._logger = logging.getLogger(__name__)

    def resolve(self, extraction: Extraction, bookings: Sequence[Booking], now: datetime) -> Resolution:
        """
        Pick exactly one action for the turn, or none.

        cancel/confirm -> update when a single target is identified
        schedule       -> create when every required field is present and valid
        anything else  -> none, with an outcome the reply composer can explain
        """
        if extraction.intent in TARGET_STATUS:
            resolution = self._resolve_update(extraction, bookings, now)
        elif extraction.intent == "schedule":
            resolution = self._resolve_create(extraction, bookings, now)
        else:
            resolution = self._resolve_unclear(extraction, bookings)

        self._logger.info(
            "Turn resolved",
            extra={
                "intent": extraction.intent,
                "outcome": resolution.outcome,
                "action": resolution.action.type,
            },
        )
        return resolution

    def find_target(
        self,
        extraction: Extraction,
        bookings: Sequence[Booking],
        now: datetime,
    ) -> TargetMatch:
        """
        Identify the booking a cancel/confirm request refers to.

        An explicit id (or a prefix of at least 6 characters) is matched against the
        whole snapshot. Otherwise the caller's identity selects from upcoming bookings
        in a status the transition makes sense for, narrowed by any service, day or
        time they mentioned. Never guesses between several candidates.
        """
        identity_known = extraction.has_identity

        if extraction.booking_ref:
            matches = _match_reference(extraction.booking_ref, bookings)
            if len(matches) == 1:
                return UniqueTarget(matches[0])
            if not matches:
                return NoMatch(identity_known=identity_known, reason="unknown_reference")
            return AmbiguousTarget(tuple(sorted(matches, key=lambda b: b.start_time)))

        if not identity_known:
            return NoMatch(identity_known=False, reason="no_identity")

        sources = TRANSITION_SOURCES.get(extraction.intent, tuple(BookingStatus))
        pool = [
            booking
            for booking in upcoming_bookings(bookings, now, self._upcoming_grace_hours)
            if booking.status in sources
        ]
        candidates = bookings_for_identity(pool, extraction.phone_number, extraction.guest_name)

        if extraction.service:
            wanted = extraction.service.lower()
            candidates = [b for b in candidates if wanted in b.service.lower() or b.service.lower() in wanted]
        if extraction.requested_date:
            candidates = [b for b in candidates if on_local_date(b, extraction.requested_date, self._timezone)]
        if extraction.requested_time:
            candidates = [b for b in candidates if at_local_time(b, extraction.requested_time, self._timezone)]

        if len(candidates) == 1:
            return UniqueTarget(candidates[0])
        if not candidates:
            return NoMatch(identity_known=True)
        return AmbiguousTarget(tuple(sorted(candidates, key=lambda b: b.start_time)))

    def _resolve_update(self, extraction: Extraction, bookings: Sequence[Booking], now: datetime) -> Resolution:
        match = self.find_target(extraction, bookings, now)
        base = {"intent": extraction.intent, "extraction": extraction, "identity_known": extraction.has_identity}

        if isinstance(match, UniqueTarget):
            return Resolution(
                outcome="update",
                action=UpdateAction(booking_id=match.booking.id, status=TARGET_STATUS[extraction.intent]),
                target=match.booking,
                **base,
            )
        if isinstance(match, AmbiguousTarget):
            return Resolution(outcome="ambiguous_target", candidates=match.candidates, **base)
        return Resolution(outcome="no_target", match_reason=match.reason, **base)

    def _resolve_unclear(self, extraction: Extraction, bookings: Sequence[Booking]) -> Resolution:
        base = {"intent": "unclear", "extraction": extraction, "identity_known": extraction.has_identity}
        if extraction.amends_booking_id:
            # Booked fields other than status never change; the caller is told to cancel and rebook
            booked = next((b for b in bookings if b.id == extraction.amends_booking_id), None)
            if booked is not None:
                return Resolution(outcome="change_unsupported", target=booked, **base)
        return Resolution(outcome="unclear", **base)

    def _resolve_create(self, extraction: Extraction, bookings: Sequence[Booking], now: datetime) -> Resolution:
        base = {"intent": "schedule", "extraction": extraction, "identity_known": extraction.has_identity}

        missing: list[str] = []
        invalid: dict[str, str] = {}
        for name in REQUIRED_FIELDS:
            if getattr(extraction, name) is None:
                missing.append(name)

        if extraction.start_time is None and extraction.part_of_day and extraction.requested_time is None:
            missing.remove("start_time")
            invalid["start_time"] = f"'{extraction.part_of_day}' needs a specific clock time"
        elif extraction.start_time is not None and extraction.start_time < now:
            invalid["start_time"] = "is in the past"

        if missing or invalid:
            return Resolution(
                outcome="missing_fields",
                missing_fields=tuple(missing),
                invalid_fields=invalid,
                **base,
            )

        if extraction.duration_minutes is not None:
            duration = extraction.duration_minutes
        else:
            duration = self._catalog.get_duration_minutes(extraction.service) or self._default_duration_minutes
        try:
            draft = BookingDraft(
                guest_name=extraction.guest_name,
                phone_number=extraction.phone_number,
                email=extraction.email,
                service=extraction.service,
                notes=extraction.notes,
                start_time=extraction.start_time,
                duration_minutes=duration,
            )
        except ValidationError as e:
            errors = BookingValidationError.from_pydantic(e).errors
            return Resolution(outcome="missing_fields", invalid_fields=errors, **base)

        duplicate = _find_duplicate(draft, bookings)
        if duplicate is not None:
            return Resolution(outcome="duplicate", draft=draft, target=duplicate, **base)

        return Resolution(outcome="create", action=CreateAction(draft=draft), draft=draft, **base)


def _match_reference(reference: str, bookings: Sequence[Booking]) -> list[Booking]:
    ref = reference.strip().lower()
    exact = [b for b in bookings if b.id.lower() == ref]
    if exact or len(ref) < MIN_REF_PREFIX:
        return exact
    return [b for b in bookings if b.id.lower().startswith(ref)]


def _find_duplicate(draft: BookingDraft, bookings: Sequence[Booking]) -> Booking | None:
    for booking in bookings:
        if (
            booking.is_active
            and booking.start_time == draft.start_time
            and booking.service.lower() == draft.service.lower()
            and same_phone(booking.phone_number, draft.phone_number)
        ):
            return booking
    return None
