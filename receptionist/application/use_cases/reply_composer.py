from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo

from receptionist.application.dto.resolution import Resolution
from receptionist.application.exceptions import BookingValidationError
from receptionist.application.utils.date_parser import map_vague_time_to_range
from receptionist.domain.entities.booking import Booking, BookingStatus

MISSING_LABELS = {
    "guest_name": "your name",
    "phone_number": "a phone number",
    "service": "the service you'd like",
    "start_time": "your preferred date and time",
}

INVALID_LABELS = {
    "guest_name": "name",
    "phone_number": "phone number",
    "email": "email address",
    "service": "service",
    "notes": "notes",
    "start_time": "requested time",
    "duration_minutes": "appointment length",
}

STATUS_WORDS = {
    BookingStatus.pending: "pending",
    BookingStatus.confirmed: "confirmed",
    BookingStatus.cancelled: "cancelled",
}

INTENT_VERBS = {"cancel": "cancel", "confirm": "confirm"}

TARGET_STATUS_FOR_INTENT = {
    "cancel": BookingStatus.cancelled,
    "confirm": BookingStatus.confirmed,
}


class ReplyComposer:
    """
    Renders the reply for a resolved turn.

    Replies depend only on the resolution, so identical turns get identical text.
    Booking ids are never shown; appointments are described by service and time.
    """

    def __init__(self, timezone: ZoneInfo, business_name: str = "Your Business", assistant_name: str = "Aiden") -> None:
        self._timezone = timezone
        self._business_name = business_name
        self._assistant_name = assistant_name

    def greeting(self) -> str:
        return (
            f"Thanks for calling {self._business_name}! You're speaking with {self._assistant_name}, "
            "your virtual receptionist. How can I help you today?"
        )

    def extraction_failure_reply(self) -> str:
        return "Sorry, I'm having trouble understanding requests right now. Could you try again in a moment?"

    def compose(self, resolution: Resolution) -> str:
        outcome = resolution.outcome
        if outcome == "create" and resolution.draft is not None:
            draft = resolution.draft
            return (
                f"You're all set, {draft.guest_name}: {draft.service} on {self.format_when(draft.start_time)} "
                f"for {draft.duration_minutes} minutes. Your booking is pending until we confirm it."
            )
        if outcome == "update" and resolution.target is not None:
            status = STATUS_WORDS[TARGET_STATUS_FOR_INTENT[resolution.intent]]
            return f"Your {self._describe_appointment(resolution.target)} has been {status}."
        if outcome == "missing_fields":
            return self._compose_missing(resolution)
        if outcome == "ambiguous_target":
            options = _join([self._describe(booking) for booking in resolution.candidates], last="or")
            verb = INTENT_VERBS.get(resolution.intent, "change")
            return (
                f"I found {len(resolution.candidates)} upcoming appointments: {options}. "
                f"Which one would you like to {verb}?"
            )
        if outcome == "no_target":
            return self._compose_no_target(resolution)
        if outcome == "duplicate" and resolution.target is not None:
            return (
                f"You already have {self._describe(resolution.target)} booked, "
                "so there's nothing more to add. Anything else I can help with?"
            )
        if outcome == "change_unsupported" and resolution.target is not None:
            return self._compose_change_unsupported(resolution)
        if outcome == "extraction_failed":
            return self.extraction_failure_reply()
        return "I can book a new appointment for you or confirm or cancel one you already have. What would you like to do?"

    def compose_update_result(self, resolution: Resolution, updated: Booking | None) -> str:
        """Reply once the store has applied (or failed to apply) a status update."""
        if updated is None:
            verb = INTENT_VERBS.get(resolution.intent, "update")
            return (
                f"I couldn't find that appointment to {verb} in our system anymore. "
                "Could you double-check the details, or would you like to book a new one?"
            )
        return f"Your {self._describe_appointment(updated)} is now {STATUS_WORDS[updated.status]}."

    def compose_create_failure(self, resolution: Resolution, error: BookingValidationError) -> str:
        labels = [INVALID_LABELS.get(name, name.replace("_", " ")) for name in error.fields]
        noun = "that" if len(labels) == 1 else "those"
        subject = f"your {resolution.draft.service} booking" if resolution.draft is not None else "the booking"
        return f"I couldn't save {subject} because the {_join(labels)} didn't look right. Could you check {noun} for me?"

    def format_when(self, value: datetime) -> str:
        """Render an instant in the business timezone, e.g. "Tuesday, October 20 at 10:00 AM"."""
        local = value.astimezone(self._timezone)
        return f"{_format_day(local.date())} at {_format_clock(local.hour, local.minute)}"

    def _describe(self, booking: Booking) -> str:
        return f"{booking.service} on {self.format_when(booking.start_time)}"

    def _describe_appointment(self, booking: Booking) -> str:
        return f"{booking.service} appointment on {self.format_when(booking.start_time)}"

    def _compose_missing(self, resolution: Resolution) -> str:
        extraction = resolution.extraction
        sentences: list[str] = []

        lead = f"Thanks, {extraction.guest_name}!" if extraction.guest_name else ""
        if extraction.service:
            known = _with_article(extraction.service)
            if extraction.start_time is not None and "start_time" not in resolution.invalid_fields:
                known += f" on {self.format_when(extraction.start_time)}"
            elif extraction.requested_date is not None:
                known += f" on {_format_day(extraction.requested_date)}"
            sentences.append(f"{lead} I can book {known} for you.".strip())
        elif lead:
            sentences.append(lead)

        asks: list[str] = []
        for name in resolution.missing_fields:
            if name == "start_time":
                asks.append(self._ask_for_time(resolution))
            else:
                asks.append(MISSING_LABELS.get(name, name.replace("_", " ")))

        for name, reason in resolution.invalid_fields.items():
            if name == "start_time" and extraction.part_of_day and extraction.requested_time is None:
                asks.append(self._ask_for_clock_time(resolution))
            elif name == "start_time" and reason == "is in the past":
                sentences.append("That time has already passed.")
                asks.append("a date and time in the future")
            else:
                label = INVALID_LABELS.get(name, name.replace("_", " "))
                sentences.append(f"The {label} didn't look right ({reason}).")
                asks.append(f"a corrected {label}")

        if asks:
            sentences.append(f"Could you tell me {_join(asks)}?")
        return " ".join(sentences)

    def _ask_for_time(self, resolution: Resolution) -> str:
        extraction = resolution.extraction
        if extraction.requested_date is not None and extraction.requested_time is None:
            return f"what time on {_format_day(extraction.requested_date)} works for you"
        if extraction.requested_time is not None and extraction.requested_date is None:
            hour, minute = extraction.requested_time
            return f"which day you'd like to come in at {_format_clock(hour, minute)}"
        return MISSING_LABELS["start_time"]

    def _ask_for_clock_time(self, resolution: Resolution) -> str:
        extraction = resolution.extraction
        part = extraction.part_of_day or ""
        window = map_vague_time_to_range(part)
        ask = f"a specific time in the {part}"
        if window:
            start, end = window
            ask += f" (anywhere from {_format_clock(start, 0)} to {_format_clock(end, 0)})"
        if extraction.requested_date is None:
            ask += " and which day"
        return ask

    def _compose_change_unsupported(self, resolution: Resolution) -> str:
        extraction = resolution.extraction
        if extraction.start_time is not None:
            new_slot = f" for {self.format_when(extraction.start_time)}"
        elif extraction.requested_time is not None:
            new_slot = f" at {_format_clock(*extraction.requested_time)}"
        elif extraction.requested_date is not None:
            new_slot = f" on {_format_day(extraction.requested_date)}"
        else:
            new_slot = ""
        return (
            f"Your {self._describe_appointment(resolution.target)} is already booked, and I can't change "
            f"the details of a booking. I can cancel it and then book a new one{new_slot} instead. "
            "Just say \"cancel it\" if you'd like me to do that."
        )

    def _compose_no_target(self, resolution: Resolution) -> str:
        verb = INTENT_VERBS.get(resolution.intent, "change")
        if resolution.match_reason == "unknown_reference":
            return (
                "I couldn't find an appointment with that reference. "
                "What name or phone number was it booked under?"
            )
        if not resolution.identity_known:
            return f"I can help you {verb} your appointment. What name or phone number is it booked under?"
        return (
            f"I couldn't find an upcoming appointment to {verb} under those details. "
            "Could you tell me the service or the day it's booked for?"
        )


def _format_day(value: date) -> str:
    return f"{value:%A}, {value:%B} {value.day}"


def _format_clock(hour: int, minute: int) -> str:
    suffix = "AM" if hour < 12 else "PM"
    display_hour = hour % 12 or 12
    return f"{display_hour}:{minute:02d} {suffix}"


def _with_article(noun: str) -> str:
    return f"an {noun}" if noun[:1].lower() in "aeiou" else f"a {noun}"


def _join(items: list[str], last: str = "and") -> str:
    if len(items) <= 1:
        return "".join(items)
    return f"{', '.join(items[:-1])} {last} {items[-1]}"
