from __future__ import annotations

from datetime import date, datetime, timezone

from conftest import NOW, TZ, make_booking
from receptionist.application.dto.resolution import Resolution
from receptionist.application.exceptions import BookingValidationError
from receptionist.domain.entities.booking import BookingStatus
from receptionist.domain.entities.extraction import Extraction


def test_format_when_uses_business_timezone(composer):
    assert composer.format_when(datetime(2026, 10, 20, 10, 0, tzinfo=TZ)) == "Tuesday, October 20 at 10:00 AM"
    assert composer.format_when(datetime(2026, 10, 23, 14, 5, tzinfo=TZ)) == "Friday, October 23 at 2:05 PM"
    assert composer.format_when(datetime(2026, 10, 20, 17, 0, tzinfo=timezone.utc)) == "Tuesday, October 20 at 10:00 AM"


def test_greeting(composer):
    assert composer.greeting() == (
        "Thanks for calling Studio Nine! You're speaking with Aiden, your virtual receptionist. "
        "How can I help you today?"
    )


def test_create_reply_names_service_time_and_duration(resolver, composer):
    extraction = Extraction(
        intent="schedule",
        guest_name="Jane",
        phone_number="555-1234",
        service="haircut",
        start_time=datetime(2026, 10, 20, 10, 0, tzinfo=TZ),
    )
    reply = composer.compose(resolver.resolve(extraction, [], NOW))

    assert "haircut" in reply
    assert "Tuesday, October 20 at 10:00 AM" in reply
    assert "45 minutes" in reply
    assert "pending" in reply


def test_missing_fields_reply_asks_for_each_missing_field(composer):
    resolution = Resolution(
        outcome="missing_fields",
        intent="schedule",
        extraction=Extraction(intent="schedule", service="massage"),
        missing_fields=("guest_name", "phone_number", "start_time"),
    )
    reply = composer.compose(resolution)

    assert reply == (
        "I can book a massage for you. "
        "Could you tell me your name, a phone number and your preferred date and time?"
    )


def test_missing_time_on_known_day(composer):
    resolution = Resolution(
        outcome="missing_fields",
        intent="schedule",
        extraction=Extraction(
            intent="schedule", guest_name="Jane", phone_number="555-1234", service="facial",
            requested_date=date(2026, 10, 20),
        ),
        missing_fields=("start_time",),
    )
    reply = composer.compose(resolution)

    assert reply.startswith("Thanks, Jane! I can book a facial on Tuesday, October 20 for you.")
    assert "what time on Tuesday, October 20 works for you" in reply


def test_part_of_day_reply_suggests_a_range(composer):
    resolution = Resolution(
        outcome="missing_fields",
        intent="schedule",
        extraction=Extraction(intent="schedule", service="haircut", part_of_day="afternoon"),
        missing_fields=("guest_name",),
        invalid_fields={"start_time": "'afternoon' needs a specific clock time"},
    )
    reply = composer.compose(resolution)

    assert "a specific time in the afternoon (anywhere from 12:00 PM to 5:00 PM) and which day" in reply
    assert "your name" in reply


def test_past_time_reply(composer):
    resolution = Resolution(
        outcome="missing_fields",
        intent="schedule",
        extraction=Extraction(intent="schedule", start_time=datetime(2026, 10, 19, 8, 0, tzinfo=TZ)),
        invalid_fields={"start_time": "is in the past"},
    )
    reply = composer.compose(resolution)
    assert "already passed" in reply
    assert "a date and time in the future" in reply


def test_ambiguous_reply_lists_candidates_without_ids(composer):
    first = make_booking(booking_id="b" * 32)
    second = make_booking(booking_id="c" * 32, service="massage", start_time=datetime(2026, 10, 22, 15, 0, tzinfo=TZ))
    resolution = Resolution(outcome="ambiguous_target", intent="cancel", candidates=(first, second))
    reply = composer.compose(resolution)

    assert "haircut on Tuesday, October 20 at 10:00 AM" in reply
    assert "massage on Thursday, October 22 at 3:00 PM" in reply
    assert "Which one would you like to cancel?" in reply
    assert "b" * 8 not in reply and "c" * 8 not in reply


def test_no_target_asks_for_identity_when_unknown(composer):
    reply = composer.compose(Resolution(outcome="no_target", intent="cancel", match_reason="no_identity"))
    assert "name or phone number" in reply


def test_no_target_with_identity(composer):
    reply = composer.compose(Resolution(outcome="no_target", intent="confirm", identity_known=True))
    assert "couldn't find an upcoming appointment to confirm" in reply


def test_update_result_not_found_hides_id(composer):
    booking = make_booking(booking_id="9f8e7d6c5b4a39281706f5e4d3c2b1a0")
    resolution = Resolution(outcome="update", intent="cancel", target=booking)
    reply = composer.compose_update_result(resolution, None)

    assert "couldn't find that appointment to cancel" in reply
    assert booking.id not in reply
    assert "9f8e7d" not in reply


def test_update_result_names_new_status(composer):
    booking = make_booking(status=BookingStatus.confirmed)
    reply = composer.compose_update_result(Resolution(outcome="update", intent="confirm", target=booking), booking)
    assert reply == "Your haircut appointment on Tuesday, October 20 at 10:00 AM is now confirmed."


def test_create_failure_names_rejected_fields(composer):
    error = BookingValidationError({"email": "value is not a valid email address"})
    reply = composer.compose_create_failure(Resolution(outcome="create"), error)
    assert "email address" in reply


def test_create_failure_names_the_service(resolver, composer):
    resolution = resolver.resolve(
        Extraction(
            intent="schedule",
            guest_name="Jane",
            phone_number="555-1234",
            service="massage",
            start_time=datetime(2026, 10, 20, 10, 0, tzinfo=TZ),
        ),
        [],
        NOW,
    )
    error = BookingValidationError({"phone_number": "rejected"})

    reply = composer.compose_create_failure(resolution, error)

    assert reply.startswith("I couldn't save your massage booking because the phone number")


def test_replies_are_idempotent(composer):
    resolution = Resolution(outcome="unclear")
    assert composer.compose(resolution) == composer.compose(resolution)
    assert "book" in composer.compose(resolution)


def test_change_request_offers_cancel_and_rebook(composer):
    booking = make_booking()
    extraction = Extraction(requested_time=(11, 0), amends_booking_id=booking.id)
    reply = composer.compose(Resolution(outcome="change_unsupported", extraction=extraction, target=booking))

    assert reply == (
        "Your haircut appointment on Tuesday, October 20 at 10:00 AM is already booked, and I can't change "
        "the details of a booking. I can cancel it and then book a new one at 11:00 AM instead. "
        "Just say \"cancel it\" if you'd like me to do that."
    )
