"""
End-to-end turns through RunTurnUseCase with the rule-based extractor.
"""

from __future__ import annotations

from datetime import datetime

from conftest import NOW, TZ, assistant, make_booking, user
from receptionist.application.dto.action import CreateAction, NoAction, UpdateAction
from receptionist.application.exceptions import LLMContractError, LLMUpstreamError
from receptionist.application.ports.slot_extractor import SlotExtractorPort
from receptionist.application.use_cases.run_turn import RunTurnUseCase
from receptionist.domain.entities.booking import BookingStatus
from receptionist.domain.entities.message import ConversationTurn


class FailingExtractor(SlotExtractorPort):
    def __init__(self, error: Exception) -> None:
        self.error = error

    def extract(self, history, bookings, now):
        raise self.error


def test_new_booking_in_one_message(run_turn):
    """Scenario: haircut tomorrow at 10am for Jane, 555-1234 with no bookings."""
    result = run_turn.execute([user("I'd like a haircut tomorrow at 10am for Jane, 555-1234")], [], NOW)

    assert isinstance(result.action, CreateAction)
    payload = result.to_dict()["action"]
    assert payload["type"] == "create"
    booking = payload["booking"]
    assert booking["guestName"] == "Jane"
    assert booking["phoneNumber"] == "555-1234"
    assert booking["service"] == "haircut"
    assert booking["startTime"] == "2026-10-20T10:00:00-07:00"
    assert booking["durationMinutes"] == 45
    assert "status" not in booking
    assert "Tuesday, October 20 at 10:00 AM" in result.reply


def test_cancel_sole_booking_for_caller(run_turn):
    """Scenario: "cancel my appointment" with exactly one booking for the caller's phone."""
    booking = make_booking(phone_number="555-1234")
    other = make_booking(booking_id="f" * 32, guest_name="Bob", phone_number="555-9876")
    history = [
        user("Hi, this is Jane, 555-1234"),
        assistant("Hi Jane! How can I help you today?"),
        user("cancel my appointment"),
    ]

    result = run_turn.execute(history, [booking, other], NOW)

    assert result.action == UpdateAction(booking_id=booking.id, status=BookingStatus.cancelled)
    assert result.to_dict()["action"] == {"type": "update", "bookingId": booking.id, "status": "cancelled"}
    assert "cancelled" in result.reply


def test_cancel_with_two_bookings_for_same_name_asks_which(run_turn):
    """Scenario: same cancel request but two bookings under the caller's name."""
    first = make_booking(booking_id="b" * 32, phone_number="555-1111")
    second = make_booking(
        booking_id="c" * 32, phone_number="555-2222", service="massage",
        start_time=datetime(2026, 10, 22, 15, 0, tzinfo=TZ),
    )
    history = [user("This is Jane. Cancel my appointment please")]

    result = run_turn.execute(history, [first, second], NOW)

    assert isinstance(result.action, NoAction)
    assert result.outcome == "ambiguous_target"
    assert "Which one" in result.reply
    assert first.id not in result.reply and second.id not in result.reply


def test_service_only_request_lists_missing_fields(run_turn):
    """Scenario: "I want to book a massage" and nothing else."""
    result = run_turn.execute([user("I want to book a massage")], [], NOW)

    assert isinstance(result.action, NoAction)
    assert result.outcome == "missing_fields"
    assert "your name" in result.reply
    assert "phone number" in result.reply
    assert "date and time" in result.reply


def test_booking_built_over_several_turns(run_turn):
    history = [
        user("I'd like to book a haircut"),
        assistant("I can book a haircut for you. Could you tell me your name, a phone number and your preferred date and time?"),
        user("Jane Doe"),
        assistant("Thanks, Jane Doe! I can book a haircut for you. Could you tell me a phone number and your preferred date and time?"),
        user("555-123-4567, tomorrow at 3pm"),
    ]

    result = run_turn.execute(history, [], NOW)

    assert isinstance(result.action, CreateAction)
    draft = result.action.draft
    assert draft.guest_name == "Jane Doe"
    assert draft.phone_number == "555-123-4567"
    assert draft.start_time == datetime(2026, 10, 20, 15, 0, tzinfo=TZ)


def test_vague_time_asks_for_clock_time(run_turn):
    result = run_turn.execute([user("Book a haircut tomorrow afternoon for Jane, 555-1234")], [], NOW)

    assert isinstance(result.action, NoAction)
    assert result.outcome == "missing_fields"
    assert "afternoon" in result.reply


def test_repeat_request_is_a_duplicate(run_turn):
    existing = make_booking()
    result = run_turn.execute([user("I'd like a haircut tomorrow at 10am for Jane, 555-1234")], [existing], NOW)

    assert isinstance(result.action, NoAction)
    assert result.outcome == "duplicate"


def test_history_accepts_turn_objects_and_is_not_mutated(run_turn):
    booking = make_booking()
    history = [ConversationTurn(role="user", content="Please confirm my appointment, 555-1234")]
    bookings = [booking]

    first = run_turn.execute(history, bookings, NOW)
    second = run_turn.execute(history, bookings, NOW)

    assert first == second
    assert first.action == UpdateAction(booking_id=booking.id, status=BookingStatus.confirmed)
    assert bookings == [booking]
    assert booking.status == BookingStatus.pending


def test_extraction_failure_degrades_to_apology(extractor, resolver, composer):
    for error in (LLMUpstreamError("timeout"), LLMContractError("bad json")):
        use_case = RunTurnUseCase(extractor=FailingExtractor(error), resolver=resolver, composer=composer)
        result = use_case.execute([user("book a haircut")], [], NOW)

        assert isinstance(result.action, NoAction)
        assert result.outcome == "extraction_failed"
        assert result.reply == composer.extraction_failure_reply()


def test_no_user_turn_is_unclear(run_turn):
    result = run_turn.execute([assistant("Thanks for calling!")], [], NOW)
    assert result.outcome == "unclear"
    assert isinstance(result.action, NoAction)
    assert run_turn.execute([], [], NOW).outcome == "unclear"


def test_new_time_for_a_booked_request_is_not_a_second_booking(run_turn):
    """Asking to move a booking just made does not create another one next to it."""
    booking = make_booking()
    history = [
        user("I'd like a haircut tomorrow at 10am for Jane, 555-1234"),
        assistant(
            "You're all set, Jane: haircut on Tuesday, October 20 at 10:00 AM for 45 minutes. "
            "Your booking is pending until we confirm it."
        ),
        user("Can you make it 11am instead?"),
    ]

    result = run_turn.execute(history, [booking], NOW)

    assert isinstance(result.action, NoAction)
    assert result.outcome == "change_unsupported"
    assert "can't change" in result.reply
    assert "cancel it" in result.reply
    assert "Tuesday, October 20 at 11:00 AM" in result.reply


def test_cancel_after_a_change_request_targets_the_booking(run_turn):
    booking = make_booking()
    history = [
        user("I'd like a haircut tomorrow at 10am for Jane, 555-1234"),
        assistant("You're all set, Jane: haircut on Tuesday, October 20 at 10:00 AM for 45 minutes."),
        user("Can you make it 11am instead?"),
        assistant("Your haircut appointment is already booked, and I can't change the details of a booking."),
        user("ok, cancel it"),
    ]

    result = run_turn.execute(history, [booking], NOW)

    assert result.action == UpdateAction(booking_id=booking.id, status=BookingStatus.cancelled)


def test_status_question_does_not_confirm(run_turn):
    """Asking whether an appointment is still on leaves its status alone."""
    booking = make_booking()

    result = run_turn.execute([user("Hi it's Jane, 555-1234. Is my appointment still on?")], [booking], NOW)

    assert isinstance(result.action, NoAction)
    assert result.outcome == "unclear"
    assert "confirmed" not in result.reply


def test_switching_service_only_asks_for_what_is_missing(run_turn):
    history = [
        user("I'd like a facial tomorrow at 3pm, this is Jane"),
        assistant("Thanks, Jane! I can book a facial on Tuesday, October 20 at 3:00 PM for you. Could you tell me a phone number?"),
        user("Actually I'd like a massage instead"),
    ]

    result = run_turn.execute(history, [], NOW)

    assert result.outcome == "missing_fields"
    assert result.resolution.missing_fields == ("phone_number",)
    assert "massage on Tuesday, October 20 at 3:00 PM" in result.reply
    assert "date and time" not in result.reply


def test_zero_minute_appointment_is_rejected(run_turn):
    """A stated length outside the allowed range is reported, not replaced by a default."""
    result = run_turn.execute([user("Book a haircut tomorrow at 10am for Jane, 555-1234, for 0 minutes")], [], NOW)

    assert isinstance(result.action, NoAction)
    assert result.outcome == "missing_fields"
    assert "duration_minutes" in result.resolution.invalid_fields
    assert "appointment length" in result.reply
