from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from receptionist.application.use_cases.reply_composer import ReplyComposer
from receptionist.application.use_cases.resolve_action import ActionResolver
from receptionist.application.use_cases.run_turn import RunTurnUseCase
from receptionist.domain.entities.booking import Booking, BookingStatus
from receptionist.infrastructure.knowledge.service_catalog_store import ServiceCatalogStore
from receptionist.infrastructure.llm.rule_based_extractor import RuleBasedSlotExtractor
from receptionist.infrastructure.store.memory_store import MemoryBookingStore

TZ = ZoneInfo("America/Los_Angeles")
# Monday morning; "tomorrow" is Tuesday, October 20
NOW = datetime(2026, 10, 19, 9, 0, tzinfo=TZ)


def make_booking(
    booking_id: str = "a1b2c3d4e5f60718293a4b5c6d7e8f90",
    guest_name: str = "Jane",
    phone_number: str = "555-1234",
    service: str = "haircut",
    start_time: datetime | None = None,
    duration_minutes: int = 45,
    status: BookingStatus = BookingStatus.pending,
) -> Booking:
    return Booking(
        id=booking_id,
        guest_name=guest_name,
        phone_number=phone_number,
        service=service,
        start_time=start_time or datetime(2026, 10, 20, 10, 0, tzinfo=TZ),
        duration_minutes=duration_minutes,
        status=status,
    )


def user(content: str) -> dict[str, str]:
    return {"role": "user", "content": content}


def assistant(content: str) -> dict[str, str]:
    return {"role": "assistant", "content": content}


@pytest.fixture
def catalog() -> ServiceCatalogStore:
    return ServiceCatalogStore()


@pytest.fixture
def extractor(catalog) -> RuleBasedSlotExtractor:
    return RuleBasedSlotExtractor(catalog=catalog, timezone=TZ)


@pytest.fixture
def resolver(catalog) -> ActionResolver:
    return ActionResolver(timezone=TZ, catalog=catalog, default_duration_minutes=45, upcoming_grace_hours=3)


@pytest.fixture
def composer() -> ReplyComposer:
    return ReplyComposer(timezone=TZ, business_name="Studio Nine", assistant_name="Aiden")


@pytest.fixture
def run_turn(extractor, resolver, composer) -> RunTurnUseCase:
    return RunTurnUseCase(extractor=extractor, resolver=resolver, composer=composer)


@pytest.fixture
def memory_store() -> MemoryBookingStore:
    return MemoryBookingStore()
