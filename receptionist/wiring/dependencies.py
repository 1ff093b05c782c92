from functools import lru_cache
import logging
from zoneinfo import ZoneInfo

from receptionist.core.config import settings
from receptionist.application.ports.booking_store import BookingStorePort
from receptionist.application.ports.service_catalog import ServiceCatalogPort
from receptionist.application.ports.slot_extractor import SlotExtractorPort
from receptionist.application.use_cases.handle_assistant_turn import HandleAssistantTurnUseCase
from receptionist.application.use_cases.reply_composer import ReplyComposer
from receptionist.application.use_cases.resolve_action import ActionResolver
from receptionist.application.use_cases.run_turn import RunTurnUseCase
from receptionist.infrastructure.knowledge.service_catalog_store import ServiceCatalogStore
from receptionist.infrastructure.llm.openai_extractor import OpenAISlotExtractor
from receptionist.infrastructure.llm.rule_based_extractor import RuleBasedSlotExtractor
from receptionist.infrastructure.store.json_store import JsonBookingStore
from receptionist.infrastructure.store.memory_store import MemoryBookingStore


_booking_store: BookingStorePort | None = None


def get_timezone() -> ZoneInfo:
    return ZoneInfo(settings.BUSINESS_TIMEZONE)


def get_service_catalog() -> ServiceCatalogPort:
    return ServiceCatalogStore()


@lru_cache
def get_slot_extractor() -> SlotExtractorPort:
    logger = logging.getLogger(__name__)
    if settings.OPENAI_API_KEY and settings.OPENAI_API_KEY.strip():
        logger.info("Using OpenAISlotExtractor", extra={"reason": "OPENAI_API_KEY set"})
        return OpenAISlotExtractor(catalog=get_service_catalog(), timezone=get_timezone())
    logger.info("Using RuleBasedSlotExtractor", extra={"reason": "OPENAI_API_KEY missing"})
    return RuleBasedSlotExtractor(catalog=get_service_catalog(), timezone=get_timezone())


def get_booking_store() -> BookingStorePort:
    global _booking_store
    if _booking_store is None:
        if settings.ENV.lower() in {"dev", "local"}:
            _booking_store = JsonBookingStore(path=settings.BOOKINGS_DATA_PATH)
        else:
            _booking_store = MemoryBookingStore()
    return _booking_store


def get_action_resolver() -> ActionResolver:
    return ActionResolver(
        timezone=get_timezone(),
        catalog=get_service_catalog(),
        default_duration_minutes=settings.DEFAULT_DURATION_MINUTES,
        upcoming_grace_hours=settings.UPCOMING_GRACE_HOURS,
    )


def get_reply_composer() -> ReplyComposer:
    return ReplyComposer(
        timezone=get_timezone(),
        business_name=settings.BUSINESS_NAME,
        assistant_name=settings.ASSISTANT_NAME,
    )


def get_run_turn_use_case() -> RunTurnUseCase:
    return RunTurnUseCase(
        extractor=get_slot_extractor(),
        resolver=get_action_resolver(),
        composer=get_reply_composer(),
    )


def get_handle_assistant_turn_use_case() -> HandleAssistantTurnUseCase:
    return HandleAssistantTurnUseCase(
        store=get_booking_store(),
        run_turn=get_run_turn_use_case(),
        composer=get_reply_composer(),
    )
