from __future__ import annotations

import json
import logging
from datetime import date, datetime
from typing import Any, Sequence
from zoneinfo import ZoneInfo

from openai import OpenAI

from receptionist.application.exceptions import LLMContractError, LLMUpstreamError
from receptionist.application.ports.service_catalog import ServiceCatalogPort
from receptionist.application.ports.slot_extractor import SlotExtractorPort
from receptionist.core.config import settings
from receptionist.domain.entities.booking import Booking
from receptionist.domain.entities.extraction import INTENTS, Extraction
from receptionist.domain.entities.message import ConversationTurn
from receptionist.infrastructure.llm.prompts import build_extract_prompt
from receptionist.infrastructure.store.booking_records import booking_to_record

PARTS_OF_DAY = ("morning", "afternoon", "evening", "night")
TEXT_FIELDS = {
    "guestName": "guest_name",
    "phoneNumber": "phone_number",
    "email": "email",
    "service": "service",
    "notes": "notes",
    "bookingRef": "booking_ref",
}


class OpenAISlotExtractor(SlotExtractorPort):
    """
    OpenAI-backed adapter implementing SlotExtractorPort.

    Contract guarantees:
    - extract returns an Extraction whose start_time, when present, is timezone-aware
    - Naive datetimes from the model are read in the business timezone
    - Raises:
        LLMUpstreamError: networking/provider failures
        LLMContractError: invalid JSON or wrong schema/shape
    """

    def __init__(
        self,
        catalog: ServiceCatalogPort,
        timezone: ZoneInfo,
        client: Any | None = None,
        model: str | None = None,
        temperature: float | None = None,
    ) -> None:
        self.client = client or OpenAI(api_key=settings.OPENAI_API_KEY)
        self._catalog = catalog
        self._timezone = timezone
        self._model = model or settings.OPENAI_MODEL_EXTRACT
        self._temperature = settings.OPENAI_TEMPERATURE_EXTRACT if temperature is None else temperature
        self._logger = logging.getLogger(__name__)

    def extract(
        self,
        history: Sequence[ConversationTurn],
        bookings: Sequence[Booking],
        now: datetime,
    ) -> Extraction:
        prompt = build_extract_prompt(
            transcript=[turn.to_dict() for turn in history],
            bookings=[booking_to_record(booking) for booking in bookings],
            now=now.astimezone(self._timezone),
            timezone_name=self._timezone.key,
            services=[entry.display_name for entry in self._catalog.list_services()],
        )
        text = self._call_text(prompt)
        data = _parse_json(text)
        if not isinstance(data, dict):
            raise LLMContractError("Extract: expected a JSON object.")

        extraction = self._to_extraction(data)
        self._logger.debug("Slots extracted", extra={"intent": extraction.intent})
        return extraction

    def _call_text(self, prompt: str) -> str:
        try:
            resp = self.client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": "Return only valid JSON. Do not include markdown or extra text."},
                    {"role": "user", "content": prompt},
                ],
                temperature=self._temperature,
                max_tokens=600,
                response_format={"type": "json_object"},
            )
        except Exception as e:
            raise LLMUpstreamError(f"OpenAI API error: {e}") from e

        content = (resp.choices[0].message.content or "").strip() if resp.choices else ""
        if not content:
            raise LLMContractError("LLM returned empty response text.")
        return content

    def _to_extraction(self, data: dict[str, Any]) -> Extraction:
        intent = data.get("intent") or "unclear"
        if intent not in INTENTS:
            raise LLMContractError(f"Extract: unknown intent {intent!r}.")

        values: dict[str, Any] = {}
        for key, attr in TEXT_FIELDS.items():
            raw = data.get(key)
            if raw is None:
                continue
            if not isinstance(raw, str):
                raise LLMContractError(f"Extract: '{key}' must be a string or null.")
            if raw.strip():
                values[attr] = raw.strip()

        duration = data.get("durationMinutes")
        if duration is not None:
            if isinstance(duration, bool) or not isinstance(duration, int):
                raise LLMContractError("Extract: 'durationMinutes' must be an integer or null.")
            values["duration_minutes"] = duration

        part_of_day = data.get("partOfDay")
        if part_of_day is not None:
            if part_of_day not in PARTS_OF_DAY:
                raise LLMContractError(f"Extract: unknown partOfDay {part_of_day!r}.")
            values["part_of_day"] = part_of_day

        try:
            if data.get("startTime"):
                start_time = datetime.fromisoformat(str(data["startTime"]))
                if start_time.tzinfo is None:
                    start_time = start_time.replace(tzinfo=self._timezone)
                values["start_time"] = start_time
            if data.get("requestedDate"):
                values["requested_date"] = date.fromisoformat(str(data["requestedDate"]))
            if data.get("requestedTime"):
                hour, minute = (int(part) for part in str(data["requestedTime"]).split(":")[:2])
                if not (0 <= hour <= 23 and 0 <= minute <= 59):
                    raise ValueError(f"time out of range: {data['requestedTime']}")
                values["requested_time"] = (hour, minute)
        except ValueError as e:
            raise LLMContractError(f"Extract: invalid date or time value: {e}") from e

        start_time = values.get("start_time")
        if start_time is not None:
            local = start_time.astimezone(self._timezone)
            values.setdefault("requested_date", local.date())
            values.setdefault("requested_time", (local.hour, local.minute))

        return Extraction(intent=intent, **values)


def _parse_json(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        snippet = text[:200].replace("\n", " ")
        raise LLMContractError(f"Extract: invalid JSON. Snippet: {snippet!r}") from None
