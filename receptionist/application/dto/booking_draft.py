from __future__ import annotations

from typing import Any, Mapping

from pydantic import AwareDatetime, BaseModel, ConfigDict, EmailStr, Field, ValidationError, field_validator

from receptionist.application.exceptions import BookingValidationError
from receptionist.domain.entities.booking import MAX_DURATION_MINUTES, MIN_DURATION_MINUTES

CAMEL_CASE_KEYS = {
    "guestName": "guest_name",
    "phoneNumber": "phone_number",
    "startTime": "start_time",
    "durationMinutes": "duration_minutes",
}


class BookingDraft(BaseModel):
    """Unpersisted booking candidate. Creating one validates every field."""

    model_config = ConfigDict(extra="forbid", frozen=True, str_strip_whitespace=True)

    guest_name: str = Field(min_length=1)
    phone_number: str = Field(min_length=3)
    email: EmailStr | None = None
    service: str = Field(min_length=1)
    notes: str | None = None
    start_time: AwareDatetime
    duration_minutes: int = Field(ge=MIN_DURATION_MINUTES, le=MAX_DURATION_MINUTES)

    @field_validator("email", "notes", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "BookingDraft":
        """Validate a snake_case or camelCase mapping, raising BookingValidationError."""
        normalized = {CAMEL_CASE_KEYS.get(key, key): value for key, value in data.items()}
        try:
            return cls.model_validate(normalized)
        except ValidationError as e:
            raise BookingValidationError.from_pydantic(e) from e

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "guestName": self.guest_name,
            "phoneNumber": self.phone_number,
            "service": self.service,
            "startTime": self.start_time.isoformat(),
            "durationMinutes": self.duration_minutes,
        }
        if self.email:
            payload["email"] = self.email
        if self.notes:
            payload["notes"] = self.notes
        return payload
