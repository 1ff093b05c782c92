from __future__ import annotations

from typing import Any, Mapping

from pydantic import ValidationError


class BookingValidationError(ValueError):
    """Raised when a booking draft or status value violates a booking invariant."""

    def __init__(self, errors: Mapping[str, str]) -> None:
        self.errors = dict(errors)
        self.fields = tuple(self.errors)
        details = "; ".join(f"{name}: {message}" for name, message in self.errors.items())
        super().__init__(f"Invalid booking: {details}")

    @classmethod
    def from_pydantic(cls, exc: ValidationError) -> "BookingValidationError":
        errors: dict[str, str] = {}
        for err in exc.errors():
            loc: tuple[Any, ...] = err.get("loc") or ("__root__",)
            name = str(loc[0])
            errors.setdefault(name, err.get("msg", "invalid value"))
        return cls(errors)


class BookingStoreError(RuntimeError):
    """Raised when the persistence backend cannot be read or written."""
    pass


class ExtractionFailure(RuntimeError):
    """Raised when the slot extraction dependency is unavailable or misbehaves."""
    pass


class LLMUpstreamError(ExtractionFailure):
    """Raised when LLM provider fails (timeouts, network errors, service unavailable)."""
    pass


class LLMContractError(ExtractionFailure):
    """Raised when LLM adapter violates contract (bad format or missing data)."""
    pass
