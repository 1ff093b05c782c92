from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Union

from receptionist.application.dto.action import Action, NoAction
from receptionist.application.dto.booking_draft import BookingDraft
from receptionist.domain.entities.booking import Booking
from receptionist.domain.entities.extraction import Extraction

OUTCOMES = (
    "create",
    "update",
    "duplicate",
    "missing_fields",
    "ambiguous_target",
    "no_target",
    "change_unsupported",
    "unclear",
    "extraction_failed",
)


@dataclass(frozen=True)
class UniqueTarget:
    booking: Booking


@dataclass(frozen=True)
class AmbiguousTarget:
    candidates: tuple[Booking, ...]  # sorted by start time


@dataclass(frozen=True)
class NoMatch:
    identity_known: bool
    reason: str = "no_candidates"  # "no_identity" | "unknown_reference" | "no_candidates"


TargetMatch = Union[UniqueTarget, AmbiguousTarget, NoMatch]


@dataclass(frozen=True)
class Resolution:
    """The resolver's decision for one turn, with everything the reply needs."""

    outcome: str
    action: Action = field(default_factory=NoAction)
    intent: str = "unclear"
    extraction: Extraction = field(default_factory=Extraction)
    draft: BookingDraft | None = None
    target: Booking | None = None
    candidates: tuple[Booking, ...] = ()
    missing_fields: tuple[str, ...] = ()
    invalid_fields: Mapping[str, str] = field(default_factory=dict)
    identity_known: bool = False
    match_reason: str | None = None  # NoMatch.reason when outcome is "no_target"
