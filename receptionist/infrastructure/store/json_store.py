from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Callable, Mapping

from receptionist.application.dto.booking_draft import BookingDraft
from receptionist.application.exceptions import BookingStoreError
from receptionist.application.ports.booking_store import BookingStorePort
from receptionist.domain.entities.booking import Booking, BookingStatus
from receptionist.infrastructure.store.booking_records import (
    booking_from_draft,
    booking_from_record,
    booking_to_record,
    coerce_draft,
    coerce_status,
    new_booking_id,
)

STORE_VERSION = 1


class JsonBookingStore(BookingStorePort):
    """
    Booking store persisted to a single JSON file.

    Every operation reads and writes the file under one lock, so records are
    never observed half-written. Writes go to a temp file that is renamed into
    place.
    """

    def __init__(self, path: str = "./data/bookings.json", id_factory: Callable[[], str] | None = None) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._id_factory = id_factory or new_booking_id
        self._logger = logging.getLogger(__name__)

    def _load(self) -> dict[str, Any]:
        """Load store data from the JSON file, return an empty store if missing."""
        if not self._path.exists():
            return {"version": STORE_VERSION, "bookings": [], "issued_ids": []}

        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            self._logger.error("Booking store unreadable", extra={"error": str(e)})
            raise BookingStoreError(f"Cannot read booking store at {self._path}: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("bookings"), list):
            raise BookingStoreError(f"Booking store at {self._path} has an unexpected shape")
        data.setdefault("version", STORE_VERSION)
        data.setdefault("issued_ids", [record.get("id") for record in data["bookings"]])
        return data

    def _save(self, data: dict[str, Any]) -> None:
        """Save store data to the JSON file atomically."""
        temp_path = self._path.with_suffix(self._path.suffix + ".tmp")

        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            temp_path.replace(self._path)
        except OSError as e:
            if temp_path.exists():
                temp_path.unlink()
            raise BookingStoreError(f"Cannot write booking store at {self._path}: {e}") from e

    def create(self, draft: BookingDraft | Mapping[str, Any]) -> Booking:
        validated = coerce_draft(draft)
        with self._lock:
            data = self._load()
            issued = set(data["issued_ids"])
            booking_id = self._id_factory()
            while booking_id in issued:
                booking_id = self._id_factory()
            booking = booking_from_draft(booking_id, validated)
            data["bookings"].append(booking_to_record(booking))
            data["issued_ids"].append(booking_id)
            self._save(data)
        self._logger.info("Booking created", extra={"booking_id": booking.id, "status": booking.status.value})
        return booking

    def list(self) -> list[Booking]:
        with self._lock:
            data = self._load()
        return [booking_from_record(record) for record in data["bookings"]]

    def get(self, booking_id: str) -> Booking | None:
        with self._lock:
            data = self._load()
        for record in data["bookings"]:
            if record.get("id") == booking_id:
                return booking_from_record(record)
        return None

    def update_status(self, booking_id: str, status: BookingStatus | str) -> Booking | None:
        target = coerce_status(status)
        updated: Booking | None = None
        with self._lock:
            data = self._load()
            for index, record in enumerate(data["bookings"]):
                if record.get("id") == booking_id:
                    record = {**record, "status": target.value}
                    updated = booking_from_record(record)
                    data["bookings"][index] = record
                    self._save(data)
                    break
        if updated is None:
            self._logger.info("Booking not found", extra={"booking_id": booking_id, "status": target.value})
        else:
            self._logger.info("Booking status updated", extra={"booking_id": booking_id, "status": target.value})
        return updated
