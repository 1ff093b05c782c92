"""
Tests for durable booking persistence.
"""

from __future__ import annotations

import json
import tempfile
import threading
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from conftest import TZ
from receptionist.application.exceptions import BookingStoreError
from receptionist.domain.entities.booking import BookingStatus
from receptionist.infrastructure.store.json_store import JsonBookingStore


def _payload(**overrides):
    payload = {
        "guestName": "Jane",
        "phoneNumber": "555-1234",
        "service": "haircut",
        "startTime": datetime(2026, 10, 20, 10, 0, tzinfo=TZ),
        "durationMinutes": 45,
    }
    payload.update(overrides)
    return payload


def test_json_store_persistence():
    """Bookings written by one store instance are read back exactly by another."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = str(Path(tmpdir) / "bookings.json")
        store = JsonBookingStore(path=path)
        created = store.create(_payload(email="jane@example.com", notes="allergic to lavender"))

        reopened = JsonBookingStore(path=path)
        [loaded] = reopened.list()

        assert loaded == created
        assert loaded.start_time.utcoffset() == timedelta(hours=-7)
        assert loaded.start_time == datetime(2026, 10, 20, 17, 0, tzinfo=timezone.utc)
        assert reopened.get(created.id) == created


def test_status_update_is_persisted():
    """Status changes survive a reload and nothing else changes."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = str(Path(tmpdir) / "bookings.json")
        store = JsonBookingStore(path=path)
        first = store.create(_payload())
        second = store.create(_payload(guestName="Bob", phoneNumber="555-9999"))

        updated = store.update_status(first.id, BookingStatus.cancelled)
        assert updated.status == BookingStatus.cancelled

        loaded = JsonBookingStore(path=path).list()
        assert [b.id for b in loaded] == [first.id, second.id]
        assert loaded[0].status == BookingStatus.cancelled
        assert loaded[0].guest_name == "Jane"
        assert loaded[1].status == BookingStatus.pending


def test_update_status_unknown_id_returns_none():
    """Not-found leaves the file untouched."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "bookings.json"
        store = JsonBookingStore(path=str(path))
        store.create(_payload())
        before = path.read_text(encoding="utf-8")

        assert store.update_status("missing", BookingStatus.confirmed) is None
        assert path.read_text(encoding="utf-8") == before


def test_file_format():
    """The file stores camelCase records with ISO start times and string statuses."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "bookings.json"
        booking = JsonBookingStore(path=str(path)).create(_payload())

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["version"] == 1
        assert data["issued_ids"] == [booking.id]
        [record] = data["bookings"]
        assert record["startTime"] == "2026-10-20T10:00:00-07:00"
        assert record["status"] == "pending"
        assert record["durationMinutes"] == 45
        assert not path.with_suffix(".json.tmp").exists()


def test_ids_are_not_reissued_across_instances():
    """An id already issued on disk is skipped by a later store instance."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = str(Path(tmpdir) / "bookings.json")
        ids = iter(["dup", "dup", "fresh"])
        factory = lambda: next(ids)

        first = JsonBookingStore(path=path, id_factory=factory).create(_payload())
        second = JsonBookingStore(path=path, id_factory=factory).create(_payload())

        assert (first.id, second.id) == ("dup", "fresh")


def test_corrupt_file_raises_instead_of_resetting():
    """A corrupt file is reported and left in place."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "bookings.json"
        path.write_text("{not json", encoding="utf-8")
        store = JsonBookingStore(path=str(path))

        with pytest.raises(BookingStoreError):
            store.list()
        with pytest.raises(BookingStoreError):
            store.create(_payload())
        assert path.read_text(encoding="utf-8") == "{not json"


def test_missing_file_is_an_empty_store():
    """No file yet means no bookings."""
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonBookingStore(path=str(Path(tmpdir) / "nested" / "bookings.json"))
        assert store.list() == []


def test_json_store_concurrent_writes():
    """Creates and status updates from several threads all reach the file."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = str(Path(tmpdir) / "bookings.json")
        store = JsonBookingStore(path=path)
        seeded = [store.create(_payload()) for _ in range(10)]
        created = []
        lock = threading.Lock()

        def create():
            for _ in range(10):
                booking = store.create(_payload(service="massage"))
                with lock:
                    created.append(booking.id)

        def cancel_seeded():
            for booking in seeded:
                store.update_status(booking.id, BookingStatus.cancelled)

        threads = [threading.Thread(target=create) for _ in range(4)]
        threads.append(threading.Thread(target=cancel_seeded))
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        reopened = JsonBookingStore(path=path).list()
        assert len(reopened) == 50
        assert len({b.id for b in reopened}) == 50
        assert set(created) <= {b.id for b in reopened}
        by_id = {b.id: b for b in reopened}
        assert all(by_id[b.id].status == BookingStatus.cancelled for b in seeded)
