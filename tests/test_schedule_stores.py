"""
Tests for the JSON and HTTP schedule stores.
"""

import asyncio
import json
import logging
from datetime import date
from pathlib import Path

import pytest
import requests

from providerslots.adapters.http_store import HttpScheduleStore
from providerslots.adapters.json_store import JsonScheduleStore
from providerslots.domain.exceptions import StorageError
from providerslots.domain.models import BookingRecord, ListingConfig

PROVIDER_ID = "a2b4c6d8-1e3f-4a5b-9c7d-0e1f2a3b4c5d"
OTHER_PROVIDER_ID = "0b1c2d3e-4f50-4617-8293-a4b5c6d7e8f9"
LISTING_ID = "3f1c2a7e-9b4d-4c1a-8e2f-5a6b7c8d9e01"


def _write_data(tmp_path, data) -> Path:
    path = tmp_path / "schedule.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestJsonScheduleStore:
    """Tests for JsonScheduleStore."""

    def _store(self, tmp_path) -> JsonScheduleStore:
        data = {
            "listings": [
                {"id": LISTING_ID, "duration_minutes": 45, "work_hours_start": "09:00", "work_hours_end": "12:00"},
                {"id": "listing-without-duration"},
            ],
            "bookings": [
                {"id": 1, "provider_id": PROVIDER_ID, "listing_id": LISTING_ID, "status": "accepted",
                 "preferred_date": "2024-01-20", "preferred_time": "14:00"},
                {"id": 2, "provider_id": PROVIDER_ID, "listing_id": "listing-without-duration", "status": "in_progress",
                 "preferred_date": "2024-01-20T00:00:00", "preferred_time": "10:00"},
                {"id": 3, "provider_id": PROVIDER_ID, "listing_id": LISTING_ID, "status": "pending",
                 "preferred_date": "2024-01-20", "preferred_time": "11:00"},
                {"id": 4, "provider_id": PROVIDER_ID, "listing_id": LISTING_ID, "status": "accepted",
                 "preferred_date": "2024-01-20", "preferred_time": None},
                {"id": 5, "provider_id": PROVIDER_ID, "listing_id": LISTING_ID, "status": "accepted",
                 "preferred_date": "2024-01-21", "preferred_time": "09:00"},
                {"id": 6, "provider_id": OTHER_PROVIDER_ID, "listing_id": LISTING_ID, "status": "accepted",
                 "preferred_date": "2024-01-20", "preferred_time": "09:00"},
                {"id": 7, "provider_id": PROVIDER_ID, "listing_id": LISTING_ID, "status": "accepted",
                 "preferred_date": "2024-01-20", "preferred_time": "half past nine"},
            ],
        }
        return JsonScheduleStore(data_file=_write_data(tmp_path, data))

    def test_filters_and_sorts_bookings(self, tmp_path):
        """Only busy, timed bookings of the provider on that day, by start time."""
        store = self._store(tmp_path)

        bookings = asyncio.run(store.get_bookings(PROVIDER_ID, date(2024, 1, 20)))

        assert bookings == [
            BookingRecord(start_time="10:00", service_duration_minutes=None),
            BookingRecord(start_time="14:00", service_duration_minutes=45),
        ]

    def test_provider_match_ignores_case(self, tmp_path):
        store = self._store(tmp_path)

        bookings = asyncio.run(store.get_bookings(PROVIDER_ID.upper(), date(2024, 1, 20)))

        assert len(bookings) == 2

    def test_custom_busy_statuses(self, tmp_path):
        store = self._store(tmp_path)
        store.busy_statuses = {"pending"}

        bookings = asyncio.run(store.get_bookings(PROVIDER_ID, date(2024, 1, 20)))

        assert [b.start_time for b in bookings] == ["11:00"]

    def test_listing_config(self, tmp_path):
        store = self._store(tmp_path)

        config = asyncio.run(store.get_listing_config(LISTING_ID.upper()))

        assert config == ListingConfig(45, "09:00", "12:00")

    def test_unknown_listing(self, tmp_path):
        store = self._store(tmp_path)

        assert asyncio.run(store.get_listing_config("does-not-exist")) is None

    def test_invalid_listing_settings_raise_storage_error(self, tmp_path):
        path = _write_data(tmp_path, {"listings": [{"id": LISTING_ID, "work_hours_start": "9 am"}]})
        store = JsonScheduleStore(data_file=path)

        with pytest.raises(StorageError):
            asyncio.run(store.get_listing_config(LISTING_ID))

    def test_missing_file_raises_storage_error(self, tmp_path):
        store = JsonScheduleStore(data_file=tmp_path / "missing.json")

        with pytest.raises(StorageError, match="Could not read"):
            asyncio.run(store.get_bookings(PROVIDER_ID, date(2024, 1, 20)))

    def test_non_object_document_raises_storage_error(self, tmp_path):
        store = JsonScheduleStore(data_file=_write_data(tmp_path, []))

        with pytest.raises(StorageError, match="JSON object"):
            asyncio.run(store.get_bookings(PROVIDER_ID, date(2024, 1, 20)))

    def test_zero_duration_listing_keeps_booking(self, tmp_path):
        """A booking whose listing records no usable duration still holds its time."""
        path = _write_data(tmp_path, {
            "listings": [{"id": LISTING_ID, "duration_minutes": 0}],
            "bookings": [
                {"id": 1, "provider_id": PROVIDER_ID, "listing_id": LISTING_ID, "status": "accepted",
                 "preferred_date": "2024-01-22", "preferred_time": "10:00"},
            ],
        })
        store = JsonScheduleStore(data_file=path)

        bookings = asyncio.run(store.get_bookings(PROVIDER_ID, date(2024, 1, 22)))
        config = asyncio.run(store.get_listing_config(LISTING_ID))

        assert bookings == [BookingRecord("10:00", None)]
        assert config.effective_duration() == 60

    def test_non_object_rows_are_skipped(self, tmp_path, caplog):
        path = _write_data(tmp_path, {
            "bookings": [
                "garbage",
                None,
                {"provider_id": PROVIDER_ID, "status": "accepted",
                 "preferred_date": "2024-01-20", "preferred_time": "09:00"},
            ],
        })
        store = JsonScheduleStore(data_file=path)

        with caplog.at_level(logging.WARNING):
            bookings = asyncio.run(store.get_bookings(PROVIDER_ID, date(2024, 1, 20)))

        assert bookings == [BookingRecord("09:00")]
        assert "not an object" in caplog.text

    def test_bundled_sample_data(self):
        """The packaged sample data loads without a path."""
        store = JsonScheduleStore()

        bookings = asyncio.run(store.get_bookings(PROVIDER_ID, date(2026, 11, 2)))

        assert [(b.start_time, b.service_duration_minutes) for b in bookings] == [
            ("10:00", 45),
            ("14:30", None),
        ]


class FakeResponse:
    """Stand-in for requests.Response."""

    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error")

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeSession:
    """Records GET calls and replays canned responses."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, headers=None, params=None, timeout=None):
        self.calls.append({"url": url, "headers": headers, "params": params, "timeout": timeout})
        if self.error:
            raise self.error
        return self.response


class TestHttpScheduleStore:
    """Tests for HttpScheduleStore."""

    def test_get_bookings(self):
        session = FakeSession(FakeResponse(payload={
            "bookings": [
                {"id": "a", "preferred_time": "10:00", "listing": {"duration_minutes": 45}},
                {"id": "b", "preferred_time": "13:00", "listing": None},
                {"id": "c", "preferred_time": None},
                {"id": "d", "preferred_time": "1pm"},
            ]
        }))
        store = HttpScheduleStore(
            base_url="https://api.example.com/",
            api_token="secret",
            timeout_seconds=5,
            session=session,
        )

        bookings = asyncio.run(store.get_bookings(PROVIDER_ID, date(2024, 1, 20)))

        assert bookings == [BookingRecord("10:00", 45), BookingRecord("13:00", None)]
        call = session.calls[0]
        assert call["url"] == f"https://api.example.com/providers/{PROVIDER_ID}/bookings"
        assert call["params"] == {"date": "2024-01-20", "status": "accepted,in_progress"}
        assert call["headers"]["Authorization"] == "Bearer secret"
        assert call["timeout"] == 5

    def test_bookings_as_bare_list(self):
        session = FakeSession(FakeResponse(payload=[{"preferred_time": "08:30"}]))
        store = HttpScheduleStore(base_url="https://api.example.com", session=session)

        bookings = asyncio.run(store.get_bookings(PROVIDER_ID, date(2024, 1, 20)))

        assert bookings == [BookingRecord("08:30")]
        assert "Authorization" not in session.calls[0]["headers"]

    def test_zero_duration_booking_is_kept(self):
        session = FakeSession(FakeResponse(payload=[
            {"id": "a", "preferred_time": "10:00", "listing": {"duration_minutes": 0}},
        ]))
        store = HttpScheduleStore(base_url="https://api.example.com", session=session)

        bookings = asyncio.run(store.get_bookings(PROVIDER_ID, date(2024, 1, 20)))

        assert bookings == [BookingRecord("10:00", None)]

    def test_get_listing_config(self):
        session = FakeSession(FakeResponse(payload={
            "id": LISTING_ID, "duration_minutes": 90, "work_hours_start": None, "work_hours_end": "16:00",
        }))
        store = HttpScheduleStore(base_url="https://api.example.com", session=session)

        config = asyncio.run(store.get_listing_config(LISTING_ID))

        assert config == ListingConfig(90, None, "16:00")
        assert session.calls[0]["url"] == f"https://api.example.com/listings/{LISTING_ID}"

    def test_missing_listing_returns_none(self):
        store = HttpScheduleStore(
            base_url="https://api.example.com",
            session=FakeSession(FakeResponse(status_code=404)),
        )

        assert asyncio.run(store.get_listing_config(LISTING_ID)) is None

    def test_http_error_raises_storage_error(self):
        store = HttpScheduleStore(
            base_url="https://api.example.com",
            session=FakeSession(FakeResponse(status_code=503)),
        )

        with pytest.raises(StorageError, match="503"):
            asyncio.run(store.get_bookings(PROVIDER_ID, date(2024, 1, 20)))

    def test_transport_error_raises_storage_error(self):
        store = HttpScheduleStore(
            base_url="https://api.example.com",
            session=FakeSession(error=requests.exceptions.ConnectTimeout("timed out")),
        )

        with pytest.raises(StorageError, match="timed out"):
            asyncio.run(store.get_bookings(PROVIDER_ID, date(2024, 1, 20)))

    def test_invalid_json_raises_storage_error(self):
        store = HttpScheduleStore(
            base_url="https://api.example.com",
            session=FakeSession(FakeResponse(payload=None)),
        )

        with pytest.raises(StorageError, match="Invalid JSON"):
            asyncio.run(store.get_listing_config(LISTING_ID))
