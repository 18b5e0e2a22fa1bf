"""
File-backed schedule store for offline use and demos.
"""

import json
import logging
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ..domain.exceptions import StorageError
from ..domain.models import BookingRecord, ListingConfig, parse_clock_time

logger = logging.getLogger(__name__)

DEFAULT_DATA_FILE = Path(__file__).parent / "sample_data.json"


class JsonScheduleStore:
    """
    Schedule store that reads listings and bookings from a JSON document.

    Expected format:
    {
        "listings": [
            {"id": "...", "duration_minutes": 45,
             "work_hours_start": "09:00", "work_hours_end": "12:00"}
        ],
        "bookings": [
            {"provider_id": "...", "listing_id": "...", "status": "accepted",
             "preferred_date": "2024-01-20", "preferred_time": "10:00"}
        ]
    }

    A booking's duration is taken from the listing it references.
    """

    def __init__(
        self,
        data_file: Optional[Path] = None,
        busy_statuses: Sequence[str] = ("accepted", "in_progress"),
    ):
        self.data_file = data_file or DEFAULT_DATA_FILE
        self.busy_statuses = {status.lower() for status in busy_statuses}
        self._data: Optional[Dict[str, Any]] = None

    def _load_data(self) -> Dict[str, Any]:
        """Load and cache the JSON document."""
        if self._data is not None:
            return self._data

        try:
            with open(self.data_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise StorageError(f"Could not read schedule data from {self.data_file}: {exc}") from exc

        if not isinstance(data, dict):
            raise StorageError(f"Schedule data in {self.data_file} must be a JSON object")

        self._data = data
        return data

    def _listings_by_id(self) -> Dict[str, Dict[str, Any]]:
        listings = self._load_data().get("listings", [])
        return {
            str(listing["id"]).lower(): listing
            for listing in listings
            if isinstance(listing, dict) and listing.get("id")
        }

    async def get_bookings(self, provider_id: str, day: date) -> List[BookingRecord]:
        """
        Return the provider's busy bookings on day, ordered by start time.

        Rows with another status or without a start time are skipped, as are
        rows that are not objects or whose start time is not HH:mm. A missing
        or zero listing duration keeps the booking with no recorded duration.
        """
        listings = self._listings_by_id()
        provider_key = provider_id.lower()
        day_str = day.isoformat()

        records: List[BookingRecord] = []
        for row in self._load_data().get("bookings", []):
            if not isinstance(row, dict):
                logger.warning("Skipping booking row that is not an object: %r", row)
                continue
            if str(row.get("provider_id", "")).lower() != provider_key:
                continue
            if str(row.get("preferred_date", ""))[:10] != day_str:
                continue
            if str(row.get("status", "")).lower() not in self.busy_statuses:
                continue
            if not row.get("preferred_time"):
                continue

            listing = listings.get(str(row.get("listing_id", "")).lower(), {})
            try:
                records.append(
                    BookingRecord(
                        start_time=row["preferred_time"],
                        service_duration_minutes=listing.get("duration_minutes"),
                    )
                )
            except (TypeError, ValueError) as exc:
                logger.warning("Skipping malformed booking row %s: %s", row.get("id"), exc)
                continue

        records.sort(key=lambda record: parse_clock_time(record.start_time))
        return records

    async def get_listing_config(self, listing_id: str) -> Optional[ListingConfig]:
        """Return settings of the listing, or None if it does not exist."""
        listing = self._listings_by_id().get(listing_id.lower())
        if listing is None:
            return None

        try:
            return ListingConfig(
                duration_minutes=listing.get("duration_minutes"),
                work_hours_start=listing.get("work_hours_start"),
                work_hours_end=listing.get("work_hours_end"),
            )
        except (TypeError, ValueError) as exc:
            raise StorageError(f"Listing {listing_id} has invalid schedule settings: {exc}") from exc
