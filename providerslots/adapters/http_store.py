"""
Marketplace REST API client for fetching bookings and listing settings.
"""

import asyncio
import logging
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

import requests

from ..domain.exceptions import StorageError
from ..domain.models import BookingRecord, ListingConfig

logger = logging.getLogger(__name__)


class HttpScheduleStore:
    """
    Client for the marketplace backend's booking and listing endpoints.

    Filtering by status and start time happens server-side; this client
    only maps the JSON payloads onto domain records.
    """

    def __init__(
        self,
        base_url: str,
        api_token: Optional[str] = None,
        timeout_seconds: float = 10.0,
        busy_statuses: Sequence[str] = ("accepted", "in_progress"),
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the API client.

        Args:
            base_url: Root URL of the marketplace API
            api_token: Optional bearer token
            timeout_seconds: Per-request timeout
            busy_statuses: Booking statuses that hold the provider's time
            session: Optional pre-configured requests session
        """
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.busy_statuses = list(busy_statuses)
        self.session = session or requests.Session()
        self.headers = {"Accept": "application/json"}
        if api_token:
            self.headers["Authorization"] = f"Bearer {api_token}"

    async def get_bookings(self, provider_id: str, day: date) -> List[BookingRecord]:
        """Fetch the provider's busy bookings on day."""
        return await asyncio.to_thread(self._get_bookings_sync, provider_id, day)

    async def get_listing_config(self, listing_id: str) -> Optional[ListingConfig]:
        """Fetch a listing's scheduling settings; None when the listing is unknown."""
        return await asyncio.to_thread(self._get_listing_config_sync, listing_id)

    def _get_bookings_sync(self, provider_id: str, day: date) -> List[BookingRecord]:
        url = f"{self.base_url}/providers/{provider_id}/bookings"
        params = {
            "date": day.isoformat(),
            "status": ",".join(self.busy_statuses),
        }
        data = self._get_json(url, params=params)

        items = data.get("bookings", []) if isinstance(data, dict) else data
        if not isinstance(items, list):
            raise StorageError(f"Unexpected bookings payload from {url}")

        return self._parse_bookings(items)

    def _get_listing_config_sync(self, listing_id: str) -> Optional[ListingConfig]:
        url = f"{self.base_url}/listings/{listing_id}"
        data = self._get_json(url, allow_not_found=True)
        if data is None:
            return None

        try:
            return ListingConfig(
                duration_minutes=data.get("duration_minutes"),
                work_hours_start=data.get("work_hours_start"),
                work_hours_end=data.get("work_hours_end"),
            )
        except (AttributeError, TypeError, ValueError) as exc:
            raise StorageError(f"Invalid listing payload from {url}: {exc}") from exc

    def _get_json(
        self,
        url: str,
        params: Optional[Dict[str, str]] = None,
        allow_not_found: bool = False,
    ) -> Any:
        """
        Perform a GET request and decode the JSON body.

        Raises:
            StorageError: If the request fails or the body is not JSON
        """
        try:
            response = self.session.get(
                url,
                headers=self.headers,
                params=params,
                timeout=self.timeout_seconds,
            )
            if allow_not_found and response.status_code == 404:
                return None
            response.raise_for_status()
            return response.json()

        except requests.exceptions.RequestException as e:
            raise StorageError(f"Request to {url} failed: {e}") from e
        except ValueError as e:
            raise StorageError(f"Invalid JSON from {url}: {e}") from e

    def _parse_bookings(self, items: List[Any]) -> List[BookingRecord]:
        """
        Parse booking items into domain records.

        Item format:
        {
            "id": "...",
            "preferred_time": "10:00",
            "listing": {"duration_minutes": 45}
        }
        """
        records: List[BookingRecord] = []

        for item in items:
            if not isinstance(item, dict) or not item.get("preferred_time"):
                continue

            listing = item.get("listing") or {}
            try:
                records.append(
                    BookingRecord(
                        start_time=item["preferred_time"],
                        service_duration_minutes=listing.get("duration_minutes"),
                    )
                )
            except (AttributeError, TypeError, ValueError) as e:
                logger.warning("Skipping booking %s: %s", item.get("id"), e)
                continue

        return records
