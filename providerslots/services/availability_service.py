"""
Application service for answering availability requests.

The service validates the request, fetches bookings and listing settings via
storage adapters and delegates the actual calculation to the domain-level
``SlotCalculator``. Storage is reached through small protocols so tests and
the CLI can plug in any backend.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional, Protocol

from ..domain.exceptions import UpstreamFailure
from ..domain.models import AvailabilityQuery, AvailabilityResult, BookingRecord, ListingConfig
from ..domain.slot_calculator import SlotCalculator
from ..domain.validation import RequestValidator

logger = logging.getLogger(__name__)

UPSTREAM_FAILURE_MESSAGE = "Could not load schedule, please try again"


class BookingStoreProtocol(Protocol):
    """Protocol describing how the service reads a provider's bookings."""

    async def get_bookings(self, provider_id: str, day: date) -> List[BookingRecord]:
        """
        Return confirmed bookings (accepted / in progress) of the provider on
        day that carry a start time, ordered by start time.
        """


class ListingStoreProtocol(Protocol):
    """Protocol describing how the service reads listing settings."""

    async def get_listing_config(self, listing_id: str) -> Optional[ListingConfig]:
        """Return the listing's scheduling settings, or None if unknown."""


class AvailabilityService:
    """
    Orchestrates validation, data retrieval and slot calculation.

    Validation errors propagate untouched and are raised before any store is
    queried. Store failures of any kind surface as UpstreamFailure with a
    generic message; details go to the log only.
    """

    def __init__(
        self,
        booking_store: BookingStoreProtocol,
        listing_store: ListingStoreProtocol,
        slot_calculator: Optional[SlotCalculator] = None,
        validator: Optional[RequestValidator] = None,
    ) -> None:
        self._booking_store = booking_store
        self._listing_store = listing_store
        self._slot_calculator = slot_calculator or SlotCalculator()
        self._validator = validator or RequestValidator()

    async def get_availability(
        self,
        *,
        provider_id: Optional[str],
        date: Optional[str],
        listing_id: Optional[str] = None,
    ) -> AvailabilityResult:
        """
        Validate the request, load schedule data and compute availability.
        """
        query = self._validator.validate(provider_id, date, listing_id)
        logger.debug(
            "Availability query provider=%s date=%s listing=%s",
            query.provider_id,
            query.day.isoformat(),
            query.listing_id,
        )

        bookings = await self.fetch_bookings(query)
        listing_config = await self.fetch_listing_config(query)

        result = self._slot_calculator.calculate(query, bookings, listing_config)
        logger.debug(
            "Computed %d slots (%d unavailable) from %d bookings",
            len(result.all_slots),
            len(result.unavailable_slots),
            len(result.busy_slots),
        )
        return result

    async def fetch_bookings(self, query: AvailabilityQuery) -> List[BookingRecord]:
        """Fetch the provider's bookings for the queried day."""
        try:
            bookings = await self._booking_store.get_bookings(query.provider_id, query.day)
        except Exception as exc:
            logger.exception("Booking store failed for provider %s", query.provider_id)
            raise UpstreamFailure(UPSTREAM_FAILURE_MESSAGE) from exc

        return list(bookings)

    async def fetch_listing_config(self, query: AvailabilityQuery) -> Optional[ListingConfig]:
        """Fetch settings of the queried listing; None when no listing was given."""
        if query.listing_id is None:
            return None

        try:
            return await self._listing_store.get_listing_config(query.listing_id)
        except Exception as exc:
            logger.exception("Listing store failed for listing %s", query.listing_id)
            raise UpstreamFailure(UPSTREAM_FAILURE_MESSAGE) from exc
