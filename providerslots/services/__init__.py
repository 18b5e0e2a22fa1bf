"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .availability_service import (
    AvailabilityService,
    BookingStoreProtocol,
    ListingStoreProtocol,
)

__all__ = ["AvailabilityService", "BookingStoreProtocol", "ListingStoreProtocol"]
