"""
Domain layer - Pure business logic without external dependencies.
"""

from .models import (
    AvailabilityQuery,
    AvailabilityResult,
    BookingRecord,
    BusyInterval,
    ListingConfig,
    WorkingWindow,
)
from .slot_calculator import SlotCalculator
from .validation import RequestValidator

__all__ = [
    "AvailabilityQuery",
    "AvailabilityResult",
    "BookingRecord",
    "BusyInterval",
    "ListingConfig",
    "WorkingWindow",
    "SlotCalculator",
    "RequestValidator",
]
