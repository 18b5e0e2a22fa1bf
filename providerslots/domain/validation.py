"""
Request validation for availability queries.

Runs before any data is fetched. Each check raises its own error kind so the
caller can tell the client exactly what was wrong.
"""

import re
from datetime import date
from typing import Callable, Optional

import pendulum

from .exceptions import (
    DateOutOfRange,
    InvalidDate,
    InvalidListingId,
    InvalidProviderId,
    MissingRequiredField,
)
from .models import AvailabilityQuery

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def is_uuid(value: str) -> bool:
    """Return True for the canonical 8-4-4-4-12 hexadecimal UUID form."""
    return bool(UUID_PATTERN.fullmatch(value))


def _local_today() -> date:
    return pendulum.today().date()


class RequestValidator:
    """
    Validates raw request parameters into an AvailabilityQuery.

    The date must fall within [today - past_days, today + future_days],
    both ends inclusive. The clock is injectable so the window can be
    pinned in tests.
    """

    def __init__(
        self,
        past_days: int = 1,
        future_days: int = 90,
        today: Optional[Callable[[], date]] = None,
    ):
        self.past_days = past_days
        self.future_days = future_days
        self._today = today or _local_today

    def validate(
        self,
        provider_id: Optional[str],
        date_value: Optional[str],
        listing_id: Optional[str] = None,
    ) -> AvailabilityQuery:
        """
        Validate request parameters.

        Raises:
            MissingRequiredField: provider_id or date is absent or empty
            InvalidProviderId: provider_id is not a UUID
            InvalidListingId: listing_id is given but not a UUID
            InvalidDate: date does not parse
            DateOutOfRange: date lies outside the bookable window
        """
        # Values are checked as given; padded ids are not canonical UUIDs
        listing_id = listing_id or None

        if not provider_id:
            raise MissingRequiredField("provider_id")
        if not date_value:
            raise MissingRequiredField("date")

        if not is_uuid(provider_id):
            raise InvalidProviderId("Invalid provider_id format")

        if listing_id is not None and not is_uuid(listing_id):
            raise InvalidListingId("Invalid listing_id format")

        day = self.parse_date(date_value)
        self.check_range(day)

        return AvailabilityQuery(
            provider_id=provider_id,
            date=date_value,
            day=day,
            listing_id=listing_id,
        )

    @staticmethod
    def parse_date(value: str) -> date:
        """
        Parse an ISO date or date-time string into a calendar date.

        Raises:
            InvalidDate: If value cannot be parsed
        """
        try:
            parsed = pendulum.parse(value, exact=True)
        except ValueError as exc:
            raise InvalidDate("Invalid date format") from exc

        if isinstance(parsed, pendulum.DateTime):
            return parsed.date()
        if isinstance(parsed, pendulum.Date):
            return parsed

        # Bare times and durations are not dates
        raise InvalidDate("Invalid date format")

    def check_range(self, day: date) -> None:
        """
        Raises:
            DateOutOfRange: If day is outside the allowed window
        """
        current = self._today()
        today = pendulum.Date(current.year, current.month, current.day)
        earliest = today.subtract(days=self.past_days)
        latest = today.add(days=self.future_days)

        if not earliest <= day <= latest:
            raise DateOutOfRange(
                f"Date must be between {earliest.isoformat()} and {latest.isoformat()}"
            )
