"""
Domain models for slot availability calculations.

All times are naive, provider-local wall-clock values on a single calendar
day, carried as "HH:mm" strings at the edges and as minutes since midnight
inside the calculator.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

DEFAULT_DURATION_MINUTES = 60
DEFAULT_WORK_HOURS_START = "09:00"
DEFAULT_WORK_HOURS_END = "18:00"

_CLOCK_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def is_clock_time(value: str) -> bool:
    """Return True when value is a 24h "HH:mm" wall-clock time."""
    return bool(_CLOCK_PATTERN.fullmatch(value))


def parse_clock_time(value: str) -> int:
    """
    Convert an "HH:mm" string into minutes since midnight.

    Raises:
        ValueError: If value is not a 24h "HH:mm" time
    """
    match = _CLOCK_PATTERN.fullmatch(value)
    if not match:
        raise ValueError(f"Expected time in HH:mm format, got {value!r}")
    return int(match.group(1)) * 60 + int(match.group(2))


def normalize_duration(value: Any) -> Optional[int]:
    """
    Return a recorded duration in minutes, or None when nothing usable is recorded.

    Zero, negative and non-numeric values count as "no recorded duration" so
    the caller falls back to the default.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        return None
    return int(value)


def format_clock_time(total_minutes: int) -> str:
    """
    Format minutes since midnight as "HH:mm".

    Values past midnight keep counting hours (1470 -> "24:30") since a
    busy interval may run past the end of the day.
    """
    hours = total_minutes // 60
    minutes = total_minutes % 60
    return f"{hours:02d}:{minutes:02d}"


@dataclass(frozen=True)
class BookingRecord:
    """
    One accepted or in-progress reservation of a provider on a given day.

    start_time may be missing on historical rows; such records are ignored
    by the calculator. service_duration_minutes is the duration of the
    booked listing, not of the service being queried; a zero or missing
    duration is stored as None.
    """
    start_time: Optional[str]
    service_duration_minutes: Optional[int] = None

    def __post_init__(self):
        if self.start_time is not None and not is_clock_time(self.start_time):
            raise ValueError(f"Booking start time must be HH:mm, got {self.start_time!r}")
        object.__setattr__(
            self, "service_duration_minutes", normalize_duration(self.service_duration_minutes)
        )


@dataclass(frozen=True)
class BusyInterval:
    """
    Half-open [start, end) range blocked by an existing booking.

    Only the times are kept; who booked the slot is never exposed.
    """
    start_minutes: int
    end_minutes: int

    @property
    def start(self) -> str:
        return format_clock_time(self.start_minutes)

    @property
    def end(self) -> str:
        return format_clock_time(self.end_minutes)

    def overlaps(self, start_minutes: int, end_minutes: int) -> bool:
        """Check overlap with [start_minutes, end_minutes); touching ends do not count."""
        return start_minutes < self.end_minutes and end_minutes > self.start_minutes

    def to_dict(self) -> Dict[str, str]:
        return {"start": self.start, "end": self.end}


@dataclass(frozen=True)
class WorkingWindow:
    """Operating hours of a listing for one day."""
    start: str = DEFAULT_WORK_HOURS_START
    end: str = DEFAULT_WORK_HOURS_END

    def __post_init__(self):
        for value in (self.start, self.end):
            if not is_clock_time(value):
                raise ValueError(f"Working hours must be HH:mm, got {value!r}")

    @property
    def start_minutes(self) -> int:
        return parse_clock_time(self.start)

    @property
    def end_minutes(self) -> int:
        return parse_clock_time(self.end)


@dataclass(frozen=True)
class ListingConfig:
    """
    Per-listing scheduling settings as stored with the listing.

    Every field is optional; an absent, empty or zero field falls back to the
    default independently of the others. The window is not required to be
    well-ordered here: an inverted window simply yields no slots.
    """
    duration_minutes: Optional[int] = None
    work_hours_start: Optional[str] = None
    work_hours_end: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "duration_minutes", normalize_duration(self.duration_minutes))
        for value in (self.work_hours_start, self.work_hours_end):
            if value and not is_clock_time(value):
                raise ValueError(f"Working hours must be HH:mm, got {value!r}")

    def effective_duration(self, default: int = DEFAULT_DURATION_MINUTES) -> int:
        return self.duration_minutes or default

    def effective_window(self, default: Optional[WorkingWindow] = None) -> WorkingWindow:
        default = default or WorkingWindow()
        return WorkingWindow(
            start=self.work_hours_start or default.start,
            end=self.work_hours_end or default.end,
        )


@dataclass(frozen=True)
class AvailabilityQuery:
    """A validated availability request."""
    provider_id: str
    date: str  # raw value, echoed back verbatim
    day: date
    listing_id: Optional[str] = None


@dataclass
class AvailabilityResult:
    """Computed availability for one provider on one day."""
    date: str
    provider_id: str
    busy_slots: List[BusyInterval] = field(default_factory=list)
    all_slots: List[str] = field(default_factory=list)
    unavailable_slots: List[str] = field(default_factory=list)
    current_listing_duration: int = DEFAULT_DURATION_MINUTES
    work_hours_start: str = DEFAULT_WORK_HOURS_START
    work_hours_end: str = DEFAULT_WORK_HOURS_END

    @property
    def available_slots(self) -> List[str]:
        blocked = set(self.unavailable_slots)
        return [slot for slot in self.all_slots if slot not in blocked]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the camelCase wire shape consumed by the web client."""
        return {
            "date": self.date,
            "providerId": self.provider_id,
            "busySlots": [interval.to_dict() for interval in self.busy_slots],
            "unavailableSlots": list(self.unavailable_slots),
            "currentListingDuration": self.current_listing_duration,
            "allSlots": list(self.all_slots),
            "workHoursStart": self.work_hours_start,
            "workHoursEnd": self.work_hours_end,
        }
