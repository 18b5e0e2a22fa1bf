"""
Core business logic for calculating slot availability.

This is the heart of the application - pure domain logic without any
external dependencies (no API calls, no database, no I/O).
"""

from typing import Iterable, List, Optional, Sequence

from .models import (
    DEFAULT_DURATION_MINUTES,
    AvailabilityQuery,
    AvailabilityResult,
    BookingRecord,
    BusyInterval,
    ListingConfig,
    WorkingWindow,
    format_clock_time,
    parse_clock_time,
)

SLOT_STEP_MINUTES = 30


class SlotCalculator:
    """
    Calculates which start slots of a working day are blocked by bookings.

    Algorithm:
    1. Turn each booking into a busy interval using the booking's own duration
    2. Lay a fixed grid of start slots over the working window
    3. Mark every slot whose candidate interval overlaps a busy interval
    4. Assemble the result with the effective duration and window
    """

    def __init__(
        self,
        step_minutes: int = SLOT_STEP_MINUTES,
        default_duration_minutes: int = DEFAULT_DURATION_MINUTES,
        default_window: Optional[WorkingWindow] = None,
    ):
        if step_minutes <= 0:
            raise ValueError(f"Slot step must be positive, got {step_minutes}")
        self.step_minutes = step_minutes
        self.default_duration_minutes = default_duration_minutes
        self.default_window = default_window or WorkingWindow()

    def calculate(
        self,
        query: AvailabilityQuery,
        bookings: Iterable[BookingRecord],
        listing_config: Optional[ListingConfig] = None,
    ) -> AvailabilityResult:
        """
        Compute availability for a validated query.

        Args:
            query: Validated request (provider and date are echoed back)
            bookings: Confirmed bookings of the provider on that day
            listing_config: Settings of the listing being booked, if any

        Returns:
            AvailabilityResult with busy intervals, the full grid and the
            blocked subset, plus the duration and window actually used
        """
        config = listing_config or ListingConfig()
        target_duration = config.effective_duration(self.default_duration_minutes)
        window = config.effective_window(self.default_window)

        busy_intervals = self.derive_busy_intervals(bookings)
        all_slots = self.generate_slot_grid(window)
        unavailable = self.resolve_unavailable(all_slots, target_duration, busy_intervals)

        return AvailabilityResult(
            date=query.date,
            provider_id=query.provider_id,
            busy_slots=busy_intervals,
            all_slots=all_slots,
            unavailable_slots=unavailable,
            current_listing_duration=target_duration,
            work_hours_start=window.start,
            work_hours_end=window.end,
        )

    def derive_busy_intervals(self, bookings: Iterable[BookingRecord]) -> List[BusyInterval]:
        """
        Convert bookings into busy intervals, keeping input order.

        Intervals are not clamped to the working window: a booking at 17:45
        lasting an hour still blocks slots up to 18:45.
        """
        intervals: List[BusyInterval] = []

        for booking in bookings:
            if not booking.start_time:
                continue

            start = parse_clock_time(booking.start_time)
            duration = booking.service_duration_minutes or DEFAULT_DURATION_MINUTES
            intervals.append(BusyInterval(start_minutes=start, end_minutes=start + duration))

        return intervals

    def generate_slot_grid(self, window: WorkingWindow) -> List[str]:
        """
        Generate start slots across the working window.

        Slots run from the opening time in fixed steps while before closing
        time; the closing time itself is appended when it sits on a step
        boundary, so 09:00-18:00 yields 09:00 ... 17:30, 18:00.
        """
        start = window.start_minutes
        end = window.end_minutes

        if end <= start:
            return []

        slots: List[str] = []
        current = start
        while current < end:
            slots.append(format_clock_time(current))
            current += self.step_minutes

        if end % self.step_minutes == 0:
            slots.append(window.end)

        return slots

    def resolve_unavailable(
        self,
        slots: Sequence[str],
        target_duration: int,
        busy_intervals: Sequence[BusyInterval],
    ) -> List[str]:
        """
        Return the slots that cannot host a booking of target_duration.

        A slot S is blocked when [S, S + target_duration) overlaps any busy
        interval. Touching endpoints do not overlap.
        """
        unavailable: List[str] = []

        for slot in slots:
            slot_start = parse_clock_time(slot)
            slot_end = slot_start + target_duration

            if any(busy.overlaps(slot_start, slot_end) for busy in busy_intervals):
                unavailable.append(slot)

        return unavailable
