# appointly/services/availability/booking_validator.py
"""
Booking Validation

Re-checks a single proposed start time against the same overlap rule the slot
generator uses. Pure: the caller supplies the snapshot of existing
appointments and is responsible for persisting the result.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List

from appointly.core.exceptions import SlotUnavailableError, ValidationError
from .intervals import find_conflicts
from .types import ExistingAppointment, Interval


@dataclass(frozen=True)
class BookingCheck:
    interval: Interval
    conflicts: List[ExistingAppointment] = field(default_factory=list)

    @property
    def is_available(self) -> bool:
        return not self.conflicts


def check_booking(
        proposed_start: datetime,
        duration_minutes: int,
        buffer_before: int,
        buffer_after: int,
        existing_appointments: Iterable[ExistingAppointment],
) -> BookingCheck:
    """Overlap verdict for one proposed booking, without raising."""
    if duration_minutes <= 0:
        raise ValidationError("Duration must be at least 1 minute", details={"duration_minutes": duration_minutes})
    if buffer_before < 0 or buffer_after < 0:
        raise ValidationError("Buffers cannot be negative")

    interval = Interval.from_start(proposed_start, duration_minutes)
    conflicts = find_conflicts(interval, existing_appointments, buffer_before, buffer_after)
    return BookingCheck(interval=interval, conflicts=conflicts)


def validate_and_reserve(
        staff_id,
        proposed_start: datetime,
        duration_minutes: int,
        buffer_before: int,
        buffer_after: int,
        existing_appointments: Iterable[ExistingAppointment],
) -> Interval:
    """
    Validate a proposed booking for one staff member.

    Returns:
        Interval: the unbuffered [start, end) to persist

    Raises:
        SlotUnavailableError: if the buffered interval overlaps any
            non-cancelled existing appointment
    """
    check = check_booking(proposed_start, duration_minutes, buffer_before, buffer_after, existing_appointments)

    if not check.is_available:
        raise SlotUnavailableError(
            details={
                "staff_id": str(staff_id),
                "start_time": check.interval.start.isoformat(),
                "end_time": check.interval.end.isoformat(),
                "conflicting_appointments": [str(c.id) for c in check.conflicts if c.id is not None],
            }
        )

    return check.interval
