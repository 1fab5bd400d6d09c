# appointly/services/availability/slot_generator.py
"""
Slot Generation

Scans a day's working window on a fixed grid and keeps every start time that
respects the minimum notice and does not collide with an existing booking.
"""
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional

from appointly.core.exceptions import ValidationError
from .intervals import find_conflicts
from .types import ExistingAppointment, Interval, WorkingHoursRule

DEFAULT_GRANULARITY_MINUTES = 30


def _check_parameters(duration_minutes, buffer_before, buffer_after, minimum_notice_minutes, granularity_minutes):
    if duration_minutes <= 0:
        raise ValidationError("Duration must be at least 1 minute", details={"duration_minutes": duration_minutes})
    if granularity_minutes <= 0:
        raise ValidationError("Slot granularity must be positive", details={"granularity_minutes": granularity_minutes})
    for name, value in (
            ("buffer_before", buffer_before),
            ("buffer_after", buffer_after),
            ("minimum_notice_minutes", minimum_notice_minutes),
    ):
        if value < 0:
            raise ValidationError(f"{name} cannot be negative", details={name: value})


def generate_slots(
        day: date,
        working_hours: Optional[WorkingHoursRule],
        duration_minutes: int,
        buffer_before: int = 0,
        buffer_after: int = 0,
        minimum_notice_minutes: int = 0,
        existing_appointments: Iterable[ExistingAppointment] = (),
        granularity_minutes: int = DEFAULT_GRANULARITY_MINUTES,
        now: Optional[datetime] = None,
) -> List[time]:
    """
    Bookable start times for one day.

    Args:
        day: the queried date
        working_hours: rule for that weekday; None or disabled yields no slots
        duration_minutes: length of the appointment
        buffer_before / buffer_after: padding applied to candidate and existing
            appointments alike when testing for overlap
        minimum_notice_minutes: a slot must start strictly after now + notice
        existing_appointments: snapshot of the staff member's appointments
        granularity_minutes: grid stride, independent of the duration
        now: current wall-clock time; defaults to datetime.now()

    Returns:
        list[time]: unbuffered start times in ascending order

    Algorithm:
        1. No rule or disabled rule -> []
        2. latest_start = close - duration - buffer_after
        3. earliest_allowed = now + minimum notice
        4. Walk cursor from open to latest_start in granularity steps,
           skipping starts at or before earliest_allowed and starts whose
           buffered window overlaps a buffered existing appointment
    """
    _check_parameters(duration_minutes, buffer_before, buffer_after, minimum_notice_minutes, granularity_minutes)

    if working_hours is None or not working_hours.is_enabled:
        return []

    existing = [appointment for appointment in existing_appointments if appointment.is_active]

    cursor = datetime.combine(day, working_hours.start_time)
    closing = datetime.combine(day, working_hours.end_time)
    latest_start = closing - timedelta(minutes=duration_minutes + buffer_after)

    now = now if now is not None else datetime.now()
    earliest_allowed = now + timedelta(minutes=minimum_notice_minutes)

    step = timedelta(minutes=granularity_minutes)
    slots = []

    while cursor <= latest_start:
        if cursor > earliest_allowed:
            candidate = Interval.from_start(cursor, duration_minutes)
            if not find_conflicts(candidate, existing, buffer_before, buffer_after):
                slots.append(cursor.time())
        cursor += step

    # Ascending by construction
    return slots


def format_slots(slots: Iterable[time]) -> List[str]:
    """Render slots the way the booking UI expects them: "HH:MM"."""
    return [slot.strftime("%H:%M") for slot in slots]
