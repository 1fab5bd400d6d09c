# appointly/services/availability/intervals.py
"""
Interval overlap primitive.

One rule for every overlap test in the codebase:
    a.start < b.end AND b.start < a.end
Intervals are half-open, so touching endpoints never overlap.
"""
from typing import Iterable, List

from .types import ExistingAppointment, Interval


def overlaps(a: Interval, b: Interval) -> bool:
    """True iff the half-open intervals share at least one instant."""
    return a.start < b.end and b.start < a.end


def find_conflicts(
        candidate: Interval,
        existing_appointments: Iterable[ExistingAppointment],
        buffer_before: int = 0,
        buffer_after: int = 0,
) -> List[ExistingAppointment]:
    """
    Existing appointments whose buffered window intersects the buffered candidate.

    Both sides get the same buffers. Cancelled appointments never conflict.
    """
    buffered_candidate = candidate.buffered(buffer_before, buffer_after)
    return [
        appointment
        for appointment in existing_appointments
        if appointment.is_active
        and overlaps(buffered_candidate, appointment.interval.buffered(buffer_before, buffer_after))
    ]
