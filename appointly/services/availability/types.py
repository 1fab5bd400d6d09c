# appointly/services/availability/types.py
"""
Value objects consumed by the availability engine.

Everything here is immutable: the engine reads snapshots handed to it by the
repositories and never mutates them.
"""
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Optional, Union
from uuid import UUID

from appointly.core.exceptions import ValidationError
from appointly.models.appointment import AppointmentStatus


def parse_hhmm(value: Union[str, time]) -> time:
    """Parse an "HH:MM" working-hours string into a time."""
    if isinstance(value, time):
        return value
    try:
        return datetime.strptime(value, "%H:%M").time()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid time of day: {value!r}, expected HH:MM")


def weekday_index(day) -> int:
    """Day-of-week numbering used by working hours: 0=Sunday ... 6=Saturday."""
    return (day.weekday() + 1) % 7


@dataclass(frozen=True)
class Interval:
    """Half-open time interval [start, end)."""

    start: datetime
    end: datetime

    def __post_init__(self):
        if self.end < self.start:
            raise ValidationError(
                "Interval end precedes its start",
                details={"start": self.start.isoformat(), "end": self.end.isoformat()},
            )

    @classmethod
    def from_start(cls, start: datetime, duration_minutes: int) -> "Interval":
        return cls(start, start + timedelta(minutes=duration_minutes))

    def buffered(self, buffer_before: int = 0, buffer_after: int = 0) -> "Interval":
        """Widen by the buffers; used only for overlap tests, never displayed."""
        return Interval(
            self.start - timedelta(minutes=buffer_before),
            self.end + timedelta(minutes=buffer_after),
        )


@dataclass(frozen=True)
class WorkingHoursRule:
    day_of_week: int
    start_time: time
    end_time: time
    is_enabled: bool = True

    def __post_init__(self):
        if not 0 <= self.day_of_week <= 6:
            raise ValidationError(f"day_of_week must be 0-6, got {self.day_of_week}")
        if self.is_enabled and self.start_time >= self.end_time:
            raise ValidationError(
                "Working hours must start before they end",
                details={"start_time": self.start_time.isoformat(), "end_time": self.end_time.isoformat()},
            )

    @classmethod
    def from_model(cls, row) -> "WorkingHoursRule":
        return cls(
            day_of_week=row.day_of_week,
            start_time=parse_hhmm(row.start_time),
            end_time=parse_hhmm(row.end_time),
            is_enabled=bool(row.is_enabled),
        )


@dataclass(frozen=True)
class BookableUnit:
    """
    The single source of duration and buffers for one request.

    A Service uses the business default buffers and has no minimum notice;
    an EventType carries all of its own settings.
    """

    kind: str  # "service" | "event_type"
    id: UUID
    business_id: UUID
    duration_minutes: int
    buffer_before: int = 0
    buffer_after: int = 0
    minimum_notice_minutes: int = 0
    requires_confirmation: bool = False

    @classmethod
    def from_service(cls, service, business) -> "BookableUnit":
        return cls(
            kind="service",
            id=service.id,
            business_id=service.business_id,
            duration_minutes=service.duration,
            buffer_before=business.buffer_before or 0,
            buffer_after=business.buffer_after or 0,
        )

    @classmethod
    def from_event_type(cls, event_type) -> "BookableUnit":
        return cls(
            kind="event_type",
            id=event_type.id,
            business_id=event_type.business_id,
            duration_minutes=event_type.duration,
            buffer_before=event_type.buffer_before or 0,
            buffer_after=event_type.buffer_after or 0,
            minimum_notice_minutes=event_type.minimum_notice or 0,
            requires_confirmation=bool(event_type.requires_confirmation),
        )


@dataclass(frozen=True)
class ExistingAppointment:
    start: datetime
    end: datetime
    status: AppointmentStatus = AppointmentStatus.CONFIRMED
    id: Optional[UUID] = None

    @property
    def is_active(self) -> bool:
        return self.status.blocks_time

    @property
    def interval(self) -> Interval:
        return Interval(self.start, self.end)

    @classmethod
    def from_model(cls, appointment) -> "ExistingAppointment":
        return cls(
            start=appointment.start_time,
            end=appointment.end_time,
            status=AppointmentStatus(appointment.status),
            id=appointment.id,
        )
