# appointly/models/__init__.py
from .base import Base
from .business import Business
from .user import User, StaffRole
from .service import Service
from .event_type import EventType
from .working_hours import WorkingHours
from .customer import Customer
from .appointment import Appointment, AppointmentStatus, ALLOWED_TRANSITIONS

__all__ = [
    "Base",
    "Business",
    "User",
    "StaffRole",
    "Service",
    "EventType",
    "WorkingHours",
    "Customer",
    "Appointment",
    "AppointmentStatus",
    "ALLOWED_TRANSITIONS",
]
