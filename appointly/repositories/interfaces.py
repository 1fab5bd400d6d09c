# appointly/repositories/interfaces.py
"""
Collaborator interfaces the scheduling services depend on.

The SQLAlchemy implementations live next to this module; tests substitute
in-memory fakes. Every lookup that can cross tenants takes or returns the
business_id so callers can scope it.
"""
from datetime import date, datetime
from typing import List, Optional, Protocol
from uuid import UUID

from appointly.models import Appointment, AppointmentStatus, Business, Customer, EventType, Service, User
from appointly.services.availability.types import ExistingAppointment, WorkingHoursRule


class CatalogStore(Protocol):
    def get_staff(self, staff_id: UUID) -> Optional[User]: ...

    def get_business(self, business_id: UUID) -> Optional[Business]: ...

    def get_service(self, service_id: UUID) -> Optional[Service]: ...

    def get_event_type(self, event_type_id: UUID) -> Optional[EventType]: ...


class WorkingHoursStore(Protocol):
    def get_for_day(self, business_id: UUID, staff_id: Optional[UUID], weekday: int) -> Optional[WorkingHoursRule]: ...


class AppointmentStore(Protocol):
    def find_active_in_range(
            self, staff_id: UUID, range_start: datetime, range_end: datetime
    ) -> List[ExistingAppointment]: ...

    def insert(self, appointment: Appointment) -> Appointment: ...

    def get(self, appointment_id: UUID) -> Optional[Appointment]: ...

    def list_for_business(
            self,
            business_id: UUID,
            start_date: Optional[date] = None,
            end_date: Optional[date] = None,
            status: Optional[AppointmentStatus] = None,
    ) -> List[Appointment]: ...


class CustomerStore(Protocol):
    def upsert_by_email(
            self, business_id: UUID, email: str, name: str, phone: Optional[str] = None
    ) -> Customer: ...
