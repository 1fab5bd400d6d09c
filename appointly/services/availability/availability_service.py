# ===== appointly/services/availability/availability_service.py =====
from datetime import datetime, time, timedelta
from typing import Callable, Optional, Tuple
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from appointly.config.settings import get_settings
from appointly.core.exceptions import NotFoundError, ValidationError
from appointly.repositories.appointment_repository import AppointmentRepository
from appointly.repositories.catalog_repository import CatalogRepository
from appointly.repositories.interfaces import AppointmentStore, CatalogStore, WorkingHoursStore
from appointly.repositories.working_hours_repository import WorkingHoursRepository
from appointly.schemas.scheduling import AvailabilityQuery, AvailabilityResponse
from .slot_generator import format_slots, generate_slots
from .types import BookableUnit, weekday_index

logger = logging.getLogger(__name__)


def resolve_bookable_unit(
        catalog: CatalogStore,
        business_id: UUID,
        service_id: Optional[UUID] = None,
        event_type_id: Optional[UUID] = None,
) -> BookableUnit:
    """
    Resolve exactly one duration/buffer source, scoped to the staff's business.

    A unit owned by another business is reported as missing rather than
    forbidden so its existence does not leak across tenants.
    """
    if (service_id is None) == (event_type_id is None):
        raise ValidationError("Exactly one of serviceId or eventTypeId is required")

    if event_type_id is not None:
        event_type = catalog.get_event_type(event_type_id)
        if event_type is None or event_type.business_id != business_id:
            raise NotFoundError("Event type not found", details={"event_type_id": str(event_type_id)})
        return BookableUnit.from_event_type(event_type)

    service = catalog.get_service(service_id)
    if service is None or service.business_id != business_id:
        raise NotFoundError("Service not found", details={"service_id": str(service_id)})
    business = catalog.get_business(business_id)
    if business is None:
        raise NotFoundError("Business not found", details={"business_id": str(business_id)})
    return BookableUnit.from_service(service, business)


def resolve_staff(catalog: CatalogStore, staff_id: UUID):
    """Active staff member with a business, or a typed error."""
    staff = catalog.get_staff(staff_id)
    if staff is None:
        raise NotFoundError("User not found", details={"staff_id": str(staff_id)})
    if staff.business_id is None:
        raise ValidationError("User is not associated with a business", details={"staff_id": str(staff_id)})
    return staff


class AvailabilityService:
    """Computes bookable slots for a staff member and a day"""

    def __init__(
            self,
            catalog: CatalogStore,
            working_hours: WorkingHoursStore,
            appointments: AppointmentStore,
            clock: Callable[[], datetime] = datetime.now,
            granularity_minutes: Optional[int] = None,
    ):
        self.catalog = catalog
        self.working_hours = working_hours
        self.appointments = appointments
        self.clock = clock
        self.granularity_minutes = granularity_minutes or get_settings().SLOT_GRANULARITY_MINUTES

    @classmethod
    def from_session(cls, db: Session, **kwargs) -> "AvailabilityService":
        return cls(
            catalog=CatalogRepository(db),
            working_hours=WorkingHoursRepository(db),
            appointments=AppointmentRepository(db),
            **kwargs,
        )

    @staticmethod
    def _query_range(query: AvailabilityQuery, unit: BookableUnit) -> Tuple[datetime, datetime]:
        """
        Window of existing appointments to load.

        Padded by both buffers, matching the booking recheck, so appointments
        just outside the window whose buffered span reaches into it still count.
        """
        range_start = query.start_date or datetime.combine(query.date, time.min)
        range_end = query.end_date or datetime.combine(query.date + timedelta(days=1), time.min)
        padding = timedelta(minutes=unit.buffer_before + unit.buffer_after)
        return range_start - padding, range_end + padding

    def get_availability(self, query: AvailabilityQuery) -> AvailabilityResponse:
        """
        Available "HH:MM" start times for the query.

        No working-hours rule, or a disabled one, is a valid query with an
        empty answer, not an error.
        """
        staff = resolve_staff(self.catalog, query.staff_identifier)
        unit = resolve_bookable_unit(
            self.catalog,
            staff.business_id,
            service_id=query.service_id,
            event_type_id=query.event_type_id,
        )

        response = AvailabilityResponse(
            date=query.date,
            staff_id=staff.id,
            duration_minutes=unit.duration_minutes,
            buffer_before=unit.buffer_before,
            buffer_after=unit.buffer_after,
        )

        rule = self.working_hours.get_for_day(staff.business_id, staff.id, weekday_index(query.date))
        if rule is None or not rule.is_enabled:
            logger.info(f"No working hours for staff {staff.id} on {query.date}, returning no slots")
            return response

        range_start, range_end = self._query_range(query, unit)
        existing = self.appointments.find_active_in_range(staff.id, range_start, range_end)

        slots = generate_slots(
            day=query.date,
            working_hours=rule,
            duration_minutes=unit.duration_minutes,
            buffer_before=unit.buffer_before,
            buffer_after=unit.buffer_after,
            minimum_notice_minutes=unit.minimum_notice_minutes,
            existing_appointments=existing,
            granularity_minutes=self.granularity_minutes,
            now=self.clock(),
        )

        response.available_slots = format_slots(slots)
        logger.info(
            f"Computed {len(slots)} slots for staff {staff.id} on {query.date} "
            f"({unit.kind} {unit.id}, {len(existing)} existing appointments)"
        )
        return response
