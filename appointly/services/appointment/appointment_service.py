# ============================================================================
# appointly/services/appointment/appointment_service.py
# Pure business logic - no FastAPI dependencies, fully testable
# ============================================================================
"""Service for booking and managing appointments"""
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Optional
from uuid import UUID
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from appointly.core.exceptions import (
    AccessDeniedError,
    DomainException,
    NotFoundError,
    UnknownError,
    ValidationError,
)
from appointly.core.locks import staff_booking_lock
from appointly.models.appointment import Appointment, AppointmentStatus
from appointly.repositories.appointment_repository import AppointmentRepository
from appointly.repositories.catalog_repository import CatalogRepository
from appointly.repositories.customer_repository import CustomerRepository
from appointly.repositories.interfaces import AppointmentStore, CatalogStore, CustomerStore
from appointly.schemas.scheduling import AppointmentCreateRequest
from appointly.services.availability.availability_service import resolve_bookable_unit, resolve_staff
from appointly.services.availability.booking_validator import validate_and_reserve
from appointly.services.availability.types import BookableUnit
from appointly.services.notification.notification_service import NotificationService

logger = logging.getLogger(__name__)


def initial_status(unit: BookableUnit) -> AppointmentStatus:
    """Event types confirm immediately unless they require confirmation; service bookings start pending."""
    if unit.kind == "event_type" and not unit.requires_confirmation:
        return AppointmentStatus.CONFIRMED
    return AppointmentStatus.PENDING


class AppointmentService:
    """Handles appointment booking and status management"""

    def __init__(
            self,
            db: Session,
            catalog: CatalogStore,
            appointments: AppointmentStore,
            customers: CustomerStore,
            notifications: Optional[NotificationService] = None,
            lock_backend: Optional[str] = None,
    ):
        self.db = db
        self.catalog = catalog
        self.appointments = appointments
        self.customers = customers
        self.notifications = notifications or NotificationService()
        self.lock_backend = lock_backend

    @classmethod
    def from_session(cls, db: Session, **kwargs) -> "AppointmentService":
        return cls(
            db=db,
            catalog=CatalogRepository(db),
            appointments=AppointmentRepository(db),
            customers=CustomerRepository(db),
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Booking
    # ------------------------------------------------------------------

    def create_appointment(self, request: AppointmentCreateRequest) -> Appointment:
        """
        Book an appointment.

        The recheck against existing appointments and the insert run under
        the staff member's booking lock and commit before it is released, so
        concurrent requests for overlapping times cannot both succeed.

        Raises:
            NotFoundError: unknown staff, service or event type
            ValidationError: staff without a business, bad duration/buffers
            SlotUnavailableError: overlap with an existing appointment
            UnknownError: database failure (rolled back)
        """
        staff = resolve_staff(self.catalog, request.staff_id)
        unit = resolve_bookable_unit(
            self.catalog,
            staff.business_id,
            service_id=request.service_id,
            event_type_id=request.event_type_id,
        )

        with staff_booking_lock(staff.id, backend=self.lock_backend):
            try:
                appointment = self._reserve(staff, unit, request)
                self.db.commit()
            except DomainException:
                self.db.rollback()
                raise
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"Error creating appointment for staff {staff.id}: {e}", exc_info=True)
                raise UnknownError("Failed to create appointment") from e

        logger.info(
            f"Created appointment {appointment.id} for staff {staff.id} "
            f"at {appointment.start_time.isoformat()} ({appointment.status.value})"
        )

        created = self.appointments.get(appointment.id) or appointment
        self.notifications.send_booking_received(created)
        return created

    def _reserve(self, staff, unit: BookableUnit, request: AppointmentCreateRequest) -> Appointment:
        padding = timedelta(minutes=unit.buffer_before + unit.buffer_after)
        proposed_end = request.start_time + timedelta(minutes=unit.duration_minutes)
        existing = self.appointments.find_active_in_range(
            staff.id, request.start_time - padding, proposed_end + padding
        )

        interval = validate_and_reserve(
            staff.id,
            request.start_time,
            unit.duration_minutes,
            unit.buffer_before,
            unit.buffer_after,
            existing,
        )

        customer = self.customers.upsert_by_email(
            business_id=staff.business_id,
            email=request.customer.email,
            name=request.customer.name,
            phone=request.customer.phone,
        )

        appointment = Appointment(
            business_id=staff.business_id,
            staff_id=staff.id,
            service_id=unit.id if unit.kind == "service" else None,
            event_type_id=unit.id if unit.kind == "event_type" else None,
            customer_id=customer.id,
            start_time=interval.start,
            end_time=interval.end,
            status=initial_status(unit),
            notes=request.notes,
        )
        return self.appointments.insert(appointment)

    # ------------------------------------------------------------------
    # Management (dashboard)
    # ------------------------------------------------------------------

    def list_appointments(
            self,
            business_id: UUID,
            start_date: Optional[date] = None,
            end_date: Optional[date] = None,
            status: Optional[AppointmentStatus] = None,
    ) -> Dict[str, Any]:
        """Appointments of one business, ordered by start time."""
        appointments = self.appointments.list_for_business(
            business_id, start_date=start_date, end_date=end_date, status=status
        )
        return {
            "business_id": str(business_id),
            "total_appointments": len(appointments),
            "filters": {
                "start_date": start_date.isoformat() if start_date else None,
                "end_date": end_date.isoformat() if end_date else None,
                "status": status.value if status else None,
            },
            "appointments": [appt.to_dict() for appt in appointments],
        }

    def get_appointment(self, business_id: UUID, appointment_id: UUID) -> Appointment:
        appointment = self.appointments.get(appointment_id)
        if appointment is None:
            raise NotFoundError("Appointment not found", details={"appointment_id": str(appointment_id)})
        if appointment.business_id != business_id:
            raise AccessDeniedError("Access denied", details={"appointment_id": str(appointment_id)})
        return appointment

    def update_appointment(
            self,
            business_id: UUID,
            appointment_id: UUID,
            status: AppointmentStatus,
            notes: Optional[str] = None,
    ) -> Appointment:
        """
        Move an appointment through its lifecycle.

        Re-sending the current status is a no-op (apart from notes); any
        other move must be an allowed transition.
        """
        appointment = self.get_appointment(business_id, appointment_id)
        previous = AppointmentStatus(appointment.status)

        if status != previous and previous.is_terminal:
            raise ValidationError(
                f"Appointment is already {previous.value.lower()}",
                details={"appointment_id": str(appointment_id), "from": previous.value, "to": status.value},
            )
        if status != previous and not previous.can_transition_to(status):
            raise ValidationError(
                f"Cannot change status from {previous.value} to {status.value}",
                details={"appointment_id": str(appointment_id), "from": previous.value, "to": status.value},
            )

        try:
            appointment.status = status
            if notes:
                appointment.notes = notes
            if status == AppointmentStatus.CANCELLED and previous != status:
                appointment.cancelled_at = datetime.now(timezone.utc)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error updating appointment {appointment_id}: {e}", exc_info=True)
            raise UnknownError("Failed to update appointment") from e

        logger.info(f"Appointment {appointment_id} status {previous.value} -> {status.value}")
        self.notifications.send_status_changed(appointment, previous)
        return appointment

    def cancel_appointment(self, business_id: UUID, appointment_id: UUID) -> Appointment:
        return self.update_appointment(business_id, appointment_id, AppointmentStatus.CANCELLED)
