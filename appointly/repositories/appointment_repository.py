# appointly/repositories/appointment_repository.py
from datetime import date, datetime, time, timedelta
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session, selectinload

from appointly.models import Appointment, AppointmentStatus
from appointly.services.availability.types import ExistingAppointment


class AppointmentRepository:
    def __init__(self, db: Session):
        self.db = db

    def find_active_in_range(
            self, staff_id: UUID, range_start: datetime, range_end: datetime
    ) -> List[ExistingAppointment]:
        """Non-cancelled appointments of one staff member intersecting [range_start, range_end)."""
        rows = self.db.query(Appointment).filter(
            Appointment.staff_id == staff_id,
            Appointment.status != AppointmentStatus.CANCELLED,
            Appointment.start_time < range_end,
            Appointment.end_time > range_start
        ).order_by(Appointment.start_time.asc()).all()

        return [ExistingAppointment.from_model(row) for row in rows]

    def insert(self, appointment: Appointment) -> Appointment:
        """Stage a new appointment; the caller owns the transaction."""
        self.db.add(appointment)
        self.db.flush()
        return appointment

    def get(self, appointment_id: UUID) -> Optional[Appointment]:
        return self.db.query(Appointment).options(
            selectinload(Appointment.service),
            selectinload(Appointment.event_type),
            selectinload(Appointment.staff),
            selectinload(Appointment.customer),
        ).filter(Appointment.id == appointment_id).first()

    def list_for_business(
            self,
            business_id: UUID,
            start_date: Optional[date] = None,
            end_date: Optional[date] = None,
            status: Optional[AppointmentStatus] = None,
    ) -> List[Appointment]:
        query = self.db.query(Appointment).options(
            selectinload(Appointment.service),
            selectinload(Appointment.event_type),
            selectinload(Appointment.staff),
            selectinload(Appointment.customer),
        ).filter(Appointment.business_id == business_id)

        if start_date:
            query = query.filter(Appointment.start_time >= datetime.combine(start_date, time.min))
        if end_date:
            query = query.filter(Appointment.start_time < datetime.combine(end_date + timedelta(days=1), time.min))
        if status:
            query = query.filter(Appointment.status == status)

        return query.order_by(Appointment.start_time.asc()).all()
