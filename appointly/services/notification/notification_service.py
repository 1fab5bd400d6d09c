# ============================================================================
# appointly/services/notification/notification_service.py
# ============================================================================
"""Booking notifications. Delivery is not wired up; events are logged only."""
import logging

from appointly.models.appointment import Appointment, AppointmentStatus

logger = logging.getLogger(__name__)


class NotificationService:
    """Logs the notifications a mail provider would send"""

    def send_booking_received(self, appointment: Appointment) -> None:
        template = (
            "booking_pending_confirmation"
            if appointment.status == AppointmentStatus.PENDING
            else "booking_confirmed"
        )
        self._dispatch(template, appointment)

    def send_status_changed(self, appointment: Appointment, previous: AppointmentStatus) -> None:
        if previous == appointment.status:
            return
        self._dispatch(f"booking_{appointment.status.value.lower()}", appointment)

    def _dispatch(self, template: str, appointment: Appointment) -> None:
        recipient = appointment.customer.email if appointment.customer else None
        logger.info(
            f"Notification '{template}' for appointment {appointment.id} to {recipient} (delivery disabled)",
            extra={"template": template, "appointment_id": str(appointment.id)},
        )
