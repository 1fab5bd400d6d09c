# ============================================================================
# FILE: appointly/api/v1/public/appointments.py
# Public booking endpoint - thin HTTP layer
# ============================================================================
from fastapi import APIRouter, Depends, status

from appointly.api.dependencies import get_appointment_service
from appointly.schemas.scheduling import AppointmentCreateRequest
from appointly.services.appointment.appointment_service import AppointmentService

router = APIRouter(tags=["public-appointments"])


@router.post("/appointments", status_code=status.HTTP_201_CREATED)
def create_appointment(
        request: AppointmentCreateRequest,
        service: AppointmentService = Depends(get_appointment_service),
):
    """
    Book an appointment with a staff member.

    Returns 409 when the time overlaps an existing appointment (buffers
    included), 404 for an unknown staff member, service or event type.
    """
    appointment = service.create_appointment(request)
    return appointment.to_dict()
