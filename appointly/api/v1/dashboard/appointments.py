# ============================================================================
# FILE: appointly/api/v1/dashboard/appointments.py
# Session authenticated endpoints - thin HTTP layer
# ============================================================================
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query

from appointly.api.dependencies import get_appointment_service, get_business_user
from appointly.models.appointment import AppointmentStatus
from appointly.models.user import User
from appointly.schemas.scheduling import AppointmentListResponse, AppointmentUpdateRequest
from appointly.services.appointment.appointment_service import AppointmentService

router = APIRouter(prefix="/appointments", tags=["dashboard-appointments"])


@router.get("", response_model=AppointmentListResponse)
def list_appointments(
        start_date: Optional[date] = Query(None, description="Filter appointments on or after this date"),
        end_date: Optional[date] = Query(None, description="Filter appointments on or before this date"),
        status: Optional[AppointmentStatus] = Query(None, description="Filter by status"),
        current_user: User = Depends(get_business_user),
        service: AppointmentService = Depends(get_appointment_service),
):
    """
    Get a list of all appointments for your business.
    Requires authenticated session.
    """
    return service.list_appointments(
        business_id=current_user.business_id,
        start_date=start_date,
        end_date=end_date,
        status=status,
    )


@router.get("/{appointment_id}")
def get_appointment(
        appointment_id: UUID = Path(..., description="The appointment ID"),
        current_user: User = Depends(get_business_user),
        service: AppointmentService = Depends(get_appointment_service),
):
    """
    Get detailed information about a specific appointment.
    Requires authenticated session.
    """
    return service.get_appointment(current_user.business_id, appointment_id).to_dict()


@router.patch("/{appointment_id}")
def update_appointment(
        request: AppointmentUpdateRequest,
        appointment_id: UUID = Path(..., description="The appointment ID"),
        current_user: User = Depends(get_business_user),
        service: AppointmentService = Depends(get_appointment_service),
):
    """
    Confirm, complete or cancel an appointment.
    Illegal status transitions are rejected with 400.
    """
    appointment = service.update_appointment(
        business_id=current_user.business_id,
        appointment_id=appointment_id,
        status=request.status,
        notes=request.notes,
    )
    return appointment.to_dict()


@router.delete("/{appointment_id}")
def cancel_appointment(
        appointment_id: UUID = Path(..., description="The appointment ID"),
        current_user: User = Depends(get_business_user),
        service: AppointmentService = Depends(get_appointment_service),
):
    """Cancel an appointment; its time becomes bookable again."""
    service.cancel_appointment(current_user.business_id, appointment_id)
    return {"success": True}
