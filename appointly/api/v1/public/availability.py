# ============================================================================
# FILE: appointly/api/v1/public/availability.py
# Public (unauthenticated) slot lookup - thin HTTP layer
# ============================================================================
from typing import Optional

from fastapi import APIRouter, Depends, Query

from appointly.api.dependencies import get_availability_service
from appointly.schemas.scheduling import AvailabilityQuery, AvailabilityResponse
from appointly.services.availability.availability_service import AvailabilityService

router = APIRouter(tags=["public-availability"])


@router.get("/availability", response_model=AvailabilityResponse)
def get_availability(
        staff_id: Optional[str] = Query(None, alias="staffId", description="Staff member to book"),
        user_id: Optional[str] = Query(None, alias="userId", description="Alias of staffId"),
        date: Optional[str] = Query(None, description="Day to list slots for (YYYY-MM-DD)"),
        service_id: Optional[str] = Query(None, alias="serviceId"),
        event_type_id: Optional[str] = Query(None, alias="eventTypeId"),
        start_date: Optional[str] = Query(None, alias="startDate", description="Narrow the conflict window"),
        end_date: Optional[str] = Query(None, alias="endDate"),
        service: AvailabilityService = Depends(get_availability_service),
):
    """
    Bookable start times for one staff member on one day.

    Parameters are validated by hand so a missing one produces the
    "Missing required parameters" 400 rather than a generic validation error.
    """
    query = AvailabilityQuery.from_params(
        staffId=staff_id,
        userId=user_id,
        date=date,
        serviceId=service_id,
        eventTypeId=event_type_id,
        startDate=start_date,
        endDate=end_date,
    )
    return service.get_availability(query)
