from .scheduling import (
    AvailabilityQuery,
    AvailabilityResponse,
    CustomerIn,
    AppointmentCreateRequest,
    AppointmentUpdateRequest,
    AppointmentListResponse,
)

__all__ = [
    "AvailabilityQuery",
    "AvailabilityResponse",
    "CustomerIn",
    "AppointmentCreateRequest",
    "AppointmentUpdateRequest",
    "AppointmentListResponse",
]
