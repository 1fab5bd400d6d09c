"""
Pydantic schemas for the availability and booking endpoints

Every request is validated here, before any service code runs; the first
invalid field rejects the whole request.
"""
from datetime import date as date_type, datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError, field_validator, model_validator

from appointly.core.exceptions import ValidationError
from appointly.models.appointment import AppointmentStatus


def _naive(value: Optional[datetime]) -> Optional[datetime]:
    # Times are business wall-clock; offsets are dropped, not converted
    if value is not None and value.tzinfo is not None:
        return value.replace(tzinfo=None)
    return value


def _require_single_unit(service_id: Optional[UUID], event_type_id: Optional[UUID]) -> None:
    if service_id is not None and event_type_id is not None:
        raise ValueError("Provide either serviceId or eventTypeId, not both")


# ============================================================================
# Availability
# ============================================================================

class AvailabilityQuery(BaseModel):
    """Query for one staff member's bookable slots on one day"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    staff_id: Optional[UUID] = Field(None, alias="staffId")
    user_id: Optional[UUID] = Field(None, alias="userId")
    date: date_type
    service_id: Optional[UUID] = Field(None, alias="serviceId")
    event_type_id: Optional[UUID] = Field(None, alias="eventTypeId")
    start_date: Optional[datetime] = Field(None, alias="startDate")
    end_date: Optional[datetime] = Field(None, alias="endDate")

    @field_validator("start_date", "end_date")
    @classmethod
    def strip_timezone(cls, v):
        return _naive(v)

    @model_validator(mode="after")
    def check_sources(self):
        _require_single_unit(self.service_id, self.event_type_id)
        if self.start_date and self.end_date and self.start_date >= self.end_date:
            raise ValueError("startDate must be before endDate")
        return self

    @property
    def staff_identifier(self) -> UUID:
        """staffId wins over userId when both are sent"""
        return self.staff_id or self.user_id

    @classmethod
    def from_params(cls, **params: Optional[str]) -> "AvailabilityQuery":
        """
        Build from raw query-string values.

        Raises:
            ValidationError: on missing identifiers or malformed values
        """
        missing = []
        if not params.get("staffId") and not params.get("userId"):
            missing.append("staffId|userId")
        if not params.get("date"):
            missing.append("date")
        if not params.get("serviceId") and not params.get("eventTypeId"):
            missing.append("serviceId|eventTypeId")
        if missing:
            raise ValidationError(
                "Missing required parameters: need staffId or userId, date, and serviceId or eventTypeId",
                details={"missing": missing},
            )

        try:
            return cls.model_validate({k: v for k, v in params.items() if v})
        except PydanticValidationError as e:
            raise ValidationError(
                "Invalid parameters",
                details={"errors": e.errors(include_url=False, include_context=False)},
            )


class AvailabilityResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    available_slots: List[str] = Field(default_factory=list, serialization_alias="availableSlots")
    date: date_type
    staff_id: UUID = Field(serialization_alias="staffId")
    duration_minutes: int = Field(serialization_alias="durationMinutes")
    buffer_before: int = Field(0, serialization_alias="bufferBefore")
    buffer_after: int = Field(0, serialization_alias="bufferAfter")


# ============================================================================
# Booking
# ============================================================================

class CustomerIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255)
    phone: Optional[str] = Field(None, max_length=30)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        v = v.strip().lower()
        local, _, domain = v.partition("@")
        if not local or "." not in domain or domain.startswith(".") or domain.endswith("."):
            raise ValueError("Invalid email address")
        return v


class AppointmentCreateRequest(BaseModel):
    """Public booking request; exactly one of serviceId / eventTypeId"""
    model_config = ConfigDict(populate_by_name=True)

    staff_id: UUID = Field(..., alias="staffId")
    start_time: datetime = Field(..., alias="startTime")
    service_id: Optional[UUID] = Field(None, alias="serviceId")
    event_type_id: Optional[UUID] = Field(None, alias="eventTypeId")
    customer: CustomerIn
    notes: Optional[str] = Field(None, max_length=2000)

    @field_validator("start_time")
    @classmethod
    def strip_timezone(cls, v):
        return _naive(v)

    @model_validator(mode="after")
    def check_unit(self):
        _require_single_unit(self.service_id, self.event_type_id)
        if self.service_id is None and self.event_type_id is None:
            raise ValueError("Either serviceId or eventTypeId is required")
        return self


class AppointmentUpdateRequest(BaseModel):
    status: AppointmentStatus
    notes: Optional[str] = Field(None, max_length=2000)


class AppointmentListResponse(BaseModel):
    business_id: str
    total_appointments: int
    filters: Dict[str, Any]
    appointments: List[Dict[str, Any]]
