"""AvailabilityService orchestration over in-memory stores."""
import uuid
from datetime import date, datetime, time
from unittest.mock import MagicMock

import pytest

from appointly.core.exceptions import NotFoundError, SlotUnavailableError, ValidationError
from appointly.models import Appointment, AppointmentStatus
from appointly.schemas.scheduling import AppointmentCreateRequest, AvailabilityQuery
from appointly.services.appointment.appointment_service import AppointmentService
from appointly.services.availability.availability_service import AvailabilityService
from appointly.services.availability.types import WorkingHoursRule
from tests.fakes import (
    FakeAppointmentStore,
    FakeCatalog,
    FakeCustomerStore,
    FakeSession,
    FakeWorkingHours,
    make_business,
    make_event_type,
    make_service,
    make_staff,
)

MONDAY = date(2030, 6, 3)
NOW = datetime(2030, 6, 1, 8, 0)


@pytest.fixture
def world():
    business = make_business(buffer_before=0, buffer_after=15)
    staff = make_staff(business)
    service = make_service(business, duration=30)
    event_type = make_event_type(business, duration=60, buffer_before=5, buffer_after=5, minimum_notice=30)
    catalog = FakeCatalog(businesses=[business], staff=[staff], services=[service], event_types=[event_type])
    hours = FakeWorkingHours({
        (None, 1): WorkingHoursRule(1, time(9), time(12)),
        (None, 0): WorkingHoursRule(0, time(9), time(12), is_enabled=False),
    })
    appointments = FakeAppointmentStore()
    service_under_test = AvailabilityService(catalog, hours, appointments, clock=lambda: NOW, granularity_minutes=30)
    return {
        "business": business,
        "staff": staff,
        "service": service,
        "event_type": event_type,
        "hours": hours,
        "appointments": appointments,
        "availability": service_under_test,
    }


def book(store, world, start, end, status=AppointmentStatus.CONFIRMED):
    store.insert(Appointment(
        business_id=world["business"].id,
        staff_id=world["staff"].id,
        customer_id=uuid.uuid4(),
        start_time=start,
        end_time=end,
        status=status,
    ))


class TestGetAvailability:
    def test_service_uses_business_default_buffers(self, world):
        query = AvailabilityQuery(staffId=world["staff"].id, date=MONDAY, serviceId=world["service"].id)
        response = world["availability"].get_availability(query)

        assert response.buffer_after == 15
        assert response.duration_minutes == 30
        # latest start = 12:00 - 30 - 15
        assert response.available_slots == ["09:00", "09:30", "10:00", "10:30", "11:00"]

    def test_event_type_supplies_its_own_settings(self, world):
        book(world["appointments"], world, datetime(2030, 6, 3, 9), datetime(2030, 6, 3, 9, 30))
        query = AvailabilityQuery(staffId=world["staff"].id, date=MONDAY, eventTypeId=world["event_type"].id)
        response = world["availability"].get_availability(query)

        assert response.buffer_before == 5
        # 60 minutes with 5/5 buffers: latest start 10:55, 09:30 collides with [08:55,09:35)
        assert response.available_slots == ["10:00", "10:30"]

    def test_user_id_is_accepted_for_staff(self, world):
        query = AvailabilityQuery(userId=world["staff"].id, date=MONDAY, serviceId=world["service"].id)
        assert world["availability"].get_availability(query).available_slots

    def test_disabled_day_returns_empty(self, world):
        query = AvailabilityQuery(staffId=world["staff"].id, date=date(2030, 6, 2), serviceId=world["service"].id)
        assert world["availability"].get_availability(query).available_slots == []

    def test_missing_rule_returns_empty(self, world):
        query = AvailabilityQuery(staffId=world["staff"].id, date=date(2030, 6, 4), serviceId=world["service"].id)
        assert world["availability"].get_availability(query).available_slots == []

    def test_working_hours_looked_up_by_sunday_based_weekday(self, world):
        query = AvailabilityQuery(staffId=world["staff"].id, date=MONDAY, serviceId=world["service"].id)
        world["availability"].get_availability(query)

        assert world["hours"].calls == [(world["business"].id, world["staff"].id, 1)]

    def test_default_query_range_is_whole_day_padded_by_buffers(self, world):
        query = AvailabilityQuery(staffId=world["staff"].id, date=MONDAY, serviceId=world["service"].id)
        world["availability"].get_availability(query)

        # service uses the business buffers 0/15
        assert world["appointments"].ranges == [(datetime(2030, 6, 2, 23, 45), datetime(2030, 6, 4, 0, 15))]

    def test_previous_day_appointment_within_buffer_blocks_midnight_slot(self, world):
        night_shift = make_event_type(world["business"], duration=30, buffer_before=15)
        world["availability"].catalog.event_types[night_shift.id] = night_shift
        world["hours"].rules[(None, 1)] = WorkingHoursRule(1, time(0), time(8))
        book(world["appointments"], world, datetime(2030, 6, 2, 23, 20), datetime(2030, 6, 2, 23, 50))

        query = AvailabilityQuery(staffId=world["staff"].id, date=MONDAY, eventTypeId=night_shift.id)
        slots = world["availability"].get_availability(query).available_slots

        assert "00:00" not in slots
        assert slots[0] == "00:30"

        # booking rechecks against the same appointments and agrees
        booking = AppointmentService(
            db=FakeSession(),
            catalog=world["availability"].catalog,
            appointments=world["appointments"],
            customers=FakeCustomerStore(),
            notifications=MagicMock(),
            lock_backend="local",
        )
        request = AppointmentCreateRequest(
            staffId=world["staff"].id,
            startTime=datetime(2030, 6, 3, 0, 0),
            eventTypeId=night_shift.id,
            customer={"name": "Night Owl", "email": "owl@example.com"},
        )
        with pytest.raises(SlotUnavailableError):
            booking.create_appointment(request)

    def test_cancelled_appointments_ignored(self, world):
        book(world["appointments"], world, datetime(2030, 6, 3, 9), datetime(2030, 6, 3, 9, 30),
             status=AppointmentStatus.CANCELLED)
        query = AvailabilityQuery(staffId=world["staff"].id, date=MONDAY, serviceId=world["service"].id)

        assert "09:00" in world["availability"].get_availability(query).available_slots


class TestResolution:
    def test_unknown_staff(self, world):
        query = AvailabilityQuery(staffId=uuid.uuid4(), date=MONDAY, serviceId=world["service"].id)
        with pytest.raises(NotFoundError):
            world["availability"].get_availability(query)

    def test_unknown_service(self, world):
        query = AvailabilityQuery(staffId=world["staff"].id, date=MONDAY, serviceId=uuid.uuid4())
        with pytest.raises(NotFoundError):
            world["availability"].get_availability(query)

    def test_service_of_another_business_is_not_found(self, world):
        stranger = make_service(make_business())
        world["availability"].catalog.services[stranger.id] = stranger
        query = AvailabilityQuery(staffId=world["staff"].id, date=MONDAY, serviceId=stranger.id)

        with pytest.raises(NotFoundError):
            world["availability"].get_availability(query)

    def test_staff_without_business(self, world):
        loner = make_staff(None)
        world["availability"].catalog.staff[loner.id] = loner
        query = AvailabilityQuery(staffId=loner.id, date=MONDAY, serviceId=world["service"].id)

        with pytest.raises(ValidationError):
            world["availability"].get_availability(query)


class TestAvailabilityQuery:
    def test_missing_parameters(self):
        with pytest.raises(ValidationError) as exc_info:
            AvailabilityQuery.from_params(staffId=None, userId=None, date="2030-06-03", serviceId=str(uuid.uuid4()))

        assert exc_info.value.message.startswith("Missing required parameters")
        assert exc_info.value.details["missing"] == ["staffId|userId"]

    def test_both_units_rejected(self):
        with pytest.raises(ValidationError):
            AvailabilityQuery.from_params(
                staffId=str(uuid.uuid4()), date="2030-06-03",
                serviceId=str(uuid.uuid4()), eventTypeId=str(uuid.uuid4()),
            )

    def test_malformed_date(self):
        with pytest.raises(ValidationError) as exc_info:
            AvailabilityQuery.from_params(staffId=str(uuid.uuid4()), date="next monday", serviceId=str(uuid.uuid4()))
        assert exc_info.value.message == "Invalid parameters"

    def test_timezone_offset_dropped(self):
        query = AvailabilityQuery.from_params(
            staffId=str(uuid.uuid4()), date="2030-06-03", serviceId=str(uuid.uuid4()),
            startDate="2030-06-03T09:00:00+02:00", endDate="2030-06-03T18:00:00+02:00",
        )
        assert query.start_date == datetime(2030, 6, 3, 9)
        assert query.end_date.tzinfo is None
