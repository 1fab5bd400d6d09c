"""Booking and lifecycle management over in-memory stores."""
import threading
import uuid
from datetime import datetime
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from appointly.core.exceptions import (
    AccessDeniedError,
    NotFoundError,
    SlotUnavailableError,
    UnknownError,
    ValidationError,
)
from appointly.models import AppointmentStatus
from appointly.schemas.scheduling import AppointmentCreateRequest
from appointly.services.appointment.appointment_service import AppointmentService
from tests.fakes import (
    FakeAppointmentStore,
    FakeCatalog,
    FakeCustomerStore,
    FakeSession,
    make_business,
    make_event_type,
    make_service,
    make_staff,
)


def at(hour, minute=0):
    return datetime(2030, 6, 3, hour, minute)


@pytest.fixture
def business():
    return make_business(buffer_before=0, buffer_after=10)


@pytest.fixture
def staff(business):
    return make_staff(business)


@pytest.fixture
def service(business):
    return make_service(business, duration=30)


@pytest.fixture
def instant_event(business):
    return make_event_type(business, duration=45, buffer_before=5, buffer_after=5)


@pytest.fixture
def confirmed_event(business):
    return make_event_type(business, duration=30, requires_confirmation=True)


@pytest.fixture
def store():
    return FakeAppointmentStore()


@pytest.fixture
def notifications():
    return MagicMock()


@pytest.fixture
def booking(business, staff, service, instant_event, confirmed_event, store, notifications):
    catalog = FakeCatalog(
        businesses=[business],
        staff=[staff],
        services=[service],
        event_types=[instant_event, confirmed_event],
    )
    return AppointmentService(
        db=FakeSession(),
        catalog=catalog,
        appointments=store,
        customers=FakeCustomerStore(),
        notifications=notifications,
        lock_backend="local",
    )


def request_for(staff, start, service=None, event_type=None, email="ana@example.com", phone=None):
    return AppointmentCreateRequest(
        staffId=staff.id,
        startTime=start,
        serviceId=service.id if service else None,
        eventTypeId=event_type.id if event_type else None,
        customer={"name": "Ana", "email": email, "phone": phone},
    )


class TestCreateAppointment:
    def test_service_booking_starts_pending(self, booking, staff, service, notifications):
        appointment = booking.create_appointment(request_for(staff, at(9), service=service))

        assert appointment.status == AppointmentStatus.PENDING
        assert appointment.start_time == at(9)
        assert appointment.end_time == at(9, 30)
        assert appointment.service_id == service.id
        assert appointment.event_type_id is None
        assert booking.db.commits == 1
        notifications.send_booking_received.assert_called_once_with(appointment)

    def test_event_type_without_confirmation_is_confirmed(self, booking, staff, instant_event):
        appointment = booking.create_appointment(request_for(staff, at(9), event_type=instant_event))

        assert appointment.status == AppointmentStatus.CONFIRMED
        assert appointment.end_time == at(9, 45)

    def test_event_type_requiring_confirmation_is_pending(self, booking, staff, confirmed_event):
        appointment = booking.create_appointment(request_for(staff, at(9), event_type=confirmed_event))
        assert appointment.status == AppointmentStatus.PENDING

    def test_overlap_rejected_and_rolled_back(self, booking, staff, service, store):
        booking.create_appointment(request_for(staff, at(9), service=service))

        with pytest.raises(SlotUnavailableError):
            booking.create_appointment(request_for(staff, at(9, 15), service=service, email="bo@example.com"))

        assert len(store.rows) == 1
        assert booking.db.rollbacks == 1

    def test_business_buffer_applies_to_services(self, booking, staff, service):
        booking.create_appointment(request_for(staff, at(9), service=service))

        # 09:30 touches the first booking but the 10 minute after-buffer covers it
        with pytest.raises(SlotUnavailableError):
            booking.create_appointment(request_for(staff, at(9, 30), service=service))
        assert booking.create_appointment(request_for(staff, at(10), service=service)).start_time == at(10)

    def test_recheck_window_covers_both_buffers(self, booking, staff, instant_event, store):
        booking.create_appointment(request_for(staff, at(12), event_type=instant_event))
        assert store.ranges[-1] == (at(11, 50), at(12, 55))

    def test_customer_upserted_by_email(self, booking, staff, service, store):
        first = booking.create_appointment(request_for(staff, at(9), service=service, phone="+100"))
        second = booking.create_appointment(request_for(staff, at(11), service=service, email="ANA@example.com"))

        assert first.customer_id == second.customer_id
        customer = booking.customers.customers[(staff.business_id, "ana@example.com")]
        assert customer.phone == "+100"

    def test_unknown_staff(self, booking, service):
        ghost = make_staff(make_business())
        with pytest.raises(NotFoundError):
            booking.create_appointment(request_for(ghost, at(9), service=service))

    def test_foreign_service_is_not_found(self, booking, staff):
        foreign = make_service(make_business())
        booking.catalog.services[foreign.id] = foreign

        with pytest.raises(NotFoundError):
            booking.create_appointment(request_for(staff, at(9), service=foreign))

    def test_database_failure_becomes_unknown_error(self, booking, staff, service, notifications):
        booking.db.commit = MagicMock(side_effect=OperationalError("INSERT", {}, Exception("disk full")))

        with pytest.raises(UnknownError):
            booking.create_appointment(request_for(staff, at(9), service=service))

        assert booking.db.rollbacks == 1
        notifications.send_booking_received.assert_not_called()

    def test_concurrent_identical_bookings_only_one_succeeds(self, booking, staff, service):
        booking.appointments.read_delay = 0.05
        barrier = threading.Barrier(2)
        outcomes = []

        def attempt(email):
            barrier.wait()
            try:
                booking.create_appointment(request_for(staff, at(14), service=service, email=email))
                outcomes.append("ok")
            except SlotUnavailableError:
                outcomes.append("conflict")

        threads = [threading.Thread(target=attempt, args=(f"c{i}@example.com",)) for i in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(outcomes) == ["conflict", "ok"]
        assert len(booking.appointments.rows) == 1


class TestManageAppointments:
    @pytest.fixture
    def pending(self, booking, staff, service):
        return booking.create_appointment(request_for(staff, at(9), service=service))

    def test_get_scoped_to_business(self, booking, business, pending):
        assert booking.get_appointment(business.id, pending.id) is pending

        with pytest.raises(AccessDeniedError):
            booking.get_appointment(uuid.uuid4(), pending.id)

    def test_get_missing(self, booking, business):
        with pytest.raises(NotFoundError):
            booking.get_appointment(business.id, uuid.uuid4())

    def test_confirm_then_complete(self, booking, business, pending, notifications):
        booking.update_appointment(business.id, pending.id, AppointmentStatus.CONFIRMED)
        booking.update_appointment(business.id, pending.id, AppointmentStatus.COMPLETED, notes="Went well")

        assert pending.status == AppointmentStatus.COMPLETED
        assert pending.notes == "Went well"
        assert notifications.send_status_changed.call_count == 2

    def test_pending_cannot_complete(self, booking, business, pending):
        with pytest.raises(ValidationError):
            booking.update_appointment(business.id, pending.id, AppointmentStatus.COMPLETED)

    @pytest.mark.parametrize("terminal", [AppointmentStatus.CANCELLED, AppointmentStatus.COMPLETED])
    def test_terminal_states_are_final(self, booking, business, pending, terminal):
        booking.update_appointment(business.id, pending.id, AppointmentStatus.CONFIRMED)
        booking.update_appointment(business.id, pending.id, terminal)

        with pytest.raises(ValidationError) as exc_info:
            booking.update_appointment(business.id, pending.id, AppointmentStatus.CONFIRMED)

        assert terminal.is_terminal
        assert exc_info.value.message == f"Appointment is already {terminal.value.lower()}"

    def test_cancel_frees_the_slot(self, booking, business, staff, service, pending):
        booking.cancel_appointment(business.id, pending.id)

        assert pending.status == AppointmentStatus.CANCELLED
        assert pending.cancelled_at is not None
        rebooked = booking.create_appointment(request_for(staff, at(9), service=service))
        assert rebooked.id != pending.id

    def test_cancel_twice_is_a_no_op(self, booking, business, pending):
        booking.cancel_appointment(business.id, pending.id)
        cancelled_at = pending.cancelled_at
        booking.cancel_appointment(business.id, pending.id)

        assert pending.cancelled_at == cancelled_at

    def test_list_for_business(self, booking, business, staff, service, pending):
        booking.create_appointment(request_for(staff, at(11), service=service))
        result = booking.list_appointments(business.id)

        assert result["total_appointments"] == 2
        assert [a["start_time"] for a in result["appointments"]] == [at(9).isoformat(), at(11).isoformat()]
