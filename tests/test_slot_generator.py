"""Slot generation: fixed grid, buffers, minimum notice and day rules."""
from datetime import date, datetime, time, timedelta

import pytest

from appointly.core.exceptions import ValidationError
from appointly.models import AppointmentStatus
from appointly.services.availability.intervals import overlaps
from appointly.services.availability.slot_generator import format_slots, generate_slots
from appointly.services.availability.types import ExistingAppointment, Interval, WorkingHoursRule

DAY = date(2030, 6, 3)
EARLY = datetime(2030, 6, 1, 0, 0)
NINE_TO_FIVE = WorkingHoursRule(day_of_week=1, start_time=time(9, 0), end_time=time(17, 0))


def at(hour, minute=0):
    return datetime.combine(DAY, time(hour, minute))


def slots(**kwargs):
    params = dict(day=DAY, working_hours=NINE_TO_FIVE, duration_minutes=30, now=EARLY)
    params.update(kwargs)
    return format_slots(generate_slots(**params))


class TestScenarios:
    def test_empty_day_yields_full_grid(self):
        result = slots()

        assert len(result) == 16
        assert result[0] == "09:00"
        assert result[-1] == "16:30"

    def test_existing_appointment_removes_only_its_slot(self):
        result = slots(existing_appointments=[ExistingAppointment(at(10), at(10, 30))])

        assert "10:00" not in result
        assert "09:30" in result
        assert "10:30" in result
        assert len(result) == 15

    def test_buffers_widen_both_candidate_and_existing(self):
        result = slots(
            buffer_before=5,
            buffer_after=5,
            existing_appointments=[ExistingAppointment(at(10), at(10, 30))],
        )

        assert "09:00" in result
        assert "09:30" not in result
        assert "10:00" not in result
        assert "10:30" not in result
        assert "11:00" in result
        # latest start is 17:00 - 30 - 5
        assert result[-1] == "16:00"

    def test_minimum_notice_skips_early_slots(self):
        result = slots(minimum_notice_minutes=60, now=at(9, 15))

        assert result[0] == "10:30"
        assert not {"09:00", "09:30", "10:00"} & set(result)


class TestProperties:
    def test_deterministic(self):
        existing = [ExistingAppointment(at(11), at(12)), ExistingAppointment(at(14), at(14, 45))]
        first = slots(existing_appointments=existing, buffer_before=10, buffer_after=5)
        second = slots(existing_appointments=list(reversed(existing)), buffer_before=10, buffer_after=5)

        assert first == second
        assert first == sorted(first)

    def test_no_returned_slot_overlaps_buffered_existing(self):
        existing = [
            ExistingAppointment(at(9, 40), at(10, 10)),
            ExistingAppointment(at(13), at(14, 20)),
            ExistingAppointment(at(15), at(15, 30), status=AppointmentStatus.CANCELLED),
        ]
        result = generate_slots(
            DAY, NINE_TO_FIVE, 45, buffer_before=10, buffer_after=15,
            existing_appointments=existing, granularity_minutes=15, now=EARLY,
        )

        assert result
        for slot in result:
            candidate = Interval.from_start(datetime.combine(DAY, slot), 45).buffered(10, 15)
            for appointment in existing:
                if appointment.is_active:
                    assert not overlaps(candidate, appointment.interval.buffered(10, 15))

    def test_cancelled_time_is_bookable(self):
        result = slots(existing_appointments=[
            ExistingAppointment(at(10), at(10, 30), status=AppointmentStatus.CANCELLED)
        ])
        assert "10:00" in result

    def test_boundary_touch_is_accepted(self):
        # buffered existing [10:00,10:30) and buffered candidate [10:30,11:00) touch only
        result = slots(existing_appointments=[ExistingAppointment(at(10), at(10, 30))])
        assert "10:30" in result

    @pytest.mark.parametrize("notice", [0, 15, 90, 240])
    def test_no_slot_within_notice(self, notice):
        now = at(11, 5)
        for slot in generate_slots(DAY, NINE_TO_FIVE, 30, minimum_notice_minutes=notice, now=now):
            assert datetime.combine(DAY, slot) > now + timedelta(minutes=notice)

    def test_slot_equal_to_notice_threshold_is_excluded(self):
        result = slots(minimum_notice_minutes=60, now=at(9))
        assert "10:00" not in result
        assert result[0] == "10:30"

    def test_disabled_day_is_empty(self):
        disabled = WorkingHoursRule(day_of_week=0, start_time=time(9), end_time=time(17), is_enabled=False)
        assert slots(working_hours=disabled) == []

    def test_missing_rule_is_empty(self):
        assert slots(working_hours=None) == []


class TestGrid:
    def test_grid_is_independent_of_duration(self):
        result = slots(duration_minutes=45)

        assert result[:3] == ["09:00", "09:30", "10:00"]
        # 16:30 + 45 would run past close
        assert result[-1] == "16:00"

    def test_custom_granularity(self):
        result = slots(granularity_minutes=15, duration_minutes=60)
        assert result[:2] == ["09:00", "09:15"]
        assert result[-1] == "16:00"

    def test_window_shorter_than_duration(self):
        short = WorkingHoursRule(day_of_week=1, start_time=time(9), end_time=time(9, 20))
        assert slots(working_hours=short) == []

    def test_start_grid_anchored_at_opening(self):
        odd = WorkingHoursRule(day_of_week=1, start_time=time(9, 10), end_time=time(11, 0))
        assert slots(working_hours=odd) == ["09:10", "09:40", "10:10"]


class TestParameterValidation:
    @pytest.mark.parametrize("kwargs", [
        {"duration_minutes": 0},
        {"granularity_minutes": 0},
        {"buffer_before": -5},
        {"buffer_after": -1},
        {"minimum_notice_minutes": -10},
    ])
    def test_rejects_invalid_parameters(self, kwargs):
        with pytest.raises(ValidationError):
            slots(**kwargs)
