"""
Unit tests for slot generation.

Covers the stepping loop, lead time, collision with existing appointments
(buffers included), the configuration guard and the iteration ceiling.
"""
import logging
from datetime import datetime
from itertools import combinations

from booking.scheduling.calendar_math import add_minutes, parse_time_on_date
from booking.scheduling.slot_generator import (
    REASON_ALREADY_BOOKED,
    REASON_TOO_SOON,
    generate_slots,
)
from booking.scheduling.types import ServiceTiming

from conftest import FROZEN_NOW, MONDAY, WEDNESDAY

HAIRCUT = {"duration": 45, "buffer_before": 0, "buffer_after": 15}
FULL_DAY = [{"start_time": "09:00", "end_time": "17:00"}]


def _times(slots):
    return [s.time for s in slots]


class TestBasicGeneration:

    def test_cycle_steps_through_window(self):
        slots = generate_slots(HAIRCUT, FULL_DAY, [], WEDNESDAY)

        assert _times(slots) == [
            "09:00", "10:00", "11:00", "12:00", "13:00", "14:00", "15:00", "16:00"
        ]
        assert all(s.available for s in slots)
        assert all(s.reason is None for s in slots)

    def test_last_slot_must_fit_with_trailing_buffer(self):
        # 16:30 + 45 + 15 = 17:30 does not fit a window ending at 17:00
        slots = generate_slots(HAIRCUT, [{"start_time": "09:30", "end_time": "17:00"}], [], WEDNESDAY)
        assert _times(slots)[-1] == "15:30"

    def test_window_shorter_than_cycle(self):
        assert generate_slots(HAIRCUT, [{"start_time": "09:00", "end_time": "09:50"}], [], WEDNESDAY) == []

    def test_buffers_widen_the_step(self):
        service = {"duration": 30, "buffer_before": 10, "buffer_after": 20}
        slots = generate_slots(service, [{"start_time": "09:00", "end_time": "12:00"}], [], WEDNESDAY)
        assert _times(slots) == ["09:00", "10:00", "11:00"]

    def test_windows_in_given_order_without_dedup(self):
        windows = [
            {"start_time": "14:00", "end_time": "16:00"},
            {"start_time": "09:00", "end_time": "11:00"},
        ]
        slots = generate_slots(HAIRCUT, windows, [], WEDNESDAY)
        assert _times(slots) == ["14:00", "15:00", "09:00", "10:00"]

    def test_no_windows(self):
        assert generate_slots(HAIRCUT, [], [], WEDNESDAY) == []


class TestExistingAppointments:

    def test_overlapping_slot_is_already_booked(self):
        booked = [{"start_time": "10:00", "end_time": "10:45"}]
        slots = {s.time: s for s in generate_slots(HAIRCUT, FULL_DAY, booked, WEDNESDAY)}

        assert slots["10:00"].available is False
        assert slots["10:00"].reason == REASON_ALREADY_BOOKED
        assert slots["09:00"].available is True
        assert slots["11:00"].available is True

    def test_touching_endpoints_do_not_collide(self):
        # 09:00 slot occupies 09:00-10:00 including its buffer
        booked = [{"start_time": "10:00", "end_time": "11:00"}]
        slots = {s.time: s for s in generate_slots(HAIRCUT, FULL_DAY, booked, WEDNESDAY)}
        assert slots["09:00"].available is True
        assert slots["10:00"].available is False

    def test_trailing_buffer_collides(self):
        # 09:00 face ends 09:45, buffer runs to 10:00, appointment starts 09:50
        booked = [{"start_time": "09:50", "end_time": "10:00"}]
        slots = {s.time: s for s in generate_slots(HAIRCUT, FULL_DAY, booked, WEDNESDAY)}
        assert slots["09:00"].reason == REASON_ALREADY_BOOKED

    def test_leading_buffer_collides(self):
        service = {"duration": 30, "buffer_before": 15, "buffer_after": 0}
        # 10:30 slot needs 10:15-11:00, appointment ends 10:20
        booked = [{"start_time": "10:00", "end_time": "10:20"}]
        slots = {s.time: s for s in generate_slots(service, [{"start_time": "09:00", "end_time": "12:00"}], booked, WEDNESDAY)}
        assert slots["09:45"].reason == REASON_ALREADY_BOOKED
        assert slots["10:30"].reason == REASON_ALREADY_BOOKED
        assert slots["11:15"].available is True

    def test_orm_like_rows_are_accepted(self):
        class Row:
            start_time = "10:00:00"
            end_time = "10:45:00"
            appointment_date = WEDNESDAY

        slots = {s.time: s for s in generate_slots(HAIRCUT, FULL_DAY, [Row()], WEDNESDAY)}
        assert slots["10:00"].reason == REASON_ALREADY_BOOKED


class TestLeadTime:

    def test_slots_inside_lead_time_are_too_soon(self):
        # now 08:00 + 120 min -> first bookable start 10:00
        slots = {s.time: s for s in generate_slots(HAIRCUT, FULL_DAY, [], MONDAY)}
        assert slots["09:00"].reason == REASON_TOO_SOON
        assert slots["10:00"].available is True

    def test_too_soon_wins_over_already_booked(self):
        booked = [{"start_time": "09:00", "end_time": "09:45"}]
        slots = {s.time: s for s in generate_slots(HAIRCUT, FULL_DAY, booked, MONDAY)}
        assert slots["09:00"].reason == REASON_TOO_SOON

    def test_past_day_is_entirely_too_soon(self):
        slots = generate_slots(HAIRCUT, FULL_DAY, [], datetime(2025, 5, 28).date())
        assert slots
        assert all(s.reason == REASON_TOO_SOON for s in slots)

    def test_explicit_now_and_lead_time(self):
        now = datetime(2025, 6, 4, 12, 30)
        slots = {s.time: s for s in generate_slots(HAIRCUT, FULL_DAY, [], WEDNESDAY, now=now, lead_time_minutes=0)}
        assert slots["12:00"].reason == REASON_TOO_SOON
        assert slots["13:00"].available is True

    def test_no_available_slot_starts_before_minimum(self):
        minimum = add_minutes(FROZEN_NOW, 120)
        for slot in generate_slots(HAIRCUT, FULL_DAY, [], MONDAY):
            if slot.available:
                assert parse_time_on_date(slot.time, MONDAY) >= minimum


class TestGuards:

    def test_zero_cycle_returns_nothing(self, caplog):
        caplog.set_level(logging.ERROR)
        slots = generate_slots({"duration": 0, "buffer_before": 0, "buffer_after": 0}, FULL_DAY, [], WEDNESDAY)
        assert slots == []
        assert "Invalid service cycle" in caplog.text

    def test_negative_cycle_returns_nothing(self):
        service = {"duration": 10, "buffer_before": -30, "buffer_after": 0}
        assert generate_slots(service, FULL_DAY, [], WEDNESDAY) == []

    def test_iteration_ceiling_keeps_computed_slots(self, caplog):
        caplog.set_level(logging.ERROR)
        slots = generate_slots(HAIRCUT, FULL_DAY, [], WEDNESDAY, max_iterations=3)
        assert _times(slots) == ["09:00", "10:00", "11:00"]
        assert "exceeded 3 iterations" in caplog.text

    def test_ceiling_is_per_window(self):
        windows = [
            {"start_time": "09:00", "end_time": "17:00"},
            {"start_time": "18:00", "end_time": "20:00"},
        ]
        slots = generate_slots(HAIRCUT, windows, [], WEDNESDAY, max_iterations=2)
        assert _times(slots) == ["09:00", "10:00", "18:00", "19:00"]


class TestProperties:

    def test_idempotent_under_frozen_clock(self):
        booked = [{"start_time": "13:00", "end_time": "13:45"}]
        assert generate_slots(HAIRCUT, FULL_DAY, booked, WEDNESDAY) == generate_slots(
            HAIRCUT, FULL_DAY, booked, WEDNESDAY
        )

    def test_available_slots_never_overlap(self):
        service = ServiceTiming(duration=50, buffer_before=5, buffer_after=10)
        slots = [s for s in generate_slots(service, FULL_DAY, [], WEDNESDAY) if s.available]

        spans = []
        for slot in slots:
            start = parse_time_on_date(slot.time, WEDNESDAY)
            spans.append((add_minutes(start, -service.buffer_before), add_minutes(start, service.duration + service.buffer_after)))

        for (a_start, a_end), (b_start, b_end) in combinations(spans, 2):
            assert not (a_start < b_end and a_end > b_start)
