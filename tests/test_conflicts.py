"""Tests for the interval primitive and service update conflict detection"""
from datetime import datetime
from types import SimpleNamespace

from booking.scheduling.conflicts import find_service_update_conflicts, neighbor_span
from booking.scheduling.intervals import Interval, collision_interval, intervals_overlap
from booking.scheduling.types import ServiceTiming, field_value

DAY = "2025-06-04"
STAFF = "staff-1"


def _at(hhmm):
    hour, minute = map(int, hhmm.split(":"))
    return datetime(2025, 6, 4, hour, minute)


def _appointment(appointment_id, start, end, service=None, staff_id=STAFF, day=DAY):
    return {
        "id": appointment_id,
        "staff_id": staff_id,
        "appointment_date": day,
        "start_time": start,
        "end_time": end,
        "service": service,
    }


class TestIntervalsOverlap:

    def test_partial_overlap_is_symmetric(self):
        a = Interval(_at("09:00"), _at("10:00"))
        b = Interval(_at("09:30"), _at("10:30"))
        assert intervals_overlap(a, b)
        assert intervals_overlap(b, a)

    def test_touching_endpoints(self):
        a = Interval(_at("09:00"), _at("10:00"))
        b = Interval(_at("10:00"), _at("11:00"))
        assert not intervals_overlap(a, b)
        assert not intervals_overlap(b, a)

    def test_containment(self):
        outer = Interval(_at("09:00"), _at("12:00"))
        inner = Interval(_at("10:00"), _at("11:00"))
        assert intervals_overlap(outer, inner)
        assert intervals_overlap(inner, outer)

    def test_collision_interval_includes_buffers(self):
        span = collision_interval(_at("10:00"), ServiceTiming(30, 10, 15))
        assert span == Interval(_at("09:50"), _at("10:45"))


class TestNeighborSpan:

    def test_uses_neighbor_service_timing(self):
        neighbor = _appointment(2, "10:45", "11:15", service={"duration": 30, "buffer_before": 5, "buffer_after": 10})
        assert neighbor_span(neighbor, DAY) == Interval(_at("10:40"), _at("11:25"))

    def test_falls_back_to_stored_times(self):
        neighbor = _appointment(2, "10:45", "11:15")
        assert neighbor_span(neighbor, DAY) == Interval(_at("10:45"), _at("11:15"))

    def test_reads_attributes_of_orm_rows(self):
        service = SimpleNamespace(duration=30, buffer_before=5, buffer_after=10)
        neighbor = SimpleNamespace(id=2, start_time="10:45", end_time="11:15", service=service)
        assert neighbor_span(neighbor, DAY) == Interval(_at("10:40"), _at("11:25"))


class TestFieldValue:

    def test_mapping_and_object_lookup_agree(self):
        row = SimpleNamespace(start_time="10:00")
        assert field_value({"start_time": "10:00"}, "start_time") == field_value(row, "start_time") == "10:00"

    def test_missing_field_uses_default(self):
        assert field_value({}, "service") is None
        assert field_value(SimpleNamespace(), "is_available", True) is True


class TestFindServiceUpdateConflicts:

    def setup_method(self):
        self.own = _appointment(1, "10:00", "10:30", service={"duration": 30})
        self.neighbor = _appointment(2, "10:45", "11:15", service={"duration": 30})
        self.neighbors = {(STAFF, DAY): [self.own, self.neighbor]}

    def test_longer_duration_collides(self):
        conflicts = find_service_update_conflicts([self.own], self.neighbors, ServiceTiming(60))
        assert conflicts == [self.own]

    def test_duration_touching_neighbor_is_safe(self):
        assert find_service_update_conflicts([self.own], self.neighbors, ServiceTiming(45)) == []

    def test_buffer_after_collides(self):
        assert find_service_update_conflicts([self.own], self.neighbors, ServiceTiming(30, 0, 20)) == [self.own]

    def test_buffer_after_touching_neighbor_is_safe(self):
        assert find_service_update_conflicts([self.own], self.neighbors, ServiceTiming(30, 0, 15)) == []

    def test_own_appointment_is_not_its_own_neighbor(self):
        neighbors = {(STAFF, DAY): [self.own]}
        assert find_service_update_conflicts([self.own], neighbors, ServiceTiming(240)) == []

    def test_other_staff_and_days_are_separate_groups(self):
        other_staff = _appointment(3, "10:00", "10:30", staff_id="staff-2")
        other_day = _appointment(4, "10:00", "10:30", day="2025-06-05")
        neighbors = {
            (STAFF, DAY): [self.own, self.neighbor],
            ("staff-2", DAY): [other_staff],
            (STAFF, "2025-06-05"): [other_day],
        }
        conflicts = find_service_update_conflicts([self.own, other_staff, other_day], neighbors, ServiceTiming(60))
        assert conflicts == [self.own]

    def test_result_is_distinct(self):
        third = _appointment(5, "09:30", "10:00", service={"duration": 30})
        neighbors = {(STAFF, DAY): [self.own, self.neighbor, third]}
        conflicts = find_service_update_conflicts([self.own, self.own], neighbors, ServiceTiming(60, 15, 0))
        assert conflicts == [self.own]

    def test_inputs_are_not_mutated(self):
        before = dict(self.own)
        find_service_update_conflicts([self.own], self.neighbors, ServiceTiming(90))
        assert self.own == before
