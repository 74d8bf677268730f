"""Tests for conflict detection."""

from booking_engine.scheduling.conflicts import ConflictDetector
from tests.conftest import interval, utc


class TestConflictDetector:
    def setup_method(self):
        self.booked = interval(utc(2024, 1, 1, 10), 60)
        self.lunch = interval(utc(2024, 1, 1, 12), 60)
        self.detector = ConflictDetector([self.booked], [self.lunch])

    def test_overlap_with_appointment(self):
        assert self.detector.find_conflict(interval(utc(2024, 1, 1, 10, 30), 60)) == self.booked

    def test_overlap_with_blocked_time(self):
        assert self.detector.find_conflict(interval(utc(2024, 1, 1, 11, 30), 60)) == self.lunch

    def test_single_minute_overlap(self):
        assert self.detector.has_conflict(interval(utc(2024, 1, 1, 9, 1), 60))

    def test_adjacent_slot_is_free(self):
        assert not self.detector.has_conflict(interval(utc(2024, 1, 1, 9), 60))
        assert not self.detector.has_conflict(interval(utc(2024, 1, 1, 11), 60))

    def test_empty_detector_never_conflicts(self):
        assert not ConflictDetector().has_conflict(interval(utc(2024, 1, 1, 9), 60))

    def test_exposes_sorted_busy_intervals(self):
        detector = ConflictDetector([self.lunch, self.booked])
        assert detector.appointments == [self.booked, self.lunch]
        assert detector.blocked == []
