"""Tests for half-open interval arithmetic."""

from datetime import timedelta

import pytest

from booking_engine.scheduling.intervals import Interval, overlaps, within
from tests.conftest import interval, utc


class TestOverlaps:
    def test_partial_overlap(self):
        a = interval(utc(2024, 1, 1, 9), 60)
        b = interval(utc(2024, 1, 1, 9, 30), 60)
        assert overlaps(a, b)
        assert overlaps(b, a)

    def test_touching_intervals_do_not_overlap(self):
        a = interval(utc(2024, 1, 1, 9), 60)
        b = interval(utc(2024, 1, 1, 10), 60)
        assert not overlaps(a, b)
        assert not overlaps(b, a)

    def test_one_minute_overlap_counts(self):
        a = interval(utc(2024, 1, 1, 9), 60)
        b = interval(utc(2024, 1, 1, 9, 59), 30)
        assert overlaps(a, b)

    def test_containment_overlaps(self):
        outer = interval(utc(2024, 1, 1, 9), 480)
        inner = interval(utc(2024, 1, 1, 12), 30)
        assert overlaps(outer, inner)

    def test_disjoint(self):
        a = interval(utc(2024, 1, 1, 9), 30)
        b = interval(utc(2024, 1, 1, 14), 30)
        assert not overlaps(a, b)


class TestWithin:
    def test_inner_fits_exactly(self):
        window = interval(utc(2024, 1, 1, 9), 480)
        assert within(interval(utc(2024, 1, 1, 16), 60), window)

    def test_inner_runs_past_end(self):
        window = interval(utc(2024, 1, 1, 9), 480)
        assert not within(interval(utc(2024, 1, 1, 16, 30), 60), window)

    def test_inner_starts_before_window(self):
        window = interval(utc(2024, 1, 1, 9), 480)
        assert not within(interval(utc(2024, 1, 1, 8, 45), 60), window)


class TestIntervalModel:
    def test_end_must_follow_start(self):
        with pytest.raises(ValueError):
            Interval(utc(2024, 1, 1, 10), utc(2024, 1, 1, 10))

    def test_duration(self):
        assert interval(utc(2024, 1, 1, 9), 95).duration == timedelta(minutes=95)

    def test_shifted_keeps_length(self):
        shifted = interval(utc(2024, 1, 1, 9), 60).shifted(timedelta(days=7))
        assert shifted == interval(utc(2024, 1, 8, 9), 60)

    def test_sorts_by_start(self):
        later = interval(utc(2024, 1, 1, 12), 30)
        earlier = interval(utc(2024, 1, 1, 9), 30)
        assert sorted([later, earlier]) == [earlier, later]

    def test_to_dict_uses_iso_format(self):
        data = interval(utc(2024, 1, 1, 9), 30).to_dict()
        assert data == {"start": "2024-01-01T09:00:00+00:00", "end": "2024-01-01T09:30:00+00:00"}
