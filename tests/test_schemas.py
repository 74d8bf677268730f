"""Tests for data model validation."""

from datetime import date, datetime, time

import pytest
from pydantic import ValidationError

from booking_engine.schemas.booking_schema import ClientInfo
from booking_engine.schemas.scheduling_schema import (
    BlockedTime,
    RecurrenceFrequency,
    Service,
    StaffAvailabilityRule,
    StaffMember,
)
from tests.conftest import make_client, utc


def rule(day: int, start: int = 9, end: int = 17) -> StaffAvailabilityRule:
    return StaffAvailabilityRule(day_of_week=day, start_time=time(start), end_time=time(end))


class TestClientInfo:
    def test_phone_is_normalized(self):
        assert make_client(phone="+61 (412) 345-678").phone == "+61412345678"

    def test_short_phone_rejected(self):
        with pytest.raises(ValidationError):
            make_client(phone="12345")

    def test_name_is_stripped(self):
        assert make_client(name="  Jane Doe ").name == "Jane Doe"

    def test_short_name_rejected(self):
        with pytest.raises(ValidationError):
            make_client(name="J")

    def test_invalid_email_rejected(self):
        with pytest.raises(ValidationError):
            ClientInfo(name="Jane Doe", email="jane-at-example", phone="0412345678")


class TestService:
    def test_duration_must_be_positive(self):
        with pytest.raises(ValidationError):
            Service(id="x", duration=0)


class TestStaffMember:
    def test_rule_for_weekday(self):
        staff = StaffMember(id="s", default_availability=[rule(1), rule(3, 10, 14)])
        assert staff.rule_for(date(2024, 1, 3)).start_time == time(10)
        assert staff.rule_for(date(2024, 1, 2)) is None

    def test_sunday_is_day_zero(self):
        staff = StaffMember(id="s", default_availability=[rule(0)])
        assert staff.rule_for(date(2024, 1, 7)) is not None

    def test_one_rule_per_day(self):
        with pytest.raises(ValidationError):
            StaffMember(id="s", default_availability=[rule(1), rule(1, 12, 18)])

    def test_rule_window_must_be_positive(self):
        with pytest.raises(ValidationError):
            rule(1, 17, 9)

    def test_empty_services_offers_everything(self):
        assert StaffMember(id="s").offers("anything")
        assert not StaffMember(id="s", services=["hydrafacial"]).offers("microneedling")


class TestBlockedTime:
    def test_naive_times_rejected(self):
        with pytest.raises(ValidationError):
            BlockedTime(
                staff_id="s", start_time=datetime(2024, 1, 1, 9), end_time=datetime(2024, 1, 1, 10)
            )

    def test_end_after_start(self):
        with pytest.raises(ValidationError):
            BlockedTime(staff_id="s", start_time=utc(2024, 1, 1, 10), end_time=utc(2024, 1, 1, 9))

    def test_naive_excluded_start_rejected(self):
        with pytest.raises(ValidationError):
            BlockedTime(
                staff_id="s",
                start_time=utc(2024, 1, 1, 9),
                end_time=utc(2024, 1, 1, 10),
                excluded_starts=[datetime(2024, 1, 8, 9)],
            )

    def test_generated_id(self):
        record = BlockedTime(staff_id="s", start_time=utc(2024, 1, 1, 9), end_time=utc(2024, 1, 1, 10))
        assert record.id.startswith("BLK-")

    def test_frequency_step(self):
        assert RecurrenceFrequency.DAILY.step_days == 1
        assert RecurrenceFrequency.WEEKLY.step_days == 7
