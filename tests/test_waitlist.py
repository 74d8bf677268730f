"""Tests for waitlist transitions and match-on-cancellation."""

from datetime import date

import pytest
import pytz

from booking_engine.scheduling.lifecycle import InvalidTransitionError
from booking_engine.stores.waitlist import InMemoryWaitlistStore
from booking_engine.scheduling.waitlist import (
    WaitlistReconciler,
    matches,
    validate_waitlist_transition,
)
from booking_engine.schemas.booking_schema import Appointment, AppointmentStatus
from booking_engine.schemas.waitlist_schema import WaitlistStatus
from tests.conftest import MONDAY, make_draft, make_entry, utc


def make_cancelled(start=utc(2024, 1, 1, 9), staff_id="staff-amelia") -> Appointment:
    draft = make_draft(start, staff_id=staff_id)
    return Appointment(id="APT-TEST0001", status=AppointmentStatus.CANCELLED, **draft.model_dump())


class TestWaitlistTransitions:
    @pytest.mark.parametrize("current,target", [
        (WaitlistStatus.ACTIVE, "contacted"),
        (WaitlistStatus.ACTIVE, "expired"),
        (WaitlistStatus.CONTACTED, "booked"),
        (WaitlistStatus.CONTACTED, "expired"),
    ])
    def test_allowed(self, current, target):
        assert validate_waitlist_transition(current, target).value == target

    @pytest.mark.parametrize("current,target", [
        (WaitlistStatus.ACTIVE, "booked"),
        (WaitlistStatus.BOOKED, "active"),
        (WaitlistStatus.EXPIRED, "contacted"),
    ])
    def test_rejected(self, current, target):
        with pytest.raises(InvalidTransitionError):
            validate_waitlist_transition(current, target)


class TestMatches:
    def test_same_service_and_date(self):
        assert matches(make_entry(), make_cancelled(), pytz.utc)

    def test_other_date(self):
        assert not matches(make_entry([date(2024, 1, 2)]), make_cancelled(), pytz.utc)

    def test_other_service(self):
        assert not matches(make_entry(service_id="hydrafacial"), make_cancelled(), pytz.utc)

    def test_staff_preference_must_include_staff(self):
        assert not matches(make_entry(preferred_staff_ids=["staff-noah"]), make_cancelled(), pytz.utc)
        assert matches(make_entry(preferred_staff_ids=["staff-amelia"]), make_cancelled(), pytz.utc)

    def test_date_is_taken_in_business_timezone(self):
        # 22:00 UTC on Monday is already Tuesday in Melbourne.
        tz = pytz.timezone("Australia/Melbourne")
        appointment = make_cancelled(utc(2024, 1, 1, 22))
        assert matches(make_entry([date(2024, 1, 2)]), appointment, tz)
        assert not matches(make_entry([MONDAY]), appointment, tz)


class TestReconciler:
    @pytest.mark.asyncio
    async def test_contacts_matching_entries_oldest_first(self, waitlist_store):
        newer = await waitlist_store.create_entry(make_entry(created_at=utc(2023, 11, 20)))
        older = await waitlist_store.create_entry(make_entry(created_at=utc(2023, 11, 10)))
        other = await waitlist_store.create_entry(make_entry([date(2024, 1, 9)]))

        reconciler = WaitlistReconciler(waitlist_store, pytz.utc, 1.0)
        contacted = await reconciler.reconcile_cancellation(make_cancelled())

        assert [e.id for e in contacted] == [older.id, newer.id]
        assert all(e.status == WaitlistStatus.CONTACTED for e in contacted)
        assert "Slot freed 2024-01-01 09:00 with staff staff-amelia" in contacted[0].notes
        untouched = await waitlist_store.get_entry(other.id)
        assert untouched.status == WaitlistStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_no_matches(self, waitlist_store):
        reconciler = WaitlistReconciler(waitlist_store, pytz.utc, 1.0)
        assert await reconciler.reconcile_cancellation(make_cancelled()) == []

    @pytest.mark.asyncio
    async def test_entry_expired_after_scan_is_not_contacted(self):
        class ExpiringStore(InMemoryWaitlistStore):
            """Expires every entry right after handing out the scan results."""

            async def list_entries(self, status=None, service_id=None):
                found = await super().list_entries(status, service_id)
                for entry in found:
                    await self.update_entry(entry.id, WaitlistStatus.EXPIRED)
                return found

        store = ExpiringStore()
        entry = await store.create_entry(make_entry())
        reconciler = WaitlistReconciler(store, pytz.utc, 1.0)

        assert await reconciler.reconcile_cancellation(make_cancelled()) == []
        stored = await store.get_entry(entry.id)
        assert stored.status == WaitlistStatus.EXPIRED
