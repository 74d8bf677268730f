"""Tests for duration and price aggregation."""

from datetime import timedelta
from decimal import Decimal

from booking_engine.scheduling.durations import aggregate, resolve_addons
from booking_engine.schemas.scheduling_schema import Addon, Service

FACIAL = Service(id="signature-facial", name="Signature Facial", duration=60, price=Decimal("150.00"))
LED = Addon(id="led-therapy", duration=15, price=Decimal("40.00"))
DERMA = Addon(id="dermaplaning", duration=20, price=Decimal("55.00"))


class TestAggregate:
    def test_service_only(self):
        totals = aggregate(FACIAL)
        assert totals.duration_minutes == 60
        assert totals.price == Decimal("150.00")
        assert totals.duration == timedelta(minutes=60)

    def test_service_with_addons(self):
        totals = aggregate(FACIAL, [LED, DERMA])
        assert totals.duration_minutes == 95
        assert totals.price == Decimal("245.00")

    def test_zero_length_addon_only_changes_price(self):
        serum = Addon(id="serum", duration=0, price=Decimal("10.00"))
        totals = aggregate(FACIAL, [serum])
        assert totals.duration_minutes == 60
        assert totals.price == Decimal("160.00")


class TestResolveAddons:
    def test_unknown_ids_are_dropped(self):
        assert resolve_addons(["led-therapy", "gold-mask"], [LED]) == [LED]

    def test_repeated_ids_count_once(self):
        assert resolve_addons(["led-therapy", "led-therapy"], [LED]) == [LED]

    def test_request_order_is_kept(self):
        assert resolve_addons(["dermaplaning", "led-therapy"], [LED, DERMA]) == [DERMA, LED]

    def test_empty_request(self):
        assert resolve_addons([], [LED, DERMA]) == []
