"""Total duration and price for a service plus selected add-ons."""

import logging
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from typing import Iterable, Sequence

from booking_engine.schemas.scheduling_schema import Addon, Service

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingTotals:
    """Aggregated length and price of one booking."""

    duration_minutes: int
    price: Decimal

    @property
    def duration(self) -> timedelta:
        return timedelta(minutes=self.duration_minutes)


def resolve_addons(requested_ids: Sequence[str], found: Iterable[Addon]) -> list[Addon]:
    """
    Match requested add-on ids against the records the catalog returned.

    Unknown ids are dropped rather than rejected. Repeated ids count once,
    and the request order is preserved.
    """
    by_id = {addon.id: addon for addon in found}
    resolved: list[Addon] = []
    seen: set[str] = set()
    for addon_id in requested_ids:
        if addon_id in seen:
            continue
        seen.add(addon_id)
        addon = by_id.get(addon_id)
        if addon is None:
            logger.debug("Dropping unknown add-on id: %s", addon_id)
            continue
        resolved.append(addon)
    return resolved


def aggregate(service: Service, addons: Iterable[Addon] = ()) -> BookingTotals:
    """Sum the service's and each add-on's duration and price."""
    duration = service.duration
    price = Decimal(service.price)
    for addon in addons:
        duration += addon.duration
        price += addon.price
    return BookingTotals(duration_minutes=duration, price=price)
