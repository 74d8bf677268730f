"""
In-memory service and add-on catalog.

In production this is backed by the catalog table or a POS catalog API;
the engine only reads from it.
"""

import logging
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from booking_engine.schemas.scheduling_schema import Addon, Service
from booking_engine.stores.memory import InMemoryRepository

logger = logging.getLogger(__name__)

SERVICE_CATALOG: dict[str, dict] = {
    "signature-facial": {
        "name": "Signature Facial",
        "duration": 60,
        "price": "150.00",
    },
    "hydrafacial": {
        "name": "HydraFacial",
        "duration": 45,
        "price": "199.00",
    },
    "brow-lamination": {
        "name": "Brow Lamination",
        "duration": 30,
        "price": "85.00",
    },
    "microneedling": {
        "name": "Microneedling",
        "duration": 90,
        "price": "320.00",
    },
}

ADDON_CATALOG: dict[str, dict] = {
    "led-therapy": {
        "service_id": "signature-facial",
        "name": "LED Light Therapy",
        "duration": 15,
        "price": "40.00",
    },
    "dermaplaning": {
        "service_id": "signature-facial",
        "name": "Dermaplaning",
        "duration": 20,
        "price": "55.00",
    },
    "brow-tint": {
        "service_id": "brow-lamination",
        "name": "Brow Tint",
        "duration": 10,
        "price": "20.00",
    },
}


def default_services() -> list[Service]:
    return [
        Service(id=sid, name=info["name"], duration=info["duration"], price=Decimal(info["price"]))
        for sid, info in SERVICE_CATALOG.items()
    ]


def default_addons() -> list[Addon]:
    return [
        Addon(
            id=aid,
            service_id=info["service_id"],
            name=info["name"],
            duration=info["duration"],
            price=Decimal(info["price"]),
        )
        for aid, info in ADDON_CATALOG.items()
    ]


class InMemoryCatalog(InMemoryRepository):
    """Read-only catalog of services and add-ons."""

    def __init__(
        self,
        services: Optional[Iterable[Service]] = None,
        addons: Optional[Iterable[Addon]] = None,
        latency: float = 0.0,
    ) -> None:
        super().__init__(latency)
        self._services = {s.id: s for s in (default_services() if services is None else services)}
        self._addons = {a.id: a for a in (default_addons() if addons is None else addons)}

    async def get_service(self, service_id: str) -> Optional[Service]:
        await self.simulate_latency()
        return self._services.get(service_id)

    async def get_addons(self, addon_ids: Sequence[str]) -> list[Addon]:
        await self.simulate_latency()
        return [self._addons[aid] for aid in addon_ids if aid in self._addons]

    async def get_service_addons(self, service_id: str) -> list[Addon]:
        await self.simulate_latency()
        return [a for a in self._addons.values() if a.service_id == service_id]
