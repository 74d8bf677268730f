"""In-memory blocked-time store, keyed by (staff id, series start)."""

import logging
from datetime import datetime

from booking_engine.scheduling.blocked_time import series_end
from booking_engine.schemas.scheduling_schema import BlockedTime
from booking_engine.stores.memory import InMemoryRepository

logger = logging.getLogger(__name__)


class InMemoryBlockedTimeStore(InMemoryRepository):
    """One record per blocked-time series."""

    def __init__(self, latency: float = 0.0) -> None:
        super().__init__(latency)
        self._records: dict[tuple[str, datetime], BlockedTime] = {}

    async def query_blocked_time(
        self, staff_id: str, start: datetime, end: datetime
    ) -> list[BlockedTime]:
        await self.simulate_latency()
        found = [
            r for (sid, _), r in self._records.items()
            if sid == staff_id and r.start_time < end and series_end(r) > start
        ]
        return sorted(found, key=lambda r: r.start_time)

    async def create_blocked_time(self, record: BlockedTime) -> BlockedTime:
        await self.simulate_latency()
        # Same key as an existing record replaces it, like a put on (staff, start).
        self._records[(record.staff_id, record.start_time)] = record
        return record

    async def delete_blocked_time(self, staff_id: str, start_time: datetime) -> bool:
        await self.simulate_latency()
        return self._records.pop((staff_id, start_time), None) is not None

    def reset(self) -> None:
        self._records.clear()
