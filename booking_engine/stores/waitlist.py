"""In-memory waitlist store."""

import logging
from datetime import datetime, timezone
from typing import Optional

from booking_engine.errors import ConflictError, NotFoundError
from booking_engine.schemas.waitlist_schema import WaitlistEntry, WaitlistStatus
from booking_engine.stores.memory import InMemoryRepository

logger = logging.getLogger(__name__)


class InMemoryWaitlistStore(InMemoryRepository):
    """Waitlist entries keyed by id."""

    def __init__(self, latency: float = 0.0) -> None:
        super().__init__(latency)
        self._entries: dict[str, WaitlistEntry] = {}

    async def create_entry(self, entry: WaitlistEntry) -> WaitlistEntry:
        await self.simulate_latency()
        self._entries[entry.id] = entry
        return entry.model_copy(deep=True)

    async def get_entry(self, entry_id: str) -> Optional[WaitlistEntry]:
        await self.simulate_latency()
        entry = self._entries.get(entry_id)
        return entry.model_copy(deep=True) if entry else None

    async def list_entries(
        self, status: Optional[WaitlistStatus] = None, service_id: Optional[str] = None
    ) -> list[WaitlistEntry]:
        await self.simulate_latency()
        found = [
            e for e in self._entries.values()
            if (status is None or e.status == status)
            and (service_id is None or e.service_id == service_id)
        ]
        return [e.model_copy(deep=True) for e in sorted(found, key=lambda e: e.created_at)]

    async def update_entry(
        self,
        entry_id: str,
        status: WaitlistStatus,
        notes: Optional[str] = None,
        expected_status: Optional[WaitlistStatus] = None,
    ) -> WaitlistEntry:
        await self.simulate_latency()
        entry = self._entries.get(entry_id)
        if entry is None:
            raise NotFoundError("Waitlist entry", entry_id)
        if expected_status is not None and entry.status != expected_status:
            raise ConflictError(
                f"Waitlist entry {entry_id} is now '{entry.status.value}', "
                f"expected '{expected_status.value}'"
            )
        entry.status = status
        if notes is not None:
            entry.notes = notes
        entry.updated_at = datetime.now(timezone.utc)
        return entry.model_copy(deep=True)

    async def delete_entry(self, entry_id: str) -> bool:
        await self.simulate_latency()
        return self._entries.pop(entry_id, None) is not None

    def reset(self) -> None:
        self._entries.clear()
