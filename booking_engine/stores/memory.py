"""Shared plumbing for the in-memory reference stores."""

import asyncio


class InMemoryRepository:
    """Base class: optional simulated I/O latency between reads and writes."""

    def __init__(self, latency: float = 0.0) -> None:
        self.latency = latency

    async def simulate_latency(self) -> None:
        """Yield to the event loop like a real network round trip would."""
        await asyncio.sleep(self.latency)
