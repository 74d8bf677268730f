from booking_engine.stores.appointments import InMemoryAppointmentStore
from booking_engine.stores.blocked_time import InMemoryBlockedTimeStore
from booking_engine.stores.catalog import InMemoryCatalog
from booking_engine.stores.staff import InMemoryStaffDirectory
from booking_engine.stores.waitlist import InMemoryWaitlistStore

__all__ = [
    "InMemoryAppointmentStore", "InMemoryBlockedTimeStore", "InMemoryCatalog",
    "InMemoryStaffDirectory", "InMemoryWaitlistStore",
]
