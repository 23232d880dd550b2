"""Store interfaces and their in-memory and PostgreSQL backends."""

from core.stores.base import TicketStore, ScheduleStore, BlackoutStore
from core.stores.memory import (
    InMemoryDatabase,
    MemoryTicketStore,
    MemoryScheduleStore,
    MemoryBlackoutStore,
    create_memory_stores,
)
