from abc import ABC, abstractmethod
from uuid import UUID


class IInventoryLedger(ABC):
    """
    Per-class supply counter.

    Both operations are a single conditional statement, so they are safe
    under any number of concurrent callers and never drive `remaining`
    below 0 or above `total_supply`.
    """

    @abstractmethod
    async def try_reserve(self, *, ticket_class_id: UUID) -> bool:
        """Decrement `remaining` if it is positive. False means sold out."""
        pass

    @abstractmethod
    async def release(self, *, ticket_class_id: UUID) -> bool:
        """Increment `remaining` unless it already equals `total_supply`."""
        pass

    @abstractmethod
    async def get_remaining(self, *, ticket_class_id: UUID) -> int | None:
        pass
