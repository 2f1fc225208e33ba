from abc import ABC, abstractmethod

from src.service.ticket_market.domain.domain_event.ticket_activated_event import (
    TicketActivatedEvent,
)


class ITicketActivatedPublisher(ABC):
    @abstractmethod
    async def publish(self, *, event: TicketActivatedEvent) -> None:
        """Fire-and-forget. Must not raise."""
        pass
