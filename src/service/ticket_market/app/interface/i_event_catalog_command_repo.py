from abc import ABC, abstractmethod

from src.service.ticket_market.domain.entity.event_entity import EventEntity, TicketClassEntity


class IEventCatalogCommandRepo(ABC):
    """Seeding only; event administration is owned by another service."""

    @abstractmethod
    async def create_event_with_classes(
        self, *, event: EventEntity, ticket_classes: list[TicketClassEntity]
    ) -> EventEntity:
        pass
