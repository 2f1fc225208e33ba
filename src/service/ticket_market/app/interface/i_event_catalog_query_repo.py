from abc import ABC, abstractmethod
from uuid import UUID

from src.service.ticket_market.domain.entity.event_entity import EventEntity, TicketClassEntity
from src.service.ticket_market.domain.enum.class_type import ClassType


class IEventCatalogQueryRepo(ABC):
    @abstractmethod
    async def get_event(self, *, event_id: UUID) -> EventEntity | None:
        pass

    @abstractmethod
    async def get_ticket_class(
        self, *, event_id: UUID, class_type: ClassType
    ) -> TicketClassEntity | None:
        pass

    @abstractmethod
    async def get_ticket_class_by_id(self, *, ticket_class_id: UUID) -> TicketClassEntity | None:
        pass
