from abc import ABC, abstractmethod
from uuid import UUID

from src.service.ticket_market.domain.entity.ticket_entity import TicketEntity
from src.service.ticket_market.domain.enum.ticket_status import TicketStatus


class ITicketQueryRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, ticket_id: UUID) -> TicketEntity | None:
        pass

    @abstractmethod
    async def list_by_owner(
        self, *, owner_id: int, status: TicketStatus | None, offset: int, limit: int
    ) -> tuple[list[TicketEntity], int]:
        """
        Returns:
            (tickets newest first, total matching count)
        """
        pass
