from abc import ABC, abstractmethod
from uuid import UUID

from src.service.ticket_market.domain.entity.resale_listing_entity import ResaleListingEntity


class IResaleListingQueryRepo(ABC):
    @abstractmethod
    async def list_open(
        self, *, event_id: UUID | None, offset: int, limit: int
    ) -> tuple[list[ResaleListingEntity], int]:
        pass
