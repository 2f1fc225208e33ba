from abc import ABC, abstractmethod
from uuid import UUID

from src.service.ticket_market.domain.entity.resale_listing_entity import ResaleListingEntity


class IResaleListingCommandRepo(ABC):
    @abstractmethod
    async def create(self, *, listing: ResaleListingEntity) -> ResaleListingEntity:
        pass

    @abstractmethod
    async def get_by_id(self, *, listing_id: UUID) -> ResaleListingEntity | None:
        pass

    @abstractmethod
    async def get_open_for_ticket(self, *, ticket_id: UUID) -> ResaleListingEntity | None:
        pass

    @abstractmethod
    async def close_as_sold(self, *, listing_id: UUID, buyer_id: int) -> bool:
        """open -> sold"""
        pass

    @abstractmethod
    async def cancel_open(self, *, listing_id: UUID) -> bool:
        """open -> cancelled"""
        pass

    @abstractmethod
    async def cancel_open_for_ticket(self, *, ticket_id: UUID) -> int:
        pass
