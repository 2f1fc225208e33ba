"""
Ticket Command Repository Interface

Every mutating method is a compare-and-set: it only writes when the row is
still in the expected state and returns whether the write happened.
Callers treat False as "someone else won the race".
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Sequence
from uuid import UUID

from src.service.ticket_market.domain.entity.ticket_entity import TicketEntity
from src.service.ticket_market.domain.enum.ticket_status import TicketStatus


class ITicketCommandRepo(ABC):
    @abstractmethod
    async def create(self, *, ticket: TicketEntity) -> TicketEntity:
        pass

    @abstractmethod
    async def get_by_id(self, *, ticket_id: UUID) -> TicketEntity | None:
        pass

    @abstractmethod
    async def get_by_qr_token(self, *, qr_token: str) -> TicketEntity | None:
        pass

    @abstractmethod
    async def count_live_for_owner(self, *, owner_id: int, ticket_class_id: UUID) -> int:
        pass

    @abstractmethod
    async def attach_order_ref(
        self, *, ticket_id: UUID, owner_id: int, external_order_ref: str, now: datetime
    ) -> bool:
        """held + owner + unexpired -> set external_order_ref"""
        pass

    @abstractmethod
    async def activate_held(
        self, *, ticket_id: UUID, owner_id: int, qr_token: str, now: datetime
    ) -> bool:
        """held + owner + unexpired -> active, payment completed, qr_token"""
        pass

    @abstractmethod
    async def transfer_for_sale(
        self, *, ticket_id: UUID, seller_id: int, buyer_id: int, qr_token: str
    ) -> bool:
        """for_sale + owner=seller -> active, owner=buyer, new qr_token"""
        pass

    @abstractmethod
    async def transition(
        self,
        *,
        ticket_id: UUID,
        from_statuses: Sequence[TicketStatus],
        to_status: TicketStatus,
        owner_id: int | None = None,
    ) -> bool:
        pass

    @abstractmethod
    async def mark_payment_failed(self, *, ticket_id: UUID) -> bool:
        """held + payment pending -> payment failed (hold is kept until it expires)"""
        pass

    @abstractmethod
    async def expire_held(self, *, ticket_id: UUID, now: datetime) -> bool:
        """held + hold_expires_at < now -> expired"""
        pass

    @abstractmethod
    async def find_expired_holds(self, *, now: datetime, limit: int) -> list[TicketEntity]:
        pass
