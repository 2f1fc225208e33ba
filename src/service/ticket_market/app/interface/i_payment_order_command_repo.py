from abc import ABC, abstractmethod
from uuid import UUID

from src.service.ticket_market.domain.entity.payment_order_entity import (
    PaymentOrderEntity,
    PaymentOutcome,
)


class IPaymentOrderCommandRepo(ABC):
    @abstractmethod
    async def create(self, *, order: PaymentOrderEntity) -> PaymentOrderEntity:
        pass

    @abstractmethod
    async def get_by_external_order_id(self, *, external_order_id: str) -> PaymentOrderEntity | None:
        pass

    @abstractmethod
    async def get_latest_completed_for_ticket(
        self, *, ticket_id: UUID, payer_id: int
    ) -> PaymentOrderEntity | None:
        pass

    @abstractmethod
    async def complete_pending(
        self, *, order_id: UUID, external_payment_id: str, outcome: PaymentOutcome
    ) -> bool:
        """pending -> completed, recording the payment id and outcome"""
        pass

    @abstractmethod
    async def fail_pending(self, *, order_id: UUID) -> bool:
        """pending -> failed"""
        pass

    @abstractmethod
    async def begin_refund(self, *, order_id: UUID) -> bool:
        """completed -> refunding"""
        pass

    @abstractmethod
    async def abort_refund(self, *, order_id: UUID) -> bool:
        """refunding -> completed"""
        pass

    @abstractmethod
    async def mark_refunded(self, *, order_id: UUID, refund_id: str) -> bool:
        """refunding -> refunded"""
        pass
