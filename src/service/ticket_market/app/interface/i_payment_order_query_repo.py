from abc import ABC, abstractmethod
from uuid import UUID

from src.service.ticket_market.domain.entity.payment_order_entity import PaymentOrderEntity


class IPaymentOrderQueryRepo(ABC):
    @abstractmethod
    async def get_latest_for_ticket(self, *, ticket_id: UUID) -> PaymentOrderEntity | None:
        pass
