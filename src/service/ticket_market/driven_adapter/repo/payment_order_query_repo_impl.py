from typing import AsyncContextManager, Callable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.ticket_market.app.interface.i_payment_order_query_repo import (
    IPaymentOrderQueryRepo,
)
from src.service.ticket_market.domain.entity.payment_order_entity import PaymentOrderEntity
from src.service.ticket_market.driven_adapter.model.payment_order_model import PaymentOrderModel
from src.service.ticket_market.driven_adapter.repo.model_mapper import payment_order_to_entity


class PaymentOrderQueryRepoImpl(IPaymentOrderQueryRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @Logger.io
    async def get_latest_for_ticket(self, *, ticket_id: UUID) -> PaymentOrderEntity | None:
        async with self.session_factory() as session:
            result = await session.execute(
                select(PaymentOrderModel)
                .where(PaymentOrderModel.ticket_id == ticket_id)
                .order_by(PaymentOrderModel.created_at.desc(), PaymentOrderModel.id.desc())
                .limit(1)
            )
            model = result.scalar_one_or_none()
            return payment_order_to_entity(model) if model else None
