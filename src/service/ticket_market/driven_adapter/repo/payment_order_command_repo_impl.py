from typing import Any
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import utc_now
from src.service.ticket_market.app.interface.i_payment_order_command_repo import (
    IPaymentOrderCommandRepo,
)
from src.service.ticket_market.domain.entity.payment_order_entity import (
    PaymentOrderEntity,
    PaymentOrderStatus,
    PaymentOutcome,
)
from src.service.ticket_market.driven_adapter.model.payment_order_model import PaymentOrderModel
from src.service.ticket_market.driven_adapter.repo.model_mapper import payment_order_to_entity


class PaymentOrderCommandRepoImpl(IPaymentOrderCommandRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    async def _compare_and_set(
        self, *, order_id: UUID, expected: PaymentOrderStatus, **values: Any
    ) -> bool:
        stmt = (
            update(PaymentOrderModel)
            .where(PaymentOrderModel.id == order_id, PaymentOrderModel.status == expected.value)
            .values(updated_at=utc_now(), **values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1  # type: ignore[attr-defined]

    @Logger.io
    async def create(self, *, order: PaymentOrderEntity) -> PaymentOrderEntity:
        self.session.add(
            PaymentOrderModel(
                id=order.id,
                subject_kind=order.subject_kind.value,
                ticket_id=order.ticket_id,
                listing_id=order.listing_id,
                payer_id=order.payer_id,
                amount=order.amount,
                currency=order.currency,
                external_order_id=order.external_order_id,
                status=order.status.value,
                created_at=order.created_at,
                updated_at=order.updated_at,
            )
        )
        await self.session.flush()
        return order

    @Logger.io
    async def get_by_external_order_id(self, *, external_order_id: str) -> PaymentOrderEntity | None:
        result = await self.session.execute(
            select(PaymentOrderModel)
            .where(PaymentOrderModel.external_order_id == external_order_id)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return payment_order_to_entity(model) if model else None

    @Logger.io
    async def get_latest_completed_for_ticket(
        self, *, ticket_id: UUID, payer_id: int
    ) -> PaymentOrderEntity | None:
        result = await self.session.execute(
            select(PaymentOrderModel)
            .where(
                PaymentOrderModel.ticket_id == ticket_id,
                PaymentOrderModel.payer_id == payer_id,
                PaymentOrderModel.status == PaymentOrderStatus.COMPLETED.value,
                PaymentOrderModel.outcome == PaymentOutcome.APPLIED.value,
            )
            .order_by(PaymentOrderModel.updated_at.desc(), PaymentOrderModel.id.desc())
            .limit(1)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return payment_order_to_entity(model) if model else None

    @Logger.io
    async def complete_pending(
        self, *, order_id: UUID, external_payment_id: str, outcome: PaymentOutcome
    ) -> bool:
        return await self._compare_and_set(
            order_id=order_id,
            expected=PaymentOrderStatus.PENDING,
            status=PaymentOrderStatus.COMPLETED.value,
            external_payment_id=external_payment_id,
            outcome=outcome.value,
        )

    @Logger.io
    async def fail_pending(self, *, order_id: UUID) -> bool:
        return await self._compare_and_set(
            order_id=order_id,
            expected=PaymentOrderStatus.PENDING,
            status=PaymentOrderStatus.FAILED.value,
        )

    @Logger.io
    async def begin_refund(self, *, order_id: UUID) -> bool:
        return await self._compare_and_set(
            order_id=order_id,
            expected=PaymentOrderStatus.COMPLETED,
            status=PaymentOrderStatus.REFUNDING.value,
        )

    @Logger.io
    async def abort_refund(self, *, order_id: UUID) -> bool:
        return await self._compare_and_set(
            order_id=order_id,
            expected=PaymentOrderStatus.REFUNDING,
            status=PaymentOrderStatus.COMPLETED.value,
        )

    @Logger.io
    async def mark_refunded(self, *, order_id: UUID, refund_id: str) -> bool:
        return await self._compare_and_set(
            order_id=order_id,
            expected=PaymentOrderStatus.REFUNDING,
            status=PaymentOrderStatus.REFUNDED.value,
            refund_id=refund_id,
        )
