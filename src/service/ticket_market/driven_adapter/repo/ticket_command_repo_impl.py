"""
Ticket Command Repository Implementation

All transitions are `UPDATE ... WHERE <expected state>` executed on the
Unit of Work session; rowcount decides whether this caller won.
"""

from datetime import datetime
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import utc_now
from src.service.ticket_market.app.interface.i_ticket_command_repo import ITicketCommandRepo
from src.service.ticket_market.domain.entity.ticket_entity import TicketEntity
from src.service.ticket_market.domain.enum.ticket_status import (
    LIVE_TICKET_STATUSES,
    PaymentState,
    TicketStatus,
)
from src.service.ticket_market.driven_adapter.model.ticket_model import TicketModel
from src.service.ticket_market.driven_adapter.repo.model_mapper import (
    ticket_to_entity,
    ticket_to_model,
)


class TicketCommandRepoImpl(ITicketCommandRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    async def _compare_and_set(self, *conditions: Any, **values: Any) -> bool:
        stmt = (
            update(TicketModel)
            .where(*conditions)
            .values(updated_at=utc_now(), **values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1  # type: ignore[attr-defined]

    async def _fetch_one(self, *conditions: Any) -> TicketEntity | None:
        result = await self.session.execute(
            select(TicketModel).where(*conditions).execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return ticket_to_entity(model) if model else None

    @Logger.io
    async def create(self, *, ticket: TicketEntity) -> TicketEntity:
        self.session.add(ticket_to_model(ticket))
        await self.session.flush()
        return ticket

    @Logger.io
    async def get_by_id(self, *, ticket_id: UUID) -> TicketEntity | None:
        return await self._fetch_one(TicketModel.id == ticket_id)

    @Logger.io(truncate_content=True)
    async def get_by_qr_token(self, *, qr_token: str) -> TicketEntity | None:
        return await self._fetch_one(TicketModel.qr_token == qr_token)

    @Logger.io
    async def count_live_for_owner(self, *, owner_id: int, ticket_class_id: UUID) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(TicketModel)
            .where(
                TicketModel.owner_id == owner_id,
                TicketModel.ticket_class_id == ticket_class_id,
                TicketModel.status.in_([s.value for s in LIVE_TICKET_STATUSES]),
            )
        )
        return int(result.scalar_one())

    @Logger.io
    async def attach_order_ref(
        self, *, ticket_id: UUID, owner_id: int, external_order_ref: str, now: datetime
    ) -> bool:
        return await self._compare_and_set(
            TicketModel.id == ticket_id,
            TicketModel.owner_id == owner_id,
            TicketModel.status == TicketStatus.HELD.value,
            TicketModel.hold_expires_at >= now,
            external_order_ref=external_order_ref,
        )

    @Logger.io
    async def activate_held(
        self, *, ticket_id: UUID, owner_id: int, qr_token: str, now: datetime
    ) -> bool:
        return await self._compare_and_set(
            TicketModel.id == ticket_id,
            TicketModel.owner_id == owner_id,
            TicketModel.status == TicketStatus.HELD.value,
            TicketModel.hold_expires_at >= now,
            status=TicketStatus.ACTIVE.value,
            payment_state=PaymentState.COMPLETED.value,
            hold_expires_at=None,
            qr_token=qr_token,
        )

    @Logger.io
    async def transfer_for_sale(
        self, *, ticket_id: UUID, seller_id: int, buyer_id: int, qr_token: str
    ) -> bool:
        return await self._compare_and_set(
            TicketModel.id == ticket_id,
            TicketModel.owner_id == seller_id,
            TicketModel.status == TicketStatus.FOR_SALE.value,
            owner_id=buyer_id,
            status=TicketStatus.ACTIVE.value,
            qr_token=qr_token,
        )

    @Logger.io
    async def transition(
        self,
        *,
        ticket_id: UUID,
        from_statuses: Sequence[TicketStatus],
        to_status: TicketStatus,
        owner_id: int | None = None,
    ) -> bool:
        conditions = [
            TicketModel.id == ticket_id,
            TicketModel.status.in_([s.value for s in from_statuses]),
        ]
        if owner_id is not None:
            conditions.append(TicketModel.owner_id == owner_id)
        return await self._compare_and_set(*conditions, status=to_status.value)

    @Logger.io
    async def mark_payment_failed(self, *, ticket_id: UUID) -> bool:
        return await self._compare_and_set(
            TicketModel.id == ticket_id,
            TicketModel.status == TicketStatus.HELD.value,
            TicketModel.payment_state == PaymentState.PENDING.value,
            payment_state=PaymentState.FAILED.value,
        )

    @Logger.io
    async def expire_held(self, *, ticket_id: UUID, now: datetime) -> bool:
        return await self._compare_and_set(
            TicketModel.id == ticket_id,
            TicketModel.status == TicketStatus.HELD.value,
            TicketModel.hold_expires_at < now,
            status=TicketStatus.EXPIRED.value,
        )

    @Logger.io
    async def find_expired_holds(self, *, now: datetime, limit: int) -> list[TicketEntity]:
        result = await self.session.execute(
            select(TicketModel)
            .where(
                TicketModel.status == TicketStatus.HELD.value,
                TicketModel.hold_expires_at < now,
            )
            .order_by(TicketModel.hold_expires_at)
            .limit(limit)
        )
        return [ticket_to_entity(model) for model in result.scalars().all()]
