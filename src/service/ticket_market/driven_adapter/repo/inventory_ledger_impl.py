"""
Inventory Ledger Implementation

`remaining` is only ever changed by the two conditional UPDATEs below. The
row lock taken by the UPDATE serializes concurrent callers; the WHERE clause
is re-evaluated against the committed value, so the counter can neither go
negative nor exceed total_supply.
"""

from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.ticket_market.app.interface.i_inventory_ledger import IInventoryLedger
from src.service.ticket_market.driven_adapter.model.event_model import TicketClassModel


class InventoryLedgerImpl(IInventoryLedger):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @Logger.io
    async def try_reserve(self, *, ticket_class_id: UUID) -> bool:
        stmt = (
            update(TicketClassModel)
            .where(TicketClassModel.id == ticket_class_id, TicketClassModel.remaining > 0)
            .values(remaining=TicketClassModel.remaining - 1)
            .returning(TicketClassModel.remaining)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        remaining = result.scalar_one_or_none()
        if remaining is None:
            return False
        Logger.base.debug(f'🎟️ [LEDGER] Reserved 1 of {ticket_class_id}, remaining={remaining}')
        return True

    @Logger.io
    async def release(self, *, ticket_class_id: UUID) -> bool:
        stmt = (
            update(TicketClassModel)
            .where(
                TicketClassModel.id == ticket_class_id,
                TicketClassModel.remaining < TicketClassModel.total_supply,
            )
            .values(remaining=TicketClassModel.remaining + 1)
            .returning(TicketClassModel.remaining)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        remaining = result.scalar_one_or_none()
        if remaining is None:
            Logger.base.warning(f'⚠️ [LEDGER] Release of {ticket_class_id} capped at total_supply')
            return False
        return True

    @Logger.io
    async def get_remaining(self, *, ticket_class_id: UUID) -> int | None:
        result = await self.session.execute(
            select(TicketClassModel.remaining).where(TicketClassModel.id == ticket_class_id)
        )
        return result.scalar_one_or_none()
