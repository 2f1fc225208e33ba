from typing import AsyncContextManager, Callable
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.ticket_market.app.interface.i_ticket_query_repo import ITicketQueryRepo
from src.service.ticket_market.domain.entity.ticket_entity import TicketEntity
from src.service.ticket_market.domain.enum.ticket_status import TicketStatus
from src.service.ticket_market.driven_adapter.model.ticket_model import TicketModel
from src.service.ticket_market.driven_adapter.repo.model_mapper import ticket_to_entity


class TicketQueryRepoImpl(ITicketQueryRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @Logger.io
    async def get_by_id(self, *, ticket_id: UUID) -> TicketEntity | None:
        async with self.session_factory() as session:
            result = await session.execute(select(TicketModel).where(TicketModel.id == ticket_id))
            model = result.scalar_one_or_none()
            return ticket_to_entity(model) if model else None

    @Logger.io
    async def list_by_owner(
        self, *, owner_id: int, status: TicketStatus | None, offset: int, limit: int
    ) -> tuple[list[TicketEntity], int]:
        conditions = [TicketModel.owner_id == owner_id]
        if status is not None:
            conditions.append(TicketModel.status == status.value)

        async with self.session_factory() as session:
            total = (
                await session.execute(
                    select(func.count()).select_from(TicketModel).where(*conditions)
                )
            ).scalar_one()
            result = await session.execute(
                select(TicketModel)
                .where(*conditions)
                .order_by(TicketModel.created_at.desc(), TicketModel.id.desc())
                .offset(offset)
                .limit(limit)
            )
            return [ticket_to_entity(model) for model in result.scalars().all()], int(total)
