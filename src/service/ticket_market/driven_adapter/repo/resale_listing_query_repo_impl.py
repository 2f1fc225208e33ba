from typing import AsyncContextManager, Callable
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.ticket_market.app.interface.i_resale_listing_query_repo import (
    IResaleListingQueryRepo,
)
from src.service.ticket_market.domain.entity.resale_listing_entity import (
    ListingStatus,
    ResaleListingEntity,
)
from src.service.ticket_market.driven_adapter.model.resale_listing_model import ResaleListingModel
from src.service.ticket_market.driven_adapter.model.ticket_model import TicketModel
from src.service.ticket_market.driven_adapter.repo.model_mapper import resale_listing_to_entity


class ResaleListingQueryRepoImpl(IResaleListingQueryRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @Logger.io
    async def list_open(
        self, *, event_id: UUID | None, offset: int, limit: int
    ) -> tuple[list[ResaleListingEntity], int]:
        base = select(ResaleListingModel).where(
            ResaleListingModel.status == ListingStatus.OPEN.value
        )
        if event_id is not None:
            base = base.join(TicketModel, TicketModel.id == ResaleListingModel.ticket_id).where(
                TicketModel.event_id == event_id
            )

        async with self.session_factory() as session:
            total = (
                await session.execute(select(func.count()).select_from(base.subquery()))
            ).scalar_one()
            result = await session.execute(
                base.order_by(ResaleListingModel.created_at.desc(), ResaleListingModel.id.desc())
                .offset(offset)
                .limit(limit)
            )
            return [resale_listing_to_entity(m) for m in result.scalars().all()], int(total)
