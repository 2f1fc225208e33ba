from typing import Any
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.exception.exceptions import ConflictError, ConflictReason
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import utc_now
from src.service.ticket_market.app.interface.i_resale_listing_command_repo import (
    IResaleListingCommandRepo,
)
from src.service.ticket_market.domain.entity.resale_listing_entity import (
    ListingStatus,
    ResaleListingEntity,
)
from src.service.ticket_market.driven_adapter.model.resale_listing_model import ResaleListingModel
from src.service.ticket_market.driven_adapter.repo.model_mapper import resale_listing_to_entity


class ResaleListingCommandRepoImpl(IResaleListingCommandRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    async def _close(self, *conditions: Any, **values: Any) -> int:
        stmt = (
            update(ResaleListingModel)
            .where(ResaleListingModel.status == ListingStatus.OPEN.value, *conditions)
            .values(closed_at=utc_now(), **values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount  # type: ignore[attr-defined]

    @Logger.io
    async def create(self, *, listing: ResaleListingEntity) -> ResaleListingEntity:
        self.session.add(
            ResaleListingModel(
                id=listing.id,
                ticket_id=listing.ticket_id,
                seller_id=listing.seller_id,
                ask_price=listing.ask_price,
                currency=listing.currency,
                status=listing.status.value,
                created_at=listing.created_at,
            )
        )
        try:
            await self.session.flush()
        except IntegrityError as e:
            # Partial unique index on ticket_id where status='open'
            raise ConflictError(
                'Ticket already has an open listing', ConflictReason.ALREADY_LISTED
            ) from e
        return listing

    @Logger.io
    async def get_by_id(self, *, listing_id: UUID) -> ResaleListingEntity | None:
        result = await self.session.execute(
            select(ResaleListingModel)
            .where(ResaleListingModel.id == listing_id)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return resale_listing_to_entity(model) if model else None

    @Logger.io
    async def get_open_for_ticket(self, *, ticket_id: UUID) -> ResaleListingEntity | None:
        result = await self.session.execute(
            select(ResaleListingModel)
            .where(
                ResaleListingModel.ticket_id == ticket_id,
                ResaleListingModel.status == ListingStatus.OPEN.value,
            )
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return resale_listing_to_entity(model) if model else None

    @Logger.io
    async def close_as_sold(self, *, listing_id: UUID, buyer_id: int) -> bool:
        return (
            await self._close(
                ResaleListingModel.id == listing_id,
                status=ListingStatus.SOLD.value,
                buyer_id=buyer_id,
            )
            == 1
        )

    @Logger.io
    async def cancel_open(self, *, listing_id: UUID) -> bool:
        return (
            await self._close(ResaleListingModel.id == listing_id, status=ListingStatus.CANCELLED.value)
            == 1
        )

    @Logger.io
    async def cancel_open_for_ticket(self, *, ticket_id: UUID) -> int:
        return await self._close(
            ResaleListingModel.ticket_id == ticket_id, status=ListingStatus.CANCELLED.value
        )
