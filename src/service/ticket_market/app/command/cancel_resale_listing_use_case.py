from typing import Self
from uuid import UUID

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import ConflictError, ConflictReason, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticket_market_metrics import metrics
from src.service.ticket_market.domain.authorization import Action, authorize
from src.service.ticket_market.domain.entity.audit_entry_entity import AuditEntryEntity
from src.service.ticket_market.domain.entity.resale_listing_entity import (
    ListingStatus,
    ResaleListingEntity,
)
from src.service.ticket_market.domain.entity.user_entity import UserEntity
from src.service.ticket_market.domain.enum.audit_action import AuditAction
from src.service.ticket_market.domain.enum.ticket_status import TicketStatus


class CancelResaleListingUseCase:
    """Seller withdraws an open listing; the ticket goes back to ACTIVE."""

    def __init__(self, *, uow_factory: UnitOfWorkFactory) -> None:
        self.uow_factory = uow_factory
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.unit_of_work.provider]),
    ) -> Self:
        return cls(uow_factory=uow_factory)

    @Logger.io
    async def cancel(self, *, seller: UserEntity, listing_id: UUID) -> ResaleListingEntity:
        with self.tracer.start_as_current_span(
            'use_case.cancel_resale_listing',
            attributes={'listing.id': str(listing_id), 'seller.id': seller.id},
        ):
            async with self.uow_factory() as uow:
                listing = await uow.resale_listing_command_repo.get_by_id(listing_id=listing_id)
                if not listing:
                    raise NotFoundError('Listing not found')
                authorize(seller, listing, Action.CANCEL_LISTING)
                listing.validate_open()

                cancelled = await uow.resale_listing_command_repo.cancel_open(
                    listing_id=listing.id
                )
                delisted = await uow.ticket_command_repo.transition(
                    ticket_id=listing.ticket_id,
                    from_statuses=(TicketStatus.FOR_SALE,),
                    to_status=TicketStatus.ACTIVE,
                    owner_id=seller.id,
                )
                if not (cancelled and delisted):
                    raise ConflictError(
                        'Listing was sold or closed concurrently', ConflictReason.WRONG_STATE
                    )

                await uow.audit_log_repo.append(
                    entry=AuditEntryEntity.record(
                        ticket_id=listing.ticket_id, actor_id=seller.id, action=AuditAction.DELIST
                    )
                )
                await uow.commit()

            metrics.record_listing(action='cancelled')
            Logger.base.info(f'🏷️ [RESALE] Listing {listing.id} cancelled by {seller.id}')
            return attrs.evolve(listing, status=ListingStatus.CANCELLED)
