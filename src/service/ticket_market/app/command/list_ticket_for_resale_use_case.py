from typing import Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import ConflictError, ConflictReason, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticket_market_metrics import metrics
from src.service.ticket_market.domain.authorization import Action, authorize
from src.service.ticket_market.domain.entity.audit_entry_entity import AuditEntryEntity
from src.service.ticket_market.domain.entity.resale_listing_entity import ResaleListingEntity
from src.service.ticket_market.domain.entity.user_entity import UserEntity
from src.service.ticket_market.domain.enum.audit_action import AuditAction
from src.service.ticket_market.domain.enum.ticket_status import TicketStatus


class ListTicketForResaleUseCase:
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
    async def list(self, *, seller: UserEntity, ticket_id: UUID, ask_price: int) -> ResaleListingEntity:
        with self.tracer.start_as_current_span(
            'use_case.list_ticket_for_resale',
            attributes={'ticket.id': str(ticket_id), 'seller.id': seller.id},
        ):
            async with self.uow_factory() as uow:
                ticket = await uow.ticket_command_repo.get_by_id(ticket_id=ticket_id)
                if not ticket:
                    raise NotFoundError('Ticket not found')
                authorize(seller, ticket, Action.LIST_TICKET)
                ticket.validate_listable()

                listing = ResaleListingEntity.open(
                    ticket_id=ticket.id,
                    seller_id=seller.id,
                    ask_price=ask_price,
                    currency=settings.PAYMENT_CURRENCY,
                )
                if await uow.resale_listing_command_repo.get_open_for_ticket(ticket_id=ticket.id):
                    raise ConflictError('Ticket is already listed', ConflictReason.ALREADY_LISTED)

                await uow.resale_listing_command_repo.create(listing=listing)
                listed = await uow.ticket_command_repo.transition(
                    ticket_id=ticket.id,
                    from_statuses=(TicketStatus.ACTIVE,),
                    to_status=TicketStatus.FOR_SALE,
                    owner_id=seller.id,
                )
                if not listed:
                    raise ConflictError(
                        'Ticket changed state while listing', ConflictReason.WRONG_STATE
                    )

                await uow.audit_log_repo.append(
                    entry=AuditEntryEntity.record(
                        ticket_id=ticket.id, actor_id=seller.id, action=AuditAction.LIST
                    )
                )
                await uow.commit()

            metrics.record_listing(action='listed')
            Logger.base.info(
                f'🏷️ [RESALE] Ticket {ticket.id} listed by {seller.id} at {ask_price} ({listing.id})'
            )
            return listing
