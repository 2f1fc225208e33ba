from datetime import datetime, timezone
import time
from typing import Self
from uuid import UUID

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
from src.service.ticket_market.domain.entity.ticket_entity import TicketEntity
from src.service.ticket_market.domain.entity.user_entity import UserEntity
from src.service.ticket_market.domain.enum.audit_action import AuditAction
from src.service.ticket_market.domain.enum.class_type import ClassType


class BookTicketUseCase:
    """
    Place a time-boxed hold on one ticket of an event class.

    One atomic unit:
    1. Resolve event and class
    2. Ledger compare-and-decrement (SoldOut if nothing left)
    3. One live ticket per buyer per class (AlreadyHolding)
    4. Insert ticket HELD until now + event hold window
    5. Audit Reserve

    Any failure rolls the unit back, the decrement included.
    """

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
    async def book(self, *, buyer: UserEntity, event_id: UUID, class_type: ClassType) -> TicketEntity:
        authorize(buyer, None, Action.BOOK)
        started = time.perf_counter()

        with self.tracer.start_as_current_span(
            'use_case.book_ticket',
            attributes={
                'event.id': str(event_id),
                'class_type': class_type.value,
                'buyer.id': buyer.id,
            },
        ) as span:
            async with self.uow_factory() as uow:
                event = await uow.event_catalog_repo.get_event(event_id=event_id)
                if not event:
                    metrics.record_booking(class_type=class_type.value, result='not_found')
                    raise NotFoundError('Event not found')

                ticket_class = await uow.event_catalog_repo.get_ticket_class(
                    event_id=event_id, class_type=class_type
                )
                if not ticket_class:
                    metrics.record_booking(class_type=class_type.value, result='not_found')
                    raise NotFoundError(f'Ticket class {class_type.value} not found for event')

                if not await uow.inventory_ledger.try_reserve(ticket_class_id=ticket_class.id):
                    metrics.record_booking(class_type=class_type.value, result='sold_out')
                    raise ConflictError(
                        f'{class_type.value} tickets are sold out', ConflictReason.SOLD_OUT
                    )

                # Must follow the decrement: the class row lock serializes one buyer's attempts
                live = await uow.ticket_command_repo.count_live_for_owner(
                    owner_id=buyer.id, ticket_class_id=ticket_class.id
                )
                if live > 0:
                    metrics.record_booking(class_type=class_type.value, result='already_holding')
                    raise ConflictError(
                        'You already hold a ticket of this class', ConflictReason.ALREADY_HOLDING
                    )

                now = datetime.now(timezone.utc)
                ticket = TicketEntity.hold(
                    ticket_class_id=ticket_class.id,
                    event_id=event_id,
                    owner_id=buyer.id,
                    hold_expires_at=now + event.hold_window,
                )
                await uow.ticket_command_repo.create(ticket=ticket)
                await uow.audit_log_repo.append(
                    entry=AuditEntryEntity.record(
                        ticket_id=ticket.id, actor_id=buyer.id, action=AuditAction.RESERVE
                    )
                )
                await uow.commit()

            span.set_attribute('ticket.id', str(ticket.id))
            metrics.record_booking(
                class_type=class_type.value,
                result='held',
                duration=time.perf_counter() - started,
            )
            Logger.base.info(
                f'🎟️ [BOOK] Ticket {ticket.id} held for buyer {buyer.id} until {ticket.hold_expires_at}'
            )
            return ticket
