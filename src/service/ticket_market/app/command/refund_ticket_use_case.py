from typing import Self
from uuid import UUID

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import (
    ConflictError,
    ConflictReason,
    GatewayError,
    InternalConsistencyError,
    NotFoundError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticket_market_metrics import metrics
from src.service.ticket_market.app.interface.i_payment_gateway import IPaymentGateway
from src.service.ticket_market.domain.authorization import Action, authorize
from src.service.ticket_market.domain.entity.audit_entry_entity import AuditEntryEntity
from src.service.ticket_market.domain.entity.payment_order_entity import PaymentOrderEntity
from src.service.ticket_market.domain.entity.ticket_entity import TicketEntity
from src.service.ticket_market.domain.entity.user_entity import UserEntity
from src.service.ticket_market.domain.enum.audit_action import AuditAction
from src.service.ticket_market.domain.enum.ticket_status import TicketStatus


class RefundTicketUseCase:
    """
    Reverse completed payments.

    refund(): owner returns an ACTIVE ticket. One unit claims the order
    (COMPLETED -> REFUNDING) and the ticket (ACTIVE -> RETURNING); the
    gateway refund runs with no transaction open. On success one unit marks
    the order REFUNDED, the ticket RETURNED and puts the unit back on sale.
    A gateway failure reverts both claims.

    refund_orphaned_order(): money was captured for an order whose effect
    could not be applied (stale listing, expired hold). Claim it, refund it
    and mark the order REFUNDED; the ticket is not touched.
    """

    def __init__(self, *, uow_factory: UnitOfWorkFactory, payment_gateway: IPaymentGateway) -> None:
        self.uow_factory = uow_factory
        self.payment_gateway = payment_gateway
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.unit_of_work.provider]),
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
    ) -> Self:
        return cls(uow_factory=uow_factory, payment_gateway=payment_gateway)

    @Logger.io
    async def refund(self, *, owner: UserEntity, ticket_id: UUID) -> TicketEntity:
        with self.tracer.start_as_current_span(
            'use_case.refund_ticket',
            attributes={'ticket.id': str(ticket_id), 'owner.id': owner.id},
        ):
            ticket, order = await self._begin_return(owner=owner, ticket_id=ticket_id)

            try:
                refund_id = await self.payment_gateway.refund_payment(
                    payment_id=order.external_payment_id, amount=order.amount
                )
            except GatewayError:
                await self._abort_return(ticket=ticket, order=order)
                metrics.record_refund(reason='owner_return', result='gateway_error')
                raise

            async with self.uow_factory() as uow:
                order_refunded = await uow.payment_order_command_repo.mark_refunded(
                    order_id=order.id, refund_id=refund_id
                )
                returned = await uow.ticket_command_repo.transition(
                    ticket_id=ticket.id,
                    from_statuses=(TicketStatus.RETURNING,),
                    to_status=TicketStatus.RETURNED,
                    owner_id=owner.id,
                )
                if not (order_refunded and returned):
                    # The gateway already paid out; this needs manual reconciliation
                    Logger.base.error(
                        f'❌ [REFUND] Refund {refund_id} issued but ticket {ticket.id} left '
                        f'its return state (order={order_refunded}, ticket={returned})'
                    )
                    metrics.record_refund(reason='owner_return', result='state_conflict')
                    raise InternalConsistencyError('Ticket left its return state during refund')

                await uow.inventory_ledger.release(ticket_class_id=ticket.ticket_class_id)
                await uow.audit_log_repo.append(
                    entry=AuditEntryEntity.record(
                        ticket_id=ticket.id,
                        actor_id=owner.id,
                        action=AuditAction.REFUND,
                        external_payment_id=order.external_payment_id,
                    )
                )
                await uow.commit()

            metrics.record_refund(reason='owner_return', result='refunded')
            Logger.base.info(f'↩️ [REFUND] Ticket {ticket.id} returned, refund {refund_id}')
            return attrs.evolve(ticket, status=TicketStatus.RETURNED)

    async def _begin_return(
        self, *, owner: UserEntity, ticket_id: UUID
    ) -> tuple[TicketEntity, PaymentOrderEntity]:
        """Claim order and ticket so a racing check-in, listing or second return loses."""
        async with self.uow_factory() as uow:
            ticket = await uow.ticket_command_repo.get_by_id(ticket_id=ticket_id)
            if not ticket:
                raise NotFoundError('Ticket not found')
            authorize(owner, ticket, Action.REFUND_TICKET)
            ticket.validate_refundable()

            order = await uow.payment_order_command_repo.get_latest_completed_for_ticket(
                ticket_id=ticket_id, payer_id=owner.id
            )
            if not order or not order.external_payment_id:
                raise ConflictError(
                    'No completed payment found for this ticket', ConflictReason.WRONG_STATE
                )

            claimed = await uow.payment_order_command_repo.begin_refund(order_id=order.id)
            returning = await uow.ticket_command_repo.transition(
                ticket_id=ticket.id,
                from_statuses=(TicketStatus.ACTIVE,),
                to_status=TicketStatus.RETURNING,
                owner_id=owner.id,
            )
            if not (claimed and returning):
                metrics.record_refund(reason='owner_return', result='state_conflict')
                raise ConflictError(
                    'Ticket changed state during refund', ConflictReason.WRONG_STATE
                )
            await uow.commit()

        return ticket, order

    async def _abort_return(self, *, ticket: TicketEntity, order: PaymentOrderEntity) -> None:
        async with self.uow_factory() as uow:
            await uow.payment_order_command_repo.abort_refund(order_id=order.id)
            await uow.ticket_command_repo.transition(
                ticket_id=ticket.id,
                from_statuses=(TicketStatus.RETURNING,),
                to_status=TicketStatus.ACTIVE,
                owner_id=ticket.owner_id,
            )
            await uow.commit()
        Logger.base.warning(f'⚠️ [REFUND] Gateway refused refund, ticket {ticket.id} active again')

    @Logger.io
    async def refund_orphaned_order(self, *, order: PaymentOrderEntity) -> bool:
        """
        Returns:
            True when the order ended up REFUNDED by this call
        """
        if not order.external_payment_id:
            Logger.base.error(f'❌ [REFUND] Orphaned order {order.id} has no payment id')
            return False

        async with self.uow_factory() as uow:
            claimed = await uow.payment_order_command_repo.begin_refund(order_id=order.id)
            await uow.commit()
        if not claimed:
            Logger.base.info(
                f'🔁 [REFUND] Orphaned order {order.external_order_id} already being refunded'
            )
            return False

        try:
            refund_id = await self.payment_gateway.refund_payment(
                payment_id=order.external_payment_id, amount=order.amount
            )
        except GatewayError as e:
            # Back to COMPLETED with its outcome; the next replay retries the refund
            async with self.uow_factory() as uow:
                await uow.payment_order_command_repo.abort_refund(order_id=order.id)
                await uow.commit()
            metrics.record_refund(reason='orphaned_payment', result='gateway_error')
            Logger.base.error(f'❌ [REFUND] Orphaned order {order.external_order_id}: {e}')
            return False

        async with self.uow_factory() as uow:
            refunded = await uow.payment_order_command_repo.mark_refunded(
                order_id=order.id, refund_id=refund_id
            )
            await uow.commit()

        if refunded:
            metrics.record_refund(reason='orphaned_payment', result='refunded')
            Logger.base.info(
                f'↩️ [REFUND] Orphaned order {order.external_order_id} refunded ({refund_id})'
            )
        return refunded
