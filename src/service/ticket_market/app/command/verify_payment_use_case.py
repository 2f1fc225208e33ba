from datetime import datetime, timezone
from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork, UnitOfWorkFactory
from src.platform.exception.exceptions import (
    ConflictError,
    ConflictReason,
    InternalConsistencyError,
    NotFoundError,
    SignatureInvalidError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticket_market_metrics import metrics
from src.service.ticket_market.app.command.refund_ticket_use_case import RefundTicketUseCase
from src.service.ticket_market.app.dto.verify_payment_result import VerifyPaymentResult
from src.service.ticket_market.app.interface.i_payment_gateway import IPaymentGateway
from src.service.ticket_market.app.interface.i_ticket_activated_publisher import (
    ITicketActivatedPublisher,
)
from src.service.ticket_market.domain.domain_event.ticket_activated_event import (
    TicketActivatedEvent,
)
from src.service.ticket_market.domain.entity.audit_entry_entity import AuditEntryEntity
from src.service.ticket_market.domain.entity.payment_order_entity import (
    PaymentOrderEntity,
    PaymentOrderStatus,
    PaymentOutcome,
    PaymentSubjectKind,
)
from src.service.ticket_market.domain.entity.ticket_entity import generate_qr_token
from src.service.ticket_market.domain.enum.audit_action import AuditAction
from src.service.ticket_market.domain.enum.ticket_status import TicketStatus
from src.service.ticket_market.driven_adapter.payment.signature import verify_signature


_CONFLICT_BY_OUTCOME: dict[PaymentOutcome, tuple[str, ConflictReason]] = {
    PaymentOutcome.HOLD_EXPIRED: (
        'Ticket hold expired before payment was confirmed; payment refunded',
        ConflictReason.HOLD_EXPIRED,
    ),
    PaymentOutcome.LISTING_STALE: (
        'Listing was no longer available; payment refunded',
        ConflictReason.LISTING_STALE,
    ),
}


class _SubjectStale(Exception):
    """Raised inside the apply unit to roll it back when the subject moved on."""

    def __init__(self, outcome: PaymentOutcome) -> None:
        super().__init__(outcome.value)
        self.outcome = outcome


class _LostRace(Exception):
    """Another verification completed the order first."""


class VerifyPaymentUseCase:
    """
    Reconcile a gateway payment exactly once.

    Flow:
    1. Signature check (constant time); mismatch fails the PENDING order
    2. Load order; already settled => replay the recorded outcome
    3. One unit: CAS order PENDING -> COMPLETED, then
       - direct: CAS ticket HELD -> ACTIVE with a fresh qr_token, audit Mint + Payment
       - resale: re-validate listing and ticket, CAS ticket FOR_SALE -> ACTIVE for the
         buyer, listing -> SOLD, audit Transfer + Resale
    4. Subject stale: the unit rolls back, a second unit records the outcome on the
       COMPLETED order, the payment is refunded and the caller gets a conflict
    5. Applied: emit the ticket activated hook (fire-and-forget)
    """

    def __init__(
        self,
        *,
        uow_factory: UnitOfWorkFactory,
        refund_coordinator: RefundTicketUseCase,
        ticket_activated_publisher: ITicketActivatedPublisher,
    ) -> None:
        self.uow_factory = uow_factory
        self.refund_coordinator = refund_coordinator
        self.ticket_activated_publisher = ticket_activated_publisher
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.unit_of_work.provider]),
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
        ticket_activated_publisher: ITicketActivatedPublisher = Depends(
            Provide[Container.ticket_activated_publisher]
        ),
    ) -> Self:
        return cls(
            uow_factory=uow_factory,
            refund_coordinator=RefundTicketUseCase(
                uow_factory=uow_factory, payment_gateway=payment_gateway
            ),
            ticket_activated_publisher=ticket_activated_publisher,
        )

    @Logger.io
    async def verify(self, *, order_id: str, payment_id: str, signature: str) -> VerifyPaymentResult:
        with self.tracer.start_as_current_span(
            'use_case.verify_payment', attributes={'order.external_id': order_id}
        ) as span:
            if not verify_signature(order_id=order_id, payment_id=payment_id, signature=signature):
                await self._fail_order(order_id=order_id, payment_id=payment_id)
                raise SignatureInvalidError()

            order = await self._load_order(order_id=order_id)
            span.set_attribute('order.subject_kind', order.subject_kind.value)

            if order.is_settled:
                return await self._replay(order)
            if order.status == PaymentOrderStatus.FAILED:
                raise ConflictError('Payment order has already failed', ConflictReason.WRONG_STATE)

            try:
                result, activated_event = await self._apply(order=order, payment_id=payment_id)
            except _LostRace:
                Logger.base.info(f'🔁 [VERIFY] {order_id} completed concurrently, replaying')
                return await self._replay(await self._load_order(order_id=order_id))
            except _SubjectStale as stale:
                return await self._settle_stale(
                    order=order, payment_id=payment_id, outcome=stale.outcome
                )

            metrics.record_verification(subject_kind=order.subject_kind.value, result='applied')
            Logger.base.info(
                f'✅ [VERIFY] {order_id} applied: ticket {result.ticket_id} active for {order.payer_id}'
            )
            await self.ticket_activated_publisher.publish(event=activated_event)
            return result

    async def _load_order(self, *, order_id: str) -> PaymentOrderEntity:
        async with self.uow_factory() as uow:
            order = await uow.payment_order_command_repo.get_by_external_order_id(
                external_order_id=order_id
            )
        if not order:
            raise NotFoundError('Payment order not found')
        return order

    async def _fail_order(self, *, order_id: str, payment_id: str) -> None:
        async with self.uow_factory() as uow:
            order = await uow.payment_order_command_repo.get_by_external_order_id(
                external_order_id=order_id
            )
            if not order or order.status != PaymentOrderStatus.PENDING:
                metrics.record_verification(subject_kind='unknown', result='invalid_signature')
                return

            if not await uow.payment_order_command_repo.fail_pending(order_id=order.id):
                return
            if order.subject_kind == PaymentSubjectKind.TICKET:
                await uow.ticket_command_repo.mark_payment_failed(ticket_id=order.ticket_id)
            await uow.audit_log_repo.append(
                entry=AuditEntryEntity.record(
                    ticket_id=order.ticket_id,
                    actor_id=order.payer_id,
                    action=AuditAction.PAYMENT_FAILED,
                    external_payment_id=payment_id,
                )
            )
            await uow.commit()

        metrics.record_verification(
            subject_kind=order.subject_kind.value, result='invalid_signature'
        )
        Logger.base.warning(f'⚠️ [VERIFY] Invalid signature, order {order_id} marked failed')

    async def _apply(
        self, *, order: PaymentOrderEntity, payment_id: str
    ) -> tuple[VerifyPaymentResult, TicketActivatedEvent]:
        async with self.uow_factory() as uow:
            won = await uow.payment_order_command_repo.complete_pending(
                order_id=order.id,
                external_payment_id=payment_id,
                outcome=PaymentOutcome.APPLIED,
            )
            if not won:
                raise _LostRace()

            if order.is_resale:
                qr_token = await self._apply_resale(uow=uow, order=order, payment_id=payment_id)
            else:
                qr_token = await self._apply_direct(uow=uow, order=order, payment_id=payment_id)

            activated_event = await self._build_activated_event(uow=uow, order=order)
            await uow.commit()

        return (
            VerifyPaymentResult(
                ticket_id=order.ticket_id, outcome=PaymentOutcome.APPLIED, qr_token=qr_token
            ),
            activated_event,
        )

    async def _apply_direct(
        self, *, uow: AbstractUnitOfWork, order: PaymentOrderEntity, payment_id: str
    ) -> str:
        qr_token = generate_qr_token()
        activated = await uow.ticket_command_repo.activate_held(
            ticket_id=order.ticket_id,
            owner_id=order.payer_id,
            qr_token=qr_token,
            now=datetime.now(timezone.utc),
        )
        if not activated:
            raise _SubjectStale(PaymentOutcome.HOLD_EXPIRED)

        for action, external_payment_id in (
            (AuditAction.MINT, None),
            (AuditAction.PAYMENT, payment_id),
        ):
            await uow.audit_log_repo.append(
                entry=AuditEntryEntity.record(
                    ticket_id=order.ticket_id,
                    actor_id=order.payer_id,
                    action=action,
                    external_payment_id=external_payment_id,
                )
            )
        return qr_token

    async def _apply_resale(
        self, *, uow: AbstractUnitOfWork, order: PaymentOrderEntity, payment_id: str
    ) -> str:
        if order.listing_id is None:
            raise InternalConsistencyError('Resale order has no listing')

        listing = await uow.resale_listing_command_repo.get_by_id(listing_id=order.listing_id)
        ticket = await uow.ticket_command_repo.get_by_id(ticket_id=order.ticket_id)
        if (
            not listing
            or not listing.is_open
            or not ticket
            or ticket.owner_id != listing.seller_id
            or ticket.status != TicketStatus.FOR_SALE
        ):
            raise _SubjectStale(PaymentOutcome.LISTING_STALE)

        qr_token = generate_qr_token()
        transferred = await uow.ticket_command_repo.transfer_for_sale(
            ticket_id=ticket.id,
            seller_id=listing.seller_id,
            buyer_id=order.payer_id,
            qr_token=qr_token,
        )
        sold = await uow.resale_listing_command_repo.close_as_sold(
            listing_id=listing.id, buyer_id=order.payer_id
        )
        if not (transferred and sold):
            raise _SubjectStale(PaymentOutcome.LISTING_STALE)

        await uow.audit_log_repo.append(
            entry=AuditEntryEntity.record(
                ticket_id=ticket.id,
                actor_id=order.payer_id,
                action=AuditAction.TRANSFER,
                external_payment_id=payment_id,
            )
        )
        await uow.audit_log_repo.append(
            entry=AuditEntryEntity.record(
                ticket_id=ticket.id,
                actor_id=listing.seller_id,
                action=AuditAction.RESALE,
                external_payment_id=payment_id,
            )
        )
        return qr_token

    async def _build_activated_event(
        self, *, uow: AbstractUnitOfWork, order: PaymentOrderEntity
    ) -> TicketActivatedEvent:
        ticket = await uow.ticket_command_repo.get_by_id(ticket_id=order.ticket_id)
        if not ticket:
            raise InternalConsistencyError('Activated ticket disappeared')
        ticket_class = await uow.event_catalog_repo.get_ticket_class_by_id(
            ticket_class_id=ticket.ticket_class_id
        )
        event = await uow.event_catalog_repo.get_event(event_id=ticket.event_id)
        if not ticket_class or not event:
            raise InternalConsistencyError('Catalog entry missing for activated ticket')
        return TicketActivatedEvent(
            ticket_id=ticket.id,
            buyer_id=order.payer_id,
            class_type=ticket_class.class_type,
            event_metadata=event.metadata(),
        )

    async def _settle_stale(
        self, *, order: PaymentOrderEntity, payment_id: str, outcome: PaymentOutcome
    ) -> VerifyPaymentResult:
        async with self.uow_factory() as uow:
            recorded = await uow.payment_order_command_repo.complete_pending(
                order_id=order.id, external_payment_id=payment_id, outcome=outcome
            )
            await uow.commit()

        if not recorded:
            return await self._replay(await self._load_order(order_id=order.external_order_id))

        Logger.base.warning(
            f'⚠️ [VERIFY] {order.external_order_id} not applicable ({outcome}), refunding'
        )
        metrics.record_verification(subject_kind=order.subject_kind.value, result=outcome.value)
        settled = await self._load_order(order_id=order.external_order_id)
        await self.refund_coordinator.refund_orphaned_order(order=settled)
        message, reason = _CONFLICT_BY_OUTCOME[outcome]
        raise ConflictError(message, reason)

    async def _replay(self, order: PaymentOrderEntity) -> VerifyPaymentResult:
        metrics.record_verification(subject_kind=order.subject_kind.value, result='replayed')

        if order.outcome is None:
            raise InternalConsistencyError('Settled payment order has no recorded outcome')

        if order.outcome != PaymentOutcome.APPLIED:
            if order.status == PaymentOrderStatus.COMPLETED:
                # Earlier refund attempt failed; try again
                await self.refund_coordinator.refund_orphaned_order(order=order)
            message, reason = _CONFLICT_BY_OUTCOME[order.outcome]
            raise ConflictError(message, reason)

        async with self.uow_factory() as uow:
            ticket = await uow.ticket_command_repo.get_by_id(ticket_id=order.ticket_id)

        qr_token = ticket.qr_token if ticket and ticket.owner_id == order.payer_id else None
        return VerifyPaymentResult(
            ticket_id=order.ticket_id,
            outcome=PaymentOutcome.APPLIED,
            qr_token=qr_token,
            replayed=True,
        )
