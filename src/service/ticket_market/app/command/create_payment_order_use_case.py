from datetime import datetime, timezone
from typing import Self
from uuid import UUID

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
from src.service.ticket_market.domain.entity.payment_order_entity import (
    PaymentOrderEntity,
    PaymentSubjectKind,
)
from src.service.ticket_market.domain.entity.user_entity import UserEntity


class CreatePaymentOrderUseCase:
    """
    Open a gateway order for a held ticket or an open resale listing.

    Flow (no transaction is open while the gateway is called):
    1. Read unit: validate subject and price it
    2. Gateway create_order
    3. Write unit: re-check the subject with a compare-and-set, insert the
       PENDING payment order

    A gateway failure leaves the hold untouched so the buyer can retry
    before it expires.
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

    async def _open_gateway_order(
        self, *, subject_kind: PaymentSubjectKind, amount: int, currency: str, reference: str
    ) -> str:
        try:
            return await self.payment_gateway.create_order(
                amount=amount, currency=currency, reference=reference
            )
        except GatewayError:
            metrics.record_payment_order(subject_kind=subject_kind.value, result='gateway_error')
            raise

    @Logger.io
    async def create_for_ticket(self, *, payer: UserEntity, ticket_id: UUID) -> PaymentOrderEntity:
        with self.tracer.start_as_current_span(
            'use_case.create_payment_order.ticket',
            attributes={'ticket.id': str(ticket_id), 'payer.id': payer.id},
        ):
            async with self.uow_factory() as uow:
                ticket = await uow.ticket_command_repo.get_by_id(ticket_id=ticket_id)
                if not ticket:
                    raise NotFoundError('Ticket not found')
                authorize(payer, ticket, Action.PAY_TICKET)
                ticket.validate_payable_hold(now=datetime.now(timezone.utc))

                ticket_class = await uow.event_catalog_repo.get_ticket_class_by_id(
                    ticket_class_id=ticket.ticket_class_id
                )
                if not ticket_class:
                    raise InternalConsistencyError('Ticket class missing for held ticket')

            external_order_id = await self._open_gateway_order(
                subject_kind=PaymentSubjectKind.TICKET,
                amount=ticket_class.unit_price,
                currency=ticket_class.currency,
                reference=str(ticket.id),
            )

            async with self.uow_factory() as uow:
                attached = await uow.ticket_command_repo.attach_order_ref(
                    ticket_id=ticket.id,
                    owner_id=payer.id,
                    external_order_ref=external_order_id,
                    now=datetime.now(timezone.utc),
                )
                if not attached:
                    metrics.record_payment_order(
                        subject_kind=PaymentSubjectKind.TICKET.value, result='hold_expired'
                    )
                    raise ConflictError('Ticket hold has expired', ConflictReason.HOLD_EXPIRED)

                order = PaymentOrderEntity.open(
                    subject_kind=PaymentSubjectKind.TICKET,
                    ticket_id=ticket.id,
                    payer_id=payer.id,
                    amount=ticket_class.unit_price,
                    currency=ticket_class.currency,
                    external_order_id=external_order_id,
                )
                await uow.payment_order_command_repo.create(order=order)
                await uow.commit()

            metrics.record_payment_order(subject_kind=PaymentSubjectKind.TICKET.value, result='created')
            Logger.base.info(f'💳 [ORDER] {external_order_id} opened for ticket {ticket.id}')
            return order

    @Logger.io
    async def create_for_listing(self, *, payer: UserEntity, listing_id: UUID) -> PaymentOrderEntity:
        with self.tracer.start_as_current_span(
            'use_case.create_payment_order.listing',
            attributes={'listing.id': str(listing_id), 'payer.id': payer.id},
        ):
            async with self.uow_factory() as uow:
                listing = await uow.resale_listing_command_repo.get_by_id(listing_id=listing_id)
                if not listing:
                    raise NotFoundError('Listing not found')
                listing.validate_open()
                authorize(payer, listing, Action.BUY_LISTING)

            external_order_id = await self._open_gateway_order(
                subject_kind=PaymentSubjectKind.LISTING,
                amount=listing.ask_price,
                currency=listing.currency,
                reference=str(listing.id),
            )

            async with self.uow_factory() as uow:
                current = await uow.resale_listing_command_repo.get_by_id(listing_id=listing_id)
                if not current or not current.is_open:
                    metrics.record_payment_order(
                        subject_kind=PaymentSubjectKind.LISTING.value, result='listing_stale'
                    )
                    raise ConflictError('Listing is no longer open', ConflictReason.LISTING_STALE)

                order = PaymentOrderEntity.open(
                    subject_kind=PaymentSubjectKind.LISTING,
                    ticket_id=listing.ticket_id,
                    listing_id=listing.id,
                    payer_id=payer.id,
                    amount=listing.ask_price,
                    currency=listing.currency,
                    external_order_id=external_order_id,
                )
                await uow.payment_order_command_repo.create(order=order)
                await uow.commit()

            metrics.record_payment_order(
                subject_kind=PaymentSubjectKind.LISTING.value, result='created'
            )
            Logger.base.info(f'💳 [ORDER] {external_order_id} opened for listing {listing.id}')
            return order
