"""
Integration fixtures

Each test gets freshly created tables; the engine is disposed in the same
event loop that created it.
"""

from collections.abc import AsyncIterator
from uuid import UUID

import attrs
import pytest

from src.platform.database.orm_db_setting import (
    create_db_and_tables,
    dispose_engine,
    drop_db_and_tables,
)
from src.platform.database.unit_of_work import SqlAlchemyUnitOfWork
from src.service.ticket_market.app.command.book_ticket_use_case import BookTicketUseCase
from src.service.ticket_market.app.command.cancel_resale_listing_use_case import (
    CancelResaleListingUseCase,
)
from src.service.ticket_market.app.command.check_in_ticket_use_case import CheckInTicketUseCase
from src.service.ticket_market.app.command.create_payment_order_use_case import (
    CreatePaymentOrderUseCase,
)
from src.service.ticket_market.app.command.list_ticket_for_resale_use_case import (
    ListTicketForResaleUseCase,
)
from src.service.ticket_market.app.command.refund_ticket_use_case import RefundTicketUseCase
from src.service.ticket_market.app.command.release_expired_holds_use_case import (
    ReleaseExpiredHoldsUseCase,
)
from src.service.ticket_market.app.command.verify_payment_use_case import VerifyPaymentUseCase
from src.service.ticket_market.app.dto.verify_payment_result import VerifyPaymentResult
from src.service.ticket_market.domain.admission_policy import AdmissionPolicy
from src.service.ticket_market.domain.entity.audit_entry_entity import AuditEntryEntity
from src.service.ticket_market.domain.entity.payment_order_entity import PaymentOrderEntity
from src.service.ticket_market.domain.entity.resale_listing_entity import ResaleListingEntity
from src.service.ticket_market.domain.entity.ticket_entity import TicketEntity
from src.service.ticket_market.domain.entity.user_entity import UserEntity
from src.service.ticket_market.domain.enum.audit_action import AuditAction
from src.service.ticket_market.driven_adapter.payment.mock_payment_gateway_impl import (
    MockPaymentGatewayImpl,
)
from src.service.ticket_market.driven_adapter.payment.signature import compute_signature
from src.service.ticket_market.driven_adapter.publisher.ticket_activated_publisher_impl import (
    TicketActivatedPublisherImpl,
)


@pytest.fixture(autouse=True)
async def clean_database() -> AsyncIterator[None]:
    await drop_db_and_tables()
    await create_db_and_tables()
    yield
    await dispose_engine()


@attrs.define
class Market:
    """All command use cases wired to the real Unit of Work and an in-process gateway."""

    gateway: MockPaymentGatewayImpl
    book_ticket: BookTicketUseCase
    create_order: CreatePaymentOrderUseCase
    verify_payment: VerifyPaymentUseCase
    refund: RefundTicketUseCase
    list_for_resale: ListTicketForResaleUseCase
    cancel_listing: CancelResaleListingUseCase
    check_in: CheckInTicketUseCase
    release_expired: ReleaseExpiredHoldsUseCase

    @classmethod
    def create(cls) -> 'Market':
        gateway = MockPaymentGatewayImpl()
        refund = RefundTicketUseCase(uow_factory=SqlAlchemyUnitOfWork, payment_gateway=gateway)
        return cls(
            gateway=gateway,
            book_ticket=BookTicketUseCase(uow_factory=SqlAlchemyUnitOfWork),
            create_order=CreatePaymentOrderUseCase(
                uow_factory=SqlAlchemyUnitOfWork, payment_gateway=gateway
            ),
            verify_payment=VerifyPaymentUseCase(
                uow_factory=SqlAlchemyUnitOfWork,
                refund_coordinator=refund,
                ticket_activated_publisher=TicketActivatedPublisherImpl(hook_url=''),
            ),
            refund=refund,
            list_for_resale=ListTicketForResaleUseCase(uow_factory=SqlAlchemyUnitOfWork),
            cancel_listing=CancelResaleListingUseCase(uow_factory=SqlAlchemyUnitOfWork),
            check_in=CheckInTicketUseCase(
                uow_factory=SqlAlchemyUnitOfWork, admission_policy=AdmissionPolicy()
            ),
            release_expired=ReleaseExpiredHoldsUseCase(uow_factory=SqlAlchemyUnitOfWork),
        )

    async def pay(
        self, *, payer: UserEntity, order: PaymentOrderEntity, payment_id: str
    ) -> VerifyPaymentResult:
        """Simulate the gateway callback with a correctly signed payload."""
        return await self.verify_payment.verify(
            order_id=order.external_order_id,
            payment_id=payment_id,
            signature=compute_signature(
                order_id=order.external_order_id, payment_id=payment_id
            ),
        )

    async def buy_direct(
        self, *, buyer: UserEntity, event_id: UUID, class_type, payment_id: str
    ) -> tuple[TicketEntity, VerifyPaymentResult]:
        ticket = await self.book_ticket.book(buyer=buyer, event_id=event_id, class_type=class_type)
        order = await self.create_order.create_for_ticket(payer=buyer, ticket_id=ticket.id)
        return ticket, await self.pay(payer=buyer, order=order, payment_id=payment_id)

    # ---- read helpers ----
    async def ticket(self, ticket_id: UUID) -> TicketEntity:
        async with SqlAlchemyUnitOfWork() as uow:
            ticket = await uow.ticket_command_repo.get_by_id(ticket_id=ticket_id)
        assert ticket is not None
        return ticket

    async def remaining(self, ticket_class_id: UUID) -> int | None:
        async with SqlAlchemyUnitOfWork() as uow:
            return await uow.inventory_ledger.get_remaining(ticket_class_id=ticket_class_id)

    async def order(self, external_order_id: str) -> PaymentOrderEntity:
        async with SqlAlchemyUnitOfWork() as uow:
            order = await uow.payment_order_command_repo.get_by_external_order_id(
                external_order_id=external_order_id
            )
        assert order is not None
        return order

    async def listing(self, listing_id: UUID) -> ResaleListingEntity:
        async with SqlAlchemyUnitOfWork() as uow:
            listing = await uow.resale_listing_command_repo.get_by_id(listing_id=listing_id)
        assert listing is not None
        return listing

    async def audit(self, ticket_id: UUID) -> list[AuditEntryEntity]:
        async with SqlAlchemyUnitOfWork() as uow:
            return await uow.audit_log_repo.list_for_ticket(ticket_id=ticket_id)

    async def audit_actions(self, ticket_id: UUID) -> list[AuditAction]:
        return [entry.action for entry in await self.audit(ticket_id)]


@pytest.fixture
def market() -> Market:
    return Market.create()
