"""
Unit test fixtures

- FakeUnitOfWork: every repository is an AsyncMock; commit/rollback are counted
- build: entity builders for arranging use case inputs
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import attrs
import pytest
from uuid_utils.compat import uuid7

from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.service.ticket_market.domain.entity.event_entity import EventEntity, TicketClassEntity
from src.service.ticket_market.domain.entity.payment_order_entity import (
    PaymentOrderEntity,
    PaymentSubjectKind,
)
from src.service.ticket_market.domain.entity.ticket_entity import (
    TicketEntity,
    generate_qr_token,
)
from src.service.ticket_market.domain.enum.class_type import ClassType
from src.service.ticket_market.domain.enum.ticket_status import PaymentState, TicketStatus


class FakeUnitOfWork(AbstractUnitOfWork):
    def __init__(self) -> None:
        self.inventory_ledger = AsyncMock()
        self.event_catalog_repo = AsyncMock()
        self.ticket_command_repo = AsyncMock()
        self.payment_order_command_repo = AsyncMock()
        self.resale_listing_command_repo = AsyncMock()
        self.audit_log_repo = AsyncMock()
        self.commits = 0
        self.rollbacks = 0

    async def _commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        self.rollbacks += 1

    def audited_actions(self) -> list:
        return [call.kwargs['entry'].action for call in self.audit_log_repo.append.await_args_list]


class EntityBuilder:
    def event(self) -> EventEntity:
        starts_at = datetime.now(timezone.utc) + timedelta(days=1)
        return EventEntity(
            id=uuid7(),
            name='Builder Night',
            starts_at=starts_at,
            ends_at=starts_at + timedelta(hours=3),
            hold_window_minutes=240,
        )

    def ticket_class(self, event: EventEntity) -> TicketClassEntity:
        return TicketClassEntity(
            id=uuid7(),
            event_id=event.id,
            class_type=ClassType.STANDARD,
            total_supply=5,
            remaining=4,
            unit_price=1000,
        )

    def ticket(
        self,
        event: EventEntity,
        ticket_class: TicketClassEntity,
        *,
        owner_id: int = 1,
        status: TicketStatus = TicketStatus.HELD,
    ) -> TicketEntity:
        ticket = TicketEntity.hold(
            ticket_class_id=ticket_class.id,
            event_id=event.id,
            owner_id=owner_id,
            hold_expires_at=datetime.now(timezone.utc) + timedelta(minutes=30),
        )
        if status == TicketStatus.HELD:
            return ticket
        return attrs.evolve(
            ticket,
            status=status,
            hold_expires_at=None,
            payment_state=PaymentState.COMPLETED,
            qr_token=generate_qr_token(),
        )

    def order(self, ticket: TicketEntity, *, payer_id: int = 1, **overrides) -> PaymentOrderEntity:
        order = PaymentOrderEntity.open(
            subject_kind=PaymentSubjectKind.TICKET,
            ticket_id=ticket.id,
            payer_id=payer_id,
            amount=1000,
            currency='INR',
            external_order_id=f'order_{uuid7().hex}',
        )
        return attrs.evolve(order, **overrides) if overrides else order


@pytest.fixture
def fake_uow() -> FakeUnitOfWork:
    return FakeUnitOfWork()


@pytest.fixture
def uow_factory(fake_uow: FakeUnitOfWork):
    """Every unit opened by the use case shares the same fake."""
    return lambda: fake_uow


@pytest.fixture
def build() -> EntityBuilder:
    return EntityBuilder()


@pytest.fixture
def catalog(build: EntityBuilder) -> tuple[EventEntity, TicketClassEntity]:
    event = build.event()
    return event, build.ticket_class(event)
