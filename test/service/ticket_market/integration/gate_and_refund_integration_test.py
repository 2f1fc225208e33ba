"""Integration tests for gate check-in and owner refunds."""

import asyncio
from collections import Counter

import pytest

from src.platform.exception.exceptions import ConflictError, ConflictReason, GatewayError
from src.service.ticket_market.domain.entity.payment_order_entity import PaymentOrderStatus
from src.service.ticket_market.domain.entity.resale_listing_entity import ListingStatus
from src.service.ticket_market.domain.enum.audit_action import AuditAction
from src.service.ticket_market.domain.enum.class_type import ClassType
from src.service.ticket_market.domain.enum.ticket_status import TicketStatus


@pytest.mark.integration
class TestCheckIn:
    @pytest.mark.asyncio
    async def test_check_in_is_idempotent(self, market, seed_event, buyer, organizer) -> None:
        # Arrange
        event, _ = await seed_event(supply=2)
        ticket, result = await market.buy_direct(
            buyer=buyer, event_id=event.id, class_type=ClassType.VIP, payment_id='pay_gate'
        )
        assert result.qr_token is not None

        # Act
        first = await market.check_in.check_in(agent=organizer, qr_token=result.qr_token)
        second = await market.check_in.check_in(agent=organizer, qr_token=result.qr_token)

        # Assert
        assert first.status == TicketStatus.USED
        assert second.status == TicketStatus.USED
        actions = Counter(await market.audit_actions(ticket.id))
        assert actions[AuditAction.CHECK_IN] == 1
        assert actions[AuditAction.GATE_VERIFY] == 1
        gate = [e for e in await market.audit(ticket.id) if e.action == AuditAction.GATE_VERIFY]
        assert gate[0].actor_id == organizer.id

    @pytest.mark.asyncio
    async def test_concurrent_scans_of_one_token_all_admit(
        self, market, seed_event, buyer, organizer
    ) -> None:
        # Arrange
        event, _ = await seed_event(supply=2)
        ticket, result = await market.buy_direct(
            buyer=buyer, event_id=event.id, class_type=ClassType.VIP, payment_id='pay_gate_race'
        )

        # Act
        outcomes = await asyncio.gather(
            *(
                market.check_in.check_in(agent=organizer, qr_token=result.qr_token)
                for _ in range(4)
            ),
            return_exceptions=True,
        )

        # Assert
        assert [getattr(o, 'status', o) for o in outcomes] == [TicketStatus.USED] * 4
        actions = Counter(await market.audit_actions(ticket.id))
        assert actions[AuditAction.CHECK_IN] == 1
        assert actions[AuditAction.GATE_VERIFY] == 1

    @pytest.mark.asyncio
    async def test_check_in_of_listed_ticket_closes_listing(
        self, market, seed_event, buyer, organizer
    ) -> None:
        event, _ = await seed_event(supply=2)
        ticket, result = await market.buy_direct(
            buyer=buyer, event_id=event.id, class_type=ClassType.VIP, payment_id='pay_gate'
        )
        listing = await market.list_for_resale.list(
            seller=buyer, ticket_id=ticket.id, ask_price=7000
        )

        await market.check_in.check_in(agent=organizer, qr_token=result.qr_token)

        assert (await market.ticket(ticket.id)).status == TicketStatus.USED
        assert (await market.listing(listing.id)).status == ListingStatus.CANCELLED

    @pytest.mark.asyncio
    async def test_used_ticket_cannot_be_listed_or_returned(
        self, market, seed_event, buyer, organizer
    ) -> None:
        event, _ = await seed_event(supply=2)
        ticket, result = await market.buy_direct(
            buyer=buyer, event_id=event.id, class_type=ClassType.VIP, payment_id='pay_gate'
        )
        await market.check_in.check_in(agent=organizer, qr_token=result.qr_token)

        with pytest.raises(ConflictError):
            await market.list_for_resale.list(seller=buyer, ticket_id=ticket.id, ask_price=100)
        with pytest.raises(ConflictError) as exc_info:
            await market.refund.refund(owner=buyer, ticket_id=ticket.id)

        assert exc_info.value.reason == ConflictReason.WRONG_STATE
        assert market.gateway.refunds == {}


@pytest.mark.integration
class TestOwnerRefund:
    @pytest.mark.asyncio
    async def test_refund_returns_unit_to_inventory(
        self, market, seed_event, buyer, another_buyer
    ) -> None:
        # Arrange
        event, classes = await seed_event(supply=1)
        standard = classes[ClassType.STANDARD]
        ticket, _ = await market.buy_direct(
            buyer=buyer, event_id=event.id, class_type=ClassType.STANDARD, payment_id='pay_r'
        )
        with pytest.raises(ConflictError):
            await market.book_ticket.book(
                buyer=another_buyer, event_id=event.id, class_type=ClassType.STANDARD
            )

        # Act
        returned = await market.refund.refund(owner=buyer, ticket_id=ticket.id)

        # Assert
        assert returned.status == TicketStatus.RETURNED
        assert (await market.ticket(ticket.id)).status == TicketStatus.RETURNED
        assert await market.remaining(standard.id) == 1
        stored = await market.ticket(ticket.id)
        order = await market.order(stored.external_order_ref)
        assert order.status == PaymentOrderStatus.REFUNDED
        assert order.refund_id in market.gateway.refunds
        assert AuditAction.REFUND in await market.audit_actions(ticket.id)

        rebooked = await market.book_ticket.book(
            buyer=another_buyer, event_id=event.id, class_type=ClassType.STANDARD
        )
        assert rebooked.status == TicketStatus.HELD

    @pytest.mark.asyncio
    async def test_gateway_refund_failure_keeps_ticket_active(
        self, market, seed_event, buyer
    ) -> None:
        event, classes = await seed_event(supply=1)
        ticket, _ = await market.buy_direct(
            buyer=buyer, event_id=event.id, class_type=ClassType.STANDARD, payment_id='pay_r'
        )
        market.gateway.fail_next_refund = True

        with pytest.raises(GatewayError):
            await market.refund.refund(owner=buyer, ticket_id=ticket.id)

        assert (await market.ticket(ticket.id)).status == TicketStatus.ACTIVE
        assert await market.remaining(classes[ClassType.STANDARD].id) == 0
        stored = await market.ticket(ticket.id)
        assert (await market.order(stored.external_order_ref)).status == PaymentOrderStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_double_submitted_return_refunds_once(
        self, market, seed_event, buyer
    ) -> None:
        # Arrange
        event, classes = await seed_event(supply=1)
        ticket, _ = await market.buy_direct(
            buyer=buyer, event_id=event.id, class_type=ClassType.STANDARD, payment_id='pay_twice'
        )

        # Act
        outcomes = await asyncio.gather(
            market.refund.refund(owner=buyer, ticket_id=ticket.id),
            market.refund.refund(owner=buyer, ticket_id=ticket.id),
            return_exceptions=True,
        )

        # Assert
        returned = [o for o in outcomes if not isinstance(o, BaseException)]
        conflicts = [o for o in outcomes if isinstance(o, ConflictError)]
        assert len(returned) == 1 and len(conflicts) == 1
        assert conflicts[0].reason == ConflictReason.WRONG_STATE
        assert len(market.gateway.refunds) == 1
        assert (await market.ticket(ticket.id)).status == TicketStatus.RETURNED
        assert await market.remaining(classes[ClassType.STANDARD].id) == 1
        assert Counter(await market.audit_actions(ticket.id))[AuditAction.REFUND] == 1

    @pytest.mark.asyncio
    async def test_gate_scan_during_refund_is_refused(
        self, market, seed_event, buyer, organizer
    ) -> None:
        # Arrange: the gate scans while the gateway is still processing the refund
        event, _ = await seed_event(supply=1)
        ticket, result = await market.buy_direct(
            buyer=buyer, event_id=event.id, class_type=ClassType.STANDARD, payment_id='pay_gate'
        )
        gateway_refund = market.gateway.refund_payment
        scans: list[BaseException] = []

        async def refund_while_scanned(*, payment_id: str, amount: int) -> str:
            try:
                await market.check_in.check_in(agent=organizer, qr_token=result.qr_token)
            except ConflictError as e:
                scans.append(e)
            return await gateway_refund(payment_id=payment_id, amount=amount)

        market.gateway.refund_payment = refund_while_scanned

        # Act
        returned = await market.refund.refund(owner=buyer, ticket_id=ticket.id)

        # Assert
        assert returned.status == TicketStatus.RETURNED
        assert [e.reason for e in scans] == [ConflictReason.NOT_REDEEMABLE]
        assert (await market.ticket(ticket.id)).status == TicketStatus.RETURNED
        assert AuditAction.CHECK_IN not in await market.audit_actions(ticket.id)

    @pytest.mark.asyncio
    async def test_listing_during_refund_is_refused(self, market, seed_event, buyer) -> None:
        event, _ = await seed_event(supply=1)
        ticket, _ = await market.buy_direct(
            buyer=buyer, event_id=event.id, class_type=ClassType.STANDARD, payment_id='pay_list'
        )
        gateway_refund = market.gateway.refund_payment
        attempts: list[BaseException] = []

        async def refund_while_listed(*, payment_id: str, amount: int) -> str:
            try:
                await market.list_for_resale.list(seller=buyer, ticket_id=ticket.id, ask_price=500)
            except ConflictError as e:
                attempts.append(e)
            return await gateway_refund(payment_id=payment_id, amount=amount)

        market.gateway.refund_payment = refund_while_listed

        await market.refund.refund(owner=buyer, ticket_id=ticket.id)

        assert [e.reason for e in attempts] == [ConflictReason.WRONG_STATE]
        assert (await market.ticket(ticket.id)).status == TicketStatus.RETURNED
