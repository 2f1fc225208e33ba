"""Unit tests for TicketEntity lifecycle guards."""

from datetime import datetime, timedelta, timezone

import pytest
from uuid_utils.compat import uuid7

from src.platform.exception.exceptions import ConflictError, ConflictReason
from src.service.ticket_market.domain.entity.ticket_entity import TicketEntity, generate_qr_token
from src.service.ticket_market.domain.enum.ticket_status import PaymentState, TicketStatus


def _held_ticket(*, expires_in: timedelta = timedelta(minutes=30)) -> TicketEntity:
    return TicketEntity.hold(
        ticket_class_id=uuid7(),
        event_id=uuid7(),
        owner_id=1,
        hold_expires_at=datetime.now(timezone.utc) + expires_in,
    )


def _active_ticket() -> TicketEntity:
    ticket = _held_ticket()
    ticket.status = TicketStatus.ACTIVE
    ticket.hold_expires_at = None
    ticket.payment_state = PaymentState.COMPLETED
    ticket.qr_token = generate_qr_token()
    return ticket


@pytest.mark.unit
class TestTicketHold:
    def test_hold_starts_held_and_pending_without_qr(self) -> None:
        ticket = _held_ticket()

        assert ticket.status == TicketStatus.HELD
        assert ticket.payment_state == PaymentState.PENDING
        assert ticket.qr_token is None

    def test_hold_is_live_until_expiry_inclusive(self) -> None:
        ticket = _held_ticket()
        assert ticket.hold_expires_at is not None

        assert ticket.is_hold_live(now=ticket.hold_expires_at)
        assert not ticket.is_hold_live(now=ticket.hold_expires_at + timedelta(microseconds=1))

    def test_validate_payable_hold_rejects_expired_hold(self) -> None:
        ticket = _held_ticket(expires_in=timedelta(seconds=-1))

        with pytest.raises(ConflictError) as exc_info:
            ticket.validate_payable_hold(now=datetime.now(timezone.utc))

        assert exc_info.value.reason == ConflictReason.HOLD_EXPIRED

    def test_validate_payable_hold_rejects_active_ticket(self) -> None:
        ticket = _active_ticket()

        with pytest.raises(ConflictError) as exc_info:
            ticket.validate_payable_hold(now=datetime.now(timezone.utc))

        assert exc_info.value.reason == ConflictReason.WRONG_STATE


@pytest.mark.unit
class TestTicketQrToken:
    def test_each_token_is_unique(self) -> None:
        assert generate_qr_token() != generate_qr_token()

    def test_qr_token_is_hidden_from_repr(self) -> None:
        active = _active_ticket()

        assert active.qr_token is not None
        assert active.qr_token not in repr(active)


@pytest.mark.unit
class TestTicketGuards:
    @pytest.mark.parametrize(
        'status,reason',
        [
            (TicketStatus.FOR_SALE, ConflictReason.ALREADY_LISTED),
            (TicketStatus.HELD, ConflictReason.WRONG_STATE),
            (TicketStatus.USED, ConflictReason.WRONG_STATE),
        ],
    )
    def test_validate_listable(self, status: TicketStatus, reason: ConflictReason) -> None:
        ticket = _held_ticket()
        ticket.status = status

        with pytest.raises(ConflictError) as exc_info:
            ticket.validate_listable()

        assert exc_info.value.reason == reason

    def test_active_ticket_is_listable_and_refundable(self) -> None:
        ticket = _active_ticket()

        ticket.validate_listable()
        ticket.validate_refundable()

    @pytest.mark.parametrize('status', [TicketStatus.ACTIVE, TicketStatus.FOR_SALE])
    def test_redeemable_statuses(self, status: TicketStatus) -> None:
        ticket = _held_ticket()
        ticket.status = status

        ticket.validate_redeemable()

    @pytest.mark.parametrize(
        'status',
        [TicketStatus.HELD, TicketStatus.EXPIRED, TicketStatus.RETURNED, TicketStatus.USED],
    )
    def test_not_redeemable_statuses(self, status: TicketStatus) -> None:
        ticket = _held_ticket()
        ticket.status = status

        with pytest.raises(ConflictError) as exc_info:
            ticket.validate_redeemable()

        assert exc_info.value.reason == ConflictReason.NOT_REDEEMABLE
