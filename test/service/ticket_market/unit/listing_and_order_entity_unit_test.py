"""Unit tests for ResaleListingEntity and PaymentOrderEntity."""

import pytest
from uuid_utils.compat import uuid7

from src.platform.exception.exceptions import ConflictError, ValidationError
from src.service.ticket_market.domain.entity.payment_order_entity import (
    PaymentOrderEntity,
    PaymentOrderStatus,
    PaymentOutcome,
    PaymentSubjectKind,
)
from src.service.ticket_market.domain.entity.resale_listing_entity import (
    ListingStatus,
    ResaleListingEntity,
)


@pytest.mark.unit
class TestResaleListingEntity:
    def test_open_listing(self) -> None:
        listing = ResaleListingEntity.open(
            ticket_id=uuid7(), seller_id=1, ask_price=1500, currency='INR'
        )

        assert listing.status == ListingStatus.OPEN
        assert listing.is_open
        assert listing.buyer_id is None
        listing.validate_open()

    @pytest.mark.parametrize('ask_price', [0, -100])
    def test_non_positive_ask_price_rejected(self, ask_price: int) -> None:
        with pytest.raises(ValidationError):
            ResaleListingEntity.open(
                ticket_id=uuid7(), seller_id=1, ask_price=ask_price, currency='INR'
            )

    @pytest.mark.parametrize('status', [ListingStatus.SOLD, ListingStatus.CANCELLED])
    def test_closed_listing_fails_validate_open(self, status: ListingStatus) -> None:
        listing = ResaleListingEntity.open(
            ticket_id=uuid7(), seller_id=1, ask_price=1500, currency='INR'
        )
        listing.status = status

        with pytest.raises(ConflictError):
            listing.validate_open()


@pytest.mark.unit
class TestPaymentOrderEntity:
    def _order(self, **overrides) -> PaymentOrderEntity:
        order = PaymentOrderEntity.open(
            subject_kind=PaymentSubjectKind.TICKET,
            ticket_id=uuid7(),
            payer_id=1,
            amount=1000,
            currency='INR',
            external_order_id='order_1',
        )
        for key, value in overrides.items():
            setattr(order, key, value)
        return order

    def test_new_order_is_pending_and_unsettled(self) -> None:
        order = self._order()

        assert order.status == PaymentOrderStatus.PENDING
        assert not order.is_settled
        assert not order.is_resale

    def test_completed_with_outcome_is_settled(self) -> None:
        order = self._order(status=PaymentOrderStatus.COMPLETED, outcome=PaymentOutcome.APPLIED)

        assert order.is_settled

    def test_refunded_with_outcome_is_settled(self) -> None:
        order = self._order(
            status=PaymentOrderStatus.REFUNDED, outcome=PaymentOutcome.HOLD_EXPIRED
        )

        assert order.is_settled

    def test_failed_order_is_not_settled(self) -> None:
        assert not self._order(status=PaymentOrderStatus.FAILED).is_settled

    def test_listing_subject_is_resale(self) -> None:
        assert self._order(subject_kind=PaymentSubjectKind.LISTING).is_resale
