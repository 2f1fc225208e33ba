from datetime import datetime, timezone
from enum import StrEnum
from typing import Optional
from uuid import UUID

import attrs
from uuid_utils.compat import uuid7


class PaymentOrderStatus(StrEnum):
    PENDING = 'pending'
    COMPLETED = 'completed'
    FAILED = 'failed'
    # Gateway refund in flight; reverts to COMPLETED if the gateway rejects it
    REFUNDING = 'refunding'
    REFUNDED = 'refunded'


SETTLED_ORDER_STATUSES = (
    PaymentOrderStatus.COMPLETED,
    PaymentOrderStatus.REFUNDING,
    PaymentOrderStatus.REFUNDED,
)


class PaymentSubjectKind(StrEnum):
    TICKET = 'ticket'
    LISTING = 'listing'


class PaymentOutcome(StrEnum):
    """Result recorded when an order completes; replayed on duplicate verification."""

    APPLIED = 'applied'
    HOLD_EXPIRED = 'hold_expired'
    LISTING_STALE = 'listing_stale'


@attrs.define
class PaymentOrderEntity:
    id: UUID
    subject_kind: PaymentSubjectKind
    ticket_id: UUID
    payer_id: int
    amount: int
    currency: str
    external_order_id: str
    listing_id: Optional[UUID] = None
    status: PaymentOrderStatus = PaymentOrderStatus.PENDING
    external_payment_id: Optional[str] = None
    outcome: Optional[PaymentOutcome] = None
    refund_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def open(
        cls,
        *,
        subject_kind: PaymentSubjectKind,
        ticket_id: UUID,
        payer_id: int,
        amount: int,
        currency: str,
        external_order_id: str,
        listing_id: Optional[UUID] = None,
    ) -> 'PaymentOrderEntity':
        now = datetime.now(timezone.utc)
        return cls(
            id=uuid7(),
            subject_kind=subject_kind,
            ticket_id=ticket_id,
            listing_id=listing_id,
            payer_id=payer_id,
            amount=amount,
            currency=currency,
            external_order_id=external_order_id,
            status=PaymentOrderStatus.PENDING,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_resale(self) -> bool:
        return self.subject_kind == PaymentSubjectKind.LISTING

    @property
    def is_settled(self) -> bool:
        return (
            self.status in SETTLED_ORDER_STATUSES
            and self.outcome is not None
        )
