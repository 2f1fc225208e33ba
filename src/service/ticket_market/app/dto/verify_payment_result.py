"""Verify payment result DTO."""

from typing import Optional
from uuid import UUID

import attrs

from src.service.ticket_market.domain.entity.payment_order_entity import PaymentOutcome


@attrs.define(frozen=True)
class VerifyPaymentResult:
    """
    Outcome of reconciling one gateway payment.

    `replayed` is True when the order had already been settled by an earlier
    call and nothing was changed this time.
    """

    ticket_id: UUID
    outcome: PaymentOutcome
    qr_token: Optional[str] = attrs.field(default=None, repr=False)
    replayed: bool = False
