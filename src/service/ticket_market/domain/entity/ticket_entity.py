from datetime import datetime, timezone
import secrets
from typing import Optional
from uuid import UUID

import attrs
from uuid_utils.compat import uuid7

from src.platform.exception.exceptions import ConflictError, ConflictReason
from src.platform.logging.loguru_io import Logger
from src.service.ticket_market.domain.enum.ticket_status import (
    REDEEMABLE_TICKET_STATUSES,
    PaymentState,
    TicketStatus,
)


def generate_qr_token() -> str:
    return secrets.token_urlsafe(24)


@attrs.define
class TicketEntity:
    """
    Ticket lifecycle:

        held -> active -> for_sale -> active (delisted or sold to a new owner)
        active | for_sale -> used
        active -> returning -> returned (or back to active if the refund fails)
        held -> expired

    Persistence applies every transition with a compare-and-set on the
    previous status.
    """

    id: UUID
    ticket_class_id: UUID
    event_id: UUID
    owner_id: int
    status: TicketStatus = TicketStatus.HELD
    hold_expires_at: Optional[datetime] = None
    payment_state: PaymentState = PaymentState.PENDING
    external_order_ref: Optional[str] = None
    qr_token: Optional[str] = attrs.field(default=None, repr=False)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def hold(
        cls,
        *,
        ticket_class_id: UUID,
        event_id: UUID,
        owner_id: int,
        hold_expires_at: datetime,
    ) -> 'TicketEntity':
        now = datetime.now(timezone.utc)
        return cls(
            id=uuid7(),
            ticket_class_id=ticket_class_id,
            event_id=event_id,
            owner_id=owner_id,
            status=TicketStatus.HELD,
            hold_expires_at=hold_expires_at,
            payment_state=PaymentState.PENDING,
            created_at=now,
            updated_at=now,
        )

    def is_hold_live(self, *, now: datetime) -> bool:
        return (
            self.status == TicketStatus.HELD
            and self.hold_expires_at is not None
            and now <= self.hold_expires_at
        )

    @Logger.io
    def validate_payable_hold(self, *, now: datetime) -> None:
        if self.status != TicketStatus.HELD:
            raise ConflictError(f'Ticket is {self.status}, not held', ConflictReason.WRONG_STATE)
        if not self.is_hold_live(now=now):
            raise ConflictError('Ticket hold has expired', ConflictReason.HOLD_EXPIRED)

    def validate_listable(self) -> None:
        if self.status == TicketStatus.FOR_SALE:
            raise ConflictError('Ticket is already listed', ConflictReason.ALREADY_LISTED)
        if self.status != TicketStatus.ACTIVE:
            raise ConflictError(f'Ticket is {self.status}, not active', ConflictReason.WRONG_STATE)

    def validate_refundable(self) -> None:
        if self.status != TicketStatus.ACTIVE:
            raise ConflictError(f'Ticket is {self.status}, not active', ConflictReason.WRONG_STATE)

    def validate_redeemable(self) -> None:
        if self.status not in REDEEMABLE_TICKET_STATUSES:
            raise ConflictError(
                f'Ticket is {self.status} and cannot be redeemed', ConflictReason.NOT_REDEEMABLE
            )
