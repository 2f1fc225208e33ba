from enum import StrEnum


class TicketStatus(StrEnum):
    HELD = 'held'
    ACTIVE = 'active'
    FOR_SALE = 'for_sale'
    # Owner return awaiting the gateway refund
    RETURNING = 'returning'
    USED = 'used'
    EXPIRED = 'expired'
    RETURNED = 'returned'


# A live ticket occupies one unit of its class's supply
LIVE_TICKET_STATUSES = (
    TicketStatus.HELD,
    TicketStatus.ACTIVE,
    TicketStatus.FOR_SALE,
    TicketStatus.RETURNING,
)
REDEEMABLE_TICKET_STATUSES = (TicketStatus.ACTIVE, TicketStatus.FOR_SALE)


class PaymentState(StrEnum):
    PENDING = 'pending'
    COMPLETED = 'completed'
    FAILED = 'failed'
