from typing import Any
from uuid import UUID

import attrs

from src.service.ticket_market.domain.enum.class_type import ClassType


@attrs.define(frozen=True)
class TicketActivatedEvent:
    """Emitted after a ticket becomes Active for a (new) owner; consumed by minting/notifications."""

    ticket_id: UUID
    buyer_id: int
    class_type: ClassType
    event_metadata: dict[str, Any] = attrs.field(factory=dict)

    def to_payload(self) -> dict[str, Any]:
        return {
            'ticket_id': str(self.ticket_id),
            'buyer_id': self.buyer_id,
            'class_type': self.class_type.value,
            'event_metadata': self.event_metadata,
        }
