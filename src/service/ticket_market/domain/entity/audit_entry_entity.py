from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

import attrs
from uuid_utils.compat import uuid7

from src.service.ticket_market.domain.enum.audit_action import AuditAction


@attrs.define(frozen=True)
class AuditEntryEntity:
    id: UUID
    ticket_id: UUID
    actor_id: int
    action: AuditAction
    timestamp: datetime
    external_payment_id: Optional[str] = None

    @classmethod
    def record(
        cls,
        *,
        ticket_id: UUID,
        actor_id: int,
        action: AuditAction,
        external_payment_id: Optional[str] = None,
    ) -> 'AuditEntryEntity':
        return cls(
            id=uuid7(),
            ticket_id=ticket_id,
            actor_id=actor_id,
            action=action,
            timestamp=datetime.now(timezone.utc),
            external_payment_id=external_payment_id,
        )
