from datetime import datetime, timedelta

import attrs

from src.platform.exception.exceptions import ConflictError, ConflictReason
from src.service.ticket_market.domain.entity.event_entity import EventEntity


@attrs.define(frozen=True)
class AdmissionPolicy:
    """Gate admission window: [starts_at - opens_before, ends_at + closes_after]."""

    enabled: bool = False
    opens_before: timedelta = timedelta(minutes=120)
    closes_after: timedelta = timedelta(0)

    def admits(self, *, event: EventEntity, now: datetime) -> bool:
        if not self.enabled:
            return True
        return event.starts_at - self.opens_before <= now <= event.ends_at + self.closes_after

    def validate(self, *, event: EventEntity, now: datetime) -> None:
        if not self.admits(event=event, now=now):
            raise ConflictError(
                'Ticket cannot be redeemed outside the admission window',
                ConflictReason.NOT_REDEEMABLE,
            )
