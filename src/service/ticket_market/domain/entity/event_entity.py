from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

import attrs

from src.service.ticket_market.domain.enum.class_type import ClassType


def _validate_non_empty_string(instance: object, attribute: attrs.Attribute, value: str) -> None:
    if not value or not value.strip():
        raise ValueError(f'Event {attribute.name} cannot be empty')


def _validate_positive(instance: object, attribute: attrs.Attribute, value: int) -> None:
    if value <= 0:
        raise ValueError(f'{attribute.name} must be positive')


@attrs.define
class EventEntity:
    id: UUID
    name: str = attrs.field(validator=_validate_non_empty_string)
    starts_at: datetime
    ends_at: datetime
    hold_window_minutes: int = attrs.field(validator=_validate_positive)

    @property
    def hold_window(self) -> timedelta:
        return timedelta(minutes=self.hold_window_minutes)

    def metadata(self) -> dict[str, str]:
        return {
            'event_id': str(self.id),
            'name': self.name,
            'starts_at': self.starts_at.isoformat(),
            'ends_at': self.ends_at.isoformat(),
        }


@attrs.define
class TicketClassEntity:
    id: UUID
    event_id: UUID
    class_type: ClassType
    total_supply: int = attrs.field(validator=attrs.validators.ge(0))
    remaining: int = attrs.field(validator=attrs.validators.ge(0))
    unit_price: int = attrs.field(validator=attrs.validators.ge(0))
    currency: str = 'INR'

    def __attrs_post_init__(self) -> None:
        if self.remaining > self.total_supply:
            raise ValueError('remaining cannot exceed total_supply')

    @property
    def sold(self) -> int:
        return self.total_supply - self.remaining
