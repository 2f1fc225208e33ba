from datetime import datetime, timezone
from enum import StrEnum
from typing import Optional
from uuid import UUID

import attrs
from uuid_utils.compat import uuid7

from src.platform.exception.exceptions import ConflictError, ConflictReason, ValidationError


class ListingStatus(StrEnum):
    OPEN = 'open'
    SOLD = 'sold'
    CANCELLED = 'cancelled'


@attrs.define
class ResaleListingEntity:
    id: UUID
    ticket_id: UUID
    seller_id: int
    ask_price: int
    currency: str
    status: ListingStatus = ListingStatus.OPEN
    buyer_id: Optional[int] = None
    created_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None

    @classmethod
    def open(
        cls, *, ticket_id: UUID, seller_id: int, ask_price: int, currency: str
    ) -> 'ResaleListingEntity':
        if ask_price <= 0:
            raise ValidationError('ask_price must be greater than 0')
        return cls(
            id=uuid7(),
            ticket_id=ticket_id,
            seller_id=seller_id,
            ask_price=ask_price,
            currency=currency,
            status=ListingStatus.OPEN,
            created_at=datetime.now(timezone.utc),
        )

    @property
    def is_open(self) -> bool:
        return self.status == ListingStatus.OPEN

    def validate_open(self) -> None:
        if not self.is_open:
            raise ConflictError(f'Listing is {self.status}', ConflictReason.WRONG_STATE)
