from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.service.ticket_market.domain.entity.resale_listing_entity import ResaleListingEntity


class ListTicketRequest(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            'example': {'ticket_id': '01937a4c-0000-7000-8000-0000000000aa', 'ask_price': 1500}
        }
    )

    ticket_id: UUID
    ask_price: int = Field(gt=0)


class ListTicketResponse(BaseModel):
    listing_id: UUID


class ListingResponse(BaseModel):
    id: UUID
    ticket_id: UUID
    seller_id: int
    ask_price: int
    currency: str
    status: str
    created_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, listing: ResaleListingEntity) -> 'ListingResponse':
        return cls(
            id=listing.id,
            ticket_id=listing.ticket_id,
            seller_id=listing.seller_id,
            ask_price=listing.ask_price,
            currency=listing.currency,
            status=listing.status.value,
            created_at=listing.created_at,
        )


class ListingPagination(BaseModel):
    current_page: int
    total_pages: int
    total_listings: int
    has_next_page: bool
    has_prev_page: bool


class OpenListingsResponse(BaseModel):
    listings: List[ListingResponse]
    pagination: ListingPagination


class CancelListingResponse(BaseModel):
    listing_id: UUID
    status: str
