from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.service.ticket_market.domain.entity.ticket_entity import TicketEntity
from src.service.ticket_market.domain.enum.class_type import ClassType


class BookTicketRequest(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            'example': {
                'event_id': '01937a4c-0000-7000-8000-000000000001',
                'class_type': 'Standard',
            }
        }
    )

    event_id: UUID
    class_type: ClassType


class BookTicketResponse(BaseModel):
    ticket_id: UUID
    hold_expires_at: datetime


class TicketResponse(BaseModel):
    id: UUID
    ticket_class_id: UUID
    event_id: UUID
    owner_id: int
    status: str
    payment_state: str
    hold_expires_at: Optional[datetime] = None
    qr_token: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, ticket: TicketEntity, *, reveal_qr: bool) -> 'TicketResponse':
        return cls(
            id=ticket.id,
            ticket_class_id=ticket.ticket_class_id,
            event_id=ticket.event_id,
            owner_id=ticket.owner_id,
            status=ticket.status.value,
            payment_state=ticket.payment_state.value,
            hold_expires_at=ticket.hold_expires_at,
            qr_token=ticket.qr_token if reveal_qr else None,
            created_at=ticket.created_at,
        )


class TicketPagination(BaseModel):
    current_page: int
    total_pages: int
    total_tickets: int
    has_next_page: bool
    has_prev_page: bool


class MyTicketsResponse(BaseModel):
    tickets: List[TicketResponse]
    pagination: TicketPagination


class CheckInRequest(BaseModel):
    qr_token: str = Field(min_length=1)


class TicketStatusResponse(BaseModel):
    ticket_id: UUID
    status: str
