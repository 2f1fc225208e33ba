from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.service.ticket_market.app.command.book_ticket_use_case import BookTicketUseCase
from src.service.ticket_market.app.command.check_in_ticket_use_case import CheckInTicketUseCase
from src.service.ticket_market.app.command.refund_ticket_use_case import RefundTicketUseCase
from src.service.ticket_market.app.query.get_ticket_use_case import GetTicketUseCase
from src.service.ticket_market.app.query.list_my_tickets_use_case import ListMyTicketsUseCase
from src.service.ticket_market.domain.entity.user_entity import UserEntity
from src.service.ticket_market.domain.enum.ticket_status import TicketStatus
from src.service.ticket_market.driving_adapter.http_controller.auth.role_auth import (
    get_current_user,
    require_organizer,
)
from src.service.ticket_market.driving_adapter.http_controller.schema.ticket_schema import (
    BookTicketRequest,
    BookTicketResponse,
    CheckInRequest,
    MyTicketsResponse,
    TicketPagination,
    TicketResponse,
    TicketStatusResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post('/book', status_code=status.HTTP_201_CREATED)
@Logger.io
async def book_ticket(
    request: BookTicketRequest,
    current_user: UserEntity = Depends(get_current_user),
    use_case: BookTicketUseCase = Depends(BookTicketUseCase.depends),
) -> BookTicketResponse:
    with tracer.start_as_current_span('controller.book_ticket') as span:
        span.set_attribute('event_id', str(request.event_id))
        span.set_attribute('class_type', request.class_type.value)
        span.set_attribute('buyer_id', current_user.id)

        ticket = await use_case.book(
            buyer=current_user, event_id=request.event_id, class_type=request.class_type
        )
        if ticket.hold_expires_at is None:
            raise ValueError('Held ticket must carry hold_expires_at')

        return BookTicketResponse(ticket_id=ticket.id, hold_expires_at=ticket.hold_expires_at)


@router.post('/check_in')
@Logger.io
async def check_in_ticket(
    request: CheckInRequest,
    current_user: UserEntity = Depends(require_organizer),
    use_case: CheckInTicketUseCase = Depends(CheckInTicketUseCase.depends),
) -> TicketStatusResponse:
    ticket = await use_case.check_in(agent=current_user, qr_token=request.qr_token)
    return TicketStatusResponse(ticket_id=ticket.id, status=ticket.status.value)


@router.get('/my_tickets')
@Logger.io
async def list_my_tickets(
    ticket_status: Optional[TicketStatus] = Query(default=None, alias='status'),
    page: int = 1,
    limit: int = 10,
    current_user: UserEntity = Depends(get_current_user),
    use_case: ListMyTicketsUseCase = Depends(ListMyTicketsUseCase.depends),
) -> MyTicketsResponse:
    result = await use_case.list(owner=current_user, status=ticket_status, page=page, limit=limit)
    return MyTicketsResponse(
        tickets=[TicketResponse.from_entity(ticket, reveal_qr=True) for ticket in result.items],
        pagination=TicketPagination(**result.pagination(total_key='total_tickets')),
    )


@router.get('/{ticket_id}')
@Logger.io
async def get_ticket(
    ticket_id: UUID,
    current_user: UserEntity = Depends(get_current_user),
    use_case: GetTicketUseCase = Depends(GetTicketUseCase.depends),
) -> TicketResponse:
    ticket = await use_case.get(actor=current_user, ticket_id=ticket_id)
    # Staff may look a ticket up; only the holder sees the admission token
    return TicketResponse.from_entity(ticket, reveal_qr=ticket.owner_id == current_user.id)


@router.post('/{ticket_id}/return')
@Logger.io
async def return_ticket(
    ticket_id: UUID,
    current_user: UserEntity = Depends(get_current_user),
    use_case: RefundTicketUseCase = Depends(RefundTicketUseCase.depends),
) -> TicketStatusResponse:
    with tracer.start_as_current_span('controller.return_ticket') as span:
        span.set_attribute('ticket_id', str(ticket_id))
        ticket = await use_case.refund(owner=current_user, ticket_id=ticket_id)
        return TicketStatusResponse(ticket_id=ticket.id, status=ticket.status.value)
