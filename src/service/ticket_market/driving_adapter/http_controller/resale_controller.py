from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.service.ticket_market.app.command.cancel_resale_listing_use_case import (
    CancelResaleListingUseCase,
)
from src.service.ticket_market.app.command.create_payment_order_use_case import (
    CreatePaymentOrderUseCase,
)
from src.service.ticket_market.app.command.list_ticket_for_resale_use_case import (
    ListTicketForResaleUseCase,
)
from src.service.ticket_market.app.query.list_open_listings_use_case import (
    ListOpenListingsUseCase,
)
from src.service.ticket_market.domain.entity.user_entity import UserEntity
from src.service.ticket_market.driving_adapter.http_controller.auth.role_auth import (
    get_current_user,
)
from src.service.ticket_market.driving_adapter.http_controller.schema.payment_schema import (
    PaymentOrderResponse,
)
from src.service.ticket_market.driving_adapter.http_controller.schema.resale_schema import (
    CancelListingResponse,
    ListingPagination,
    ListingResponse,
    ListTicketRequest,
    ListTicketResponse,
    OpenListingsResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post('/list', status_code=status.HTTP_201_CREATED)
@Logger.io
async def list_ticket(
    request: ListTicketRequest,
    current_user: UserEntity = Depends(get_current_user),
    use_case: ListTicketForResaleUseCase = Depends(ListTicketForResaleUseCase.depends),
) -> ListTicketResponse:
    listing = await use_case.list(
        seller=current_user, ticket_id=request.ticket_id, ask_price=request.ask_price
    )
    return ListTicketResponse(listing_id=listing.id)


@router.get('/listings')
@Logger.io
async def list_open_listings(
    event_id: Optional[UUID] = None,
    page: int = 1,
    limit: int = 20,
    use_case: ListOpenListingsUseCase = Depends(ListOpenListingsUseCase.depends),
) -> OpenListingsResponse:
    result = await use_case.list(event_id=event_id, page=page, limit=limit)
    return OpenListingsResponse(
        listings=[ListingResponse.from_entity(listing) for listing in result.items],
        pagination=ListingPagination(**result.pagination(total_key='total_listings')),
    )


@router.post('/{listing_id}/buy', status_code=status.HTTP_201_CREATED)
@Logger.io
async def buy_listing(
    listing_id: UUID,
    current_user: UserEntity = Depends(get_current_user),
    use_case: CreatePaymentOrderUseCase = Depends(CreatePaymentOrderUseCase.depends),
) -> PaymentOrderResponse:
    with tracer.start_as_current_span('controller.buy_listing') as span:
        span.set_attribute('listing_id', str(listing_id))
        span.set_attribute('buyer_id', current_user.id)
        order = await use_case.create_for_listing(payer=current_user, listing_id=listing_id)
        return PaymentOrderResponse(
            order_id=order.external_order_id, amount=order.amount, currency=order.currency
        )


@router.post('/{listing_id}/cancel')
@Logger.io
async def cancel_listing(
    listing_id: UUID,
    current_user: UserEntity = Depends(get_current_user),
    use_case: CancelResaleListingUseCase = Depends(CancelResaleListingUseCase.depends),
) -> CancelListingResponse:
    listing = await use_case.cancel(seller=current_user, listing_id=listing_id)
    return CancelListingResponse(listing_id=listing.id, status=listing.status.value)
