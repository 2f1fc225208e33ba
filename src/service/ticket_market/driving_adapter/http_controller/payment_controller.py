from uuid import UUID

from fastapi import APIRouter, Depends, status
from opentelemetry import trace

from src.platform.exception.exceptions import ValidationError
from src.platform.logging.loguru_io import Logger
from src.service.ticket_market.app.command.create_payment_order_use_case import (
    CreatePaymentOrderUseCase,
)
from src.service.ticket_market.app.command.verify_payment_use_case import VerifyPaymentUseCase
from src.service.ticket_market.app.query.get_payment_status_use_case import (
    GetPaymentStatusUseCase,
)
from src.service.ticket_market.domain.entity.user_entity import UserEntity
from src.service.ticket_market.driving_adapter.http_controller.auth.role_auth import (
    get_current_user,
)
from src.service.ticket_market.driving_adapter.http_controller.schema.payment_schema import (
    CreatePaymentOrderRequest,
    PaymentOrderResponse,
    PaymentStatusResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post('/order', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_payment_order(
    request: CreatePaymentOrderRequest,
    current_user: UserEntity = Depends(get_current_user),
    use_case: CreatePaymentOrderUseCase = Depends(CreatePaymentOrderUseCase.depends),
) -> PaymentOrderResponse:
    with tracer.start_as_current_span('controller.create_payment_order') as span:
        span.set_attribute('payer_id', current_user.id)
        if request.ticket_id is not None:
            order = await use_case.create_for_ticket(payer=current_user, ticket_id=request.ticket_id)
        elif request.listing_id is not None:
            order = await use_case.create_for_listing(
                payer=current_user, listing_id=request.listing_id
            )
        else:
            raise ValidationError('Provide exactly one of ticket_id or listing_id')

        span.set_attribute('order_id', order.external_order_id)
        return PaymentOrderResponse(
            order_id=order.external_order_id, amount=order.amount, currency=order.currency
        )


@router.post('/verify')
@Logger.io
async def verify_payment(
    request: VerifyPaymentRequest,
    use_case: VerifyPaymentUseCase = Depends(VerifyPaymentUseCase.depends),
) -> VerifyPaymentResponse:
    """Gateway callback: the HMAC signature authenticates the caller."""
    result = await use_case.verify(
        order_id=request.order_id, payment_id=request.payment_id, signature=request.signature
    )
    return VerifyPaymentResponse(ticket_id=result.ticket_id, qr_token=result.qr_token)


@router.get('/status/{ticket_id}')
@Logger.io
async def get_payment_status(
    ticket_id: UUID,
    current_user: UserEntity = Depends(get_current_user),
    use_case: GetPaymentStatusUseCase = Depends(GetPaymentStatusUseCase.depends),
) -> PaymentStatusResponse:
    order = await use_case.get(actor=current_user, ticket_id=ticket_id)
    return PaymentStatusResponse(
        ticket_id=order.ticket_id,
        order_id=order.external_order_id,
        status=order.status.value,
        outcome=order.outcome.value if order.outcome else None,
        amount=order.amount,
        currency=order.currency,
        updated_at=order.updated_at,
    )
