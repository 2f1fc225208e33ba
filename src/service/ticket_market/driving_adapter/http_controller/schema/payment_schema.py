from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator


class CreatePaymentOrderRequest(BaseModel):
    """Exactly one of ticket_id (direct purchase) or listing_id (resale)."""

    model_config = ConfigDict(
        json_schema_extra={'example': {'ticket_id': '01937a4c-0000-7000-8000-0000000000aa'}}
    )

    ticket_id: Optional[UUID] = None
    listing_id: Optional[UUID] = None

    @model_validator(mode='after')
    def _exactly_one_subject(self) -> 'CreatePaymentOrderRequest':
        if (self.ticket_id is None) == (self.listing_id is None):
            raise ValueError('Provide exactly one of ticket_id or listing_id')
        return self


class PaymentOrderResponse(BaseModel):
    order_id: str
    amount: int
    currency: str


class VerifyPaymentRequest(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            'example': {
                'order_id': 'order_mock_5f0c3a',
                'payment_id': 'pay_mock_9d1e7b',
                'signature': '3b2f...hex',
            }
        }
    )

    order_id: str = Field(min_length=1)
    payment_id: str = Field(min_length=1)
    signature: str = Field(min_length=1)


class VerifyPaymentResponse(BaseModel):
    ticket_id: UUID
    qr_token: Optional[str] = None


class PaymentStatusResponse(BaseModel):
    ticket_id: UUID
    order_id: str
    status: str
    outcome: Optional[str] = None
    amount: int
    currency: str
    updated_at: Optional[datetime] = None
