"""Unit tests for the payment order endpoint's subject dispatch."""

from unittest.mock import AsyncMock

import pytest
from uuid_utils.compat import uuid7

from src.platform.exception.exceptions import ValidationError
from src.service.ticket_market.domain.entity.user_entity import UserEntity
from src.service.ticket_market.driving_adapter.http_controller.payment_controller import (
    create_payment_order,
)
from src.service.ticket_market.driving_adapter.http_controller.schema.payment_schema import (
    CreatePaymentOrderRequest,
)


PAYER = UserEntity(id=1)


@pytest.mark.unit
class TestCreatePaymentOrderEndpoint:
    @pytest.mark.asyncio
    async def test_request_without_subject_is_rejected(self) -> None:
        # Arrange: skip model validation to reach the endpoint body
        request = CreatePaymentOrderRequest.model_construct(ticket_id=None, listing_id=None)
        use_case = AsyncMock()

        # Act
        with pytest.raises(ValidationError):
            await create_payment_order(request=request, current_user=PAYER, use_case=use_case)

        # Assert
        use_case.create_for_ticket.assert_not_awaited()
        use_case.create_for_listing.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_listing_request_opens_resale_order(self) -> None:
        listing_id = uuid7()
        request = CreatePaymentOrderRequest(listing_id=listing_id)
        use_case = AsyncMock()
        use_case.create_for_listing.return_value.external_order_id = 'order_resale'
        use_case.create_for_listing.return_value.amount = 4200
        use_case.create_for_listing.return_value.currency = 'INR'

        response = await create_payment_order(
            request=request, current_user=PAYER, use_case=use_case
        )

        assert response.order_id == 'order_resale'
        use_case.create_for_listing.assert_awaited_once_with(payer=PAYER, listing_id=listing_id)
        use_case.create_for_ticket.assert_not_awaited()
