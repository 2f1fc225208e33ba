"""
Razorpay REST adapter

- POST /orders                    {amount, currency, receipt}
- POST /payments/{id}/refund      {amount}

Amounts are in the smallest currency unit (paise for INR). Any transport
error or non-2xx response is raised as GatewayError.
"""

from typing import Any

import httpx

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import GatewayError
from src.platform.logging.loguru_io import Logger
from src.service.ticket_market.app.interface.i_payment_gateway import IPaymentGateway


class RazorpayGatewayImpl(IPaymentGateway):
    def __init__(
        self,
        *,
        base_url: str | None = None,
        key_id: str | None = None,
        key_secret: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.RAZORPAY_BASE_URL).rstrip('/')
        self.key_id = key_id or settings.RAZORPAY_KEY_ID
        self.key_secret = key_secret or settings.RAZORPAY_KEY_SECRET.get_secret_value()
        self.timeout = timeout or settings.GATEWAY_TIMEOUT_SECONDS
        self.transport = transport

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                auth=(self.key_id, self.key_secret),
                timeout=self.timeout,
                transport=self.transport,
            ) as client:
                response = await client.post(path, json=payload)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            raise GatewayError(
                f'Razorpay {path} failed with {e.response.status_code}: {e.response.text[:200]}'
            ) from e
        except httpx.HTTPError as e:
            raise GatewayError(f'Razorpay {path} unreachable: {e}') from e

    @Logger.io
    async def create_order(self, *, amount: int, currency: str, reference: str) -> str:
        body = await self._post(
            '/orders', {'amount': amount, 'currency': currency, 'receipt': reference[:40]}
        )
        if 'id' not in body:
            raise GatewayError('Razorpay order response has no id')
        return str(body['id'])

    @Logger.io
    async def refund_payment(self, *, payment_id: str, amount: int) -> str:
        body = await self._post(f'/payments/{payment_id}/refund', {'amount': amount})
        if 'id' not in body:
            raise GatewayError('Razorpay refund response has no id')
        return str(body['id'])
