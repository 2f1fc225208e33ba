from uuid_utils.compat import uuid7

from src.platform.exception.exceptions import GatewayError
from src.platform.logging.loguru_io import Logger
from src.service.ticket_market.app.interface.i_payment_gateway import IPaymentGateway


class MockPaymentGatewayImpl(IPaymentGateway):
    """
    In-process gateway for development and tests.

    `fail_next_create` / `fail_next_refund` make the next call raise
    GatewayError, which lets tests exercise the failure paths.
    """

    def __init__(self) -> None:
        self.fail_next_create = False
        self.fail_next_refund = False
        self.created_orders: dict[str, tuple[int, str, str]] = {}
        self.refunds: dict[str, tuple[str, int]] = {}

    @Logger.io
    async def create_order(self, *, amount: int, currency: str, reference: str) -> str:
        if self.fail_next_create:
            self.fail_next_create = False
            raise GatewayError('Mock gateway rejected order creation')
        order_id = f'order_mock_{uuid7().hex}'
        self.created_orders[order_id] = (amount, currency, reference)
        return order_id

    @Logger.io
    async def refund_payment(self, *, payment_id: str, amount: int) -> str:
        if self.fail_next_refund:
            self.fail_next_refund = False
            raise GatewayError('Mock gateway rejected refund')
        refund_id = f'rfnd_mock_{uuid7().hex}'
        self.refunds[refund_id] = (payment_id, amount)
        return refund_id
