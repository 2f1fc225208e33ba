from abc import ABC, abstractmethod


class IPaymentGateway(ABC):
    """
    External payment provider.

    Implementations raise GatewayError on any transport or provider failure.
    Never called while a database transaction is open.
    """

    @abstractmethod
    async def create_order(self, *, amount: int, currency: str, reference: str) -> str:
        """
        Returns:
            Provider order id
        """
        pass

    @abstractmethod
    async def refund_payment(self, *, payment_id: str, amount: int) -> str:
        """
        Returns:
            Provider refund id
        """
        pass
