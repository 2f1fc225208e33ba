"""Application layer DTOs"""

from src.service.ticket_market.app.dto.page_result import PageResult
from src.service.ticket_market.app.dto.verify_payment_result import VerifyPaymentResult

__all__ = ['PageResult', 'VerifyPaymentResult']
