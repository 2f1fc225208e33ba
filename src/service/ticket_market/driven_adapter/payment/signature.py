"""
Gateway callback signature: hex(HMAC-SHA256(secret, "<order_id>|<payment_id>"))
"""

import hashlib
import hmac

from src.platform.config.core_setting import settings


def _secret() -> bytes:
    return settings.PAYMENT_WEBHOOK_SECRET.get_secret_value().encode()


def compute_signature(*, order_id: str, payment_id: str, secret: bytes | None = None) -> str:
    message = f'{order_id}|{payment_id}'.encode()
    return hmac.new(secret or _secret(), message, hashlib.sha256).hexdigest()


def verify_signature(
    *, order_id: str, payment_id: str, signature: str, secret: bytes | None = None
) -> bool:
    expected = compute_signature(order_id=order_id, payment_id=payment_id, secret=secret)
    return hmac.compare_digest(expected, signature or '')
