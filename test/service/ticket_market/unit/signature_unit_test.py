import hashlib
import hmac

import pytest

from src.service.ticket_market.driven_adapter.payment.signature import (
    compute_signature,
    verify_signature,
)


SECRET = b'unit_test_secret'


@pytest.mark.unit
class TestPaymentSignature:
    def test_signature_is_hmac_sha256_of_order_and_payment(self) -> None:
        expected = hmac.new(SECRET, b'order_1|pay_1', hashlib.sha256).hexdigest()

        assert compute_signature(order_id='order_1', payment_id='pay_1', secret=SECRET) == expected

    def test_verify_accepts_matching_signature(self) -> None:
        signature = compute_signature(order_id='order_1', payment_id='pay_1', secret=SECRET)

        assert verify_signature(
            order_id='order_1', payment_id='pay_1', signature=signature, secret=SECRET
        )

    @pytest.mark.parametrize(
        'order_id,payment_id', [('order_2', 'pay_1'), ('order_1', 'pay_2')]
    )
    def test_verify_rejects_signature_for_other_ids(self, order_id: str, payment_id: str) -> None:
        signature = compute_signature(order_id='order_1', payment_id='pay_1', secret=SECRET)

        assert not verify_signature(
            order_id=order_id, payment_id=payment_id, signature=signature, secret=SECRET
        )

    def test_verify_rejects_empty_signature(self) -> None:
        assert not verify_signature(
            order_id='order_1', payment_id='pay_1', signature='', secret=SECRET
        )

    def test_default_secret_comes_from_settings(self) -> None:
        signature = compute_signature(order_id='order_1', payment_id='pay_1')

        assert verify_signature(order_id='order_1', payment_id='pay_1', signature=signature)
        assert not verify_signature(
            order_id='order_1', payment_id='pay_1', signature=signature, secret=SECRET
        )
