"""
API test fixtures

The TestClient runs the app (and its lifespan) on its own event loop; seed
data through `client.portal` so it lands on that loop's engine.
"""

import asyncio
from collections.abc import Iterator
import functools

from fastapi.testclient import TestClient
import pytest

from src.platform.config.di import container
from src.platform.database.orm_db_setting import (
    create_db_and_tables,
    dispose_engine,
    drop_db_and_tables,
)
from src.service.ticket_market.driven_adapter.payment.signature import compute_signature

from test.test_main import app


async def _reset_database() -> None:
    try:
        await drop_db_and_tables()
        await create_db_and_tables()
    finally:
        await dispose_engine()


@pytest.fixture
def client() -> Iterator[TestClient]:
    asyncio.run(_reset_database())
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def seed(client: TestClient, seed_event):
    """Sync wrapper: `event, classes = seed(supply=3)`."""

    def _seed(**kwargs):
        return client.portal.call(functools.partial(seed_event, **kwargs))

    return _seed


@pytest.fixture
def gateway():
    return container.payment_gateway()


@pytest.fixture
def signed_callback():
    def _signed(order_id: str, payment_id: str) -> dict[str, str]:
        return {
            'order_id': order_id,
            'payment_id': payment_id,
            'signature': compute_signature(order_id=order_id, payment_id=payment_id),
        }

    return _signed
