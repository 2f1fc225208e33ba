"""
Test Configuration and Fixtures

This module provides:
- Environment setup before any application import (SQLite test database,
  mock payment gateway, no background reaper)
- Shared helpers: demo users, bearer tokens, event seeding

Architecture:
- Unit tests (test/**/unit/): pure, repositories replaced with AsyncMock
- Integration tests (test/**/integration/): real SQLite database through the Unit of Work
- API tests (test/**/api/): FastAPI TestClient against the test app
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# Settings is instantiated at import time of src.platform.config.core_setting
# =============================================================================
import os
from pathlib import Path
import tempfile


def _early_setup_test_environment() -> None:
    """Set test environment variables before any module imports."""
    worker_id = os.environ.get('PYTEST_XDIST_WORKER', 'master')
    db_path = Path(tempfile.gettempdir()) / f'ticket_market_test_{worker_id}.db'
    os.environ['DATABASE_URL'] = f'sqlite+aiosqlite:///{db_path}'

    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)

    os.environ['PAYMENT_GATEWAY'] = 'mock'
    os.environ['PAYMENT_WEBHOOK_SECRET'] = 'test_payment_webhook_secret'
    os.environ['SECRET_KEY'] = 'test_secret_key'
    os.environ['ENABLE_EXPIRY_REAPER'] = 'false'
    os.environ['ADMISSION_WINDOW_ENABLED'] = 'false'
    os.environ.setdefault('DB_POOL_SIZE', '20')
    os.environ.setdefault('DB_POOL_MAX_OVERFLOW', '20')


_early_setup_test_environment()

from datetime import datetime, timedelta, timezone  # noqa: E402

import pytest  # noqa: E402
from uuid_utils.compat import uuid7  # noqa: E402

from src.platform.database.orm_db_setting import Database  # noqa: E402
from src.service.ticket_market.domain.entity.event_entity import (  # noqa: E402
    EventEntity,
    TicketClassEntity,
)
from src.service.ticket_market.domain.entity.user_entity import UserEntity, UserRole  # noqa: E402
from src.service.ticket_market.domain.enum.class_type import ClassType  # noqa: E402
from src.service.ticket_market.driven_adapter.repo.event_catalog_command_repo_impl import (  # noqa: E402
    EventCatalogCommandRepoImpl,
)
from src.service.ticket_market.driving_adapter.http_controller.auth.jwt_auth import (  # noqa: E402
    JwtAuth,
)


DEFAULT_UNIT_PRICES = {ClassType.STANDARD: 1000, ClassType.PREMIUM: 2500, ClassType.VIP: 6000}


# =============================================================================
# Catalog seeding
# =============================================================================
async def _seed_event(
    *,
    supply: int | dict[ClassType, int] = 5,
    hold_window_minutes: int = 240,
    starts_at: datetime | None = None,
) -> tuple[EventEntity, dict[ClassType, TicketClassEntity]]:
    """Insert one event with all three ticket classes."""
    starts_at = starts_at or datetime.now(timezone.utc) + timedelta(days=7)
    event = EventEntity(
        id=uuid7(),
        name='Integration Night',
        starts_at=starts_at,
        ends_at=starts_at + timedelta(hours=3),
        hold_window_minutes=hold_window_minutes,
    )
    classes = {}
    for class_type, price in DEFAULT_UNIT_PRICES.items():
        class_supply = supply[class_type] if isinstance(supply, dict) else supply
        classes[class_type] = TicketClassEntity(
            id=uuid7(),
            event_id=event.id,
            class_type=class_type,
            total_supply=class_supply,
            remaining=class_supply,
            unit_price=price,
            currency='INR',
        )

    repo = EventCatalogCommandRepoImpl(session_factory=Database().session)
    await repo.create_event_with_classes(event=event, ticket_classes=list(classes.values()))
    return event, classes


# =============================================================================
# Users and tokens
# =============================================================================
@pytest.fixture
def buyer() -> UserEntity:
    return UserEntity(id=1, role=UserRole.USER)


@pytest.fixture
def another_buyer() -> UserEntity:
    return UserEntity(id=2, role=UserRole.USER)


@pytest.fixture
def organizer() -> UserEntity:
    return UserEntity(id=100, role=UserRole.ORGANIZER)


@pytest.fixture
def admin() -> UserEntity:
    return UserEntity(id=900, role=UserRole.ADMIN)


def _auth_headers(user: UserEntity) -> dict[str, str]:
    return {'Authorization': f'Bearer {JwtAuth().create_jwt_token(user)}'}


@pytest.fixture
def seed_event():
    """Async helper: `event, classes = await seed_event(supply=5)`."""
    return _seed_event


@pytest.fixture
def auth_headers():
    return _auth_headers
