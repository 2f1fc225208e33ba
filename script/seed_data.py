#!/usr/bin/env python3
"""
Database Seed Script
Populate a demo event into the database

Features:
1. Create tables if they don't exist
2. Create Event - one event with Standard / Premium / VIP ticket classes
3. Print bearer tokens for a demo buyer, organizer and admin

Notes:
- Accounts live in another service; tokens only carry user_id + role
- SUPPLY (default 100) sets total_supply for every class
"""

import asyncio
from datetime import datetime, timedelta, timezone
import os

from uuid_utils.compat import uuid7

from src.platform.config.core_setting import settings
from src.platform.database.orm_db_setting import Database, create_db_and_tables, dispose_engine
from src.service.ticket_market.domain.entity.event_entity import EventEntity, TicketClassEntity
from src.service.ticket_market.domain.entity.user_entity import UserEntity, UserRole
from src.service.ticket_market.domain.enum.class_type import ClassType
from src.service.ticket_market.driven_adapter.repo.event_catalog_command_repo_impl import (
    EventCatalogCommandRepoImpl,
)
from src.service.ticket_market.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


CLASS_PRICES = {
    ClassType.STANDARD: 1000,
    ClassType.PREMIUM: 2500,
    ClassType.VIP: 6000,
}

DEMO_USERS = [
    UserEntity(id=1, role=UserRole.USER),
    UserEntity(id=2, role=UserRole.USER),
    UserEntity(id=100, role=UserRole.ORGANIZER),
    UserEntity(id=900, role=UserRole.ADMIN),
]


async def create_event() -> EventEntity:
    supply = int(os.getenv('SUPPLY', '100'))
    starts_at = datetime.now(timezone.utc) + timedelta(days=30)

    event = EventEntity(
        id=uuid7(),
        name='Demo Night',
        starts_at=starts_at,
        ends_at=starts_at + timedelta(hours=4),
        hold_window_minutes=settings.DEFAULT_HOLD_WINDOW_MINUTES,
    )
    ticket_classes = [
        TicketClassEntity(
            id=uuid7(),
            event_id=event.id,
            class_type=class_type,
            total_supply=supply,
            remaining=supply,
            unit_price=price,
            currency=settings.PAYMENT_CURRENCY,
        )
        for class_type, price in CLASS_PRICES.items()
    ]

    repo = EventCatalogCommandRepoImpl(session_factory=Database().session)
    await repo.create_event_with_classes(event=event, ticket_classes=ticket_classes)

    print(f'🎫 Event {event.id} ({event.name}), hold window {event.hold_window_minutes} min')
    for ticket_class in ticket_classes:
        print(
            f'   ✅ {ticket_class.class_type.value}: {ticket_class.total_supply} x '
            f'{ticket_class.unit_price} {ticket_class.currency}'
        )
    return event


def print_tokens() -> None:
    jwt_auth = JwtAuth()
    print('🔑 Bearer tokens:')
    for user in DEMO_USERS:
        print(f'   {user.role.value:<9} id={user.id:<4} {jwt_auth.create_jwt_token(user)}')


async def main() -> None:
    await create_db_and_tables()
    try:
        await create_event()
    finally:
        await dispose_engine()
    print_tokens()


if __name__ == '__main__':
    asyncio.run(main())
