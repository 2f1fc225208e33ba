from typing import AsyncContextManager, Callable

from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.ticket_market.app.interface.i_event_catalog_command_repo import (
    IEventCatalogCommandRepo,
)
from src.service.ticket_market.domain.entity.event_entity import EventEntity, TicketClassEntity
from src.service.ticket_market.driven_adapter.model.event_model import EventModel, TicketClassModel


class EventCatalogCommandRepoImpl(IEventCatalogCommandRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @Logger.io
    async def create_event_with_classes(
        self, *, event: EventEntity, ticket_classes: list[TicketClassEntity]
    ) -> EventEntity:
        async with self.session_factory() as session:
            session.add(
                EventModel(
                    id=event.id,
                    name=event.name,
                    starts_at=event.starts_at,
                    ends_at=event.ends_at,
                    hold_window_minutes=event.hold_window_minutes,
                )
            )
            await session.flush()
            session.add_all(
                [
                    TicketClassModel(
                        id=ticket_class.id,
                        event_id=event.id,
                        class_type=ticket_class.class_type.value,
                        total_supply=ticket_class.total_supply,
                        remaining=ticket_class.remaining,
                        unit_price=ticket_class.unit_price,
                        currency=ticket_class.currency,
                    )
                    for ticket_class in ticket_classes
                ]
            )
            await session.commit()

        Logger.base.info(
            f'🎫 [CATALOG] Seeded event {event.id} with {len(ticket_classes)} ticket classes'
        )
        return event
