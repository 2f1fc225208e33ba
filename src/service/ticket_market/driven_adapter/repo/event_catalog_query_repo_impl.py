"""
Event Catalog Query Repository Implementation

Works standalone (session_factory, one session per call) or inside a
Unit of Work (shared session injected by the UoW).
"""

from contextlib import asynccontextmanager
from typing import AsyncContextManager, AsyncIterator, Callable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.ticket_market.app.interface.i_event_catalog_query_repo import (
    IEventCatalogQueryRepo,
)
from src.service.ticket_market.domain.entity.event_entity import EventEntity, TicketClassEntity
from src.service.ticket_market.domain.enum.class_type import ClassType
from src.service.ticket_market.driven_adapter.model.event_model import EventModel, TicketClassModel
from src.service.ticket_market.driven_adapter.repo.model_mapper import (
    event_to_entity,
    ticket_class_to_entity,
)


class EventCatalogQueryRepoImpl(IEventCatalogQueryRepo):
    def __init__(
        self, session_factory: Callable[..., AsyncContextManager[AsyncSession]] | None = None
    ) -> None:
        self.session_factory = session_factory
        self.session: AsyncSession | None = None

    @asynccontextmanager
    async def _get_session(self) -> AsyncIterator[AsyncSession]:
        if self.session is not None:
            yield self.session
        elif self.session_factory is not None:
            async with self.session_factory() as session:
                yield session
        else:
            raise RuntimeError('No session or session_factory available')

    @Logger.io
    async def get_event(self, *, event_id: UUID) -> EventEntity | None:
        async with self._get_session() as session:
            result = await session.execute(
                select(EventModel)
                .where(EventModel.id == event_id)
                .execution_options(populate_existing=True)
            )
            model = result.scalar_one_or_none()
            return event_to_entity(model) if model else None

    @Logger.io
    async def get_ticket_class(
        self, *, event_id: UUID, class_type: ClassType
    ) -> TicketClassEntity | None:
        async with self._get_session() as session:
            result = await session.execute(
                select(TicketClassModel)
                .where(
                    TicketClassModel.event_id == event_id,
                    TicketClassModel.class_type == class_type.value,
                )
                .execution_options(populate_existing=True)
            )
            model = result.scalar_one_or_none()
            return ticket_class_to_entity(model) if model else None

    @Logger.io
    async def get_ticket_class_by_id(self, *, ticket_class_id: UUID) -> TicketClassEntity | None:
        async with self._get_session() as session:
            result = await session.execute(
                select(TicketClassModel)
                .where(TicketClassModel.id == ticket_class_id)
                .execution_options(populate_existing=True)
            )
            model = result.scalar_one_or_none()
            return ticket_class_to_entity(model) if model else None
