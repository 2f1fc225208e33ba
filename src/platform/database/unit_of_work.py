"""
Unit of Work Pattern - one database transaction per atomic unit

Architecture:
- UoW owns the session lifecycle (open on enter, rollback + close on exit)
- UoW owns commit; anything not committed is rolled back on exit
- Repositories share the UoW session, so every write in the block lands
  in the same transaction
- Use cases receive a UoW factory and open one unit per atomic step
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING, Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.platform.database.orm_db_setting import get_session_maker
from src.platform.exception.exceptions import InternalConsistencyError
from src.platform.logging.loguru_io import Logger


if TYPE_CHECKING:
    from src.service.ticket_market.app.interface.i_audit_log_repo import IAuditLogRepo
    from src.service.ticket_market.app.interface.i_event_catalog_query_repo import (
        IEventCatalogQueryRepo,
    )
    from src.service.ticket_market.app.interface.i_inventory_ledger import IInventoryLedger
    from src.service.ticket_market.app.interface.i_payment_order_command_repo import (
        IPaymentOrderCommandRepo,
    )
    from src.service.ticket_market.app.interface.i_resale_listing_command_repo import (
        IResaleListingCommandRepo,
    )
    from src.service.ticket_market.app.interface.i_ticket_command_repo import ITicketCommandRepo


class AbstractUnitOfWork(abc.ABC):
    """
    Abstract Unit of Work for the Ticket Market

    Responsibilities:
    - Manage database session lifecycle
    - Coordinate one transaction across ledger, ticket, payment, listing and audit writes
    - Provide commit/rollback interface

    Usage:
        async with uow_factory() as uow:
            if not await uow.inventory_ledger.try_reserve(ticket_class_id=...):
                raise ConflictError(...)
            await uow.ticket_command_repo.create(ticket=...)
            await uow.commit()
    """

    inventory_ledger: IInventoryLedger
    event_catalog_repo: IEventCatalogQueryRepo
    ticket_command_repo: ITicketCommandRepo
    payment_order_command_repo: IPaymentOrderCommandRepo
    resale_listing_command_repo: IResaleListingCommandRepo
    audit_log_repo: IAuditLogRepo

    async def __aenter__(self) -> AbstractUnitOfWork:
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    async def commit(self):
        """Commit the transaction"""
        await self._commit()

    @abc.abstractmethod
    async def _commit(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def rollback(self) -> None:
        raise NotImplementedError


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    """
    SQLAlchemy implementation of Unit of Work

    Each `async with` opens a fresh session; the instance may be reused for
    a later unit.
    """

    def __init__(
        self, session_factory: Callable[[], async_sessionmaker[AsyncSession]] = get_session_maker
    ) -> None:
        self.session_factory = session_factory
        self.session: AsyncSession | None = None

    async def __aenter__(self):
        from src.service.ticket_market.driven_adapter.repo.audit_log_repo_impl import (
            AuditLogRepoImpl,
        )
        from src.service.ticket_market.driven_adapter.repo.event_catalog_query_repo_impl import (
            EventCatalogQueryRepoImpl,
        )
        from src.service.ticket_market.driven_adapter.repo.inventory_ledger_impl import (
            InventoryLedgerImpl,
        )
        from src.service.ticket_market.driven_adapter.repo.payment_order_command_repo_impl import (
            PaymentOrderCommandRepoImpl,
        )
        from src.service.ticket_market.driven_adapter.repo.resale_listing_command_repo_impl import (
            ResaleListingCommandRepoImpl,
        )
        from src.service.ticket_market.driven_adapter.repo.ticket_command_repo_impl import (
            TicketCommandRepoImpl,
        )

        self.session = self.session_factory()()

        # Create repositories with shared session
        self.inventory_ledger = InventoryLedgerImpl(session=self.session)
        self.event_catalog_repo = EventCatalogQueryRepoImpl()
        self.event_catalog_repo.session = self.session  # Inject session for UoW mode
        self.ticket_command_repo = TicketCommandRepoImpl(session=self.session)
        self.payment_order_command_repo = PaymentOrderCommandRepoImpl(session=self.session)
        self.resale_listing_command_repo = ResaleListingCommandRepoImpl(session=self.session)
        self.audit_log_repo = AuditLogRepoImpl(session=self.session)

        return await super().__aenter__()

    async def __aexit__(self, *args):
        try:
            await super().__aexit__(*args)
        finally:
            if self.session is not None:
                await self.session.close()
                self.session = None

    async def _commit(self):
        assert self.session is not None, 'commit() called outside of `async with`'
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            Logger.base.error(f'❌ [UoW] Commit failed, unit rolled back: {e}')
            raise InternalConsistencyError('Atomic unit could not be applied; retry') from e

    async def rollback(self) -> None:
        if self.session is not None:
            await self.session.rollback()


UnitOfWorkFactory = Callable[[], AbstractUnitOfWork]
