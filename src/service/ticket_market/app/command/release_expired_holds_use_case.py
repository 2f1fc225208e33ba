from datetime import datetime, timezone
import time
from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticket_market_metrics import metrics
from src.service.ticket_market.domain.authorization import Action, authorize
from src.service.ticket_market.domain.entity.audit_entry_entity import AuditEntryEntity
from src.service.ticket_market.domain.entity.ticket_entity import TicketEntity
from src.service.ticket_market.domain.entity.user_entity import UserEntity
from src.service.ticket_market.domain.enum.audit_action import AuditAction


class ReleaseExpiredHoldsUseCase:
    """
    Return unpaid, expired holds to inventory.

    Each candidate gets its own unit: CAS held -> expired (still guarded by
    hold_expires_at < now), ledger release, audit Expire. A ticket paid in the
    meantime loses nothing: its CAS simply matches no row.
    """

    def __init__(self, *, uow_factory: UnitOfWorkFactory, batch_size: int | None = None) -> None:
        self.uow_factory = uow_factory
        self.batch_size = batch_size or settings.EXPIRY_SWEEP_BATCH_SIZE
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.unit_of_work.provider]),
    ) -> Self:
        return cls(uow_factory=uow_factory)

    @Logger.io
    async def release_expired(self, *, now: Optional[datetime] = None) -> int:
        now = now or datetime.now(timezone.utc)
        started = time.perf_counter()

        with self.tracer.start_as_current_span('use_case.release_expired_holds') as span:
            async with self.uow_factory() as uow:
                candidates = await uow.ticket_command_repo.find_expired_holds(
                    now=now, limit=self.batch_size
                )

            reclaimed = 0
            for ticket in candidates:
                try:
                    if await self._expire_one(ticket=ticket, now=now):
                        reclaimed += 1
                except Exception as e:
                    Logger.base.error(f'❌ [EXPIRY] Failed to release ticket {ticket.id}: {e}')

            span.set_attribute('expiry.candidates', len(candidates))
            span.set_attribute('expiry.reclaimed', reclaimed)
            metrics.record_expiry_sweep(reclaimed=reclaimed, duration=time.perf_counter() - started)
            if reclaimed:
                Logger.base.info(f'⏳ [EXPIRY] Reclaimed {reclaimed}/{len(candidates)} holds')
            return reclaimed

    @Logger.io
    async def release_expired_on_demand(self, *, actor: UserEntity) -> int:
        authorize(actor, None, Action.RELEASE_EXPIRED)
        Logger.base.info(f'🧹 [EXPIRY] Sweep triggered by admin {actor.id}')
        return await self.release_expired()

    async def _expire_one(self, *, ticket: TicketEntity, now: datetime) -> bool:
        async with self.uow_factory() as uow:
            if not await uow.ticket_command_repo.expire_held(ticket_id=ticket.id, now=now):
                return False
            await uow.inventory_ledger.release(ticket_class_id=ticket.ticket_class_id)
            await uow.audit_log_repo.append(
                entry=AuditEntryEntity.record(
                    ticket_id=ticket.id, actor_id=ticket.owner_id, action=AuditAction.EXPIRE
                )
            )
            await uow.commit()
        return True
