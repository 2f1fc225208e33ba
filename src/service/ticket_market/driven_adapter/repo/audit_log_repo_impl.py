from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.ticket_market.app.interface.i_audit_log_repo import IAuditLogRepo
from src.service.ticket_market.domain.entity.audit_entry_entity import AuditEntryEntity
from src.service.ticket_market.driven_adapter.model.audit_entry_model import AuditEntryModel
from src.service.ticket_market.driven_adapter.repo.model_mapper import audit_entry_to_entity


class AuditLogRepoImpl(IAuditLogRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @Logger.io
    async def append(self, *, entry: AuditEntryEntity) -> None:
        self.session.add(
            AuditEntryModel(
                id=entry.id,
                ticket_id=entry.ticket_id,
                actor_id=entry.actor_id,
                action=entry.action.value,
                external_payment_id=entry.external_payment_id,
                timestamp=entry.timestamp,
            )
        )
        await self.session.flush()

    @Logger.io
    async def list_for_ticket(self, *, ticket_id: UUID) -> list[AuditEntryEntity]:
        result = await self.session.execute(
            select(AuditEntryModel)
            .where(AuditEntryModel.ticket_id == ticket_id)
            .order_by(AuditEntryModel.timestamp, AuditEntryModel.id)
        )
        return [audit_entry_to_entity(model) for model in result.scalars().all()]
