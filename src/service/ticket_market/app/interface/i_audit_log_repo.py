from abc import ABC, abstractmethod
from uuid import UUID

from src.service.ticket_market.domain.entity.audit_entry_entity import AuditEntryEntity


class IAuditLogRepo(ABC):
    """Append-only: entries are inserted, never updated or deleted."""

    @abstractmethod
    async def append(self, *, entry: AuditEntryEntity) -> None:
        pass

    @abstractmethod
    async def list_for_ticket(self, *, ticket_id: UUID) -> list[AuditEntryEntity]:
        pass
