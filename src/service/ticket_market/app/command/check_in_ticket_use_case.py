from datetime import datetime, timezone
from typing import Self

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import (
    ConflictError,
    ConflictReason,
    InternalConsistencyError,
    NotFoundError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticket_market_metrics import metrics
from src.service.ticket_market.domain.admission_policy import AdmissionPolicy
from src.service.ticket_market.domain.authorization import Action, authorize
from src.service.ticket_market.domain.entity.audit_entry_entity import AuditEntryEntity
from src.service.ticket_market.domain.entity.ticket_entity import TicketEntity
from src.service.ticket_market.domain.entity.user_entity import UserEntity
from src.service.ticket_market.domain.enum.audit_action import AuditAction
from src.service.ticket_market.domain.enum.ticket_status import (
    REDEEMABLE_TICKET_STATUSES,
    TicketStatus,
)


class CheckInTicketUseCase:
    """
    Redeem a ticket at the gate by its QR token.

    USED tickets are accepted again without side effects, so a gate that
    retries a scan does not reject the holder. The same holds when two scans
    race: the loser of the ACTIVE|FOR_SALE -> USED transition re-reads the
    ticket and succeeds if the winner redeemed it.
    """

    def __init__(self, *, uow_factory: UnitOfWorkFactory, admission_policy: AdmissionPolicy) -> None:
        self.uow_factory = uow_factory
        self.admission_policy = admission_policy
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.unit_of_work.provider]),
        admission_policy: AdmissionPolicy = Depends(Provide[Container.admission_policy]),
    ) -> Self:
        return cls(uow_factory=uow_factory, admission_policy=admission_policy)

    @Logger.io
    async def check_in(self, *, agent: UserEntity, qr_token: str) -> TicketEntity:
        authorize(agent, None, Action.CHECK_IN)

        with self.tracer.start_as_current_span(
            'use_case.check_in_ticket', attributes={'agent.id': agent.id}
        ) as span:
            async with self.uow_factory() as uow:
                ticket = await uow.ticket_command_repo.get_by_qr_token(qr_token=qr_token)
                if not ticket:
                    raise NotFoundError('Unknown ticket')
                span.set_attribute('ticket.id', str(ticket.id))

                if ticket.status == TicketStatus.USED:
                    metrics.record_check_in(result='already_used')
                    return ticket

                ticket.validate_redeemable()
                event = await uow.event_catalog_repo.get_event(event_id=ticket.event_id)
                if not event:
                    raise InternalConsistencyError('Event missing for ticket')
                self.admission_policy.validate(event=event, now=datetime.now(timezone.utc))

                redeemed = await uow.ticket_command_repo.transition(
                    ticket_id=ticket.id,
                    from_statuses=tuple(REDEEMABLE_TICKET_STATUSES),
                    to_status=TicketStatus.USED,
                    owner_id=ticket.owner_id,
                )
                if not redeemed:
                    # A concurrent scan of the same token won; the holder is admitted
                    current = await uow.ticket_command_repo.get_by_qr_token(qr_token=qr_token)
                    if current and current.status == TicketStatus.USED:
                        metrics.record_check_in(result='already_used')
                        return current
                    raise ConflictError(
                        'Ticket changed state during check-in', ConflictReason.NOT_REDEEMABLE
                    )

                if ticket.status == TicketStatus.FOR_SALE:
                    await uow.resale_listing_command_repo.cancel_open_for_ticket(
                        ticket_id=ticket.id
                    )

                await uow.audit_log_repo.append(
                    entry=AuditEntryEntity.record(
                        ticket_id=ticket.id, actor_id=ticket.owner_id, action=AuditAction.CHECK_IN
                    )
                )
                await uow.audit_log_repo.append(
                    entry=AuditEntryEntity.record(
                        ticket_id=ticket.id, actor_id=agent.id, action=AuditAction.GATE_VERIFY
                    )
                )
                await uow.commit()

            metrics.record_check_in(result='admitted')
            Logger.base.info(f'🚪 [GATE] Ticket {ticket.id} checked in by agent {agent.id}')
            return attrs.evolve(ticket, status=TicketStatus.USED)
