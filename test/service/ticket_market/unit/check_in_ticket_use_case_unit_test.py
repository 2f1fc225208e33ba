"""Unit tests for CheckInTicketUseCase."""

from datetime import timedelta

import attrs
import pytest

from src.platform.exception.exceptions import (
    AuthorizationError,
    ConflictError,
    ConflictReason,
    NotFoundError,
)
from src.service.ticket_market.app.command.check_in_ticket_use_case import CheckInTicketUseCase
from src.service.ticket_market.domain.admission_policy import AdmissionPolicy
from src.service.ticket_market.domain.entity.user_entity import UserEntity, UserRole
from src.service.ticket_market.domain.enum.audit_action import AuditAction
from src.service.ticket_market.domain.enum.ticket_status import TicketStatus


AGENT = UserEntity(id=100, role=UserRole.ORGANIZER)


@pytest.fixture
def use_case(uow_factory) -> CheckInTicketUseCase:
    return CheckInTicketUseCase(uow_factory=uow_factory, admission_policy=AdmissionPolicy())


@pytest.mark.unit
class TestCheckInTicketUseCase:
    @pytest.mark.asyncio
    async def test_active_ticket_is_marked_used(
        self, use_case: CheckInTicketUseCase, fake_uow, build, catalog
    ) -> None:
        # Arrange
        event, ticket_class = catalog
        ticket = build.ticket(event, ticket_class, owner_id=1, status=TicketStatus.ACTIVE)
        fake_uow.ticket_command_repo.get_by_qr_token.return_value = ticket
        fake_uow.ticket_command_repo.transition.return_value = True
        fake_uow.event_catalog_repo.get_event.return_value = event

        # Act
        result = await use_case.check_in(agent=AGENT, qr_token=ticket.qr_token)

        # Assert
        assert result.status == TicketStatus.USED
        transition_kwargs = fake_uow.ticket_command_repo.transition.await_args.kwargs
        assert transition_kwargs['to_status'] == TicketStatus.USED
        assert transition_kwargs['owner_id'] == 1
        assert fake_uow.audited_actions() == [AuditAction.CHECK_IN, AuditAction.GATE_VERIFY]
        actors = [c.kwargs['entry'].actor_id for c in fake_uow.audit_log_repo.append.await_args_list]
        assert actors == [1, AGENT.id]
        fake_uow.resale_listing_command_repo.cancel_open_for_ticket.assert_not_awaited()
        assert fake_uow.commits == 1

    @pytest.mark.asyncio
    async def test_listed_ticket_check_in_cancels_listing(
        self, use_case: CheckInTicketUseCase, fake_uow, build, catalog
    ) -> None:
        event, ticket_class = catalog
        ticket = build.ticket(event, ticket_class, status=TicketStatus.FOR_SALE)
        fake_uow.ticket_command_repo.get_by_qr_token.return_value = ticket
        fake_uow.ticket_command_repo.transition.return_value = True
        fake_uow.event_catalog_repo.get_event.return_value = event

        await use_case.check_in(agent=AGENT, qr_token=ticket.qr_token)

        fake_uow.resale_listing_command_repo.cancel_open_for_ticket.assert_awaited_once_with(
            ticket_id=ticket.id
        )

    @pytest.mark.asyncio
    async def test_used_ticket_is_accepted_without_side_effects(
        self, use_case: CheckInTicketUseCase, fake_uow, build, catalog
    ) -> None:
        event, ticket_class = catalog
        ticket = build.ticket(event, ticket_class, status=TicketStatus.USED)
        fake_uow.ticket_command_repo.get_by_qr_token.return_value = ticket

        result = await use_case.check_in(agent=AGENT, qr_token=ticket.qr_token)

        assert result.status == TicketStatus.USED
        fake_uow.ticket_command_repo.transition.assert_not_awaited()
        fake_uow.audit_log_repo.append.assert_not_awaited()
        assert fake_uow.commits == 0

    @pytest.mark.asyncio
    async def test_returned_ticket_is_not_redeemable(
        self, use_case: CheckInTicketUseCase, fake_uow, build, catalog
    ) -> None:
        event, ticket_class = catalog
        ticket = build.ticket(event, ticket_class, status=TicketStatus.RETURNED)
        fake_uow.ticket_command_repo.get_by_qr_token.return_value = ticket

        with pytest.raises(ConflictError) as exc_info:
            await use_case.check_in(agent=AGENT, qr_token=ticket.qr_token)

        assert exc_info.value.reason == ConflictReason.NOT_REDEEMABLE

    @pytest.mark.asyncio
    async def test_transition_lost_to_concurrent_check_in_succeeds(
        self, use_case: CheckInTicketUseCase, fake_uow, build, catalog
    ) -> None:
        # Arrange
        event, ticket_class = catalog
        ticket = build.ticket(event, ticket_class, status=TicketStatus.ACTIVE)
        redeemed_elsewhere = attrs.evolve(ticket, status=TicketStatus.USED)
        fake_uow.ticket_command_repo.get_by_qr_token.side_effect = [ticket, redeemed_elsewhere]
        fake_uow.ticket_command_repo.transition.return_value = False
        fake_uow.event_catalog_repo.get_event.return_value = event

        # Act
        result = await use_case.check_in(agent=AGENT, qr_token=ticket.qr_token)

        # Assert
        assert result.status == TicketStatus.USED
        fake_uow.audit_log_repo.append.assert_not_awaited()
        assert fake_uow.commits == 0

    @pytest.mark.asyncio
    async def test_transition_lost_to_refund_is_not_redeemable(
        self, use_case: CheckInTicketUseCase, fake_uow, build, catalog
    ) -> None:
        event, ticket_class = catalog
        ticket = build.ticket(event, ticket_class, status=TicketStatus.ACTIVE)
        returned = attrs.evolve(ticket, status=TicketStatus.RETURNED)
        fake_uow.ticket_command_repo.get_by_qr_token.side_effect = [ticket, returned]
        fake_uow.ticket_command_repo.transition.return_value = False
        fake_uow.event_catalog_repo.get_event.return_value = event

        with pytest.raises(ConflictError) as exc_info:
            await use_case.check_in(agent=AGENT, qr_token=ticket.qr_token)

        assert exc_info.value.reason == ConflictReason.NOT_REDEEMABLE
        assert fake_uow.commits == 0

    @pytest.mark.asyncio
    async def test_outside_admission_window_is_refused(
        self, fake_uow, uow_factory, build, catalog
    ) -> None:
        event, ticket_class = catalog
        ticket = build.ticket(event, ticket_class, status=TicketStatus.ACTIVE)
        fake_uow.ticket_command_repo.get_by_qr_token.return_value = ticket
        fake_uow.event_catalog_repo.get_event.return_value = event
        # Event starts tomorrow; window opens one hour before
        use_case = CheckInTicketUseCase(
            uow_factory=uow_factory,
            admission_policy=AdmissionPolicy(enabled=True, opens_before=timedelta(hours=1)),
        )

        with pytest.raises(ConflictError) as exc_info:
            await use_case.check_in(agent=AGENT, qr_token=ticket.qr_token)

        assert exc_info.value.reason == ConflictReason.NOT_REDEEMABLE
        fake_uow.ticket_command_repo.transition.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_qr_is_not_found(self, use_case: CheckInTicketUseCase, fake_uow) -> None:
        fake_uow.ticket_command_repo.get_by_qr_token.return_value = None

        with pytest.raises(NotFoundError):
            await use_case.check_in(agent=AGENT, qr_token='forged')

    @pytest.mark.asyncio
    async def test_regular_user_cannot_check_in(
        self, use_case: CheckInTicketUseCase, fake_uow
    ) -> None:
        with pytest.raises(AuthorizationError):
            await use_case.check_in(agent=UserEntity(id=1), qr_token='anything')

        fake_uow.ticket_command_repo.get_by_qr_token.assert_not_awaited()
