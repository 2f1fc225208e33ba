"""Unit tests for ReleaseExpiredHoldsUseCase and the ExpiryReaper loop wrapper."""

from unittest.mock import AsyncMock

import pytest

from src.platform.exception.exceptions import AuthorizationError
from src.service.ticket_market.app.command.release_expired_holds_use_case import (
    ReleaseExpiredHoldsUseCase,
)
from src.service.ticket_market.domain.entity.user_entity import UserEntity, UserRole
from src.service.ticket_market.domain.enum.audit_action import AuditAction
from src.service.ticket_market.driving_adapter.scheduler.expiry_reaper import ExpiryReaper


@pytest.fixture
def use_case(uow_factory) -> ReleaseExpiredHoldsUseCase:
    return ReleaseExpiredHoldsUseCase(uow_factory=uow_factory, batch_size=50)


@pytest.mark.unit
class TestReleaseExpiredHolds:
    @pytest.mark.asyncio
    async def test_reclaims_each_expired_hold(
        self, use_case: ReleaseExpiredHoldsUseCase, fake_uow, build, catalog
    ) -> None:
        # Arrange
        event, ticket_class = catalog
        tickets = [build.ticket(event, ticket_class, owner_id=owner) for owner in (1, 2)]
        fake_uow.ticket_command_repo.find_expired_holds.return_value = tickets
        fake_uow.ticket_command_repo.expire_held.return_value = True

        # Act
        reclaimed = await use_case.release_expired()

        # Assert
        assert reclaimed == 2
        assert fake_uow.ticket_command_repo.find_expired_holds.await_args.kwargs['limit'] == 50
        assert fake_uow.inventory_ledger.release.await_count == 2
        assert fake_uow.audited_actions() == [AuditAction.EXPIRE, AuditAction.EXPIRE]
        assert fake_uow.commits == 2

    @pytest.mark.asyncio
    async def test_hold_paid_meanwhile_is_skipped(
        self, use_case: ReleaseExpiredHoldsUseCase, fake_uow, build, catalog
    ) -> None:
        event, ticket_class = catalog
        fake_uow.ticket_command_repo.find_expired_holds.return_value = [
            build.ticket(event, ticket_class)
        ]
        fake_uow.ticket_command_repo.expire_held.return_value = False

        assert await use_case.release_expired() == 0
        fake_uow.inventory_ledger.release.assert_not_awaited()
        fake_uow.audit_log_repo.append.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_one_failing_ticket_does_not_stop_the_sweep(
        self, use_case: ReleaseExpiredHoldsUseCase, fake_uow, build, catalog
    ) -> None:
        event, ticket_class = catalog
        fake_uow.ticket_command_repo.find_expired_holds.return_value = [
            build.ticket(event, ticket_class, owner_id=owner) for owner in (1, 2, 3)
        ]
        fake_uow.ticket_command_repo.expire_held.side_effect = [
            True,
            RuntimeError('database hiccup'),
            True,
        ]

        assert await use_case.release_expired() == 2
        assert fake_uow.inventory_ledger.release.await_count == 2

    @pytest.mark.asyncio
    async def test_on_demand_sweep_requires_admin(
        self, use_case: ReleaseExpiredHoldsUseCase, fake_uow
    ) -> None:
        with pytest.raises(AuthorizationError):
            await use_case.release_expired_on_demand(
                actor=UserEntity(id=100, role=UserRole.ORGANIZER)
            )
        fake_uow.ticket_command_repo.find_expired_holds.assert_not_awaited()

        fake_uow.ticket_command_repo.find_expired_holds.return_value = []
        count = await use_case.release_expired_on_demand(
            actor=UserEntity(id=900, role=UserRole.ADMIN)
        )
        assert count == 0


@pytest.mark.unit
class TestExpiryReaper:
    @pytest.mark.asyncio
    async def test_run_once_returns_reclaimed_count(self) -> None:
        use_case = AsyncMock()
        use_case.release_expired.return_value = 3

        assert await ExpiryReaper(use_case=use_case, interval_seconds=1).run_once() == 3

    @pytest.mark.asyncio
    async def test_run_once_survives_a_failed_sweep(self) -> None:
        use_case = AsyncMock()
        use_case.release_expired.side_effect = RuntimeError('database down')

        assert await ExpiryReaper(use_case=use_case, interval_seconds=1).run_once() == 0
