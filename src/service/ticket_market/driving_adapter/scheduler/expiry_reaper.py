"""
Expiry Reaper

Periodically returns expired, unpaid holds to inventory. Runs inside the app
lifespan task group; cancelling the group stops it.
"""

import anyio

from src.platform.config.core_setting import settings
from src.platform.database.unit_of_work import SqlAlchemyUnitOfWork
from src.platform.logging.loguru_io import Logger
from src.service.ticket_market.app.command.release_expired_holds_use_case import (
    ReleaseExpiredHoldsUseCase,
)


class ExpiryReaper:
    def __init__(
        self,
        *,
        use_case: ReleaseExpiredHoldsUseCase | None = None,
        interval_seconds: float | None = None,
    ) -> None:
        self.use_case = use_case or ReleaseExpiredHoldsUseCase(uow_factory=SqlAlchemyUnitOfWork)
        self.interval_seconds = interval_seconds or settings.EXPIRY_SWEEP_INTERVAL_SECONDS

    async def run_once(self) -> int:
        try:
            return await self.use_case.release_expired()
        except Exception as e:
            # A failed sweep must not stop the loop
            Logger.base.error(f'❌ [REAPER] Sweep failed: {type(e).__name__}: {e}')
            return 0

    async def run_forever(self) -> None:
        Logger.base.info(f'⏳ [REAPER] Started, sweeping every {self.interval_seconds}s')
        try:
            while True:
                await self.run_once()
                await anyio.sleep(self.interval_seconds)
        except anyio.get_cancelled_exc_class():
            Logger.base.info('🛑 [REAPER] Stopped')
            raise
