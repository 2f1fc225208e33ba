"""
Test-specific FastAPI Application

No expiry reaper and no background task group: the activation hook is
delivered inline (and skipped, since no hook URL is configured).
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.platform.app_factory import create_app
from src.platform.config.di import container
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.database.orm_db_setting import create_db_and_tables, dispose_engine
from src.platform.logging.loguru_io import Logger


@asynccontextmanager
async def lifespan_for_tests(app: FastAPI) -> AsyncIterator[None]:
    Logger.base.info('🧪 [Test App] Starting up...')

    await create_db_and_tables()
    container.wire(modules=WIRE_MODULES)
    container.background_task_group.override(None)

    Logger.base.info('✅ [Test App] Startup complete (no reaper, inline hooks)')

    yield

    container.background_task_group.reset_override()
    await dispose_engine()
    container.unwire()
    Logger.base.info('👋 [Test App] Shutdown complete')


app = create_app(
    lifespan=lifespan_for_tests,
    title_suffix=' (Test)',
    description='Test Application - no background tasks',
    service_name='test-ticket-market-service',
)
