"""
Ticket Market Service - Main Application
Handles ticket holds, payment reconciliation, resale and gate check-in.
"""

from contextlib import asynccontextmanager

import anyio
from fastapi import FastAPI

from src.platform.app_factory import create_app
from src.platform.config.core_setting import settings
from src.platform.config.di import container
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.database.orm_db_setting import dispose_engine, get_engine
from src.platform.logging.loguru_io import Logger
from src.platform.observability.tracing import TracingConfig
from src.service.ticket_market.driving_adapter.scheduler.expiry_reaper import ExpiryReaper


SERVICE_NAME = 'ticket-market-service'


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Manage application lifespan: startup and shutdown"""
    Logger.base.info('🚀 [Ticket Market] Starting up...')

    tracing = TracingConfig(service_name=SERVICE_NAME)
    tracing.setup()
    tracing.instrument_sqlalchemy(engine=get_engine())
    Logger.base.info('📊 [Ticket Market] OpenTelemetry tracing configured')

    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [Ticket Market] Dependency injection wired')

    background_tasks = anyio.create_task_group()
    await background_tasks.__aenter__()

    # Fire-and-forget work (activation hook) runs on this group
    container.background_task_group.override(background_tasks)
    Logger.base.info('🔧 [Ticket Market] Background task group configured')

    if settings.ENABLE_EXPIRY_REAPER:
        background_tasks.start_soon(ExpiryReaper().run_forever)
        Logger.base.info('⏳ [Ticket Market] Expiry reaper started')
    else:
        Logger.base.info('⏭️  [Ticket Market] Expiry reaper disabled (ENABLE_EXPIRY_REAPER=false)')

    Logger.base.info('✅ [Ticket Market] Startup complete')

    yield

    Logger.base.info('🛑 [Ticket Market] Shutting down...')

    background_tasks.cancel_scope.cancel()
    await background_tasks.__aexit__(None, None, None)
    container.background_task_group.reset_override()

    await dispose_engine()
    Logger.base.info('🗄️ [Ticket Market] Database engine disposed')

    tracing.shutdown()
    container.unwire()

    Logger.base.info('👋 [Ticket Market] Shutdown complete')


app = create_app(lifespan=lifespan, service_name=SERVICE_NAME)
