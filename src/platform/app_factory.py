"""
Shared FastAPI App Factory

Builds the ticket market app for production (src/service/ticket_market/main.py)
and tests (test/test_main.py); only the lifespan differs.
"""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from typing import Any

from fastapi import APIRouter, FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from src.platform.config.core_setting import settings
from src.platform.database.orm_db_setting import Database
from src.platform.exception.exception_handlers import register_exception_handlers
from src.platform.observability.tracing import TracingConfig
from src.service.ticket_market.driving_adapter.http_controller import (
    admin_controller,
    payment_controller,
    resale_controller,
    ticket_controller,
)


# (router, prefix, tag)
API_ROUTERS: tuple[tuple[APIRouter, str, str], ...] = (
    (ticket_controller.router, '/api/ticket', 'ticket'),
    (payment_controller.router, '/api/payment', 'payment'),
    (resale_controller.router, '/api/resale', 'resale'),
    (admin_controller.router, '/api/admin', 'admin'),
)


def create_app(
    *,
    lifespan: Callable[[FastAPI], AbstractAsyncContextManager[Any]],
    title_suffix: str = '',
    description: str = 'Ticket Market: reservations, payment reconciliation, resale and gate check-in',
    service_name: str = 'ticket-market-service',
) -> FastAPI:
    """
    Create a configured FastAPI application.

    Args:
        lifespan: Async context manager for app lifespan (startup/shutdown)
        title_suffix: Optional suffix for app title (e.g., " (Test)")
        description: App description
        service_name: Service name for tracing
    """
    app = FastAPI(
        title=f'{settings.PROJECT_NAME}{title_suffix}',
        description=description,
        version=settings.VERSION,
        lifespan=lifespan,
    )

    # Must run before routes are mounted
    TracingConfig(service_name=service_name).instrument_fastapi(app=app)

    app.add_middleware(
        CORSMiddleware,  # type: ignore
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )

    register_exception_handlers(app)

    for router, prefix, tag in API_ROUTERS:
        app.include_router(router, prefix=prefix, tags=[tag])

    _register_common_endpoints(app)

    return app


def _register_common_endpoints(app: FastAPI) -> None:
    database = Database()

    @app.get('/health')
    async def health_check() -> dict[str, str]:
        """Liveness: the process is serving requests."""
        return {'status': 'healthy', 'service': settings.PROJECT_NAME}

    @app.get('/health/ready')
    async def readiness_check() -> JSONResponse:
        """Readiness: the database answers."""
        if await database.ping():
            return JSONResponse({'status': 'ready', 'database': 'ok'})
        return JSONResponse(
            {'status': 'unavailable', 'database': 'unreachable'},
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    @app.get('/metrics')
    async def get_metrics() -> PlainTextResponse:
        return PlainTextResponse(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
