"""
Ticket Activated Publisher Implementation

Hands the activation event to the downstream hook (minting, notifications).
Delivery runs on the app's background task group when one is running, so the
request that activated the ticket never waits on it; failures are logged and
dropped because the sale is already committed.
"""

from typing import Callable, Optional

from anyio.abc import TaskGroup
import httpx
import orjson

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticket_market_metrics import metrics
from src.platform.observability.tracing import inject_trace_context
from src.service.ticket_market.app.interface.i_ticket_activated_publisher import (
    ITicketActivatedPublisher,
)
from src.service.ticket_market.domain.domain_event.ticket_activated_event import (
    TicketActivatedEvent,
)


class TicketActivatedPublisherImpl(ITicketActivatedPublisher):
    def __init__(
        self,
        *,
        task_group_provider: Callable[[], Optional[TaskGroup]] = lambda: None,
        hook_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.task_group_provider = task_group_provider
        self.hook_url = settings.ACTIVATION_HOOK_URL if hook_url is None else hook_url
        self.timeout = timeout or settings.ACTIVATION_HOOK_TIMEOUT_SECONDS
        self.transport = transport

    @Logger.io
    async def publish(self, *, event: TicketActivatedEvent) -> None:
        task_group = self.task_group_provider()
        if task_group is not None:
            task_group.start_soon(self._deliver, event)
            return
        await self._deliver(event)

    async def _deliver(self, event: TicketActivatedEvent) -> None:
        if not self.hook_url:
            Logger.base.info(
                f'🪙 [ACTIVATED] ticket={event.ticket_id} buyer={event.buyer_id} (no hook configured)'
            )
            metrics.record_activation_hook(result='skipped')
            return

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    self.hook_url,
                    content=orjson.dumps(event.to_payload()),
                    headers=inject_trace_context(headers={'content-type': 'application/json'}),
                )
                response.raise_for_status()
            metrics.record_activation_hook(result='delivered')
            Logger.base.info(f'🪙 [ACTIVATED] Delivered activation for ticket {event.ticket_id}')
        except httpx.HTTPError as e:
            metrics.record_activation_hook(result='failed')
            Logger.base.error(f'❌ [ACTIVATED] Hook delivery failed for {event.ticket_id}: {e}')
