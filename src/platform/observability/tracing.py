"""
OpenTelemetry tracing for the ticket market service.

- One TracerProvider per process, configured from Settings (OTLP endpoint,
  console export, sampling ratio)
- FastAPI and SQLAlchemy auto-instrumentation
- W3C traceparent injection for the outbound activation hook
- Trace id lookup for log correlation

Use cases create their own spans with trace.get_tracer(__name__).
"""

from typing import Any

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.propagate import inject
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.trace.sampling import ALWAYS_ON, ParentBased, Sampler, TraceIdRatioBased

from src.platform.config.core_setting import settings


def _sampler(ratio: float) -> Sampler:
    # Error-preserving tail sampling is configured in the collector
    if ratio >= 1.0:
        return ALWAYS_ON
    return ParentBased(root=TraceIdRatioBased(ratio))


class TracingConfig:
    """
    Usage:
        tracing = TracingConfig(service_name='ticket-market-service')
        tracing.setup()
        tracing.instrument_sqlalchemy(engine=get_engine())
        ...
        tracing.shutdown()
    """

    def __init__(
        self,
        *,
        service_name: str,
        otlp_endpoint: str | None = None,
        enable_console: bool | None = None,
        sample_ratio: float | None = None,
    ) -> None:
        self.service_name = service_name
        self.otlp_endpoint = otlp_endpoint or settings.OTEL_EXPORTER_OTLP_ENDPOINT
        self.enable_console = (
            settings.OTEL_CONSOLE_EXPORT if enable_console is None else enable_console
        )
        self.sample_ratio = settings.OTEL_SAMPLE_RATIO if sample_ratio is None else sample_ratio
        self._provider: TracerProvider | None = None

    def setup(self) -> None:
        """
        Install the global TracerProvider.

        Without an OTLP endpoint spans are still created (so trace ids reach
        the logs and the activation hook) but nothing is exported.
        """
        resource = Resource(
            attributes={SERVICE_NAME: self.service_name, SERVICE_VERSION: settings.VERSION}
        )
        self._provider = TracerProvider(resource=resource, sampler=_sampler(self.sample_ratio))

        if self.otlp_endpoint:
            self._provider.add_span_processor(
                BatchSpanProcessor(OTLPSpanExporter(endpoint=self.otlp_endpoint))
            )
        if self.enable_console:
            self._provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

        trace.set_tracer_provider(self._provider)

    def instrument_fastapi(self, *, app: FastAPI, excluded_urls: str = 'health,metrics') -> None:
        FastAPIInstrumentor.instrument_app(app, excluded_urls=excluded_urls)

    def instrument_sqlalchemy(self, *, engine: Any) -> None:
        instrumentor = SQLAlchemyInstrumentor()
        if instrumentor.is_instrumented_by_opentelemetry:
            return
        # AsyncEngine wraps the sync engine the instrumentor hooks into
        instrumentor.instrument(engine=getattr(engine, 'sync_engine', engine))

    def shutdown(self) -> None:
        if self._provider:
            self._provider.shutdown()


def current_trace_id() -> str | None:
    """Short (64-bit) hex trace id of the active span, or None outside a trace."""
    span_context = trace.get_current_span().get_span_context()
    if not span_context.is_valid:
        return None
    return format(span_context.trace_id, '032x')[:16]


def inject_trace_context(*, headers: dict[str, str] | None = None) -> dict[str, str]:
    """
    Inject the current trace context (traceparent) into outbound HTTP headers.

    Usage:
        headers = inject_trace_context(headers={'content-type': 'application/json'})
        await client.post(url, content=body, headers=headers)
    """
    headers = headers or {}
    inject(headers)
    return headers
