import logging
import os
from dataclasses import dataclass, field

from opentelemetry import metrics, trace
from opentelemetry._logs import set_logger_provider
from opentelemetry.exporter.otlp.proto.http._log_exporter import OTLPLogExporter
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import MetricReader, PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SpanExporter

from .config import Settings

LOGGER_NAME = "vault_lookup"


def _otlp_endpoint(settings: Settings) -> str:
    endpoint = settings.otel_endpoint or os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://otel-collector:4318")
    return endpoint.rstrip("/")


@dataclass
class Telemetry:
    tracer_provider: TracerProvider
    meter_provider: MeterProvider
    logger_provider: LoggerProvider
    log_handler: logging.Handler
    closed: bool = field(default=False, repr=False)

    def shutdown(self) -> None:
        if self.closed:
            return
        self.closed = True
        logging.getLogger(LOGGER_NAME).removeHandler(self.log_handler)
        HTTPXClientInstrumentor().uninstrument()
        LoggingInstrumentor().uninstrument()
        self.tracer_provider.shutdown()
        self.meter_provider.shutdown()
        self.logger_provider.shutdown()


def configure_otel(
    settings: Settings,
    *,
    span_exporter: SpanExporter | None = None,
    metric_reader: MetricReader | None = None,
    log_exporter=None,
) -> Telemetry | None:
    """Send lookup spans, the ``vault_lookup.lookups`` counter and
    ``vault_lookup.*`` log records to an OTLP/HTTP collector.

    Lookups use the global tracer and meter, which stay no-ops until this
    runs. Exporters default to OTLP at ``settings.otel_endpoint`` (or
    ``OTEL_EXPORTER_OTLP_ENDPOINT``).
    """
    if not settings.otel_enabled:
        return None

    endpoint = _otlp_endpoint(settings)
    resource = Resource.create({"service.name": os.getenv("OTEL_SERVICE_NAME", settings.otel_service_name)})

    tracer_provider = TracerProvider(resource=resource)
    tracer_provider.add_span_processor(
        BatchSpanProcessor(span_exporter or OTLPSpanExporter(endpoint=f"{endpoint}/v1/traces"))
    )
    trace.set_tracer_provider(tracer_provider)

    if metric_reader is None:
        metric_reader = PeriodicExportingMetricReader(
            OTLPMetricExporter(endpoint=f"{endpoint}/v1/metrics"),
            export_interval_millis=15000,
        )
    meter_provider = MeterProvider(resource=resource, metric_readers=[metric_reader])
    metrics.set_meter_provider(meter_provider)

    logger_provider = LoggerProvider(resource=resource)
    logger_provider.add_log_record_processor(
        BatchLogRecordProcessor(log_exporter or OTLPLogExporter(endpoint=f"{endpoint}/v1/logs"))
    )
    set_logger_provider(logger_provider)

    LoggingInstrumentor().instrument(set_logging_format=True)
    HTTPXClientInstrumentor().instrument()

    handler = LoggingHandler(level=logging.INFO, logger_provider=logger_provider)
    logging.getLogger(LOGGER_NAME).addHandler(handler)
    return Telemetry(tracer_provider, meter_provider, logger_provider, handler)
