"""Observability setup for applications using the S3 client."""

import logging
import uuid
from typing import Self

from opentelemetry import _logs as logs
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor, ConsoleLogExporter
from opentelemetry.sdk.resources import SERVICE_INSTANCE_ID, SERVICE_NAME, SERVICE_NAMESPACE, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from sentry_sdk.integrations.opentelemetry import SentrySpanProcessor

from asyncs3.configs.observability import ObservabilityConfig

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [trace_id=%(otelTraceID)s span_id=%(otelSpanID)s] %(message)s"


class ObservabilitySetupper:
    """Observability setupper.

    Example:
        ```python
        ObservabilitySetupper(service_name="uploader").setup_logging().setup_tracing().instrument_httpx()
        ```

    """

    def __init__(
        self,
        config: ObservabilityConfig | None = None,
        service_name: str | None = None,
    ) -> None:
        """Initialize the observability setupper.

        Args:
            config: The observability config.
                If None, the config is read from the environment.
            service_name: The name of the service to create the resource with.
                The resource itself can be overwritten with `ObservabilitySetupper.with_resource`.

        """
        self._config = config or ObservabilityConfig()
        self._resource = Resource.create(
            attributes={SERVICE_INSTANCE_ID: str(uuid.uuid4())}
            | ({SERVICE_NAMESPACE: self._config.service_namespace} if self._config.service_namespace else {})
            | ({SERVICE_NAME: service_name} if service_name else {})
        )

        self._logger_provider: LoggerProvider | None = None
        self._tracer_provider: TracerProvider | None = None

    def instrument_httpx(self) -> Self:
        """Instrument httpx, which carries every S3 request."""
        HTTPXClientInstrumentor().instrument()

        logger.info("httpx has been instrumented")

        if self._config.suppress_httpx_logs:
            logging.getLogger("httpx").setLevel(logging.WARNING)
            logging.getLogger("httpcore").setLevel(logging.WARNING)
            logger.info("httpx logs have been suppressed")

        return self

    def with_resource(self, resource: Resource) -> Self:
        """Set the resource for the observability.

        Args:
            resource: The resource to use for the observability.

        """
        self._resource = resource
        return self

    def get_resource(self) -> Resource:
        """Get the resource for the observability."""
        return self._resource

    def setup_logging(self, level: int = logging.INFO, formatter: logging.Formatter | None = None) -> Self:
        """Setup logging.

        Replaces the handlers of the root logger with a console handler and an OpenTelemetry handler,
        and sets the root level.

        Args:
            level: The level of the root logger. Defaults to `logging.INFO`.
            formatter: The formatter of the console handler.
                If None, a formatter printing the trace and span ids is used.

        """
        LoggingInstrumentor().instrument()

        root_logger = logging.getLogger()
        root_logger.setLevel(level)

        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter or logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(console_handler)

        logger_provider = LoggerProvider(resource=self._resource)

        if self._config.enable_console_logs:
            logger_provider.add_log_record_processor(BatchLogRecordProcessor(ConsoleLogExporter()))
            logger.info("Enabled console logs exporter")

        if self._config.enable_otel_logs:
            logger_provider.add_log_record_processor(BatchLogRecordProcessor(OTLPLogExporter()))
            logger.info("Enabled opentelemetry logs exporter")

        logs.set_logger_provider(logger_provider)

        self._logger_provider = logger_provider

        root_logger.addHandler(LoggingHandler(logger_provider=logger_provider))

        logger.info("Logging has been setup")

        return self

    def get_logger_provider(self) -> LoggerProvider | None:
        """Get the logger provider, or None if logging has not been setup."""
        return self._logger_provider

    def setup_tracing(self) -> Self:
        """Setup tracing.

        Spans of S3 operations go to Sentry, and to the console and OTLP exporters enabled in the config.
        """
        tracer_provider = TracerProvider(resource=self._resource)
        tracer_provider.add_span_processor(SentrySpanProcessor())

        if self._config.enable_console_tracer:
            tracer_provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
            logger.info("Enabled console span exporter")

        if self._config.enable_otel_tracer:
            tracer_provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter()))
            logger.info("Enabled opentelemetry span exporter")

        trace.set_tracer_provider(tracer_provider)

        self._tracer_provider = tracer_provider

        logger.info("Tracing has been setup")

        return self

    def get_tracer_provider(self) -> TracerProvider | None:
        """Get the tracer provider, or None if tracing has not been setup."""
        return self._tracer_provider
