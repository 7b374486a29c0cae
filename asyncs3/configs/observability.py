"""Observability config."""

import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def otlp_endpoint_configured() -> bool:
    """Whether an OTLP exporter endpoint is configured in the environment."""
    return "OTEL_EXPORTER_OTLP_ENDPOINT" in os.environ


class ObservabilityConfig(BaseSettings):
    """Observability configuration of applications using the S3 client.

    Attributes:
        service_namespace (str): The namespace of the service. Defaults to "asyncs3".
        enable_otel_tracer (bool): Whether to export spans over OTLP.
            Defaults to whether "OTEL_EXPORTER_OTLP_ENDPOINT" is set.
        enable_console_tracer (bool): Whether to print spans to the console. Defaults to False.
        enable_otel_logs (bool): Whether to export log records over OTLP.
            Defaults to whether "OTEL_EXPORTER_OTLP_ENDPOINT" is set.
        enable_console_logs (bool): Whether to print log records to the console. Defaults to False.
        suppress_httpx_logs (bool): Whether to raise the httpx and httpcore log level to WARNING.
            Defaults to True.

    """

    model_config = SettingsConfigDict(env_prefix="S3_OBSERVABILITY_", extra="ignore")

    service_namespace: str = "asyncs3"

    enable_otel_tracer: bool = Field(
        default_factory=otlp_endpoint_configured, description="Whether to export spans over OTLP."
    )
    enable_console_tracer: bool = Field(default=False, description="Whether to print spans to the console.")

    enable_otel_logs: bool = Field(
        default_factory=otlp_endpoint_configured, description="Whether to export log records over OTLP."
    )
    enable_console_logs: bool = Field(default=False, description="Whether to print log records to the console.")

    suppress_httpx_logs: bool = Field(default=True, description="Whether to suppress the httpx logs.")
