"""Logging and tracing setup for the portal."""

from __future__ import annotations

import logging
from logging.config import dictConfig
from typing import Any

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from supportdesk import __version__
from supportdesk.core.config import Settings

_active_provider: TracerProvider | None = None


def _level(name: str | None, fallback: int) -> int:
    if not name:
        return fallback
    return getattr(logging, name.upper(), fallback)


def logging_config(settings: Settings) -> dict[str, Any]:
    """Build the ``dictConfig`` mapping for the application loggers.

    The store gets its own level so rejected mutations (logged at WARNING)
    can stay visible while the rest of the app runs quieter or louder.
    """

    app_level = _level(settings.log_level, logging.INFO)
    store_level = _level(settings.store_log_level, app_level)
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": settings.log_format},
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
            }
        },
        "loggers": {
            "supportdesk": {"level": app_level},
            "supportdesk.store": {"level": store_level},
        },
        "root": {"handlers": ["default"], "level": app_level},
    }


def configure_logging(settings: Settings) -> logging.Logger:
    """Apply :func:`logging_config` and return the application logger."""

    dictConfig(logging_config(settings))
    return logging.getLogger("supportdesk")


def parse_headers(header_string: str | None) -> dict[str, str]:
    """Parse ``key=value`` pairs separated by commas into OTLP headers."""

    if not header_string:
        return {}
    headers: dict[str, str] = {}
    for item in header_string.split(","):
        key, sep, value = item.partition("=")
        if sep and key.strip():
            headers[key.strip()] = value.strip()
    return headers


def tracer_resource(settings: Settings) -> Resource:
    return Resource.create(
        {
            "service.name": settings.otel_service_name,
            "service.version": __version__,
            "service.namespace": settings.app_name,
            "deployment.environment": settings.environment,
        }
    )


def init_tracer(settings: Settings) -> TracerProvider | None:
    """Install an OTLP exporting tracer provider when tracing is enabled.

    Store mutations open ``store.<operation>`` spans through the global
    tracer, so they are exported once this provider is installed.
    """

    global _active_provider

    if _active_provider is not None or not settings.otel_enabled:
        return None

    exporter = OTLPSpanExporter(
        endpoint=settings.otel_exporter_otlp_endpoint,
        headers=parse_headers(settings.otel_exporter_otlp_headers) or None,
    )
    provider = TracerProvider(resource=tracer_resource(settings))
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)
    _active_provider = provider
    return provider


def shutdown_tracer(provider: TracerProvider | None) -> None:
    global _active_provider

    if provider is None:
        return
    provider.shutdown()
    if provider is _active_provider:
        _active_provider = None
