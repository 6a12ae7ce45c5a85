"""Structured logging configuration with structlog.

Production emits one JSON object per line; every other environment gets
the colored console renderer. The level comes from LOG_LEVEL.

Log entry format (production):
    {
        "timestamp": "2026-04-24T00:00:00.000000Z",
        "level": "info",
        "event": "archive_executed",
        "correlation_id": "uuid",
        "service": "asset-archive",
        ...event context
    }

Usage:
    from asset_archive.infrastructure.observability import configure_structlog

    configure_structlog(environment="production")
"""

import logging
import os
from typing import Any, cast

import structlog
from structlog.typing import Processor

from asset_archive.infrastructure.observability.correlation import (
    correlation_id_processor,
)

LOG_LEVEL_ENV = "LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"
SERVICE_NAME_ENV = "SERVICE_NAME"
DEFAULT_SERVICE_NAME = "asset-archive"


def _get_log_level() -> int:
    level_name = os.getenv(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).upper()
    return getattr(logging, level_name, logging.INFO)


def _service_processor(service_name: str) -> Processor:
    def add_service(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        event_dict.setdefault("service", service_name)
        return event_dict

    return cast(Processor, add_service)


def configure_structlog(
    environment: str = "production",
    service_name: str | None = None,
) -> None:
    """Configure structlog once at process startup.

    Args:
        environment: "production" for JSON output, anything else for console.
        service_name: Value of the service field; SERVICE_NAME env var or
            "asset-archive" when omitted.
    """
    service = service_name or os.getenv(SERVICE_NAME_ENV, DEFAULT_SERVICE_NAME)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        cast(Processor, correlation_id_processor),
        _service_processor(service),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if environment == "production":
        final_processor: Processor = structlog.processors.JSONRenderer()
    else:
        final_processor = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared_processors + [final_processor],
        wrapper_class=structlog.make_filtering_bound_logger(_get_log_level()),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
