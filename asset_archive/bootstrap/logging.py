"""Bootstrap wiring for logging configuration."""

from __future__ import annotations

import os

from asset_archive.infrastructure.observability import (
    configure_structlog as _configure_structlog,
)

ENVIRONMENT_ENV = "ENVIRONMENT"


def configure_logging(environment: str | None = None) -> str:
    """Configure structlog for the given (or ENVIRONMENT) environment.

    Returns:
        The environment that was applied.
    """
    resolved = environment or os.getenv(ENVIRONMENT_ENV, "development")
    _configure_structlog(environment=resolved)
    return resolved


__all__ = ["configure_logging"]
