"""Composition root for wiring dependencies.

Only bootstrap and workers may import infrastructure and application
together; everything else depends on ports.
"""

from asset_archive.bootstrap.archive_services import (
    ArchiveServices,
    build_archive_services,
    build_archive_services_from_environment,
)
from asset_archive.bootstrap.database import (
    close_database_engine,
    get_database_url,
    get_session_factory,
    reset_database_bootstrap,
)
from asset_archive.bootstrap.logging import configure_logging

__all__: list[str] = [
    "ArchiveServices",
    "build_archive_services",
    "build_archive_services_from_environment",
    "close_database_engine",
    "configure_logging",
    "get_database_url",
    "get_session_factory",
    "reset_database_bootstrap",
]
