"""Bounded access to the blocking file store.

FileStoreProtocol methods block on disk or network I/O. Everything in the
application layer reaches them through run_file_io so a slow mount can
delay an operation by at most the configured timeout.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import TypeVar

from structlog import get_logger

from asset_archive.application.ports.file_store import FileStoreProtocol
from asset_archive.domain.models.archive_record import SourceLocator

logger = get_logger(__name__)

T = TypeVar("T")


class FileIOTimeoutError(Exception):
    """Raised when a file store call exceeds its timeout."""

    def __init__(self, operation: str, timeout_seconds: float) -> None:
        self.operation = operation
        self.timeout_seconds = timeout_seconds
        super().__init__(f"File {operation} timed out after {timeout_seconds}s")


async def run_file_io(
    operation: str,
    func: Callable[..., T],
    *args: object,
    timeout_seconds: float,
) -> T:
    """Run a blocking file store call in a worker thread with a timeout.

    Args:
        operation: Short name used in errors and logs (resolve, exists, ...).
        func: The blocking callable.
        *args: Positional arguments for func.
        timeout_seconds: Upper bound on the call.

    Returns:
        Whatever func returns.

    Raises:
        FileIOTimeoutError: If the call does not finish in time.
    """
    try:
        return await asyncio.wait_for(
            asyncio.to_thread(func, *args), timeout=timeout_seconds
        )
    except asyncio.TimeoutError:
        raise FileIOTimeoutError(operation, timeout_seconds) from None


async def resolve_existing(
    file_store: FileStoreProtocol,
    locator: SourceLocator,
    timeout_seconds: float,
) -> str | None:
    """Resolve a locator and return the path only if the file exists.

    A timeout counts as missing.
    """
    try:
        resolved = await run_file_io(
            "resolve", file_store.resolve, locator, timeout_seconds=timeout_seconds
        )
        if resolved is None:
            return None
        found = await run_file_io(
            "exists", file_store.exists, resolved, timeout_seconds=timeout_seconds
        )
    except FileIOTimeoutError as e:
        logger.warning(
            "file_existence_check_timed_out",
            locator=str(locator),
            operation=e.operation,
            timeout_seconds=e.timeout_seconds,
        )
        return None
    return resolved if found else None
