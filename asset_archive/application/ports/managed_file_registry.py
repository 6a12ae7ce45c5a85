"""Managed-file registry port.

Managed files are referenced by an integer id; the registry maps the id
to the stream URI of the file (public://..., private://...).
"""

from __future__ import annotations

from typing import Protocol


class ManagedFileRegistryProtocol(Protocol):
    """Protocol for the managed-file table of the hosting system."""

    def uri_for(self, managed_file_id: int) -> str | None:
        """Return the stream URI for a managed file, or None if unknown."""
        ...

    def forget(self, managed_file_id: int) -> None:
        """Remove a managed file entry after its file was deleted."""
        ...
