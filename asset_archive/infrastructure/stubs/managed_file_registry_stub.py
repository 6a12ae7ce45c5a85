"""Managed-file registry stub implementation."""

from __future__ import annotations

from asset_archive.application.ports.managed_file_registry import (
    ManagedFileRegistryProtocol,
)


class ManagedFileRegistryStub(ManagedFileRegistryProtocol):
    """In-memory mapping of managed file ids to stream URIs.

    Attributes:
        _uris: Stream URI per managed file id
        _forgotten: Ids removed through forget() (for assertions)
    """

    def __init__(self, uris: dict[int, str] | None = None) -> None:
        self._uris: dict[int, str] = dict(uris or {})
        self._forgotten: list[int] = []

    def register(self, managed_file_id: int, uri: str) -> None:
        self._uris[managed_file_id] = uri

    def uri_for(self, managed_file_id: int) -> str | None:
        return self._uris.get(managed_file_id)

    def forget(self, managed_file_id: int) -> None:
        if self._uris.pop(managed_file_id, None) is not None:
            self._forgotten.append(managed_file_id)

    @property
    def forgotten(self) -> list[int]:
        return list(self._forgotten)
