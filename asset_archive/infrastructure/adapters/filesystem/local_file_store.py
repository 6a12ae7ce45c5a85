"""Local filesystem implementation of FileStoreProtocol.

Stream URIs map onto two directories: public:// onto the public files
root and private:// onto the private files root. Resolution never
escapes a root; a URI that would is treated as unresolvable.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

from structlog import get_logger

from asset_archive.application.ports.file_store import FileStoreProtocol
from asset_archive.application.ports.managed_file_registry import (
    ManagedFileRegistryProtocol,
)
from asset_archive.domain.models.archive_record import SourceLocator
from asset_archive.infrastructure.adapters.filesystem.locator_resolver import (
    DEFAULT_PUBLIC_BASE_PATH,
    resolve_source_uri,
)

logger = get_logger(__name__)


class LocalFileStore(FileStoreProtocol):
    """File store backed by local public and private directories.

    Example:
        >>> store = LocalFileStore(Path("files/public"), Path("files/private"))
        >>> path = store.resolve(SourceLocator(path="public://reports/2019.pdf"))
    """

    def __init__(
        self,
        public_root: Path,
        private_root: Path,
        registry: ManagedFileRegistryProtocol | None = None,
        public_base_path: str = DEFAULT_PUBLIC_BASE_PATH,
    ) -> None:
        """Initialize the file store.

        Args:
            public_root: Directory that public:// maps to.
            private_root: Directory that private:// maps to.
            registry: Managed-file registry for id-based locators.
            public_base_path: URL path under which public files are served.
        """
        self._roots = {
            "public": public_root.resolve(),
            "private": private_root.resolve(),
        }
        self._registry = registry
        self._public_base_path = public_base_path

    def uri_to_path(self, uri: str) -> Path | None:
        """Map a stream URI to a filesystem path inside its root."""
        scheme, sep, relative = uri.partition("://")
        root = self._roots.get(scheme)
        if not sep or root is None or not relative:
            return None
        candidate = (root / relative).resolve()
        if not candidate.is_relative_to(root):
            logger.warning("stream_uri_outside_root", uri=uri)
            return None
        return candidate

    def resolve(self, locator: SourceLocator) -> str | None:
        uri = resolve_source_uri(locator, self._registry, self._public_base_path)
        if uri is None:
            return None
        path = self.uri_to_path(uri)
        return str(path) if path is not None else None

    def exists(self, resolved_path: str) -> bool:
        return Path(resolved_path).is_file()

    def iter_chunks(self, resolved_path: str, chunk_size: int) -> Iterator[bytes]:
        with open(resolved_path, "rb") as handle:
            while chunk := handle.read(chunk_size):
                yield chunk

    def delete(self, resolved_path: str) -> None:
        Path(resolved_path).unlink(missing_ok=True)

    def forget_managed_file(self, managed_file_id: int) -> None:
        if self._registry is not None:
            self._registry.forget(managed_file_id)
