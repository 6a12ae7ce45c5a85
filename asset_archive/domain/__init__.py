"""
Domain layer - Pure business logic for the archive lifecycle.

This layer contains:
- Archive record model and status state machine
- Value objects (locators, flags, gate results)
- Domain exceptions

CRITICAL: This layer must NOT import from application, infrastructure,
or workers. Only stdlib and typing imports are allowed.
"""

from asset_archive.domain.exceptions import ArchiveError

__all__: list[str] = ["ArchiveError"]
