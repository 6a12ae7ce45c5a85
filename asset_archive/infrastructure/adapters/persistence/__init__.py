"""PostgreSQL persistence adapters (SQLAlchemy async + asyncpg)."""

from asset_archive.infrastructure.adapters.persistence.migrations import (
    MIGRATIONS_DIR,
    apply_migrations,
    execute_sql_file,
    split_sql_statements,
)
from asset_archive.infrastructure.adapters.persistence.postgres_archive_note_repository import (
    PostgresArchiveNoteRepository,
)
from asset_archive.infrastructure.adapters.persistence.postgres_archive_repository import (
    PostgresArchiveRepository,
    record_from_row,
    record_to_params,
)
from asset_archive.infrastructure.adapters.persistence.postgres_checksum_queue import (
    PostgresChecksumQueue,
)

__all__: list[str] = [
    "MIGRATIONS_DIR",
    "PostgresArchiveNoteRepository",
    "PostgresArchiveRepository",
    "PostgresChecksumQueue",
    "apply_migrations",
    "execute_sql_file",
    "record_from_row",
    "record_to_params",
    "split_sql_statements",
]
