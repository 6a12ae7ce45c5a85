"""SQL migration runner for the archive schema.

Migrations are plain numbered .sql files shipped beside this module and
applied in file-name order. Every statement is idempotent (IF NOT EXISTS,
CREATE OR REPLACE), so applying them again is harmless.
"""

from __future__ import annotations

from pathlib import Path

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from structlog import get_logger

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "migrations"


def split_sql_statements(sql: str) -> list[str]:
    """Split SQL into statements, respecting dollar-quoted blocks."""
    statements: list[str] = []
    buffer: list[str] = []
    dollar_tag: str | None = None
    i = 0
    length = len(sql)

    while i < length:
        ch = sql[i]
        if ch == "-" and sql.startswith("--", i) and dollar_tag is None:
            # Line comment; a semicolon inside it does not end a statement
            end = sql.find("\n", i)
            end = length if end == -1 else end
            buffer.append(sql[i:end])
            i = end
            continue
        if ch == "$":
            # $$ or $tag$
            j = i + 1
            while j < length and (sql[j].isalnum() or sql[j] == "_"):
                j += 1
            if j < length and sql[j] == "$":
                tag = sql[i : j + 1]
                if dollar_tag is None:
                    dollar_tag = tag
                elif tag == dollar_tag:
                    dollar_tag = None
                buffer.append(tag)
                i = j + 1
                continue
        if ch == ";" and dollar_tag is None:
            statements.append("".join(buffer))
            buffer = []
        else:
            buffer.append(ch)
        i += 1

    if buffer:
        statements.append("".join(buffer))
    return [s for s in statements if _has_sql(s)]


def _has_sql(statement: str) -> bool:
    return any(
        line.strip() and not line.strip().startswith("--")
        for line in statement.splitlines()
    )


def migration_files(directory: Path = MIGRATIONS_DIR) -> list[Path]:
    return sorted(directory.glob("*.sql"))


async def execute_sql_file(session: AsyncSession, path: Path) -> None:
    """Execute every statement of a SQL file inside the caller's transaction."""
    for statement in split_sql_statements(path.read_text()):
        await session.execute(text(statement))


async def apply_migrations(
    session_factory: async_sessionmaker[AsyncSession],
    directory: Path = MIGRATIONS_DIR,
) -> list[str]:
    """Apply every migration in one transaction.

    Returns:
        Names of the applied migration files, in order.
    """
    applied: list[str] = []
    async with session_factory() as session, session.begin():
        for path in migration_files(directory):
            await execute_sql_file(session, path)
            applied.append(path.name)
            logger.info("migration_applied", migration=path.name)
    return applied
