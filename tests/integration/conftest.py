"""
Integration test configuration with testcontainers.

This module provides a session-scoped PostgreSQL 16 container and a
per-test session factory:
- The container is started once per test session
- Migrations are applied for every test (they are idempotent)
- Archive tables are truncated after each test for isolation

Usage:
    @pytest.mark.integration
    async def test_example(session_factory: async_sessionmaker[AsyncSession]) -> None:
        repository = PostgresArchiveRepository(session_factory)
        ...

Note: Docker must be running; the tests are skipped when it is not.
"""

from collections.abc import AsyncGenerator, Generator

import pytest
from docker.errors import DockerException
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from testcontainers.postgres import PostgresContainer

from asset_archive.bootstrap.database import get_database_url
from asset_archive.infrastructure.adapters.persistence.migrations import apply_migrations

ARCHIVE_TABLES = ("archive_notes", "archive_checksum_jobs", "archive_records")


@pytest.fixture(scope="session")
def postgres_container() -> Generator[PostgresContainer, None, None]:
    """Session-scoped PostgreSQL 16 container, reused by every integration test."""
    try:
        container = PostgresContainer("postgres:16-alpine")
        container.start()
    except DockerException as exc:
        pytest.skip(f"Docker is not available: {exc}")
    try:
        yield container
    finally:
        container.stop()


@pytest.fixture(scope="session")
def postgres_async_url(postgres_container: PostgresContainer) -> str:
    """Async-compatible URL for the container.

    testcontainers returns a psycopg2 URL by default; the driver suffix is
    dropped so get_database_url can switch it to asyncpg.
    """
    sync_url = postgres_container.get_connection_url()
    return get_database_url(sync_url.replace("postgresql+psycopg2://", "postgresql://"))


@pytest.fixture
async def session_factory(
    postgres_async_url: str,
) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Per-test session factory over a migrated, empty schema."""
    engine = create_async_engine(postgres_async_url, echo=False)
    factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

    await apply_migrations(factory)

    yield factory

    async with factory() as session, session.begin():
        await session.execute(text(f"TRUNCATE {', '.join(ARCHIVE_TABLES)} CASCADE"))
    await engine.dispose()
