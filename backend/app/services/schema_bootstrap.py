from __future__ import annotations

import enum
import logging

from sqlalchemy import bindparam, text
from sqlalchemy.schema import CreateIndex, CreateTable

from app.core.database import DatabaseError, QueryExecutor
from app.models import Photo, PhotoTag, Tag

logger = logging.getLogger(__name__)

GALLERY_TABLES = (Photo.__table__, Tag.__table__, PhotoTag.__table__)
GALLERY_TABLE_NAMES = tuple(table.name for table in GALLERY_TABLES)
GALLERY_INDEX_NAMES = ("idx_photos_taken_at", "idx_photos_make", "idx_photos_hidden")

_TABLE_CATALOG_QUERIES = {
    "postgresql": (
        "SELECT table_name FROM information_schema.tables "
        "WHERE table_schema = 'public' AND CAST(table_name AS TEXT) IN :names"
    ),
    "sqlite": "SELECT name FROM sqlite_master WHERE type = 'table' AND name IN :names",
}


class BootstrapState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"


def schema_statements() -> list:
    """DDL for the gallery schema, tables first, in dependency order."""
    statements: list = [CreateTable(table, if_not_exists=True) for table in GALLERY_TABLES]
    indexes = {index.name: index for index in Photo.__table__.indexes}
    statements.extend(CreateIndex(indexes[name], if_not_exists=True) for name in GALLERY_INDEX_NAMES)
    return statements


class SchemaBootstrapper:
    def __init__(self, executor: QueryExecutor, statements: list | None = None) -> None:
        self.executor = executor
        self.statements = list(statements) if statements is not None else schema_statements()
        self.state = BootstrapState.UNINITIALIZED

    async def check_exists(self) -> int:
        """Return how many of the gallery tables are present in the public schema."""
        dialect = self.executor.provider.engine.dialect.name
        sql = _TABLE_CATALOG_QUERIES.get(dialect)
        if sql is None:
            raise DatabaseError(f"Unsupported database dialect: {dialect}")

        statement = text(sql).bindparams(bindparam("names", expanding=True))
        result = await self.executor.query(statement, {"names": list(GALLERY_TABLE_NAMES)})
        return result.rowcount

    async def setup(self) -> bool:
        logger.info("Checking database schema...")
        try:
            existing = await self.check_exists()
            if existing == len(GALLERY_TABLE_NAMES):
                self.state = BootstrapState.READY
                logger.info("Database schema already exists.")
                return True

            logger.info(
                "Creating database schema (%d of %d tables present)...",
                existing,
                len(GALLERY_TABLE_NAMES),
            )
            await self.create_schema()
        except Exception:
            logger.exception("Failed to setup database")
            return False

        self.state = BootstrapState.READY
        logger.info("Database schema created successfully.")
        return True

    async def create_schema(self) -> None:
        async with self.executor.transaction() as conn:
            for statement in self.statements:
                await conn.execute(statement)
