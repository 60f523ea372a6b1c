from __future__ import annotations

import logging
import ssl
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Awaitable, Callable, TypeVar

from fastapi import Depends, Request
from sqlalchemy import event, text
from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from app.core.config import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

ASYNC_POSTGRES_DRIVER = "postgresql+asyncpg"
# libpq connection options that asyncpg.connect() rejects as keyword arguments
_LIBPQ_ONLY_OPTIONS = ("sslmode", "channel_binding", "connect_timeout", "pgbouncer", "supa")


class Base(DeclarativeBase):
    pass


class DatabaseError(Exception):
    pass


class DatabaseNotConfiguredError(DatabaseError):
    pass


@dataclass
class QueryResult:
    rowcount: int
    rows: list[Any] = field(default_factory=list)


def normalize_database_url(raw_url: str) -> URL:
    url = make_url(raw_url)
    if url.drivername in {"postgres", "postgresql", "postgresql+psycopg2"}:
        url = url.set(drivername=ASYNC_POSTGRES_DRIVER)
    if url.drivername == ASYNC_POSTGRES_DRIVER:
        url = url.difference_update_query(_LIBPQ_ONLY_OPTIONS)
    return url


def ssl_context_for(settings: Settings) -> ssl.SSLContext | bool:
    if settings.DISABLE_POSTGRES_SSL:
        return False
    context = ssl.create_default_context()
    if settings.POSTGRES_SSL_ALLOW_SELF_SIGNED:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


def connect_args_for(url: URL, settings: Settings, connect_timeout: float | None = None) -> dict[str, Any]:
    args: dict[str, Any] = {}
    if url.get_backend_name() == "postgresql":
        args["statement_cache_size"] = 0  # required for pgbouncer-style poolers
        args["ssl"] = ssl_context_for(settings)
    if connect_timeout is not None:
        args["timeout"] = connect_timeout
    return args


def _enable_sqlite_constraints(engine: AsyncEngine) -> None:
    # pysqlite never emits BEGIN before DDL on its own, so take over transaction
    # control to keep CREATE TABLE inside the surrounding transaction.
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn) -> None:
        conn.exec_driver_sql("BEGIN")


def _watch_invalidations(engine: AsyncEngine) -> None:
    @event.listens_for(engine.sync_engine, "invalidate")
    def _on_invalidate(dbapi_connection, connection_record, exception) -> None:
        if exception is not None:
            logger.critical("Unexpected error on idle database connection: %s", exception)


def build_engine(
    raw_url: str,
    settings: Settings,
    *,
    connect_timeout: float | None = None,
    **engine_kwargs: Any,
) -> AsyncEngine:
    url = normalize_database_url(raw_url)
    engine = create_async_engine(
        url,
        echo=False,
        connect_args=connect_args_for(url, settings, connect_timeout),
        **engine_kwargs,
    )
    if url.get_backend_name() == "sqlite":
        _enable_sqlite_constraints(engine)
    _watch_invalidations(engine)
    return engine


class ConnectionProvider:
    """Owns the pooled engine and opens dedicated connections for transactions.

    The pooled engine uses ``POSTGRES_URL``. Dedicated connections come from a
    separate ``NullPool`` engine on ``POSTGRES_URL_NON_POOLING`` (falling back to
    ``POSTGRES_URL``), so every statement of a transaction runs on one session
    that is really closed on release.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._engine: AsyncEngine | None = None
        self._dedicated_engine: AsyncEngine | None = None

    @property
    def is_configured(self) -> bool:
        return bool(self.settings.POSTGRES_URL)

    def _require_url(self, raw_url: str | None) -> str:
        if not raw_url:
            raise DatabaseNotConfiguredError("POSTGRES_URL is not configured.")
        return raw_url

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            self._engine = build_engine(
                self._require_url(self.settings.POSTGRES_URL),
                self.settings,
                pool_pre_ping=True,
                pool_recycle=1800,
            )
        return self._engine

    @property
    def dedicated_engine(self) -> AsyncEngine:
        if self._dedicated_engine is None:
            raw_url = self.settings.POSTGRES_URL_NON_POOLING or self.settings.POSTGRES_URL
            self._dedicated_engine = build_engine(
                self._require_url(raw_url),
                self.settings,
                poolclass=NullPool,
            )
        return self._dedicated_engine

    async def connect_dedicated(self) -> AsyncConnection:
        return await self.dedicated_engine.connect()

    async def release(self, conn: AsyncConnection) -> None:
        await conn.close()

    async def dispose(self) -> None:
        for engine in (self._engine, self._dedicated_engine):
            if engine is not None:
                await engine.dispose()
        self._engine = None
        self._dedicated_engine = None


class QueryExecutor:
    def __init__(self, provider: ConnectionProvider) -> None:
        self.provider = provider

    async def query(self, statement, params: dict[str, Any] | None = None) -> QueryResult:
        """Run one parameterized statement on the pool and commit it."""
        if isinstance(statement, str):
            statement = text(statement)

        start = time.perf_counter()
        async with self.provider.engine.begin() as conn:
            result = await conn.execute(statement, params)
            if result.returns_rows:
                rows = list(result.all())
                rowcount = len(rows)
            else:
                rows = []
                rowcount = result.rowcount
        duration_ms = (time.perf_counter() - start) * 1000

        settings = self.provider.settings
        if not settings.is_production and duration_ms > settings.SLOW_QUERY_THRESHOLD_MS:
            logger.warning("Slow query: %s (%.1f ms, %s rows)", statement, duration_ms, rowcount)

        return QueryResult(rowcount=rowcount, rows=rows)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncConnection]:
        """Yield a dedicated connection inside BEGIN ... COMMIT.

        Any error raised by the block or by COMMIT rolls the transaction back and
        is re-raised. The connection is released once on every exit path.
        """
        conn = await self.provider.connect_dedicated()
        try:
            trans = await conn.begin()
            try:
                yield conn
                await trans.commit()
            except BaseException:
                if trans.is_active:
                    try:
                        await trans.rollback()
                    except Exception:
                        logger.exception("Rollback failed; re-raising the original error")
                raise
        finally:
            await self.provider.release(conn)

    async def run_in_transaction(self, work: Callable[[AsyncConnection], Awaitable[T]]) -> T:
        async with self.transaction() as conn:
            return await work(conn)


def get_provider(request: Request) -> ConnectionProvider:
    return request.app.state.provider


def get_executor(provider: ConnectionProvider = Depends(get_provider)) -> QueryExecutor:
    return QueryExecutor(provider)
