"""
Async statement execution on SQLAlchemy's asyncio extension.

A :class:`Database` wraps either an ``AsyncEngine`` or a single
``AsyncConnection``:

- engine: every call checks a pooled connection out inside
  ``engine.begin()``; the statement commits on success and rolls back on
  error.
- connection: every call runs on that handle; transaction control stays
  with the caller.

Statements are executed as driver SQL, so the placeholder text produced by
:class:`~sqlweave.compiler.QueryCompiler` reaches the driver unchanged and
arguments are bound positionally.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from .compiler import QueryCompiler
from .dialects import Dialect
from .exceptions import ZeroRowsError
from .registry import default_registry
from .settings import DatabaseSettings, async_driver_url

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from .model import Model
    from .registry import ModelRegistry
    from .statements import Statement

logger = logging.getLogger("sqlweave.database")


@dataclass(frozen=True)
class Rows:
    """Buffered result of one statement: column names plus positional rows."""

    columns: tuple[str, ...] = ()
    records: list[tuple[Any, ...]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.records)

    def __bool__(self) -> bool:
        return bool(self.records)

    def mappings(self) -> list[dict[str, Any]]:
        """Rows as dicts; a repeated column name keeps its first value."""
        out: list[dict[str, Any]] = []
        for record in self.records:
            row: dict[str, Any] = {}
            for name, value in zip(self.columns, record, strict=True):
                row.setdefault(name, value)
            out.append(row)
        return out


class Database:
    """Executes compiled statements against an engine or a connection."""

    def __init__(
        self,
        bind: AsyncEngine | AsyncConnection,
        *,
        dialect: Dialect | None = None,
        registry: ModelRegistry | None = None,
    ) -> None:
        self._bind = bind
        self.dialect = dialect or Dialect.from_url(bind.dialect.name)
        self.compiler = QueryCompiler(self.dialect)
        self.registry = registry or default_registry

    # -- construction --------------------------------------------------------

    @classmethod
    def connect(
        cls,
        url: str,
        *,
        echo: bool = False,
        pool_size: int = 5,
        dialect: Dialect | None = None,
        registry: ModelRegistry | None = None,
    ) -> Database:
        """Create an engine for *url*, upgrading bare schemes to async drivers."""
        url_dialect = Dialect.from_url(url)
        dialect = dialect or url_dialect
        engine_kwargs: dict[str, Any] = {"echo": echo}
        # SQLite engines pick their own pool (a static one for :memory:)
        if url_dialect is not Dialect.SQLITE:
            engine_kwargs["pool_size"] = pool_size
        engine = create_async_engine(async_driver_url(url), **engine_kwargs)
        logger.info("Connected %s database engine", dialect.value)
        return cls(engine, dialect=dialect, registry=registry)

    @classmethod
    def from_settings(cls, settings: DatabaseSettings | None = None) -> Database:
        """Build from ``DATABASE_*`` environment settings."""
        settings = settings or DatabaseSettings()
        return cls.connect(
            settings.async_url,
            echo=settings.echo,
            pool_size=settings.pool_size,
            dialect=settings.resolved_dialect(),
        )

    @property
    def bind(self) -> AsyncEngine | AsyncConnection:
        return self._bind

    async def dispose(self) -> None:
        """Release the engine's pool; a no-op for a caller-owned connection."""
        if isinstance(self._bind, AsyncEngine):
            await self._bind.dispose()

    async def __aenter__(self) -> Database:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.dispose()

    # -- execution -----------------------------------------------------------

    @asynccontextmanager
    async def _connection(self) -> AsyncIterator[AsyncConnection]:
        if isinstance(self._bind, AsyncEngine):
            async with self._bind.begin() as conn:
                yield conn
        else:
            yield self._bind

    async def execute(self, statement: Statement) -> int:
        """Run a statement that returns no rows; returns the affected row count."""
        logger.debug("Executing %s [%d args]", statement.sql, len(statement.args))
        async with self._connection() as conn:
            result = await conn.exec_driver_sql(
                statement.sql, statement.bind_values()
            )
            return result.rowcount

    async def fetch(self, statement: Statement) -> Rows:
        """Run a query and buffer every row."""
        logger.debug("Fetching %s [%d args]", statement.sql, len(statement.args))
        async with self._connection() as conn:
            result = await conn.exec_driver_sql(
                statement.sql, statement.bind_values()
            )
            columns = tuple(result.keys())
            records = [tuple(row) for row in result.fetchall()]
        return Rows(columns, records)

    async def fetch_all(self, statement: Statement) -> list[dict[str, Any]]:
        return (await self.fetch(statement)).mappings()

    async def fetch_optional(self, statement: Statement) -> dict[str, Any] | None:
        rows = await self.fetch_all(statement)
        return rows[0] if rows else None

    async def fetch_one(self, statement: Statement) -> dict[str, Any]:
        """First row of the result.

        Raises:
            ZeroRowsError: If the query returned no rows.
        """
        row = await self.fetch_optional(statement)
        if row is None:
            raise ZeroRowsError(statement.sql)
        return row

    async def scalar(self, statement: Statement) -> Any:
        """Column 0 of the first row, or ``None`` when there are no rows."""
        rows = await self.fetch(statement)
        if not rows:
            return None
        return rows.records[0][0]

    # -- schema --------------------------------------------------------------

    async def migrate(self, *models: type[Model], recreate: bool = False) -> None:
        """Create tables for *models*, or for every registered model.

        Tables are created in the given (or registration) order.
        """
        for model in models or tuple(self.registry.models()):
            await model.migrate(self, recreate=recreate)
