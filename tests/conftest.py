"""Shared fixtures for sqlweave tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from sqlweave import Database, Dialect, QueryCompiler

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from sqlalchemy.ext.asyncio import AsyncEngine


@pytest.fixture
def compiler() -> QueryCompiler:
    return QueryCompiler(Dialect.SQLITE)


@pytest.fixture
def pg_compiler() -> QueryCompiler:
    return QueryCompiler(Dialect.POSTGRES)


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    # one shared connection so every checkout sees the same in-memory database
    eng = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    yield eng
    await eng.dispose()


@pytest.fixture
def db(engine: AsyncEngine) -> Database:
    return Database(engine)
