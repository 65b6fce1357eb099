"""
Model base class: pydantic fields plus async CRUD against a :class:`Database`.

Usage::

    class User(Model):
        id: Annotated[int | None, Column(primary_key=True, auto=True)] = None
        name: str
        role: Annotated[str, Column(default="user")] = "user"

    await User.migrate(db)
    await User.create(kwargs(name="John", role="admin"), db)
    admins = await User.filter(where("role", "=", "admin"), db)
    await User.update_by_id(1, kwargs(role="user"), db)

Concrete subclasses are added to :data:`~sqlweave.registry.default_registry`
when defined; pass ``register=False`` in the class statement to opt out
(abstract bases, throwaway test models).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, ClassVar, TypeVar

from pydantic import BaseModel, ConfigDict

from . import statements
from .conditions import kwargs
from .dialects import Dialect
from .registry import default_registry
from .schema import columns_of, derive_schema

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from .conditions import Condition
    from .database import Database
    from .schema import EntitySchema

logger = logging.getLogger("sqlweave.model")

M = TypeVar("M", bound="Model")


class Model(BaseModel):
    """Base class for persisted models; one subclass maps to one table."""

    model_config = ConfigDict(validate_assignment=True)

    __tablename__: ClassVar[str | None] = None

    def __init_subclass__(cls, register: bool = True, **kwargs: Any) -> None:
        # register is consumed by __pydantic_init_subclass__
        super().__init_subclass__(**kwargs)

    @classmethod
    def __pydantic_init_subclass__(cls, register: bool = True, **kwargs: Any) -> None:
        super().__pydantic_init_subclass__(**kwargs)
        if register:
            default_registry.register(cls)

    # -- schema --------------------------------------------------------------

    @classmethod
    def table_name(cls) -> str:
        return cls.__tablename__ or cls.__name__

    @classmethod
    def entity_schema(cls, dialect: Dialect = Dialect.SQLITE) -> EntitySchema:
        """``(table_name, primary_key_name, ddl)`` for *dialect*."""
        return derive_schema(cls, cls.table_name(), dialect)

    @classmethod
    def primary_key(cls) -> str:
        return cls.entity_schema().primary_key_name

    @classmethod
    def from_row(cls: type[M], row: Mapping[str, Any]) -> M:
        """Validate one result row into an instance."""
        return cls.model_validate(dict(row))

    @classmethod
    async def migrate(cls, db: Database, *, recreate: bool = False) -> None:
        """Create the table if it does not exist; drop it first on *recreate*."""
        schema = cls.entity_schema(db.dialect)
        if recreate:
            await db.execute(statements.drop_table(schema.table_name))
        await db.execute(statements.Statement(schema.ddl))
        logger.info("Migrated table %s", schema.table_name)

    # -- class-level operations ----------------------------------------------

    @classmethod
    async def create(cls, conditions: Iterable[Condition], db: Database) -> None:
        """Insert one row from ``field = value`` conditions."""
        await db.execute(
            statements.insert(db.compiler, cls.table_name(), conditions)
        )

    @classmethod
    async def filter(
        cls: type[M], conditions: Iterable[Condition], db: Database
    ) -> list[M]:
        """Every row matching *conditions*; empty conditions match all rows."""
        rows = await db.fetch_all(
            statements.select(db.compiler, cls.table_name(), conditions)
        )
        return [cls.from_row(row) for row in rows]

    @classmethod
    async def get(
        cls: type[M], conditions: Iterable[Condition], db: Database
    ) -> M | None:
        """The first matching row, or ``None``."""
        row = await db.fetch_optional(
            statements.select(db.compiler, cls.table_name(), conditions)
        )
        return None if row is None else cls.from_row(row)

    @classmethod
    async def all(cls: type[M], db: Database) -> list[M]:
        rows = await db.fetch_all(statements.select_all(cls.table_name()))
        return [cls.from_row(row) for row in rows]

    @classmethod
    async def update_by_id(
        cls, id_value: Any, conditions: Iterable[Condition], db: Database
    ) -> int:
        """Apply ``field = value`` assignments to the row with key *id_value*.

        Returns the number of rows updated.
        """
        return await db.execute(
            statements.update_by_id(
                db.compiler,
                cls.table_name(),
                cls.primary_key(),
                id_value,
                conditions,
            )
        )

    set = update_by_id

    @classmethod
    async def count(cls, db: Database) -> int:
        value = await db.scalar(statements.count(cls.table_name()))
        return int(value or 0)

    @classmethod
    async def delete_all(cls, db: Database) -> int:
        return await db.execute(statements.delete_all(cls.table_name()))

    # -- instance operations -------------------------------------------------

    async def save(self, db: Database) -> None:
        """Insert this instance.

        An auto-increment key and ``None`` values of columns with a SQL
        default are left out so the database fills them in.

        Raises:
            CompileError: If no column is left to insert.
        """
        values: dict[str, Any] = {}
        for column in columns_of(type(self)):
            value = getattr(self, column.name)
            if value is None and (column.is_auto_key or column.has_sql_default):
                continue
            values[column.name] = value
        await type(self).create(kwargs(**values), db)

    async def update(self, db: Database) -> int:
        """Write every non-key column of this instance by its key."""
        cls = type(self)
        key = cls.primary_key()
        values = {
            name: getattr(self, name) for name in cls.model_fields if name != key
        }
        if not values:
            return 0
        return await cls.update_by_id(getattr(self, key), kwargs(**values), db)

    async def delete(self, db: Database) -> int:
        """Delete this instance's row by primary key."""
        cls = type(self)
        key = cls.primary_key()
        return await db.execute(
            statements.delete_by_id(
                db.compiler, cls.table_name(), key, getattr(self, key)
            )
        )

