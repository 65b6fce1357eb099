"""
Table schema derivation from annotated model fields.

Column options are attached with :class:`Column` inside ``Annotated``::

    class User(Model):
        id: Annotated[int | None, Column(primary_key=True, auto=True)] = None
        name: Annotated[str, Column(size=50, unique=True)]
        role: Annotated[str, Column(default="user")] = "user"
        owner: Annotated[int, Column(foreign_key="Account.id")]

Fields without a :class:`Column` get the defaults (not a key, not
unique, ``varchar(255)`` for strings). ``Optional`` annotations make the
column nullable; every other column is ``not null``.

Each column definition follows a fixed token order::

    {name} {type} [primary key [autoincrement]] [unique] [default {v}]
    [not null] [references {table}({column})]
"""

from __future__ import annotations

import datetime
import functools
import types
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Union, get_args, get_origin

from .dialects import Dialect
from .exceptions import SchemaError

if TYPE_CHECKING:
    from pydantic import BaseModel
    from pydantic.fields import FieldInfo

NOW = "now"
_MISSING: Any = object()


@dataclass(frozen=True)
class Column:
    """Column options for one model field."""

    primary_key: bool = False
    auto: bool = False
    unique: bool = False
    size: int | None = None
    default: Any = _MISSING
    foreign_key: str | None = None
    text: bool = False

    @property
    def has_default(self) -> bool:
        return self.default is not _MISSING


@dataclass(frozen=True)
class ColumnSpec:
    """A resolved column: field name, SQL type and options."""

    name: str
    python_type: type
    nullable: bool
    options: Column

    @property
    def is_auto_key(self) -> bool:
        return self.options.primary_key and self.options.auto

    @property
    def has_sql_default(self) -> bool:
        return self.options.has_default


@dataclass(frozen=True)
class EntitySchema:
    """The ``(table_name, primary_key_name, ddl)`` triple of one model."""

    table_name: str
    primary_key_name: str
    ddl: str


# ---------------------------------------------------------------------------
# Field resolution
# ---------------------------------------------------------------------------


def _unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        members = [a for a in get_args(annotation) if a is not type(None)]
        nullable = len(members) != len(get_args(annotation))
        if len(members) == 1:
            return members[0], nullable
        return annotation, nullable
    return annotation, False


def resolve_field(name: str, info: FieldInfo, model_name: str) -> ColumnSpec:
    """Build the :class:`ColumnSpec` of one pydantic field."""
    python_type, nullable = _unwrap_optional(info.annotation)
    # parameterised generics such as list[str] have no column type
    if get_origin(python_type) is not None or not isinstance(python_type, type):
        raise SchemaError(
            model_name,
            f"field '{name}' has unsupported annotation {info.annotation!r}",
        )
    options = next((m for m in info.metadata if isinstance(m, Column)), Column())
    return ColumnSpec(
        name=name,
        python_type=python_type,
        nullable=nullable,
        options=options,
    )


def columns_of(model: type[BaseModel]) -> tuple[ColumnSpec, ...]:
    """Column specs of *model* in field declaration order."""
    return tuple(
        resolve_field(name, info, model.__name__)
        for name, info in model.model_fields.items()
    )


# ---------------------------------------------------------------------------
# Column definition rendering
# ---------------------------------------------------------------------------


def sql_type(column: ColumnSpec, model_name: str) -> str:
    py = column.python_type
    # bool before int: bool is an int subclass
    if issubclass(py, bool):
        return "integer"
    if issubclass(py, int):
        return "integer"
    if issubclass(py, float):
        return "float"
    if issubclass(py, str):
        if column.options.text:
            return "text"
        return f"varchar({column.options.size or 255})"
    if issubclass(py, datetime.datetime):
        return "varchar(40)"
    if issubclass(py, datetime.date):
        return "varchar(10)"
    raise SchemaError(
        model_name, f"field '{column.name}' has unsupported type {py.__name__}"
    )


def _render_default(column: ColumnSpec, model_name: str) -> str:
    value = column.options.default
    py = column.python_type
    if value == NOW:
        if issubclass(py, datetime.datetime):
            return "current_timestamp"
        if issubclass(py, datetime.date):
            return "current_date"
        raise SchemaError(
            model_name,
            f"default 'now' on '{column.name}' requires a date or datetime field",
        )
    if isinstance(value, bool):
        return "1" if value else "0"
    if issubclass(py, bool):
        raise SchemaError(
            model_name, f"boolean field '{column.name}' needs a True/False default"
        )
    if isinstance(value, int | float):
        return str(value)
    if isinstance(value, str):
        escaped = value.replace("'", "''")
        return f"'{escaped}'"
    raise SchemaError(
        model_name, f"unsupported default {value!r} on field '{column.name}'"
    )


def _render_primary_key(column: ColumnSpec, dialect: Dialect, model_name: str) -> str:
    if not column.options.auto:
        return f"{sql_type(column, model_name)} primary key"
    if dialect is Dialect.POSTGRES:
        return "serial primary key"
    if dialect is Dialect.MYSQL:
        return "integer primary key auto_increment"
    return "integer primary key autoincrement"


def _render_foreign_key(reference: str, model_name: str) -> str:
    table, sep, field = reference.partition(".")
    if not sep or not table or not field or "." in field:
        raise SchemaError(
            model_name,
            f"invalid foreign key '{reference}', expected 'Table.column'",
        )
    return f"references {table}({field})"


def column_definition(
    column: ColumnSpec, dialect: Dialect = Dialect.SQLITE, model_name: str = ""
) -> str:
    """Render one column definition in the fixed token order."""
    tokens = [column.name]
    if column.options.primary_key:
        tokens.append(_render_primary_key(column, dialect, model_name))
    else:
        tokens.append(sql_type(column, model_name))
    if column.options.unique:
        tokens.append("unique")
    if column.options.has_default:
        tokens.append(f"default {_render_default(column, model_name)}")
    if not column.nullable and not column.options.primary_key:
        tokens.append("not null")
    if column.options.foreign_key:
        tokens.append(_render_foreign_key(column.options.foreign_key, model_name))
    return " ".join(tokens)


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------


def primary_key_of(columns: tuple[ColumnSpec, ...], model_name: str) -> ColumnSpec:
    keys = [c for c in columns if c.options.primary_key]
    if len(keys) != 1:
        raise SchemaError(
            model_name, f"expected exactly one primary key, found {len(keys)}"
        )
    return keys[0]


@functools.cache
def derive_schema(
    model: type[BaseModel], table_name: str, dialect: Dialect = Dialect.SQLITE
) -> EntitySchema:
    """Derive the :class:`EntitySchema` of *model* for *dialect*."""
    columns = columns_of(model)
    if not columns:
        raise SchemaError(model.__name__, "model declares no fields")
    key = primary_key_of(columns, model.__name__)
    definitions = ", ".join(
        column_definition(c, dialect, model.__name__) for c in columns
    )
    return EntitySchema(
        table_name=table_name,
        primary_key_name=key.name,
        ddl=f"create table if not exists {table_name} ({definitions});",
    )
