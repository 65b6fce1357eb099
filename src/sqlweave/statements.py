"""Full statement text for the single-table CRUD operations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .codec import Arg, decode_args, encode

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .compiler import QueryCompiler
    from .conditions import Condition


@dataclass(frozen=True)
class Statement:
    """Complete SQL text plus the arguments bound to its placeholders."""

    sql: str
    args: tuple[Arg, ...] = ()

    def bind_values(self) -> tuple[Any, ...]:
        return decode_args(self.args)


def insert(
    compiler: QueryCompiler, table: str, values: Iterable[Condition]
) -> Statement:
    query = compiler.to_insert(values)
    return Statement(
        f"insert into {table} ({query.fields}) values ({query.text});",
        query.args,
    )


def update_by_id(
    compiler: QueryCompiler,
    table: str,
    primary_key: str,
    id_value: Any,
    values: Iterable[Condition],
) -> Statement:
    """
    ``update {table} set ... where {pk}={placeholder};``

    The id argument is bound after every SET argument, so its placeholder
    takes the next free index.
    """
    query = compiler.to_update(values)
    id_placeholder = compiler.placeholder(query.next_index)
    return Statement(
        f"update {table} set {query.text} where {primary_key}={id_placeholder};",
        (*query.args, encode(id_value)),
    )


def select(
    compiler: QueryCompiler, table: str, conditions: Iterable[Condition]
) -> Statement:
    query = compiler.to_select(conditions)
    if not query.text:
        return Statement(f"SELECT * FROM {table};")
    return Statement(f"SELECT * FROM {table} WHERE {query.text};", query.args)


def select_all(table: str) -> Statement:
    return Statement(f"select * from {table}")


def delete_by_id(
    compiler: QueryCompiler, table: str, primary_key: str, id_value: Any
) -> Statement:
    return Statement(
        f"delete from {table} where {primary_key}={compiler.placeholder(1)};",
        (encode(id_value),),
    )


def delete_all(table: str) -> Statement:
    """Delete every row; there is no WHERE clause."""
    return Statement(f"delete from {table};")


def count(table: str) -> Statement:
    return Statement(f"select count(*) from {table}")


def drop_table(table: str) -> Statement:
    return Statement(f"drop table if exists {table};")
