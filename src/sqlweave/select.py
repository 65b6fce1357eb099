"""
Multi-table SELECT with JOIN clauses.

Example::

    users = await (
        select(User, Profile)
        .join(JoinType.INNER, "Profile", column("User.id", "=", "Profile.user_id"))
        .where(where("Profile.bio", "!=", ""))
        .fetch_all(db, User)
    )

renders::

    SELECT User.*, Profile.* FROM User INNER JOIN Profile
    ON User.id=Profile.user_id WHERE Profile.bio!=?1;

ON and WHERE fragments share one placeholder sequence: each fragment
starts where the previous one stopped, and arguments are bound joins
first, then WHERE.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from .compiler import QueryCompiler
from .conditions import Conditions
from .dialects import Dialect
from .exceptions import CompileError, OperatorNotFoundError, ZeroRowsError
from .statements import Statement

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .codec import Arg
    from .conditions import Condition
    from .database import Database, Rows
    from .model import Model


class JoinType(str, Enum):
    INNER = "INNER"
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    FULL = "FULL"

    @classmethod
    def parse(cls, join_type: JoinType | str) -> JoinType:
        """Resolve a join keyword case-insensitively."""
        if isinstance(join_type, cls):
            return join_type
        try:
            return cls(str(join_type).strip().upper())
        except ValueError:
            valid = [m.value for m in cls]
            raise OperatorNotFoundError(str(join_type), valid) from None


@dataclass(frozen=True)
class Join:
    join_type: JoinType
    table: str
    on: Conditions


def _table_of(target: type[Model] | str) -> str:
    if isinstance(target, str):
        return target
    return target.table_name()


def _star_clause(targets: Iterable[type[Model] | str]) -> str:
    return ", ".join(f"{_table_of(t)}.*" for t in targets)


class SelectBuilder:
    """Accumulates joins and a WHERE sequence for one SELECT statement.

    Created by :func:`select`; not meant to be instantiated directly.
    """

    def __init__(
        self,
        clause: str,
        base_table: str | None,
        models: tuple[type[Model], ...] = (),
    ) -> None:
        self.clause = clause
        self.base_table = base_table
        self.models = models
        self.joins: list[Join] = []
        self.conditions = Conditions()

    def join(
        self,
        join_type: JoinType | str,
        table: type[Model] | str,
        on: Iterable[Condition],
        *,
        base: type[Model] | str | None = None,
    ) -> SelectBuilder:
        """Add ``{join_type} JOIN {table} ON {on}``.

        The first join fixes the FROM table when :func:`select` left it
        open: *base* when given, else the first selected model's table.
        """
        if self.base_table is None:
            if base is not None:
                self.base_table = _table_of(base)
            elif self.models:
                self.base_table = self.models[0].table_name()
        join = Join(JoinType.parse(join_type), _table_of(table), Conditions(on))
        self.joins.append(join)
        return self

    def where(self, conditions: Iterable[Condition]) -> SelectBuilder:
        """Restrict the result; repeated calls are joined with ``and``."""
        self.conditions = self.conditions.and_(conditions)
        return self

    # -- rendering -----------------------------------------------------------

    def build(self, dialect: Dialect | QueryCompiler = Dialect.SQLITE) -> Statement:
        """Render the statement without executing it."""
        compiler = (
            dialect if isinstance(dialect, QueryCompiler) else QueryCompiler(dialect)
        )
        if self.base_table is None:
            raise CompileError(
                "SELECT over several tables needs a join to fix the FROM table"
            )

        parts = [f"SELECT {self.clause} FROM {self.base_table}"]
        args: list[Arg] = []
        index = 1
        for join in self.joins:
            if not join.on:
                raise CompileError(f"JOIN {join.table} has no ON conditions")
            on = compiler.to_select(join.on, start=index)
            index = on.next_index
            args.extend(on.args)
            parts.append(f"{join.join_type.value} JOIN {join.table} ON {on.text}")

        filters = compiler.to_select(self.conditions, start=index)
        if filters.text:
            parts.append(f"WHERE {filters.text}")
            args.extend(filters.args)
        return Statement(" ".join(parts) + ";", tuple(args))

    # -- execution -----------------------------------------------------------

    @property
    def _selects_models(self) -> bool:
        """Whether the clause is ``{table}.*`` for each selected model in order."""
        return len(self.models) > 1 and self.clause == _star_clause(self.models)

    def _shapes(self, shapes: tuple[type[Model], ...]) -> tuple[type[Model], ...]:
        shapes = shapes or self.models
        if not shapes:
            raise CompileError("No model given to build result rows")
        return shapes

    def _column_groups(
        self, rows: Rows, shapes: tuple[type[Model], ...]
    ) -> list[list[dict[str, Any]]]:
        """Split each record into one ``{column: value}`` dict per shape."""
        widths = [len(shape.model_fields) for shape in shapes]
        if sum(widths) != len(rows.columns):
            raise ValueError(
                f"Result has {len(rows.columns)} columns but "
                f"{', '.join(s.__name__ for s in shapes)} expect {sum(widths)}"
            )
        out: list[list[dict[str, Any]]] = []
        for record in rows.records:
            offset = 0
            groups: list[dict[str, Any]] = []
            for width in widths:
                names = rows.columns[offset : offset + width]
                values = record[offset : offset + width]
                groups.append(dict(zip(names, values, strict=True)))
                offset += width
            out.append(groups)
        return out

    def _hydrate(self, rows: Rows, shapes: tuple[type[Model], ...]) -> list[Any]:
        if len(shapes) == 1:
            shape = shapes[0]
            # shared names such as id must come from the shape's own table
            if self._selects_models and shape in self.models:
                position = self.models.index(shape)
                return [
                    shape.from_row(groups[position])
                    for groups in self._column_groups(rows, self.models)
                ]
            return [shape.from_row(row) for row in rows.mappings()]

        return [
            tuple(
                shape.from_row(group)
                for shape, group in zip(shapes, groups, strict=True)
            )
            for groups in self._column_groups(rows, shapes)
        ]

    async def fetch_all(self, db: Database, *shapes: type[Model]) -> list[Any]:
        """Every row, as instances of one shape or tuples of several.

        Without *shapes* the selected models are used.
        """
        shapes = self._shapes(shapes)
        rows = await db.fetch(self.build(db.compiler))
        return self._hydrate(rows, shapes)

    async def fetch_optional(self, db: Database, *shapes: type[Model]) -> Any | None:
        results = await self.fetch_all(db, *shapes)
        return results[0] if results else None

    async def fetch_one(self, db: Database, *shapes: type[Model]) -> Any:
        """The first row.

        Raises:
            ZeroRowsError: If the query returned no rows.
        """
        results = await self.fetch_all(db, *shapes)
        if not results:
            raise ZeroRowsError(self.build(db.compiler).sql)
        return results[0]


def select(*targets: type[Model] | str) -> SelectBuilder:
    """Start a SELECT over one or more models (or table names).

    One target selects ``*`` from its table. Several select
    ``{table}.*`` for each, and the FROM table is fixed by the first
    :meth:`SelectBuilder.join`.
    """
    if not targets:
        raise CompileError("select() needs at least one model or table")
    models = tuple(t for t in targets if not isinstance(t, str))
    if len(targets) == 1:
        return SelectBuilder("*", _table_of(targets[0]), models)
    return SelectBuilder(_star_clause(targets), None, models)
