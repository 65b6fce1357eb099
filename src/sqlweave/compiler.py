"""
Compile a condition sequence into SQL fragment text plus bind arguments.

Three statement shapes are supported, each producing a :class:`Query`:

``to_insert``
    ``fields`` = ``"a, b"``, ``text`` = ``"?1, ?2"``.
``to_update``
    ``text`` = ``"a=?1, b=?2"``; logical operators are ignored because a
    SET list is always conjunctive. The caller appends the terminal
    ``where pk=...`` using :attr:`Query.next_index`.
``to_select``
    ``text`` = ``"a=?1 and b>?2 or c=?3"``; connectives are emitted in
    sequence order with no parentheses, so SQL precedence applies.

Every bound predicate consumes the next placeholder index, starting at
``start``. Column-to-column predicates are rendered verbatim and never
produce an argument.

Sequence shape
--------------
A logical operator must sit between two predicates. A leading, trailing
or doubled operator raises :class:`ConditionSequenceError`. Two adjacent
predicates in a WHERE sequence are joined with an implicit ``and``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .codec import Arg, decode_args
from .conditions import FieldCondition, LogicalOperator
from .dialects import Dialect
from .exceptions import CompileError, ConditionSequenceError
from .operators import LogicalConnective

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from .conditions import Condition

logger = logging.getLogger("sqlweave.compiler")


@dataclass(frozen=True)
class Query:
    """
    A compiled fragment.

    Attributes:
        text: Placeholder list (insert), SET list (update) or WHERE body
            (select).
        args: Bind arguments in placeholder order.
        fields: Comma-joined column names (insert only).
        start: Index of the first placeholder emitted by this fragment.
    """

    text: str
    args: tuple[Arg, ...] = ()
    fields: str = ""
    start: int = 1

    @property
    def next_index(self) -> int:
        """The first placeholder index this fragment did not consume."""
        return self.start + len(self.args)

    def bind_values(self) -> tuple[Any, ...]:
        """Native values ready to hand to the driver."""
        return decode_args(self.args)


class QueryCompiler:
    """Renders condition sequences using a fixed :class:`Dialect`."""

    def __init__(self, dialect: Dialect = Dialect.SQLITE) -> None:
        self.dialect = dialect

    def placeholder(self, index: int) -> str:
        return self.dialect.placeholder(index)

    # ------------------------------------------------------------------ #
    # INSERT                                                              #
    # ------------------------------------------------------------------ #

    def to_insert(self, conditions: Iterable[Condition]) -> Query:
        """
        Compile ``field = value`` pairs into a column list and placeholders.

        Raises:
            ConditionSequenceError: If a logical operator is present.
            CompileError: If a predicate references another column, or the
                sequence holds no predicate at all.
        """
        fields: list[str] = []
        placeholders: list[str] = []
        args: list[Arg] = []

        for position, item in enumerate(conditions):
            if isinstance(item, LogicalOperator):
                raise ConditionSequenceError(
                    f"Logical operator '{item.operator.value}' is not allowed "
                    f"in an insert sequence (position {position})",
                    position=position,
                )
            cond = _require_field_condition(item, position)
            if cond.is_column:
                raise CompileError(
                    f"Cannot insert column reference {cond.value!r} "
                    f"into '{cond.field}'"
                )
            args.append(cond.to_arg())
            fields.append(cond.field)
            placeholders.append(self.placeholder(len(args)))

        if not fields:
            raise CompileError("Insert sequence has no field = value pairs")

        query = Query(
            text=", ".join(placeholders),
            args=tuple(args),
            fields=", ".join(fields),
        )
        logger.debug("Compiled insert (%s) values (%s)", query.fields, query.text)
        return query

    # ------------------------------------------------------------------ #
    # UPDATE                                                              #
    # ------------------------------------------------------------------ #

    def to_update(self, conditions: Iterable[Condition], *, start: int = 1) -> Query:
        """Compile a SET list; embedded logical operators are skipped.

        Raises:
            CompileError: If no assignment is left to render.
        """
        assignments: list[str] = []
        args: list[Arg] = []

        for position, item in enumerate(conditions):
            if isinstance(item, LogicalOperator):
                continue
            cond = _require_field_condition(item, position)
            if cond.is_column:
                assignments.append(f"{cond.field}={cond.value}")
                continue
            assignments.append(f"{cond.field}={self.placeholder(start + len(args))}")
            args.append(cond.to_arg())

        if not assignments:
            raise CompileError("Update sequence has no field = value pairs")

        query = Query(text=", ".join(assignments), args=tuple(args), start=start)
        logger.debug("Compiled set %s", query.text)
        return query

    # ------------------------------------------------------------------ #
    # SELECT                                                              #
    # ------------------------------------------------------------------ #

    def to_select(self, conditions: Iterable[Condition], *, start: int = 1) -> Query:
        """
        Compile a WHERE body (also used for JOIN ... ON clauses).

        An empty sequence compiles to an empty fragment; callers omit the
        ``WHERE`` keyword in that case.
        """
        items = list(conditions)
        _validate_shape(items)

        parts: list[str] = []
        args: list[Arg] = []
        after_predicate = False

        for position, item in enumerate(items):
            if isinstance(item, LogicalOperator):
                parts.append(item.operator.value)
                after_predicate = False
                continue
            cond = _require_field_condition(item, position)
            if after_predicate:
                parts.append(LogicalConnective.AND.value)
            if cond.is_column:
                parts.append(f"{cond.field}{cond.operator.value}{cond.value}")
            else:
                index = start + len(args)
                parts.append(
                    f"{cond.field}{cond.operator.value}{self.placeholder(index)}"
                )
                args.append(cond.to_arg())
            after_predicate = True

        query = Query(text=" ".join(parts), args=tuple(args), start=start)
        logger.debug("Compiled where %s", query.text or "<empty>")
        return query


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _require_field_condition(item: Any, position: int) -> FieldCondition:
    if not isinstance(item, FieldCondition):
        raise CompileError(
            f"Expected a FieldCondition or LogicalOperator at position "
            f"{position}, got {type(item).__name__}"
        )
    return item


def _validate_shape(items: Sequence[Any]) -> None:
    """Reject logical operators without a predicate on both sides."""
    expecting_predicate = True
    for position, item in enumerate(items):
        if isinstance(item, LogicalOperator):
            if expecting_predicate:
                raise ConditionSequenceError(
                    f"Logical operator '{item.operator.value}' at position "
                    f"{position} has no condition on its left",
                    position=position,
                )
            expecting_predicate = True
        else:
            expecting_predicate = False

    if items and expecting_predicate:
        last = len(items) - 1
        raise ConditionSequenceError(
            f"Trailing logical operator at position {last}",
            position=last,
        )
