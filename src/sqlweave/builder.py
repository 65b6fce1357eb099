"""
Fluent builder for constructing condition sequences.

Example::

    conditions = (
        ConditionBuilder()
        .where("status", "=", "active")
        .and_where("age", ">", 18)
        .build()
    )
    # -> status=?1 and age>?2

    conditions = (
        ConditionBuilder()
        .where("role", "=", "admin")
        .or_where("role", "=", "owner")
        .and_join("users.id", "=", "profiles.user_id")
        .build()
    )
    # -> role=?1 or role=?2 and users.id=profiles.user_id

Conditions added with ``where()`` after the first one are joined with
``and``, the same default the compiler applies to adjacent predicates.
The result is a flat sequence: SQL precedence decides how mixed
``and`` / ``or`` chains group.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .conditions import Conditions, column, where
from .operators import LogicalConnective

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .conditions import Condition
    from .operators import ComparisonOperator


class ConditionBuilder:
    """Accumulates predicates and connectives into a :class:`Conditions`."""

    def __init__(self) -> None:
        self._conditions = Conditions()

    # -- leaf conditions -----------------------------------------------------

    def where(
        self, field: str, op: ComparisonOperator | str, value: Any
    ) -> ConditionBuilder:
        """Add a predicate, joined with ``and`` when not the first."""
        return self.and_where(field, op, value)

    def and_where(
        self, field: str, op: ComparisonOperator | str, value: Any
    ) -> ConditionBuilder:
        self._append(LogicalConnective.AND, where(field, op, value))
        return self

    def or_where(
        self, field: str, op: ComparisonOperator | str, value: Any
    ) -> ConditionBuilder:
        self._append(LogicalConnective.OR, where(field, op, value))
        return self

    def and_join(
        self, left: str, op: ComparisonOperator | str, right: str
    ) -> ConditionBuilder:
        """Add a column-to-column predicate joined with ``and``."""
        self._append(LogicalConnective.AND, column(left, op, right))
        return self

    def or_join(
        self, left: str, op: ComparisonOperator | str, right: str
    ) -> ConditionBuilder:
        self._append(LogicalConnective.OR, column(left, op, right))
        return self

    def add(
        self,
        conditions: Iterable[Condition],
        connective: LogicalConnective | str = LogicalConnective.AND,
    ) -> ConditionBuilder:
        """Add an already-built sequence."""
        self._append(LogicalConnective.parse(connective), conditions)
        return self

    # -- build ---------------------------------------------------------------

    def build(self) -> Conditions:
        """
        Return the accumulated sequence.

        An empty builder yields an empty sequence, which compiles to a
        statement without a ``WHERE`` clause.
        """
        return self._conditions

    def reset(self) -> ConditionBuilder:
        """Clear all conditions and return ``self`` for reuse."""
        self._conditions = Conditions()
        return self

    # -- internals -----------------------------------------------------------

    def _append(
        self, connective: LogicalConnective, conditions: Iterable[Condition]
    ) -> None:
        if connective is LogicalConnective.OR:
            self._conditions = self._conditions.or_(conditions)
        else:
            self._conditions = self._conditions.and_(conditions)
