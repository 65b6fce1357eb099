"""
Condition data model and combinators.

A condition sequence is a flat, ordered list of two kinds of element:

- :class:`FieldCondition` -- one ``field OP value`` predicate whose value
  is already encoded by :mod:`sqlweave.codec`;
- :class:`LogicalOperator` -- an ``and`` / ``or`` separator between two
  predicates.

Sequences are built with the module-level constructors and joined with
``and_()`` / ``or_()`` (or ``&`` / ``|``)::

    conditions = where("name", "=", "Jane").and_(where("role", "=", "admin"))
    # -> [name = 'Jane', and, role = 'admin']

    values = kwargs(name="Jane", age=31)
    # -> [name = 'Jane', age = 31]   (insert / update shape, no separators)

    on = column("User.id", "=", "Profile.user_id")
    # -> [User.id = Profile.user_id]  (join predicate, never bound)

Sequences are immutable; every combinator returns a new one.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import Any, Union, overload

from .codec import Arg, ValueType, encode
from .operators import ComparisonOperator, LogicalConnective


@dataclass(frozen=True)
class FieldCondition:
    """A single ``field OP value`` predicate."""

    field: str
    value: str
    type_tag: ValueType
    operator: ComparisonOperator = ComparisonOperator.EQ

    @property
    def is_column(self) -> bool:
        """``True`` when ``value`` is a ``table.column`` reference."""
        return self.type_tag is ValueType.COLUMN

    def to_arg(self) -> Arg:
        return Arg(self.value, self.type_tag)

    def to_dict(self) -> dict[str, Any]:
        return {
            "field": self.field,
            "op": self.operator.value,
            "value": self.value,
            "type": self.type_tag.value,
        }


@dataclass(frozen=True)
class LogicalOperator:
    """Positional ``and`` / ``or`` separator."""

    operator: LogicalConnective

    def to_dict(self) -> dict[str, Any]:
        return {"op": self.operator.value}


Condition = Union[FieldCondition, LogicalOperator]


class Conditions(Sequence[Condition]):
    """Immutable ordered sequence of :data:`Condition` elements."""

    __slots__ = ("_items",)

    def __init__(self, items: Iterable[Condition] = ()) -> None:
        self._items: tuple[Condition, ...] = tuple(items)

    # -- sequence protocol ---------------------------------------------------

    @overload
    def __getitem__(self, index: int) -> Condition: ...

    @overload
    def __getitem__(self, index: slice) -> Conditions: ...

    def __getitem__(self, index: int | slice) -> Condition | Conditions:
        if isinstance(index, slice):
            return Conditions(self._items[index])
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Condition]:
        return iter(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Conditions):
            return self._items == other._items
        if isinstance(other, list | tuple):
            return list(self._items) == list(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._items)

    def __repr__(self) -> str:
        return f"Conditions({list(self._items)!r})"

    # -- combinators ---------------------------------------------------------

    def and_(self, other: Iterable[Condition]) -> Conditions:
        """Append an ``and`` separator followed by *other*."""
        return self._connect(LogicalConnective.AND, other)

    def or_(self, other: Iterable[Condition]) -> Conditions:
        """Append an ``or`` separator followed by *other*."""
        return self._connect(LogicalConnective.OR, other)

    def __and__(self, other: Iterable[Condition]) -> Conditions:
        return self.and_(other)

    def __or__(self, other: Iterable[Condition]) -> Conditions:
        return self.or_(other)

    def __add__(self, other: Iterable[Condition]) -> Conditions:
        """Concatenate without a separator."""
        return Conditions((*self._items, *other))

    def _connect(
        self, connective: LogicalConnective, other: Iterable[Condition]
    ) -> Conditions:
        tail = tuple(other)
        # joining with an empty side adds nothing to connect
        if not self._items or not tail:
            return Conditions((*self._items, *tail))
        return Conditions((*self._items, LogicalOperator(connective), *tail))

    # -- inspection ----------------------------------------------------------

    @property
    def field_conditions(self) -> list[FieldCondition]:
        return [c for c in self._items if isinstance(c, FieldCondition)]

    def to_dict(self) -> list[dict[str, Any]]:
        return [c.to_dict() for c in self._items]


# ---------------------------------------------------------------------------
# Constructors
# ---------------------------------------------------------------------------


def condition(field: str, op: ComparisonOperator | str, value: Any) -> FieldCondition:
    """Build one :class:`FieldCondition`, encoding *value*."""
    arg = encode(value)
    return FieldCondition(
        field=field,
        value=arg.value,
        type_tag=arg.type_tag,
        operator=ComparisonOperator.parse(op),
    )


def where(field: str, op: ComparisonOperator | str, value: Any) -> Conditions:
    """A one-element sequence ``field OP value``."""
    return Conditions((condition(field, op, value),))


def kwargs(**values: Any) -> Conditions:
    """
    One ``=`` condition per keyword, in keyword order, with no separators.

    This is the shape consumed by ``create`` and ``update_by_id``.
    """
    return Conditions(
        condition(name, ComparisonOperator.EQ, v) for name, v in values.items()
    )


def column(left: str, op: ComparisonOperator | str, right: str) -> Conditions:
    """
    A cross-table predicate ``left OP right`` between two column references.

    *right* is rendered verbatim and never bound as a parameter.
    """
    return Conditions(
        (
            FieldCondition(
                field=left,
                value=right,
                type_tag=ValueType.COLUMN,
                operator=ComparisonOperator.parse(op),
            ),
        )
    )


def and_(*sequences: Iterable[Condition]) -> Conditions:
    """Join every sequence with ``and``."""
    result = Conditions()
    for seq in sequences:
        result = result.and_(seq)
    return result


def or_(*sequences: Iterable[Condition]) -> Conditions:
    """Join every sequence with ``or``."""
    result = Conditions()
    for seq in sequences:
        result = result.or_(seq)
    return result
