"""
Typed value codec for bind arguments.

Every value placed in a condition is reduced to a canonical
``(serialized_value, type_tag)`` pair (an :class:`Arg`) when the
condition is built, and turned back into a native bind value just
before execution.

Encoding rules:

- ``bool`` is canonicalised to an integer (``True -> "1"``).
- ``int`` / ``float`` / ``str`` map to ``integer`` / ``float`` / ``text``.
- ``date`` / ``datetime`` are stored as ISO text under their own tag.
- ``None`` becomes ``("null", "null")`` and binds as SQL ``NULL``.

Decoding dispatches on the tag. Loose tag spellings (``int64``,
``double``, ``optional[str]``...) are accepted so that argument lists
produced by other tools can be bound unchanged.
"""

from __future__ import annotations

import datetime
import enum
import json
import re
import uuid
from decimal import Decimal
from typing import TYPE_CHECKING, Any, NamedTuple

from .exceptions import CompileError, TypeCoercionError

if TYPE_CHECKING:
    from collections.abc import Iterable


class ValueType(str, enum.Enum):
    """Tag describing how a serialized value is bound."""

    INTEGER = "integer"
    FLOAT = "float"
    TEXT = "text"
    DATE = "date"
    DATETIME = "datetime"
    NULL = "null"
    COLUMN = "column"

    def __str__(self) -> str:
        return self.value


class Arg(NamedTuple):
    """One bind argument: the serialized value and its type tag."""

    value: str
    type_tag: ValueType


NULL_LITERAL = "null"

# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def encode(value: Any) -> Arg:
    """
    Serialize a native value into an :class:`Arg`.

    The tag is derived from the Python type of *value*; the column the
    value is compared against is not consulted.

    Raises:
        TypeCoercionError: If the type has no canonical representation.
    """
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return Arg("1" if value else "0", ValueType.INTEGER)
    if value is None:
        return Arg(NULL_LITERAL, ValueType.NULL)
    if isinstance(value, int):
        return Arg(str(value), ValueType.INTEGER)
    if isinstance(value, float | Decimal):
        return Arg(json.dumps(float(value)), ValueType.FLOAT)
    if isinstance(value, enum.Enum):
        return encode(value.value)
    if isinstance(value, str):
        return Arg(value, ValueType.TEXT)
    if isinstance(value, datetime.datetime):
        return Arg(value.isoformat(sep=" "), ValueType.DATETIME)
    if isinstance(value, datetime.date):
        return Arg(value.isoformat(), ValueType.DATE)
    if isinstance(value, uuid.UUID):
        return Arg(str(value), ValueType.TEXT)
    raise TypeCoercionError(
        value, type(value).__name__, "no canonical encoding for this type"
    )


# ---------------------------------------------------------------------------
# Tag normalisation
# ---------------------------------------------------------------------------

_INTEGER_TAGS = frozenset(
    {
        "integer",
        "int",
        "int8",
        "int16",
        "int32",
        "int64",
        "uint8",
        "uint16",
        "uint32",
        "uint64",
        "bool",
        "boolean",
        "smallint",
        "bigint",
        "serial",
    }
)
_FLOAT_TAGS = frozenset(
    {"float", "float32", "float64", "double", "real", "decimal", "numeric"}
)
_NULLABLE_RE = re.compile(r"^optional\s*\[(.*)\]$", re.IGNORECASE)


def normalise_tag(type_tag: ValueType | str) -> tuple[ValueType, bool]:
    """
    Map a loose tag spelling to ``(ValueType, nullable)``.

    Unknown spellings fall back to ``TEXT``: every tag that is not
    integer-like, float-like, ``null`` or ``column`` binds as a string.
    """
    if isinstance(type_tag, ValueType):
        return type_tag, type_tag is ValueType.NULL

    tag = str(type_tag).strip().strip('"').lower()
    nullable = False
    match = _NULLABLE_RE.match(tag)
    if match:
        nullable = True
        tag = match.group(1).strip().lower()
    # qualified type names such as "builtins.int"
    tag = tag.rsplit(".", 1)[-1]

    if tag in _INTEGER_TAGS:
        return ValueType.INTEGER, nullable
    if tag in _FLOAT_TAGS:
        return ValueType.FLOAT, nullable
    if tag == ValueType.NULL.value:
        return ValueType.NULL, True
    if tag == ValueType.COLUMN.value:
        return ValueType.COLUMN, nullable
    if tag == ValueType.DATE.value:
        return ValueType.DATE, nullable
    if tag == ValueType.DATETIME.value:
        return ValueType.DATETIME, nullable
    return ValueType.TEXT, nullable


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def decode(arg: Arg | tuple[str, ValueType | str]) -> Any:
    """
    Re-hydrate a serialized value into the native value to bind.

    Raises:
        TypeCoercionError: If the value does not parse under its tag.
        CompileError: If a ``column`` reference reaches the bind step.
    """
    value, raw_tag = arg
    tag, nullable = normalise_tag(raw_tag)

    if tag is ValueType.COLUMN:
        raise CompileError(f"Column reference {value!r} cannot be bound as a value")
    if tag is ValueType.NULL or (nullable and value == NULL_LITERAL):
        return None

    if tag is ValueType.INTEGER:
        try:
            return int(value)
        except (TypeError, ValueError) as exc:
            raise TypeCoercionError(value, str(raw_tag), str(exc)) from exc
    if tag is ValueType.FLOAT:
        try:
            return float(value)
        except (TypeError, ValueError) as exc:
            raise TypeCoercionError(value, str(raw_tag), str(exc)) from exc
    return str(value)


def decode_args(args: Iterable[Arg]) -> tuple[Any, ...]:
    """Decode a whole argument list, preserving emission order."""
    return tuple(decode(arg) for arg in args)
