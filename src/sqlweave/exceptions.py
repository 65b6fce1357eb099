"""
Exception hierarchy for sqlweave.

All exceptions inherit from ``SqlweaveError`` and provide ``to_dict()``
for API-friendly error responses. Errors raised by the database driver
are not wrapped: they surface as SQLAlchemy ``DBAPIError`` subclasses.
"""

from __future__ import annotations

from difflib import get_close_matches
from typing import Any


class SqlweaveError(Exception):
    """Root exception for the entire sqlweave package."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": str(self),
        }


class CompileError(SqlweaveError):
    """A condition sequence cannot be compiled into SQL."""


class OperatorNotFoundError(CompileError):
    """
    Unknown operator specified.

    Provides fuzzy-matched suggestions for likely intended operators.
    """

    def __init__(self, operator: str, valid_operators: list[str]) -> None:
        self.operator = operator
        self.valid_operators = valid_operators
        self.suggestions = get_close_matches(operator, valid_operators, n=3, cutoff=0.5)

        message = f"Unknown operator: '{operator}'."
        if self.suggestions:
            message += f" Did you mean: {', '.join(self.suggestions)}?"
        message += f" Valid operators: {', '.join(sorted(valid_operators))}"
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "OPERATOR_NOT_FOUND",
            "operator": self.operator,
            "suggestions": self.suggestions,
            "valid_operators": sorted(self.valid_operators),
        }


class ConditionSequenceError(CompileError):
    """A logical operator sits where the statement shape cannot accept it."""

    def __init__(self, message: str, position: int | None = None) -> None:
        self.message = message
        self.position = position
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "CONDITION_SEQUENCE_ERROR",
            "message": self.message,
            "position": self.position,
        }


class TypeCoercionError(SqlweaveError):
    """A value does not parse (or cannot be encoded) under its type tag."""

    def __init__(self, value: Any, type_tag: str, reason: str | None = None) -> None:
        self.value = value
        self.type_tag = type_tag
        message = f"Cannot coerce {value!r} as '{type_tag}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "TYPE_COERCION_ERROR",
            "value": str(self.value),
            "type_tag": self.type_tag,
            "message": str(self),
        }


class ZeroRowsError(SqlweaveError):
    """``fetch_one`` matched no row."""

    def __init__(self, statement: str) -> None:
        self.statement = statement
        super().__init__(f"Query returned no rows: {statement}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "ZERO_ROWS",
            "statement": self.statement,
        }


class SchemaError(SqlweaveError):
    """A model declaration cannot be turned into a table schema."""

    def __init__(self, model_name: str, message: str) -> None:
        self.model_name = model_name
        super().__init__(f"{model_name}: {message}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "SCHEMA_ERROR",
            "model": self.model_name,
            "message": str(self),
        }


class ConfigurationError(SqlweaveError):
    """Connection settings are missing or unusable."""


__all__: list[str] = [
    "CompileError",
    "ConditionSequenceError",
    "ConfigurationError",
    "OperatorNotFoundError",
    "SchemaError",
    "SqlweaveError",
    "TypeCoercionError",
    "ZeroRowsError",
]
