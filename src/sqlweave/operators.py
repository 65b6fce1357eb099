from __future__ import annotations

from enum import Enum

from .exceptions import OperatorNotFoundError


class ComparisonOperator(str, Enum):
    """Supported comparison operators for field conditions."""

    EQ = "="
    NE = "!="
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="

    @classmethod
    def parse(cls, op: ComparisonOperator | str) -> ComparisonOperator:
        """Resolve an operator token, accepting ``==`` and ``<>`` aliases."""
        if isinstance(op, cls):
            return op
        token = str(op).strip()
        token = _ALIASES.get(token, token)
        try:
            return cls(token)
        except ValueError:
            raise OperatorNotFoundError(
                str(op), [m.value for m in cls] + list(_ALIASES)
            ) from None


class LogicalConnective(str, Enum):
    """Connectives placed between two field conditions."""

    AND = "and"
    OR = "or"

    @classmethod
    def parse(cls, op: LogicalConnective | str) -> LogicalConnective:
        if isinstance(op, cls):
            return op
        try:
            return cls(str(op).strip().lower())
        except ValueError:
            raise OperatorNotFoundError(str(op), [m.value for m in cls]) from None


_ALIASES: dict[str, str] = {
    "==": ComparisonOperator.EQ.value,
    "<>": ComparisonOperator.NE.value,
}
