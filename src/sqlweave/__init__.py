from sqlalchemy.exc import DBAPIError as DriverError

from .builder import ConditionBuilder
from .codec import Arg, ValueType, decode, decode_args, encode
from .compiler import Query, QueryCompiler
from .conditions import (
    Condition,
    Conditions,
    FieldCondition,
    LogicalOperator,
    and_,
    column,
    condition,
    kwargs,
    or_,
    where,
)
from .database import Database, Rows
from .dialects import Dialect
from .exceptions import (
    CompileError,
    ConditionSequenceError,
    ConfigurationError,
    OperatorNotFoundError,
    SchemaError,
    SqlweaveError,
    TypeCoercionError,
    ZeroRowsError,
)
from .model import Model
from .operators import ComparisonOperator, LogicalConnective
from .registry import ModelRegistry, default_registry
from .schema import Column, EntitySchema
from .select import JoinType, SelectBuilder, select
from .settings import DatabaseSettings
from .statements import Statement

__all__ = [
    # Conditions
    "Condition",
    "Conditions",
    "FieldCondition",
    "LogicalOperator",
    "ComparisonOperator",
    "LogicalConnective",
    "condition",
    "where",
    "kwargs",
    "column",
    "and_",
    "or_",
    # Builder
    "ConditionBuilder",
    # Codec
    "Arg",
    "ValueType",
    "encode",
    "decode",
    "decode_args",
    # Compilation
    "Dialect",
    "Query",
    "QueryCompiler",
    "Statement",
    # Select / join
    "JoinType",
    "SelectBuilder",
    "select",
    # Models and schema
    "Model",
    "Column",
    "EntitySchema",
    "ModelRegistry",
    "default_registry",
    # Runtime
    "Database",
    "DatabaseSettings",
    "Rows",
    # Exceptions
    "SqlweaveError",
    "CompileError",
    "OperatorNotFoundError",
    "ConditionSequenceError",
    "TypeCoercionError",
    "ZeroRowsError",
    "SchemaError",
    "ConfigurationError",
    "DriverError",
]
