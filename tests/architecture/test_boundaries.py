from pytest_archon import archrule


def test_compile_layer_independence() -> None:
    """
    The compile layer (codec, conditions, builder, dialects, compiler,
    statements) turns conditions into text and arguments only.
    It must not reach into the async runtime or SQLAlchemy.
    """
    (
        archrule("compile_layer_is_pure")
        .match("sqlweave.codec")
        .match("sqlweave.conditions")
        .match("sqlweave.operators")
        .match("sqlweave.builder")
        .match("sqlweave.dialects")
        .match("sqlweave.compiler")
        .match("sqlweave.statements")
        .should_not_import("sqlweave.database")
        .should_not_import("sqlweave.model")
        .should_not_import("sqlweave.select")
        .should_not_import("sqlalchemy*")
        .should_not_import("pydantic*")
        .check("sqlweave")
    )


def test_schema_layering() -> None:
    """
    Schema derivation reads model declarations but never executes SQL.
    """
    (
        archrule("schema_layering")
        .match("sqlweave.schema")
        .should_not_import("sqlweave.database")
        .should_not_import("sqlweave.select")
        .should_not_import("sqlalchemy*")
        .check("sqlweave")
    )


def test_exceptions_are_a_leaf() -> None:
    """
    Exceptions are imported everywhere, so they import nothing from the package.
    """
    (
        archrule("exceptions_leaf")
        .match("sqlweave.exceptions")
        .should_not_import("sqlweave.*")
        .check("sqlweave")
    )
