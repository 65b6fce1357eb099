"""Tests for the ConditionBuilder fluent API."""

from __future__ import annotations

import pytest

from sqlweave import ConditionBuilder, Conditions, QueryCompiler, where


@pytest.fixture
def builder() -> ConditionBuilder:
    return ConditionBuilder()


# -- Single condition -------------------------------------------------------


def test_single_where(builder: ConditionBuilder, compiler: QueryCompiler):
    conds = builder.where("status", "=", "active").build()
    assert conds == where("status", "=", "active")
    assert compiler.to_select(conds).text == "status=?1"


def test_first_or_where_has_no_leading_operator(
    builder: ConditionBuilder, compiler: QueryCompiler
):
    conds = builder.or_where("status", "=", "active").build()
    assert len(conds) == 1
    assert compiler.to_select(conds).text == "status=?1"


# -- Implicit AND -------------------------------------------------------------


def test_multiple_where_implicit_and(
    builder: ConditionBuilder, compiler: QueryCompiler
):
    conds = builder.where("status", "=", "active").where("age", ">", 18).build()
    query = compiler.to_select(conds)
    assert query.text == "status=?1 and age>?2"
    assert list(query.args) == [("active", "text"), ("18", "integer")]


def test_or_where(builder: ConditionBuilder, compiler: QueryCompiler):
    conds = (
        builder.where("role", "=", "admin")
        .or_where("role", "=", "owner")
        .and_where("age", ">=", 21)
        .build()
    )
    assert compiler.to_select(conds).text == "role=?1 or role=?2 and age>=?3"


def test_join_predicates_are_not_bound(
    builder: ConditionBuilder, compiler: QueryCompiler
):
    conds = (
        builder.where("users.role", "=", "admin")
        .and_join("users.id", "=", "profiles.user_id")
        .or_join("users.id", "=", "profiles.owner_id")
        .build()
    )
    query = compiler.to_select(conds)
    assert query.text == (
        "users.role=?1 and users.id=profiles.user_id or users.id=profiles.owner_id"
    )
    assert len(query.args) == 1


def test_add_prebuilt_sequence(builder: ConditionBuilder, compiler: QueryCompiler):
    extra = where("a", "=", 1) & where("b", "=", 2)
    conds = builder.where("c", "=", 3).add(extra, "or").build()
    assert compiler.to_select(conds).text == "c=?1 or a=?2 and b=?3"


# -- Build / reset ------------------------------------------------------------


def test_empty_builder(builder: ConditionBuilder):
    assert builder.build() == Conditions()


def test_reset(builder: ConditionBuilder):
    builder.where("a", "=", 1)
    assert builder.reset().build() == Conditions()


def test_build_snapshot_is_independent(builder: ConditionBuilder):
    first = builder.where("a", "=", 1).build()
    builder.where("b", "=", 2)
    assert len(first) == 1
