"""Tests for multi-table SELECT with joins."""

from __future__ import annotations

from typing import Annotated

import pytest

from sqlweave import (
    CompileError,
    Column,
    Database,
    Dialect,
    JoinType,
    Model,
    OperatorNotFoundError,
    ZeroRowsError,
    column,
    kwargs,
    select,
    where,
)


class User(Model, register=False):
    id: Annotated[int | None, Column(primary_key=True, auto=True)] = None
    name: str
    role: Annotated[str, Column(default="user")] = "user"


class Profile(Model, register=False):
    profile_id: Annotated[int | None, Column(primary_key=True, auto=True)] = None
    user_id: Annotated[int, Column(foreign_key="User.id")]
    bio: str


class Author(Model, register=False):
    id: Annotated[int | None, Column(primary_key=True, auto=True)] = None
    name: str


class Book(Model, register=False):
    id: Annotated[int | None, Column(primary_key=True, auto=True)] = None
    author_id: Annotated[int, Column(foreign_key="Author.id")]
    title: str


ON_USER = column("User.id", "=", "Profile.user_id")
ON_AUTHOR = column("Author.id", "=", "Book.author_id")


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def test_single_model_selects_star():
    assert select(User).build().sql == "SELECT * FROM User;"


def test_single_model_with_where():
    stmt = select(User).where(where("name", "=", "John")).build()
    assert stmt.sql == "SELECT * FROM User WHERE name=?1;"
    assert list(stmt.args) == [("John", "text")]


def test_inner_join_on_columns_has_no_args():
    stmt = select(User, Profile).join(JoinType.INNER, Profile, ON_USER).build()
    assert stmt.sql == (
        "SELECT User.*, Profile.* FROM User "
        "INNER JOIN Profile ON User.id=Profile.user_id;"
    )
    assert stmt.args == ()


def test_join_and_where_share_placeholder_sequence():
    stmt = (
        select(User, Profile)
        .join("left", "Profile", ON_USER.and_(where("Profile.bio", "!=", "")))
        .where(where("User.role", "=", "admin"))
        .where(where("User.id", ">", 10))
        .build(Dialect.POSTGRES)
    )
    assert stmt.sql == (
        "SELECT User.*, Profile.* FROM User "
        "LEFT JOIN Profile ON User.id=Profile.user_id and Profile.bio!=$1 "
        "WHERE User.role=$2 and User.id>$3;"
    )
    assert stmt.bind_values() == ("", "admin", 10)


def test_several_joins():
    stmt = (
        select("a", "b", "c")
        .join(JoinType.INNER, "b", column("a.id", "=", "b.a_id"), base="a")
        .join(JoinType.FULL, "c", column("b.id", "=", "c.b_id"))
        .build()
    )
    assert stmt.sql == (
        "SELECT a.*, b.*, c.* FROM a "
        "INNER JOIN b ON a.id=b.a_id "
        "FULL JOIN c ON b.id=c.b_id;"
    )


def test_base_argument_overrides_first_model():
    stmt = select(User, Profile).join("right", User, ON_USER, base=Profile).build()
    assert stmt.sql.startswith("SELECT User.*, Profile.* FROM Profile RIGHT JOIN User")


def test_multi_table_select_needs_a_base():
    with pytest.raises(CompileError):
        select("a", "b").build()


def test_join_without_on_is_rejected():
    with pytest.raises(CompileError):
        select(User, Profile).join(JoinType.INNER, Profile, []).build()


def test_join_type_is_case_insensitive():
    stmt = select(User, Profile).join(" Inner ", Profile, ON_USER).build()
    assert "INNER JOIN Profile" in stmt.sql


def test_unknown_join_type():
    with pytest.raises(OperatorNotFoundError) as exc_info:
        select(User).join("cross", Profile, ON_USER)
    assert isinstance(exc_info.value, CompileError)
    assert exc_info.value.valid_operators == ["INNER", "LEFT", "RIGHT", "FULL"]


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------


@pytest.fixture
async def seeded(db: Database) -> Database:
    await User.migrate(db)
    await Profile.migrate(db)
    await User.create(kwargs(name="John", role="admin"), db)
    await User.create(kwargs(name="Jane"), db)
    await User.create(kwargs(name="Jim"), db)
    await Profile.create(kwargs(user_id=1, bio="likes sql"), db)
    await Profile.create(kwargs(user_id=3, bio="likes joins"), db)
    return db


async def test_join_fetch_all_as_single_shape(seeded: Database):
    users = await (
        select(User, Profile)
        .join(JoinType.INNER, Profile, ON_USER)
        .fetch_all(seeded, User)
    )
    assert users == [
        User(id=1, name="John", role="admin"),
        User(id=3, name="Jim", role="user"),
    ]


async def test_join_fetch_all_as_tuples(seeded: Database):
    rows = await (
        select(User, Profile)
        .join(JoinType.INNER, Profile, ON_USER)
        .where(where("Profile.bio", "=", "likes joins"))
        .fetch_all(seeded)
    )
    assert rows == [
        (
            User(id=3, name="Jim", role="user"),
            Profile(profile_id=2, user_id=3, bio="likes joins"),
        )
    ]


async def test_join_fetch_one(seeded: Database):
    user = await (
        select(User, Profile)
        .join(JoinType.INNER, Profile, ON_USER)
        .where(where("User.role", "=", "admin"))
        .fetch_one(seeded, User)
    )
    assert user.name == "John"


async def test_join_fetch_one_without_rows(seeded: Database):
    query = (
        select(User, Profile)
        .join(JoinType.INNER, Profile, ON_USER)
        .where(where("User.name", "=", "Jane"))
    )
    with pytest.raises(ZeroRowsError):
        await query.fetch_one(seeded, User)
    assert await query.fetch_optional(seeded, User) is None


async def test_single_model_fetch(seeded: Database):
    users = await select(User).where(where("id", "<", 3)).fetch_all(seeded)
    assert [u.name for u in users] == ["John", "Jane"]


async def test_table_name_targets_need_a_shape(seeded: Database):
    with pytest.raises(CompileError):
        await select("User").fetch_all(seeded)
    rows = await select("User").fetch_all(seeded, User)
    assert len(rows) == 3


async def test_single_shape_reads_its_own_columns(db: Database):
    await Author.migrate(db)
    await Book.migrate(db)
    for name in ("Ann", "Bob", "Cid"):
        await Author.create(kwargs(name=name), db)
    await Book.create(kwargs(author_id=3, title="t"), db)

    query = select(Author, Book).join(JoinType.INNER, Book, ON_AUTHOR)
    assert await query.fetch_all(db, Book) == [Book(id=1, author_id=3, title="t")]
    assert await query.fetch_all(db, Author) == [Author(id=3, name="Cid")]


async def test_single_shape_keeps_its_key_for_later_writes(db: Database):
    await Author.migrate(db)
    await Book.migrate(db)
    await Author.create(kwargs(name="Ann"), db)
    await Author.create(kwargs(name="Bob"), db)
    await Book.create(kwargs(author_id=2, title="draft"), db)

    book = await (
        select(Author, Book)
        .join(JoinType.INNER, Book, ON_AUTHOR)
        .fetch_one(db, Book)
    )
    book.title = "final"
    assert await book.update(db) == 1
    assert await Book.all(db) == [Book(id=1, author_id=2, title="final")]
