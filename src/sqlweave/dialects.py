"""
Placeholder policy per SQL dialect.

The dialect is resolved once, from the connection URL or explicitly, and
handed to :class:`~sqlweave.compiler.QueryCompiler`. It decides how a
1-based bind position is rendered in statement text:

==========  ===========  =========================================
Dialect     Placeholder  Driver
==========  ===========  =========================================
SQLITE      ``?1``       sqlite3 / aiosqlite (numbered qmark)
POSTGRES    ``$1``       asyncpg
MYSQL       ``%s``       aiomysql (``format`` paramstyle)
GENERIC     ``?``        any qmark driver
==========  ===========  =========================================

Numbered placeholders are positional: arguments are always bound as a
sequence, in emission order.
"""

from __future__ import annotations

from enum import Enum

from .exceptions import ConfigurationError

_SCHEME_PREFIXES: tuple[tuple[str, str], ...] = (
    ("sqlite", "sqlite"),
    ("libsql", "sqlite"),
    ("postgres", "postgres"),
    ("mysql", "mysql"),
    ("mariadb", "mysql"),
)


class Dialect(str, Enum):
    """Target SQL engine family."""

    SQLITE = "sqlite"
    POSTGRES = "postgres"
    MYSQL = "mysql"
    GENERIC = "generic"

    @property
    def prefix(self) -> str:
        return _PREFIX[self]

    @property
    def indexed(self) -> bool:
        """Whether placeholders carry their bind position."""
        return self in (Dialect.SQLITE, Dialect.POSTGRES)

    def placeholder(self, index: int) -> str:
        """Render the placeholder for the 1-based bind position *index*."""
        if index < 1:
            raise ValueError(f"Placeholder index must be >= 1, got {index}")
        if self.indexed:
            return f"{self.prefix}{index}"
        return self.prefix

    @classmethod
    def from_url(cls, url: str) -> Dialect:
        """
        Resolve the dialect from a connection URL's scheme prefix.

        ``sqlite`` and ``libsql`` share SQLite placeholders; ``postgres``
        covers ``postgresql`` and driver-qualified schemes such as
        ``postgresql+asyncpg``.

        Raises:
            ConfigurationError: If the scheme is not recognised.
        """
        scheme = url.split(":", 1)[0].lower()
        for prefix, name in _SCHEME_PREFIXES:
            if scheme.startswith(prefix):
                return cls(name)
        raise ConfigurationError(
            f"Cannot infer SQL dialect from URL scheme '{scheme}'. "
            f"Expected one of: {', '.join(p for p, _ in _SCHEME_PREFIXES)}"
        )


_PREFIX: dict[Dialect, str] = {
    Dialect.SQLITE: "?",
    Dialect.POSTGRES: "$",
    Dialect.MYSQL: "%s",
    Dialect.GENERIC: "?",
}
