"""Connection settings read from the environment or a ``.env`` file."""

from __future__ import annotations

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .dialects import Dialect
from .exceptions import ConfigurationError

# Bare scheme -> async driver scheme understood by SQLAlchemy's asyncio
# extension. Driver-qualified URLs ("scheme+driver://") are left untouched.
_ASYNC_DRIVERS: dict[str, str] = {
    "sqlite": "sqlite+aiosqlite",
    "postgres": "postgresql+asyncpg",
    "postgresql": "postgresql+asyncpg",
    "mysql": "mysql+aiomysql",
    "mariadb": "mariadb+aiomysql",
}


def async_driver_url(url: str) -> str:
    """Upgrade a bare connection URL to its async driver variant.

    >>> async_driver_url("sqlite:///app.db")
    'sqlite+aiosqlite:///app.db'
    >>> async_driver_url("postgresql+asyncpg://localhost/app")
    'postgresql+asyncpg://localhost/app'
    """
    scheme, sep, rest = url.partition(":")
    if not sep:
        raise ConfigurationError(f"Invalid connection URL '{url}': missing scheme")
    if "+" in scheme:
        return url
    driver = _ASYNC_DRIVERS.get(scheme.lower())
    if driver is None:
        return url
    return f"{driver}:{rest}"


class DatabaseSettings(BaseSettings):
    """``DATABASE_*`` environment settings."""

    model_config = SettingsConfigDict(
        env_prefix="DATABASE_",
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    url: str | None = None
    echo: bool = False
    pool_size: int = 5
    dialect: Dialect | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def async_url(self) -> str:
        if not self.url:
            raise ConfigurationError("DATABASE_URL is not set")
        return async_driver_url(self.url)

    def resolved_dialect(self) -> Dialect:
        """The explicit ``DATABASE_DIALECT``, else the one implied by the URL."""
        if self.dialect is not None:
            return self.dialect
        if not self.url:
            raise ConfigurationError("DATABASE_URL is not set")
        return Dialect.from_url(self.url)
