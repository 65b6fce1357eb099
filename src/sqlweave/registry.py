"""ModelRegistry: maps table names to model classes for migration."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .model import Model

logger = logging.getLogger("sqlweave.registry")


class ModelRegistry:
    """Registry for mapping ``table_name: str`` → ``type[Model]``.

    Concrete :class:`~sqlweave.model.Model` subclasses register themselves
    with :data:`default_registry` when they are defined. Registration
    order is preserved so that tables referenced by foreign keys are
    created before the tables that reference them.

    Create instances per application context for isolation::

        registry = ModelRegistry()
        registry.register(User)
        await db.migrate(*registry.models())
    """

    def __init__(self) -> None:
        self._registry: dict[str, type[Model]] = {}

    def register(self, model: type[Model]) -> None:
        """Register *model* under its table name, replacing any previous one."""
        name = model.table_name()
        previous = self._registry.get(name)
        if previous is not None and previous is not model:
            logger.warning(
                "Table '%s' re-registered: %s replaces %s",
                name,
                model.__qualname__,
                previous.__qualname__,
            )
        self._registry[name] = model
        logger.debug("Registered model %s as table '%s'", model.__qualname__, name)

    def unregister(self, table_name: str) -> None:
        self._registry.pop(table_name, None)

    def get(self, table_name: str) -> type[Model] | None:
        """Look up a model class by table name."""
        return self._registry.get(table_name)

    def has(self, table_name: str) -> bool:
        """Return ``True`` if *table_name* is registered."""
        return table_name in self._registry

    def models(self) -> list[type[Model]]:
        """All registered models in registration order."""
        return list(self._registry.values())

    def list_registered(self) -> list[str]:
        """Return all registered table names."""
        return list(self._registry.keys())

    def clear(self) -> None:
        """Remove all registrations (testing utility)."""
        self._registry.clear()


default_registry = ModelRegistry()
