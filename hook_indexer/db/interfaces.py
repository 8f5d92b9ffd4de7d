"""Typed interfaces for database-layer services.

All SQL access must remain in the db package and its submodules. The ledger
core depends only on `EntityStorePort`.
"""

from dataclasses import dataclass
from typing import Any, Callable, ContextManager, Protocol

from hook_indexer.domain import EntityKind, HealthStatus


class DatabaseHealthPort(Protocol):
    """Port definition for database connectivity verification."""

    def db_connection_label(self) -> str:
        """Return a stable label for the active database connection target.

        Returns:
            str: Database target label for diagnostics.

        Raises:
            RuntimeError: Raised when connection metadata is unavailable.
        """

    def db_check_health(self) -> HealthStatus:
        """Check database connectivity and return deterministic health payload.

        Returns:
            HealthStatus: Database health status payload.

        Raises:
            ConnectionError: Raised when database cannot be reached.
        """


@dataclass(frozen=True)
class EntityLoadResult:
    """Result payload for load-or-create entity access.

    Attributes:
        entity: Loaded or newly inserted entity.
        created: Whether the entity was created by this call.
    """

    entity: Any
    created: bool


class EntityStorePort(Protocol):
    """Port definition for keyed entity persistence."""

    def db_entity_get(self, kind: EntityKind, entity_id: str) -> Any | None:
        """Fetch one entity by kind and id.

        Args:
            kind: Entity kind.
            entity_id: Entity identifier within the kind.

        Returns:
            Any | None: Detached entity copy, or None when absent.

        Raises:
            ValueError: Raised when kind or id is invalid.
            RuntimeError: Raised when the read fails.
        """

    def db_entity_put(self, kind: EntityKind, entity_id: str, entity: Any) -> None:
        """Insert or replace one entity.

        Args:
            kind: Entity kind.
            entity_id: Entity identifier within the kind.
            entity: Entity instance of the type registered for `kind`.

        Returns:
            None: The entity is persisted as a side effect.

        Raises:
            ValueError: Raised when kind, id or entity type is invalid.
            RuntimeError: Raised when the write fails.
        """

    def db_entity_get_or_insert(
        self,
        kind: EntityKind,
        entity_id: str,
        factory: Callable[[], Any],
    ) -> EntityLoadResult:
        """Fetch one entity, inserting the factory result when absent.

        Args:
            kind: Entity kind.
            entity_id: Entity identifier within the kind.
            factory: Zero-argument builder invoked only when the entity is absent.

        Returns:
            EntityLoadResult: Entity and creation flag.

        Raises:
            ValueError: Raised when kind, id or built entity type is invalid.
            RuntimeError: Raised when persistence fails.
        """

    def db_entity_transaction(self) -> ContextManager[None]:
        """Group every read and write inside the block into one unit of work.

        Writes made inside the block become visible to other readers only
        when the block exits normally. When the block raises, every write made
        inside it is discarded and the error propagates. Nested blocks join
        the outermost one.

        Returns:
            ContextManager[None]: Context manager scoping the unit of work.

        Raises:
            RuntimeError: Raised when the commit fails.
        """
