"""SQLAlchemy-backed entity store.

Every entity is one row of `indexer_entity`, keyed by `(entity_kind,
entity_id)` with a JSON text payload. Writes use `INSERT ... ON CONFLICT DO
UPDATE`, which both PostgreSQL and SQLite accept.

Inside `db_entity_transaction` every read and write of the calling thread
goes through one connection opened with `engine.begin()`; outside it each
call runs on its own connection and commits immediately.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Callable, Iterator

from sqlalchemy import Connection, Engine, text
from sqlalchemy.exc import SQLAlchemyError

from hook_indexer.domain import EntityKind

from .codec import db_entity_decode, db_entity_encode, db_entity_validate_key, db_entity_validate_type
from .interfaces import EntityLoadResult, EntityStorePort


class SQLAlchemyEntityStore(EntityStorePort):
    """SQLAlchemy implementation of keyed entity reads and UPSERT writes."""

    def __init__(self, engine: Engine):
        """Initialize entity store.

        Args:
            engine: SQLAlchemy engine used for all persistence operations.

        Raises:
            ValueError: Raised when engine is invalid.
        """

        if engine is None:
            raise ValueError("engine must not be None")

        self._engine = engine
        self._transaction_state = threading.local()

    def db_entity_get(self, kind: EntityKind, entity_id: str) -> Any | None:
        """Fetch one entity by kind and id.

        Args:
            kind: Entity kind.
            entity_id: Entity identifier within the kind.

        Returns:
            Any | None: Decoded entity, or None when absent.

        Raises:
            ValueError: Raised when the key or stored payload is invalid.
            RuntimeError: Raised when the read fails.
        """

        normalized_kind, normalized_entity_id = db_entity_validate_key(kind, entity_id)

        try:
            with self._connection_scope(write=False) as connection:
                row = connection.execute(
                    text(
                        "SELECT payload FROM indexer_entity "
                        "WHERE entity_kind = :entity_kind AND entity_id = :entity_id"
                    ),
                    {"entity_kind": normalized_kind.value, "entity_id": normalized_entity_id},
                ).first()
        except SQLAlchemyError as error:
            raise RuntimeError("entity read failed") from error

        if row is None:
            return None
        return db_entity_decode(normalized_kind, str(row[0]))

    def db_entity_put(self, kind: EntityKind, entity_id: str, entity: Any) -> None:
        """Insert or replace one entity.

        Args:
            kind: Entity kind.
            entity_id: Entity identifier within the kind.
            entity: Entity instance of the type registered for `kind`.

        Raises:
            ValueError: Raised when the key or entity type is invalid.
            RuntimeError: Raised when the write fails.
        """

        normalized_kind, normalized_entity_id = db_entity_validate_key(kind, entity_id)
        db_entity_validate_type(normalized_kind, entity)

        try:
            with self._connection_scope(write=True) as connection:
                connection.execute(
                    text(
                        "INSERT INTO indexer_entity (entity_kind, entity_id, payload) "
                        "VALUES (:entity_kind, :entity_id, :payload) "
                        "ON CONFLICT (entity_kind, entity_id) DO UPDATE SET "
                        "payload = excluded.payload"
                    ),
                    {
                        "entity_kind": normalized_kind.value,
                        "entity_id": normalized_entity_id,
                        "payload": db_entity_encode(entity),
                    },
                )
        except SQLAlchemyError as error:
            raise RuntimeError("entity upsert failed") from error

    def db_entity_get_or_insert(
        self,
        kind: EntityKind,
        entity_id: str,
        factory: Callable[[], Any],
    ) -> EntityLoadResult:
        """Fetch one entity, inserting the factory result when absent.

        Raises:
            ValueError: Raised when the key or built entity is invalid.
            RuntimeError: Raised when persistence fails.
        """

        existing_entity = self.db_entity_get(kind, entity_id)
        if existing_entity is not None:
            return EntityLoadResult(entity=existing_entity, created=False)

        created_entity = factory()
        self.db_entity_put(kind, entity_id, created_entity)
        return EntityLoadResult(entity=created_entity, created=True)

    @contextmanager
    def db_entity_transaction(self) -> Iterator[None]:
        """Run the block on one connection and commit once when it exits.

        Raises:
            RuntimeError: Raised when opening or committing the transaction fails.
        """

        if self._active_connection() is not None:
            yield
            return

        try:
            with self._engine.begin() as connection:
                self._transaction_state.connection = connection
                try:
                    yield
                finally:
                    self._transaction_state.connection = None
        except SQLAlchemyError as error:
            raise RuntimeError("entity transaction failed") from error

    def _active_connection(self) -> Connection | None:
        return getattr(self._transaction_state, "connection", None)

    @contextmanager
    def _connection_scope(self, write: bool) -> Iterator[Connection]:
        active_connection = self._active_connection()
        if active_connection is not None:
            yield active_connection
            return

        if write:
            with self._engine.begin() as connection:
                yield connection
        else:
            with self._engine.connect() as connection:
                yield connection
