"""In-process entity store used for dry-run replays and tests."""

from __future__ import annotations

import copy
from contextlib import contextmanager
from typing import Any, Callable, Iterator

from hook_indexer.domain import EntityKind

from .codec import db_entity_validate_key, db_entity_validate_type
from .interfaces import EntityLoadResult, EntityStorePort


class InMemoryEntityStore(EntityStorePort):
    """Dictionary-backed entity store.

    Entities are deep-copied on the way in and out, so a caller mutating a
    loaded record sees no effect until it writes the record back.
    """

    def __init__(self) -> None:
        self._entities: dict[tuple[EntityKind, str], Any] = {}
        self._transaction_depth = 0

    def db_entity_get(self, kind: EntityKind, entity_id: str) -> Any | None:
        key = db_entity_validate_key(kind, entity_id)
        entity = self._entities.get(key)
        return None if entity is None else copy.deepcopy(entity)

    def db_entity_put(self, kind: EntityKind, entity_id: str, entity: Any) -> None:
        key = db_entity_validate_key(kind, entity_id)
        db_entity_validate_type(kind, entity)
        self._entities[key] = copy.deepcopy(entity)

    def db_entity_get_or_insert(
        self,
        kind: EntityKind,
        entity_id: str,
        factory: Callable[[], Any],
    ) -> EntityLoadResult:
        existing_entity = self.db_entity_get(kind, entity_id)
        if existing_entity is not None:
            return EntityLoadResult(entity=existing_entity, created=False)

        created_entity = factory()
        self.db_entity_put(kind, entity_id, created_entity)
        return EntityLoadResult(entity=copy.deepcopy(created_entity), created=True)

    @contextmanager
    def db_entity_transaction(self) -> Iterator[None]:
        """Restore the pre-block entity map when the outermost block raises."""

        if self._transaction_depth > 0:
            self._transaction_depth += 1
            try:
                yield
            finally:
                self._transaction_depth -= 1
            return

        # Stored values are replaced on put, never mutated in place.
        saved_entities = dict(self._entities)
        self._transaction_depth = 1
        try:
            yield
        except BaseException:
            self._entities = saved_entities
            raise
        finally:
            self._transaction_depth = 0

    def db_entity_count(self, kind: EntityKind) -> int:
        """Return the number of stored entities of one kind."""

        return sum(1 for stored_kind, _ in self._entities if stored_kind is kind)
