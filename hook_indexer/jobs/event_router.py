"""Ordered, idempotent dispatch of decoded events to the ledger."""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Mapping

from hook_indexer.db import EntityStorePort
from hook_indexer.domain import ChainEvent, EntityKind, EventKind, IndexerCursor
from hook_indexer.ledger import LedgerPort, SnapshotEnginePort

logger = logging.getLogger(__name__)


def job_router_validate_handler_table(handlers: Mapping[EventKind, Callable[[Any], None]]) -> None:
    """Require exactly one handler per `EventKind` member.

    Raises:
        ValueError: Raised when a kind is unhandled or an unknown key is present.
    """

    missing_kinds = sorted(kind.value for kind in EventKind if kind not in handlers)
    if missing_kinds:
        raise ValueError(f"event handlers missing for kinds: {', '.join(missing_kinds)}")
    unknown_keys = [key for key in handlers if not isinstance(key, EventKind)]
    if unknown_keys:
        raise ValueError(f"event handler table has unknown keys: {unknown_keys!r}")


class EventRouter:
    """Dispatch each event to its ledger handler exactly once.

    A persisted cursor records the (block number, log index) of the last
    applied event. Events at or before the cursor are redeliveries and are
    skipped, so counters are never applied twice. The handler, the hourly
    check and the cursor write share one store transaction, so a failed
    event leaves no partial writes behind.
    """

    def __init__(
        self,
        ledger: LedgerPort,
        snapshot_engine: SnapshotEnginePort,
        store: EntityStorePort,
        cursor_id: str,
        snapshot_trigger_kinds: Iterable[EventKind] = (EventKind.SWAP,),
    ):
        """Initialize event router.

        Args:
            ledger: Ledger receiving the events.
            snapshot_engine: Snapshot engine asked to roll over after trigger kinds.
            store: Entity store holding the cursor.
            cursor_id: Identifier of the persisted cursor record.
            snapshot_trigger_kinds: Kinds after which the hourly check runs.

        Raises:
            ValueError: Raised when dependencies are invalid.
        """

        if ledger is None:
            raise ValueError("ledger must not be None")
        if snapshot_engine is None:
            raise ValueError("snapshot_engine must not be None")
        if store is None:
            raise ValueError("store must not be None")
        if not cursor_id.strip():
            raise ValueError("cursor_id must not be blank")

        self._snapshot_engine = snapshot_engine
        self._store = store
        self._cursor_id = cursor_id.strip()
        self._snapshot_trigger_kinds = frozenset(EventKind(kind) for kind in snapshot_trigger_kinds)
        self._handlers: dict[EventKind, Callable[[Any], None]] = {
            EventKind.POOL_CREATED: ledger.ledger_create_pool,
            EventKind.DEPOSIT: ledger.ledger_record_deposit,
            EventKind.WITHDRAW: ledger.ledger_record_withdraw,
            EventKind.SWAP: ledger.ledger_record_swap,
            EventKind.FEE_ACCRUED: ledger.ledger_record_protocol_fee_accrual,
            EventKind.FEE_COLLECTED: ledger.ledger_record_protocol_fee_claim,
            EventKind.TRANSFER: ledger.ledger_record_transfer,
            EventKind.YIELD_SOURCE_WITHDRAW: ledger.ledger_record_yield_source_withdraw,
        }
        job_router_validate_handler_table(self._handlers)

    def job_router_dispatch(self, event: ChainEvent) -> bool:
        """Apply one event unless it is a redelivery.

        Args:
            event: Decoded event.

        Returns:
            bool: True when applied, False when skipped as a redelivery.

        Raises:
            RuntimeError: Raised when the store fails.
        """

        cursor = self.job_router_load_cursor()
        if cursor is not None and event.event_order_key() <= (cursor.block_number, cursor.log_index):
            logger.info(
                "skipping redelivered event kind=%s block=%s log_index=%s cursor=(%s, %s)",
                event.kind.value,
                event.block_number,
                event.log_index,
                cursor.block_number,
                cursor.log_index,
            )
            return False

        with self._store.db_entity_transaction():
            self._handlers[event.kind](event)
            if event.kind in self._snapshot_trigger_kinds:
                self._snapshot_engine.snapshot_check(event.block_number, event.block_timestamp)

            self._store.db_entity_put(
                EntityKind.INDEXER_CURSOR,
                self._cursor_id,
                IndexerCursor(
                    cursor_id=self._cursor_id,
                    block_number=event.block_number,
                    log_index=event.log_index,
                    block_timestamp=event.block_timestamp,
                ),
            )
        return True

    def job_router_load_cursor(self) -> IndexerCursor | None:
        """Return the persisted cursor, or None before the first event."""

        return self._store.db_entity_get(EntityKind.INDEXER_CURSOR, self._cursor_id)
