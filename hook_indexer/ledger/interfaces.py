"""Typed interfaces for ledger-layer services."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from hook_indexer.domain import (
    DepositEvent,
    FeeAccruedEvent,
    FeeCollectedEvent,
    PoolCreatedEvent,
    ProtocolHourlySnapshot,
    ProtocolState,
    SwapEvent,
    TransferEvent,
    WithdrawEvent,
    YieldSourceWithdrawEvent,
)


@dataclass(frozen=True)
class LedgerConfig:
    """Static ledger configuration, fixed after startup.

    Attributes:
        protocol_id: Identifier of the singleton protocol record.
        protocol_name: Human-readable protocol name.
        quote_token_address: Quote asset, always priced at exactly one.
        snapshot_bucket_seconds: Hourly snapshot bucket length.
        target_pool_id: Only this pool is indexed when set.
    """

    protocol_id: str
    protocol_name: str
    quote_token_address: str
    snapshot_bucket_seconds: int = 3600
    target_pool_id: str | None = None

    def __post_init__(self) -> None:
        if not self.protocol_id.strip():
            raise ValueError("protocol_id must not be blank")
        if not self.quote_token_address.strip():
            raise ValueError("quote_token_address must not be blank")
        if self.snapshot_bucket_seconds <= 0:
            raise ValueError("snapshot_bucket_seconds must be > 0")


class LedgerPort(Protocol):
    """Port definition for event-driven pool accounting."""

    def ledger_load_protocol(self) -> ProtocolState:
        """Load the protocol record, creating it on first use."""

    def ledger_create_pool(self, event: PoolCreatedEvent) -> None:
        """Register a newly initialized pool."""

    def ledger_record_deposit(self, event: DepositEvent) -> None:
        """Apply one hook deposit."""

    def ledger_record_withdraw(self, event: WithdrawEvent) -> None:
        """Apply one hook withdrawal."""

    def ledger_record_swap(self, event: SwapEvent) -> None:
        """Apply one swap."""

    def ledger_record_protocol_fee_accrual(self, event: FeeAccruedEvent) -> None:
        """Apply one protocol-fee accrual."""

    def ledger_record_protocol_fee_claim(self, event: FeeCollectedEvent) -> None:
        """Apply one protocol-fee collection."""

    def ledger_record_transfer(self, event: TransferEvent) -> None:
        """Apply one share transfer."""

    def ledger_record_yield_source_withdraw(self, event: YieldSourceWithdrawEvent) -> None:
        """Apply one external lending-venue withdrawal."""

    def ledger_reconcile_pool_yield(self, pool_id: str, block_number: int, block_timestamp: int) -> Decimal:
        """Attribute lending yield accrued since the last observation of one pool.

        Returns:
            Decimal: Non-negative USD yield attributed by this call.
        """


class SnapshotEnginePort(Protocol):
    """Port definition for hourly snapshot maintenance."""

    def snapshot_check(self, block_number: int, block_timestamp: int) -> ProtocolHourlySnapshot | None:
        """Run the hourly roll-over when a new bucket has started.

        Returns:
            ProtocolHourlySnapshot | None: Protocol snapshot of the new bucket, or None when no roll-over ran.
        """
