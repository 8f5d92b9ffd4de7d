"""Decoded on-chain event contracts consumed by the event router.

Every event shares the chain context fields of `ChainEvent` and carries a
class-level `kind` tag. The set of kinds is closed: `EventKind` enumerates all
of them and the router refuses to start unless it handles each one.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Union


class EventKind(str, Enum):
    """Closed set of decoded event kinds."""

    POOL_CREATED = "pool_created"
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    SWAP = "swap"
    FEE_ACCRUED = "fee_accrued"
    FEE_COLLECTED = "fee_collected"
    TRANSFER = "transfer"
    YIELD_SOURCE_WITHDRAW = "yield_source_withdraw"


@dataclass(frozen=True)
class ChainEvent:
    """Chain context shared by all decoded events.

    Attributes:
        contract_address: Emitting contract address.
        block_number: Block height containing the log.
        block_timestamp: Block timestamp in UNIX seconds.
        transaction_hash: Transaction hash hex string.
        log_index: Block-wide log index.
    """

    kind: ClassVar[EventKind]

    contract_address: str
    block_number: int
    block_timestamp: int
    transaction_hash: str
    log_index: int

    def event_order_key(self) -> tuple[int, int]:
        """Return the total-order key of this event."""

        return (self.block_number, self.log_index)


@dataclass(frozen=True)
class PoolCreatedEvent(ChainEvent):
    """Pool initialization emitted by the pool manager."""

    kind: ClassVar[EventKind] = EventKind.POOL_CREATED

    pool_id: str
    currency0: str
    currency1: str
    fee: int
    tick_spacing: int
    hooks: str
    sqrt_price_x96: int
    tick: int


@dataclass(frozen=True)
class DepositEvent(ChainEvent):
    """Liquidity deposit emitted by the hook."""

    kind: ClassVar[EventKind] = EventKind.DEPOSIT

    sender: str
    owner: str
    assets0: int
    assets1: int
    shares: int
    referrer: str | None = None


@dataclass(frozen=True)
class WithdrawEvent(ChainEvent):
    """Liquidity withdrawal emitted by the hook."""

    kind: ClassVar[EventKind] = EventKind.WITHDRAW

    sender: str
    receiver: str
    owner: str
    assets0: int
    assets1: int
    shares: int


@dataclass(frozen=True)
class SwapEvent(ChainEvent):
    """Swap emitted by the pool manager.

    Amounts are signed from the swapper's perspective: negative means the
    swapper paid that token in, positive means the swapper received it.
    """

    kind: ClassVar[EventKind] = EventKind.SWAP

    pool_id: str
    sender: str
    amount0: int
    amount1: int
    sqrt_price_x96: int
    liquidity: int
    tick: int
    fee: int


@dataclass(frozen=True)
class FeeAccruedEvent(ChainEvent):
    """Protocol-fee accrual emitted by the hook, in liquidity units."""

    kind: ClassVar[EventKind] = EventKind.FEE_ACCRUED

    fee_delta: int


@dataclass(frozen=True)
class FeeCollectedEvent(ChainEvent):
    """Protocol-fee collection emitted by the hook, in token units."""

    kind: ClassVar[EventKind] = EventKind.FEE_COLLECTED

    amount0: int
    amount1: int


@dataclass(frozen=True)
class TransferEvent(ChainEvent):
    """Share-token transfer emitted by the hook."""

    kind: ClassVar[EventKind] = EventKind.TRANSFER

    sender: str
    receiver: str
    value: int


@dataclass(frozen=True)
class YieldSourceWithdrawEvent(ChainEvent):
    """Withdrawal from the external lending venue.

    Attributes:
        reserve: Underlying asset withdrawn.
        user: Account whose wrapped balance was burned.
        to: Recipient of the underlying asset.
        amount: Underlying amount withdrawn.
    """

    kind: ClassVar[EventKind] = EventKind.YIELD_SOURCE_WITHDRAW

    reserve: str
    user: str
    to: str
    amount: int


IndexerEvent = Union[
    PoolCreatedEvent,
    DepositEvent,
    WithdrawEvent,
    SwapEvent,
    FeeAccruedEvent,
    FeeCollectedEvent,
    TransferEvent,
    YieldSourceWithdrawEvent,
]

EVENT_TYPES: dict[EventKind, type[ChainEvent]] = {
    EventKind.POOL_CREATED: PoolCreatedEvent,
    EventKind.DEPOSIT: DepositEvent,
    EventKind.WITHDRAW: WithdrawEvent,
    EventKind.SWAP: SwapEvent,
    EventKind.FEE_ACCRUED: FeeAccruedEvent,
    EventKind.FEE_COLLECTED: FeeCollectedEvent,
    EventKind.TRANSFER: TransferEvent,
    EventKind.YIELD_SOURCE_WITHDRAW: YieldSourceWithdrawEvent,
}
