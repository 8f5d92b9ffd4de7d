"""Indexed entity records maintained by the ledger.

Mutable records (protocol, token, pool, position, account, cursor) are updated
in place and written back through the entity store. Event-log records and
snapshots are frozen: once stored they never change.

Integer token amounts and share counts are arbitrary-precision `int`; USD
values, prices and rates are `Decimal`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum


ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


class EntityKind(str, Enum):
    """Closed set of entity kinds addressable through the entity store."""

    PROTOCOL = "protocol"
    TOKEN = "token"
    POOL = "pool"
    HOOK_POOL_LINK = "hook_pool_link"
    POSITION = "position"
    POSITION_SNAPSHOT = "position_snapshot"
    POOL_HOURLY_SNAPSHOT = "pool_hourly_snapshot"
    PROTOCOL_HOURLY_SNAPSHOT = "protocol_hourly_snapshot"
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    SWAP = "swap"
    TRANSFER = "transfer"
    PROTOCOL_FEE_ACCRUAL = "protocol_fee_accrual"
    PROTOCOL_FEE_CLAIM = "protocol_fee_claim"
    ACCOUNT = "account"
    INDEXER_CURSOR = "indexer_cursor"


@dataclass
class ProtocolState:
    """Protocol-wide aggregate counters.

    Attributes:
        protocol_id: Configured protocol identifier.
        name: Human-readable protocol name.
        total_value_locked_usd: Sum of pool TVL movements.
        cumulative_fee_usd: Swap fees plus lending yield.
        cumulative_swap_fee_usd: Swap fees only.
        cumulative_lending_yield_usd: Lending yield only.
        cumulative_volume_usd: Swap output-leg volume.
        cumulative_protocol_fee_usd: Accrued protocol fees.
        last_snapshot_timestamp: Block timestamp of the latest hourly check.
        pool_ids: Registered pool identifiers in creation order.
        token_ids: Registered token addresses in creation order.
    """

    protocol_id: str
    name: str
    total_value_locked_usd: Decimal = Decimal("0")
    cumulative_fee_usd: Decimal = Decimal("0")
    cumulative_swap_fee_usd: Decimal = Decimal("0")
    cumulative_lending_yield_usd: Decimal = Decimal("0")
    cumulative_volume_usd: Decimal = Decimal("0")
    cumulative_protocol_fee_usd: Decimal = Decimal("0")
    last_snapshot_timestamp: int = 0
    pool_ids: list[str] = field(default_factory=list)
    token_ids: list[str] = field(default_factory=list)


@dataclass
class Token:
    """ERC-20 token metadata with its cached USD price."""

    token_id: str
    symbol: str
    name: str
    decimals: int
    last_price_usd: Decimal = Decimal("0")


@dataclass
class Pool:
    """Hooked pool state, including last-observed external reserves."""

    pool_id: str
    hook: str
    token0: str
    token1: str
    fee: int
    tick_spacing: int
    current_price: Decimal
    created_at_timestamp: int
    created_at_block_number: int
    updated_at_timestamp: int
    updated_at_block_number: int
    a_token0: str | None = None
    a_token1: str | None = None
    shares: int = 0
    token0_amount: int = 0
    token1_amount: int = 0
    total_value_locked_usd: Decimal = Decimal("0")
    cumulative_swap_fee_usd: Decimal = Decimal("0")
    cumulative_lending_yield_usd: Decimal = Decimal("0")
    cumulative_volume_usd: Decimal = Decimal("0")
    unclaimed_protocol_fee_usd: Decimal = Decimal("0")
    claimed_protocol_fee_usd: Decimal = Decimal("0")


@dataclass(frozen=True)
class HookPoolLink:
    """Resolution record from a hook address to the pool it manages."""

    hook: str
    pool_id: str


@dataclass
class Position:
    """Share balance of one account in one pool."""

    position_id: str
    account: str
    pool_id: str
    created_at_timestamp: int
    created_at_block_number: int
    updated_at_timestamp: int
    updated_at_block_number: int
    shares: int = 0


@dataclass(frozen=True)
class PositionSnapshot:
    """Position shares captured at one event."""

    snapshot_id: str
    position_id: str
    shares: int
    created_at_timestamp: int
    created_at_block_number: int


@dataclass(frozen=True)
class PoolHourlySnapshot:
    """Point-in-time pool counters for one hour bucket."""

    snapshot_id: str
    pool_id: str
    bucket: int
    timestamp: int
    block_number: int
    current_price: Decimal
    shares: int
    token0_amount: int
    token1_amount: int
    total_value_locked_usd: Decimal
    cumulative_swap_fee_usd: Decimal
    cumulative_lending_yield_usd: Decimal
    cumulative_volume_usd: Decimal
    unclaimed_protocol_fee_usd: Decimal
    claimed_protocol_fee_usd: Decimal
    rate: Decimal


@dataclass(frozen=True)
class ProtocolHourlySnapshot:
    """Point-in-time protocol counters for one hour bucket."""

    snapshot_id: str
    protocol_id: str
    bucket: int
    timestamp: int
    block_number: int
    total_value_locked_usd: Decimal
    cumulative_fee_usd: Decimal
    cumulative_swap_fee_usd: Decimal
    cumulative_lending_yield_usd: Decimal
    cumulative_volume_usd: Decimal
    cumulative_protocol_fee_usd: Decimal
    rate: Decimal


@dataclass(frozen=True)
class DepositRecord:
    """Immutable deposit event-log record."""

    record_id: str
    account: str
    pool_id: str
    position_id: str
    token0_amount: int
    token1_amount: int
    shares: int
    amount_usd: Decimal
    timestamp: int
    block_number: int


@dataclass(frozen=True)
class WithdrawalRecord:
    """Immutable withdrawal event-log record."""

    record_id: str
    account: str
    pool_id: str
    position_id: str
    token0_amount: int
    token1_amount: int
    shares: int
    amount_usd: Decimal
    timestamp: int
    block_number: int


@dataclass(frozen=True)
class SwapRecord:
    """Immutable swap event-log record with derived fee and volume."""

    record_id: str
    pool_id: str
    sender: str
    amount0: int
    amount1: int
    fee: int
    fee_token: str | None
    fee_amount: int
    fee_usd: Decimal
    volume_usd: Decimal
    timestamp: int
    block_number: int


@dataclass(frozen=True)
class TransferRecord:
    """Immutable share-transfer event-log record."""

    record_id: str
    pool_id: str
    sender: str
    receiver: str
    position_id: str
    shares: int
    token0_amount: int
    token1_amount: int
    amount_usd: Decimal
    timestamp: int
    block_number: int


@dataclass(frozen=True)
class ProtocolFeeAccrualRecord:
    """Immutable protocol-fee accrual record."""

    record_id: str
    pool_id: str
    fee_delta: int
    token0_amount: int
    token1_amount: int
    amount_usd: Decimal
    timestamp: int
    block_number: int


@dataclass(frozen=True)
class ProtocolFeeClaimRecord:
    """Immutable protocol-fee collection record."""

    record_id: str
    pool_id: str
    token0_amount: int
    token1_amount: int
    amount_usd: Decimal
    unclaimed_before_usd: Decimal
    timestamp: int
    block_number: int


@dataclass
class Account:
    """Indexed account, optionally attributed to a referrer."""

    account_id: str
    referrer: str | None = None


@dataclass
class IndexerCursor:
    """Position of the last applied event in the (block, log index) order."""

    cursor_id: str
    block_number: int
    log_index: int
    block_timestamp: int


ENTITY_TYPES: dict[EntityKind, type] = {
    EntityKind.PROTOCOL: ProtocolState,
    EntityKind.TOKEN: Token,
    EntityKind.POOL: Pool,
    EntityKind.HOOK_POOL_LINK: HookPoolLink,
    EntityKind.POSITION: Position,
    EntityKind.POSITION_SNAPSHOT: PositionSnapshot,
    EntityKind.POOL_HOURLY_SNAPSHOT: PoolHourlySnapshot,
    EntityKind.PROTOCOL_HOURLY_SNAPSHOT: ProtocolHourlySnapshot,
    EntityKind.DEPOSIT: DepositRecord,
    EntityKind.WITHDRAWAL: WithdrawalRecord,
    EntityKind.SWAP: SwapRecord,
    EntityKind.TRANSFER: TransferRecord,
    EntityKind.PROTOCOL_FEE_ACCRUAL: ProtocolFeeAccrualRecord,
    EntityKind.PROTOCOL_FEE_CLAIM: ProtocolFeeClaimRecord,
    EntityKind.ACCOUNT: Account,
    EntityKind.INDEXER_CURSOR: IndexerCursor,
}


def domain_build_event_record_id(transaction_hash: str, log_index: int) -> str:
    """Build the natural key shared by all event-log records."""

    return f"{transaction_hash}-{log_index}"


def domain_build_position_id(account: str, pool_id: str) -> str:
    """Build the position key for one account/pool pair."""

    return f"{account}-{pool_id}"


def domain_build_hourly_snapshot_id(subject_id: str, bucket: int) -> str:
    """Build the hourly snapshot key for one subject and bucket."""

    return f"{subject_id}-{bucket}"


def domain_normalize_address(address: str) -> str:
    """Normalize a hex address or id to its lowercase canonical form.

    Raises:
        ValueError: Raised when the value is blank.
    """

    normalized_address = address.strip().lower()
    if not normalized_address:
        raise ValueError("address must not be blank")
    return normalized_address
