"""Shared test doubles and a wired ledger harness for accounting tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

import pytest

from hook_indexer.adapters import ChainConnectionError, ChainReadError, TokenMetadata, WrappedTokenAddresses
from hook_indexer.db import InMemoryEntityStore
from hook_indexer.domain import (
    DepositEvent,
    EntityKind,
    FeeAccruedEvent,
    FeeCollectedEvent,
    Pool,
    PoolCreatedEvent,
    ReserveBalances,
    SwapEvent,
    TransferEvent,
    WithdrawEvent,
    YieldSourceWithdrawEvent,
)
from hook_indexer.jobs import EventRouter
from hook_indexer.ledger import HourlySnapshotService, LedgerConfig, LendingHookLedgerService

POOL_MANAGER_ADDRESS = "0x" + "99" * 20
HOOK_ADDRESS = "0x" + "11" * 20
TOKEN0_ADDRESS = "0x" + "aa" * 20
TOKEN1_ADDRESS = "0x" + "bb" * 20
A_TOKEN0_ADDRESS = "0x" + "a0" * 20
A_TOKEN1_ADDRESS = "0x" + "b0" * 20
POOL_ID = "0x" + "cd" * 32
PROTOCOL_ID = "uniswap-v4-lending-hook"
ONE_TOKEN0 = 10**6
ONE_TOKEN1 = 10**18


class StubBalanceReader:
    """Return configured reserves per pool, or raise when `fail` is set."""

    def __init__(self) -> None:
        self.reserves: dict[str, ReserveBalances] = {}
        self.fail = False
        self.calls: list[tuple[str, int]] = []

    def adapter_read_reserves(self, pool: Pool, block_number: int) -> ReserveBalances:
        self.calls.append((pool.pool_id, block_number))
        if self.fail:
            raise ChainConnectionError("rpc unavailable")
        return self.reserves.get(pool.pool_id, ReserveBalances(reserve0=0, reserve1=0))


class StubPriceOracle:
    """Return configured USD prices; unknown tokens quote as zero."""

    def __init__(self, prices: dict[str, Decimal]):
        self.prices = dict(prices)

    def adapter_quote_token_usd(self, token_address: str, token_decimals: int, block_number: int | None) -> Decimal:
        _ = (token_decimals, block_number)
        return self.prices.get(token_address, Decimal("0"))


class StubTokenMetadataReader:
    """Return configured metadata; unknown tokens get probe-failure defaults."""

    def __init__(self, metadata: dict[str, TokenMetadata]):
        self.metadata = dict(metadata)

    def adapter_read_token_metadata(self, token_address: str) -> TokenMetadata:
        return self.metadata.get(token_address, TokenMetadata(symbol="", name="", decimals=0))


class StubHookReader:
    """Return configured wrapped tokens and liquidity conversions."""

    def __init__(self) -> None:
        self.wrapped_tokens = WrappedTokenAddresses(a_token0=A_TOKEN0_ADDRESS, a_token1=A_TOKEN1_ADDRESS)
        self.fail_wrapped_tokens = False
        self.liquidity_amounts: tuple[int, int] = (0, 0)
        self.fail_liquidity_amounts = False

    def adapter_read_wrapped_tokens(self, hook_address: str, block_number: int) -> WrappedTokenAddresses:
        _ = (hook_address, block_number)
        if self.fail_wrapped_tokens:
            raise ChainReadError("aToken probe failed", contract_address=hook_address)
        return self.wrapped_tokens

    def adapter_token_amounts_for_liquidity(self, hook_address: str, liquidity: int, block_number: int) -> tuple[int, int]:
        _ = (liquidity, block_number)
        if self.fail_liquidity_amounts:
            raise ChainReadError("liquidity math failed", contract_address=hook_address)
        return self.liquidity_amounts


@dataclass
class LedgerHarness:
    """Ledger, snapshot engine and router wired over an in-memory store and stubs."""

    store: InMemoryEntityStore
    balance_reader: StubBalanceReader
    price_oracle: StubPriceOracle
    hook_reader: StubHookReader
    ledger: LendingHookLedgerService
    snapshot_engine: HourlySnapshotService
    router: EventRouter
    _next_log_index: dict[int, int] = field(default_factory=dict)

    def chain_fields(self, block_number: int, contract_address: str = HOOK_ADDRESS) -> dict[str, object]:
        """Build chain context fields with a fresh log index within the block."""

        log_index = self._next_log_index.get(block_number, 0)
        self._next_log_index[block_number] = log_index + 1
        return {
            "contract_address": contract_address,
            "block_number": block_number,
            "block_timestamp": 1_700_000_000 + block_number * 12,
            "transaction_hash": f"0x{block_number:064x}",
            "log_index": log_index,
        }

    def pool_created_event(self, block_number: int = 1, sqrt_price_x96: int = 2**96) -> PoolCreatedEvent:
        return PoolCreatedEvent(
            **self.chain_fields(block_number, contract_address=POOL_MANAGER_ADDRESS),
            pool_id=POOL_ID,
            currency0=TOKEN0_ADDRESS,
            currency1=TOKEN1_ADDRESS,
            fee=3000,
            tick_spacing=60,
            hooks=HOOK_ADDRESS,
            sqrt_price_x96=sqrt_price_x96,
            tick=0,
        )

    def deposit_event(self, block_number: int, owner: str, assets0: int, assets1: int, shares: int) -> DepositEvent:
        return DepositEvent(
            **self.chain_fields(block_number),
            sender=owner,
            owner=owner,
            assets0=assets0,
            assets1=assets1,
            shares=shares,
        )

    def withdraw_event(self, block_number: int, owner: str, assets0: int, assets1: int, shares: int) -> WithdrawEvent:
        return WithdrawEvent(
            **self.chain_fields(block_number),
            sender=owner,
            receiver=owner,
            owner=owner,
            assets0=assets0,
            assets1=assets1,
            shares=shares,
        )

    def swap_event(self, block_number: int, amount0: int, amount1: int, fee: int = 3000) -> SwapEvent:
        return SwapEvent(
            **self.chain_fields(block_number, contract_address=POOL_MANAGER_ADDRESS),
            pool_id=POOL_ID,
            sender="0x" + "5e" * 20,
            amount0=amount0,
            amount1=amount1,
            sqrt_price_x96=2**96,
            liquidity=10**18,
            tick=0,
            fee=fee,
        )

    def transfer_event(self, block_number: int, sender: str, receiver: str, value: int) -> TransferEvent:
        return TransferEvent(**self.chain_fields(block_number), sender=sender, receiver=receiver, value=value)

    def fee_accrued_event(self, block_number: int, fee_delta: int) -> FeeAccruedEvent:
        return FeeAccruedEvent(**self.chain_fields(block_number), fee_delta=fee_delta)

    def fee_collected_event(self, block_number: int, amount0: int, amount1: int) -> FeeCollectedEvent:
        return FeeCollectedEvent(**self.chain_fields(block_number), amount0=amount0, amount1=amount1)

    def yield_source_withdraw_event(self, block_number: int, user: str, amount: int) -> YieldSourceWithdrawEvent:
        return YieldSourceWithdrawEvent(
            **self.chain_fields(block_number, contract_address="0x" + "ee" * 20),
            reserve=TOKEN0_ADDRESS,
            user=user,
            to=user,
            amount=amount,
        )

    def set_reserves(self, reserve0: int, reserve1: int) -> None:
        self.balance_reader.reserves[POOL_ID] = ReserveBalances(reserve0=reserve0, reserve1=reserve1)

    def load_pool(self) -> Pool:
        return self.store.db_entity_get(EntityKind.POOL, POOL_ID)


def build_ledger_harness(target_pool_id: str | None = None) -> LedgerHarness:
    """Wire a harness with token0 priced at 1 USD (6 decimals) and token1 at 2000 USD (18 decimals)."""

    store = InMemoryEntityStore()
    balance_reader = StubBalanceReader()
    price_oracle = StubPriceOracle({TOKEN0_ADDRESS: Decimal("1"), TOKEN1_ADDRESS: Decimal("2000")})
    metadata_reader = StubTokenMetadataReader(
        {
            TOKEN0_ADDRESS: TokenMetadata(symbol="USDC", name="USD Coin", decimals=6),
            TOKEN1_ADDRESS: TokenMetadata(symbol="WETH", name="Wrapped Ether", decimals=18),
        }
    )
    hook_reader = StubHookReader()
    config = LedgerConfig(
        protocol_id=PROTOCOL_ID,
        protocol_name="Uniswap V4 Lending Hook",
        quote_token_address=TOKEN0_ADDRESS,
        target_pool_id=target_pool_id,
    )
    ledger = LendingHookLedgerService(
        store=store,
        balance_reader=balance_reader,
        price_oracle=price_oracle,
        token_metadata_reader=metadata_reader,
        hook_reader=hook_reader,
        config=config,
    )
    snapshot_engine = HourlySnapshotService(store=store, ledger=ledger, price_oracle=price_oracle, config=config)
    router = EventRouter(ledger=ledger, snapshot_engine=snapshot_engine, store=store, cursor_id=PROTOCOL_ID)
    return LedgerHarness(
        store=store,
        balance_reader=balance_reader,
        price_oracle=price_oracle,
        hook_reader=hook_reader,
        ledger=ledger,
        snapshot_engine=snapshot_engine,
        router=router,
    )


@pytest.fixture
def ledger_harness() -> LedgerHarness:
    """Provide a fresh ledger harness."""

    return build_ledger_harness()


@pytest.fixture
def pooled_harness() -> LedgerHarness:
    """Provide a ledger harness whose pool is already created."""

    harness = build_ledger_harness()
    harness.ledger.ledger_create_pool(harness.pool_created_event())
    return harness
