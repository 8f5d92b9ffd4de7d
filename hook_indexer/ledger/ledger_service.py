"""Event-driven accounting for lending-hook pools.

Each `ledger_record_*` operation loads the records it touches from the entity
store, mutates detached copies and writes them back. Lending yield is derived
by reconciliation: the hook's observed reserves are compared with the last
recorded reserves shifted by the event's own principal movement, and the
residual is attributed as yield before the observation replaces the recorded
reserves.
"""
# pylint: disable=too-many-instance-attributes,too-many-arguments

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from hook_indexer.adapters import (
    BalanceReaderPort,
    ChainReadError,
    HookContractPort,
    PriceOraclePort,
    TokenMetadataPort,
)
from hook_indexer.db import EntityStorePort
from hook_indexer.domain import (
    ZERO_ADDRESS,
    Account,
    ChainEvent,
    DepositEvent,
    DepositRecord,
    EntityKind,
    FeeAccruedEvent,
    FeeCollectedEvent,
    HookPoolLink,
    Pool,
    PoolCreatedEvent,
    Position,
    PositionSnapshot,
    ProtocolFeeAccrualRecord,
    ProtocolFeeClaimRecord,
    ProtocolState,
    SwapEvent,
    SwapRecord,
    Token,
    TransferEvent,
    TransferRecord,
    WithdrawalRecord,
    WithdrawEvent,
    YieldSourceWithdrawEvent,
    domain_build_event_record_id,
    domain_build_position_id,
    domain_normalize_address,
)

from .interfaces import LedgerConfig, LedgerPort
from .pool_math import ledger_convert_token_to_usd, ledger_extract_swap_fee, ledger_sqrt_price_x96_to_token_prices

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")


@dataclass(frozen=True)
class _PoolContext:
    """Pool with both of its tokens loaded."""

    pool: Pool
    token0: Token
    token1: Token


class LendingHookLedgerService(LedgerPort):
    """Maintain pool, position and protocol accounting from decoded events."""

    def __init__(
        self,
        store: EntityStorePort,
        balance_reader: BalanceReaderPort,
        price_oracle: PriceOraclePort,
        token_metadata_reader: TokenMetadataPort,
        hook_reader: HookContractPort,
        config: LedgerConfig,
    ):
        """Initialize ledger service dependencies.

        Args:
            store: Keyed entity store.
            balance_reader: Reader for the hook's idle and wrapped reserves.
            price_oracle: USD price source for tokens.
            token_metadata_reader: ERC-20 metadata source used at token creation.
            hook_reader: Reader for hook configuration and liquidity math.
            config: Static ledger configuration.

        Raises:
            ValueError: Raised when a dependency is None.
        """

        if store is None:
            raise ValueError("store must not be None")
        if balance_reader is None:
            raise ValueError("balance_reader must not be None")
        if price_oracle is None:
            raise ValueError("price_oracle must not be None")
        if token_metadata_reader is None:
            raise ValueError("token_metadata_reader must not be None")
        if hook_reader is None:
            raise ValueError("hook_reader must not be None")
        if config is None:
            raise ValueError("config must not be None")

        self._store = store
        self._balance_reader = balance_reader
        self._price_oracle = price_oracle
        self._token_metadata_reader = token_metadata_reader
        self._hook_reader = hook_reader
        self._config = config
        self._target_pool_id = None if config.target_pool_id is None else domain_normalize_address(config.target_pool_id)

    def ledger_load_protocol(self) -> ProtocolState:
        """Load the protocol record, creating it with zero counters on first use.

        Returns:
            ProtocolState: Detached protocol record.

        Raises:
            RuntimeError: Raised when the store fails.
        """

        load_result = self._store.db_entity_get_or_insert(
            EntityKind.PROTOCOL,
            self._config.protocol_id,
            lambda: ProtocolState(protocol_id=self._config.protocol_id, name=self._config.protocol_name),
        )
        if load_result.created:
            logger.info("created protocol record protocol_id=%s", self._config.protocol_id)
        return load_result.entity

    def ledger_create_pool(self, event: PoolCreatedEvent) -> None:
        """Register a newly initialized pool with its tokens and hook link.

        Pools other than the configured target pool are ignored. A pool that
        already exists is logged and left unchanged.

        Args:
            event: Pool initialization event.

        Raises:
            RuntimeError: Raised when the store fails.
        """

        pool_id = domain_normalize_address(event.pool_id)
        if self._target_pool_id is not None and pool_id != self._target_pool_id:
            logger.debug("ignoring non-target pool pool_id=%s", pool_id)
            return

        if self._store.db_entity_get(EntityKind.POOL, pool_id) is not None:
            logger.warning("pool already exists pool_id=%s", pool_id)
            return

        hook_address = domain_normalize_address(event.hooks)
        token0 = self._ledger_load_or_create_token(event.currency0, event.block_number)
        token1 = self._ledger_load_or_create_token(event.currency1, event.block_number)

        try:
            wrapped_tokens = self._hook_reader.adapter_read_wrapped_tokens(hook_address, event.block_number)
            a_token0, a_token1 = wrapped_tokens.a_token0, wrapped_tokens.a_token1
        except ChainReadError as error:
            logger.warning("wrapped token read failed hook=%s error=%s", hook_address, error)
            a_token0, a_token1 = None, None

        current_price, _ = ledger_sqrt_price_x96_to_token_prices(event.sqrt_price_x96, token0.decimals, token1.decimals)
        pool = Pool(
            pool_id=pool_id,
            hook=hook_address,
            token0=token0.token_id,
            token1=token1.token_id,
            fee=event.fee,
            tick_spacing=event.tick_spacing,
            current_price=current_price,
            created_at_timestamp=event.block_timestamp,
            created_at_block_number=event.block_number,
            updated_at_timestamp=event.block_timestamp,
            updated_at_block_number=event.block_number,
            a_token0=a_token0,
            a_token1=a_token1,
        )
        self._store.db_entity_put(EntityKind.POOL, pool_id, pool)
        self._store.db_entity_put(EntityKind.HOOK_POOL_LINK, hook_address, HookPoolLink(hook=hook_address, pool_id=pool_id))

        protocol = self.ledger_load_protocol()
        for token in (token0, token1):
            if token.token_id not in protocol.token_ids:
                protocol.token_ids.append(token.token_id)
        protocol.pool_ids.append(pool_id)
        self._store.db_entity_put(EntityKind.PROTOCOL, protocol.protocol_id, protocol)
        logger.info("created pool pool_id=%s hook=%s token0=%s token1=%s", pool_id, hook_address, token0.token_id, token1.token_id)

    def ledger_record_deposit(self, event: DepositEvent) -> None:
        """Apply one hook deposit.

        Reconciles yield against the deposited principal, adds the principal
        to TVL, credits shares to the owner's position (created on first use)
        and appends the deposit record and a position snapshot.

        Args:
            event: Hook deposit event.

        Raises:
            RuntimeError: Raised when the store fails.
        """

        context = self._ledger_resolve_hook_pool(event.contract_address)
        if context is None:
            logger.warning("dropping deposit for unknown hook=%s tx=%s", event.contract_address, event.transaction_hash)
            return

        pool = context.pool
        protocol = self.ledger_load_protocol()
        yield_usd = self._ledger_reconcile_reserves(context, event.assets0, event.assets1, event.block_number)
        principal_usd = self._ledger_amounts_to_usd(context, event.assets0, event.assets1)

        pool.total_value_locked_usd += principal_usd
        pool.shares += event.shares
        self._ledger_touch_pool(pool, event.block_number, event.block_timestamp)
        self._ledger_apply_yield_to_protocol(protocol, yield_usd)
        protocol.total_value_locked_usd += principal_usd

        owner = domain_normalize_address(event.owner)
        referrer = None if event.referrer is None else domain_normalize_address(event.referrer)
        self._store.db_entity_get_or_insert(
            EntityKind.ACCOUNT,
            owner,
            lambda: Account(account_id=owner, referrer=referrer),
        )
        position = self._ledger_load_or_create_position(owner, pool.pool_id, event.block_number, event.block_timestamp)
        position.shares += event.shares
        self._ledger_touch_position(position, event.block_number, event.block_timestamp)

        record_id = domain_build_event_record_id(event.transaction_hash, event.log_index)
        self._store.db_entity_put(
            EntityKind.DEPOSIT,
            record_id,
            DepositRecord(
                record_id=record_id,
                account=owner,
                pool_id=pool.pool_id,
                position_id=position.position_id,
                token0_amount=event.assets0,
                token1_amount=event.assets1,
                shares=event.shares,
                amount_usd=principal_usd,
                timestamp=event.block_timestamp,
                block_number=event.block_number,
            ),
        )
        self._ledger_save_position_with_snapshot(position, event)
        self._store.db_entity_put(EntityKind.POOL, pool.pool_id, pool)
        self._store.db_entity_put(EntityKind.PROTOCOL, protocol.protocol_id, protocol)

    def ledger_record_withdraw(self, event: WithdrawEvent) -> None:
        """Apply one hook withdrawal.

        The owner's position must already exist; otherwise the event is logged
        and dropped without touching any record.

        Args:
            event: Hook withdrawal event.

        Raises:
            RuntimeError: Raised when the store fails.
        """

        context = self._ledger_resolve_hook_pool(event.contract_address)
        if context is None:
            logger.warning("dropping withdraw for unknown hook=%s tx=%s", event.contract_address, event.transaction_hash)
            return

        pool = context.pool
        owner = domain_normalize_address(event.owner)
        position = self._store.db_entity_get(EntityKind.POSITION, domain_build_position_id(owner, pool.pool_id))
        if position is None:
            logger.warning("dropping withdraw without position owner=%s pool_id=%s", owner, pool.pool_id)
            return
        if position.shares < event.shares:
            logger.warning(
                "withdraw exceeds position shares, position goes negative position_id=%s shares=%s withdrawn=%s resulting=%s",
                position.position_id,
                position.shares,
                event.shares,
                position.shares - event.shares,
            )

        protocol = self.ledger_load_protocol()
        yield_usd = self._ledger_reconcile_reserves(context, -event.assets0, -event.assets1, event.block_number)
        principal_usd = self._ledger_amounts_to_usd(context, event.assets0, event.assets1)

        pool.total_value_locked_usd -= principal_usd
        pool.shares -= event.shares
        self._ledger_touch_pool(pool, event.block_number, event.block_timestamp)
        self._ledger_apply_yield_to_protocol(protocol, yield_usd)
        protocol.total_value_locked_usd -= principal_usd

        position.shares -= event.shares
        self._ledger_touch_position(position, event.block_number, event.block_timestamp)

        record_id = domain_build_event_record_id(event.transaction_hash, event.log_index)
        self._store.db_entity_put(
            EntityKind.WITHDRAWAL,
            record_id,
            WithdrawalRecord(
                record_id=record_id,
                account=owner,
                pool_id=pool.pool_id,
                position_id=position.position_id,
                token0_amount=event.assets0,
                token1_amount=event.assets1,
                shares=event.shares,
                amount_usd=principal_usd,
                timestamp=event.block_timestamp,
                block_number=event.block_number,
            ),
        )
        self._ledger_save_position_with_snapshot(position, event)
        self._store.db_entity_put(EntityKind.POOL, pool.pool_id, pool)
        self._store.db_entity_put(EntityKind.PROTOCOL, protocol.protocol_id, protocol)

    def ledger_record_swap(self, event: SwapEvent) -> None:
        """Apply one swap: fee on the output leg, volume, yield and price.

        Args:
            event: Pool-manager swap event.

        Raises:
            RuntimeError: Raised when the store fails.
        """

        context = self._ledger_load_pool_context(domain_normalize_address(event.pool_id))
        if context is None:
            logger.debug("dropping swap for unindexed pool_id=%s", event.pool_id)
            return

        pool = context.pool
        protocol = self.ledger_load_protocol()

        fee_leg = ledger_extract_swap_fee(event.amount0, event.amount1, event.fee)
        if fee_leg.token_index is None:
            fee_token = None
            fee_usd = _ZERO
            volume_usd = _ZERO
        else:
            leg_token = context.token0 if fee_leg.token_index == 0 else context.token1
            fee_token = leg_token.token_id
            fee_usd = ledger_convert_token_to_usd(fee_leg.fee_amount, leg_token.decimals, leg_token.last_price_usd)
            volume_usd = ledger_convert_token_to_usd(abs(fee_leg.output_amount), leg_token.decimals, leg_token.last_price_usd)

        # reserve movement is the negation of the swapper-signed amounts
        yield_usd = self._ledger_reconcile_reserves(context, -event.amount0, -event.amount1, event.block_number)

        pool.current_price, _ = ledger_sqrt_price_x96_to_token_prices(
            event.sqrt_price_x96,
            context.token0.decimals,
            context.token1.decimals,
        )
        pool.cumulative_swap_fee_usd += fee_usd
        pool.cumulative_volume_usd += volume_usd
        pool.total_value_locked_usd += fee_usd
        self._ledger_touch_pool(pool, event.block_number, event.block_timestamp)

        self._ledger_apply_yield_to_protocol(protocol, yield_usd)
        protocol.cumulative_swap_fee_usd += fee_usd
        protocol.cumulative_fee_usd += fee_usd
        protocol.cumulative_volume_usd += volume_usd
        protocol.total_value_locked_usd += fee_usd

        record_id = domain_build_event_record_id(event.transaction_hash, event.log_index)
        self._store.db_entity_put(
            EntityKind.SWAP,
            record_id,
            SwapRecord(
                record_id=record_id,
                pool_id=pool.pool_id,
                sender=domain_normalize_address(event.sender),
                amount0=event.amount0,
                amount1=event.amount1,
                fee=event.fee,
                fee_token=fee_token,
                fee_amount=fee_leg.fee_amount,
                fee_usd=fee_usd,
                volume_usd=volume_usd,
                timestamp=event.block_timestamp,
                block_number=event.block_number,
            ),
        )
        self._store.db_entity_put(EntityKind.POOL, pool.pool_id, pool)
        self._store.db_entity_put(EntityKind.PROTOCOL, protocol.protocol_id, protocol)

    def ledger_record_protocol_fee_accrual(self, event: FeeAccruedEvent) -> None:
        """Accrue protocol fees expressed in liquidity units.

        Args:
            event: Hook fee-accrual event.

        Raises:
            RuntimeError: Raised when the store fails.
        """

        context = self._ledger_resolve_hook_pool(event.contract_address)
        if context is None:
            logger.warning("dropping fee accrual for unknown hook=%s", event.contract_address)
            return

        pool = context.pool
        amount0, amount1 = self._ledger_liquidity_to_amounts(pool, event.fee_delta, event.block_number)
        amount_usd = self._ledger_amounts_to_usd(context, amount0, amount1)

        pool.unclaimed_protocol_fee_usd += amount_usd
        self._ledger_touch_pool(pool, event.block_number, event.block_timestamp)
        protocol = self.ledger_load_protocol()
        protocol.cumulative_protocol_fee_usd += amount_usd

        record_id = domain_build_event_record_id(event.transaction_hash, event.log_index)
        self._store.db_entity_put(
            EntityKind.PROTOCOL_FEE_ACCRUAL,
            record_id,
            ProtocolFeeAccrualRecord(
                record_id=record_id,
                pool_id=pool.pool_id,
                fee_delta=event.fee_delta,
                token0_amount=amount0,
                token1_amount=amount1,
                amount_usd=amount_usd,
                timestamp=event.block_timestamp,
                block_number=event.block_number,
            ),
        )
        self._store.db_entity_put(EntityKind.POOL, pool.pool_id, pool)
        self._store.db_entity_put(EntityKind.PROTOCOL, protocol.protocol_id, protocol)

    def ledger_record_protocol_fee_claim(self, event: FeeCollectedEvent) -> None:
        """Move collected protocol fees to the claimed counter.

        The unclaimed counter is reset to zero unconditionally, whatever the
        USD value of the collected amounts.

        Args:
            event: Hook fee-collection event.

        Raises:
            RuntimeError: Raised when the store fails.
        """

        context = self._ledger_resolve_hook_pool(event.contract_address)
        if context is None:
            logger.warning("dropping fee claim for unknown hook=%s", event.contract_address)
            return

        pool = context.pool
        amount_usd = self._ledger_amounts_to_usd(context, event.amount0, event.amount1)
        unclaimed_before_usd = pool.unclaimed_protocol_fee_usd
        if amount_usd != unclaimed_before_usd:
            logger.info(
                "fee claim differs from unclaimed balance pool_id=%s claimed_usd=%s unclaimed_usd=%s",
                pool.pool_id,
                amount_usd,
                unclaimed_before_usd,
            )

        pool.claimed_protocol_fee_usd += amount_usd
        pool.unclaimed_protocol_fee_usd = _ZERO
        self._ledger_touch_pool(pool, event.block_number, event.block_timestamp)

        record_id = domain_build_event_record_id(event.transaction_hash, event.log_index)
        self._store.db_entity_put(
            EntityKind.PROTOCOL_FEE_CLAIM,
            record_id,
            ProtocolFeeClaimRecord(
                record_id=record_id,
                pool_id=pool.pool_id,
                token0_amount=event.amount0,
                token1_amount=event.amount1,
                amount_usd=amount_usd,
                unclaimed_before_usd=unclaimed_before_usd,
                timestamp=event.block_timestamp,
                block_number=event.block_number,
            ),
        )
        self._store.db_entity_put(EntityKind.POOL, pool.pool_id, pool)

    def ledger_record_transfer(self, event: TransferEvent) -> None:
        """Move shares between two positions of the same pool.

        Self-transfers and mint/burn transfers (zero address on either side)
        are ignored; deposits and withdrawals account for those.

        Args:
            event: Hook share-token transfer event.

        Raises:
            RuntimeError: Raised when the store fails.
        """

        sender = domain_normalize_address(event.sender)
        receiver = domain_normalize_address(event.receiver)
        if sender == receiver or ZERO_ADDRESS in (sender, receiver):
            return

        context = self._ledger_resolve_hook_pool(event.contract_address)
        if context is None:
            logger.warning("dropping transfer for unknown hook=%s", event.contract_address)
            return

        pool = context.pool
        sender_position = self._store.db_entity_get(EntityKind.POSITION, domain_build_position_id(sender, pool.pool_id))
        if sender_position is None:
            logger.warning("dropping transfer without sender position sender=%s pool_id=%s", sender, pool.pool_id)
            return

        self._store.db_entity_get_or_insert(EntityKind.ACCOUNT, receiver, lambda: Account(account_id=receiver))
        receiver_position = self._ledger_load_or_create_position(receiver, pool.pool_id, event.block_number, event.block_timestamp)

        sender_position.shares -= event.value
        receiver_position.shares += event.value
        self._ledger_touch_position(sender_position, event.block_number, event.block_timestamp)
        self._ledger_touch_position(receiver_position, event.block_number, event.block_timestamp)

        amount0, amount1 = self._ledger_liquidity_to_amounts(pool, event.value, event.block_number)
        record_id = domain_build_event_record_id(event.transaction_hash, event.log_index)
        self._store.db_entity_put(
            EntityKind.TRANSFER,
            record_id,
            TransferRecord(
                record_id=record_id,
                pool_id=pool.pool_id,
                sender=sender,
                receiver=receiver,
                position_id=sender_position.position_id,
                shares=event.value,
                token0_amount=amount0,
                token1_amount=amount1,
                amount_usd=self._ledger_amounts_to_usd(context, amount0, amount1),
                timestamp=event.block_timestamp,
                block_number=event.block_number,
            ),
        )
        self._ledger_save_position_with_snapshot(sender_position, event)
        self._ledger_save_position_with_snapshot(receiver_position, event)

    def ledger_record_yield_source_withdraw(self, event: YieldSourceWithdrawEvent) -> None:
        """Reconcile yield when a hook pulls assets out of the lending venue.

        Moving assets from wrapped to idle custody leaves the hook's total
        reserves unchanged, so the reconciliation runs with zero principal
        movement. Withdrawals by accounts that are not indexed hooks are ignored.

        Args:
            event: Lending-venue withdrawal event.

        Raises:
            RuntimeError: Raised when the store fails.
        """

        link = self._store.db_entity_get(EntityKind.HOOK_POOL_LINK, domain_normalize_address(event.user))
        if link is None:
            return
        self.ledger_reconcile_pool_yield(link.pool_id, event.block_number, event.block_timestamp)

    def ledger_reconcile_pool_yield(self, pool_id: str, block_number: int, block_timestamp: int) -> Decimal:
        """Attribute lending yield accrued since the last observation of one pool.

        Args:
            pool_id: Pool identifier.
            block_number: Block at which reserves are observed.
            block_timestamp: Block timestamp used for update stamps.

        Returns:
            Decimal: Non-negative USD yield attributed by this call, zero for unknown pools.

        Raises:
            RuntimeError: Raised when the store fails.
        """

        context = self._ledger_load_pool_context(pool_id)
        if context is None:
            logger.warning("cannot reconcile unknown pool_id=%s", pool_id)
            return _ZERO

        protocol = self.ledger_load_protocol()
        yield_usd = self._ledger_reconcile_reserves(context, 0, 0, block_number)
        self._ledger_touch_pool(context.pool, block_number, block_timestamp)
        self._ledger_apply_yield_to_protocol(protocol, yield_usd)
        self._store.db_entity_put(EntityKind.POOL, context.pool.pool_id, context.pool)
        self._store.db_entity_put(EntityKind.PROTOCOL, protocol.protocol_id, protocol)
        return yield_usd

    def _ledger_reconcile_reserves(
        self,
        context: _PoolContext,
        principal_delta0: int,
        principal_delta1: int,
        block_number: int,
    ) -> Decimal:
        """Compute yield from observed reserves and overwrite the recorded reserves.

        Mutates `context.pool` in place: lending yield and TVL grow by the
        returned amount and the recorded reserves become the observation.
        """

        pool = context.pool
        try:
            observed = self._balance_reader.adapter_read_reserves(pool, block_number)
        except ChainReadError as error:
            logger.warning("reserve read failed pool_id=%s block=%s error=%s", pool.pool_id, block_number, error)
            pool.token0_amount += principal_delta0
            pool.token1_amount += principal_delta1
            return _ZERO

        yield0 = observed.reserve0 - principal_delta0 - pool.token0_amount
        yield1 = observed.reserve1 - principal_delta1 - pool.token1_amount
        yield_usd = self._ledger_amounts_to_usd(context, yield0, yield1)

        pool.token0_amount = observed.reserve0
        pool.token1_amount = observed.reserve1

        if yield_usd < _ZERO:
            logger.info("clamping negative yield pool_id=%s yield_usd=%s", pool.pool_id, yield_usd)
            return _ZERO

        pool.cumulative_lending_yield_usd += yield_usd
        pool.total_value_locked_usd += yield_usd
        return yield_usd

    def _ledger_liquidity_to_amounts(self, pool: Pool, liquidity: int, block_number: int) -> tuple[int, int]:
        try:
            amount0, amount1 = self._hook_reader.adapter_token_amounts_for_liquidity(pool.hook, liquidity, block_number)
        except ChainReadError as error:
            logger.warning("liquidity conversion failed hook=%s liquidity=%s error=%s", pool.hook, liquidity, error)
            return 0, 0
        return abs(amount0), abs(amount1)

    @staticmethod
    def _ledger_amounts_to_usd(context: _PoolContext, amount0: int, amount1: int) -> Decimal:
        return ledger_convert_token_to_usd(
            amount0, context.token0.decimals, context.token0.last_price_usd
        ) + ledger_convert_token_to_usd(amount1, context.token1.decimals, context.token1.last_price_usd)

    @staticmethod
    def _ledger_apply_yield_to_protocol(protocol: ProtocolState, yield_usd: Decimal) -> None:
        protocol.cumulative_lending_yield_usd += yield_usd
        protocol.cumulative_fee_usd += yield_usd
        protocol.total_value_locked_usd += yield_usd

    def _ledger_resolve_hook_pool(self, hook_address: str) -> _PoolContext | None:
        link = self._store.db_entity_get(EntityKind.HOOK_POOL_LINK, domain_normalize_address(hook_address))
        if link is None:
            return None
        return self._ledger_load_pool_context(link.pool_id)

    def _ledger_load_pool_context(self, pool_id: str) -> _PoolContext | None:
        pool = self._store.db_entity_get(EntityKind.POOL, pool_id)
        if pool is None:
            return None
        token0 = self._store.db_entity_get(EntityKind.TOKEN, pool.token0)
        token1 = self._store.db_entity_get(EntityKind.TOKEN, pool.token1)
        if token0 is None or token1 is None:
            logger.error("pool tokens missing pool_id=%s", pool_id)
            return None
        return _PoolContext(pool=pool, token0=token0, token1=token1)

    def _ledger_load_or_create_token(self, token_address: str, block_number: int) -> Token:
        normalized_token_address = domain_normalize_address(token_address)

        def _build_token() -> Token:
            metadata = self._token_metadata_reader.adapter_read_token_metadata(normalized_token_address)
            price_usd = self._price_oracle.adapter_quote_token_usd(normalized_token_address, metadata.decimals, block_number)
            return Token(
                token_id=normalized_token_address,
                symbol=metadata.symbol,
                name=metadata.name,
                decimals=metadata.decimals,
                last_price_usd=price_usd,
            )

        load_result = self._store.db_entity_get_or_insert(EntityKind.TOKEN, normalized_token_address, _build_token)
        if load_result.created:
            logger.info("created token token_id=%s symbol=%s", normalized_token_address, load_result.entity.symbol)
        return load_result.entity

    def _ledger_load_or_create_position(self, account: str, pool_id: str, block_number: int, block_timestamp: int) -> Position:
        position_id = domain_build_position_id(account, pool_id)
        load_result = self._store.db_entity_get_or_insert(
            EntityKind.POSITION,
            position_id,
            lambda: Position(
                position_id=position_id,
                account=account,
                pool_id=pool_id,
                created_at_timestamp=block_timestamp,
                created_at_block_number=block_number,
                updated_at_timestamp=block_timestamp,
                updated_at_block_number=block_number,
            ),
        )
        if load_result.created:
            opening_snapshot_id = f"{position_id}-opening"
            self._store.db_entity_put(
                EntityKind.POSITION_SNAPSHOT,
                opening_snapshot_id,
                PositionSnapshot(
                    snapshot_id=opening_snapshot_id,
                    position_id=position_id,
                    shares=0,
                    created_at_timestamp=block_timestamp - 1,
                    created_at_block_number=block_number,
                ),
            )
        return load_result.entity

    def _ledger_save_position_with_snapshot(self, position: Position, event: ChainEvent) -> None:
        self._store.db_entity_put(EntityKind.POSITION, position.position_id, position)
        snapshot_id = f"{position.position_id}-{event.transaction_hash}-{event.log_index}"
        self._store.db_entity_put(
            EntityKind.POSITION_SNAPSHOT,
            snapshot_id,
            PositionSnapshot(
                snapshot_id=snapshot_id,
                position_id=position.position_id,
                shares=position.shares,
                created_at_timestamp=event.block_timestamp,
                created_at_block_number=event.block_number,
            ),
        )

    @staticmethod
    def _ledger_touch_pool(pool: Pool, block_number: int, block_timestamp: int) -> None:
        pool.updated_at_timestamp = block_timestamp
        pool.updated_at_block_number = block_number

    @staticmethod
    def _ledger_touch_position(position: Position, block_number: int, block_timestamp: int) -> None:
        position.updated_at_timestamp = block_timestamp
        position.updated_at_block_number = block_number


__all__ = ["LendingHookLedgerService"]
