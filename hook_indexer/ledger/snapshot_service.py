"""Hourly pool and protocol snapshot maintenance."""

from __future__ import annotations

import logging
from decimal import Decimal

from hook_indexer.adapters import PriceOraclePort
from hook_indexer.db import EntityStorePort
from hook_indexer.domain import (
    EntityKind,
    Pool,
    PoolHourlySnapshot,
    ProtocolHourlySnapshot,
    ProtocolState,
    domain_build_hourly_snapshot_id,
    domain_normalize_address,
)

from .interfaces import LedgerConfig, LedgerPort, SnapshotEnginePort
from .pool_math import ledger_calculate_annualized_rate, ledger_time_bucket

logger = logging.getLogger(__name__)


class HourlySnapshotService(SnapshotEnginePort):
    """Create at most one snapshot per subject and bucket, with an annualized rate.

    A snapshot is written on first touch of its bucket and never changes
    afterwards. Its rate compounds the yield and swap fees earned since the
    previous bucket's snapshot over a year; without a previous snapshot the
    rate is zero.
    """

    def __init__(
        self,
        store: EntityStorePort,
        ledger: LedgerPort,
        price_oracle: PriceOraclePort,
        config: LedgerConfig,
    ):
        """Initialize snapshot service dependencies.

        Args:
            store: Keyed entity store.
            ledger: Ledger used to reconcile lending yield before snapshotting.
            price_oracle: USD price source used to refresh token prices.
            config: Static ledger configuration.

        Raises:
            ValueError: Raised when a dependency is None.
        """

        if store is None:
            raise ValueError("store must not be None")
        if ledger is None:
            raise ValueError("ledger must not be None")
        if price_oracle is None:
            raise ValueError("price_oracle must not be None")
        if config is None:
            raise ValueError("config must not be None")

        self._store = store
        self._ledger = ledger
        self._price_oracle = price_oracle
        self._config = config
        self._quote_token_address = domain_normalize_address(config.quote_token_address)

    def snapshot_check(self, block_number: int, block_timestamp: int) -> ProtocolHourlySnapshot | None:
        """Run the hourly roll-over when the block opens a new bucket.

        Steps, in order: refresh every registered token price, reconcile
        lending yield for every registered pool, snapshot each pool, stamp the
        protocol's last snapshot time and snapshot the protocol.

        Args:
            block_number: Current block number.
            block_timestamp: Current block timestamp.

        Returns:
            ProtocolHourlySnapshot | None: Protocol snapshot of the new bucket,
            or None when the bucket was already processed.

        Raises:
            RuntimeError: Raised when the store fails.
        """

        protocol = self._ledger.ledger_load_protocol()
        bucket_seconds = self._config.snapshot_bucket_seconds
        current_bucket = ledger_time_bucket(block_timestamp, bucket_seconds)
        if protocol.last_snapshot_timestamp > 0 and current_bucket <= ledger_time_bucket(
            protocol.last_snapshot_timestamp, bucket_seconds
        ):
            return None

        logger.info("hourly roll-over bucket=%s block=%s", current_bucket, block_number)
        self.snapshot_refresh_token_prices(protocol, block_number)

        for pool_id in protocol.pool_ids:
            self._ledger.ledger_reconcile_pool_yield(pool_id, block_number, block_timestamp)
            pool = self._store.db_entity_get(EntityKind.POOL, pool_id)
            if pool is None:
                logger.error("registered pool missing pool_id=%s", pool_id)
                continue
            self.snapshot_get_or_create_pool_snapshot(pool, block_number, block_timestamp)

        protocol = self._ledger.ledger_load_protocol()
        protocol.last_snapshot_timestamp = block_timestamp
        self._store.db_entity_put(EntityKind.PROTOCOL, protocol.protocol_id, protocol)
        return self.snapshot_get_or_create_protocol_snapshot(protocol, block_number, block_timestamp)

    def snapshot_refresh_token_prices(self, protocol: ProtocolState, block_number: int) -> None:
        """Re-quote every registered token; the quote token stays pinned at one.

        A zero quote overwrites the cached price and is logged.
        """

        for token_id in protocol.token_ids:
            token = self._store.db_entity_get(EntityKind.TOKEN, token_id)
            if token is None:
                logger.error("registered token missing token_id=%s", token_id)
                continue

            if token.token_id == self._quote_token_address:
                price_usd = Decimal("1")
            else:
                price_usd = self._price_oracle.adapter_quote_token_usd(token.token_id, token.decimals, block_number)
            if price_usd == 0:
                logger.warning("token price quoted as zero token_id=%s block=%s", token.token_id, block_number)

            token.last_price_usd = price_usd
            self._store.db_entity_put(EntityKind.TOKEN, token.token_id, token)

    def snapshot_get_or_create_pool_snapshot(self, pool: Pool, block_number: int, block_timestamp: int) -> PoolHourlySnapshot:
        """Return the pool's snapshot for the block's bucket, creating it on first touch.

        Args:
            pool: Pool whose counters are captured.
            block_number: Current block number.
            block_timestamp: Current block timestamp selecting the bucket.

        Returns:
            PoolHourlySnapshot: Stored snapshot for the bucket.

        Raises:
            RuntimeError: Raised when the store fails.
        """

        bucket = ledger_time_bucket(block_timestamp, self._config.snapshot_bucket_seconds)
        snapshot_id = domain_build_hourly_snapshot_id(pool.pool_id, bucket)
        existing_snapshot = self._store.db_entity_get(EntityKind.POOL_HOURLY_SNAPSHOT, snapshot_id)
        if existing_snapshot is not None:
            return existing_snapshot

        rate = Decimal("0")
        previous_snapshot = self._store.db_entity_get(
            EntityKind.POOL_HOURLY_SNAPSHOT,
            domain_build_hourly_snapshot_id(pool.pool_id, bucket - 1),
        )
        if previous_snapshot is not None:
            period_yield_usd = (pool.cumulative_lending_yield_usd + pool.cumulative_swap_fee_usd) - (
                previous_snapshot.cumulative_lending_yield_usd + previous_snapshot.cumulative_swap_fee_usd
            )
            rate = ledger_calculate_annualized_rate(
                period_yield_usd,
                previous_snapshot.total_value_locked_usd,
                self._config.snapshot_bucket_seconds,
            )

        snapshot = PoolHourlySnapshot(
            snapshot_id=snapshot_id,
            pool_id=pool.pool_id,
            bucket=bucket,
            timestamp=block_timestamp,
            block_number=block_number,
            current_price=pool.current_price,
            shares=pool.shares,
            token0_amount=pool.token0_amount,
            token1_amount=pool.token1_amount,
            total_value_locked_usd=pool.total_value_locked_usd,
            cumulative_swap_fee_usd=pool.cumulative_swap_fee_usd,
            cumulative_lending_yield_usd=pool.cumulative_lending_yield_usd,
            cumulative_volume_usd=pool.cumulative_volume_usd,
            unclaimed_protocol_fee_usd=pool.unclaimed_protocol_fee_usd,
            claimed_protocol_fee_usd=pool.claimed_protocol_fee_usd,
            rate=rate,
        )
        self._store.db_entity_put(EntityKind.POOL_HOURLY_SNAPSHOT, snapshot_id, snapshot)
        return snapshot

    def snapshot_get_or_create_protocol_snapshot(
        self,
        protocol: ProtocolState,
        block_number: int,
        block_timestamp: int,
    ) -> ProtocolHourlySnapshot:
        """Return the protocol's snapshot for the block's bucket, creating it on first touch."""

        bucket = ledger_time_bucket(block_timestamp, self._config.snapshot_bucket_seconds)
        snapshot_id = domain_build_hourly_snapshot_id(protocol.protocol_id, bucket)
        existing_snapshot = self._store.db_entity_get(EntityKind.PROTOCOL_HOURLY_SNAPSHOT, snapshot_id)
        if existing_snapshot is not None:
            return existing_snapshot

        rate = Decimal("0")
        previous_snapshot = self._store.db_entity_get(
            EntityKind.PROTOCOL_HOURLY_SNAPSHOT,
            domain_build_hourly_snapshot_id(protocol.protocol_id, bucket - 1),
        )
        if previous_snapshot is not None:
            rate = ledger_calculate_annualized_rate(
                protocol.cumulative_fee_usd - previous_snapshot.cumulative_fee_usd,
                previous_snapshot.total_value_locked_usd,
                self._config.snapshot_bucket_seconds,
            )

        snapshot = ProtocolHourlySnapshot(
            snapshot_id=snapshot_id,
            protocol_id=protocol.protocol_id,
            bucket=bucket,
            timestamp=block_timestamp,
            block_number=block_number,
            total_value_locked_usd=protocol.total_value_locked_usd,
            cumulative_fee_usd=protocol.cumulative_fee_usd,
            cumulative_swap_fee_usd=protocol.cumulative_swap_fee_usd,
            cumulative_lending_yield_usd=protocol.cumulative_lending_yield_usd,
            cumulative_volume_usd=protocol.cumulative_volume_usd,
            cumulative_protocol_fee_usd=protocol.cumulative_protocol_fee_usd,
            rate=rate,
        )
        self._store.db_entity_put(EntityKind.PROTOCOL_HOURLY_SNAPSHOT, snapshot_id, snapshot)
        return snapshot


__all__ = ["HourlySnapshotService"]
