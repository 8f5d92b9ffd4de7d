"""Ledger package for pool accounting and hourly snapshots."""

from .interfaces import LedgerConfig, LedgerPort, SnapshotEnginePort
from .ledger_service import LendingHookLedgerService
from .pool_math import (
	RATE_OVERFLOW_SENTINEL,
	SECONDS_PER_YEAR,
	SwapFeeLeg,
	ledger_calculate_annualized_rate,
	ledger_convert_token_to_usd,
	ledger_extract_swap_fee,
	ledger_sqrt_price_x96_to_token_prices,
	ledger_time_bucket,
)
from .snapshot_service import HourlySnapshotService

__all__ = [
	"HourlySnapshotService",
	"LedgerConfig",
	"LedgerPort",
	"LendingHookLedgerService",
	"RATE_OVERFLOW_SENTINEL",
	"SECONDS_PER_YEAR",
	"SnapshotEnginePort",
	"SwapFeeLeg",
	"ledger_calculate_annualized_rate",
	"ledger_convert_token_to_usd",
	"ledger_extract_swap_fee",
	"ledger_sqrt_price_x96_to_token_prices",
	"ledger_time_bucket",
]
