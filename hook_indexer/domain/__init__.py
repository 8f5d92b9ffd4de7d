"""Domain models used across application layer boundaries."""

from .entities import (
	ENTITY_TYPES,
	ZERO_ADDRESS,
	Account,
	DepositRecord,
	EntityKind,
	HookPoolLink,
	IndexerCursor,
	Pool,
	PoolHourlySnapshot,
	Position,
	PositionSnapshot,
	ProtocolFeeAccrualRecord,
	ProtocolFeeClaimRecord,
	ProtocolHourlySnapshot,
	ProtocolState,
	SwapRecord,
	Token,
	TransferRecord,
	WithdrawalRecord,
	domain_build_event_record_id,
	domain_build_hourly_snapshot_id,
	domain_build_position_id,
	domain_normalize_address,
)
from .events import (
	EVENT_TYPES,
	ChainEvent,
	DepositEvent,
	EventKind,
	FeeAccruedEvent,
	FeeCollectedEvent,
	IndexerEvent,
	PoolCreatedEvent,
	SwapEvent,
	TransferEvent,
	WithdrawEvent,
	YieldSourceWithdrawEvent,
)
from .models import HealthStatus, ReserveBalances

__all__ = [
	"ENTITY_TYPES",
	"ZERO_ADDRESS",
	"Account",
	"DepositRecord",
	"EntityKind",
	"HookPoolLink",
	"IndexerCursor",
	"Pool",
	"PoolHourlySnapshot",
	"Position",
	"PositionSnapshot",
	"ProtocolFeeAccrualRecord",
	"ProtocolFeeClaimRecord",
	"ProtocolHourlySnapshot",
	"ProtocolState",
	"SwapRecord",
	"Token",
	"TransferRecord",
	"WithdrawalRecord",
	"domain_build_event_record_id",
	"domain_build_hourly_snapshot_id",
	"domain_build_position_id",
	"domain_normalize_address",
	"EVENT_TYPES",
	"ChainEvent",
	"DepositEvent",
	"EventKind",
	"FeeAccruedEvent",
	"FeeCollectedEvent",
	"IndexerEvent",
	"PoolCreatedEvent",
	"SwapEvent",
	"TransferEvent",
	"WithdrawEvent",
	"YieldSourceWithdrawEvent",
	"HealthStatus",
	"ReserveBalances",
]
