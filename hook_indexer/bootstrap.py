"""Application bootstrap wiring for startup validation and dependency assembly."""

from pathlib import Path

from fastapi import FastAPI

from hook_indexer.adapters import (
    Web3BalanceReader,
    Web3ContractCaller,
    Web3HookContractReader,
    Web3PriceOracle,
    Web3TokenMetadataReader,
    adapter_create_web3,
)
from hook_indexer.api import create_api_application
from hook_indexer.config import AppSettings, config_load_settings
from hook_indexer.db import (
    EntityStorePort,
    InMemoryEntityStore,
    SQLAlchemyDatabaseHealthService,
    SQLAlchemyEntityStore,
    db_create_engine,
)
from hook_indexer.domain import EventKind
from hook_indexer.jobs import EventReplayOrchestrator, EventReplayOrchestratorConfig, EventRouter
from hook_indexer.ledger import HourlySnapshotService, LedgerConfig, LendingHookLedgerService


def bootstrap_create_ledger_config(settings: AppSettings) -> LedgerConfig:
    """Build the static ledger configuration from validated settings.

    Args:
        settings: Validated application settings.

    Returns:
        LedgerConfig: Immutable ledger configuration.

    Raises:
        ValueError: Raised when settings values are inconsistent.
    """

    return LedgerConfig(
        protocol_id=settings.protocol_id,
        protocol_name=settings.protocol_name,
        quote_token_address=settings.quote_token_address,
        snapshot_bucket_seconds=settings.snapshot_bucket_seconds,
        target_pool_id=settings.target_pool_id,
    )


def bootstrap_create_event_router(settings: AppSettings, store: EntityStorePort) -> EventRouter:
    """Wire chain adapters, ledger and snapshot engine behind one event router.

    Args:
        settings: Validated application settings.
        store: Entity store the ledger writes to.

    Returns:
        EventRouter: Router ready to dispatch decoded events.

    Raises:
        ValueError: Raised when settings values are invalid.
    """

    ledger_config = bootstrap_create_ledger_config(settings)
    caller = Web3ContractCaller(
        web3=adapter_create_web3(settings.rpc_url, request_timeout_seconds=settings.rpc_request_timeout_seconds)
    )
    token_metadata_reader = Web3TokenMetadataReader(caller=caller)
    price_oracle = Web3PriceOracle(
        caller=caller,
        quote_token_address=settings.quote_token_address,
        primary_quoter_address=settings.primary_quoter_address,
        fallback_quoter_address=settings.fallback_quoter_address,
    )
    ledger = LendingHookLedgerService(
        store=store,
        balance_reader=Web3BalanceReader(caller=caller),
        price_oracle=price_oracle,
        token_metadata_reader=token_metadata_reader,
        hook_reader=Web3HookContractReader(caller=caller),
        config=ledger_config,
    )
    snapshot_engine = HourlySnapshotService(
        store=store,
        ledger=ledger,
        price_oracle=price_oracle,
        config=ledger_config,
    )
    return EventRouter(
        ledger=ledger,
        snapshot_engine=snapshot_engine,
        store=store,
        cursor_id=settings.protocol_id,
        snapshot_trigger_kinds=[EventKind(kind) for kind in settings.snapshot_trigger_event_kinds],
    )


def bootstrap_create_application() -> FastAPI:
    """Assemble the read API after validating startup configuration.

    Returns:
        FastAPI: Fully initialized FastAPI application instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    settings = config_load_settings()
    engine = db_create_engine(database_url=settings.database_url)
    return create_api_application(
        settings=settings,
        db_health_service=SQLAlchemyDatabaseHealthService(engine=engine),
        store=SQLAlchemyEntityStore(engine=engine),
    )


def bootstrap_create_replay_orchestrator(events_file_path: Path, dry_run: bool = False) -> EventReplayOrchestrator:
    """Build the replay orchestrator for the CLI.

    Args:
        events_file_path: JSON-lines events file.
        dry_run: Apply events to an in-memory store instead of the database.

    Returns:
        EventReplayOrchestrator: Fully wired replay orchestrator.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    settings = config_load_settings()
    if dry_run:
        store: EntityStorePort = InMemoryEntityStore()
    else:
        store = SQLAlchemyEntityStore(engine=db_create_engine(database_url=settings.database_url))
    return EventReplayOrchestrator(
        router=bootstrap_create_event_router(settings=settings, store=store),
        config=EventReplayOrchestratorConfig(events_file_path=Path(events_file_path)),
    )
