"""Read-only API router for protocol, pool, position and hourly snapshot records."""

from __future__ import annotations

import dataclasses
from decimal import Decimal
from typing import Any

from fastapi import APIRouter, Path, status
from fastapi.responses import JSONResponse

from hook_indexer.db import EntityStorePort
from hook_indexer.domain import (
    EntityKind,
    domain_build_hourly_snapshot_id,
    domain_build_position_id,
    domain_normalize_address,
)


def api_create_indexer_router(store: EntityStorePort, protocol_id: str) -> APIRouter:
    """Create router exposing indexed entity reads.

    Args:
        store: Entity store holding indexed records.
        protocol_id: Identifier of the singleton protocol record.

    Returns:
        APIRouter: Router exposing protocol, pool, position and snapshot endpoints.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if store is None:
        raise ValueError("store must not be None")
    if not protocol_id.strip():
        raise ValueError("protocol_id must not be blank")

    router = APIRouter(tags=["indexer"])

    @router.get("/protocol")
    def api_protocol_detail() -> JSONResponse:
        """Return protocol-wide counters."""

        protocol = store.db_entity_get(EntityKind.PROTOCOL, protocol_id)
        if protocol is None:
            return api_not_found_response("PROTOCOL_NOT_FOUND", f"protocol_id={protocol_id} has no indexed state")
        return JSONResponse(content=api_serialize_entity(protocol), status_code=status.HTTP_200_OK)

    @router.get("/protocol/snapshots/hourly/{bucket}")
    def api_protocol_hourly_snapshot(bucket: int = Path(ge=0)) -> JSONResponse:
        """Return the protocol snapshot of one hour bucket."""

        snapshot = store.db_entity_get(
            EntityKind.PROTOCOL_HOURLY_SNAPSHOT,
            domain_build_hourly_snapshot_id(protocol_id, bucket),
        )
        if snapshot is None:
            return api_not_found_response("SNAPSHOT_NOT_FOUND", f"no protocol snapshot for bucket={bucket}")
        return JSONResponse(content=api_serialize_entity(snapshot), status_code=status.HTTP_200_OK)

    @router.get("/pools/{pool_id}")
    def api_pool_detail(pool_id: str) -> JSONResponse:
        """Return one pool's counters and recorded reserves."""

        pool = store.db_entity_get(EntityKind.POOL, domain_normalize_address(pool_id))
        if pool is None:
            return api_not_found_response("POOL_NOT_FOUND", f"pool_id={pool_id} is not indexed")
        return JSONResponse(content=api_serialize_entity(pool), status_code=status.HTTP_200_OK)

    @router.get("/pools/{pool_id}/positions/{account}")
    def api_position_detail(pool_id: str, account: str) -> JSONResponse:
        """Return one account's position in one pool."""

        position_id = domain_build_position_id(domain_normalize_address(account), domain_normalize_address(pool_id))
        position = store.db_entity_get(EntityKind.POSITION, position_id)
        if position is None:
            return api_not_found_response("POSITION_NOT_FOUND", f"position_id={position_id} is not indexed")
        return JSONResponse(content=api_serialize_entity(position), status_code=status.HTTP_200_OK)

    @router.get("/pools/{pool_id}/snapshots/hourly/{bucket}")
    def api_pool_hourly_snapshot(pool_id: str, bucket: int = Path(ge=0)) -> JSONResponse:
        """Return one pool's snapshot of one hour bucket."""

        snapshot = store.db_entity_get(
            EntityKind.POOL_HOURLY_SNAPSHOT,
            domain_build_hourly_snapshot_id(domain_normalize_address(pool_id), bucket),
        )
        if snapshot is None:
            return api_not_found_response("SNAPSHOT_NOT_FOUND", f"no snapshot for pool_id={pool_id} bucket={bucket}")
        return JSONResponse(content=api_serialize_entity(snapshot), status_code=status.HTTP_200_OK)

    return router


def api_serialize_entity(entity: Any) -> dict[str, Any]:
    """Serialize one entity dataclass to a JSON payload.

    Decimal values are rendered as strings so precision is preserved; large
    integers stay JSON numbers.

    Args:
        entity: Entity dataclass instance.

    Returns:
        dict[str, Any]: JSON-serializable payload.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return {
        field_name: (str(value) if isinstance(value, Decimal) else value)
        for field_name, value in dataclasses.asdict(entity).items()
    }


def api_not_found_response(code: str, message: str) -> JSONResponse:
    """Build the standard `404` error envelope."""

    payload = {"status": "error", "code": code, "message": message}
    return JSONResponse(content=payload, status_code=status.HTTP_404_NOT_FOUND)


__all__ = ["api_create_indexer_router", "api_not_found_response", "api_serialize_entity"]
