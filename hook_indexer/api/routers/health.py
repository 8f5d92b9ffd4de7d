"""Health endpoint router composition for app, database and indexing progress."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from hook_indexer.db import DatabaseHealthPort, EntityStorePort
from hook_indexer.domain import EntityKind


def api_create_health_router(db_health_service: DatabaseHealthPort, store: EntityStorePort, cursor_id: str) -> APIRouter:
    """Create health-check router with database status and the indexing cursor.

    Args:
        db_health_service: DB-layer health service interface.
        store: Entity store holding the indexer cursor.
        cursor_id: Identifier of the indexer cursor record.

    Returns:
        APIRouter: Router exposing `/health` endpoint.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if db_health_service is None:
        raise ValueError("db_health_service must not be None")
    if store is None:
        raise ValueError("store must not be None")

    router = APIRouter(tags=["health"])

    @router.get("/health")
    def api_health_status() -> JSONResponse:
        """Return database health and the last applied event position.

        Returns:
            JSONResponse: `200` when the store is reachable, `503` otherwise.
        """

        try:
            db_health = db_health_service.db_check_health()
        except ConnectionError as error:
            payload = {
                "status": "degraded",
                "app": "up",
                "database": "down",
                "detail": str(error),
                "target": db_health_service.db_connection_label(),
            }
            return JSONResponse(content=payload, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)

        cursor = store.db_entity_get(EntityKind.INDEXER_CURSOR, cursor_id)
        payload = {
            "status": "ok",
            "app": "up",
            "database": db_health.status,
            "detail": db_health.detail,
            "target": db_health_service.db_connection_label(),
            "last_indexed_block": None if cursor is None else cursor.block_number,
            "last_indexed_log_index": None if cursor is None else cursor.log_index,
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    return router
