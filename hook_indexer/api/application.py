"""FastAPI application factory for the indexer read API."""

from fastapi import FastAPI

from hook_indexer.config import AppSettings
from hook_indexer.db import DatabaseHealthPort, EntityStorePort

from .routers import api_create_health_router, api_create_indexer_router


def create_api_application(
    settings: AppSettings,
    db_health_service: DatabaseHealthPort,
    store: EntityStorePort,
) -> FastAPI:
    """Create the FastAPI application instance for the service.

    Args:
        settings: Validated application settings used for runtime metadata.
        db_health_service: Database health service used by health endpoints.
        store: Entity store backing the read endpoints.

    Returns:
        FastAPI: Application with health and indexer routers.

    Raises:
        ValueError: Raised when a router dependency is invalid.
    """
    application = FastAPI(title="Lending Hook Indexer")

    @application.get("/", tags=["foundation"])
    def foundation_index() -> dict[str, str]:
        """Return service identity for bootstrap verification."""

        return {
            "service": "hook-indexer",
            "protocol_id": settings.protocol_id,
            "environment": settings.environment_name,
        }

    application.include_router(
        api_create_health_router(db_health_service=db_health_service, store=store, cursor_id=settings.protocol_id)
    )
    application.include_router(api_create_indexer_router(store=store, protocol_id=settings.protocol_id))

    return application
