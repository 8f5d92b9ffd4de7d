"""Database layer package for entity persistence boundaries."""

from .codec import db_entity_decode, db_entity_encode
from .entity_store import SQLAlchemyEntityStore
from .health import SQLAlchemyDatabaseHealthService
from .interfaces import DatabaseHealthPort, EntityLoadResult, EntityStorePort
from .memory_store import InMemoryEntityStore
from .session import db_create_engine

__all__ = [
	"DatabaseHealthPort",
	"EntityLoadResult",
	"EntityStorePort",
	"InMemoryEntityStore",
	"SQLAlchemyDatabaseHealthService",
	"SQLAlchemyEntityStore",
	"db_create_engine",
	"db_entity_decode",
	"db_entity_encode",
]
