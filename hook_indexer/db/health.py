"""Database health check for the entity store backend."""

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from hook_indexer.domain import HealthStatus

from .interfaces import DatabaseHealthPort


class SQLAlchemyDatabaseHealthService(DatabaseHealthPort):
    """Connectivity probe that also confirms the entity table is migrated."""

    def __init__(self, engine: Engine):
        """Initialize database health service.

        Args:
            engine: SQLAlchemy engine bound to the entity store database.

        Raises:
            ValueError: Raised when engine is None.
        """

        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    def db_connection_label(self) -> str:
        """Return the entity store database URL for diagnostics.

        Returns:
            str: Rendered engine URL with the password masked.

        Raises:
            RuntimeError: Raised if URL rendering fails.
        """

        return self._engine.url.render_as_string(hide_password=True)

    def db_check_health(self) -> HealthStatus:
        """Run a lightweight query against `indexer_entity`.

        Returns:
            HealthStatus: `ok` payload when the table is reachable.

        Raises:
            ConnectionError: Raised when the database or table is unreachable.
        """

        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1 FROM indexer_entity LIMIT 1"))
            return HealthStatus(status="ok", detail="entity store reachable")
        except SQLAlchemyError as error:
            raise ConnectionError("entity store connectivity check failed") from error
