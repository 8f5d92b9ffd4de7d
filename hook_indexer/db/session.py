"""Database engine utilities.

All SQLAlchemy engine construction for the indexer goes through this module.
"""

import logging

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import make_url

logger = logging.getLogger(__name__)


def db_create_engine(database_url: str) -> Engine:
    """Create the SQLAlchemy engine backing the entity store.

    Args:
        database_url: SQLAlchemy database URL (PostgreSQL or SQLite).

    Returns:
        Engine: Configured SQLAlchemy engine.

    Raises:
        ValueError: Raised when the database URL is blank or unparsable.
    """

    normalized_database_url = database_url.strip()
    if not normalized_database_url:
        raise ValueError("database_url must not be blank")

    parsed_url = make_url(normalized_database_url)
    logger.info("creating database engine for %s", parsed_url.render_as_string(hide_password=True))
    return create_engine(parsed_url, pool_pre_ping=True)
