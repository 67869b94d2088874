"""Storage layer for shortlinks."""

import logging
from typing import Optional

from .base import LinkStoreBase
from .memory import InMemoryLinkStore
from .postgres import PostgresLinkStore
from .cache import RedisCache
from .models import Link


def create_store(config, logger: Optional[logging.Logger] = None) -> LinkStoreBase:
    """Build the link store selected by ``config.database_url``.

    Args:
        config: Application configuration
        logger: Optional logger instance

    Returns:
        An in-memory store for memory:// URLs, a PostgreSQL store otherwise
    """
    if config.database_url.startswith("memory://"):
        return InMemoryLinkStore(config.database_url, logger=logger)

    return PostgresLinkStore(
        db_config=config.database_url,
        pool_max_size=config.database_pool_max_size,
        connection_timeout_seconds=config.store_timeout_seconds,
        create_tables=config.database_create_tables,
        logger=logger,
    )


__all__ = [
    "LinkStoreBase",
    "InMemoryLinkStore",
    "PostgresLinkStore",
    "RedisCache",
    "Link",
    "create_store",
]
