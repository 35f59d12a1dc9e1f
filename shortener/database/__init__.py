"""Store layer for URL shortener."""

import logging
from typing import Optional
from urllib.parse import urlparse

from .base import MappingSession, MappingStoreBase
from .cache import RedisCache
from .memory import InMemoryMappingStore
from .models import Mapping
from .postgres import PostgresMappingStore


def create_store(
    dsn: str,
    pool_max_size: int = 10,
    timeout_seconds: float = 10,
    create_tables: bool = False,
    logger: Optional[logging.Logger] = None,
) -> MappingStoreBase:
    """Create a mapping store for a connection string.

    Args:
        dsn: ``postgres://``/``postgresql://`` for PostgreSQL, ``memory://`` for
            the in-process store
        pool_max_size: Maximum PostgreSQL pool size
        timeout_seconds: PostgreSQL connect and command timeout
        create_tables: Create the PostgreSQL table on connect
        logger: Optional logger

    Returns:
        Store instance (not yet connected)
    """
    scheme = urlparse(dsn).scheme.lower()

    if scheme in ("postgres", "postgresql"):
        return PostgresMappingStore(
            db_config=dsn,
            pool_max_size=pool_max_size,
            connection_timeout_seconds=timeout_seconds,
            create_tables=create_tables,
            logger=logger,
        )
    if scheme == "memory":
        return InMemoryMappingStore(db_config=dsn, logger=logger)

    raise ValueError(f"Unsupported store connection string scheme: {scheme!r}")


__all__ = [
    "Mapping",
    "MappingSession",
    "MappingStoreBase",
    "InMemoryMappingStore",
    "PostgresMappingStore",
    "RedisCache",
    "create_store",
]
