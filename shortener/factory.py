"""Wiring of store, cache, allocator and service from configuration."""

import logging
from typing import Optional

from .common.logging_config import get_logger
from .slug import SlugGenerator, SlugAllocator
from .service import URLShortenerService
from .database import RedisCache, create_store


async def build_service(config, logger: Optional[logging.Logger] = None) -> URLShortenerService:
    """Create and connect a service from a Config.

    Raises:
        StorageError: If the store is unreachable
        ValueError: If the store connection string is not supported
    """
    logger = logger or get_logger()

    store = create_store(
        config.url_db_dsn,
        pool_max_size=config.db_pool_max_size,
        timeout_seconds=config.db_timeout_seconds,
        create_tables=config.db_create_tables,
        logger=logger.getChild("database"),
    )
    await store.connect()

    cache = None
    if config.redis_url:
        cache = RedisCache(
            redis_url=config.redis_url,
            ttl_seconds=config.cache_ttl_seconds,
            logger=logger.getChild("cache"),
        )
        await cache.connect()
    else:
        logger.info("Redis caching disabled")

    # Each process builds its own generator, seeded from OS entropy
    generator = SlugGenerator(
        alphabet=config.slug_alphabet,
        default_length=config.slug_length,
    )
    allocator = SlugAllocator(
        generator,
        max_attempts=config.max_allocation_attempts,
        escalate_after=config.slug_escalate_after,
        max_length=config.max_slug_length,
        logger=logger.getChild("slug"),
    )

    return URLShortenerService(
        store=store,
        allocator=allocator,
        url_host=config.url_host,
        cache=cache,
        max_insert_retries=config.max_insert_retries,
        allocation_timeout_seconds=config.allocation_timeout_seconds,
        logger=logger.getChild("service"),
    )
