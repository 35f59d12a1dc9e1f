"""Business logic service for URL shortener."""

import asyncio
import logging
from typing import Optional, Dict

from .slug import SlugAllocator
from .database.base import MappingStoreBase, MappingSession
from .database.cache import RedisCache
from .database.models import Mapping
from .common.validators import is_valid_url
from .common.url_builder import build_short_url
from .common.logging_config import get_logger
from .exceptions import (
    AllocationExhaustedError,
    AllocationTimeoutError,
    DuplicateSlugError,
    InvalidURLError,
    SlugNotFoundError,
)


class URLShortenerService:
    """Service layer for URL shortening business logic."""

    def __init__(
        self,
        store: MappingStoreBase,
        allocator: SlugAllocator,
        url_host: str = "",
        cache: Optional[RedisCache] = None,
        max_insert_retries: int = 3,
        allocation_timeout_seconds: Optional[float] = 5.0,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize URL shortener service.

        Args:
            store: Mapping store
            allocator: Slug allocator
            url_host: Public host prepended to slugs to build short URLs
            cache: Optional cache for redirect lookups
            max_insert_retries: Extra allocate-and-insert rounds after a
                duplicate key on insert
            allocation_timeout_seconds: Deadline for allocating and inserting a
                mapping (None disables the deadline)
            logger: Optional logger
        """
        self.store = store
        self.allocator = allocator
        self.url_host = url_host
        self.cache = cache
        self.max_insert_retries = max_insert_retries
        self.allocation_timeout_seconds = allocation_timeout_seconds
        self.logger = logger or get_logger("service")

    async def create_short_url(self, original_url: str) -> Mapping:
        """Create a new short URL.

        Args:
            original_url: The original long URL

        Returns:
            The persisted mapping

        Raises:
            InvalidURLError: If the URL fails validation
            AllocationExhaustedError: If no slug could be allocated and inserted
            AllocationTimeoutError: If the allocation deadline expired
            StorageError: If the store failed
        """
        is_valid, error = is_valid_url(original_url)
        if not is_valid:
            self.logger.info(f"Rejected URL {original_url!r}: {error}")
            raise InvalidURLError()

        try:
            mapping = await self._allocate_and_insert(original_url)
        except asyncio.TimeoutError:
            self.logger.warning(
                f"Allocation for {original_url} exceeded {self.allocation_timeout_seconds}s"
            )
            raise AllocationTimeoutError() from None

        self.logger.info(f"Created short URL: {mapping.slug} -> {original_url}")
        return mapping

    async def _allocate_and_insert(self, original_url: str) -> Mapping:
        """Allocate a slug and insert the mapping, retrying on duplicate keys.

        The deadline bounds allocation only. An insert that has started is
        always awaited, so a committed mapping is never reported as a timeout.
        """
        attempts = self.max_insert_retries + 1
        deadline = None
        if self.allocation_timeout_seconds is not None:
            deadline = asyncio.get_running_loop().time() + self.allocation_timeout_seconds

        async with self.store.session() as session:
            for attempt in range(1, attempts + 1):
                slug = await self._allocate(session, deadline)
                mapping = Mapping(
                    slug=slug,
                    original_url=original_url,
                    short_url=build_short_url(slug, self.url_host),
                )
                try:
                    await session.insert(mapping)
                    return mapping
                except DuplicateSlugError:
                    # Another writer claimed the slug between check and insert
                    self.logger.info(
                        f"Slug {slug} taken concurrently (insert attempt {attempt}/{attempts})"
                    )

        raise AllocationExhaustedError(
            f"Unable to insert a unique slug after {attempts} attempts",
            attempts=attempts,
        )

    async def _allocate(self, session: MappingSession, deadline: Optional[float]) -> str:
        if deadline is None:
            return await self.allocator.generate_unique_slug(session)

        remaining = deadline - asyncio.get_running_loop().time()
        if remaining <= 0:
            raise asyncio.TimeoutError()
        return await asyncio.wait_for(
            self.allocator.generate_unique_slug(session), timeout=remaining
        )

    async def resolve(self, slug: str) -> str:
        """Get the original URL for a slug.

        Args:
            slug: The slug to look up

        Returns:
            Original URL

        Raises:
            SlugNotFoundError: If no mapping exists
            StorageError: If the store failed
        """
        if self.cache:
            cache_key = self.cache.get_cache_key(slug)
            cached_url = await self.cache.get(cache_key)
            if cached_url:
                self.logger.debug(f"Cache hit for {slug}")
                return cached_url

        mapping = await self.get_mapping(slug)

        if self.cache:
            await self.cache.set(self.cache.get_cache_key(slug), mapping.original_url)

        self.logger.debug(f"Resolved slug: {slug} -> {mapping.original_url}")
        return mapping.original_url

    async def get_mapping(self, slug: str) -> Mapping:
        """Get the full mapping for a slug.

        Raises:
            SlugNotFoundError: If no mapping exists
            StorageError: If the store failed
        """
        async with self.store.session() as session:
            mapping = await self._find(session, slug)
        return mapping

    async def _find(self, session: MappingSession, slug: str) -> Mapping:
        mapping = await session.find_by_slug(slug)
        if mapping is None:
            self.logger.warning(f"Slug not found: {slug}")
            raise SlugNotFoundError()
        return mapping

    async def health_check(self) -> Dict[str, bool]:
        """Perform health check.

        Returns:
            Dictionary with health status
        """
        db_healthy = await self.store.health_check()

        cache_healthy = True
        if self.cache and self.cache.enabled:
            cache_healthy = await self.cache.ping()

        return {
            "database": db_healthy,
            "cache": cache_healthy,
            "overall": db_healthy and cache_healthy,
        }

    async def close(self) -> None:
        """Close service connections."""
        await self.store.close()
        if self.cache:
            await self.cache.close()
