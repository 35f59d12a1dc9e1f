"""Tests for service layer."""

import asyncio
import random
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock

import pytest

from shortener.database import InMemoryMappingStore, RedisCache
from shortener.database.memory import InMemoryMappingSession
from shortener.exceptions import (
    AllocationExhaustedError,
    AllocationTimeoutError,
    DuplicateSlugError,
    InvalidURLError,
    SlugNotFoundError,
    StorageError,
)
from shortener.service import URLShortenerService
from shortener.slug import SlugAllocator, SlugGenerator


URL_HOST = "http://sho.rt"


class RacingSession(InMemoryMappingSession):
    """Session where another writer claims the first ``races`` slugs before insert."""

    def __init__(self, store, races: int):
        super().__init__(store)
        self.races = races
        self.inserts = 0

    async def insert(self, mapping):
        self.inserts += 1
        if self.inserts <= self.races:
            raise DuplicateSlugError(mapping.slug)
        await super().insert(mapping)


class RacingStore(InMemoryMappingStore):
    def __init__(self, races: int):
        super().__init__()
        self.races = races
        self.last_session = None

    @asynccontextmanager
    async def session(self):
        self.active_sessions += 1
        try:
            self.last_session = RacingSession(self, self.races)
            yield self.last_session
        finally:
            self.active_sessions -= 1


class SlowSession(InMemoryMappingSession):
    async def exists(self, slug):
        await asyncio.sleep(1)
        return False


class SlowStore(InMemoryMappingStore):
    @asynccontextmanager
    async def session(self):
        self.active_sessions += 1
        try:
            yield SlowSession(self)
        finally:
            self.active_sessions -= 1


class SlowInsertSession(InMemoryMappingSession):
    async def insert(self, mapping):
        await asyncio.sleep(0.2)
        await super().insert(mapping)


class SlowInsertStore(InMemoryMappingStore):
    @asynccontextmanager
    async def session(self):
        self.active_sessions += 1
        try:
            yield SlowInsertSession(self)
        finally:
            self.active_sessions -= 1


def make_service(store, logger, **kwargs):
    allocator = SlugAllocator(SlugGenerator(rng=random.Random(5)), max_attempts=10, logger=logger)
    return URLShortenerService(store=store, allocator=allocator, url_host=URL_HOST, logger=logger, **kwargs)


class TestURLShortenerService:
    """Test URL shortener service."""

    async def test_create_short_url(self, service, store, sample_urls):
        mapping = await service.create_short_url(sample_urls[0])

        assert len(mapping.slug) == 8
        assert mapping.original_url == sample_urls[0]
        assert mapping.short_url == f"{URL_HOST}/{mapping.slug}"
        assert store.mappings[mapping.slug] is mapping

    async def test_round_trip(self, service):
        """Resolving a created slug returns the original URL unchanged."""
        url = "https://example.com/page?q=a%20b&x=1#frag"
        mapping = await service.create_short_url(url)

        assert await service.resolve(mapping.slug) == url

    async def test_unique_slugs(self, service):
        slugs = [(await service.create_short_url(f"https://example.com/{i}")).slug for i in range(200)]
        assert len(set(slugs)) == 200

    async def test_invalid_url(self, service, store):
        with pytest.raises(InvalidURLError) as exc_info:
            await service.create_short_url("not a url")

        assert exc_info.value.message == "Invalid URL Format"
        assert store.mappings == {}

    async def test_resolve_not_found(self, service):
        with pytest.raises(SlugNotFoundError) as exc_info:
            await service.resolve("nonexistent")

        assert exc_info.value.status_code == 404

    async def test_get_mapping(self, service, sample_urls):
        created = await service.create_short_url(sample_urls[1])

        mapping = await service.get_mapping(created.slug)
        assert mapping.original_url == sample_urls[1]
        assert mapping.short_url == created.short_url

    async def test_duplicate_key_retries_allocation(self, logger):
        """A slug claimed between check and insert triggers another allocation."""
        store = RacingStore(races=2)
        service = make_service(store, logger, max_insert_retries=3)

        mapping = await service.create_short_url("https://example.com/race")

        assert store.last_session.inserts == 3
        assert list(store.mappings) == [mapping.slug]

    async def test_duplicate_key_exhaustion(self, logger):
        store = RacingStore(races=10)
        service = make_service(store, logger, max_insert_retries=2)

        with pytest.raises(AllocationExhaustedError) as exc_info:
            await service.create_short_url("https://example.com/race")

        assert exc_info.value.attempts == 3
        assert store.mappings == {}
        assert store.active_sessions == 0

    async def test_allocation_timeout(self, logger):
        store = SlowStore()
        service = make_service(store, logger, allocation_timeout_seconds=0.05)

        with pytest.raises(AllocationTimeoutError):
            await service.create_short_url("https://example.com/slow")

        assert isinstance(AllocationTimeoutError(), AllocationExhaustedError)
        assert store.active_sessions == 0

    async def test_deadline_does_not_interrupt_insert(self, logger):
        """An insert that outlives the deadline still returns its mapping."""
        store = SlowInsertStore()
        service = make_service(store, logger, allocation_timeout_seconds=0.05)

        mapping = await service.create_short_url("https://example.com/slow-insert")

        assert store.mappings[mapping.slug].original_url == "https://example.com/slow-insert"
        assert store.active_sessions == 0

    async def test_storage_failure_propagates(self, service, store):
        await store.close()

        with pytest.raises(StorageError):
            await service.create_short_url("https://example.com/down")
        with pytest.raises(StorageError):
            await service.resolve("whatever")

    async def test_session_released(self, service, store, sample_urls):
        await service.create_short_url(sample_urls[0])
        with pytest.raises(SlugNotFoundError):
            await service.resolve("missing1")

        assert store.active_sessions == 0

    async def test_health_check(self, service, store):
        health = await service.health_check()
        assert health == {"database": True, "cache": True, "overall": True}

        await store.close()
        health = await service.health_check()
        assert health["database"] is False
        assert health["overall"] is False


class TestServiceWithCache:
    """Test read-through caching of redirects."""

    @pytest.fixture
    def cache(self):
        cache = RedisCache(redis_url="redis://localhost:6379/0")
        cache.client = AsyncMock()
        return cache

    async def test_cache_hit_skips_store(self, store, logger, cache):
        cache.client.get.return_value = "https://example.com/cached"
        service = make_service(store, logger, cache=cache)

        assert await service.resolve("abc12345") == "https://example.com/cached"
        cache.client.get.assert_awaited_once_with(RedisCache.get_cache_key("abc12345"))

    async def test_cache_miss_populates(self, store, logger, cache):
        cache.client.get.return_value = None
        service = make_service(store, logger, cache=cache)
        mapping = await service.create_short_url("https://example.com/fill")

        assert await service.resolve(mapping.slug) == "https://example.com/fill"
        cache.client.setex.assert_awaited_once_with(
            RedisCache.get_cache_key(mapping.slug), 3600, "https://example.com/fill"
        )

    async def test_cache_miss_not_found(self, store, logger, cache):
        cache.client.get.return_value = None
        service = make_service(store, logger, cache=cache)

        with pytest.raises(SlugNotFoundError):
            await service.resolve("missing1")
        cache.client.setex.assert_not_awaited()

    async def test_cache_health(self, store, logger, cache):
        cache.client.ping.return_value = True
        service = make_service(store, logger, cache=cache)

        assert (await service.health_check())["cache"] is True

        cache.client.ping.return_value = False
        health = await service.health_check()
        assert health["cache"] is False
        assert health["overall"] is False
