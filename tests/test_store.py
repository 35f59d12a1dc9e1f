"""Tests for mapping stores."""

import logging
from unittest.mock import AsyncMock, MagicMock

import asyncpg
import pytest

from shortener.database import (
    InMemoryMappingStore,
    Mapping,
    PostgresMappingStore,
    create_store,
)
from shortener.database.postgres import PostgresMappingSession
from shortener.exceptions import DuplicateSlugError, StorageError


def make_mapping(slug="abcd1234", url="https://example.com/page"):
    return Mapping(slug=slug, original_url=url, short_url=f"http://sho.rt/{slug}")


class TestCreateStore:
    """Test store selection from the connection string."""

    @pytest.mark.parametrize("dsn", ["postgres://u:p@db:5432/urls", "postgresql://db/urls"])
    def test_postgres(self, dsn):
        store = create_store(dsn)
        assert isinstance(store, PostgresMappingStore)
        assert store.host == "db"

    def test_memory(self):
        assert isinstance(create_store("memory://"), InMemoryMappingStore)

    def test_unknown_scheme(self):
        with pytest.raises(ValueError, match="Unsupported"):
            create_store("mongodb://localhost/urls")


class TestInMemoryMappingStore:
    """Test the in-memory store contract."""

    async def test_insert_and_find(self, store):
        mapping = make_mapping()

        async with store.session() as session:
            assert not await session.exists(mapping.slug)
            await session.insert(mapping)
            assert await session.exists(mapping.slug)
            assert await session.find_by_slug(mapping.slug) == mapping

    async def test_find_missing(self, store):
        async with store.session() as session:
            assert await session.find_by_slug("missing1") is None

    async def test_duplicate_insert(self, store):
        async with store.session() as session:
            await session.insert(make_mapping())
            with pytest.raises(DuplicateSlugError) as exc_info:
                await session.insert(make_mapping(url="https://example.com/other"))

        assert exc_info.value.slug == "abcd1234"
        assert store.mappings["abcd1234"].original_url == "https://example.com/page"

    async def test_session_released_on_error(self, store):
        with pytest.raises(DuplicateSlugError):
            async with store.session() as session:
                await session.insert(make_mapping())
                await session.insert(make_mapping())

        assert store.active_sessions == 0

    async def test_closed_store(self, store):
        await store.close()

        assert not await store.health_check()
        with pytest.raises(StorageError):
            async with store.session():
                pass


class TestPostgresMappingSession:
    """Test asyncpg error mapping with a mocked connection."""

    @pytest.fixture
    def conn(self):
        return AsyncMock()

    @pytest.fixture
    def session(self, conn):
        return PostgresMappingSession(conn, logging.getLogger("test"))

    async def test_exists(self, session, conn):
        conn.fetchrow.return_value = {"?column?": 1}
        assert await session.exists("abcd1234")

        conn.fetchrow.return_value = None
        assert not await session.exists("abcd1234")

    async def test_exists_failure(self, session, conn):
        conn.fetchrow.side_effect = OSError("connection refused")

        with pytest.raises(StorageError):
            await session.exists("abcd1234")

    async def test_insert(self, session, conn):
        mapping = make_mapping()

        await session.insert(mapping)

        args = conn.execute.await_args.args
        assert "INSERT INTO url_mappings" in args[0]
        assert args[1:] == (mapping.slug, mapping.original_url, mapping.short_url, mapping.created_at)

    async def test_insert_unique_violation(self, session, conn):
        conn.execute.side_effect = asyncpg.exceptions.UniqueViolationError("duplicate key value")

        with pytest.raises(DuplicateSlugError):
            await session.insert(make_mapping())

    async def test_insert_other_failure(self, session, conn):
        conn.execute.side_effect = asyncpg.exceptions.UndefinedTableError("relation does not exist")

        with pytest.raises(StorageError) as exc_info:
            await session.insert(make_mapping())

        assert not isinstance(exc_info.value, DuplicateSlugError)

    async def test_find_by_slug(self, session, conn):
        mapping = make_mapping()
        conn.fetchrow.return_value = {
            "slug": mapping.slug,
            "original_url": mapping.original_url,
            "short_url": mapping.short_url,
            "created_at": mapping.created_at,
        }

        assert await session.find_by_slug(mapping.slug) == mapping

    async def test_find_by_slug_missing(self, session, conn):
        conn.fetchrow.return_value = None
        assert await session.find_by_slug("missing1") is None


class TestPostgresMappingStore:
    """Test pool handling with a mocked pool."""

    @pytest.fixture
    def pool(self):
        pool = MagicMock()
        pool.acquire = AsyncMock(return_value=AsyncMock())
        pool.release = AsyncMock()
        pool.close = AsyncMock()
        return pool

    @pytest.fixture
    def store(self, pool):
        store = PostgresMappingStore("postgresql://db/urls", create_tables=True)
        store._pool = pool
        return store

    async def test_connect_creates_tables(self, store, pool):
        await store.connect()

        conn = pool.acquire.return_value
        executed = [c.args[0] for c in conn.execute.await_args_list]
        assert any("CREATE TABLE IF NOT EXISTS url_mappings" in sql for sql in executed)
        assert pool.release.await_count == pool.acquire.await_count

    async def test_connect_unreachable(self, store, pool):
        pool.acquire.side_effect = OSError("connection refused")

        with pytest.raises(StorageError):
            await store.connect()

    async def test_session_releases_connection(self, store, pool):
        with pytest.raises(RuntimeError):
            async with store.session():
                raise RuntimeError("boom")

        pool.release.assert_awaited_once_with(pool.acquire.return_value)

    async def test_close(self, store, pool):
        await store.close()

        pool.close.assert_awaited_once()
        assert store._pool is None
