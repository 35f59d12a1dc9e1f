"""Pytest configuration and fixtures."""

import random

import pytest
from httpx import AsyncClient, ASGITransport

from config import Config
from shortener.database import InMemoryMappingStore
from shortener.service import URLShortenerService
from shortener.slug import SlugAllocator, SlugGenerator
from shortener.common.logging_config import setup_logging
from web_app import create_app


URL_HOST = "http://sho.rt"


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
async def store(logger):
    """Create an in-memory mapping store."""
    store = InMemoryMappingStore(logger=logger)
    await store.connect()
    yield store
    await store.close()


@pytest.fixture
def slug_generator():
    """Create a seeded slug generator."""
    return SlugGenerator(default_length=8, rng=random.Random(1234))


@pytest.fixture
def allocator(slug_generator, logger):
    """Create slug allocator."""
    return SlugAllocator(slug_generator, max_attempts=10, logger=logger)


@pytest.fixture
def service(store, allocator, logger) -> URLShortenerService:
    """Create service instance."""
    return URLShortenerService(
        store=store,
        allocator=allocator,
        url_host=URL_HOST,
        cache=None,  # No cache for tests
        logger=logger,
    )


@pytest.fixture
def config(monkeypatch):
    """Create test configuration, isolated from the process environment."""
    for name in ("PORT", "URL_HOST", "URL_DB_DSN", "SLUG_LENGTH", "SLUG_ALPHABET", "REDIS_URL"):
        monkeypatch.delenv(name, raising=False)
    return Config(
        _env_file=None,
        port=8080,
        url_host=URL_HOST,
        url_db_dsn="memory://",
    )


@pytest.fixture
def app(service, config):
    """Create test FastAPI app."""
    return create_app(service_instance=service, config=config)


@pytest.fixture
async def client(app):
    """Create test client."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def sample_urls():
    """Sample URLs for testing."""
    return [
        "https://example.com/page",
        "https://github.com/user/repo",
        "https://stackoverflow.com/questions/123456",
    ]
