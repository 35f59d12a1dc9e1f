"""In-memory mapping store.

Used with ``memory://`` connection strings for local development and tests.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Dict, Optional

from ..common.logging_config import get_logger
from ..exceptions import DuplicateSlugError, StorageError
from .base import MappingSession, MappingStoreBase
from .models import Mapping


class InMemoryMappingSession(MappingSession):
    """Session over an in-memory store."""

    def __init__(self, store: "InMemoryMappingStore"):
        self._store = store

    async def exists(self, slug: str) -> bool:
        self._store._check_open()
        return slug in self._store.mappings

    async def insert(self, mapping: Mapping) -> None:
        self._store._check_open()
        async with self._store._lock:
            if mapping.slug in self._store.mappings:
                raise DuplicateSlugError(mapping.slug)
            self._store.mappings[mapping.slug] = mapping

    async def find_by_slug(self, slug: str) -> Optional[Mapping]:
        self._store._check_open()
        return self._store.mappings.get(slug)


class InMemoryMappingStore(MappingStoreBase):
    """Mapping store kept in a process-local dictionary."""

    def __init__(self, db_config: str = "memory://", logger: Optional[logging.Logger] = None):
        super().__init__(db_config)
        self.logger = logger or get_logger("database.memory")
        self.mappings: Dict[str, Mapping] = {}
        self._lock = asyncio.Lock()
        self._closed = False
        self.active_sessions = 0

    def _check_open(self) -> None:
        if self._closed:
            raise StorageError("Store is closed")

    async def connect(self) -> None:
        self._closed = False
        self.logger.info("Using in-memory mapping store")

    @asynccontextmanager
    async def session(self):
        self._check_open()
        self.active_sessions += 1
        try:
            yield InMemoryMappingSession(self)
        finally:
            self.active_sessions -= 1

    async def health_check(self) -> bool:
        return not self._closed

    async def close(self) -> None:
        self._closed = True
