"""Abstract base classes for mapping store implementations."""

from abc import ABC, abstractmethod
from typing import AsyncContextManager, Optional

from .models import Mapping


class MappingSession(ABC):
    """Store operations bound to one checked-out connection."""

    @abstractmethod
    async def exists(self, slug: str) -> bool:
        """Check if a mapping with this slug exists.

        Args:
            slug: The slug to check

        Returns:
            True if exists, False otherwise

        Raises:
            StorageError: If the query fails
        """

    @abstractmethod
    async def insert(self, mapping: Mapping) -> None:
        """Insert a new mapping.

        Args:
            mapping: The mapping to persist

        Raises:
            DuplicateSlugError: If the slug already exists
            StorageError: For any other failure
        """

    @abstractmethod
    async def find_by_slug(self, slug: str) -> Optional[Mapping]:
        """Look up a mapping by slug.

        Args:
            slug: The slug to look up

        Returns:
            The mapping if found, None otherwise

        Raises:
            StorageError: If the query fails
        """


class MappingStoreBase(ABC):
    """Abstract base class for mapping stores."""

    def __init__(self, db_config: str):
        """Initialize store.

        Args:
            db_config: Store connection string
        """
        self.db_config = db_config

    @abstractmethod
    async def connect(self) -> None:
        """Open connections and verify the store is reachable.

        Raises:
            StorageError: If the store cannot be reached
        """

    @abstractmethod
    def session(self) -> AsyncContextManager[MappingSession]:
        """Check out a session, released when the context exits."""

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the store is healthy."""

    @abstractmethod
    async def close(self) -> None:
        """Close store connections."""
