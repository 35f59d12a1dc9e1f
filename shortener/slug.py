"""Slug generation and unique slug allocation."""

import random
import secrets
import string
import logging
from typing import Optional, TYPE_CHECKING

from .common.logging_config import get_logger
from .exceptions import AllocationExhaustedError

if TYPE_CHECKING:
    from .database.base import MappingSession


# Base62 characters (uppercase, lowercase, digits)
DEFAULT_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits

# Alphabet used by the first generation of the service. S, T, U and V are absent
# from the uppercase run, so slugs issued with it never contain those letters.
LEGACY_ALPHABET = "ABCDEFGHIJKLMNOPQRXWYZabcdefghijklmnopqrstuvwxyz1234567890"

DEFAULT_SLUG_LENGTH = 8


class SlugGenerator:
    """Generate random slugs from a fixed alphabet."""

    def __init__(
        self,
        alphabet: str = DEFAULT_ALPHABET,
        default_length: int = DEFAULT_SLUG_LENGTH,
        rng: Optional[random.Random] = None,
    ):
        """Initialize slug generator.

        Args:
            alphabet: Characters slugs are drawn from
            default_length: Length used when none is requested
            rng: Random generator to draw from. Defaults to a private generator
                seeded from OS entropy. Pass a seeded ``random.Random`` for
                reproducible output.
        """
        if len(set(alphabet)) < 2:
            raise ValueError("Alphabet must contain at least two distinct characters")
        if len(set(alphabet)) != len(alphabet):
            raise ValueError("Alphabet must not contain duplicate characters")
        if default_length < 1:
            raise ValueError("Default slug length must be a positive integer")

        self.alphabet = alphabet
        self.default_length = default_length
        self.rng = rng or random.Random(secrets.randbits(128))

    def generate_slug(self, length: Optional[int] = None) -> str:
        """Generate a random slug.

        Args:
            length: Length of the slug (uses default if not specified)

        Returns:
            Slug of exactly ``length`` characters drawn uniformly from the alphabet
        """
        if length is None:
            length = self.default_length
        if not isinstance(length, int) or length < 1:
            raise ValueError(f"Slug length must be a positive integer, got {length!r}")

        return "".join(self.rng.choices(self.alphabet, k=length))

    def is_valid_format(self, slug: str) -> bool:
        """Check that every character of ``slug`` belongs to the alphabet."""
        return bool(slug) and all(c in self.alphabet for c in slug)


class SlugAllocator:
    """Find slugs that are not yet present in the mapping store.

    The existence check only avoids wasted inserts. Uniqueness is enforced by
    the store when the mapping is inserted.
    """

    def __init__(
        self,
        generator: SlugGenerator,
        max_attempts: int = 10,
        escalate_after: int = 0,
        max_length: int = 16,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize slug allocator.

        Args:
            generator: Slug generator
            max_attempts: Maximum number of candidates checked per allocation
            escalate_after: Grow the slug length by one after this many
                consecutive collisions (0 disables escalation)
            max_length: Upper bound for escalated slug length
            logger: Optional logger
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if escalate_after < 0:
            raise ValueError("escalate_after must not be negative")

        self.generator = generator
        self.max_attempts = max_attempts
        self.escalate_after = escalate_after
        self.max_length = max_length
        self.logger = logger or get_logger("slug")

    async def generate_unique_slug(
        self,
        session: "MappingSession",
        length: Optional[int] = None,
    ) -> str:
        """Generate a slug that has no mapping in the store.

        Args:
            session: Store session used for existence checks
            length: Initial slug length (uses generator default if not specified)

        Returns:
            A slug with zero matching mappings at query time

        Raises:
            AllocationExhaustedError: If every attempted candidate was taken
            StorageError: If an existence check fails
        """
        current_length = length if length is not None else self.generator.default_length
        collisions = 0

        for attempt in range(1, self.max_attempts + 1):
            slug = self.generator.generate_slug(current_length)

            # StorageError propagates: a failed check is never read as "free"
            if not await session.exists(slug):
                if attempt > 1:
                    self.logger.debug(f"Allocated slug after {attempt} attempts: {slug}")
                return slug

            collisions += 1
            self.logger.debug(f"Slug collision on attempt {attempt}: {slug}")

            if (
                self.escalate_after
                and collisions % self.escalate_after == 0
                and current_length < self.max_length
            ):
                current_length += 1
                self.logger.info(
                    f"Escalating slug length to {current_length} after {collisions} collisions"
                )

        self.logger.warning(f"Unable to allocate a unique slug after {self.max_attempts} attempts")
        raise AllocationExhaustedError(
            f"Unable to allocate a unique slug after {self.max_attempts} attempts",
            attempts=self.max_attempts,
        )
