"""Exceptions raised by the URL shortener.

Classes:
    ShortenerError:
        Base class. Carries a human-readable message and the HTTP status used
        when the error is rendered as a JSON error envelope.

    InvalidURLError:
        The submitted URL failed syntactic validation.

    SlugNotFoundError:
        No mapping exists for the requested slug.

    AllocationExhaustedError:
        The slug allocator ran out of attempts (or time) without finding a free slug.

    AllocationTimeoutError:
        The request-scoped deadline expired while allocating a slug.

    DuplicateSlugError:
        An insert collided with an existing slug.

    StorageError:
        The store is unreachable or a query/insert failed for another reason.

    ShortenFailedError:
        Client-facing error for a create request that could not be completed.
"""

from typing import Optional


class ShortenerError(Exception):
    """Generic base class for URL shortener errors."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidURLError(ShortenerError):
    """Raised when a URL fails syntactic validation."""

    status_code = 400
    default_message = "Invalid URL Format"


class SlugNotFoundError(ShortenerError):
    """Raised when a slug has no corresponding mapping."""

    status_code = 404
    default_message = "Unable to locate a url with that slug"


class AllocationExhaustedError(ShortenerError):
    """Raised when no free slug was found within the allowed attempts."""

    status_code = 503
    default_message = "Unable to allocate a unique slug"

    def __init__(self, message: Optional[str] = None, attempts: int = 0):
        super().__init__(message)
        self.attempts = attempts


class AllocationTimeoutError(AllocationExhaustedError):
    """Raised when the allocation deadline expires."""

    default_message = "Timed out allocating a unique slug"


class DuplicateSlugError(ShortenerError):
    """Raised when inserting a mapping whose slug already exists."""

    status_code = 409
    default_message = "Slug already exists"

    def __init__(self, slug: str):
        super().__init__(f"Slug already exists: {slug}")
        self.slug = slug


class StorageError(ShortenerError):
    """Raised on connectivity, timeout or query failures in the store."""

    status_code = 503
    default_message = "Storage unavailable"


class ShortenFailedError(ShortenerError):
    """Raised to the client when a short URL could not be created."""

    status_code = 400
    default_message = "Unable to create shortened url"
