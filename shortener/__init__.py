"""Core business logic for URL shortener."""

from .slug import SlugGenerator, SlugAllocator, DEFAULT_ALPHABET, LEGACY_ALPHABET
from .service import URLShortenerService

__all__ = [
    "SlugGenerator",
    "SlugAllocator",
    "URLShortenerService",
    "DEFAULT_ALPHABET",
    "LEGACY_ALPHABET",
]
