"""Validation utilities for URL shortener."""

from urllib.parse import urlparse
from typing import Tuple


MAX_URL_LENGTH = 2048

INVALID_HOST_CHARS = frozenset(' <>"{}|\\^`')


def is_valid_url(url: str) -> Tuple[bool, str]:
    """Validate a URL.

    Any scheme is accepted. The host must contain at least one dot, so bare
    hostnames such as ``localhost`` are rejected, and may not contain
    whitespace, control characters or characters that are never legal in a
    host name. A port, when present, must be numeric and in range.

    Args:
        url: The URL to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not url or not isinstance(url, str):
        return False, "URL is required"

    if len(url) > MAX_URL_LENGTH:
        return False, f"URL is too long (max {MAX_URL_LENGTH} characters)"

    try:
        result = urlparse(url)
        result.port  # raises ValueError for a malformed port
    except ValueError as e:
        return False, f"Invalid URL format: {e}"

    if not result.scheme:
        return False, "URL must include a scheme"

    # netloc may carry userinfo; only the host part is checked
    host = result.netloc.rpartition("@")[2]
    if any(c in INVALID_HOST_CHARS or c.isspace() or not c.isprintable() for c in host):
        return False, "URL host contains invalid characters"

    if "." not in host:
        return False, "URL must have a host containing a dot"

    return True, ""
