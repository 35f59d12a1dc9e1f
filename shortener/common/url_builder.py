"""URL building utilities for URL shortener."""


def build_short_url(slug: str, url_host: str) -> str:
    """Build the public short URL for a slug.

    Args:
        slug: The slug
        url_host: Configured public host (e.g., https://sho.rt)

    Returns:
        ``url_host + "/" + slug``
    """
    return f"{url_host.rstrip('/')}/{slug}"
