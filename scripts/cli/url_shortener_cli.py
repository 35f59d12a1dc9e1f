#!/usr/bin/env python3
"""
Command-line interface for URL shortener service.

Works directly against the mapping store, without the HTTP server.

Usage:
    python url_shortener_cli.py shorten <url>
    python url_shortener_cli.py get <slug>
    python url_shortener_cli.py health
"""

import argparse
import asyncio
import json
import os
import sys
from typing import Optional

from shortener.database import create_store
from shortener.exceptions import ShortenerError
from shortener.service import URLShortenerService
from shortener.slug import SlugAllocator, SlugGenerator
from shortener.common.logging_config import setup_logging


class URLShortenerCLI:
    """Command-line interface for URL shortener."""

    def __init__(self, db_url: str, url_host: str = "", slug_length: int = 8, verbose: bool = False):
        """Initialize CLI."""
        self.db_url = db_url
        self.url_host = url_host
        self.slug_length = slug_length
        self.logger = setup_logging(level="DEBUG" if verbose else "WARNING")
        self.service: Optional[URLShortenerService] = None

    async def initialize(self):
        """Initialize store and service."""
        store = create_store(self.db_url, logger=self.logger)
        await store.connect()

        allocator = SlugAllocator(
            SlugGenerator(default_length=self.slug_length),
            logger=self.logger,
        )
        self.service = URLShortenerService(
            store=store,
            allocator=allocator,
            url_host=self.url_host,
            logger=self.logger,
        )

    async def cleanup(self):
        """Cleanup resources."""
        if self.service:
            await self.service.close()

    async def shorten(self, url: str) -> int:
        """Shorten a URL."""
        try:
            mapping = await self.service.create_short_url(url)
        except ShortenerError as e:
            print(json.dumps({"success": False, "error": e.message}, indent=2), file=sys.stderr)
            return 1

        print(json.dumps({"success": True, **mapping.to_dict()}, indent=2))
        return 0

    async def get(self, slug: str) -> int:
        """Get the mapping for a slug."""
        try:
            mapping = await self.service.get_mapping(slug)
        except ShortenerError as e:
            print(json.dumps({"success": False, "error": e.message}, indent=2), file=sys.stderr)
            return 1

        print(json.dumps({"success": True, **mapping.to_dict()}, indent=2))
        return 0

    async def health(self) -> int:
        """Check store health."""
        health_status = await self.service.health_check()
        print(json.dumps({"success": True, "health": health_status}, indent=2))
        return 0 if health_status["overall"] else 1


async def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="URL Shortener CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Shorten a URL
  %(prog)s shorten https://example.com/long/url

  # Look up a slug
  %(prog)s get aZ3kQ9xB

  # Check health
  %(prog)s health
        """
    )

    parser.add_argument(
        "--db-url",
        default=os.getenv("URL_DB_DSN", "postgresql://localhost:5432/shortener"),
        help="Store connection string (default: from URL_DB_DSN env)"
    )
    parser.add_argument(
        "--url-host",
        default=os.getenv("URL_HOST", ""),
        help="Public host used to build short URLs (default: from URL_HOST env)"
    )
    parser.add_argument(
        "--slug-length",
        type=int,
        default=int(os.getenv("SLUG_LENGTH", "8")),
        help="Length of generated slugs"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    shorten_parser = subparsers.add_parser("shorten", help="Shorten a URL")
    shorten_parser.add_argument("url", help="URL to shorten")

    get_parser = subparsers.add_parser("get", help="Get the mapping for a slug")
    get_parser.add_argument("slug", help="Slug to look up")

    subparsers.add_parser("health", help="Check store health")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    cli = URLShortenerCLI(
        db_url=args.db_url,
        url_host=args.url_host,
        slug_length=args.slug_length,
        verbose=args.verbose,
    )

    try:
        await cli.initialize()

        if args.command == "shorten":
            return await cli.shorten(args.url)
        elif args.command == "get":
            return await cli.get(args.slug)
        elif args.command == "health":
            return await cli.health()
        else:
            parser.print_help()
            return 1

    except ShortenerError as e:
        print(json.dumps({"success": False, "error": e.message}, indent=2), file=sys.stderr)
        return 1
    finally:
        await cli.cleanup()


if __name__ == "__main__":
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
