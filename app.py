#!/usr/bin/env python3
"""
Main entry point for URL shortener service.

Concurrency: The server handles multiple connections simultaneously via async I/O
(FastAPI + asyncpg connection pool + redis.asyncio). Set WORKERS > 1 for
multi-process scaling across CPU cores (each worker has its own DB pool and
its own slug generator).

Usage:
    python app.py

Environment variables:
    PORT - Port to listen on (required)
    URL_HOST - Public host used in short URLs and on the index page
    URL_DB_DSN - Store connection string, postgresql://... or memory:// (required)
    DB_CREATE_TABLES - Create the url_mappings table on startup
    REDIS_URL - Redis connection URL (optional)
    SLUG_LENGTH - Length of generated slugs (default 8)
    WORKERS - Number of uvicorn worker processes (default 1)
    LOG_LEVEL - Logging level
"""

import signal
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from pydantic import ValidationError

from config import Config, load_config
from shortener.factory import build_service
from shortener.common.logging_config import setup_logging
from web_app import create_app


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect the store on startup and release connections on shutdown.

    Any failure here aborts startup.
    """
    config = app.state.config
    logger = app.state.logger

    logger.info("Starting URL shortener service...")
    service = await build_service(config, logger)
    app.state.service = service
    logger.info("Service started successfully")

    yield

    logger.info("Shutting down URL shortener service...")
    await service.close()
    logger.info("Service stopped")


def build_app(config: Config) -> FastAPI:
    """Create the FastAPI app with logging and lifespan configured."""
    logger = setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        json_format=config.log_json,
    )

    app = create_app(service_instance=None, config=config, lifespan=lifespan)
    app.state.logger = logger
    return app


def create_server_app() -> FastAPI:
    """App factory used by uvicorn worker processes."""
    return build_app(load_config())


def main():
    """Main entry point."""
    try:
        config = load_config()
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        sys.exit(1)

    app = build_app(config)
    logger = app.state.logger

    logger.info("URL Shortener Service")
    logger.info(f"Configuration: {config.model_dump(exclude={'url_db_dsn', 'redis_url'})}")

    if config.workers > 1:
        logger.info(f"Starting {config.workers} workers on {config.bind_host}:{config.port}")
        uvicorn.run(
            "app:create_server_app",
            factory=True,
            host=config.bind_host,
            port=config.port,
            workers=config.workers,
            log_level=config.log_level.lower(),
        )
        return

    uvicorn_config = uvicorn.Config(
        app,
        host=config.bind_host,
        port=config.port,
        log_level=config.log_level.lower(),
        access_log=False,
    )

    server = uvicorn.Server(uvicorn_config)

    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        server.should_exit = True

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    logger.info(f"Listening on {config.bind_host}:{config.port} as {config.url_host or '(no URL_HOST)'}")
    server.run()

    # uvicorn returns without raising when lifespan startup fails
    if not server.started:
        logger.error("Startup failed, exiting")
        sys.exit(1)


if __name__ == "__main__":
    main()
