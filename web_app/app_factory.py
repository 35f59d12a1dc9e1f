"""FastAPI application factory."""

from fastapi import FastAPI

from .api import api_router
from .web import web_router
from .errors import register_error_handlers
from .middleware.logging import LoggingMiddleware


def create_app(
    service_instance,
    config,
    lifespan=None,
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        service_instance: Service instance (may be None when a lifespan sets it up)
        config: Configuration instance
        lifespan: Optional lifespan context manager

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="URL Shortener",
        description="Random-slug URL shortening service",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )

    # Store instances in app state for access in routes
    app.state.service = service_instance
    app.state.config = config

    app.add_middleware(LoggingMiddleware)
    register_error_handlers(app)

    # API routes first so /api/... is never taken for a slug
    app.include_router(api_router, prefix="/api", tags=["API"])
    app.include_router(web_router, tags=["Web"])

    return app
