"""JSON error envelope for the URL shortener."""

from typing import Mapping, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from shortener.common.logging_config import get_logger
from shortener.exceptions import ShortenerError

logger = get_logger("web")


def error_response(
    message: str, status_code: int, headers: Optional[Mapping[str, str]] = None
) -> JSONResponse:
    """Build the uniform ``{"error": message}`` response."""
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


async def shortener_error_handler(request: Request, exc: ShortenerError) -> JSONResponse:
    """Render any ShortenerError as a JSON error envelope."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return error_response(exc.message, exc.status_code)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render routing errors (unknown path, wrong method) in the same envelope."""
    return error_response(str(exc.detail), exc.status_code, headers=exc.headers)


def register_error_handlers(app: FastAPI) -> None:
    """Install the error handlers on the app."""
    app.add_exception_handler(ShortenerError, shortener_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
