"""Web interface routes implementation."""

import os
from fastapi import APIRouter, Request, status
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from shortener.common.logging_config import get_logger
from shortener.exceptions import (
    AllocationExhaustedError,
    InvalidURLError,
    ShortenFailedError,
    StorageError,
)
from ..api.schemas import ShortenResponse

router = APIRouter()

template_dir = os.path.join(os.path.dirname(__file__), "..", "templates")
templates = Jinja2Templates(directory=template_dir)

NEW_PREFIX = "/new/"

logger = get_logger("web")


def _submitted_url(request: Request, url: str) -> str:
    """Return the URL exactly as it appeared after /new/ in the request.

    The undecoded request path is preferred so percent-escapes survive, and a
    query string on the request belongs to the submitted URL.

    Raises:
        InvalidURLError: If the request path is not valid UTF-8
    """
    raw_path = request.scope.get("raw_path")
    if raw_path:
        try:
            raw = raw_path.split(b"?", 1)[0].decode("utf-8")
        except UnicodeDecodeError:
            logger.info(f"Rejected non UTF-8 request path {raw_path!r}")
            raise InvalidURLError() from None
        index = raw.find(NEW_PREFIX)
        if index != -1:
            url = raw[index + len(NEW_PREFIX):]

    query = request.url.query
    if query:
        url = f"{url}?{query}"
    return url


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def homepage(request: Request):
    """Serve the instructions page."""
    config = request.app.state.config
    return templates.TemplateResponse(request, "index.html", {"host": config.url_host})


@router.get(
    "/new/{url:path}",
    status_code=status.HTTP_201_CREATED,
    response_model=ShortenResponse,
    summary="Create short URL",
)
async def create_short_url(request: Request, url: str):
    """Shorten the URL given in the path."""
    service = request.app.state.service

    try:
        mapping = await service.create_short_url(_submitted_url(request, url))
    except (AllocationExhaustedError, StorageError) as e:
        logger.warning(f"Unable to shorten URL: {e}")
        raise ShortenFailedError() from e

    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=ShortenResponse(
            original_url=mapping.original_url,
            short_url=mapping.short_url,
        ).model_dump(),
    )


@router.get("/{slug}", include_in_schema=False)
async def redirect_to_url(request: Request, slug: str):
    """Redirect to the original URL."""
    service = request.app.state.service

    original_url = await service.resolve(slug)

    return RedirectResponse(url=original_url, status_code=status.HTTP_302_FOUND)
