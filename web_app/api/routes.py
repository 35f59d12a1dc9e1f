"""API routes implementation."""

from datetime import datetime, timezone

from fastapi import APIRouter, Request

from .schemas import URLInfoResponse, HealthResponse, ErrorResponse

router = APIRouter()


@router.get(
    "/urls/{slug}",
    response_model=URLInfoResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Slug not found"},
        503: {"model": ErrorResponse, "description": "Storage unavailable"},
    },
    summary="Get URL information",
    description="Get the stored mapping for a slug.",
)
async def get_url_info(request: Request, slug: str):
    """Get information about a shortened URL."""
    service = request.app.state.service

    mapping = await service.get_mapping(slug)

    return URLInfoResponse(**mapping.to_dict())


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check if the service and its store are healthy.",
)
async def health_check(request: Request):
    """Health check endpoint for load balancers and monitoring."""
    service = request.app.state.service

    health = await service.health_check()

    return HealthResponse(
        status="healthy" if health["overall"] else "unhealthy",
        database="healthy" if health["database"] else "unhealthy",
        cache="healthy" if health["cache"] else "unhealthy",
        timestamp=datetime.now(timezone.utc),
    )
