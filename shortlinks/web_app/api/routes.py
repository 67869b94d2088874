"""API routes implementation."""

from fastapi import APIRouter, Depends, Request, status
from datetime import datetime, timezone

from .schemas import (
    LinkCreateRequest,
    LinkUpdateRequest,
    LinkOut,
    LinkResponse,
    LinkMessageResponse,
    LinkListResponse,
    MessageResponse,
    StatisticsResponse,
    HealthResponse,
    ErrorResponse,
)
from ..dependencies import get_current_owner, get_service
from ...common.url_builder import build_short_url
from ...common.headers import build_base_url
from ...database.models import Link
from ...service import LinkService

router = APIRouter()


def _link_out(request: Request, link: Link) -> LinkOut:
    """Render a link with its complete short URL."""
    config = request.app.state.config

    base_url = build_base_url(
        headers=dict(request.headers),
        fallback_base_url=config.base_url,
        request_scheme=request.url.scheme,
        request_host=request.headers.get("host"),
    )

    return LinkOut(
        id=link.id,
        name=link.name,
        original_url=link.original_url,
        short_code=link.short_code,
        short_url=build_short_url(link.short_code, base_url, config.redirect_prefix),
        description=link.description,
        clicks=link.clicks,
        created_at=link.created_at,
        updated_at=link.updated_at,
    )


@router.post(
    "/links",
    response_model=LinkMessageResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        500: {"model": ErrorResponse, "description": "Short code allocation failed"},
        503: {"model": ErrorResponse, "description": "Link store unavailable"},
    },
    summary="Create link",
    description="Create a link under a freshly allocated six-character short code.",
)
async def create_link(
    request: Request,
    body: LinkCreateRequest,
    owner_id: str = Depends(get_current_owner),
    service: LinkService = Depends(get_service),
):
    """Create a link for the authenticated owner."""
    link = await service.create_link(
        name=body.name,
        original_url=body.original_url,
        owner_id=owner_id,
        description=body.description,
    )

    return LinkMessageResponse(message="Link created successfully", link=_link_out(request, link))


@router.get(
    "/links",
    response_model=LinkListResponse,
    summary="List links",
    description="List the authenticated owner's links, newest first.",
)
async def list_links(
    request: Request,
    owner_id: str = Depends(get_current_owner),
    service: LinkService = Depends(get_service),
):
    links = await service.list_links(owner_id)
    return LinkListResponse(links=[_link_out(request, link) for link in links])


@router.get(
    "/links/stats",
    response_model=StatisticsResponse,
    summary="Get statistics",
    description="Link count and total clicks for the authenticated owner.",
)
async def get_statistics(
    owner_id: str = Depends(get_current_owner),
    service: LinkService = Depends(get_service),
):
    stats = await service.get_statistics(owner_id)
    return StatisticsResponse(**stats)


@router.get(
    "/links/{link_id}",
    response_model=LinkResponse,
    responses={404: {"model": ErrorResponse, "description": "Link not found"}},
    summary="Get link",
)
async def get_link(
    request: Request,
    link_id: str,
    owner_id: str = Depends(get_current_owner),
    service: LinkService = Depends(get_service),
):
    link = await service.get_link(link_id, owner_id)
    return LinkResponse(link=_link_out(request, link))


@router.put(
    "/links/{link_id}",
    response_model=LinkMessageResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request"},
        404: {"model": ErrorResponse, "description": "Link not found"},
    },
    summary="Update link",
    description="Change name, target URL or description. The short code never changes.",
)
async def update_link(
    request: Request,
    link_id: str,
    body: LinkUpdateRequest,
    owner_id: str = Depends(get_current_owner),
    service: LinkService = Depends(get_service),
):
    link = await service.update_link(
        link_id,
        owner_id,
        name=body.name,
        original_url=body.original_url,
        description=body.description,
        clear_description="description" in body.model_fields_set and body.description is None,
    )

    return LinkMessageResponse(message="Link updated successfully", link=_link_out(request, link))


@router.delete(
    "/links/{link_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse, "description": "Link not found"}},
    summary="Delete link",
)
async def delete_link(
    link_id: str,
    owner_id: str = Depends(get_current_owner),
    service: LinkService = Depends(get_service),
):
    await service.delete_link(link_id, owner_id)
    return MessageResponse(message="Link deleted successfully")


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check if the service is healthy.",
)
async def health_check(service: LinkService = Depends(get_service)):
    """Health check endpoint for load balancers and monitoring."""
    health = await service.health_check()

    return HealthResponse(
        status="healthy" if health["overall"] else "unhealthy",
        database="healthy" if health["database"] else "unhealthy",
        cache="healthy" if health["cache"] else "unhealthy",
        timestamp=datetime.now(timezone.utc),
    )
