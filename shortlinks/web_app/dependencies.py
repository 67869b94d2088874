"""FastAPI dependencies shared by the routers."""

from fastapi import HTTPException, Request, status

from ..common.headers import get_header
from ..service import LinkService


def get_service(request: Request) -> LinkService:
    """Service instance stored on the app."""
    return request.app.state.service


def get_current_owner(request: Request) -> str:
    """Owner id supplied by the upstream identity provider.

    The value is trusted verbatim; the header name comes from config.

    Raises:
        HTTPException: 401 if the header is missing or blank
    """
    config = request.app.state.config
    owner_id = get_header(dict(request.headers), config.owner_header)

    if not owner_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return owner_id
