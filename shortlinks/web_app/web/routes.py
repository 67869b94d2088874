"""Public redirect routes."""

import logging
import string
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Response, status

from ..dependencies import get_service
from ...errors import StoreUnavailable
from ...service import LinkService

router = APIRouter()
logger = logging.getLogger("shortlinks.web")

# Everything printable in ASCII passes through; existing %XX escapes are kept
LOCATION_SAFE = string.punctuation


def location_header(original_url: str) -> str:
    """Encode a redirect target for the Location header.

    Only non-ASCII characters are percent-encoded, so stored ASCII targets
    are sent back byte for byte.
    """
    return quote(original_url, safe=LOCATION_SAFE)


@router.get("/{short_code}", include_in_schema=False)
async def redirect_to_url(short_code: str, service: LinkService = Depends(get_service)):
    """Redirect to the original URL.

    Unknown codes fall through to the 404 handler. 302 rather than 301 since
    owners can change the target. A store failure during lookup is a 500.
    """
    try:
        original_url = await service.resolve(short_code)
    except StoreUnavailable as e:
        logger.error(f"Redirect lookup failed for {short_code}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Link store unavailable",
        ) from e

    return Response(
        status_code=status.HTTP_302_FOUND,
        headers={"location": location_header(original_url)},
    )
