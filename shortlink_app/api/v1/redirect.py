from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import RedirectResponse

from shortlink_app.dependencies import get_link_service
from shortlink_app.exceptions import LinkNotFoundError
from shortlink_app.services.link_service import LinkService

router = APIRouter(tags=["redirect"])

# Paths that are never short codes
RESERVED_PATHS = {"favicon.ico", "api", "health"}


@router.get("/{short_code}")
async def redirect_to_original_url(
    short_code: str,
    link_service: LinkService = Depends(get_link_service)
):
    """
    Redirect to the original URL.

    Flow:
    1. Look the code up in the store
    2. Queue a click event (not awaited)
    3. Redirect immediately

    The click counter is updated by a dispatcher worker, so the redirect
    never waits for the write and never fails because of it.
    """
    if short_code in RESERVED_PATHS:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")

    try:
        original_url = await link_service.resolve(short_code)
    except LinkNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Short link not found"
        )

    return RedirectResponse(url=original_url, status_code=status.HTTP_302_FOUND)
