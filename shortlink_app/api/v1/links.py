from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from shortlink_app.config import Settings
from shortlink_app.dependencies import get_link_service, get_settings
from shortlink_app.exceptions import InvalidURLError, LinkNotFoundError
from shortlink_app.schemas.link import LinkInfo, MessageResponse, ShortenRequest, ShortenResponse
from shortlink_app.services.link_service import LinkService

router = APIRouter(tags=["links"])


@router.post("/shorten", response_model=ShortenResponse, status_code=status.HTTP_201_CREATED)
async def create_short_link(
    request_data: ShortenRequest,
    link_service: LinkService = Depends(get_link_service),
    settings: Settings = Depends(get_settings)
):
    """Create a new short link"""
    try:
        link = await link_service.create_link(request_data.url)
    except InvalidURLError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return ShortenResponse.from_link(link, settings.base_url)


@router.get("/info/{short_code}", response_model=LinkInfo)
async def get_link_info(
    short_code: str,
    link_service: LinkService = Depends(get_link_service)
):
    """Get information about a short link"""
    try:
        link = await link_service.get_link(short_code)
    except LinkNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Short link not found"
        )
    return LinkInfo.from_link(link)


@router.get("/links", response_model=List[LinkInfo])
async def get_all_links(
    link_service: LinkService = Depends(get_link_service)
):
    """List every short link (empty list when there are none)"""
    links = await link_service.list_links()
    return LinkInfo.from_links(links)


@router.delete("/links/{short_code}", response_model=MessageResponse)
async def delete_link(
    short_code: str,
    link_service: LinkService = Depends(get_link_service)
):
    """Delete a short link"""
    try:
        await link_service.delete_link(short_code)
    except LinkNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Short link not found"
        )
    return MessageResponse(message="Link deleted successfully")
