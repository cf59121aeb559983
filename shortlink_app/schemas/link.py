from typing import List

from pydantic import BaseModel, Field

from shortlink_app.models.link import Link, format_timestamp


class ShortenRequest(BaseModel):
    url: str = Field(..., description="The original URL to be shortened")


class ShortenResponse(BaseModel):
    """Response for a newly created short link"""
    short_code: str
    short_url: str
    original_url: str

    @classmethod
    def from_link(cls, link: Link, base_url: str) -> "ShortenResponse":
        return cls(
            short_code=link.short_code,
            short_url=f"{base_url.rstrip('/')}/{link.short_code}",
            original_url=link.original_url,
        )


class LinkInfo(BaseModel):
    short_code: str
    original_url: str
    created_at: str = Field(..., description="RFC 3339 creation timestamp")
    clicks: int

    @classmethod
    def from_link(cls, link: Link) -> "LinkInfo":
        return cls(
            short_code=link.short_code,
            original_url=link.original_url,
            created_at=format_timestamp(link.created_at),
            clicks=link.clicks,
        )

    @classmethod
    def from_links(cls, links: List[Link]) -> List["LinkInfo"]:
        return [cls.from_link(link) for link in links]


class MessageResponse(BaseModel):
    message: str
