from datetime import datetime, timezone
from typing import Dict, Mapping

from pydantic import BaseModel, Field


def utc_now() -> datetime:
    """Current UTC time truncated to seconds (the precision every store keeps)."""
    return datetime.now(timezone.utc).replace(microsecond=0)


def format_timestamp(value: datetime) -> str:
    """Render a timestamp as RFC 3339 text, e.g. 2026-10-19T10:00:00+00:00"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat(timespec="seconds")


def parse_timestamp(text: str) -> datetime:
    """Parse RFC 3339 text, including the trailing "Z" form other writers emit."""
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


class Link(BaseModel):
    """
    A shortened URL.

    short_code and original_url are fixed at creation; only clicks changes
    afterwards, and only upwards.
    """

    short_code: str = Field(..., description="6-character URL-safe code")
    original_url: str = Field(..., description="Redirect target")
    created_at: datetime = Field(default_factory=utc_now)
    clicks: int = Field(0, ge=0)

    def to_hash(self) -> Dict[str, str]:
        """Fields stored in the per-code record (the code itself is the key)."""
        return {
            "original_url": self.original_url,
            "created_at": format_timestamp(self.created_at),
            "clicks": str(self.clicks),
        }

    @classmethod
    def from_hash(cls, short_code: str, data: Mapping[str, str]) -> "Link":
        return cls(
            short_code=short_code,
            original_url=data["original_url"],
            created_at=parse_timestamp(data["created_at"]),
            clicks=int(data.get("clicks", 0)),
        )
