"""
Data models for queue messages.
"""

from pydantic import BaseModel, Field


class ClickEvent(BaseModel):
    """
    A pending click increment.

    Built by LinkService.resolve once a code resolves; a dispatcher worker
    applies it after the redirect has already been answered.
    """

    short_code: str = Field(..., description="The short code that was accessed")
