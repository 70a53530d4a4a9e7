"""
Data models for queue messages.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


class VisitEvent(BaseModel):
    """
    One successful redirect, on its way to the ``logs`` table.

    Built by the redirect handler after every access check passed.
    """

    url: str = Field(..., description="Target URL the visitor was sent to")
    slug: str = Field(..., description="The slug that was accessed")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the redirect happened",
    )

    # Request metadata
    referer: Optional[str] = Field(None, description="HTTP referer")
    ua: Optional[str] = Field(None, description="User agent string")
    ip: Optional[str] = Field(None, description="Best-effort client IP")

    # Set by queue backends that need acknowledgment
    message_id: Optional[str] = Field(None, exclude=True)

    model_config = {
        "json_schema_extra": {
            "example": {
                "url": "https://example.com/page",
                "slug": "aB3x",
                "timestamp": "2025-10-29T10:30:00Z",
                "referer": "https://twitter.com",
                "ua": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) Chrome/120.0",
                "ip": "203.0.113.7",
            }
        }
    }
