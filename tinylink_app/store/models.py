"""
Value objects returned by link stores.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Link(BaseModel):
    """
    Snapshot of a link as held by the store at the time of the call.

    Instances are immutable; a click produces a new snapshot rather than
    mutating an existing one.
    """

    id: str = Field(..., description="Opaque identifier, new for every created link")
    code: str = Field(..., description="6-8 character alphanumeric short code")
    url: str = Field(..., description="Target URL (http/https)")
    clicks: int = Field(0, ge=0, description="Number of redirects served")
    created_at: datetime = Field(..., description="When the link was created (UTC)")
    last_clicked: Optional[datetime] = Field(None, description="Time of the latest redirect")

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": "3f0c1e8a9b7d4c2e8f6a5b4c3d2e1f00",
                "code": "test123",
                "url": "https://example.com",
                "clicks": 1,
                "created_at": "2024-01-15T10:30:00+00:00",
                "last_clicked": "2024-01-15T10:31:00+00:00",
            }
        },
    )
